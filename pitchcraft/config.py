"""
Configuration management for PitchCraft
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from pitchcraft.matching.finder import CompatibilityOptions
from pitchcraft.theory.camelot import KeyDisplayFormat

ALLOWED_PITCH_RANGES = (8, 16)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    # Matching
    bpm_tolerance: float = 0.3
    pitch_range: int = 8  # Turntable slider range, +/- percent
    kci_threshold: float = 2.5  # 0 disables the KCI filter

    # Display
    key_format: KeyDisplayFormat = KeyDisplayFormat.MUSICAL

    # Library
    library_path: Optional[str] = None
    replace_batch_size: int = 25

    @field_validator("pitch_range")
    @classmethod
    def _check_pitch_range(cls, value: int) -> int:
        if value not in ALLOWED_PITCH_RANGES:
            raise ValueError(f"pitch_range must be one of {ALLOWED_PITCH_RANGES}, got {value}")
        return value

    @field_validator("bpm_tolerance")
    @classmethod
    def _check_tolerance(cls, value: float) -> float:
        if value < 0:
            raise ValueError("bpm_tolerance must not be negative")
        return value

    @field_validator("replace_batch_size")
    @classmethod
    def _check_batch_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"replace_batch_size must be at least 1, got {value}")
        return value

    def compatibility_options(self) -> CompatibilityOptions:
        """Build pipeline options from the configured matching values."""
        return CompatibilityOptions(
            bpm_tolerance=self.bpm_tolerance,
            max_pitch_percent=float(self.pitch_range),
            kci_threshold=self.kci_threshold,
        )

    class Config:
        env_prefix = "PITCHCRAFT_"
        env_file = ".env"
        extra = "ignore"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
