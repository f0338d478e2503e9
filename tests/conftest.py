"""Shared test fixtures."""

import os

import pytest
from pitchcraft.config import get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolate every test from PITCHCRAFT_* variables and any local .env file."""
    for name in list(os.environ):
        if name.upper().startswith("PITCHCRAFT_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
