"""
PitchCraft - harmonic mixing for turntable DJs.

Given the playing track and the pitch fader position, finds the library
tracks that can be beat-matched within the fader range and still sit in a
compatible key.
"""

__version__ = "0.1.0"
