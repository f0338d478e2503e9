"""
Tests for the key model and Camelot notation.
"""

import pytest
from pitchcraft.theory.key import (
    PITCH_CLASSES,
    REFERENCE_FREQUENCIES,
    Key,
    KeyMode,
    format_key,
    key_to_frequency,
    normalize_root,
    parse_key,
    transpose_key,
)
from pitchcraft.theory.camelot import (
    CAMELOT_MAJOR,
    CAMELOT_MINOR,
    KeyDisplayFormat,
    camelot_to_key,
    format_key_display,
    key_to_camelot,
)

ALL_KEYS = [Key(root, mode) for root in range(12) for mode in KeyMode]


class TestParseKey:
    """Test the key grammar."""

    @pytest.mark.parametrize("text,expected", [
        ("Am", "Amin"),
        ("Amin", "Amin"),
        ("a minor", "Amin"),
        ("C", "Cmaj"),
        ("Cmaj", "Cmaj"),
        ("c major", "Cmaj"),
        ("F#m", "F#min"),
        ("  f#MIN  ", "F#min"),
        ("Bm", "Bmin"),
        ("BM", "Bmin"),
        ("Bbm", "A#min"),
        ("bb", "A#maj"),
        ("Ebmaj", "D#maj"),
        ("Db", "C#maj"),
        ("Gb minor", "F#min"),
        ("Ab", "G#maj"),
    ])
    def test_valid_keys(self, text, expected):
        """Valid key text parses to its canonical sharp spelling."""
        parsed = parse_key(text)
        assert parsed is not None
        assert format_key(parsed) == expected

    def test_missing_mode_defaults_to_major(self):
        """A bare root is a major key."""
        assert parse_key("G") == Key(7, KeyMode.MAJOR)

    def test_flats_map_to_sharps(self):
        """Flats and their enharmonic sharps parse to equal keys."""
        for flat, sharp in [("Db", "C#"), ("Eb", "D#"), ("Gb", "F#"), ("Ab", "G#"), ("Bb", "A#")]:
            assert parse_key(flat) == parse_key(sharp)
            assert parse_key(flat + "m") == parse_key(sharp + "m")

    @pytest.mark.parametrize("text", [
        "", "   ", "H", "8A", "Amoll", "A##", "Cb", "Fb", "E#", "C# minor key", "maj", None,
    ])
    def test_unparseable_returns_none(self, text):
        """Text outside the grammar yields None instead of raising."""
        assert parse_key(text) is None

    def test_root_is_integer_pitch_class(self):
        """Parsed roots index into the sharp-based scale."""
        assert parse_key("C").root == 0
        assert parse_key("A").root == 9
        assert parse_key("B").root == 11

    def test_normalize_root(self):
        """Roots are capitalised and flats are mapped to sharps."""
        assert normalize_root("e") == "E"
        assert normalize_root("bb") == "A#"
        assert normalize_root(" c# ") == "C#"
        assert normalize_root("cb") == "Cb"


class TestFormatKey:
    """Test canonical serialisation."""

    def test_format(self):
        assert format_key(Key(1, KeyMode.MINOR)) == "C#min"
        assert format_key(Key(0)) == "Cmaj"
        assert str(Key(9, KeyMode.MINOR)) == "Amin"

    def test_round_trip_is_stable(self):
        """format(parse(x)) is idempotent and parse of the format is equal."""
        for text in ["Am", "ebmaj", "Gb minor", "F#", "bbm", "C major"]:
            once = format_key(parse_key(text))
            twice = format_key(parse_key(once))
            assert once == twice
            assert parse_key(once) == parse_key(text)

    def test_all_canonical_keys_round_trip(self):
        for key in ALL_KEYS:
            assert parse_key(format_key(key)) == key


class TestTransposeKey:
    """Test transposition on the 12-cycle."""

    def test_zero_is_identity(self):
        for key in ALL_KEYS:
            assert transpose_key(key, 0) == key

    def test_up_and_down(self):
        assert format_key(transpose_key(parse_key("Amin"), 1)) == "A#min"
        assert format_key(transpose_key(parse_key("Cmaj"), -1)) == "Bmaj"
        assert format_key(transpose_key(parse_key("Bmaj"), 1)) == "Cmaj"

    def test_wraps_beyond_an_octave(self):
        key = parse_key("Dmin")
        assert transpose_key(key, 12) == key
        assert transpose_key(key, -24) == key
        assert transpose_key(key, 14) == transpose_key(key, 2)
        assert transpose_key(key, -13) == transpose_key(key, -1)

    def test_mode_preserved(self):
        for key in ALL_KEYS:
            assert transpose_key(key, 5).mode == key.mode

    def test_closure(self):
        """transpose(transpose(k, a), b) == transpose(k, a + b)."""
        shifts = range(-30, 31, 7)
        for key in ALL_KEYS:
            for a in shifts:
                for b in shifts:
                    assert transpose_key(transpose_key(key, a), b) == transpose_key(key, a + b)


class TestReferenceFrequencies:
    """Test the root frequency table."""

    def test_table_values(self):
        expected = [
            261.63, 277.18, 293.66, 311.13, 329.63, 349.23,
            369.99, 392.0, 415.3, 440.0, 466.16, 493.88,
        ]
        assert list(REFERENCE_FREQUENCIES) == pytest.approx(expected, abs=1e-9)

    def test_key_to_frequency(self):
        assert key_to_frequency("Amin") == pytest.approx(440.0)
        assert key_to_frequency("Bb") == pytest.approx(466.16)
        assert key_to_frequency("nope") is None

    def test_frequency_is_plain_float(self):
        assert type(key_to_frequency("C")) is float


class TestCamelot:
    """Test Camelot wheel conversion."""

    def test_tables_cover_the_wheel(self):
        assert len(CAMELOT_MAJOR) == len(PITCH_CLASSES) == 12
        assert sorted(CAMELOT_MAJOR, key=lambda c: int(c[:-1])) == [f"{n}B" for n in range(1, 13)]
        assert sorted(CAMELOT_MINOR, key=lambda c: int(c[:-1])) == [f"{n}A" for n in range(1, 13)]

    def test_musical_key_to_camelot(self):
        assert key_to_camelot("Am") == "8A"
        assert key_to_camelot("C") == "8B"
        assert key_to_camelot("D") == "10B"
        assert key_to_camelot("Gm") == "6A"
        assert key_to_camelot("Abm") == "1A"
        assert key_to_camelot("G#min") == "1A"
        assert key_to_camelot("xyz") is None

    def test_camelot_to_musical_key(self):
        assert camelot_to_key("8A") == "Amin"
        assert camelot_to_key("8B") == "Cmaj"
        assert camelot_to_key("12b") == "Emaj"
        assert camelot_to_key(" 3a ") == "A#min"

    def test_camelot_to_key_unknown(self):
        assert camelot_to_key("13A") is None
        assert camelot_to_key("8C") is None
        assert camelot_to_key("") is None

    def test_all_keys_round_trip_through_camelot(self):
        for key in ALL_KEYS:
            text = format_key(key)
            assert camelot_to_key(key_to_camelot(text)) == text


class TestFormatKeyDisplay:
    """Test display formatting."""

    def test_musical(self):
        assert format_key_display("ebm", KeyDisplayFormat.MUSICAL) == "D#min"

    def test_camelot(self):
        assert format_key_display("Amin", KeyDisplayFormat.CAMELOT) == "8A"
        assert format_key_display("F#", KeyDisplayFormat.CAMELOT) == "2B"

    def test_unparseable_returned_unchanged(self):
        assert format_key_display("??", KeyDisplayFormat.MUSICAL) == "??"
        assert format_key_display("8A", KeyDisplayFormat.CAMELOT) == "8A"
        assert format_key_display("Cb", KeyDisplayFormat.CAMELOT) == "Cb"
