"""Tests for key name <-> MIDI pitch conversion."""

import pytest

from s2k.strategies.pitch_names import (
    decode,
    encode,
    is_sharp,
    normalize,
    octave_of,
    pitch_class,
)


class TestDecode:
    """Key name -> MIDI pitch."""

    @pytest.mark.parametrize(
        "name, pitch",
        [("c2", 36), ("c4", 60), ("c4b", 61), ("c5", 72), ("a4", 69), ("b3", 59)],
    )
    def test_known_names(self, name, pitch):
        assert decode(name) == pitch

    def test_sharps_use_letter_below(self):
        assert decode("d4b") == 63
        assert decode("f4b") == 66
        assert decode("g4b") == 68
        assert decode("a4b") == 70

    def test_negative_octave(self):
        assert decode("c-1") == 0
        assert decode("c-1b") == 1

    def test_multi_digit_octave(self):
        assert decode("c10") == 132

    def test_uppercase_letter_accepted(self):
        assert decode("C4") == 60

    def test_two_char_name_is_never_sharp(self):
        """'cb' is too short for the marker, so the octave is 'b' and fails."""
        assert decode("cb") is None

    @pytest.mark.parametrize("name", ["", "h4", "x", "c", "cx", "c4x", "c4bb", "c-", "c 4", "c4\n"])
    def test_invalid_names(self, name):
        assert decode(name) is None

    def test_non_string_is_invalid(self):
        assert decode(None) is None
        assert decode(60) is None

    def test_octave_limits(self):
        assert decode("c2147483647") == 2147483648 * 12
        assert decode("c-2147483648b") == -2147483647 * 12 + 1
        assert decode("c0000000000004") == 60

    @pytest.mark.parametrize(
        "name", ["c2147483648", "c-2147483649", "c100000000000000000000", "c4" + "0" * 5000]
    )
    def test_octave_out_of_range(self, name):
        assert decode(name) is None


class TestEncode:
    """MIDI pitch -> key name."""

    @pytest.mark.parametrize(
        "pitch, name", [(36, "c2"), (60, "c4"), (61, "c4b"), (72, "c5"), (0, "c-1"), (127, "g9")]
    )
    def test_known_pitches(self, pitch, name):
        assert encode(pitch) == name

    def test_round_trip_over_midi_range(self):
        for pitch in range(128):
            assert decode(encode(pitch)) == pitch

    def test_only_black_keys_get_marker(self):
        for pitch in range(48, 60):
            assert encode(pitch).endswith("b") == is_sharp(pitch)


class TestHelpers:
    def test_pitch_class_and_octave(self):
        assert pitch_class(61) == 1
        assert octave_of(61) == 4
        assert octave_of(11) == -1

    def test_normalize(self):
        assert normalize("C4") == "c4"
        assert normalize("c+4") == "c4"
        assert normalize("c04b") == "c4b"
        assert normalize("nope") is None
