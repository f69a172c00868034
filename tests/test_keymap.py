"""Tests for instrument keymaps."""

import json

import pytest

from s2k.core.keymap import KeyMap, load_keymaps, unsupported_chars
from s2k.core.models import Score, ScoreNote

KEYMAPS = {
    "piano": {"c4": "q", "C4b": "2", "d4": "w", "e4": "e"},
    "drum": {"c2": "z"},
}


def make_score(*key_lists):
    notes = [
        ScoreNote(keys=keys, start_time=i * 100.0, end_time=(i + 1) * 100.0)
        for i, keys in enumerate(key_lists)
    ]
    return Score(song="x", bpm=120, notes=notes)


class TestLoading:
    def test_load_from_dict(self):
        keymaps = load_keymaps(KEYMAPS)
        assert sorted(keymaps) == ["drum", "piano"]
        assert keymaps["piano"].instrument == "piano"

    def test_names_are_normalized(self):
        piano = load_keymaps(KEYMAPS)["piano"]
        assert piano.mapping["c4b"] == "2"

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "keymaps.json"
        path.write_text(json.dumps(KEYMAPS), encoding="utf-8")
        assert load_keymaps(path)["drum"].key_for("c2") == "z"

    def test_invalid_key_name(self):
        with pytest.raises(ValueError, match="invalid key name"):
            KeyMap.from_dict("piano", {"h4": "q"})

    def test_unsupported_keyboard_char(self):
        with pytest.raises(ValueError, match="unsupported key"):
            KeyMap.from_dict("piano", {"c4": "!"})

    def test_empty_keyboard_key(self):
        with pytest.raises(ValueError):
            KeyMap.from_dict("piano", {"c4": ""})

    def test_top_level_must_be_object(self):
        with pytest.raises(ValueError):
            load_keymaps({"piano": ["q"]})

    def test_unsupported_chars(self):
        assert unsupported_chars("Q,.") == []
        assert unsupported_chars("a b!") == [" ", "!"]


class TestTranslation:
    def setup_method(self):
        self.piano = load_keymaps(KEYMAPS)["piano"]

    def test_keys_for_chord(self):
        note = ScoreNote(keys=["c4", "e4"], start_time=0.0, end_time=1.0)
        assert self.piano.keys_for(note) == ["q", "e"]

    def test_keys_for_rest(self):
        note = ScoreNote(keys=["c4"], start_time=0.0, end_time=1.0, rest=True)
        assert self.piano.keys_for(note) == []

    def test_unmapped_keys_skipped(self):
        note = ScoreNote(keys=["c4", "g4", "bad"], start_time=0.0, end_time=1.0)
        assert self.piano.keys_for(note) == ["q"]

    def test_missing(self):
        score = make_score(["c4", "g4"], ["a2", "g4"], ["d4"])
        assert self.piano.missing(score) == ["a2", "g4"]

    def test_coverage(self):
        score = make_score(["c4", "g4"], ["d4", "e4"])
        assert self.piano.coverage(score) == pytest.approx(0.75)
        assert self.piano.coverage(make_score()) == 1.0
