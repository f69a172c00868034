"""Tests for the command line interface."""

import json

import pretty_midi
import pytest

from s2k.app import main


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


SCORE = {
    "song": "Test",
    "bpm": 120,
    "notes": [
        {"keys": ["c6"], "startTime": 0, "endTime": 500},
        {"keys": ["c1"], "startTime": 500, "endTime": 1000},
    ],
    "totalTime": 1000,
}


class TestArrangeCommand:
    def test_default_output(self, tmp_path, capsys):
        source = write_json(tmp_path / "song.json", SCORE)
        assert main(["arrange", str(source)]) == 0

        result = json.loads((tmp_path / "song_arranged.json").read_text(encoding="utf-8"))
        assert [n["keys"] for n in result["notes"]] == [["c5"], ["c2"]]
        assert "Saved to" in capsys.readouterr().out

    def test_centered_with_output(self, tmp_path):
        source = write_json(tmp_path / "song.json", SCORE)
        target = tmp_path / "out.json"
        assert main(["arrange", str(source), "-o", str(target), "--strategy", "centered"]) == 0
        assert target.exists()

    def test_missing_input(self, tmp_path, capsys):
        assert main(["arrange", str(tmp_path / "none.json")]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_invalid_score(self, tmp_path, capsys):
        source = write_json(tmp_path / "song.json", {"song": "x", "bpm": "fast", "notes": []})
        assert main(["arrange", str(source)]) == 1
        assert "bpm" in capsys.readouterr().err

    def test_invalid_window(self, tmp_path):
        source = write_json(tmp_path / "song.json", SCORE)
        assert main(["arrange", str(source), "--min-pitch", "60", "--max-pitch", "65"]) == 1

    def test_unknown_strategy_rejected_by_parser(self, tmp_path):
        source = write_json(tmp_path / "song.json", SCORE)
        with pytest.raises(SystemExit):
            main(["arrange", str(source), "--strategy", "clamp"])

    def test_keymap_report(self, tmp_path, capsys):
        source = write_json(tmp_path / "song.json", SCORE)
        keymap = write_json(tmp_path / "keys.json", {"piano": {"c5": "q"}})
        code = main(["arrange", str(source), "--keymap", str(keymap), "--instrument", "piano"])
        assert code == 0
        assert "Unmapped keys: c2" in capsys.readouterr().out


class TestImportCommand:
    def test_import_midi(self, tmp_path):
        midi = pretty_midi.PrettyMIDI(initial_tempo=120.0)
        piano = pretty_midi.Instrument(program=0)
        piano.notes.append(pretty_midi.Note(velocity=100, pitch=84, start=0.0, end=0.5))
        midi.instruments.append(piano)
        source = tmp_path / "tune.mid"
        midi.write(str(source))

        assert main(["import", str(source)]) == 0
        result = json.loads((tmp_path / "tune.json").read_text(encoding="utf-8"))
        assert result["song"] == "tune"
        assert result["notes"][0]["keys"] == ["c6"]

    def test_import_missing_file(self, tmp_path):
        assert main(["import", str(tmp_path / "none.mid")]) == 1


class TestVersion:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "S2K" in capsys.readouterr().out
