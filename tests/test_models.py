"""Tests for data models and configuration."""

import pytest

from s2k.core.models import (
    ArrangeConfig,
    ArrangementStats,
    ArrangementStrategy,
    S2KConfig,
    Score,
    ScoreNote,
)


class TestArrangeConfig:
    def test_defaults(self):
        config = ArrangeConfig()
        assert config.strategy == ArrangementStrategy.OCTAVE_FOLD
        assert (config.min_pitch, config.max_pitch) == (36, 72)

    def test_window_too_narrow(self):
        with pytest.raises(ValueError):
            ArrangeConfig(min_pitch=60, max_pitch=70)

    def test_negative_octave_shift(self):
        with pytest.raises(ValueError):
            ArrangeConfig(max_octave_shift=-1)

    def test_dict_round_trip(self):
        config = ArrangeConfig(strategy=ArrangementStrategy.CENTERED, min_pitch=48, max_pitch=83)
        assert config.to_dict()["strategy"] == "centered"
        assert ArrangeConfig.from_dict(config.to_dict()) == config


class TestS2KConfig:
    def test_dict_round_trip(self):
        config = S2KConfig(
            arrange_config=ArrangeConfig(strategy=ArrangementStrategy.CENTERED),
            keymap_path="maps.json",
            instrument="piano",
        )
        assert S2KConfig.from_dict(config.to_dict()) == config


class TestScore:
    def test_key_names_skip_rests(self):
        score = Score(
            song="x",
            bpm=90,
            notes=[
                ScoreNote(keys=["c4", "e4"], start_time=0.0, end_time=1.0),
                ScoreNote(keys=["g4"], start_time=1.0, end_time=2.0, rest=True),
                ScoreNote(keys=None, start_time=2.0, end_time=3.0),
                ScoreNote(keys=["c4"], start_time=3.0, end_time=4.0),
            ],
        )
        assert score.key_names == ["c4", "e4", "c4"]

    def test_copy_is_independent(self):
        score = Score(song="x", bpm=90, notes=[ScoreNote(keys=["c4"], start_time=0.0, end_time=1.0)])
        clone = score.copy()
        clone.notes[0].keys.append("e4")
        assert score.notes[0].keys == ["c4"]

    def test_note_duration(self):
        assert ScoreNote(keys=None, start_time=250.0, end_time=750.0).duration == 500.0


class TestArrangementStats:
    def test_to_dict_includes_rate(self):
        stats = ArrangementStats(keys_total=4, keys_dropped=0, keys_unchanged=3)
        data = stats.to_dict()
        assert data["in_range_rate"] == pytest.approx(0.75)
        assert data["keys_total"] == 4
