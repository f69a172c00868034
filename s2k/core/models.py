"""
Data models for s2k (Score→Keys) framework.

Defines core data structures used across the framework.
"""

import copy
from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


class ArrangementStrategy(Enum):
    """Available arrangement strategies."""

    OCTAVE_FOLD = "octave_fold"  # Fold every key into the window independently
    CENTERED = "centered"  # Shift the whole score by octaves first, then fold


@dataclass
class ArrangeConfig:
    """
    Configuration for range arrangement.

    Attributes:
        strategy: Which arrangement algorithm to use
        min_pitch: Lowest playable pitch (default C2)
        max_pitch: Highest playable pitch (default C5)
        max_octave_shift: Largest global shift in octaves tried by CENTERED
    """

    strategy: ArrangementStrategy = ArrangementStrategy.OCTAVE_FOLD
    min_pitch: int = 36  # C2
    max_pitch: int = 72  # C5
    max_octave_shift: int = 3

    def __post_init__(self):
        # Every pitch class needs a slot inside the window
        if self.max_pitch - self.min_pitch < 11:
            raise ValueError(
                f"Playable window [{self.min_pitch}, {self.max_pitch}] "
                f"must span at least 11 semitones"
            )
        if self.max_octave_shift < 0:
            raise ValueError("max_octave_shift must not be negative")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "strategy": self.strategy.value,
            "min_pitch": self.min_pitch,
            "max_pitch": self.max_pitch,
            "max_octave_shift": self.max_octave_shift,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ArrangeConfig":
        """Create ArrangeConfig from dictionary."""
        data = dict(data)
        if "strategy" in data:
            data["strategy"] = ArrangementStrategy(data["strategy"])
        return cls(**data)


@dataclass
class ScoreNote:
    """
    One timed event of a score.

    Attributes:
        keys: Key names sounding together (None or empty means no sound)
        start_time: Start time in milliseconds from the top of the song
        end_time: Release time in milliseconds
        rest: Explicit rest marker; keys are ignored when True
    """

    keys: Optional[List[str]]
    start_time: float
    end_time: float
    rest: Optional[bool] = None

    @property
    def is_rest(self) -> bool:
        return bool(self.rest)

    @property
    def duration(self) -> float:
        """Return note duration in milliseconds."""
        return self.end_time - self.start_time


@dataclass
class Score:
    """
    A song as an ordered list of notes.

    Attributes:
        song: Song title
        bpm: Tempo in beats per minute
        notes: Notes in playing order
        total_time: Total length in milliseconds, if known
    """

    song: str
    bpm: int
    notes: List[ScoreNote] = field(default_factory=list)
    total_time: Optional[float] = None

    def copy(self) -> "Score":
        """Return an independent deep copy."""
        return copy.deepcopy(self)

    @property
    def key_names(self) -> List[str]:
        """All key names used by sounding notes, in order of appearance."""
        names = []
        for note in self.notes:
            if note.is_rest or not note.keys:
                continue
            names.extend(note.keys)
        return names


@dataclass
class ArrangementStats:
    """
    Counters collected while arranging one score.

    Attributes:
        notes_in: Notes in the input score
        notes_out: Notes in the arranged score
        rests_kept: Rest notes copied through
        notes_omitted: Non-rest notes without a key list (not emitted)
        notes_to_rest: Notes whose keys were all invalid (emitted as rests)
        keys_total: Key names seen on sounding notes
        keys_dropped: Key names that could not be decoded
        keys_shifted_up: Keys that ended higher than written
        keys_shifted_down: Keys that ended lower than written
        keys_unchanged: Keys that kept their written pitch
        octave_shift: Global shift in semitones applied before folding
    """

    notes_in: int = 0
    notes_out: int = 0
    rests_kept: int = 0
    notes_omitted: int = 0
    notes_to_rest: int = 0
    keys_total: int = 0
    keys_dropped: int = 0
    keys_shifted_up: int = 0
    keys_shifted_down: int = 0
    keys_unchanged: int = 0
    octave_shift: int = 0

    @property
    def keys_arranged(self) -> int:
        """Keys that were decoded and placed in the window."""
        return self.keys_total - self.keys_dropped

    @property
    def in_range_rate(self) -> float:
        """Fraction of decoded keys that did not need to move."""
        if self.keys_arranged == 0:
            return 0.0
        return self.keys_unchanged / self.keys_arranged

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "notes_in": self.notes_in,
            "notes_out": self.notes_out,
            "rests_kept": self.rests_kept,
            "notes_omitted": self.notes_omitted,
            "notes_to_rest": self.notes_to_rest,
            "keys_total": self.keys_total,
            "keys_dropped": self.keys_dropped,
            "keys_shifted_up": self.keys_shifted_up,
            "keys_shifted_down": self.keys_shifted_down,
            "keys_unchanged": self.keys_unchanged,
            "octave_shift": self.octave_shift,
            "in_range_rate": self.in_range_rate,
        }


@dataclass
class ArrangementResult:
    """Arranged score together with the statistics of the run."""

    score: Score
    stats: ArrangementStats


@dataclass
class S2KConfig:
    """
    Main configuration for s2k framework.

    Attributes:
        arrange_config: Configuration for range arrangement
        keymap_path: Optional keymap JSON used to report unmapped keys
        instrument: Instrument name inside the keymap file
        midi_rest_threshold_ms: Gaps longer than this become rests on MIDI import
    """

    arrange_config: ArrangeConfig = field(default_factory=ArrangeConfig)
    keymap_path: Optional[str] = None
    instrument: Optional[str] = None
    midi_rest_threshold_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "arrange_config": self.arrange_config.to_dict(),
            "keymap_path": self.keymap_path,
            "instrument": self.instrument,
            "midi_rest_threshold_ms": self.midi_rest_threshold_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "S2KConfig":
        """Create S2KConfig from dictionary."""
        data = dict(data)
        if "arrange_config" in data:
            data["arrange_config"] = ArrangeConfig.from_dict(data["arrange_config"])
        return cls(**data)
