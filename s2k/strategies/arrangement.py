"""
Arrangement strategies for s2k framework.

Fits a score into the playable window by moving notes in whole octaves,
so every key keeps its pitch class. Implements pluggable algorithms using
Strategy pattern.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import List, Optional
import numpy as np

from ..core.models import (
    ArrangeConfig,
    ArrangementResult,
    ArrangementStats,
    ArrangementStrategy,
    Score,
    ScoreNote,
)
from .pitch_names import decode, encode

logger = logging.getLogger(__name__)


def fold_pitch(pitch: int, min_pitch: int = 36, max_pitch: int = 72) -> int:
    """
    Move a pitch by octaves until it lies in [min_pitch, max_pitch].

    This is a fold, not a clamp: the pitch class never changes. A pitch below
    the window lands in its lowest octave and a pitch above it in its highest
    octave, in constant time however far away the pitch starts.

    Args:
        pitch: MIDI pitch number
        min_pitch: Lowest playable pitch
        max_pitch: Highest playable pitch

    Returns:
        Folded pitch
    """
    # Shift up by octaves if below range
    if pitch < min_pitch:
        pitch = min_pitch + (pitch - min_pitch) % 12

    # Shift down by octaves if above range
    if pitch > max_pitch:
        pitch = max_pitch - (max_pitch - pitch) % 12

    return pitch


class ArrangerABC(ABC):
    """
    Abstract base class for arrangers.

    Subclasses only decide the global octave shift applied before folding;
    the per-note rules are shared.
    """

    def __init__(self, config: Optional[ArrangeConfig] = None):
        """
        Initialize arranger with configuration.

        Args:
            config: ArrangeConfig with the playable window
        """
        self.config = config or ArrangeConfig()

    @abstractmethod
    def octave_shift(self, score: Score) -> int:
        """
        Choose the shift in semitones applied to every pitch before folding.

        Args:
            score: Score about to be arranged

        Returns:
            Shift in semitones (a multiple of 12)
        """
        pass

    def arrange(self, score: Score) -> ArrangementResult:
        """
        Arrange a score into the playable window.

        Rests are copied, undecodable keys are dropped, notes that lose every
        key become rests and notes without a key list are left out.

        Args:
            score: Score to arrange (not modified)

        Returns:
            ArrangementResult with the new score and run statistics
        """
        stats = ArrangementStats(notes_in=len(score.notes))
        shift = self.octave_shift(score)
        stats.octave_shift = shift

        arranged_notes = []
        for index, note in enumerate(score.notes):
            if note.is_rest:
                # Keep rest notes as-is
                arranged_notes.append(copy.deepcopy(note))
                stats.rests_kept += 1
                continue

            if note.keys is None:
                logger.debug("Note %d has no keys and is not a rest; omitted", index)
                stats.notes_omitted += 1
                continue

            arranged_keys = []
            for key_name in note.keys:
                stats.keys_total += 1
                pitch = decode(key_name)
                if pitch is None:
                    logger.debug("Dropping unparseable key %r in note %d", key_name, index)
                    stats.keys_dropped += 1
                    continue

                new_pitch = fold_pitch(
                    pitch + shift, self.config.min_pitch, self.config.max_pitch
                )
                if new_pitch > pitch:
                    stats.keys_shifted_up += 1
                elif new_pitch < pitch:
                    stats.keys_shifted_down += 1
                else:
                    stats.keys_unchanged += 1
                arranged_keys.append(encode(new_pitch))

            if arranged_keys:
                arranged_notes.append(
                    ScoreNote(
                        keys=arranged_keys,
                        start_time=note.start_time,
                        end_time=note.end_time,
                        rest=None,
                    )
                )
            else:
                # If all keys were filtered out, convert to rest
                arranged_notes.append(
                    ScoreNote(
                        keys=None,
                        start_time=note.start_time,
                        end_time=note.end_time,
                        rest=True,
                    )
                )
                stats.notes_to_rest += 1

        stats.notes_out = len(arranged_notes)
        arranged = Score(
            song=score.song,
            bpm=score.bpm,
            notes=arranged_notes,
            total_time=score.total_time,
        )
        return ArrangementResult(score=arranged, stats=stats)


class OctaveFoldArranger(ArrangerABC):
    """
    Folds every key into the window on its own.

    Keys already in range are never moved, so a score that fits is returned
    with the same pitches.
    """

    def octave_shift(self, score: Score) -> int:
        return 0


class CenteredArranger(ArrangerABC):
    """
    Moves the whole score by whole octaves before folding.

    The shift is chosen to maximize the number of pitches that land inside
    the window without folding, so melodies sitting just outside the window
    move as a block instead of being folded note by note.
    """

    def octave_shift(self, score: Score) -> int:
        """
        Find the octave shift that keeps the most pitches in range.

        Args:
            score: Score about to be arranged

        Returns:
            Best shift in semitones
        """
        pitches = self._collect_pitches(score)
        if not pitches:
            return 0

        values = np.asarray(pitches, dtype=np.int64)
        best_shift = 0
        best_count = -1

        octaves = range(-self.config.max_octave_shift, self.config.max_octave_shift + 1)
        for shift in sorted((12 * k for k in octaves), key=lambda s: (abs(s), s)):
            shifted = values + shift
            count = int(
                np.count_nonzero(
                    (shifted >= self.config.min_pitch)
                    & (shifted <= self.config.max_pitch)
                )
            )

            # Candidates are visited smallest shift first, so ties keep it
            if count > best_count:
                best_count = count
                best_shift = shift

        return best_shift

    @staticmethod
    def _collect_pitches(score: Score) -> List[int]:
        pitches = []
        for note in score.notes:
            if note.is_rest or not note.keys:
                continue
            for key_name in note.keys:
                pitch = decode(key_name)
                if pitch is not None:
                    pitches.append(pitch)
        return pitches


class ArrangerFactory:
    """Factory for creating arrangers."""

    @staticmethod
    def create(config: Optional[ArrangeConfig] = None) -> ArrangerABC:
        """
        Create an arranger instance.

        Args:
            config: ArrangeConfig naming the strategy

        Returns:
            ArrangerABC instance

        Raises:
            ValueError: If strategy is not supported
        """
        config = config or ArrangeConfig()
        if config.strategy == ArrangementStrategy.OCTAVE_FOLD:
            return OctaveFoldArranger(config)
        elif config.strategy == ArrangementStrategy.CENTERED:
            return CenteredArranger(config)
        else:
            raise ValueError(f"Unknown arrangement strategy: {config.strategy!r}")


def arrange(score: Score, config: Optional[ArrangeConfig] = None) -> Score:
    """
    Arrange a score into the playable window.

    Args:
        score: Score to arrange (not modified)
        config: Optional ArrangeConfig (defaults to octave folding into C2-C5)

    Returns:
        New arranged Score
    """
    return ArrangerFactory.create(config).arrange(score).score
