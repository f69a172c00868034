"""
S2K Pipeline - Main orchestrator for score arrangement.

This pipeline coordinates:
1. Score loading (JSON or MIDI)
2. Range arrangement (pluggable strategies)
3. Keymap coverage check (optional)
4. Score output (JSON or MIDI)
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .models import ArrangementStats, S2KConfig, Score
from .observer import Observable, Event, EventType, ProgressTracker
from .keymap import KeyMap, load_keymaps
from .score_io import load_any, save_any
from ..strategies.arrangement import ArrangerFactory

logger = logging.getLogger(__name__)


class S2KPipeline(Observable):
    """
    Main pipeline for fitting a score to the playable window.

    This class orchestrates the conversion and notifies observers of
    progress and events.

    Usage:
        config = S2KConfig()
        pipeline = S2KPipeline(config)
        pipeline.attach(console_observer)

        stats = pipeline.process("song.mid", "song_arranged.json")
    """

    def __init__(self, config: Optional[S2KConfig] = None):
        """
        Initialize pipeline with configuration.

        Args:
            config: S2KConfig object with pipeline settings
        """
        super().__init__()
        self.config = config or S2KConfig()
        self.progress = ProgressTracker()
        self.progress.attach(self._forward_progress)

        self._arranger = ArrangerFactory.create(self.config.arrange_config)
        self._keymaps: Optional[Dict[str, KeyMap]] = None

        # Store results
        self.score: Optional[Score] = None
        self.arranged: Optional[Score] = None
        self.stats: Optional[ArrangementStats] = None
        self.missing_keys: List[str] = []

    def _forward_progress(self, event: Event) -> None:
        """Forward progress events to our observers."""
        self.notify(event)

    def process(
        self, input_path: Union[str, Path], output_path: Union[str, Path]
    ) -> ArrangementStats:
        """Load, arrange and export in one call."""
        self.load(input_path)
        stats = self.arrange()
        self.export(output_path)
        return stats

    def load(self, input_path: Union[str, Path]) -> Score:
        """
        Load a score from a JSON or MIDI file.

        Args:
            input_path: Path to the score file

        Returns:
            Loaded Score
        """
        with self.progress.track("Loading score", 1, "Score loaded"):
            self.progress.advance(f"Reading {Path(input_path).name}...")
            score = load_any(
                input_path, rest_threshold_ms=self.config.midi_rest_threshold_ms
            )

        self.score = score
        self.arranged = None
        self.stats = None
        self.notify(
            Event(
                type=EventType.SCORE_LOADED,
                data={"score": score},
                message=f"Loaded '{score.song}' ({len(score.notes)} notes)",
            )
        )
        return score

    def arrange(self, score: Optional[Score] = None) -> ArrangementStats:
        """
        Arrange the loaded score (or the given one) into the playable window.

        Args:
            score: Optional score to use instead of the loaded one

        Returns:
            ArrangementStats of the run
        """
        if score is not None:
            self.score = score
        if self.score is None:
            raise ValueError("No score loaded. Call load() first.")

        strategy = self.config.arrange_config.strategy.value
        with self.progress.track("Arranging", 2, "Arrangement complete!"):
            self.progress.advance(f"Arranging ({strategy})...")
            result = self._arranger.arrange(self.score)
            self.arranged = result.score
            self.stats = result.stats

            self.progress.advance("Checking keymap...")
            self.missing_keys = self._check_keymap(self.arranged)

        logger.info(
            "Arranged '%s': %d/%d notes, %d keys moved, %d dropped",
            self.arranged.song,
            self.stats.notes_out,
            self.stats.notes_in,
            self.stats.keys_shifted_up + self.stats.keys_shifted_down,
            self.stats.keys_dropped,
        )

        self.notify(
            Event(
                type=EventType.ARRANGEMENT_COMPLETE,
                data={"stats": self.stats, "missing_keys": list(self.missing_keys)},
                message=f"Arranged {self.stats.notes_out} notes",
            )
        )
        return self.stats

    def export(self, output_path: Union[str, Path]) -> None:
        """
        Write the arranged score.

        Args:
            output_path: Path to output file (.json, .mid or .midi)
        """
        if self.arranged is None:
            raise ValueError("Nothing to export. Call arrange() first.")

        with self.progress.track("Exporting score", 1, "Export complete!"):
            self.progress.advance(f"Writing {Path(output_path).name}...")
            save_any(self.arranged, output_path)

    def _check_keymap(self, score: Score) -> List[str]:
        """Return key names of the score missing from the configured keymap."""
        if not self.config.keymap_path:
            return []

        if self._keymaps is None:
            self._keymaps = load_keymaps(self.config.keymap_path)

        instrument = self.config.instrument
        if instrument is None:
            if len(self._keymaps) != 1:
                raise ValueError(
                    f"Keymap has {len(self._keymaps)} instruments; choose one "
                    f"of {sorted(self._keymaps)}"
                )
            instrument = next(iter(self._keymaps))

        if instrument not in self._keymaps:
            raise ValueError(
                f"Unknown instrument {instrument!r}; available: {sorted(self._keymaps)}"
            )

        missing = self._keymaps[instrument].missing(score)
        if missing:
            logger.warning(
                "%d key names have no key on %s: %s",
                len(missing),
                instrument,
                ", ".join(missing),
            )
        return missing
