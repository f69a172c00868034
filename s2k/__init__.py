"""
s2k - Score to Keys arrangement for three-octave game keyboards.

Fits scores of any range into the playable window by octave shifts, so
every note keeps its pitch class and can be played on the game instrument.
"""

__version__ = "1.0.0"

from .core.models import (
    ArrangeConfig,
    ArrangementResult,
    ArrangementStats,
    ArrangementStrategy,
    S2KConfig,
    Score,
    ScoreNote,
)
from .core.pipeline import S2KPipeline
from .core.observer import Observer, Event, EventType
from .core.score_io import ScoreFormatError, load_score, save_score
from .strategies.arrangement import ArrangerFactory, arrange
from .strategies.pitch_names import decode, encode

__all__ = [
    "ArrangeConfig",
    "ArrangementResult",
    "ArrangementStats",
    "ArrangementStrategy",
    "S2KConfig",
    "Score",
    "ScoreNote",
    "S2KPipeline",
    "Observer",
    "Event",
    "EventType",
    "ScoreFormatError",
    "load_score",
    "save_score",
    "ArrangerFactory",
    "arrange",
    "decode",
    "encode",
]
