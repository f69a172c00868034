"""
Pitch Names - Conversion between key names and MIDI pitch numbers.

Key names are what scores and keymaps use to address a key:

- A natural letter: c, d, e, f, g, a, b
- A signed octave number: "c4", "c-1"
- An optional trailing "b" marking a sharp: "c4b" is C#4 (MIDI 61)

The trailing "b" is NOT a flat. There is no flat notation; every black key
is written as the sharp of the white key below it.
"""

import re
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# ============================================================================
# NAME TABLES
# ============================================================================

SHARP_MARKER: str = "b"

# Natural letter -> pitch class
LETTER_PITCH_CLASS: Mapping[str, int] = MappingProxyType(
    {
        "c": 0,
        "d": 2,
        "e": 4,
        "f": 5,
        "g": 7,
        "a": 9,
        "b": 11,
    }
)

# Pitch class -> letter written in the key name
PITCH_CLASS_LETTER: Tuple[str, ...] = (
    "c",  # 0  C
    "c",  # 1  C#
    "d",  # 2  D
    "d",  # 3  D#
    "e",  # 4  E
    "f",  # 5  F
    "f",  # 6  F#
    "g",  # 7  G
    "g",  # 8  G#
    "a",  # 9  A
    "a",  # 10 A#
    "b",  # 11 B
)

SHARP_PITCH_CLASSES: frozenset = frozenset({1, 3, 6, 8, 10})
NATURAL_PITCH_CLASSES: frozenset = frozenset({0, 2, 4, 5, 7, 9, 11})

_OCTAVE_PATTERN = re.compile(r"[+-]?[0-9]+")

# Octave numbers are 32-bit signed integers; larger ones are not key names
OCTAVE_MIN: int = -(2**31)
OCTAVE_MAX: int = 2**31 - 1

# ============================================================================
# CONVERSION
# ============================================================================


def pitch_class(pitch: int) -> int:
    """Return the pitch class (0=C ... 11=B) of a MIDI pitch."""
    return pitch % 12


def octave_of(pitch: int) -> int:
    """Return the octave number of a MIDI pitch (60 -> 4)."""
    return pitch // 12 - 1


def is_sharp(pitch: int) -> bool:
    """Return True if the pitch is a black key."""
    return pitch_class(pitch) in SHARP_PITCH_CLASSES


def decode(name: str) -> Optional[int]:
    """
    Convert a key name to a MIDI pitch.

    A trailing "b" only counts as the sharp marker when the name is longer
    than two characters, so "c4b" is 61 but "cb" has no octave and fails.

    Args:
        name: Key name such as "c4", "c4b" or "c-1" (letter case is ignored)

    Returns:
        MIDI pitch number, or None if the name cannot be parsed or its
        octave does not fit a 32-bit signed integer
    """
    if not isinstance(name, str) or not name:
        return None

    base = LETTER_PITCH_CLASS.get(name[0].lower())
    if base is None:
        return None

    sharp = len(name) > 2 and name[-1] == SHARP_MARKER
    octave_str = name[1:-1] if sharp else name[1:]
    if not _OCTAVE_PATTERN.fullmatch(octave_str):
        return None

    if len(octave_str.lstrip("+-").lstrip("0")) > len(str(OCTAVE_MAX)):
        return None
    octave = int(octave_str)
    if not OCTAVE_MIN <= octave <= OCTAVE_MAX:
        return None
    return (octave + 1) * 12 + base + (1 if sharp else 0)


def encode(pitch: int) -> str:
    """
    Convert a MIDI pitch to a key name.

    Args:
        pitch: MIDI pitch number (0-127)

    Returns:
        Key name (e.g., 60 -> 'c4', 61 -> 'c4b')
    """
    pc = pitch_class(pitch)
    marker = SHARP_MARKER if pc in SHARP_PITCH_CLASSES else ""
    return f"{PITCH_CLASS_LETTER[pc]}{octave_of(pitch)}{marker}"


def normalize(name: str) -> Optional[str]:
    """Return the canonical spelling of a key name, or None if invalid."""
    pitch = decode(name)
    if pitch is None:
        return None
    return encode(pitch)


# ============================================================================
# VALIDATION
# ============================================================================


def _validate_tables():
    """Internal validation of the name tables."""
    assert len(PITCH_CLASS_LETTER) == 12, "Must name all 12 pitch classes"
    assert SHARP_PITCH_CLASSES.isdisjoint(NATURAL_PITCH_CLASSES)
    assert len(SHARP_PITCH_CLASSES | NATURAL_PITCH_CLASSES) == 12

    for letter, pc in LETTER_PITCH_CLASS.items():
        assert pc in NATURAL_PITCH_CLASSES, f"{letter} must be a natural"
        assert PITCH_CLASS_LETTER[pc] == letter

    # Every sharp is written with the letter of the natural below it
    for pc in SHARP_PITCH_CLASSES:
        assert PITCH_CLASS_LETTER[pc] == PITCH_CLASS_LETTER[pc - 1]


# Run validation on module import
_validate_tables()
