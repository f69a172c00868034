"""
Keymaps - Translation from key names to keyboard characters.

A keymap file lists, per instrument, the keyboard key string that plays each
key name:

    {"piano": {"c2": "z", "c2b": "s", "d2": "x"}}

Only characters the player can send are accepted.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .models import Score, ScoreNote
from ..strategies.pitch_names import normalize

# Characters the player can type into the game window
SUPPORTED_KEY_CHARS: frozenset = frozenset(
    "0123456789" "abcdefghijklmnopqrstuvwxyz" ",./;[]-="
)


def unsupported_chars(key: str) -> List[str]:
    """Return the characters of a key string that cannot be typed."""
    return [ch for ch in key if ch.lower() not in SUPPORTED_KEY_CHARS]


@dataclass
class KeyMap:
    """
    Keyboard layout of one instrument.

    Attributes:
        instrument: Instrument name
        mapping: Canonical key name -> keyboard key string
    """

    instrument: str
    mapping: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, instrument: str, data: dict) -> "KeyMap":
        """
        Create KeyMap from a {key name: keyboard key} dict.

        Raises:
            ValueError: If a key name is invalid or a keyboard key is unsupported
        """
        if not isinstance(data, dict):
            raise ValueError(f"Keymap for {instrument!r} must be an object")

        mapping = {}
        for name, key in data.items():
            canonical = normalize(name)
            if canonical is None:
                raise ValueError(f"{instrument}: invalid key name {name!r}")
            if not isinstance(key, str) or not key:
                raise ValueError(f"{instrument}: key for {name!r} must be a non-empty string")
            bad = unsupported_chars(key)
            if bad:
                raise ValueError(f"{instrument}: unsupported key: {bad[0]!r}")
            mapping[canonical] = key
        return cls(instrument=instrument, mapping=mapping)

    def key_for(self, name: str) -> Optional[str]:
        """Return the keyboard key for a key name, or None if unmapped."""
        canonical = normalize(name)
        if canonical is None:
            return None
        return self.mapping.get(canonical)

    def keys_for(self, note: ScoreNote) -> List[str]:
        """
        Keyboard keys to hold for a note.

        Args:
            note: Score note

        Returns:
            Keyboard key strings in key order (empty for rests; unmapped keys skipped)
        """
        if note.is_rest or not note.keys:
            return []
        keys = []
        for name in note.keys:
            key = self.key_for(name)
            if key is not None:
                keys.append(key)
        return keys

    def missing(self, score: Score) -> List[str]:
        """Sorted key names used by the score that this keymap cannot play."""
        missing = set()
        for name in score.key_names:
            if self.key_for(name) is None:
                missing.add(normalize(name) or name)
        return sorted(missing)

    def coverage(self, score: Score) -> float:
        """Fraction of sounding keys in the score that can be played."""
        names = score.key_names
        if not names:
            return 1.0
        mapped = sum(1 for name in names if self.key_for(name) is not None)
        return mapped / len(names)


def load_keymaps(source: Union[str, Path, dict]) -> Dict[str, KeyMap]:
    """
    Load keymaps from a JSON file or pre-parsed dict.

    Args:
        source: File path (str or Path) or {instrument: {key name: key}} dict

    Returns:
        Dict of instrument name -> KeyMap
    """
    if isinstance(source, dict):
        data = source
    else:
        with open(Path(source), encoding="utf-8") as fh:
            data = json.load(fh)

    if not isinstance(data, dict):
        raise ValueError("Keymap file must contain an object of instruments")

    return {name: KeyMap.from_dict(name, mapping) for name, mapping in data.items()}
