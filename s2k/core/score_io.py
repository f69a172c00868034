"""
Score I/O - Reading and writing scores as JSON and MIDI.

JSON documents use the field names of the player front end:

    {
        "song": "Title",
        "bpm": 120,
        "notes": [{"keys": ["c4"], "startTime": 0, "endTime": 500}],
        "totalTime": 500
    }

Structural problems are reported as ScoreFormatError before a score ever
reaches an arranger.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union
import pretty_midi

from .models import Score, ScoreNote
from ..strategies.pitch_names import decode, encode

logger = logging.getLogger(__name__)

JSON_SUFFIXES = (".json",)
MIDI_SUFFIXES = (".mid", ".midi")

DEFAULT_BPM = 120
DEFAULT_SONG = "Untitled"


class ScoreFormatError(ValueError):
    """Raised when a score document does not have the expected structure."""


# ============================================================================
# JSON
# ============================================================================


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # NaN, Infinity and integers too large for a float are not times
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _require_number(data: dict, key: str, where: str) -> float:
    if key not in data:
        raise ScoreFormatError(f"{where}.{key} is required")
    value = data[key]
    if not _is_number(value):
        raise ScoreFormatError(f"{where}.{key} must be a finite number, got {value!r}")
    return float(value)


def _parse_note(data: Any, where: str) -> ScoreNote:
    """Parse a single note dict."""
    if not isinstance(data, dict):
        raise ScoreFormatError(f"{where} must be an object")

    keys = data.get("keys")
    if keys is not None:
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise ScoreFormatError(f"{where}.keys must be a list of strings")
        keys = list(keys)

    rest = data.get("rest")
    if rest is not None and not isinstance(rest, bool):
        raise ScoreFormatError(f"{where}.rest must be a boolean")

    return ScoreNote(
        keys=keys,
        start_time=_require_number(data, "startTime", where),
        end_time=_require_number(data, "endTime", where),
        rest=rest,
    )


def score_from_dict(data: Any) -> Score:
    """
    Build a Score from a parsed JSON document.

    Args:
        data: Parsed JSON object

    Returns:
        Score

    Raises:
        ScoreFormatError: If a required field is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise ScoreFormatError("score must be an object")

    song = data.get("song")
    if not isinstance(song, str):
        raise ScoreFormatError("song must be a string")

    bpm = data.get("bpm")
    if not isinstance(bpm, int) or isinstance(bpm, bool) or bpm < 0:
        raise ScoreFormatError(f"bpm must be a non-negative integer, got {bpm!r}")

    notes = data.get("notes")
    if not isinstance(notes, list):
        raise ScoreFormatError("notes must be a list")

    total_time = data.get("totalTime")
    if total_time is not None:
        if not _is_number(total_time):
            raise ScoreFormatError(
                f"totalTime must be a finite number, got {total_time!r}"
            )
        total_time = float(total_time)

    return Score(
        song=song,
        bpm=bpm,
        notes=[_parse_note(n, f"notes[{i}]") for i, n in enumerate(notes)],
        total_time=total_time,
    )


def score_to_dict(score: Score) -> dict:
    """Convert a Score to its JSON document. Unset optional fields are omitted."""
    notes = []
    for note in score.notes:
        item = {}
        if note.keys is not None:
            item["keys"] = list(note.keys)
        item["startTime"] = note.start_time
        item["endTime"] = note.end_time
        if note.rest is not None:
            item["rest"] = note.rest
        notes.append(item)

    data = {"song": score.song, "bpm": score.bpm, "notes": notes}
    if score.total_time is not None:
        data["totalTime"] = score.total_time
    return data


def load_score(source: Union[str, Path, dict]) -> Score:
    """
    Load a Score from a JSON file or pre-parsed dict.

    Args:
        source: File path (str or Path) or already-parsed dict

    Returns:
        Score

    Raises:
        ScoreFormatError: If the file is not valid JSON or not a valid score
    """
    if isinstance(source, dict):
        return score_from_dict(source)

    path = Path(source)
    with open(path, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as e:
            raise ScoreFormatError(f"{path}: invalid JSON ({e})") from e
    return score_from_dict(data)


def save_score(score: Score, path: Union[str, Path]) -> None:
    """Write a Score as UTF-8 JSON."""
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(score_to_dict(score), fh, ensure_ascii=False, indent=2)
        fh.write("\n")


# ============================================================================
# MIDI
# ============================================================================


def _collect_notes(midi_data: pretty_midi.PrettyMIDI) -> List[Tuple[float, float, int]]:
    """
    Collect all pitched notes from MIDI data.

    Returns:
        List of (start, end, pitch) tuples in seconds, sorted by start time
    """
    notes = []
    for instrument in midi_data.instruments:
        if instrument.is_drum:
            continue
        for note in instrument.notes:
            s = float(note.start)
            e = float(note.end) if note.end >= note.start else float(note.start)
            notes.append((s, e, int(note.pitch)))

    notes.sort(key=lambda x: (x[0], x[1], x[2]))
    return notes


def _initial_bpm(midi_data: pretty_midi.PrettyMIDI) -> int:
    _, tempi = midi_data.get_tempo_changes()
    if len(tempi) > 0:
        return int(round(float(tempi[0])))
    return DEFAULT_BPM


def score_from_midi(
    source: Union[str, Path, pretty_midi.PrettyMIDI],
    song: Optional[str] = None,
    rest_threshold_ms: float = 0.0,
) -> Score:
    """
    Convert a MIDI file to a Score.

    Notes starting at the same moment become one chord. The chord is held
    until its longest note ends, and silence between chords longer than
    rest_threshold_ms becomes an explicit rest. Drum tracks are skipped.

    Args:
        source: MIDI file path or PrettyMIDI object
        song: Song title (defaults to the file name)
        rest_threshold_ms: Gaps longer than this, in milliseconds, become rests

    Returns:
        Score with times in milliseconds
    """
    if isinstance(source, pretty_midi.PrettyMIDI):
        midi_data = source
        title = song or DEFAULT_SONG
    else:
        path = Path(source)
        midi_data = pretty_midi.PrettyMIDI(str(path))
        title = song or path.stem

    # Group by onset (ms, rounded so float noise does not split chords)
    groups = []
    for start, end, pitch in _collect_notes(midi_data):
        onset = round(start * 1000.0, 3)
        release = round(end * 1000.0, 3)
        if groups and groups[-1][0] == onset:
            groups[-1][1] = max(groups[-1][1], release)
            groups[-1][2].add(pitch)
        else:
            groups.append([onset, release, {pitch}])

    notes = []
    cursor = 0.0
    for onset, end_ms, pitches in groups:
        if onset - cursor > rest_threshold_ms:
            notes.append(ScoreNote(keys=None, start_time=cursor, end_time=onset, rest=True))
        notes.append(
            ScoreNote(
                keys=[encode(p) for p in sorted(pitches)],
                start_time=onset,
                end_time=end_ms,
            )
        )
        cursor = max(cursor, end_ms)

    logger.debug("Imported %d chords from MIDI as %d notes", len(groups), len(notes))
    return Score(
        song=title,
        bpm=_initial_bpm(midi_data),
        notes=notes,
        total_time=float(midi_data.get_end_time()) * 1000.0,
    )


def score_to_midi(
    score: Score, program: int = 0, velocity: int = 100
) -> pretty_midi.PrettyMIDI:
    """
    Render a Score as MIDI for previewing an arrangement.

    Args:
        score: Score to render
        program: General MIDI program number
        velocity: Velocity used for every note

    Returns:
        PrettyMIDI object with a single instrument
    """
    bpm = score.bpm if score.bpm > 0 else DEFAULT_BPM
    output_midi = pretty_midi.PrettyMIDI(initial_tempo=float(bpm))
    instrument = pretty_midi.Instrument(program=program, is_drum=False, name=score.song)

    for note in score.notes:
        if note.is_rest or not note.keys:
            continue
        for key_name in note.keys:
            pitch = decode(key_name)
            if pitch is None or not 0 <= pitch <= 127:
                continue
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=velocity,
                    pitch=pitch,
                    start=note.start_time / 1000.0,
                    end=note.end_time / 1000.0,
                )
            )

    output_midi.instruments.append(instrument)
    return output_midi


# ============================================================================
# DISPATCH
# ============================================================================


def load_any(path: Union[str, Path], rest_threshold_ms: float = 0.0) -> Score:
    """Load a score from a JSON or MIDI file, chosen by suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return load_score(path)
    if suffix in MIDI_SUFFIXES:
        return score_from_midi(path, rest_threshold_ms=rest_threshold_ms)
    raise ValueError(f"Unsupported score file type: {path.suffix or path.name}")


def save_any(score: Score, path: Union[str, Path]) -> None:
    """Save a score as JSON or MIDI, chosen by suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        save_score(score, path)
    elif suffix in MIDI_SUFFIXES:
        score_to_midi(score).write(str(path))
    else:
        raise ValueError(f"Unsupported score file type: {path.suffix or path.name}")
