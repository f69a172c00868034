"""
S2K Framework - Command line entry point.

Usage:
    s2k arrange song.json                     # Writes song_arranged.json
    s2k arrange song.mid -o song.json         # Import MIDI and arrange
    s2k arrange song.json --strategy centered
    s2k import song.mid -o song.json          # MIDI -> score, no arrangement
    s2k --help

Examples:
    # Check the arrangement against a game keymap
    s2k arrange song.json --keymap keymaps.json --instrument piano
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.models import ArrangeConfig, ArrangementStrategy, S2KConfig
from .core.observer import Event, EventType
from .core.pipeline import S2KPipeline
from .core.score_io import save_score, score_from_midi


def _default_output(input_path: Path, suffix: str) -> Path:
    return input_path.parent / f"{input_path.stem}{suffix}.json"


def _print_event(event: Event) -> None:
    if event.type == EventType.PROGRESS_UPDATE:
        print(f"[{event.data['current']}/{event.data['total']}] {event.message}")
    elif event.type == EventType.PROGRESS_COMPLETE:
        print(f"✓ {event.message}")
    elif event.type == EventType.ERROR:
        print(f"✗ {event.message}", file=sys.stderr)


def run_arrange(args: argparse.Namespace) -> int:
    """
    Arrange a score file.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 = success, 1 = error)
    """
    try:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: input file does not exist: {args.input}", file=sys.stderr)
            return 1

        output_path = (
            Path(args.output) if args.output else _default_output(input_path, "_arranged")
        )

        config = S2KConfig(
            arrange_config=ArrangeConfig(
                strategy=ArrangementStrategy(args.strategy),
                min_pitch=args.min_pitch,
                max_pitch=args.max_pitch,
                max_octave_shift=args.max_octave_shift,
            ),
            keymap_path=args.keymap,
            instrument=args.instrument,
            midi_rest_threshold_ms=args.rest_threshold,
        )

        print("=" * 60)
        print("S2K Score Arranger")
        print("=" * 60)
        print(f"Input:    {input_path}")
        print(f"Output:   {output_path}")
        print(f"Strategy: {config.arrange_config.strategy.value}")
        print(
            f"Window:   {config.arrange_config.min_pitch}-{config.arrange_config.max_pitch}"
        )
        print("=" * 60)

        pipeline = S2KPipeline(config)
        pipeline.attach(_print_event)
        stats = pipeline.process(input_path, output_path)

        print()
        print(f"Notes:        {stats.notes_out}/{stats.notes_in}")
        print(f"Rests kept:   {stats.rests_kept}")
        print(f"Keys moved:   up {stats.keys_shifted_up}, down {stats.keys_shifted_down}")
        print(f"In range:     {stats.in_range_rate * 100:.1f}%")
        if stats.octave_shift:
            print(f"Octave shift: {stats.octave_shift:+d} semitones")
        if stats.keys_dropped:
            print(f"Dropped keys: {stats.keys_dropped}")
        if stats.notes_omitted:
            print(f"Notes without keys left out: {stats.notes_omitted}")
        if pipeline.missing_keys:
            print(f"Unmapped keys: {', '.join(pipeline.missing_keys)}")
        print()
        print(f"Saved to: {output_path}")
        return 0

    except Exception as e:
        print(f"\nError: arrangement failed: {e}", file=sys.stderr)
        logging.getLogger(__name__).debug("Arrangement failed", exc_info=True)
        return 1


def run_import(args: argparse.Namespace) -> int:
    """Convert a MIDI file to a score JSON file without arranging it."""
    try:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: input file does not exist: {args.input}", file=sys.stderr)
            return 1

        output_path = Path(args.output) if args.output else _default_output(input_path, "")
        score = score_from_midi(input_path, rest_threshold_ms=args.rest_threshold)
        save_score(score, output_path)

        print(f"Imported '{score.song}': {len(score.notes)} notes, {score.bpm} BPM")
        print(f"Saved to: {output_path}")
        return 0

    except Exception as e:
        print(f"\nError: import failed: {e}", file=sys.stderr)
        logging.getLogger(__name__).debug("Import failed", exc_info=True)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s2k",
        description="S2K - fit scores into a three-octave game keyboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Strategies:
  octave_fold  - fold every key into the window on its own (default)
  centered     - move the whole score by octaves first, then fold
""",
    )
    parser.add_argument("--version", "-v", action="version", version=f"S2K {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Show log messages")
    subparsers = parser.add_subparsers(dest="command", required=True)

    arrange_parser = subparsers.add_parser("arrange", help="Arrange a JSON or MIDI score")
    arrange_parser.add_argument("input", help="Input score (.json, .mid, .midi)")
    arrange_parser.add_argument(
        "--output", "-o", help="Output file (default: <input>_arranged.json)"
    )
    arrange_parser.add_argument(
        "--strategy",
        "-s",
        choices=[s.value for s in ArrangementStrategy],
        default=ArrangementStrategy.OCTAVE_FOLD.value,
        help="Arrangement strategy (default: octave_fold)",
    )
    arrange_parser.add_argument(
        "--min-pitch", type=int, default=36, help="Lowest playable MIDI pitch (default: 36, C2)"
    )
    arrange_parser.add_argument(
        "--max-pitch", type=int, default=72, help="Highest playable MIDI pitch (default: 72, C5)"
    )
    arrange_parser.add_argument(
        "--max-octave-shift",
        type=int,
        default=3,
        help="Largest global shift in octaves for 'centered' (default: 3)",
    )
    arrange_parser.add_argument("--keymap", help="Keymap JSON to check coverage against")
    arrange_parser.add_argument("--instrument", help="Instrument name inside the keymap")
    arrange_parser.add_argument(
        "--rest-threshold",
        type=float,
        default=0.0,
        help="Gaps longer than this (ms) become rests on MIDI import (default: 0)",
    )
    arrange_parser.set_defaults(func=run_arrange)

    import_parser = subparsers.add_parser("import", help="Convert MIDI to score JSON")
    import_parser.add_argument("input", help="Input MIDI file")
    import_parser.add_argument("--output", "-o", help="Output JSON (default: <input>.json)")
    import_parser.add_argument(
        "--rest-threshold",
        type=float,
        default=0.0,
        help="Gaps longer than this (ms) become rests (default: 0)",
    )
    import_parser.set_defaults(func=run_import)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for s2k application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
