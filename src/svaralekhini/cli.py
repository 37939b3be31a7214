"""CLI entrypoint for svaralekhini, dispatching to subcommands."""

import argparse
import logging
import sys
from pathlib import Path

from svaralekhini.engine import DEFAULT_LINE_GAP_MS, DEFAULT_TONIC_HZ
from svaralekhini.notation.segmenter import DEFAULT_MIN_NOTE_MS, ShortNotePolicy
from svaralekhini.pitch.stabilizer import StabilizerMode
from svaralekhini.types import Language, TuningSystem


def _add_shared_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared between transcribe and map subcommands."""
    parser.add_argument("--tonic", type=float, default=DEFAULT_TONIC_HZ,
                        help=f"Tonic (Sa) frequency in Hz (default: {DEFAULT_TONIC_HZ})")
    parser.add_argument("--tuning", default=TuningSystem.CARNATIC.value,
                        choices=[t.value for t in TuningSystem],
                        help="Tuning system (default: carnatic)")
    parser.add_argument("--language", default=Language.ENGLISH.value,
                        choices=[lang.value for lang in Language],
                        help="Lyric language and svara script (default: english)")
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Log rejected frames and other debug detail")


def _add_transcribe_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input_file", help="WAV recording of the singer")
    parser.add_argument("--output-dir", default="./svaralekhini-output",
                        help="Output directory (default: ./svaralekhini-output)")
    parser.add_argument("--lyrics", type=Path, default=None,
                        help="Text file with lyrics, one line per sung line")
    parser.add_argument("--min-note-ms", type=int, default=DEFAULT_MIN_NOTE_MS,
                        help=f"Minimum note duration in ms (default: {DEFAULT_MIN_NOTE_MS})")
    parser.add_argument("--frame-size", type=int, default=2048,
                        help="Analysis frame size in samples (default: 2048)")
    parser.add_argument("--hop-size", type=int, default=None,
                        help="Hop between frames in samples (default: frame size)")
    parser.add_argument("--line-gap", type=int, default=DEFAULT_LINE_GAP_MS,
                        help=f"Unvoiced ms that end a line, 0 to disable (default: {DEFAULT_LINE_GAP_MS})")
    parser.add_argument("--stabilizer", default=StabilizerMode.WITHHOLD.value,
                        choices=[m.value for m in StabilizerMode],
                        help="Output while the pitch is unsettled (default: withhold)")
    parser.add_argument("--short-notes", default=ShortNotePolicy.MERGE.value,
                        choices=[p.value for p in ShortNotePolicy],
                        help="Handling of notes shorter than --min-note-ms (default: merge)")
    parser.add_argument("--smart-align", action=argparse.BooleanOptionalAction, default=False,
                        help="Weight syllables by length when assigning notes (default: disabled)")
    parser.add_argument("--midi", action=argparse.BooleanOptionalAction, default=True,
                        help="Also write a MIDI file (default: enabled)")
    parser.add_argument("--save-session", type=Path, default=None,
                        help="Save the session as JSON to this path")


def _add_map_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("frequencies", nargs="+", type=float,
                        help="Frequencies in Hz")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="svaralekhini",
        description="Pitch-to-notation transcription for Carnatic and Western singing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    transcribe_parser = subparsers.add_parser(
        "transcribe",
        help="Transcribe a WAV recording into notation",
        description="Detect pitch frame by frame and write notation text and MIDI",
    )
    _add_shared_args(transcribe_parser)
    _add_transcribe_args(transcribe_parser)

    map_parser = subparsers.add_parser(
        "map",
        help="Name the scale degree of frequencies",
        description="Map frequencies to scale degrees with tuning deviation",
    )
    _add_shared_args(map_parser)
    _add_map_args(map_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    return args


def _build_config(args: argparse.Namespace):
    from svaralekhini.engine import EngineConfig

    try:
        return EngineConfig(
            tonic_hz=args.tonic,
            tuning=args.tuning,
            min_note_duration_ms=getattr(args, "min_note_ms", DEFAULT_MIN_NOTE_MS),
            stabilizer_mode=getattr(args, "stabilizer", StabilizerMode.WITHHOLD),
            short_note_policy=getattr(args, "short_notes", ShortNotePolicy.MERGE),
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _run_transcribe(args: argparse.Namespace) -> None:
    """Run the offline transcription pipeline."""
    from svaralekhini.analysis import read_wav
    from svaralekhini.engine import SessionState, load_lyrics, transcribe
    from svaralekhini.export import write_midi, write_notation
    from svaralekhini.lyrics.history import SmartAlignCommand
    from svaralekhini.store import save_session

    input_path = Path(args.input_file)
    if not input_path.exists():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        sys.exit(1)
    if args.lyrics is not None and not args.lyrics.exists():
        print(f"Error: file not found: {args.lyrics}", file=sys.stderr)
        sys.exit(1)

    config = _build_config(args)
    state = SessionState.from_config(config)
    logger = logging.getLogger("svaralekhini.transcribe")

    if args.lyrics is not None:
        load_lyrics(state, args.lyrics.read_text(encoding="utf-8"), args.language)
    else:
        state.language = Language(args.language)

    samples, sr = read_wav(input_path)
    logger.info(f"Read {input_path}: {len(samples) / sr:.1f}s at {sr} Hz")

    try:
        lines = transcribe(
            samples, sr, config, state,
            frame_size=args.frame_size,
            hop_size=args.hop_size,
            line_gap_ms=args.line_gap or None,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.smart_align:
        for i in range(len(state.lines)):
            state.edits.execute(SmartAlignCommand(state.lines, i))

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = input_path.stem
    outputs = [write_notation(output_dir / f"{stem}.txt", state.lines, config, state.language)]
    if args.midi:
        outputs.append(write_midi(output_dir / f"{stem}.mid", state.lines, config))
    if args.save_session is not None:
        outputs.append(save_session(config, state, path=args.save_session))

    note_count = sum(len(line.real_notes) for line in lines)
    print(f"Transcribed {len(lines)} line(s), {note_count} note(s)")
    print("Output:")
    for path in outputs:
        print(f"  {path}")


def _run_map(args: argparse.Namespace) -> None:
    """Print the scale degree of each frequency."""
    from svaralekhini.notation.glyphs import degree_name, deviation_text
    from svaralekhini.notation.scale import get_mapper

    config = _build_config(args)
    mapper = get_mapper(config.tuning)
    for frequency in args.frequencies:
        if frequency <= 0:
            print(f"Error: frequency must be positive, got {frequency}", file=sys.stderr)
            sys.exit(1)
        degree = mapper.map(frequency, config.tonic_hz)
        name = degree_name(degree, config.tuning, args.language)
        print(f"{frequency:g} Hz: {name} (octave {degree.octave_offset:+d}) {deviation_text(degree)}")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")

    if args.command == "transcribe":
        _run_transcribe(args)
    elif args.command == "map":
        _run_map(args)


if __name__ == "__main__":
    main()
