"""Write transcribed lines as a notation text document and as MIDI."""

import logging
from pathlib import Path

import pretty_midi

from svaralekhini.engine import EngineConfig
from svaralekhini.lyrics.syllables import transliterate_iast
from svaralekhini.notation.glyphs import degree_name, note_label
from svaralekhini.notation.scale import get_mapper
from svaralekhini.types import Language, Line, Note, TuningSystem

logger = logging.getLogger(__name__)

EXPORT_TITLE = "Svara Lekhini Notation Export"
GLIDE_MARKER = "~"
DEFAULT_VELOCITY = 100
DEFAULT_PROGRAM = 52  # Choir Aahs


def syllable_notes(line: Line, syllable_index: int) -> list[Note]:
    """Real notes sung on one syllable.

    A syllable owns the slots from its mapped position up to the next
    syllable's position; the last syllable owns every remaining slot.
    Syllables sharing a position each see that note.
    """
    mapping = line.syllable_to_note_mapping
    start = mapping[syllable_index]
    if start is None:
        return []
    later = [m for m in mapping[syllable_index + 1:] if m is not None and m > start]
    end = later[0] if later else len(line.notes)
    return [n for n in line.notes[start:max(end, start + 1)] if n is not None]


def dominant_note(notes: list[Note]) -> Note | None:
    """Longest pitched note, or None if there are only rests."""
    pitched = [n for n in notes if not n.is_rest]
    if not pitched:
        return None
    return max(pitched, key=lambda n: n.duration_ms)


def _label(note: Note, tuning: TuningSystem, language: Language) -> str:
    # Duration markers are a Carnatic convention
    if tuning is TuningSystem.WESTERN:
        return degree_name(note.scale_degree, tuning, language)
    return note_label(note.scale_degree, note.duration_ms, tuning, language)


def format_notation(
    lines: list[Line],
    config: EngineConfig,
    language: Language | str = Language.ENGLISH,
) -> str:
    """Render lines as the plain-text notation document."""
    language = Language(language)
    tuning = config.tuning

    out = [
        EXPORT_TITLE,
        f"Style: {tuning.value}",
        f"Language: {language.value}",
        f"Base Pitch: {config.tonic_hz:g} Hz",
        "",
    ]

    for number, line in enumerate(lines, start=1):
        out.append(f"Line {number}:")
        out.append(" ".join(_label(n, tuning, language) for n in line.real_notes))

        if any(line.syllables):
            out.append("Syllable Analysis:")
            for i, syllable in enumerate(line.syllables):
                if not syllable:
                    continue
                notes = syllable_notes(line, i)
                main = dominant_note(notes)
                if main is None:
                    continue
                entry = syllable
                if language.is_indic:
                    entry += f" ({transliterate_iast(syllable, language)})"
                glide = f" {GLIDE_MARKER}" if any(n.is_glide for n in notes) else ""
                out.append(f"{entry}: {_label(main, tuning, language)}{glide}")
        out.append("")

    return "\n".join(out)


def write_notation(
    path: Path,
    lines: list[Line],
    config: EngineConfig,
    language: Language | str = Language.ENGLISH,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_notation(lines, config, language), encoding="utf-8")
    logger.info(f"Wrote notation: {path}")
    return path


def build_midi(
    lines: list[Line],
    config: EngineConfig,
    program: int = DEFAULT_PROGRAM,
) -> pretty_midi.PrettyMIDI:
    """One instrument holding every pitched note, at its recorded time.

    Notes are quantized to the exact frequency of their scale degree.
    Lines are laid end to end, each offset by the end of the previous one.
    """
    mapper = get_mapper(config.tuning)
    mid = pretty_midi.PrettyMIDI()
    inst = pretty_midi.Instrument(program=program, name="voice")

    offset = 0.0
    for line in lines:
        notes = line.real_notes
        if not notes:
            continue
        line_start = notes[0].start_time_ms / 1000.0
        for note in notes:
            if note.is_rest or note.duration_ms <= 0:
                continue
            hz = mapper.expected_frequency(note.scale_degree, config.tonic_hz)
            pitch = int(round(pretty_midi.hz_to_note_number(hz)))
            start = offset + note.start_time_ms / 1000.0 - line_start
            inst.notes.append(pretty_midi.Note(
                velocity=DEFAULT_VELOCITY,
                pitch=max(0, min(127, pitch)),
                start=start,
                end=start + note.duration_ms / 1000.0,
            ))
        offset += notes[-1].end_time_ms / 1000.0 - line_start

    mid.instruments.append(inst)
    return mid


def write_midi(path: Path, lines: list[Line], config: EngineConfig) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mid = build_midi(lines, config)
    mid.write(str(path))
    logger.info(f"Wrote MIDI: {path} ({len(mid.instruments[0].notes)} notes)")
    return path
