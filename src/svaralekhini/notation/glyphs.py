"""Display names for scale degrees in each tuning system and script."""

import pretty_midi

from svaralekhini.notation.scale import semitones_from_a4
from svaralekhini.notation.segmenter import duration_marker
from svaralekhini.types import Language, ScaleDegree, TuningSystem

# Western degree indices count semitones up from A
WESTERN_NAMES = ("A", "A#", "B", "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#")

CARNATIC_NAMES = ("Sa", "Ri1", "Ri2", "Ga1", "Ga2", "Ma1", "Ma2", "Pa", "Dha1", "Dha2", "Ni1", "Ni2")

_SVARA_SYLLABLES = {
    Language.ENGLISH: ("Sa", "Ri", "Ri", "Ga", "Ga", "Ma", "Ma", "Pa", "Dha", "Dha", "Ni", "Ni"),
    Language.HINDI: ("स", "रि", "रि", "ग", "ग", "म", "म", "प", "ध", "ध", "नि", "नि"),
    Language.SANSKRIT: ("स", "रि", "रि", "ग", "ग", "म", "म", "प", "ध", "ध", "नि", "नि"),
    Language.KANNADA: ("ಸ", "ರಿ", "ರಿ", "ಗ", "ಗ", "ಮ", "ಮ", "ಪ", "ಧ", "ಧ", "ನಿ", "ನಿ"),
    Language.TELUGU: ("స", "రి", "రి", "గ", "గ", "మ", "మ", "ప", "ధ", "ధ", "ని", "ని"),
}

# Sa and Pa have no variants
_VARIANT_SUBSCRIPT = {1: "₁", 2: "₂", 3: "₁", 4: "₂", 5: "₁", 6: "₂",
                      8: "₁", 9: "₂", 10: "₁", 11: "₂"}

# Combining marks for mandra (lower) and tara (upper) sthayi
_DOT_BELOW = "\u0323"
_DOT_ABOVE = "\u0307"
_RING_BELOW = "\u0325"
_RING_ABOVE = "\u030a"


def svara_name(index: int, language: Language | str = Language.ENGLISH, octave: int = 0) -> str:
    """Carnatic svara with variant subscript and octave mark, e.g. 'Ri₂̇'."""
    language = Language(language)
    name = _SVARA_SYLLABLES[language][index] + _VARIANT_SUBSCRIPT.get(index, "")

    # Telugu marks octaves with rings rather than dots
    below, above = (_RING_BELOW, _RING_ABOVE) if language is Language.TELUGU else (_DOT_BELOW, _DOT_ABOVE)
    if octave < 0:
        name += below
    elif octave > 0:
        name += above
    return name


def western_name(index: int) -> str:
    return WESTERN_NAMES[index % 12]


def scientific_name(degree: ScaleDegree) -> str:
    """Scientific pitch name of a Western degree, e.g. 'G#4'."""
    return pretty_midi.note_number_to_name(69 + semitones_from_a4(degree))


def degree_name(
    degree: ScaleDegree | None,
    tuning: TuningSystem | str,
    language: Language | str = Language.ENGLISH,
) -> str:
    """Name a degree for display; rests render as '-'."""
    if degree is None:
        return "-"
    if TuningSystem(tuning) is TuningSystem.WESTERN:
        return western_name(degree.index)
    return svara_name(degree.index, language, degree.octave_offset)


def note_label(
    degree: ScaleDegree | None,
    duration_ms: float,
    tuning: TuningSystem | str,
    language: Language | str = Language.ENGLISH,
) -> str:
    """Degree name followed by its duration marker, e.g. 'Pa;,'."""
    return degree_name(degree, tuning, language) + duration_marker(duration_ms)


def deviation_text(degree: ScaleDegree, in_tune_cents: float = 5.0) -> str:
    """Tuning feedback: a check mark when in tune, else signed cents."""
    cents = degree.cents_deviation
    if abs(cents) < in_tune_cents:
        return "✓"
    return f"{'+' if cents > 0 else ''}{round(cents)}¢"
