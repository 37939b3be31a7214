"""Core data types for svaralekhini."""

from dataclasses import dataclass, field, replace
from enum import Enum


class TuningSystem(str, Enum):
    """Which scale the pitch stream is notated in."""
    CARNATIC = "carnatic"   # 12 just-intonation svaras relative to the tonic
    WESTERN = "western"     # 12-TET semitones relative to A4 = 440 Hz


class Language(str, Enum):
    """Lyric language; selects syllable splitting and svara glyphs."""
    ENGLISH = "english"
    HINDI = "hindi"
    SANSKRIT = "sanskrit"
    KANNADA = "kannada"
    TELUGU = "telugu"

    @property
    def is_indic(self) -> bool:
        return self is not Language.ENGLISH


@dataclass(frozen=True)
class ScaleDegree:
    """One step of the active scale, with octave and tuning error."""
    index: int               # 0..11
    octave_offset: int       # signed, relative to the tonic (or A4)
    cents_deviation: float   # signed distance from the exact degree

    @property
    def key(self) -> tuple[int, int]:
        """Identity of the degree, ignoring deviation."""
        return self.index, self.octave_offset

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "octave_offset": self.octave_offset,
            "cents_deviation": self.cents_deviation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScaleDegree":
        return cls(
            index=data["index"],
            octave_offset=data["octave_offset"],
            cents_deviation=data["cents_deviation"],
        )


@dataclass
class Note:
    """A segmented note. ``scale_degree`` is None for a rest marker."""
    scale_degree: ScaleDegree | None
    start_time_ms: int
    duration_ms: int
    source_pitch_hz: float
    is_glide: bool = False

    @property
    def is_rest(self) -> bool:
        return self.scale_degree is None

    @property
    def end_time_ms(self) -> int:
        return self.start_time_ms + self.duration_ms

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "scale_degree": self.scale_degree.to_dict() if self.scale_degree else None,
            "start_time_ms": self.start_time_ms,
            "duration_ms": self.duration_ms,
            "source_pitch_hz": self.source_pitch_hz,
            "is_glide": self.is_glide,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        degree = data.get("scale_degree")
        return cls(
            scale_degree=ScaleDegree.from_dict(degree) if degree else None,
            start_time_ms=data["start_time_ms"],
            duration_ms=data["duration_ms"],
            source_pitch_hz=data["source_pitch_hz"],
            is_glide=data.get("is_glide", False),
        )


@dataclass
class Line:
    """One lyric line with its notes and the syllable -> note mapping.

    ``None`` entries in ``syllables`` and ``notes`` are intentional
    alignment gaps. ``syllable_to_note_mapping`` has one entry per syllable
    slot; entries are None only when ``notes`` is empty.
    """
    syllables: list[str | None] = field(default_factory=list)
    notes: list[Note | None] = field(default_factory=list)
    syllable_to_note_mapping: list[int | None] = field(default_factory=list)

    @property
    def real_notes(self) -> list[Note]:
        return [n for n in self.notes if n is not None]

    def pad_notes(self, length: int) -> None:
        """Append empty slots until ``notes`` has at least ``length`` entries."""
        while len(self.notes) < length:
            self.notes.append(None)

    def copy(self) -> "Line":
        return Line(
            syllables=list(self.syllables),
            notes=[replace(n) if n is not None else None for n in self.notes],
            syllable_to_note_mapping=list(self.syllable_to_note_mapping),
        )

    def to_dict(self) -> dict:
        return {
            "syllables": list(self.syllables),
            "notes": [n.to_dict() if n is not None else None for n in self.notes],
            "mapping": list(self.syllable_to_note_mapping),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Line":
        return cls(
            syllables=list(data.get("syllables", [])),
            notes=[Note.from_dict(n) if n is not None else None for n in data.get("notes", [])],
            syllable_to_note_mapping=list(data.get("mapping", [])),
        )


@dataclass
class PitchSample:
    """An accepted, stabilized pitch estimate and its scale degree."""
    frequency_hz: float
    scale_degree: ScaleDegree
    timestamp_ms: int


@dataclass
class FrameResult:
    """Per-cycle output of the engine for live display."""
    frequency_hz: float
    scale_degree: ScaleDegree
    note: Note | None = None   # set when this cycle finalized a note
