"""Segment a stream of scale degrees into discrete notes."""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from svaralekhini.types import Note, ScaleDegree

logger = logging.getLogger(__name__)

DEFAULT_MIN_NOTE_MS = 150
MAX_NOTE_MS = 10_000

# Duration notation: one unit per 200 ms beyond the first 300 ms
BASE_DURATION_MS = 300
UNIT_DURATION_MS = 200
SINGLE_UNIT_MARKER = ","
PAIRED_UNIT_MARKER = ";"


class ShortNotePolicy(str, Enum):
    """How a candidate shorter than the minimum note duration is finalized."""
    MERGE = "merge"   # extend the previous note (rest marker if there is none)
    REST = "rest"     # always emit a rest marker


@dataclass
class _Candidate:
    degree: ScaleDegree
    start_ms: int
    last_ms: int
    pitches: list[float] = field(default_factory=list)


class NoteSegmenter:
    """Two-state machine: idle, or accumulating an open candidate note.

    Consecutive samples of the same degree (or within ``extend_cents`` of
    the previous sample's pitch) extend the candidate. Any other sample
    finalizes it and opens a new one.
    """

    def __init__(
        self,
        policy: ShortNotePolicy = ShortNotePolicy.MERGE,
        extend_cents: float = 50.0,
        glide_threshold_hz: float = 20.0,
        max_duration_ms: int = MAX_NOTE_MS,
    ):
        self.policy = ShortNotePolicy(policy)
        self.extend_cents = extend_cents
        self.glide_threshold_hz = glide_threshold_hz
        self.max_duration_ms = max_duration_ms
        self.notes: list[Note] = []
        self.candidate: _Candidate | None = None

    @property
    def is_idle(self) -> bool:
        return self.candidate is None

    def reset(self) -> None:
        self.notes = []
        self.candidate = None

    def _continues(self, degree: ScaleDegree, pitch_hz: float | None) -> bool:
        c = self.candidate
        if degree.key == c.degree.key:
            return True
        if pitch_hz and c.pitches:
            return abs(1200 * math.log2(pitch_hz / c.pitches[-1])) < self.extend_cents
        return False

    def push(
        self,
        degree: ScaleDegree,
        timestamp_ms: int,
        pitch_hz: float | None = None,
        min_duration_ms: int = DEFAULT_MIN_NOTE_MS,
    ) -> Note | None:
        """Feed one sample. Returns a note if this sample appended one."""
        if self.candidate is not None and self._continues(degree, pitch_hz):
            self.candidate.last_ms = timestamp_ms
            if pitch_hz:
                self.candidate.pitches.append(pitch_hz)
            return None

        emitted = None
        if self.candidate is not None:
            emitted = self._finalize(timestamp_ms - self.candidate.start_ms, min_duration_ms)

        self.candidate = _Candidate(
            degree=degree,
            start_ms=timestamp_ms,
            last_ms=timestamp_ms,
            pitches=[pitch_hz] if pitch_hz else [],
        )
        return emitted

    def flush(
        self,
        end_ms: int | None = None,
        min_duration_ms: int = DEFAULT_MIN_NOTE_MS,
    ) -> Note | None:
        """Finalize the open candidate at stream end."""
        if self.candidate is None:
            return None
        end = end_ms if end_ms is not None else self.candidate.last_ms
        duration_ms = min(end - self.candidate.start_ms, self.max_duration_ms)
        emitted = self._finalize(duration_ms, min_duration_ms)
        self.candidate = None
        return emitted

    def _finalize(self, duration_ms: int, min_duration_ms: int) -> Note | None:
        c = self.candidate
        duration_ms = int(max(0, duration_ms))
        prev = self.notes[-1] if self.notes else None

        pitch = float(np.median(c.pitches)) if c.pitches else 0.0
        is_glide = bool(c.pitches) and (max(c.pitches) - min(c.pitches)) > self.glide_threshold_hz

        if duration_ms >= min_duration_ms:
            # Same degree resuming after a merged blip: one continuous note
            if prev is not None and not prev.is_rest and prev.scale_degree.key == c.degree.key:
                prev.duration_ms += duration_ms
                prev.is_glide = prev.is_glide or is_glide
                return None
            note = Note(
                scale_degree=c.degree,
                start_time_ms=c.start_ms,
                duration_ms=duration_ms,
                source_pitch_hz=pitch,
                is_glide=is_glide,
            )
            self.notes.append(note)
            return note

        if self.policy is ShortNotePolicy.MERGE and prev is not None:
            logger.debug(f"Merging {duration_ms}ms blip into previous note")
            prev.duration_ms += duration_ms
            return None

        if prev is not None and prev.is_rest:
            prev.duration_ms += duration_ms
            return None

        rest = Note(
            scale_degree=None,
            start_time_ms=c.start_ms,
            duration_ms=duration_ms,
            source_pitch_hz=0.0,
        )
        self.notes.append(rest)
        return rest


def duration_units(duration_ms: float) -> int:
    """Extra notation units a note of this length carries (0 for short notes)."""
    if duration_ms <= BASE_DURATION_MS:
        return 0
    return int((duration_ms - BASE_DURATION_MS) // UNIT_DURATION_MS)


def duration_marker(duration_ms: float) -> str:
    """Encode duration units, preferring paired markers over single ones."""
    pairs, single = divmod(duration_units(duration_ms), 2)
    return PAIRED_UNIT_MARKER * pairs + SINGLE_UNIT_MARKER * single


def classify_duration(duration_ms: float) -> str:
    """Coarse duration class used for display styling."""
    if duration_ms < 300:
        return "short"
    elif duration_ms < 800:
        return "medium"
    elif duration_ms < 1500:
        return "long"
    return "very-long"
