"""Align lyric syllables with segmented notes."""

import logging
import re
from enum import IntEnum
from itertools import accumulate

from svaralekhini.types import Line, Note

logger = logging.getLogger(__name__)


class Direction(IntEnum):
    LEFT = -1
    RIGHT = 1


# ---------------------------------------------------------------------------
# Position mapping
# ---------------------------------------------------------------------------

def initial_mapping(note_count: int, syllable_count: int) -> list[int | None]:
    """Spread syllables evenly over notes, preserving order.

    With more syllables than notes several syllables share a note, so the
    result is non-decreasing rather than strictly increasing. Without notes
    every syllable is unmapped.
    """
    if note_count <= 0:
        return [None] * syllable_count
    return [i * note_count // syllable_count for i in range(syllable_count)]


def reconcile(mapping: list[int | None]) -> list[int | None]:
    """Resolve collisions so every syllable owns a distinct note position.

    Syllables are visited in order of their target (ties by syllable
    order); a target that is already claimed is bumped to the next free
    position. Relative order is preserved and the result strictly
    increases.
    """
    if any(m is None for m in mapping):
        return list(mapping)

    order = sorted(range(len(mapping)), key=lambda i: mapping[i])
    result = list(mapping)
    claimed: set[int] = set()
    for syllable_index in order:
        position = mapping[syllable_index]
        while position in claimed:
            position += 1
        result[syllable_index] = position
        claimed.add(position)
    return result


def relocate(
    mapping: list[int | None],
    syllable_index: int,
    direction: Direction | int,
    note_count: int,
) -> list[int | None]:
    """Move one syllable a single note left or right, then reconcile.

    Moves are clamped to [0, note_count - 1]; a move that goes nowhere
    leaves the mapping untouched.
    """
    if not 0 <= syllable_index < len(mapping) or mapping[syllable_index] is None:
        logger.debug(f"Ignoring relocation of unmapped syllable {syllable_index}")
        return list(mapping)

    current = mapping[syllable_index]
    target = max(0, min(note_count - 1, current + int(direction)))
    if target == current:
        return list(mapping)

    moved = list(mapping)
    moved[syllable_index] = target
    return reconcile(moved)


def build_line(syllables: list[str | None], notes: list[Note | None]) -> Line:
    """Line with the even initial mapping."""
    return Line(
        syllables=list(syllables),
        notes=list(notes),
        syllable_to_note_mapping=initial_mapping(len(notes), len(syllables)),
    )


def relocate_syllable(line: Line, syllable_index: int, direction: Direction | int) -> bool:
    """Relocate within a line, padding its notes so the mapping stays valid.

    Returns True if the mapping changed.
    """
    before = line.syllable_to_note_mapping
    after = relocate(before, syllable_index, direction, len(line.notes))
    if after == before:
        return False
    line.syllable_to_note_mapping = after
    line.pad_notes(max(m for m in after if m is not None) + 1)
    return True


# ---------------------------------------------------------------------------
# Duration-weighted alignment
# ---------------------------------------------------------------------------

_LATIN_LONG_VOWEL = re.compile(r"aa|ee|ii|oo|uu|ai|au|ou|[āīūēōṝḹ]", re.IGNORECASE)
_LATIN_CLUSTER = re.compile(r"[bcdfghjklmnpqrstvwxyzṃḥṅñṭḍṇśṣ]{2,}", re.IGNORECASE)

# Long vowels, independent and as vowel signs, at offsets shared by the
# Devanagari, Kannada and Telugu blocks
_INDIC_BLOCKS = (0x0900, 0x0C00, 0x0C80)
_INDIC_LONG = {0x06, 0x08, 0x0A, 0x0F, 0x10, 0x13, 0x14, 0x3E, 0x40, 0x42, 0x47, 0x48, 0x4B, 0x4C}
_INDIC_VIRAMA = 0x4D

LENGTH_WEIGHT = 0.2
LONG_VOWEL_WEIGHT = 0.5
CLUSTER_WEIGHT = 0.25


def _indic_offset(char: str) -> int | None:
    code = ord(char)
    for base in _INDIC_BLOCKS:
        if base <= code < base + 0x80:
            return code - base
    return None


def syllable_weight(text: str) -> float:
    """Relative singing length of a syllable.

    Longer syllables weigh more; long vowels and consonant clusters
    (Latin consonant runs, Indic conjuncts via virama) add extra weight.
    """
    text = text.strip()
    if not text:
        return 0.0

    weight = 1.0 + LENGTH_WEIGHT * (len(text) - 1)
    weight += LONG_VOWEL_WEIGHT * len(_LATIN_LONG_VOWEL.findall(text))
    weight += CLUSTER_WEIGHT * len(_LATIN_CLUSTER.findall(text))

    for char in text:
        offset = _indic_offset(char)
        if offset in _INDIC_LONG:
            weight += LONG_VOWEL_WEIGHT
        elif offset == _INDIC_VIRAMA:
            weight += CLUSTER_WEIGHT
    return weight


def smart_align(syllables: list[str | None], notes: list[Note | None]) -> Line:
    """Redistribute notes over syllables in proportion to syllable weight.

    Each syllable's share of the total note duration is its share of the
    total weight. Notes are consumed in order while taking the next note
    brings the running duration closer to the syllable's cumulative
    target; the final syllable takes every remaining note, so none is
    dropped.

    Returns a line in parallel slot layout: slot i pairs syllables[i] with
    notes[i], either of which may be an empty slot, and the mapping is the
    identity.
    """
    texts = [s for s in syllables if s]
    real = [n for n in notes if n is not None]

    slots: list[tuple[str | None, Note | None]] = []
    if not texts:
        slots = [(None, n) for n in real]
    elif not real:
        slots = [(s, None) for s in texts]
    else:
        weights = [syllable_weight(s) for s in texts]
        total_weight = sum(weights)
        if total_weight <= 0:
            weights = [1.0] * len(texts)
            total_weight = float(len(texts))
        total_ms = sum(n.duration_ms for n in real)
        boundaries = [w / total_weight * total_ms for w in accumulate(weights)]

        cursor = 0
        consumed = 0.0
        for i, syllable in enumerate(texts):
            if i == len(texts) - 1:
                assigned = real[cursor:]
                cursor = len(real)
            else:
                assigned = []
                while cursor < len(real):
                    duration = real[cursor].duration_ms
                    if abs(consumed + duration - boundaries[i]) > abs(consumed - boundaries[i]):
                        break
                    assigned.append(real[cursor])
                    consumed += duration
                    cursor += 1

            if not assigned:
                slots.append((syllable, None))
            else:
                slots.append((syllable, assigned[0]))
                slots.extend((None, n) for n in assigned[1:])

    logger.debug(f"Smart-aligned {len(texts)} syllables over {len(real)} notes into {len(slots)} slots")
    return Line(
        syllables=[s for s, _ in slots],
        notes=[n for _, n in slots],
        syllable_to_note_mapping=list(range(len(slots))),
    )
