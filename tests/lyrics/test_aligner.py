"""Tests for syllable-to-note alignment."""

import pytest

from svaralekhini.lyrics.aligner import (
    Direction,
    build_line,
    initial_mapping,
    reconcile,
    relocate,
    relocate_syllable,
    smart_align,
    syllable_weight,
)
from svaralekhini.types import Note, ScaleDegree


def _notes(*durations):
    notes, start = [], 0
    for i, d in enumerate(durations):
        notes.append(Note(ScaleDegree(i % 12, 0, 0.0), start, d, 261.63))
        start += d
    return notes


class TestInitialMapping:
    @pytest.mark.parametrize("notes,syllables,expected", [
        (4, 4, [0, 1, 2, 3]),
        (8, 4, [0, 2, 4, 6]),
        (4, 8, [0, 0, 1, 1, 2, 2, 3, 3]),
        (3, 1, [0]),
    ])
    def test_even_spread(self, notes, syllables, expected):
        assert initial_mapping(notes, syllables) == expected

    def test_no_notes(self):
        assert initial_mapping(0, 3) == [None, None, None]

    def test_no_syllables(self):
        assert initial_mapping(5, 0) == []


class TestReconcile:
    def test_collision_bumped_in_order(self):
        assert reconcile([0, 2, 2, 3]) == [0, 2, 3, 4]

    def test_result_strictly_increasing(self):
        result = reconcile([0, 0, 1, 1, 2, 2])
        assert all(a < b for a, b in zip(result, result[1:]))

    def test_keeps_relative_order_of_ties(self):
        # Syllable 1 was moved onto syllable 2's note and stays before it
        assert reconcile([0, 3, 3]) == [0, 3, 4]

    def test_unmapped_untouched(self):
        assert reconcile([None, None]) == [None, None]


class TestRelocate:
    def test_move_right(self):
        assert relocate([0, 2, 4, 6], 1, Direction.RIGHT, 8) == [0, 3, 4, 6]

    def test_move_onto_neighbour_reconciles(self):
        assert relocate([0, 1, 2, 3], 1, Direction.RIGHT, 4) == [0, 2, 3, 4]

    def test_clamped_move_is_noop(self):
        assert relocate([0, 1, 2, 3], 0, Direction.LEFT, 4) == [0, 1, 2, 3]
        assert relocate([0, 1, 2, 3], 3, Direction.RIGHT, 4) == [0, 1, 2, 3]

    def test_unmapped_and_out_of_range_are_noops(self):
        assert relocate([None], 0, Direction.RIGHT, 0) == [None]
        assert relocate([0, 1], 5, Direction.LEFT, 2) == [0, 1]

    def test_accepts_plain_int_direction(self):
        assert relocate([0, 2], 1, -1, 3) == [0, 1]


class TestRelocateSyllable:
    def test_pads_notes_for_overflow(self):
        line = build_line(["a", "b", "c", "d"], _notes(200, 200, 200, 200))
        assert relocate_syllable(line, 1, Direction.RIGHT)
        assert line.syllable_to_note_mapping == [0, 2, 3, 4]
        assert len(line.notes) == 5
        assert line.notes[4] is None

    def test_noop_returns_false(self):
        line = build_line(["a", "b"], _notes(200, 200))
        assert not relocate_syllable(line, 0, Direction.LEFT)


class TestSyllableWeight:
    def test_empty(self):
        assert syllable_weight("  ") == 0.0

    def test_longer_weighs_more(self):
        assert syllable_weight("star") > syllable_weight("a")

    def test_long_vowel_bonus(self):
        assert syllable_weight("naa") > syllable_weight("nam")
        assert syllable_weight("nā") > syllable_weight("na")

    def test_cluster_bonus(self):
        assert syllable_weight("stra") > syllable_weight("sara")

    def test_indic_long_vowel_and_conjunct(self):
        assert syllable_weight("रा") > syllable_weight("र")
        assert syllable_weight("स्ते") > syllable_weight("सते")


class TestSmartAlign:
    def test_equal_weights_split_by_duration(self):
        notes = _notes(200, 200, 200)
        line = smart_align(["a", "a"], notes)
        assert line.syllables == ["a", None, "a"]
        assert line.notes == notes
        assert line.syllable_to_note_mapping == [0, 1, 2]

    def test_heavier_syllable_gets_more_notes(self):
        notes = _notes(100, 100, 100, 100, 100, 100)
        line = smart_align(["a", "straa"], notes)
        assert line.syllables == ["a", None, "straa", None, None, None]

    def test_never_drops_notes(self):
        notes = _notes(120, 480, 90, 300, 250, 60, 700)
        line = smart_align(["ka", "maa", None, "la", "ne"], notes + [None])
        assert line.real_notes == notes
        assert [s for s in line.syllables if s] == ["ka", "maa", "la", "ne"]
        assert len(line.syllables) == len(line.notes) == len(line.syllable_to_note_mapping)

    def test_more_syllables_than_notes(self):
        notes = _notes(300)
        line = smart_align(["a", "b", "c"], notes)
        assert [s for s in line.syllables if s] == ["a", "b", "c"]
        assert line.real_notes == notes

    def test_no_syllables(self):
        notes = _notes(200, 200)
        line = smart_align([], notes)
        assert line.syllables == [None, None]
        assert line.notes == notes

    def test_no_notes(self):
        line = smart_align(["a", "b"], [])
        assert line.syllables == ["a", "b"]
        assert line.notes == [None, None]
