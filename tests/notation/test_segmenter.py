"""Tests for note segmentation and duration markers."""

import pytest

from svaralekhini.notation.segmenter import (
    NoteSegmenter,
    ShortNotePolicy,
    classify_duration,
    duration_marker,
    duration_units,
)
from svaralekhini.types import ScaleDegree

SA = ScaleDegree(0, 0, 0.0)
RI = ScaleDegree(2, 0, 0.0)
PA = ScaleDegree(7, 0, 0.0)


def _feed(seg, degree, times, **kwargs):
    emitted = []
    for t in times:
        note = seg.push(degree, t, **kwargs)
        if note is not None:
            emitted.append(note)
    return emitted


class TestSegmentation:
    def test_single_run_is_one_note(self):
        seg = NoteSegmenter()
        _feed(seg, SA, range(0, 401, 50))
        seg.flush()
        assert len(seg.notes) == 1
        assert seg.notes[0].duration_ms == 400
        assert seg.notes[0].scale_degree.key == SA.key

    def test_blip_merged_into_surrounding_note(self):
        seg = NoteSegmenter()
        _feed(seg, SA, [0, 50, 100, 150])
        _feed(seg, RI, [200])
        _feed(seg, SA, [250, 300, 350, 400])
        seg.flush(end_ms=450)
        assert len(seg.notes) == 1
        assert seg.notes[0].duration_ms == 450

    def test_degree_change_emits_previous(self):
        seg = NoteSegmenter()
        _feed(seg, SA, [0, 100, 200])
        emitted = _feed(seg, PA, [300])
        assert len(emitted) == 1
        assert emitted[0].duration_ms == 300
        assert not seg.is_idle

    def test_flush_keeps_open_candidate(self):
        seg = NoteSegmenter()
        _feed(seg, SA, [0, 100, 200])
        _feed(seg, PA, [300, 400, 500])
        note = seg.flush(end_ms=600)
        assert note is not None
        assert [n.scale_degree.index for n in seg.notes] == [0, 7]
        assert seg.notes[1].duration_ms == 300
        assert seg.is_idle

    def test_flush_when_idle(self):
        assert NoteSegmenter().flush() is None

    def test_flush_duration_clamped(self):
        seg = NoteSegmenter(max_duration_ms=1000)
        seg.push(SA, 0)
        seg.flush(end_ms=50_000)
        assert seg.notes[0].duration_ms == 1000

    def test_long_note_ended_by_degree_change_keeps_full_duration(self):
        seg = NoteSegmenter()
        _feed(seg, SA, range(0, 12_001, 100))
        note = seg.push(PA, 12_100)
        assert note is not None
        assert note.duration_ms == 12_100
        assert note.start_time_ms + note.duration_ms == 12_100

    def test_small_pitch_change_extends(self):
        seg = NoteSegmenter()
        seg.push(SA, 0, pitch_hz=261.63)
        # Different degree label but under 50 cents away
        seg.push(ScaleDegree(1, 0, -40.0), 100, pitch_hz=266.0)
        seg.flush(end_ms=300)
        assert len(seg.notes) == 1
        assert seg.notes[0].duration_ms == 300

    def test_median_pitch_and_glide(self):
        seg = NoteSegmenter(extend_cents=0)
        for t, hz in [(0, 261.0), (100, 262.0), (200, 290.0)]:
            seg.push(SA, t, pitch_hz=hz)
        seg.flush(end_ms=300)
        note = seg.notes[0]
        assert note.source_pitch_hz == pytest.approx(262.0)
        assert note.is_glide

    def test_steady_pitch_is_not_glide(self):
        seg = NoteSegmenter()
        for t in (0, 100, 200):
            seg.push(SA, t, pitch_hz=261.63)
        seg.flush(end_ms=300)
        assert not seg.notes[0].is_glide

    def test_reset(self):
        seg = NoteSegmenter()
        _feed(seg, SA, [0, 200])
        seg.flush()
        seg.reset()
        assert seg.notes == []
        assert seg.is_idle


class TestShortNotePolicy:
    def test_merge_without_previous_makes_rest(self):
        seg = NoteSegmenter(policy=ShortNotePolicy.MERGE)
        seg.push(RI, 0)
        seg.push(SA, 50)
        assert seg.notes[0].is_rest
        assert seg.notes[0].duration_ms == 50

    def test_rest_policy_always_rests(self):
        seg = NoteSegmenter(policy=ShortNotePolicy.REST)
        _feed(seg, SA, [0, 100, 200])
        _feed(seg, RI, [300])
        _feed(seg, SA, [350, 450, 550])
        seg.flush(end_ms=650)
        assert [n.is_rest for n in seg.notes] == [False, True, False]
        assert seg.notes[1].duration_ms == 50

    def test_rest_policy_coalesces_rests(self):
        seg = NoteSegmenter(policy="rest")
        seg.push(RI, 0)
        seg.push(PA, 50)
        seg.push(RI, 100)
        seg.push(SA, 150)
        assert len(seg.notes) == 1
        assert seg.notes[0].is_rest
        assert seg.notes[0].duration_ms == 150

    def test_custom_minimum(self):
        seg = NoteSegmenter()
        seg.push(SA, 0, min_duration_ms=50)
        seg.push(PA, 60, min_duration_ms=50)
        assert not seg.notes[0].is_rest


class TestDurationMarker:
    @pytest.mark.parametrize("ms,marker", [
        (250, ""),
        (300, ""),
        (500, ","),
        (700, ";"),
        (900, ";,"),
        (1100, ";;"),
    ])
    def test_encoding(self, ms, marker):
        assert duration_marker(ms) == marker

    def test_units(self):
        assert duration_units(250) == 0
        assert duration_units(499) == 0
        assert duration_units(700) == 2


class TestClassifyDuration:
    @pytest.mark.parametrize("ms,label", [
        (100, "short"), (300, "medium"), (799, "medium"), (800, "long"), (1500, "very-long"),
    ])
    def test_classes(self, ms, label):
        assert classify_duration(ms) == label
