"""Tests for autocorrelation pitch extraction."""

import numpy as np
import pytest

from svaralekhini.pitch.extractor import (
    autocorrelate,
    extract_pitch,
    refine_peak,
    trim_edges,
)

SR = 44100


def _make_sine(freq: float, n: int = 2048, sr: int = SR, amp: float = 0.5) -> np.ndarray:
    t = np.arange(n) / sr
    return amp * np.sin(2 * np.pi * freq * t)


class TestExtractPitch:
    @pytest.mark.parametrize("freq", [110.0, 196.0, 261.63, 440.0, 880.0])
    def test_sine_within_two_percent(self, freq):
        f0 = extract_pitch(_make_sine(freq), SR)
        assert f0 is not None
        assert f0 == pytest.approx(freq, rel=0.02)

    def test_silence_returns_none(self):
        assert extract_pitch(np.zeros(2048), SR) is None

    def test_quiet_signal_returns_none(self):
        assert extract_pitch(_make_sine(440, amp=0.005), SR) is None

    def test_empty_frame(self):
        assert extract_pitch(np.array([]), SR) is None

    def test_harmonics_keep_fundamental(self):
        t = np.arange(2048) / SR
        frame = 0.4 * np.sin(2 * np.pi * 220 * t) + 0.2 * np.sin(2 * np.pi * 440 * t)
        assert extract_pitch(frame, SR) == pytest.approx(220, rel=0.02)


class TestTrimEdges:
    def test_starts_at_first_quiet_sample(self):
        samples = np.array([0.9, 0.8, 0.1, 0.5, 0.5, 0.5, 0.05, 0.9])
        trimmed = trim_edges(samples, threshold=0.2)
        assert trimmed[0] == 0.1
        assert len(trimmed) < len(samples)

    def test_loud_frame_untouched_at_start(self):
        samples = np.ones(8)
        assert trim_edges(samples)[0] == 1.0


class TestAutocorrelate:
    def test_zero_lag_is_energy(self):
        x = np.array([1.0, -2.0, 3.0])
        corr = autocorrelate(x)
        assert len(corr) == 3
        assert corr[0] == pytest.approx(14.0)
        assert corr[1] == pytest.approx(-8.0)
        assert corr[2] == pytest.approx(3.0)


class TestRefinePeak:
    def test_symmetric_peak_unchanged(self):
        assert refine_peak(np.array([0.0, 1.0, 2.0, 1.0, 0.0]), 2) == pytest.approx(2.0)

    def test_skewed_peak_moves_toward_larger_neighbour(self):
        assert refine_peak(np.array([0.0, 1.0, 2.0, 1.5, 0.0]), 2) > 2.0

    def test_edge_positions_returned_as_is(self):
        corr = np.array([3.0, 2.0, 1.0])
        assert refine_peak(corr, 0) == 0.0
        assert refine_peak(corr, 2) == 2.0
