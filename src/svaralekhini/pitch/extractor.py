"""Fundamental-frequency extraction from one frame of audio."""

import numpy as np

from svaralekhini.analysis import compute_rms

SILENCE_RMS = 0.01
TRIM_THRESHOLD = 0.2


def trim_edges(samples: np.ndarray, threshold: float = TRIM_THRESHOLD) -> np.ndarray:
    """Cut the frame at its first near-zero sample on each side.

    Searching only the outer halves, the start moves forward to the first
    sample whose magnitude is below ``threshold``, and the end moves back to
    the last such sample. Starting and ending near a zero crossing keeps
    partial cycles at the edges from skewing the autocorrelation.
    """
    size = len(samples)
    half = size // 2
    quiet = np.abs(samples) < threshold

    start = 0
    head = np.flatnonzero(quiet[:half])
    if len(head):
        start = int(head[0])

    end = size - 1
    tail = np.flatnonzero(quiet[size - half:][::-1][:-1])
    if len(tail):
        end = size - 1 - int(tail[0])

    return samples[start:end]


def autocorrelate(samples: np.ndarray) -> np.ndarray:
    """Un-normalized autocorrelation for lags 0..N-1."""
    n = len(samples)
    return np.correlate(samples, samples, mode="full")[n - 1:]


def refine_peak(corr: np.ndarray, pos: int) -> float:
    """Parabolic interpolation of a correlation peak to sub-sample precision."""
    if pos <= 0 or pos >= len(corr) - 1:
        return float(pos)
    x1, x2, x3 = corr[pos - 1], corr[pos], corr[pos + 1]
    a = (x1 + x3 - 2 * x2) / 2
    b = (x3 - x1) / 2
    if a == 0:
        return float(pos)
    return pos - b / (2 * a)


def extract_pitch(frame: np.ndarray, sample_rate: int) -> float | None:
    """Estimate the fundamental frequency of a frame by autocorrelation.

    Skips the zero-lag peak by walking forward while the correlation is
    still falling, then takes the strongest lag after that dip and refines
    it with parabolic interpolation.

    Returns F0 in Hz, or None for silence or when no usable peak exists.
    """
    samples = np.asarray(frame, dtype=np.float64)
    if len(samples) == 0 or compute_rms(samples) < SILENCE_RMS:
        return None

    trimmed = trim_edges(samples)
    if len(trimmed) < 3:
        return None

    corr = autocorrelate(trimmed)

    dip = 0
    while dip < len(corr) - 1 and corr[dip] > corr[dip + 1]:
        dip += 1
    if dip >= len(corr) - 1:
        return None

    peak = dip + int(np.argmax(corr[dip:]))
    if peak == 0 or peak >= len(corr) - 1:
        return None

    lag = refine_peak(corr, peak)
    if lag <= 0:
        return None
    return float(sample_rate / lag)
