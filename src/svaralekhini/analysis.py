"""Audio analysis utilities: WAV I/O, RMS energy, frame slicing.

All functions operate on numpy arrays (float64, normalized to [-1, 1]).
WAV I/O uses scipy.io.wavfile for lightweight reading without ffmpeg.
"""

from collections.abc import Iterator
from pathlib import Path

import numpy as np
import scipy.io.wavfile as wavfile


# ---------------------------------------------------------------------------
# WAV I/O
# ---------------------------------------------------------------------------

def read_wav(path: str | Path) -> tuple[np.ndarray, int]:
    """Read a WAV file and return (samples, sample_rate).

    - Normalizes int16/int32 to float64 in [-1, 1]
    - Converts unsigned 8-bit PCM around its midpoint
    - Passes through float WAVs as float64
    - Takes the first channel if stereo

    Raises:
        FileNotFoundError: if the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    sr, data = wavfile.read(str(path))

    # Take first channel if stereo/multi-channel
    if data.ndim > 1:
        data = data[:, 0]

    if data.dtype == np.uint8:
        samples = (data.astype(np.float64) - 128.0) / 128.0
    elif np.issubdtype(data.dtype, np.integer):
        info = np.iinfo(data.dtype)
        samples = data.astype(np.float64) / max(abs(info.min), abs(info.max))
    else:
        samples = data.astype(np.float64)

    return samples, sr


# ---------------------------------------------------------------------------
# RMS Energy
# ---------------------------------------------------------------------------

def compute_rms(samples: np.ndarray) -> float:
    """Compute RMS energy of the entire signal."""
    if len(samples) == 0:
        return 0.0
    samples = np.asarray(samples, dtype=np.float64)
    return float(np.sqrt(np.mean(samples ** 2)))


# ---------------------------------------------------------------------------
# Framing
# ---------------------------------------------------------------------------

def iter_frames(
    samples: np.ndarray,
    sr: int,
    frame_size: int = 2048,
    hop_size: int | None = None,
) -> Iterator[tuple[int, np.ndarray]]:
    """Slice a signal into fixed-size frames, as a live capture buffer would.

    Yields (timestamp_ms, frame) pairs. The timestamp marks the end of the
    frame, i.e. the moment a live analyser would have delivered it. A
    trailing partial frame is dropped.
    """
    if frame_size <= 0:
        raise ValueError(f"frame_size must be positive, got {frame_size}")
    hop = hop_size or frame_size
    if hop <= 0:
        raise ValueError(f"hop_size must be positive, got {hop}")

    if len(samples) < frame_size:
        return

    n_frames = (len(samples) - frame_size) // hop + 1
    for i in range(n_frames):
        start = i * hop
        end = start + frame_size
        yield int(round(end * 1000 / sr)), samples[start:end]
