"""Temporal smoothing of raw pitch estimates."""

import logging
import math
from collections import deque
from enum import Enum

logger = logging.getLogger(__name__)


class StabilizerMode(str, Enum):
    """What to output while the window is not yet consistent."""
    WITHHOLD = "withhold"       # last locked pitch, or nothing
    RESPONSIVE = "responsive"   # the raw estimate


class PitchStabilizer:
    """Median filter over the last few estimates, with fast re-lock.

    Holds a short window of raw estimates. A consistent window locks its
    median. When the median moves further than ``relock_cents`` from the
    locked pitch, the singer changed note: the window restarts from the new
    estimate and that estimate is output immediately.
    """

    def __init__(
        self,
        window_size: int = 5,
        min_samples: int = 3,
        tolerance: float = 0.20,
        relock_cents: float = 100.0,
        mode: StabilizerMode = StabilizerMode.WITHHOLD,
    ):
        if min_samples > window_size:
            raise ValueError(
                f"min_samples ({min_samples}) cannot exceed window_size ({window_size})"
            )
        self.window_size = window_size
        self.min_samples = min_samples
        self.tolerance = tolerance
        self.relock_cents = relock_cents
        self.mode = StabilizerMode(mode)
        self.history: deque[float] = deque(maxlen=window_size)
        self.locked: float | None = None

    def reset(self) -> None:
        self.history.clear()
        self.locked = None

    def _fallback(self, frequency_hz: float) -> float | None:
        if self.mode is StabilizerMode.RESPONSIVE:
            return frequency_hz
        return self.locked

    def stabilize(self, frequency_hz: float) -> float | None:
        """Feed one raw estimate; return the stabilized pitch or None."""
        self.history.append(frequency_hz)

        if len(self.history) < self.min_samples:
            return self._fallback(frequency_hz)

        window = sorted(self.history)
        median = window[len(window) // 2]

        if self.locked is not None:
            jump = abs(1200 * math.log2(median / self.locked))
            if jump > self.relock_cents:
                logger.debug(f"Re-lock {self.locked:.1f} -> {frequency_hz:.1f} Hz ({jump:.0f} cents)")
                self.history.clear()
                self.history.append(frequency_hz)
                self.locked = frequency_hz
                return frequency_hz

        max_variance = median * self.tolerance
        if all(abs(f - median) <= max_variance for f in self.history):
            self.locked = median
            return median

        return self._fallback(frequency_hz)
