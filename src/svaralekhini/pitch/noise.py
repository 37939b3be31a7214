"""Background-noise rejection for pitch frames.

A singer's voice is loud and moves around; fans, hum and room noise are
quiet and sit still. Each rule below is a cheap heuristic on frame energy
and recent pitch history; any one of them marks the frame as noise.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from svaralekhini.analysis import compute_rms
from svaralekhini.types import PitchSample


@dataclass
class NoiseClassifier:
    """Thresholds for the noise rules. Tunable, not derived."""
    low_volume_rms: float = 0.015
    hum_max_hz: float = 150.0
    hum_rms: float = 0.03
    min_history: int = 8            # history must be longer than this
    steady_window: int = 8
    steady_spread_hz: float = 20.0
    steady_rms: float = 0.025
    repeat_window: int = 6
    repeat_rms: float = 0.02

    def is_noise(
        self,
        frequency_hz: float,
        frame: np.ndarray,
        history: Sequence[PitchSample] = (),
    ) -> bool:
        """Return True if the frame looks like background noise."""
        rms = compute_rms(frame)

        if rms < self.low_volume_rms:
            return True

        # Fan / mains hum: low and not loud
        if frequency_hz < self.hum_max_hz and rms < self.hum_rms:
            return True

        if len(history) > self.min_history:
            recent = [s.frequency_hz for s in list(history)[-self.steady_window:]]
            mean = sum(recent) / len(recent)
            if all(abs(f - mean) < self.steady_spread_hz for f in recent) and rms < self.steady_rms:
                return True

            keys = [s.scale_degree.key for s in list(history)[-self.repeat_window:]]
            if all(k == keys[0] for k in keys) and rms < self.repeat_rms:
                return True

        return False


_default = NoiseClassifier()


def is_noise(
    frequency_hz: float,
    frame: np.ndarray,
    history: Sequence[PitchSample] = (),
) -> bool:
    """Classify a frame with the default thresholds."""
    return _default.is_noise(frequency_hz, frame, history)
