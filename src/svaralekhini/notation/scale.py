"""Frequency -> scale degree mapping, one mapper per tuning system."""

import math
from abc import ABC, abstractmethod

from svaralekhini.types import ScaleDegree, TuningSystem

# Carnatic swarasthana ratios, Sa .. Ni2
JUST_RATIOS = (1.0, 16 / 15, 9 / 8, 6 / 5, 5 / 4, 4 / 3, 45 / 32, 3 / 2, 8 / 5, 5 / 3, 16 / 9, 15 / 8)

A4_HZ = 440.0
OCTAVE_SEARCH = 2


def cents_between(frequency_hz: float, reference_hz: float) -> float:
    """Signed distance in cents from reference to frequency."""
    return 1200 * math.log2(frequency_hz / reference_hz)


def _check_positive(**values: float) -> None:
    for name, value in values.items():
        if not value or value <= 0:
            raise ValueError(f"{name} must be a positive frequency, got {value!r}")


class ScaleMapper(ABC):
    """Maps a frequency to the nearest degree of one tuning system."""

    tuning: TuningSystem

    @abstractmethod
    def map(self, frequency_hz: float, tonic_hz: float) -> ScaleDegree:
        """Return the nearest scale degree. Never fails for valid input."""

    @abstractmethod
    def expected_frequency(self, degree: ScaleDegree, tonic_hz: float) -> float:
        """Exact frequency of a degree (ignoring its deviation)."""


class CarnaticMapper(ScaleMapper):
    """Just-intonation svaras relative to a user-chosen tonic (Sa)."""

    tuning = TuningSystem.CARNATIC

    def map(self, frequency_hz: float, tonic_hz: float) -> ScaleDegree:
        _check_positive(frequency_hz=frequency_hz, tonic_hz=tonic_hz)

        # Sub-harmonic estimates are almost always an octave error
        if frequency_hz < tonic_hz / 2:
            frequency_hz *= 2

        cents = cents_between(frequency_hz, tonic_hz)
        base_octave = math.floor(cents / 1200)

        # Scan neighbouring octaves so estimates just below Sa of the next
        # octave (ratio ~1.99) land on that Sa instead of on Ni2.
        best: tuple[float, int, int] | None = None
        for octave in range(base_octave - OCTAVE_SEARCH, base_octave + OCTAVE_SEARCH + 1):
            for index, ratio in enumerate(JUST_RATIOS):
                target = 1200 * (octave + math.log2(ratio))
                distance = abs(cents - target)
                if best is None or distance < best[0]:
                    best = (distance, index, octave)

        _, index, octave = best
        deviation = cents - 1200 * (octave + math.log2(JUST_RATIOS[index]))
        return ScaleDegree(index=index, octave_offset=octave, cents_deviation=deviation)

    def expected_frequency(self, degree: ScaleDegree, tonic_hz: float) -> float:
        return tonic_hz * JUST_RATIOS[degree.index] * 2 ** degree.octave_offset


class WesternMapper(ScaleMapper):
    """Equal-tempered semitones from A4 = 440 Hz. The tonic is ignored."""

    tuning = TuningSystem.WESTERN

    def __init__(self, reference_hz: float = A4_HZ):
        self.reference_hz = reference_hz

    def map(self, frequency_hz: float, tonic_hz: float | None = None) -> ScaleDegree:
        _check_positive(frequency_hz=frequency_hz)
        semitones = round(12 * math.log2(frequency_hz / self.reference_hz))
        index = semitones % 12
        octave = math.floor(semitones / 12)
        expected = self.reference_hz * 2 ** (semitones / 12)
        return ScaleDegree(
            index=index,
            octave_offset=octave,
            cents_deviation=cents_between(frequency_hz, expected),
        )

    def expected_frequency(self, degree: ScaleDegree, tonic_hz: float | None = None) -> float:
        return self.reference_hz * 2 ** (semitones_from_a4(degree) / 12)


def semitones_from_a4(degree: ScaleDegree) -> int:
    """Signed semitone count of a Western degree relative to A4."""
    return degree.octave_offset * 12 + degree.index


_MAPPERS = {
    TuningSystem.CARNATIC: CarnaticMapper,
    TuningSystem.WESTERN: WesternMapper,
}


def get_mapper(tuning: TuningSystem | str) -> ScaleMapper:
    """Get the mapper for a tuning system ("carnatic" or "western")."""
    try:
        tuning = TuningSystem(tuning)
    except ValueError:
        raise ValueError(
            f"Unknown tuning system: {tuning!r}. Available: {[t.value for t in TuningSystem]}"
        ) from None
    return _MAPPERS[tuning]()


def map_frequency(
    frequency_hz: float,
    tonic_hz: float,
    tuning: TuningSystem | str = TuningSystem.CARNATIC,
) -> ScaleDegree:
    """One-off mapping; sessions should hold a mapper from get_mapper()."""
    return get_mapper(tuning).map(frequency_hz, tonic_hz)
