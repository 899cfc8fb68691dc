"""
Input records shared by the tissue simulation and the metrics aggregator.

A dive is an ordered sequence of Sample objects. Order is significant: it
defines the time intervals, and nothing in this package re-sorts it.
"""

from dataclasses import dataclass
from typing import Optional

AIR_O2_FRACTION = 0.2095


@dataclass(frozen=True)
class Sample:
    """One point of a recorded dive profile."""

    t_sec: int  # seconds from dive start
    depth_m: float
    temp_c: float = 0.0
    setpoint_ppo2: Optional[float] = None
    ceiling_m: Optional[float] = None
    gf99: Optional[float] = None
    gasmix_index: Optional[int] = None


@dataclass(frozen=True)
class GasMix:
    """Breathing gas keyed by the index samples use to refer to it.

    Fractions are 0.0-1.0; the N2 fraction is whatever is left over.
    """

    mix_index: int
    o2_fraction: float
    he_fraction: float = 0.0

    def __post_init__(self):
        if not (0.0 <= self.o2_fraction <= 1.0):
            raise ValueError(f"o2_fraction must be in [0, 1], got {self.o2_fraction}")
        if not (0.0 <= self.he_fraction <= 1.0):
            raise ValueError(f"he_fraction must be in [0, 1], got {self.he_fraction}")
        if self.o2_fraction + self.he_fraction > 1.0 + 1e-9:
            raise ValueError(
                f"o2_fraction + he_fraction must not exceed 1, "
                f"got {self.o2_fraction + self.he_fraction}"
            )

    @property
    def n2_fraction(self) -> float:
        return max(0.0, 1.0 - self.o2_fraction - self.he_fraction)

    @property
    def label(self) -> str:
        """Conventional name: Air, EAN32, Tx21/35, ..."""
        o2 = int(round(self.o2_fraction * 100))
        he = int(round(self.he_fraction * 100))
        if he > 0:
            return f"Tx{o2}/{he}"
        if o2 == 21:
            return "Air"
        return f"EAN{o2}"


AIR = GasMix(mix_index=0, o2_fraction=AIR_O2_FRACTION, he_fraction=0.0)


@dataclass(frozen=True)
class DiveInput:
    """Dive-level fields the statistics need besides the samples."""

    start_time_unix: int
    end_time_unix: int
    bottom_time_sec: int = 0  # recorded value, used when there are no samples

    @property
    def total_time_sec(self) -> int:
        return self.end_time_unix - self.start_time_unix
