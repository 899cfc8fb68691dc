"""
Synthetic dive profile generator.

Generates sample sequences shaped like what a dive computer records:
- Square profiles (constant depth)
- Multi-level profiles (stepped depths)
- Square profiles with decompression stops and an optional deco gas
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .samples import DiveInput, GasMix, Sample


@dataclass
class DiveProfile:
    """A generated dive: samples in seconds plus the gas mixes they refer to."""

    samples: List[Sample] = field(default_factory=list)
    gas_mixes: List[GasMix] = field(default_factory=list)
    name: str = "unnamed"
    max_depth: float = 0.0
    bottom_time: float = 0.0  # minutes

    def add_sample(
        self, t_sec: int, depth: float, gasmix_index: int = 0, temp_c: float = 20.0
    ):
        """Append a sample. Depth in meters, time in seconds from dive start."""
        self.samples.append(
            Sample(t_sec=t_sec, depth_m=depth, temp_c=temp_c, gasmix_index=gasmix_index)
        )
        if depth > self.max_depth:
            self.max_depth = depth

    @property
    def duration_sec(self) -> int:
        if not self.samples:
            return 0
        return self.samples[-1].t_sec - self.samples[0].t_sec

    def dive_input(self, start_time_unix: int = 0) -> DiveInput:
        """Dive record matching this profile, starting at `start_time_unix`."""
        return DiveInput(
            start_time_unix=start_time_unix,
            end_time_unix=start_time_unix + self.duration_sec,
            bottom_time_sec=int(self.bottom_time * 60),
        )


class ProfileGenerator:
    """Generate dive profiles for tests and the command line."""

    def __init__(
        self,
        descent_rate: float = 20.0,  # m/min
        ascent_rate: float = 10.0,  # m/min (conservative)
        sampling_interval: int = 60,  # seconds
        water_temp_c: float = 20.0,
    ):
        if sampling_interval <= 0:
            raise ValueError(f"sampling_interval must be positive, got {sampling_interval}")
        if descent_rate <= 0 or ascent_rate <= 0:
            raise ValueError("descent_rate and ascent_rate must be positive")
        self.descent_rate = descent_rate
        self.ascent_rate = ascent_rate
        self.sampling_interval = int(sampling_interval)
        self.water_temp_c = water_temp_c

    def _travel(
        self, profile: DiveProfile, t: int, current: float, target: float, mix: int
    ) -> Tuple[int, float]:
        """Move from `current` to `target` at the descent or ascent rate."""
        step_min = self.sampling_interval / 60.0
        while current < target:
            profile.add_sample(t, current, mix, self.water_temp_c)
            current = min(current + self.descent_rate * step_min, target)
            t += self.sampling_interval
        while current > target:
            profile.add_sample(t, current, mix, self.water_temp_c)
            current = max(current - self.ascent_rate * step_min, target)
            t += self.sampling_interval
        return t, current

    def _hold(
        self, profile: DiveProfile, t: int, depth: float, minutes: float, mix: int
    ) -> int:
        end = t + int(round(minutes * 60))
        while t < end:
            profile.add_sample(t, depth, mix, self.water_temp_c)
            t += self.sampling_interval
        return t

    def _finish(self, profile: DiveProfile, t: int, current: float, mix: int) -> DiveProfile:
        """Final ascent followed by one minute at the surface."""
        t, _ = self._travel(profile, t, current, 0.0, mix)
        t = self._hold(profile, t, 0.0, 1.0, mix)
        profile.add_sample(t, 0.0, mix, self.water_temp_c)
        return profile

    def generate_square(
        self, depth: float, bottom_time: float, fO2: float = 0.21, fHe: float = 0.0
    ) -> DiveProfile:
        """
        Generate a square profile (simple recreational dive).

        Args:
            depth: Maximum depth in meters
            bottom_time: Time at depth in minutes
            fO2: Oxygen fraction
            fHe: Helium fraction
        """
        profile = DiveProfile(
            gas_mixes=[GasMix(0, fO2, fHe)], name=f"square_{depth}m_{bottom_time}min"
        )
        profile.bottom_time = bottom_time

        t, current = self._travel(profile, 0, 0.0, depth, 0)
        t = self._hold(profile, t, depth, bottom_time, 0)
        return self._finish(profile, t, current, 0)

    def generate_multilevel(
        self, levels: List[Tuple[float, float]], fO2: float = 0.21, fHe: float = 0.0
    ) -> DiveProfile:
        """
        Generate a multi-level profile.

        Args:
            levels: List of (depth, duration) tuples, deepest first
            fO2: Oxygen fraction
            fHe: Helium fraction
        """
        profile = DiveProfile(
            gas_mixes=[GasMix(0, fO2, fHe)], name=f"multilevel_{len(levels)}levels"
        )
        profile.bottom_time = sum(d[1] for d in levels)

        t = 0
        current = 0.0
        for target_depth, duration in levels:
            t, current = self._travel(profile, t, current, target_depth, 0)
            t = self._hold(profile, t, target_depth, duration, 0)

        return self._finish(profile, t, current, 0)

    def generate_deco_square(
        self,
        depth: float,
        bottom_time: float,
        deco_stops: List[Tuple[float, float]],
        fO2: float = 0.21,
        fHe: float = 0.0,
        deco_gas: Optional[Tuple[float, float]] = None,
        switch_depth: Optional[float] = None,
    ) -> DiveProfile:
        """Generate a square profile with explicit decompression stops.

        Args:
            depth: Bottom depth in meters
            bottom_time: Time at depth in minutes
            deco_stops: List of (stop_depth_m, stop_duration_min) tuples, deepest first
            fO2: Oxygen fraction of the bottom gas
            fHe: Helium fraction of the bottom gas
            deco_gas: (fO2, fHe) of a deco gas, recorded as mix index 1
            switch_depth: the deco gas is switched to on arrival at the first
                stop at or shallower than this depth (first stop when None)
        """
        stop_desc = "+".join(f"{d:.0f}m/{t:.0f}min" for d, t in deco_stops) if deco_stops else "nodeco"
        profile = DiveProfile(
            gas_mixes=[GasMix(0, fO2, fHe)],
            name=f"deco_{depth}m_{bottom_time}min_{stop_desc}",
        )
        profile.bottom_time = bottom_time
        if deco_gas is not None:
            profile.gas_mixes.append(GasMix(1, deco_gas[0], deco_gas[1]))

        mix = 0
        t, current = self._travel(profile, 0, 0.0, depth, mix)
        t = self._hold(profile, t, depth, bottom_time, mix)

        for stop_depth, stop_duration in deco_stops:
            t, current = self._travel(profile, t, current, stop_depth, mix)
            if (
                deco_gas is not None
                and mix == 0
                and (switch_depth is None or stop_depth <= switch_depth)
            ):
                mix = 1
            t = self._hold(profile, t, stop_depth, stop_duration, mix)

        return self._finish(profile, t, current, mix)
