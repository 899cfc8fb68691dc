"""
Dive and segment statistics computed from raw samples.

Pure functions over plain data: no storage, no side effects.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .samples import DiveInput, Sample

logger = logging.getLogger(__name__)

BOTTOM_DEPTH_THRESHOLD_M = 3.0
SETPOINT_SWITCH_THRESHOLD = 0.1  # bar

GAS_SWITCH_SOURCES = ("gasmix", "setpoint")


class DepthClass(Enum):
    """Classification of the maximum depth of a dive."""

    RECREATIONAL = "Recreational"  # 0-18 m
    DEEP = "Deep"  # 18-40 m
    EXTENDED = "Extended Range"  # 40-60 m
    EXTREME = "Extreme"  # 60 m+

    @classmethod
    def from_depth_m(cls, depth: float) -> "DepthClass":
        if depth <= 18.0:
            return cls.RECREATIONAL
        if depth <= 40.0:
            return cls.DEEP
        if depth <= 60.0:
            return cls.EXTENDED
        return cls.EXTREME

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class MetricsSettings:
    """Knobs for the aggregation.

    gas_switch_source: "gasmix" counts changes of the sample gas-mix index
        (open circuit); "setpoint" counts setpoint changes larger than
        ``setpoint_switch_threshold`` (closed circuit).
    """

    gas_switch_source: str = "gasmix"
    setpoint_switch_threshold: float = SETPOINT_SWITCH_THRESHOLD
    bottom_depth_threshold_m: float = BOTTOM_DEPTH_THRESHOLD_M

    def __post_init__(self):
        if self.gas_switch_source not in GAS_SWITCH_SOURCES:
            raise ValueError(
                f"gas_switch_source must be one of {GAS_SWITCH_SOURCES}, "
                f"got {self.gas_switch_source!r}"
            )
        if self.setpoint_switch_threshold < 0:
            raise ValueError(
                f"setpoint_switch_threshold must be >= 0, got {self.setpoint_switch_threshold}"
            )


DEFAULT_SETTINGS = MetricsSettings()


@dataclass(frozen=True)
class DiveStats:
    """Computed statistics for a dive."""

    total_time_sec: int
    bottom_time_sec: int  # time deeper than the bottom threshold
    deco_time_sec: int  # time with a ceiling > 0
    max_depth_m: float
    avg_depth_m: float  # plain mean over samples
    weighted_avg_depth_m: float  # time-weighted mean
    min_temp_c: float
    max_temp_c: float
    avg_temp_c: float
    depth_class: DepthClass
    gas_switch_count: int
    max_ceiling_m: float
    max_gf99: float
    descent_rate_m_min: float
    ascent_rate_m_min: float


@dataclass(frozen=True)
class SegmentStats:
    """Computed statistics for a time window of a dive."""

    duration_sec: int
    max_depth_m: float
    avg_depth_m: float
    min_temp_c: float
    max_temp_c: float
    deco_time_sec: int
    sample_count: int


def _interval(samples: Sequence[Sample], i: int) -> int:
    """Seconds attributed to sample i: up to the next sample, or since the
    previous one for the last sample, or 1 for a lone sample."""
    if i + 1 < len(samples):
        return samples[i + 1].t_sec - samples[i].t_sec
    if i > 0:
        return samples[i].t_sec - samples[i - 1].t_sec
    return 1


def _is_gas_switch(
    previous: Optional[Sample], sample: Sample, settings: MetricsSettings
) -> bool:
    if previous is None:
        return False
    if settings.gas_switch_source == "gasmix":
        return previous.gasmix_index != sample.gasmix_index
    return (
        abs(sample.setpoint_ppo2 - previous.setpoint_ppo2)
        > settings.setpoint_switch_threshold
    )


def _switch_signal(sample: Sample, settings: MetricsSettings):
    if settings.gas_switch_source == "gasmix":
        return sample.gasmix_index
    return sample.setpoint_ppo2


def compute_rates(samples: Sequence[Sample]) -> Tuple[float, float]:
    """Average descent and ascent rates in m/min.

    Descent runs from the first sample to the first arrival at maximum depth;
    ascent from the last sample at maximum depth to the final sample. Time
    spent at maximum depth is excluded from both.
    """
    if len(samples) < 2:
        return 0.0, 0.0

    max_depth = max(s.depth_m for s in samples)
    first_max = next(i for i, s in enumerate(samples) if s.depth_m == max_depth)
    last_max = max(i for i, s in enumerate(samples) if s.depth_m == max_depth)

    descent_rate = 0.0
    if first_max > 0:
        dt_min = (samples[first_max].t_sec - samples[0].t_sec) / 60.0
        if dt_min > 0:
            descent_rate = samples[first_max].depth_m / dt_min

    ascent_rate = 0.0
    last = samples[-1]
    if last_max < len(samples) - 1:
        dt_min = (last.t_sec - samples[last_max].t_sec) / 60.0
        if dt_min > 0:
            ascent_rate = (samples[last_max].depth_m - last.depth_m) / dt_min

    return descent_rate, ascent_rate


def compute_dive_stats(
    dive: DiveInput,
    samples: Sequence[Sample],
    settings: MetricsSettings = DEFAULT_SETTINGS,
) -> DiveStats:
    """Aggregate a dive's samples in a single pass."""
    if not samples:
        logger.debug("No samples, dive stats fall back to the dive record")
        return DiveStats(
            total_time_sec=dive.total_time_sec,
            bottom_time_sec=dive.bottom_time_sec,
            deco_time_sec=0,
            max_depth_m=0.0,
            avg_depth_m=0.0,
            weighted_avg_depth_m=0.0,
            min_temp_c=0.0,
            max_temp_c=0.0,
            avg_temp_c=0.0,
            depth_class=DepthClass.RECREATIONAL,
            gas_switch_count=0,
            max_ceiling_m=0.0,
            max_gf99=0.0,
            descent_rate_m_min=0.0,
            ascent_rate_m_min=0.0,
        )

    max_depth_m = 0.0
    depth_sum = 0.0
    weighted_depth_sum = 0.0
    weight_sum = 0.0
    min_temp_c = float("inf")
    max_temp_c = float("-inf")
    temp_sum = 0.0
    bottom_time_sec = 0
    deco_time_sec = 0
    max_ceiling_m = 0.0
    max_gf99 = 0.0
    gas_switch_count = 0
    previous_signal: Optional[Sample] = None

    for i, sample in enumerate(samples):
        dt = _interval(samples, i)

        max_depth_m = max(max_depth_m, sample.depth_m)
        depth_sum += sample.depth_m
        weighted_depth_sum += sample.depth_m * dt
        weight_sum += dt

        min_temp_c = min(min_temp_c, sample.temp_c)
        max_temp_c = max(max_temp_c, sample.temp_c)
        temp_sum += sample.temp_c

        if sample.depth_m > settings.bottom_depth_threshold_m:
            bottom_time_sec += dt

        if sample.ceiling_m is not None:
            if sample.ceiling_m > 0:
                deco_time_sec += dt
            max_ceiling_m = max(max_ceiling_m, sample.ceiling_m)

        if sample.gf99 is not None:
            max_gf99 = max(max_gf99, sample.gf99)

        # Samples without a signal neither count nor reset the comparison
        if _switch_signal(sample, settings) is not None:
            if _is_gas_switch(previous_signal, sample, settings):
                gas_switch_count += 1
            previous_signal = sample

    avg_depth_m = depth_sum / len(samples)
    weighted_avg_depth_m = weighted_depth_sum / weight_sum if weight_sum > 0 else avg_depth_m
    descent_rate, ascent_rate = compute_rates(samples)

    return DiveStats(
        total_time_sec=dive.total_time_sec,
        bottom_time_sec=bottom_time_sec,
        deco_time_sec=deco_time_sec,
        max_depth_m=max_depth_m,
        avg_depth_m=avg_depth_m,
        weighted_avg_depth_m=weighted_avg_depth_m,
        min_temp_c=min_temp_c,
        max_temp_c=max_temp_c,
        avg_temp_c=temp_sum / len(samples),
        depth_class=DepthClass.from_depth_m(max_depth_m),
        gas_switch_count=gas_switch_count,
        max_ceiling_m=max_ceiling_m,
        max_gf99=max_gf99,
        descent_rate_m_min=descent_rate,
        ascent_rate_m_min=ascent_rate,
    )


def samples_in_window(
    start_t_sec: int, end_t_sec: int, samples: Sequence[Sample]
) -> List[Sample]:
    """Samples with start <= t <= end, in their original order."""
    return [s for s in samples if start_t_sec <= s.t_sec <= end_t_sec]


def compute_segment_stats(
    start_t_sec: int, end_t_sec: int, samples: Sequence[Sample]
) -> SegmentStats:
    """Aggregate the samples falling inside the inclusive window [start, end]."""
    window = samples_in_window(start_t_sec, end_t_sec, samples)
    duration_sec = end_t_sec - start_t_sec
    if not window:
        return SegmentStats(duration_sec, 0.0, 0.0, 0.0, 0.0, 0, 0)

    max_depth_m = 0.0
    depth_sum = 0.0
    min_temp_c = float("inf")
    max_temp_c = float("-inf")
    deco_time_sec = 0

    for i, sample in enumerate(window):
        max_depth_m = max(max_depth_m, sample.depth_m)
        depth_sum += sample.depth_m
        min_temp_c = min(min_temp_c, sample.temp_c)
        max_temp_c = max(max_temp_c, sample.temp_c)
        if sample.ceiling_m is not None and sample.ceiling_m > 0:
            deco_time_sec += _interval(window, i)

    return SegmentStats(
        duration_sec=duration_sec,
        max_depth_m=max_depth_m,
        avg_depth_m=depth_sum / len(window),
        min_temp_c=min_temp_c,
        max_temp_c=max_temp_c,
        deco_time_sec=deco_time_sec,
        sample_count=len(window),
    )
