"""
Variable mappings that dive and segment formulas are evaluated against.
"""

from typing import Dict, Mapping, MutableMapping, Optional

from .metrics import DiveStats, SegmentStats

METERS_TO_FEET = 3.28084

_DEPTH_KEYS = ("max_depth", "avg_depth", "weighted_avg_depth", "max_ceiling")
_TEMP_KEYS = ("min_temp", "max_temp", "avg_temp")

# Names a dive formula may reference. Record-level values (cns_percent, otu,
# is_ccr, gas consumption, ...) are supplied by the caller through `extra`.
DIVE_VARIABLES = (
    "max_depth_m",
    "avg_depth_m",
    "weighted_avg_depth_m",
    "max_depth_ft",
    "avg_depth_ft",
    "weighted_avg_depth_ft",
    "bottom_time_sec",
    "bottom_time_min",
    "cns_percent",
    "otu",
    "is_ccr",
    "deco_required",
    "o2_consumed_psi",
    "o2_consumed_bar",
    "o2_rate_cuft_min",
    "o2_rate_l_min",
    "total_time_sec",
    "total_time_min",
    "deco_time_sec",
    "deco_time_min",
    "min_temp_c",
    "max_temp_c",
    "avg_temp_c",
    "min_temp_f",
    "max_temp_f",
    "avg_temp_f",
    "gas_switch_count",
    "max_ceiling_m",
    "max_ceiling_ft",
    "max_gf99",
    "descent_rate_m_min",
    "ascent_rate_m_min",
)

SEGMENT_VARIABLES = (
    "start_t_sec",
    "end_t_sec",
    "duration_sec",
    "duration_min",
    "max_depth_m",
    "avg_depth_m",
    "max_depth_ft",
    "avg_depth_ft",
    "min_temp_c",
    "max_temp_c",
    "min_temp_f",
    "max_temp_f",
    "deco_time_sec",
    "deco_time_min",
    "sample_count",
)

# Record-level dive values that default to 0 when the caller has none
_DIVE_RECORD_DEFAULTS = (
    "cns_percent",
    "otu",
    "is_ccr",
    "o2_consumed_psi",
    "o2_consumed_bar",
    "o2_rate_cuft_min",
    "o2_rate_l_min",
)


def add_imperial_variables(variables: MutableMapping[str, float]) -> None:
    """Add *_ft and *_f twins of every metric depth and temperature present."""
    for key in _DEPTH_KEYS:
        if f"{key}_m" in variables:
            variables[f"{key}_ft"] = variables[f"{key}_m"] * METERS_TO_FEET
    for key in _TEMP_KEYS:
        if f"{key}_c" in variables:
            variables[f"{key}_f"] = variables[f"{key}_c"] * 9.0 / 5.0 + 32.0


def dive_variables(
    stats: DiveStats, extra: Optional[Mapping[str, float]] = None
) -> Dict[str, float]:
    """Build the variable mapping for a dive formula.

    `extra` carries values that live on the dive record rather than in the
    samples; booleans are stored as 1.0/0.0.
    """
    variables = {key: 0.0 for key in _DIVE_RECORD_DEFAULTS}
    variables.update(
        {
            "max_depth_m": stats.max_depth_m,
            "deco_required": 1.0 if stats.deco_time_sec > 0 else 0.0,
            "avg_depth_m": stats.avg_depth_m,
            "weighted_avg_depth_m": stats.weighted_avg_depth_m,
            "bottom_time_sec": float(stats.bottom_time_sec),
            "bottom_time_min": stats.bottom_time_sec / 60.0,
            "total_time_sec": float(stats.total_time_sec),
            "total_time_min": stats.total_time_sec / 60.0,
            "deco_time_sec": float(stats.deco_time_sec),
            "deco_time_min": stats.deco_time_sec / 60.0,
            "min_temp_c": stats.min_temp_c,
            "max_temp_c": stats.max_temp_c,
            "avg_temp_c": stats.avg_temp_c,
            "gas_switch_count": float(stats.gas_switch_count),
            "max_ceiling_m": stats.max_ceiling_m,
            "max_gf99": stats.max_gf99,
            "descent_rate_m_min": stats.descent_rate_m_min,
            "ascent_rate_m_min": stats.ascent_rate_m_min,
        }
    )
    if extra:
        variables.update({name: float(value) for name, value in extra.items()})
    add_imperial_variables(variables)
    return variables


def segment_variables(
    start_t_sec: int, end_t_sec: int, stats: SegmentStats
) -> Dict[str, float]:
    """Build the variable mapping for a segment formula."""
    variables = {
        "start_t_sec": float(start_t_sec),
        "end_t_sec": float(end_t_sec),
        "duration_sec": float(stats.duration_sec),
        "duration_min": stats.duration_sec / 60.0,
        "max_depth_m": stats.max_depth_m,
        "avg_depth_m": stats.avg_depth_m,
        "min_temp_c": stats.min_temp_c,
        "max_temp_c": stats.max_temp_c,
        "deco_time_sec": float(stats.deco_time_sec),
        "deco_time_min": stats.deco_time_sec / 60.0,
        "sample_count": float(stats.sample_count),
    }
    add_imperial_variables(variables)
    return variables
