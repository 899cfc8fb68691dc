"""
Entry points for the host application.

Plain functions over plain data. Formula validation reports problems as a
message string (None when valid); evaluation raises FormulaError.
"""

import logging
from typing import Iterable, List, Mapping, Optional, Sequence

import formula
from formula import FormulaError, FunctionInfo

from . import buhlmann_engine, metrics
from .formula_variables import (
    DIVE_VARIABLES,
    SEGMENT_VARIABLES,
    dive_variables,
    segment_variables,
)
from .metrics import DEFAULT_SETTINGS, DiveStats, MetricsSettings, SegmentStats
from .samples import DiveInput, GasMix, Sample

logger = logging.getLogger(__name__)


def validate_formula(text: str) -> Optional[str]:
    """Return None if `text` parses, otherwise the error message."""
    try:
        formula.validate(text)
    except FormulaError as e:
        logger.debug(f"Rejected formula {text!r}: {e}")
        return str(e)
    return None


def validate_formula_with_variables(text: str, available: Iterable[str]) -> Optional[str]:
    """Like validate_formula, but also rejects references outside `available`."""
    try:
        formula.validate_with_variables(text, available)
    except FormulaError as e:
        logger.debug(f"Rejected formula {text!r}: {e}")
        return str(e)
    return None


def evaluate_formula(text: str, variables: Mapping[str, float]) -> float:
    return formula.compute(text, variables)


def list_supported_functions() -> List[FunctionInfo]:
    return formula.supported_functions()


def compute_dive_stats(
    dive: DiveInput,
    samples: Sequence[Sample],
    settings: MetricsSettings = DEFAULT_SETTINGS,
) -> DiveStats:
    return metrics.compute_dive_stats(dive, samples, settings)


def compute_segment_stats(
    start_t_sec: int, end_t_sec: int, samples: Sequence[Sample]
) -> SegmentStats:
    return metrics.compute_segment_stats(start_t_sec, end_t_sec, samples)


def compute_surface_gf(
    samples: Sequence[Sample],
    gas_mixes: Sequence[GasMix] = (),
    surface_pressure_bar: Optional[float] = None,
) -> List[buhlmann_engine.SurfaceGfPoint]:
    """Surface GF per sample; sea-level pressure when `surface_pressure_bar` is None."""
    return buhlmann_engine.compute_surface_gf(samples, gas_mixes, surface_pressure_bar)


def validate_dive_formula(text: str) -> Optional[str]:
    """Validate a formula against the dive variable names."""
    return validate_formula_with_variables(text, DIVE_VARIABLES)


def validate_segment_formula(text: str) -> Optional[str]:
    """Validate a formula against the segment variable names."""
    return validate_formula_with_variables(text, SEGMENT_VARIABLES)


def evaluate_dive_formula(
    text: str,
    dive: DiveInput,
    samples: Sequence[Sample],
    extra: Optional[Mapping[str, float]] = None,
    settings: MetricsSettings = DEFAULT_SETTINGS,
) -> float:
    """Compute the dive's stats and evaluate `text` against them.

    `extra` supplies record-level values such as cns_percent or is_ccr.
    """
    stats = metrics.compute_dive_stats(dive, samples, settings)
    variables = dive_variables(stats, extra)
    logger.debug(f"Evaluating dive formula {text!r} over {len(samples)} samples")
    return formula.compute(text, variables)


def evaluate_segment_formula(
    text: str, start_t_sec: int, end_t_sec: int, samples: Sequence[Sample]
) -> float:
    """Compute stats for the window [start, end] and evaluate `text` against them."""
    stats = metrics.compute_segment_stats(start_t_sec, end_t_sec, samples)
    variables = segment_variables(start_t_sec, end_t_sec, stats)
    logger.debug(
        f"Evaluating segment formula {text!r} over {stats.sample_count} samples "
        f"in [{start_t_sec}, {end_t_sec}]"
    )
    return formula.compute(text, variables)
