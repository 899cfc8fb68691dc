"""
Compute core for a dive log: statistics, Surface GF and user formulas.

Modules:
    - samples: Sample, GasMix and DiveInput records
    - buhlmann_constants: ZHL-16C tables and pure tissue math
    - buhlmann_engine: Tissue simulation producing the Surface GF per sample
    - metrics: Dive and segment statistics
    - formula_variables: Variable mappings for dive and segment formulas
    - settings: config.yaml loader
    - profile_generator: Synthetic square, multi-level and deco profiles
    - api: Entry points for the host application
"""

from .samples import AIR, DiveInput, GasMix, Sample
from .buhlmann_engine import SurfaceGfPoint, TissueState
from .metrics import DepthClass, DiveStats, MetricsSettings, SegmentStats
from .formula_variables import DIVE_VARIABLES, SEGMENT_VARIABLES
from .profile_generator import DiveProfile, ProfileGenerator
from .settings import load_effective_config
from .api import (
    compute_dive_stats,
    compute_segment_stats,
    compute_surface_gf,
    evaluate_dive_formula,
    evaluate_formula,
    evaluate_segment_formula,
    list_supported_functions,
    validate_dive_formula,
    validate_formula,
    validate_formula_with_variables,
    validate_segment_formula,
)

__all__ = [
    "AIR",
    "DiveInput",
    "GasMix",
    "Sample",
    "SurfaceGfPoint",
    "TissueState",
    "DepthClass",
    "DiveStats",
    "MetricsSettings",
    "SegmentStats",
    "DIVE_VARIABLES",
    "SEGMENT_VARIABLES",
    "DiveProfile",
    "ProfileGenerator",
    "load_effective_config",
    "compute_dive_stats",
    "compute_segment_stats",
    "compute_surface_gf",
    "evaluate_dive_formula",
    "evaluate_formula",
    "evaluate_segment_formula",
    "list_supported_functions",
    "validate_dive_formula",
    "validate_formula",
    "validate_formula_with_variables",
    "validate_segment_formula",
]
