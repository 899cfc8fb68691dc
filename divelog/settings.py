"""
Runtime settings loaded from config.yaml.

Only site conditions and aggregation knobs are configurable; the ZHL-16C
tables are constants and never read from configuration.
"""

import logging
import os

import yaml

from .buhlmann_constants import P_SURFACE, altitude_to_pressure
from .metrics import (
    BOTTOM_DEPTH_THRESHOLD_M,
    SETPOINT_SWITCH_THRESHOLD,
    MetricsSettings,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config.yaml"
)


def load_effective_config(
    surface_pressure_override: float = None,
    config_path: str = None,
) -> dict:
    """Load configuration from config.yaml with an optional CLI pressure override.

    Returns a dict with resolved settings:
        surface_pressure_bar:     float
        altitude_m:               float or None
        metrics:                  MetricsSettings instance
        config_path:              str (resolved path)
        surface_pressure_source:  'cli' | 'config' | 'default'
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    # Defaults
    surface_pressure = P_SURFACE
    altitude_m = None
    source = "default"
    metrics_cfg = {}

    if os.path.exists(config_path):
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        if config.get("altitude_m") is not None:
            altitude_m = float(config["altitude_m"])
            surface_pressure = altitude_to_pressure(altitude_m)
            source = "config"
        # An explicit pressure wins over altitude
        if config.get("surface_pressure_bar") is not None:
            surface_pressure = float(config["surface_pressure_bar"])
            source = "config"

        metrics_cfg = config.get("metrics") or {}
    else:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    if surface_pressure_override is not None:
        surface_pressure = float(surface_pressure_override)
        source = "cli"

    if surface_pressure <= 0:
        raise ValueError(f"surface pressure must be positive, got {surface_pressure}")

    metrics = MetricsSettings(
        gas_switch_source=str(metrics_cfg.get("gas_switch_source", "gasmix")),
        setpoint_switch_threshold=float(
            metrics_cfg.get("setpoint_switch_threshold", SETPOINT_SWITCH_THRESHOLD)
        ),
        bottom_depth_threshold_m=float(
            metrics_cfg.get("bottom_depth_threshold_m", BOTTOM_DEPTH_THRESHOLD_M)
        ),
    )

    logger.info(
        f"Surface pressure {surface_pressure:.4f} bar ({source}), "
        f"gas switches from {metrics.gas_switch_source}"
    )

    return {
        "surface_pressure_bar": surface_pressure,
        "altitude_m": altitude_m,
        "metrics": metrics,
        "config_path": config_path,
        "surface_pressure_source": source,
    }
