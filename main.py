"""
divelog - Dive statistics and Surface GF for a synthetic profile

Builds a dive profile, runs the metrics aggregator and the ZHL-16C tissue
simulation over it, and optionally evaluates a user formula against the
resulting dive variables.

Usage:
    python main.py                                  # Run with default settings below
    python main.py --depth 30 --time 20             # Quick square profile override
    python main.py --profile deco --depth 45        # Deco profile with an EAN50 switch
    python main.py --formula "deco_time_min / bottom_time_min"
"""

import argparse
import logging
import sys

import matplotlib.pyplot as plt

from divelog import api
from divelog.formula_variables import dive_variables
from divelog.profile_generator import DiveProfile, ProfileGenerator
from divelog.settings import load_effective_config
from formula import FormulaError

logger = logging.getLogger(__name__)


# --- USER CONFIGURATION ---
# Edit these values to plan your dive, or override via CLI arguments.

DIVE_CONFIG = {
    "profile_type": "square",       # "square", "multilevel" or "deco"
    "depth_m": 30,                  # Depth for square/deco profiles (meters)
    "bottom_time_min": 30,          # Bottom time (minutes)
    "fO2": 0.21,                    # Bottom gas O2 fraction (Air = 0.21)
    "fHe": 0.0,                     # Bottom gas He fraction

    # Multilevel profile: list of (depth_m, duration_min), deepest first
    "multilevel_levels": [
        (30, 10),
        (20, 10),
        (10, 10),
    ],

    # Deco profile: stops as (depth_m, duration_min), deepest first
    "deco_stops": [
        (21, 1),
        (12, 2),
        (9, 3),
        (6, 5),
        (3, 10),
    ],
    "deco_gas": (0.50, 0.0),        # EAN50
    "deco_switch_depth_m": 21,

    # Descent/ascent rates
    "descent_rate": 20.0,           # m/min
    "ascent_rate": 10.0,            # m/min (conservative)
}


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_profile(config: dict) -> DiveProfile:
    """Build a DiveProfile from user configuration."""
    gen = ProfileGenerator(
        descent_rate=config["descent_rate"],
        ascent_rate=config["ascent_rate"],
    )

    profile_type = config["profile_type"]

    if profile_type == "square":
        return gen.generate_square(
            depth=config["depth_m"],
            bottom_time=config["bottom_time_min"],
            fO2=config["fO2"],
            fHe=config["fHe"],
        )
    elif profile_type == "multilevel":
        return gen.generate_multilevel(
            levels=config["multilevel_levels"],
            fO2=config["fO2"],
            fHe=config["fHe"],
        )
    elif profile_type == "deco":
        return gen.generate_deco_square(
            depth=config["depth_m"],
            bottom_time=config["bottom_time_min"],
            deco_stops=config["deco_stops"],
            fO2=config["fO2"],
            fHe=config["fHe"],
            deco_gas=config["deco_gas"],
            switch_depth=config["deco_switch_depth_m"],
        )
    else:
        raise ValueError(
            f"Unknown profile type: {profile_type}. "
            "Use 'square', 'multilevel', or 'deco'."
        )


def print_dive_plan(profile: DiveProfile, settings: dict) -> None:
    """Print dive plan summary before simulation."""
    print("--- DIVE PLAN ---")
    print(f"Profile: {profile.name}")
    print(f"Max depth: {profile.max_depth:.0f}m")
    print(f"Bottom time: {profile.bottom_time:.0f} min")
    print(f"Gases: {', '.join(m.label for m in profile.gas_mixes)}")
    print(
        f"Surface pressure: {settings['surface_pressure_bar']:.3f} bar "
        f"({settings['surface_pressure_source']})"
    )
    print(f"Samples: {len(profile.samples)} over {profile.duration_sec / 60:.0f} min")


def print_results(stats, gf_points) -> None:
    """Print dive statistics and the Surface GF peak."""
    print("\n--- DIVE STATISTICS ---")
    print(f"Depth class: {stats.depth_class.label}")
    print(f"Max / avg / weighted avg depth: {stats.max_depth_m:.1f} / "
          f"{stats.avg_depth_m:.1f} / {stats.weighted_avg_depth_m:.1f} m")
    print(f"Total time: {stats.total_time_sec / 60:.1f} min, "
          f"bottom time: {stats.bottom_time_sec / 60:.1f} min")
    print(f"Descent rate: {stats.descent_rate_m_min:.1f} m/min, "
          f"ascent rate: {stats.ascent_rate_m_min:.1f} m/min")
    print(f"Gas switches: {stats.gas_switch_count}")

    print("\n--- SURFACE GF ---")
    if not gf_points:
        print("No samples")
        return
    peak = max(gf_points, key=lambda p: p.surface_gf)
    print(f"Peak Surface GF: {peak.surface_gf:.1f}% at {peak.t_sec / 60:.1f} min "
          f"(compartment {peak.leading_compartment + 1})")
    print(f"Surface GF at end of dive: {gf_points[-1].surface_gf:.1f}%")

    if peak.surface_gf > 100.0:
        print("\nWARNING: Surface GF above 100%!")
        print("A direct ascent at the peak would have violated the M-value.")


def plot_results(profile: DiveProfile, gf_points) -> None:
    """Visualize depth profile and Surface GF."""
    times = [s.t_sec / 60.0 for s in profile.samples]
    depths = [s.depth_m for s in profile.samples]
    gfs = [p.surface_gf for p in gf_points]

    _fig, (ax_depth, ax_gf) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax_depth.plot(times, depths, "b-", linewidth=2)
    ax_depth.set_ylabel("Depth (m)")
    ax_depth.set_title(f"Dive Profile: {profile.name}")
    ax_depth.invert_yaxis()
    ax_depth.grid(True, alpha=0.3)
    ax_depth.fill_between(times, depths, alpha=0.15, color="blue")

    ax_gf.plot(times, gfs, "r-", linewidth=2, label="Surface GF")
    ax_gf.axhline(y=100.0, color="gray", linestyle="--", alpha=0.7, label="M-value")
    ax_gf.set_xlabel("Time (min)")
    ax_gf.set_ylabel("Surface GF (%)")
    ax_gf.legend(loc="upper right", fontsize=8)
    ax_gf.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.show()


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments for quick overrides."""
    parser = argparse.ArgumentParser(
        description="divelog - Dive statistics and Surface GF",
    )
    parser.add_argument("--depth", type=float, help="Dive depth in meters")
    parser.add_argument("--time", type=float, help="Bottom time in minutes")
    parser.add_argument("--fO2", type=float, help="O2 fraction (e.g. 0.32 for EAN32)")
    parser.add_argument("--fHe", type=float, help="He fraction (e.g. 0.35 for Tx21/35)")
    parser.add_argument(
        "--profile", choices=["square", "multilevel", "deco"],
        help="Profile type",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config YAML (default: config.yaml next to the package)",
    )
    parser.add_argument(
        "--surface-pressure", type=float, dest="surface_pressure",
        help="Surface pressure in bar, overrides config.yaml",
    )
    parser.add_argument("--formula", type=str, help="Formula to evaluate against the dive")
    parser.add_argument("--plot", action="store_true", help="Plot depth and Surface GF")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)

    # Apply CLI overrides to config
    config = DIVE_CONFIG.copy()
    if args.depth is not None:
        config["depth_m"] = args.depth
    if args.time is not None:
        config["bottom_time_min"] = args.time
    if args.fO2 is not None:
        config["fO2"] = args.fO2
    if args.fHe is not None:
        config["fHe"] = args.fHe
    if args.profile is not None:
        config["profile_type"] = args.profile

    settings = load_effective_config(
        surface_pressure_override=args.surface_pressure, config_path=args.config
    )
    profile = build_profile(config)
    print_dive_plan(profile, settings)

    dive = profile.dive_input()
    stats = api.compute_dive_stats(dive, profile.samples, settings["metrics"])
    gf_points = api.compute_surface_gf(
        profile.samples, profile.gas_mixes, settings["surface_pressure_bar"]
    )
    print_results(stats, gf_points)

    if args.formula:
        error = api.validate_dive_formula(args.formula)
        if error is not None:
            logger.error(f"Invalid formula: {error}")
            return 1
        try:
            value = api.evaluate_formula(args.formula, dive_variables(stats))
        except FormulaError as e:
            logger.error(f"Formula evaluation failed: {e}")
            return 1
        print(f"\n{args.formula} = {value:g}")

    if args.plot:
        plot_results(profile, gf_points)
    return 0


if __name__ == "__main__":
    sys.exit(main())
