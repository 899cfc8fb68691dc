"""
Bühlmann ZHL-16C constants and pure tissue-math helpers.

Single source of truth for compartment half-times and M-value coefficients.
All functions are pure (no side effects) so they are safe to call from any
number of threads at once.
"""

import math
from typing import Tuple

import numpy as np

NUM_COMPARTMENTS = 16

# Water vapour pressure in the lungs at 37°C (bar)
WATER_VAPOR_PRESSURE = 0.0627

# Sea level atmospheric pressure (bar)
P_SURFACE = 1.01325

# Pressure increase per metre of sea water: 1 atm per 10 msw (bar/m)
BAR_PER_METER = 0.101325

# Fraction of N2 in air used for the surface equilibrium state
SURFACE_N2_FRACTION = 0.7902

# Guard for every division by a pressure difference
EPSILON = 1e-10

# ZHL-16C N2 half-times (minutes)
ZH_L16_N2_HALFTIMES: Tuple[float, ...] = (
    5.0, 8.0, 12.5, 18.5, 27.0, 38.3, 54.3, 77.0,
    109.0, 146.0, 187.0, 239.0, 305.0, 390.0, 498.0, 635.0,
)

# ZHL-16C He half-times (minutes)
ZH_L16_HE_HALFTIMES: Tuple[float, ...] = (
    1.88, 3.02, 4.72, 6.99, 10.21, 14.48, 20.53, 29.11,
    41.20, 55.19, 70.69, 90.34, 115.29, 147.42, 188.24, 240.03,
)

# M-value coefficients: M(P) = a + P/b
ZH_L16_N2_A: Tuple[float, ...] = (
    1.1696, 1.0000, 0.8618, 0.7562, 0.6200, 0.5043, 0.4410, 0.4000,
    0.3750, 0.3500, 0.3295, 0.3065, 0.2835, 0.2610, 0.2480, 0.2327,
)

ZH_L16_N2_B: Tuple[float, ...] = (
    0.5578, 0.6514, 0.7222, 0.7825, 0.8126, 0.8434, 0.8693, 0.8910,
    0.9092, 0.9222, 0.9319, 0.9403, 0.9477, 0.9544, 0.9602, 0.9653,
)

ZH_L16_HE_A: Tuple[float, ...] = (
    1.6189, 1.3830, 1.1919, 1.0458, 0.9220, 0.8205, 0.7305, 0.6502,
    0.5950, 0.5545, 0.5333, 0.5189, 0.5181, 0.5176, 0.5172, 0.5119,
)

ZH_L16_HE_B: Tuple[float, ...] = (
    0.4770, 0.5747, 0.6527, 0.7223, 0.7582, 0.7957, 0.8279, 0.8553,
    0.8757, 0.8903, 0.8997, 0.9073, 0.9122, 0.9171, 0.9217, 0.9267,
)


def ambient_pressure(depth_m: float, surface_pressure: float = P_SURFACE) -> float:
    """Absolute pressure (bar) at `depth_m`; negative depths count as the surface."""
    return surface_pressure + max(0.0, depth_m) * BAR_PER_METER


def altitude_to_pressure(altitude_m: float) -> float:
    """Atmospheric pressure at altitude (bar).

    Standard barometric formula: P = P0 * (1 - L*h/T0)^(gM/RL).
    Negative altitudes are clamped to sea level.
    """
    if altitude_m < 0:
        return P_SURFACE
    return P_SURFACE * (1 - 2.25577e-5 * altitude_m) ** 5.25588


def alveolar_pressure(p_ambient: float, gas_fraction: float) -> float:
    """Inspired inert-gas partial pressure, corrected for water vapour."""
    return (p_ambient - WATER_VAPOR_PRESSURE) * gas_fraction


def decay_constants(halftimes_min) -> np.ndarray:
    """k = ln(2) / half-time, per second."""
    return math.log(2) / (np.asarray(halftimes_min, dtype=float) * 60.0)


def haldane_vec(
    pt0: np.ndarray, p_inspired: float, dt_sec: float, k: np.ndarray
) -> np.ndarray:
    """Schreiner equation at constant inspired pressure, all compartments at once.

    P(t) = P_insp + (P0 - P_insp) * exp(-k*t)
    """
    return p_inspired + (pt0 - p_inspired) * np.exp(-k * dt_sec)


def blended_coefficients(
    p_n2: np.ndarray, p_he: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """Workman/Baker a and b, weighted by each gas's share of the compartment.

    Compartments with no measurable inert gas fall back to the N2 values.
    """
    a_n2 = np.asarray(ZH_L16_N2_A)
    b_n2 = np.asarray(ZH_L16_N2_B)
    p_total = p_n2 + p_he
    loaded = p_total > EPSILON
    safe_total = np.where(loaded, p_total, 1.0)
    a = np.where(loaded, (a_n2 * p_n2 + np.asarray(ZH_L16_HE_A) * p_he) / safe_total, a_n2)
    b = np.where(loaded, (b_n2 * p_n2 + np.asarray(ZH_L16_HE_B) * p_he) / safe_total, b_n2)
    return a, b


def gradient_factors(
    p_n2: np.ndarray, p_he: np.ndarray, ambient: float
) -> np.ndarray:
    """Gradient factor (%) of every compartment at `ambient` pressure.

    GF = 100 * (P_tissue - P_amb) / (M(P_amb) - P_amb), 0 where the denominator
    is not positive.
    """
    a, b = blended_coefficients(p_n2, p_he)
    denominator = a + ambient / b - ambient
    usable = denominator > EPSILON
    safe = np.where(usable, denominator, 1.0)
    return np.where(usable, (p_n2 + p_he - ambient) / safe * 100.0, 0.0)
