"""
Bühlmann ZHL-16C tissue simulation for Surface Gradient Factor computation.

Steps 16 compartments through a recorded depth/time/gas profile with the
Schreiner equation (numpy, vectorised across compartments) and reports, for
every sample, the Surface GF: the gradient factor the diver would have if they
ascended to the surface instantly.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .buhlmann_constants import (
    NUM_COMPARTMENTS,
    P_SURFACE,
    SURFACE_N2_FRACTION,
    ZH_L16_HE_HALFTIMES,
    ZH_L16_N2_HALFTIMES,
    alveolar_pressure,
    ambient_pressure,
    decay_constants,
    gradient_factors,
    haldane_vec,
)
from .samples import AIR, GasMix, Sample

logger = logging.getLogger(__name__)

_N2_K = decay_constants(ZH_L16_N2_HALFTIMES)
_HE_K = decay_constants(ZH_L16_HE_HALFTIMES)


@dataclass(frozen=True)
class SurfaceGfPoint:
    """Surface GF at one sample."""

    t_sec: int
    surface_gf: float  # percent; above 100 means a decompression obligation
    leading_compartment: int  # 0-15


class TissueState:
    """Inert gas partial pressures (bar) of the 16 compartments.

    Lives for a single simulation run and is never shared.
    """

    def __init__(self, p_n2: np.ndarray, p_he: np.ndarray):
        self.p_n2 = p_n2
        self.p_he = p_he

    @classmethod
    def surface_equilibrium(cls, surface_pressure: float = P_SURFACE) -> "TissueState":
        """Tissues saturated with air at the surface, no helium."""
        p_n2 = np.full(NUM_COMPARTMENTS, alveolar_pressure(surface_pressure, SURFACE_N2_FRACTION))
        return cls(p_n2, np.zeros(NUM_COMPARTMENTS))

    @property
    def p_total(self) -> np.ndarray:
        return self.p_n2 + self.p_he

    def update(self, dt_sec: float, p_inspired_n2: float, p_inspired_he: float) -> None:
        """Expose the tissues to constant inspired pressures for `dt_sec` seconds."""
        if dt_sec <= 0:
            return
        self.p_n2 = haldane_vec(self.p_n2, p_inspired_n2, dt_sec, _N2_K)
        self.p_he = haldane_vec(self.p_he, p_inspired_he, dt_sec, _HE_K)

    def surface_gf_and_leading(self, surface_pressure: float) -> Tuple[float, int]:
        """Highest compartment GF at `surface_pressure` and its index.

        Starts from 0.0 so that a fully desaturated state reports 0 with
        compartment 0; ties go to the lowest index.
        """
        gfs = gradient_factors(self.p_n2, self.p_he, surface_pressure)
        leading = int(np.argmax(gfs))
        if gfs[leading] > 0.0:
            return float(gfs[leading]), leading
        return 0.0, 0


def compute_surface_gf(
    samples: Sequence[Sample],
    gas_mixes: Sequence[GasMix] = (),
    surface_pressure: Optional[float] = None,
) -> List[SurfaceGfPoint]:
    """Compute the Surface GF for each sample of a dive profile.

    The diver starts at surface equilibrium on air. Each interval between two
    samples is simulated at the average of their depths, breathing the gas that
    was active going into the interval; a gas switch recorded on a sample takes
    effect for the following interval.

    Args:
        samples: time-ordered profile
        gas_mixes: gas definitions keyed by ``mix_index``; air when empty.
            The first gas is mix 0 when present, otherwise air.
        surface_pressure: ambient surface pressure (bar), sea level when None

    Returns:
        One SurfaceGfPoint per sample, in the same order.
    """
    if not samples:
        return []

    surface_p = P_SURFACE if surface_pressure is None else surface_pressure
    tissues = TissueState.surface_equilibrium(surface_p)

    gas_lookup: Dict[int, GasMix] = {mix.mix_index: mix for mix in gas_mixes}
    current_gas = gas_lookup.get(0, AIR)

    results = []
    previous = None
    for sample in samples:
        if previous is not None:
            dt_sec = sample.t_sec - previous.t_sec
            avg_depth_m = (previous.depth_m + sample.depth_m) / 2.0
            p_amb = ambient_pressure(avg_depth_m, surface_p)
            tissues.update(
                dt_sec,
                alveolar_pressure(p_amb, current_gas.n2_fraction),
                alveolar_pressure(p_amb, current_gas.he_fraction),
            )

        # Switch after the update: the interval just simulated used the old gas
        if sample.gasmix_index is not None:
            switched = gas_lookup.get(sample.gasmix_index)
            if switched is not None:
                current_gas = switched
            else:
                logger.debug(
                    f"Ignoring unknown gas mix {sample.gasmix_index} at t={sample.t_sec}s"
                )

        surface_gf, leading = tissues.surface_gf_and_leading(surface_p)
        results.append(SurfaceGfPoint(sample.t_sec, surface_gf, leading))
        previous = sample

    peak = max(results, key=lambda p: p.surface_gf)
    logger.debug(
        f"Surface GF over {len(results)} samples: peak {peak.surface_gf:.1f}% "
        f"at t={peak.t_sec}s (compartment {peak.leading_compartment + 1})"
    )
    return results
