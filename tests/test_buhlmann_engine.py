"""Tests for the ZHL-16C Surface GF simulation."""

import math

import numpy as np
import pytest

from divelog.buhlmann_constants import (
    P_SURFACE,
    SURFACE_N2_FRACTION,
    alveolar_pressure,
    altitude_to_pressure,
)
from divelog.buhlmann_engine import SurfaceGfPoint, TissueState, compute_surface_gf
from divelog.profile_generator import ProfileGenerator
from divelog.samples import AIR_O2_FRACTION, GasMix, Sample


def square_samples(depth=30.0, bottom_min=20, step=60, mix=None):
    """Descend in one step, hold, ascend in one step."""
    samples = [Sample(0, 0.0, gasmix_index=mix), Sample(step, depth, gasmix_index=mix)]
    t = step
    for _ in range(bottom_min * 60 // step):
        t += step
        samples.append(Sample(t, depth, gasmix_index=mix))
    samples.append(Sample(t + step * 3, 0.0, gasmix_index=mix))
    return samples


def gfs(points):
    return [p.surface_gf for p in points]


class TestTissueState:
    """Tissue loading container."""

    def test_surface_equilibrium(self):
        """Air-saturated N2 everywhere, no helium."""
        state = TissueState.surface_equilibrium()
        expected = alveolar_pressure(P_SURFACE, SURFACE_N2_FRACTION)
        np.testing.assert_allclose(state.p_n2, expected)
        np.testing.assert_allclose(state.p_he, 0.0)
        np.testing.assert_allclose(state.p_total, expected)

    def test_update_skips_non_positive_dt(self):
        """dt <= 0 leaves the state untouched."""
        state = TissueState.surface_equilibrium()
        before = state.p_n2.copy()
        state.update(0, 3.0, 1.0)
        state.update(-60, 3.0, 1.0)
        np.testing.assert_array_equal(state.p_n2, before)
        np.testing.assert_array_equal(state.p_he, 0.0)

    def test_update_loads_helium(self):
        """Breathing helium loads the He compartments."""
        state = TissueState.surface_equilibrium()
        state.update(600, 2.0, 1.5)
        assert np.all(state.p_he > 0)
        assert np.all(state.p_n2 > alveolar_pressure(P_SURFACE, SURFACE_N2_FRACTION))

    def test_all_negative_reports_zero(self):
        """A desaturated state reports 0.0 with compartment 0."""
        state = TissueState.surface_equilibrium()
        assert state.surface_gf_and_leading(P_SURFACE) == (0.0, 0)


class TestEdgeCases:
    """Degenerate inputs."""

    def test_empty(self):
        """No samples, no points."""
        assert compute_surface_gf([]) == []

    def test_single_sample(self):
        """One sample gives one point with GF 0."""
        points = compute_surface_gf([Sample(0, 30.0)])
        assert points == [SurfaceGfPoint(0, 0.0, 0)]

    def test_surface_only(self):
        """Hours at the surface stay at zero."""
        samples = [Sample(t, 0.0) for t in range(0, 4 * 3600, 60)]
        points = compute_surface_gf(samples)
        assert len(points) == len(samples)
        assert all(abs(p.surface_gf) < 1.0 for p in points)
        assert all(p.leading_compartment == 0 for p in points)

    def test_negative_depth_clamped(self):
        """Negative depths behave like the surface."""
        clamped = compute_surface_gf([Sample(0, 0.0), Sample(60, -2.0), Sample(120, 0.0)])
        surface = compute_surface_gf([Sample(0, 0.0), Sample(60, 0.0), Sample(120, 0.0)])
        assert gfs(clamped) == gfs(surface)

    def test_duplicate_timestamps(self):
        """A zero-length interval adds no loading."""
        with_dup = compute_surface_gf(
            [Sample(0, 0.0), Sample(60, 30.0), Sample(60, 30.0), Sample(120, 30.0)]
        )
        without = compute_surface_gf([Sample(0, 0.0), Sample(60, 30.0), Sample(120, 30.0)])
        assert with_dup[-1].surface_gf == pytest.approx(without[-1].surface_gf)

    def test_one_point_per_sample_in_order(self):
        """Output times mirror input times."""
        samples = square_samples()
        points = compute_surface_gf(samples)
        assert [p.t_sec for p in points] == [s.t_sec for s in samples]

    def test_outputs_finite(self):
        """Finite inputs give finite outputs."""
        points = compute_surface_gf(square_samples(depth=100.0, bottom_min=60))
        assert all(math.isfinite(p.surface_gf) for p in points)
        assert all(0 <= p.leading_compartment < 16 for p in points)


class TestSquareProfile:
    """Loading behaviour on a constant-depth dive."""

    def test_non_decreasing_at_depth(self):
        """Surface GF never drops while held at depth."""
        values = gfs(compute_surface_gf(square_samples()))
        bottom = values[1:-1]
        assert all(b >= a for a, b in zip(bottom, bottom[1:]))

    def test_deltas_shrink(self):
        """Later minutes at depth add less than earlier ones."""
        values = gfs(compute_surface_gf(square_samples(bottom_min=60)))
        bottom = values[1:-1]
        deltas = np.diff(bottom)
        assert deltas[-1] < deltas[1]
        assert deltas[-1] < deltas[2]

    def test_deep_long_dive_exceeds_100(self):
        """30 m for 40 min on air is a decompression dive."""
        peak = max(gfs(compute_surface_gf(square_samples(bottom_min=40))))
        assert peak > 100.0

    def test_fast_compartment_leads_short_dive(self):
        """On a short dive a fast compartment leads."""
        points = compute_surface_gf(square_samples(bottom_min=5))
        assert points[-2].leading_compartment <= 2

    def test_slower_compartment_leads_long_dive(self):
        """After a long exposure a slower compartment takes over."""
        short = compute_surface_gf(square_samples(bottom_min=5))
        long = compute_surface_gf(square_samples(bottom_min=90))
        assert long[-2].leading_compartment > short[-2].leading_compartment


class TestGases:
    """Gas table handling."""

    def test_default_is_air(self):
        """No gas table behaves like an explicit air mix 0."""
        samples = square_samples()
        default = compute_surface_gf(samples)
        explicit = compute_surface_gf(samples, [GasMix(0, AIR_O2_FRACTION)])
        assert gfs(default) == gfs(explicit)

    def test_mix_zero_is_initial_gas(self):
        """Mix 0 is breathed from the start; other mixes wait for a switch."""
        samples = square_samples()
        nitrox_first = compute_surface_gf(samples, [GasMix(0, 0.32)])
        nitrox_unused = compute_surface_gf(samples, [GasMix(1, 0.32)])
        air = compute_surface_gf(samples)
        assert gfs(nitrox_unused) == gfs(air)
        assert nitrox_first[-2].surface_gf < air[-2].surface_gf

    def test_unknown_mix_ignored(self):
        """Samples naming a mix that is not in the table keep the current gas."""
        plain = compute_surface_gf(square_samples())
        unknown = compute_surface_gf(square_samples(mix=7), [GasMix(0, AIR_O2_FRACTION)])
        assert gfs(plain) == gfs(unknown)

    def test_switch_applies_to_next_interval(self):
        """The sample carrying a switch was reached on the old gas."""
        mixes = [GasMix(0, 0.21), GasMix(1, 1.0)]
        base = [Sample(0, 0.0, gasmix_index=0), Sample(60, 30.0), Sample(600, 30.0), Sample(900, 6.0)]
        switched = list(base)
        switched[2] = Sample(600, 30.0, gasmix_index=1)
        a = compute_surface_gf(base, mixes)
        b = compute_surface_gf(switched, mixes)
        assert a[2].surface_gf == b[2].surface_gf
        assert b[3].surface_gf < a[3].surface_gf

    def test_ean50_at_stop_lowers_gf(self):
        """Switching to EAN50 at 6 m off-gasses faster than staying on air."""
        mixes = [GasMix(0, 0.21), GasMix(1, 0.50)]
        descent = [Sample(0, 0.0, gasmix_index=0), Sample(120, 30.0)]
        bottom = [Sample(t, 30.0) for t in range(180, 1800, 60)]
        stop_air = [Sample(t, 6.0) for t in range(1980, 2700, 60)]
        stop_nitrox = [Sample(1980, 6.0, gasmix_index=1)] + stop_air[1:]

        on_air = compute_surface_gf(descent + bottom + stop_air, mixes)
        on_ean50 = compute_surface_gf(descent + bottom + stop_nitrox, mixes)
        assert on_ean50[-1].surface_gf < on_air[-1].surface_gf

    def test_trimix_loads_helium(self):
        """A trimix dive is finite and higher than the surface."""
        mixes = [GasMix(0, 0.21, 0.35)]
        points = compute_surface_gf(square_samples(depth=50.0, bottom_min=15), mixes)
        assert all(math.isfinite(p.surface_gf) for p in points)
        assert points[-2].surface_gf > 0.0

    def test_trimix_differs_from_air(self):
        """Helium changes the result."""
        samples = square_samples(depth=50.0, bottom_min=15)
        trimix = compute_surface_gf(samples, [GasMix(0, 0.21, 0.35)])
        air = compute_surface_gf(samples)
        assert gfs(trimix) != gfs(air)


class TestSurfacePressure:
    """Altitude handling."""

    def test_altitude_gives_higher_gf(self):
        """The same dive at altitude reads higher than at sea level."""
        samples = square_samples(depth=20.0, bottom_min=30)
        sea = compute_surface_gf(samples)
        alt = compute_surface_gf(samples, surface_pressure=altitude_to_pressure(2000.0))
        for s, a in zip(sea[1:-1], alt[1:-1]):
            assert a.surface_gf >= s.surface_gf
        assert max(gfs(alt)) > max(gfs(sea))

    def test_none_means_sea_level(self):
        """surface_pressure=None uses 1.01325 bar."""
        samples = square_samples()
        assert gfs(compute_surface_gf(samples)) == gfs(
            compute_surface_gf(samples, surface_pressure=P_SURFACE)
        )


class TestGeneratedProfiles:
    """Profiles from the generator run end to end."""

    def test_deco_profile_with_gas_switch(self):
        """A deco profile with EAN50 ends below its peak."""
        profile = ProfileGenerator().generate_deco_square(
            depth=45, bottom_time=20, deco_stops=[(21, 2), (9, 3), (6, 5), (3, 10)],
            deco_gas=(0.50, 0.0), switch_depth=21,
        )
        points = compute_surface_gf(profile.samples, profile.gas_mixes)
        peak = max(gfs(points))
        assert peak > 100.0
        assert points[-1].surface_gf < peak
