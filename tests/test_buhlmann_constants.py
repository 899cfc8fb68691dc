"""
Tests for ZHL-16C constants and the pure tissue-math helpers.

Values are checked against hand-computed results from the published tables.
"""

import math

import numpy as np
import pytest

from divelog.buhlmann_constants import (
    NUM_COMPARTMENTS,
    P_SURFACE,
    SURFACE_N2_FRACTION,
    WATER_VAPOR_PRESSURE,
    ZH_L16_HE_A,
    ZH_L16_HE_B,
    ZH_L16_HE_HALFTIMES,
    ZH_L16_N2_A,
    ZH_L16_N2_B,
    ZH_L16_N2_HALFTIMES,
    altitude_to_pressure,
    alveolar_pressure,
    ambient_pressure,
    blended_coefficients,
    decay_constants,
    gradient_factors,
    haldane_vec,
)


class TestTables:
    """Shape and spot values of the ZHL-16C tables."""

    def test_lengths(self):
        """Every table has one entry per compartment."""
        for table in (
            ZH_L16_N2_HALFTIMES,
            ZH_L16_HE_HALFTIMES,
            ZH_L16_N2_A,
            ZH_L16_N2_B,
            ZH_L16_HE_A,
            ZH_L16_HE_B,
        ):
            assert len(table) == NUM_COMPARTMENTS

    def test_spot_values(self):
        """First and last entries of the published tables."""
        assert ZH_L16_N2_HALFTIMES[0] == 5.0
        assert ZH_L16_N2_HALFTIMES[-1] == 635.0
        assert ZH_L16_HE_HALFTIMES[0] == 1.88
        assert ZH_L16_N2_A[0] == 1.1696
        assert ZH_L16_N2_B[-1] == 0.9653
        assert ZH_L16_HE_A[-1] == 0.5119

    def test_halftimes_increasing(self):
        """Compartments are ordered fast to slow."""
        assert list(ZH_L16_N2_HALFTIMES) == sorted(ZH_L16_N2_HALFTIMES)
        assert list(ZH_L16_HE_HALFTIMES) == sorted(ZH_L16_HE_HALFTIMES)


class TestPressures:
    """Ambient, altitude and alveolar pressure helpers."""

    def test_ambient_at_10m(self):
        """10 m adds one atmosphere."""
        assert ambient_pressure(10.0) == pytest.approx(2 * P_SURFACE)

    def test_ambient_negative_depth_clamped(self):
        """Negative depths count as the surface."""
        assert ambient_pressure(-3.0) == P_SURFACE
        assert ambient_pressure(-3.0, 0.9) == 0.9

    def test_ambient_custom_surface(self):
        """Depth is added to the given surface pressure."""
        assert ambient_pressure(20.0, 0.9) == pytest.approx(0.9 + 2.0265)

    def test_altitude_sea_level(self):
        """0 m and negative altitudes give sea level pressure."""
        assert altitude_to_pressure(0.0) == pytest.approx(P_SURFACE)
        assert altitude_to_pressure(-100.0) == P_SURFACE

    def test_altitude_1000m(self):
        """About 0.899 bar at 1000 m."""
        assert altitude_to_pressure(1000.0) == pytest.approx(0.8987, abs=1e-3)

    def test_alveolar_air_at_surface(self):
        """(1.01325 - 0.0627) * 0.7902."""
        expected = (P_SURFACE - WATER_VAPOR_PRESSURE) * SURFACE_N2_FRACTION
        assert alveolar_pressure(P_SURFACE, SURFACE_N2_FRACTION) == pytest.approx(expected)
        assert expected == pytest.approx(0.7511, abs=1e-4)

    def test_alveolar_zero_fraction(self):
        """Zero gas fraction gives zero pressure."""
        assert alveolar_pressure(4.0, 0.0) == 0.0


class TestSchreiner:
    """Constant-pressure exponential update."""

    def test_decay_constant_per_second(self):
        """k = ln 2 / (half-time * 60)."""
        k = decay_constants([5.0, 635.0])
        np.testing.assert_allclose(k, [math.log(2) / 300.0, math.log(2) / 38100.0])

    def test_one_halftime_is_halfway(self):
        """After one half-time the gap to inspired pressure halves."""
        k = decay_constants([5.0])
        result = haldane_vec(np.array([1.0]), 3.0, 300.0, k)
        np.testing.assert_allclose(result, [2.0])

    def test_zero_time_unchanged(self):
        """dt = 0 leaves the tissue as it was."""
        pt0 = np.array([0.75, 1.2])
        k = decay_constants([5.0, 8.0])
        np.testing.assert_allclose(haldane_vec(pt0, 3.0, 0.0, k), pt0)

    def test_long_exposure_saturates(self):
        """After a very long time every compartment reaches inspired pressure."""
        k = decay_constants(ZH_L16_N2_HALFTIMES)
        result = haldane_vec(np.full(16, 0.75), 3.0, 1e7, k)
        np.testing.assert_allclose(result, 3.0, atol=1e-6)

    def test_fast_compartment_loads_faster(self):
        """Compartment 1 gains more than compartment 16 in the same time."""
        k = decay_constants(ZH_L16_N2_HALFTIMES)
        result = haldane_vec(np.full(16, 0.75), 3.0, 600.0, k)
        assert result[0] > result[-1]
        assert np.all(np.diff(result) <= 0)


class TestCoefficients:
    """Blended a/b coefficients."""

    def test_pure_n2(self):
        """No helium gives the N2 coefficients."""
        a, b = blended_coefficients(np.full(16, 1.0), np.zeros(16))
        np.testing.assert_allclose(a, ZH_L16_N2_A)
        np.testing.assert_allclose(b, ZH_L16_N2_B)

    def test_pure_he(self):
        """No nitrogen gives the He coefficients."""
        a, b = blended_coefficients(np.zeros(16), np.full(16, 1.0))
        np.testing.assert_allclose(a, ZH_L16_HE_A)
        np.testing.assert_allclose(b, ZH_L16_HE_B)

    def test_even_split(self):
        """Equal loads average the coefficients."""
        a, _ = blended_coefficients(np.full(16, 0.5), np.full(16, 0.5))
        expected = (np.asarray(ZH_L16_N2_A) + np.asarray(ZH_L16_HE_A)) / 2
        np.testing.assert_allclose(a, expected)

    def test_empty_tissue_falls_back_to_n2(self):
        """A compartment with no inert gas uses the N2 values."""
        a, b = blended_coefficients(np.zeros(16), np.zeros(16))
        np.testing.assert_allclose(a, ZH_L16_N2_A)
        np.testing.assert_allclose(b, ZH_L16_N2_B)


class TestGradientFactors:
    """Per-compartment GF at a given ambient pressure."""

    def test_at_m_value_is_100(self):
        """A tissue exactly at its M-value (a + P/b) reads 100%."""
        ambient = P_SURFACE
        p_n2 = np.asarray(ZH_L16_N2_A) + ambient / np.asarray(ZH_L16_N2_B)
        gfs = gradient_factors(p_n2, np.zeros(16), ambient)
        np.testing.assert_allclose(gfs, 100.0)

    def test_at_ambient_is_zero(self):
        """A tissue at ambient pressure reads 0%."""
        gfs = gradient_factors(np.full(16, P_SURFACE), np.zeros(16), P_SURFACE)
        np.testing.assert_allclose(gfs, 0.0, atol=1e-12)

    def test_surface_equilibrium_negative(self):
        """Surface-saturated tissue sits below ambient, so GF is negative."""
        p_n2 = np.full(16, alveolar_pressure(P_SURFACE, SURFACE_N2_FRACTION))
        gfs = gradient_factors(p_n2, np.zeros(16), P_SURFACE)
        assert np.all(gfs < 0)

    def test_all_finite(self):
        """Finite inputs give finite outputs."""
        gfs = gradient_factors(np.linspace(0, 5, 16), np.linspace(0, 2, 16), 0.7)
        assert np.all(np.isfinite(gfs))
