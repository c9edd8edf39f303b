# tests/test_robust.py

"""
Tests for the robust statistics primitives.

Covers median, MAD and MADN, the Huber and bisquare functions, the M-scale
fixed point, the Muler rho/eta family and the Bianco rho/psi/w family,
including continuity at the piece boundaries and oddness of the score
functions.
"""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st
from hypothesis.extra.numpy import arrays

from robarma.core.exceptions import ParameterError
from robarma.robust import bip, tau
from robarma.robust.base import bisquare, huber, mad, madn, median, scale


finite_arrays = arrays(
    np.float64,
    st.integers(min_value=3, max_value=200),
    elements=st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)
)


class TestLocationAndDispersion:
    """Tests for median, MAD and MADN."""

    @given(finite_arrays)
    @settings(deadline=None)
    def test_median_bounds(self, y):
        m = median(y)
        assert y.min() <= m <= y.max()

    @given(finite_arrays)
    @settings(deadline=None)
    def test_mad_relations(self, y):
        assert mad(y) >= 0.0
        assert madn(y) == pytest.approx(mad(y) / 0.6745)

    def test_median_even_and_odd(self):
        assert median([3.0, 1.0, 2.0]) == 2.0
        assert median([4.0, 1.0, 3.0, 2.0]) == 2.5

    def test_median_matches_numpy(self, normal_data):
        assert median(normal_data) == pytest.approx(np.median(normal_data))

    def test_mad_of_known_values(self):
        # deviations from the median 3 are 2, 1, 0, 1, 97
        assert mad([1.0, 2.0, 3.0, 4.0, 100.0]) == 1.0


class TestHuberAndBisquare:
    """Tests for the Huber psi and the bisquare rho."""

    def test_huber_clips(self):
        np.testing.assert_array_equal(
            huber(np.array([-3.0, -1.0, 0.0, 1.0, 3.0])),
            np.array([-1.345, -1.0, 0.0, 1.0, 1.345])
        )

    def test_huber_scalar_returns_float(self):
        value = huber(0.5, k=0.2)
        assert isinstance(value, float)
        assert value == 0.2

    def test_huber_keeps_shape(self):
        x = np.linspace(-3, 3, 12).reshape(3, 4)
        assert huber(x).shape == (3, 4)

    def test_bisquare_values(self):
        k = 1.547645
        assert bisquare(0.0) == 0.0
        assert bisquare(k) == pytest.approx(1.0)
        assert bisquare(10.0) == 1.0
        x = 0.5
        assert bisquare(x) == pytest.approx(1 - (1 - (x / k) ** 2) ** 3)

    @given(st.floats(min_value=-50, max_value=50, allow_nan=False))
    def test_bisquare_bounded_and_even(self, x):
        value = bisquare(x)
        assert 0.0 <= value <= 1.0
        assert bisquare(-x) == pytest.approx(value)


class TestMScale:
    """Tests for the iterative M-scale."""

    def test_bisquare_fixed_point(self, normal_data):
        sigma = scale(normal_data, b=0.5)
        assert sigma > 0
        assert abs(np.mean(bisquare(normal_data / sigma)) - 0.5) < 1e-4

    def test_bip_rho1_fixed_point(self, normal_data):
        sigma = scale(normal_data, b=bip.S_CONSISTENCY, rho="bip", tol=1e-10, max_iter=500)
        assert abs(np.mean(bip.rho1(normal_data / sigma)) - bip.S_CONSISTENCY) < 1e-4

    def test_tau_rho1_fixed_point(self, normal_data):
        sigma = tau.s(normal_data)
        assert abs(np.mean(tau.rho1(normal_data / sigma)) - 0.5) < 1e-4

    def test_scale_equivariance(self, normal_data):
        assert scale(3.0 * normal_data) == pytest.approx(3.0 * scale(normal_data), rel=1e-5)

    def test_zero_start_returns_zero(self):
        assert scale(np.zeros(10)) == 0.0
        assert scale(np.array([0.0, 0.0, 0.0, 1.0, 2.0])) == 0.0

    def test_empty_input(self):
        assert scale(np.array([])) == 0.0

    def test_callable_rho_matches_builtin(self, normal_data):
        builtin = scale(normal_data)
        custom = scale(normal_data, rho=bisquare)
        assert custom == pytest.approx(builtin, rel=1e-8)

    def test_unknown_rho_raises(self, normal_data):
        with pytest.raises(ParameterError):
            scale(normal_data, rho="cauchy")

    def test_resistant_to_outliers(self, normal_data):
        contaminated = normal_data.copy()
        contaminated[:100] = 1000.0
        centered = contaminated - median(contaminated)
        assert scale(centered) < 2.0


class TestMulerFamily:
    """Tests for the Muler rho1, rho2 and eta functions."""

    @pytest.mark.parametrize("func, knot", [
        (bip.rho2, 2.0),
        (bip.rho2, 3.0),
        (bip.rho1, 0.81),
        (bip.rho1, 1.215),
        (bip.eta, 2.0),
        (bip.eta, 3.0),
    ])
    def test_continuity_at_knots(self, func, knot):
        for k in (knot, -knot):
            outside = np.nextafter(k, np.sign(k) * np.inf)
            assert abs(func(k) - func(outside)) < 1e-12

    def test_rho2_pieces(self):
        assert bip.rho2(1.0) == 0.5
        assert bip.rho2(4.0) == 3.25
        assert bip.rho2(3.0) == pytest.approx(3.25)

    def test_rho1_is_rescaled_rho2(self):
        x = np.linspace(-2, 2, 41)
        np.testing.assert_allclose(bip.rho1(x), bip.rho2(x / 0.405))

    @given(st.floats(min_value=-10, max_value=10, allow_nan=False))
    def test_eta_odd_and_bounded(self, x):
        assert bip.eta(-x) == pytest.approx(-bip.eta(x))
        assert abs(bip.eta(x)) <= 2.1

    def test_eta_vanishes_beyond_three(self):
        np.testing.assert_array_equal(bip.eta(np.array([-5.0, 3.5, 100.0])), np.zeros(3))

    def test_eta_identity_near_zero(self):
        x = np.array([-1.5, 0.0, 1.9])
        np.testing.assert_array_equal(bip.eta(x), x)


class TestBiancoFamily:
    """Tests for the Bianco rho1, rho2, psi and w functions and tau scales."""

    def test_rho1_continuity(self):
        for k in (1.55, -1.55):
            outside = np.nextafter(k, np.sign(k) * np.inf)
            assert abs(tau.rho1(k) - tau.rho1(outside)) < 1e-12

    def test_rho_bounded(self):
        x = np.linspace(-10, 10, 201)
        assert np.all(tau.rho1(x) <= 1.0 + 1e-12)
        assert np.all(tau.rho2(x) <= 1.0 + 1e-12)
        assert tau.rho1(0.0) == 0.0
        assert tau.rho2(0.0) == 0.0

    @given(st.floats(min_value=-10, max_value=10, allow_nan=False))
    def test_psi_odd_and_clipped(self, x):
        assert tau.psi(-x) == pytest.approx(-tau.psi(x))
        assert abs(tau.psi(x)) <= 1.55

    def test_w(self):
        assert tau.w(0.0) == 0.0
        assert tau.w(1.0) == 1.0
        assert tau.w(3.1) == pytest.approx(0.5)

    def test_tau2(self, normal_data):
        value = tau.tau2(normal_data)
        s = tau.s(normal_data)
        assert value == pytest.approx(s ** 2 * np.sum(tau.rho2(normal_data / s)))
        assert tau.tau2(np.zeros(20)) == 0.0
