# tests/test_robustness.py

"""
Monte Carlo robustness checks on contaminated ARMA(1,1) series.

Each replication simulates phi = 0.8, theta = -0.7 with 10% of the
innovations shifted by +/-5. These runs are slow and are selected
with ``pytest -m slow``.
"""

import numpy as np
import pytest

from robarma import ARMAModel, bip_mm, ftau, generate_innovations_with_outliers, mm, simulate

N = 500
BURN_IN = 100


def contaminated_model(seed: int) -> ARMAModel:
    innovations = generate_innovations_with_outliers(N + BURN_IN, fraction=0.1, magnitude=5.0, seed=seed)
    y = simulate(phi=[0.8], theta=[-0.7], n=N, burn_in=BURN_IN, innovations=innovations)
    return ARMAModel(y, p=1, q=1)


@pytest.mark.slow
class TestContaminatedARMA:
    """Convergence and selection rates over replications."""

    @pytest.mark.parametrize("replications", [1000])
    def test_ftau_convergence_rate(self, replications):
        converged = sum(ftau(contaminated_model(seed)).convergence for seed in range(replications))
        assert converged / replications >= 0.8

    @pytest.mark.parametrize("replications", [1000])
    def test_bip_mm_cost_not_above_mm(self, replications):
        wins = 0
        for seed in range(replications):
            model = contaminated_model(seed)
            if bip_mm(model).final_cost <= mm(model).final_cost:
                wins += 1
        assert wins / replications >= 0.6


class TestContaminatedSingleRun:
    """A single contaminated replication, kept in the default run."""

    def test_estimates_are_finite(self):
        model = contaminated_model(0)
        for fit in (ftau(model), bip_mm(model)):
            assert np.all(np.isfinite(fit.params.to_array()))
            assert np.isfinite(fit.final_cost)

    def test_contamination_fraction(self):
        innovations = generate_innovations_with_outliers(N + BURN_IN, fraction=0.1, magnitude=5.0, seed=0)
        shift = innovations - np.random.default_rng(0).standard_normal(N + BURN_IN)
        contaminated = np.abs(shift) > 0
        assert contaminated.sum() == round(0.1 * (N + BURN_IN))
        np.testing.assert_allclose(np.abs(shift[contaminated]), 5.0)
