"""
Tests for the built-in perturbation functions and objects.
"""

import numpy as np
import pytest

from MolReweight import (
    BasePerturbation,
    GaussianDecayPerturbation,
    LennardJonesPerturbation,
    PERTURBATION_REGISTRY,
    PolyDecayPerturbation,
    build_perturbation,
    gaussian_decay_perturbation,
    lennard_jones_perturbation,
    poly_decay_perturbation,
)


class TestPerturbationFunctions:

    def test_lennard_jones_zero_at_sigma(self):
        assert lennard_jones_perturbation(3.4, 0.5, 3.4) == pytest.approx(0.0, abs=1e-12)

    def test_lennard_jones_minimum(self):
        sigma, epsilon = 3.0, 0.7
        r_min = 2 ** (1 / 6) * sigma
        assert lennard_jones_perturbation(r_min, epsilon, sigma) == pytest.approx(-epsilon)

    def test_lennard_jones_zero_distance_is_infinite(self):
        with np.errstate(divide="ignore"):
            value = lennard_jones_perturbation(0.0, 1.0, 1.0)
        assert not np.isfinite(value)

    def test_lennard_jones_array(self):
        r = np.array([1.0, 2.0])
        expected = [4 * (1 - 1), 4 * (2.0**-12 - 2.0**-6)]
        assert np.allclose(lennard_jones_perturbation(r, 1.0, 1.0), expected)

    def test_poly_decay(self):
        assert poly_decay_perturbation(2.0, 3) == pytest.approx(0.125)
        assert poly_decay_perturbation(4.0, 0.5) == pytest.approx(0.5)

    def test_poly_decay_is_monotonic(self):
        values = poly_decay_perturbation(np.linspace(0.5, 10.0, 50), 2)
        assert np.all(np.diff(values) < 0)

    def test_gaussian_decay(self):
        assert gaussian_decay_perturbation(0.0, 2.0, 0.3) == pytest.approx(0.3)
        assert gaussian_decay_perturbation(1.0, np.log(2.0), 1.0) == pytest.approx(0.5)
        assert np.isfinite(gaussian_decay_perturbation(1e3, 1.0, 1.0))


class TestPerturbationObjects:

    def test_objects_match_functions(self):
        r = np.array([0.8, 1.5, 3.0])
        assert np.allclose(LennardJonesPerturbation(0.2, 1.1)(r), lennard_jones_perturbation(r, 0.2, 1.1))
        assert np.allclose(PolyDecayPerturbation(6)(r), poly_decay_perturbation(r, 6))
        assert np.allclose(GaussianDecayPerturbation(0.1, 2.0)(r), gaussian_decay_perturbation(r, 0.1, 2.0))

    def test_params(self):
        pert = LennardJonesPerturbation(epsilon=0.2, sigma=3.4)
        assert pert.param_names == ("epsilon", "sigma")
        assert np.allclose(pert.params, [0.2, 3.4])
        pert.params[0] = 9.0
        assert pert.params[0] == pytest.approx(0.2)
        assert repr(pert) == "LennardJonesPerturbation(epsilon=0.2, sigma=3.4)"

    def test_wrong_parameter_count(self):
        class Shifted(BasePerturbation):
            param_names = ("shift",)

            def value(self, r):
                return r - self._params[0]

        assert Shifted(1.0)(3.0) == pytest.approx(2.0)
        with pytest.raises(ValueError, match="expects 1 parameters, got 2"):
            Shifted(1.0, 2.0)

    def test_build_perturbation(self):
        pert = build_perturbation("gaussian_decay", alpha=0.5, beta=2.0)
        assert isinstance(pert, GaussianDecayPerturbation)
        assert pert(0.0) == pytest.approx(2.0)
        assert set(PERTURBATION_REGISTRY) >= {"lj", "poly_decay", "gaussian_decay"}

    def test_build_unknown_style(self):
        with pytest.raises(KeyError, match="Unknown perturbation style"):
            build_perturbation("morse", D=1.0)
