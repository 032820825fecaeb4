# MolReweight/perturbations/lennardjones.py
from .base import BasePerturbation
import numpy as np


def lennard_jones_perturbation(r, epsilon: float, sigma: float):
    """
    Lennard-Jones energy perturbation.
    V_LJ (r) = 4ε[(σ/r)¹² - (σ/r)⁶]

    :param r: Distance (scalar or array) between two particles.
    :param epsilon: Depth of the potential well.
    :param sigma: Finite distance at which the perturbation is zero.
    :return: Perturbation energy at distance r.

    r == 0 gives inf (numpy semantics); excluding zero distances is the
    caller's job.
    """
    sigma_over_r = sigma / np.asarray(r, dtype=float)
    return 4 * epsilon * (sigma_over_r**12 - sigma_over_r**6)


class LennardJonesPerturbation(BasePerturbation):
    """
    Lennard-Jones perturbation with stored (epsilon, sigma) parameters.
    """

    param_names = ("epsilon", "sigma")

    def __init__(self, epsilon: float, sigma: float) -> None:
        super().__init__(epsilon, sigma)

    def value(self, r):
        epsilon, sigma = self._params
        return lennard_jones_perturbation(r, epsilon, sigma)
