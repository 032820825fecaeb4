# MolReweight/perturbations/gaussian.py
import numpy as np
from .base import BasePerturbation


def gaussian_decay_perturbation(r, alpha: float, beta: float):
    """
    Bell shaped decay, V(r) = β exp(-α r²). Finite for every finite r.
    """
    r = np.asarray(r, dtype=float)
    return beta * np.exp(-alpha * r**2)


class GaussianDecayPerturbation(BasePerturbation):
    param_names = ("alpha", "beta")

    def __init__(self, alpha: float, beta: float):
        super().__init__(alpha, beta)

    def value(self, r):
        alpha, beta = self._params
        return gaussian_decay_perturbation(r, alpha, beta)
