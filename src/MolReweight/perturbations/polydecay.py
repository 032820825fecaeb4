# MolReweight/perturbations/polydecay.py
from .base import BasePerturbation
import numpy as np


def poly_decay_perturbation(r, n: float):
    """
    Inverse power law decay, V(r) = 1 / r^n.

    Undefined at r == 0 (returns inf).
    """
    return 1.0 / np.asarray(r, dtype=float)**n


class PolyDecayPerturbation(BasePerturbation):
    param_names = ("n",)

    def __init__(self, n: float) -> None:
        super().__init__(n)

    def value(self, r):
        (n,) = self._params
        return poly_decay_perturbation(r, n)
