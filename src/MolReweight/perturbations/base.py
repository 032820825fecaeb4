# MolReweight/perturbations/base.py
from abc import ABC, abstractmethod
from typing import Tuple
import numpy as np


class BasePerturbation(ABC):
    """
    Distance perturbation with fixed, named parameters.

    Subclasses list their parameter names in `param_names` and pass the
    values to __init__ in that order.
    """
    param_names: Tuple[str, ...] = ()

    def __init__(self, *params: float):
        if len(params) != len(self.param_names):
            raise ValueError(f"{self.__class__.__name__} expects {len(self.param_names)} parameters, got {len(params)}")
        self._params = np.array(params, dtype=float)

    @abstractmethod
    def value(self, r):
        """Energy perturbation at distance(s) r."""

    def __call__(self, r):
        return self.value(r)

    @property
    def params(self) -> np.ndarray:
        return self._params.copy()

    def __repr__(self):
        args = ", ".join(f"{n}={v:g}" for n, v in zip(self.param_names, self._params))
        return f"{self.__class__.__name__}({args})"
