# MolReweight/perturbations/__init__.py
from .base import BasePerturbation
from .gaussian import GaussianDecayPerturbation, gaussian_decay_perturbation
from .lennardjones import LennardJonesPerturbation, lennard_jones_perturbation
from .polydecay import PolyDecayPerturbation, poly_decay_perturbation

PERTURBATION_REGISTRY = {
    "lj": LennardJonesPerturbation,
    "lennard_jones": LennardJonesPerturbation,
    "poly_decay": PolyDecayPerturbation,
    "gaussian_decay": GaussianDecayPerturbation,
}


def build_perturbation(style: str, **params) -> BasePerturbation:
    """Construct a registered perturbation by style name, e.g. build_perturbation("lj", epsilon=1.0, sigma=3.4)."""
    if style not in PERTURBATION_REGISTRY:
        raise KeyError(f"Unknown perturbation style '{style}'. Available: {list(PERTURBATION_REGISTRY)}")
    return PERTURBATION_REGISTRY[style](**params)
