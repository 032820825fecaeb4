"""
MolReweight: Boltzmann reweighting of molecular dynamics trajectories under distance-based energy perturbations.
"""

# Reweighting drivers
from .reweight import reweight, reweight_group, reweight_groups, reweight_from_yaml
from .result import ReweightResult

# Perturbations
from .perturbations import lennard_jones_perturbation, poly_decay_perturbation, gaussian_decay_perturbation
from .perturbations import LennardJonesPerturbation, PolyDecayPerturbation, GaussianDecayPerturbation
from .perturbations import BasePerturbation, PERTURBATION_REGISTRY, build_perturbation

# Utilities
from .utils.neighbor import DistanceMode, DistanceRecords, AllPairDistances, MinimumDistances, CheckMoleculeBlocks
from .utils.compute import FrameEnergy, BoltzmannWeights, ContributionMask, EffectiveSampleSize
from .utils.config import ReweightConfig, load_reweight_yaml
from .utils.trjio import load_universe, select_group

__all__ = [
    "reweight",
    "reweight_group",
    "reweight_groups",
    "reweight_from_yaml",
    "ReweightResult",
    "lennard_jones_perturbation",
    "poly_decay_perturbation",
    "gaussian_decay_perturbation",
    "LennardJonesPerturbation",
    "PolyDecayPerturbation",
    "GaussianDecayPerturbation",
    "BasePerturbation",
    "PERTURBATION_REGISTRY",
    "build_perturbation",
    "DistanceMode",
    "DistanceRecords",
    "AllPairDistances",
    "MinimumDistances",
    "CheckMoleculeBlocks",
    "FrameEnergy",
    "BoltzmannWeights",
    "ContributionMask",
    "EffectiveSampleSize",
    "ReweightConfig",
    "load_reweight_yaml",
    "load_universe",
    "select_group",
]
