# MolReweight/utils/compute.py
import numpy as np
from typing import Callable, Optional, Tuple
from scipy.special import softmax

from .neighbor import DistanceRecords

# ===========================
# Per-frame energy
# ===========================

def ContributionMask(atoms, predicate: Optional[Callable] = None) -> np.ndarray:
    """
    Evaluate a contribution predicate on every atom of a group.

    Parameters
    ----------
    atoms : MDAnalysis.AtomGroup or sequence of Atom
        Atoms in group order.
    predicate : callable, optional
        predicate(atom) -> bool, e.g. ``lambda at: at.name == "H"``.
        If None, every atom may contribute.

    Returns
    -------
    mask : np.ndarray of bool
        mask[k] is True if the k-th atom of the group may contribute.
    """
    n_atoms = len(atoms)
    if predicate is None:
        return np.ones(n_atoms, dtype=bool)
    return np.fromiter((bool(predicate(atom)) for atom in atoms), dtype=bool, count=n_atoms)


def FrameEnergy(
    records: DistanceRecords,
    perturbation: Callable,
    mask_1: Optional[np.ndarray] = None,
    mask_2: Optional[np.ndarray] = None,
    vectorized: bool = False,
) -> float:
    """
    Sum the perturbation over the qualifying distances of one frame.

    A record contributes if it is within cutoff, is not a self pair, its
    atom `i` passes `mask_1` and its atom `j` passes `mask_2`.

    Parameters
    ----------
    records : DistanceRecords
        Output of `AllPairDistances` or `MinimumDistances`.
    perturbation : callable
        perturbation(r) -> energy, r being a distance (never squared).
    mask_1, mask_2 : np.ndarray of bool, optional
        Contribution masks indexed by group-local atom position.
    vectorized : bool
        If True, call `perturbation` once on the array of qualifying
        distances and sum the result; otherwise call it once per distance.

    Returns
    -------
    energy : float
        0.0 when nothing qualifies.
    """
    sel = np.flatnonzero(records.qualifying())
    if mask_1 is not None:
        sel = sel[mask_1[records.i[sel]]]
    if mask_2 is not None:
        sel = sel[mask_2[records.j[sel]]]

    distances = records.d[sel]
    if distances.size == 0:
        return 0.0
    if vectorized:
        return float(np.sum(perturbation(distances)))

    energy = 0.0
    for r in distances:
        energy += perturbation(float(r))
    return float(energy)


# ===========================
# Frame weights
# ===========================

def BoltzmannWeights(
    energy: np.ndarray,
    k: float = 1.0,
    T: float = 1.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert per-frame perturbation energies into frame weights.

        relative_probability_i = exp(-E_i / (k·T))
        probability_i          = relative_probability_i / Σ_j relative_probability_j

    Parameters
    ----------
    energy : np.ndarray
        1D array of per-frame energies.
    k : float
        Boltzmann-like constant.
    T : float
        Temperature.

    Returns
    -------
    probability : np.ndarray
        Normalized weights, sum to 1.
    relative_probability : np.ndarray
        Unnormalized Boltzmann factors.

    Notes
    -----
    - The normalization is done with a softmax over -E/(k·T), which is the
      same quotient but does not turn into 0/0 when every Boltzmann factor
      underflows (large energies).
    - Non-finite energies propagate into both outputs.
    - An empty energy vector gives two empty arrays.
    """
    energy = np.asarray(energy, dtype=np.float64)
    if energy.ndim != 1:
        raise ValueError(f"energy must be 1D, got shape {energy.shape}")
    kT = k * T
    if not kT > 0:
        raise ValueError(f"k*T must be positive, got k={k}, T={T}")
    if energy.size == 0:
        return np.zeros(0), np.zeros(0)

    x = -energy / kT
    relative_probability = np.exp(x)
    probability = softmax(x)
    return probability, relative_probability


def EffectiveSampleSize(probability: np.ndarray) -> float:
    """
    Kish effective number of frames, 1 / Σ p_i², for normalized weights p.

    Equals n for uniform weights and 1 when a single frame carries all the weight.
    """
    p = np.asarray(probability, dtype=np.float64)
    if p.size == 0:
        return float("nan")
    return float(1.0 / np.sum(p**2))
