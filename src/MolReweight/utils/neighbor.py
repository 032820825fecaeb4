# MolReweight/utils/neighbor.py
import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from numba import njit
from MDAnalysis.lib.distances import capped_distance, self_capped_distance


class DistanceMode(enum.Enum):
    """How distances between two groups are collected in one frame."""
    ALL_PAIRS = "all_pairs"
    MINIMUM = "minimum"

    @classmethod
    def from_flag(cls, all_dist: bool) -> "DistanceMode":
        return cls.ALL_PAIRS if all_dist else cls.MINIMUM


@dataclass(frozen=True)
class DistanceRecords:
    """
    Co-indexed arrays describing the distances found in one frame.

    Attributes
    ----------
    i, j : np.ndarray
        Group-local positions of the atoms realizing each distance
        (i in group 1, j in group 2 or again group 1). -1 when no atom pair
        was found within the cutoff.
    d : np.ndarray
        Distances (not squared). np.inf when no pair was found.
    within_cutoff : np.ndarray of bool
    is_self : np.ndarray of bool
        True for two-group pairs made of one and the same atom. Minimum
        records leave the reference block out beforehand and are never self.
    """
    i: np.ndarray
    j: np.ndarray
    d: np.ndarray
    within_cutoff: np.ndarray
    is_self: np.ndarray

    def __len__(self) -> int:
        return self.d.shape[0]

    def qualifying(self) -> np.ndarray:
        """Boolean mask of records that may contribute energy."""
        return self.within_cutoff & ~self.is_self


def CheckMoleculeBlocks(group: Sequence[int], n_atoms_per_molecule: int, label: str = "group") -> int:
    """
    Validate the molecule partitioning of a group and return the number of blocks.

    Blocks are contiguous runs of `n_atoms_per_molecule` entries of `group`,
    in the order given.
    """
    n_atoms = len(group)
    if int(n_atoms_per_molecule) != n_atoms_per_molecule or n_atoms_per_molecule < 1:
        raise ValueError(f"{label}: n_atoms_per_molecule must be a positive integer, got {n_atoms_per_molecule}")
    if n_atoms % n_atoms_per_molecule != 0:
        raise ValueError(
            f"{label}: number of atoms ({n_atoms}) is not a multiple of "
            f"n_atoms_per_molecule ({n_atoms_per_molecule})"
        )
    return n_atoms // int(n_atoms_per_molecule)


def _sorted_pairs(pairs, distances) -> Tuple[np.ndarray, np.ndarray]:
    # fixed (i, j) order so that summation order does not depend on the search method
    pairs = np.asarray(pairs, dtype=np.int64).reshape(-1, 2)
    distances = np.asarray(distances, dtype=np.float64).reshape(-1)
    order = np.lexsort((pairs[:, 1], pairs[:, 0]))
    return pairs[order], distances[order]


def AllPairDistances(
    coords_1: np.ndarray,
    coords_2: Optional[np.ndarray] = None,
    cutoff: float = 12.0,
    box: Optional[np.ndarray] = None,
    index_1: Optional[np.ndarray] = None,
    index_2: Optional[np.ndarray] = None,
) -> DistanceRecords:
    """
    Collect every atom pair within `cutoff` under the minimum-image convention.

    Parameters
    ----------
    coords_1 : np.ndarray
        (N1, 3) coordinates of group 1.
    coords_2 : np.ndarray, optional
        (N2, 3) coordinates of group 2. If None, the unique unordered pairs
        (i < j) inside group 1 are enumerated and self pairs never appear.
    cutoff : float
        Maximum distance.
    box : np.ndarray, optional
        [lx, ly, lz, alpha, beta, gamma]. If None, no periodic wrapping.
    index_1, index_2 : np.ndarray, optional
        Global atom indices of the two groups. When given in two-group mode,
        pairs referring to the same atom are flagged `is_self`.

    Returns
    -------
    records : DistanceRecords
        One record per pair, all within cutoff.
    """
    if coords_2 is None:
        pairs, distances = self_capped_distance(coords_1, max_cutoff=cutoff, box=box, return_distances=True)
        pairs = np.sort(np.asarray(pairs, dtype=np.int64).reshape(-1, 2), axis=1)
    else:
        pairs, distances = capped_distance(coords_1, coords_2, max_cutoff=cutoff, box=box, return_distances=True)
    pairs, distances = _sorted_pairs(pairs, distances)

    is_self = np.zeros(distances.shape[0], dtype=bool)
    if coords_2 is not None and index_1 is not None and index_2 is not None:
        is_self = np.asarray(index_1)[pairs[:, 0]] == np.asarray(index_2)[pairs[:, 1]]

    return DistanceRecords(
        i=pairs[:, 0].copy(),
        j=pairs[:, 1].copy(),
        d=distances,
        within_cutoff=np.ones(distances.shape[0], dtype=bool),
        is_self=is_self,
    )


@njit
def _block_minimum_kernel(pi, pj, d, n_1, best_d, best_i, best_j):
    '''
    Reduce a list of atom pairs to the closest pair of every reference block of group 1.

    Parameters
    ----------
    pi, pj : np.ndarray
        Atom positions (group-local) of each pair.
    d : np.ndarray
        Pair distances.
    n_1 : int
        Atoms per molecule block in group 1.
    best_d, best_i, best_j : np.ndarray
        Output arrays of length n_blocks_1, pre-filled with inf / -1.
    '''
    for p in range(d.shape[0]):
        b = pi[p] // n_1
        if d[p] < best_d[b]:
            best_d[b] = d[p]
            best_i[b] = pi[p]
            best_j[b] = pj[p]


def _own_block_pairs(pairs, n_1, index_1, index_2) -> np.ndarray:
    # True where the target atom is one of the atoms of the reference block itself
    index_1 = np.asarray(index_1, dtype=np.int64)
    index_2 = np.asarray(index_2, dtype=np.int64)
    owner = np.full(max(index_1.max(), index_2.max()) + 1, -1, dtype=np.int64)
    owner[index_1] = np.arange(index_1.shape[0]) // n_1
    return owner[index_2[pairs[:, 1]]] == pairs[:, 0] // n_1


def MinimumDistances(
    coords_1: np.ndarray,
    n_atoms_per_molecule_1: int,
    coords_2: Optional[np.ndarray] = None,
    n_atoms_per_molecule_2: Optional[int] = None,
    cutoff: float = 12.0,
    box: Optional[np.ndarray] = None,
    index_1: Optional[np.ndarray] = None,
    index_2: Optional[np.ndarray] = None,
) -> DistanceRecords:
    """
    Minimum distance between every reference molecule of group 1 and the target group.

    Group 1 is split into contiguous blocks of `n_atoms_per_molecule_1` atoms.
    Each block acts as a reference molecule and gets one record: the
    smallest distance from any of its atoms to any atom of group 2, or,
    when `coords_2` is None, to any atom of the other blocks of group 1.

    Parameters
    ----------
    coords_1 : np.ndarray
        (N1, 3) coordinates of group 1.
    n_atoms_per_molecule_1 : int
        Block size in group 1. Must divide N1.
    coords_2 : np.ndarray, optional
        (N2, 3) coordinates of group 2. If None, group 1 is its own target.
    n_atoms_per_molecule_2 : int, optional
        Block size in group 2. Must divide N2.
    cutoff : float
        Reference blocks with no target atom within `cutoff` are reported
        with within_cutoff=False.
    box : np.ndarray, optional
        [lx, ly, lz, alpha, beta, gamma]. If None, no periodic wrapping.
    index_1, index_2 : np.ndarray, optional
        Global atom indices of the groups. In two-group mode, target atoms
        that belong to the reference block itself are left out.

    Returns
    -------
    records : DistanceRecords
        n_blocks_1 records in block order.

    Notes
    -----
    - A reference block is never compared against its own atoms; this is
      decided by identity (block position or global index), not by a zero
      distance, so distinct atoms at coincident positions still count.
    - i and j identify the atoms realizing each minimum, so contribution
      filters can be applied to them afterwards.
    """
    one_group = coords_2 is None
    if one_group:
        coords_2, n_atoms_per_molecule_2 = coords_1, n_atoms_per_molecule_1
    elif n_atoms_per_molecule_2 is None:
        raise ValueError("n_atoms_per_molecule_2 is required when coords_2 is given")

    n_1 = int(n_atoms_per_molecule_1)
    n_blocks_1 = CheckMoleculeBlocks(coords_1, n_1, "group_1")
    CheckMoleculeBlocks(coords_2, int(n_atoms_per_molecule_2), "group_2")

    pairs, distances = capped_distance(coords_1, coords_2, max_cutoff=cutoff, box=box, return_distances=True)
    pairs, distances = _sorted_pairs(pairs, distances)

    if one_group:
        own = pairs[:, 0] // n_1 == pairs[:, 1] // n_1
    elif index_1 is not None and index_2 is not None and distances.size > 0:
        own = _own_block_pairs(pairs, n_1, index_1, index_2)
    else:
        own = np.zeros(distances.shape[0], dtype=bool)
    pairs, distances = pairs[~own], distances[~own]

    best_d = np.full(n_blocks_1, np.inf, dtype=np.float64)
    best_i = np.full(n_blocks_1, -1, dtype=np.int64)
    best_j = np.full(n_blocks_1, -1, dtype=np.int64)
    if distances.size > 0:
        _block_minimum_kernel(
            np.ascontiguousarray(pairs[:, 0]), np.ascontiguousarray(pairs[:, 1]), distances,
            n_1, best_d, best_i, best_j,
        )

    return DistanceRecords(
        i=best_i,
        j=best_j,
        d=best_d,
        within_cutoff=best_i >= 0,
        is_self=np.zeros(n_blocks_1, dtype=bool),
    )
