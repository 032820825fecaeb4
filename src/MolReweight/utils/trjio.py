# MolReweight/utils/trjio.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np
import MDAnalysis as mda


def load_universe(topology: Union[str, Path], *trajectories: Union[str, Path], **kwargs) -> mda.Universe:
    """
    Load a topology (pdb, gro, psf, ...) and optional trajectory files into a Universe.

    Missing files raise FileNotFoundError before MDAnalysis is asked to guess a format.
    """
    for p in (topology, *trajectories):
        if not Path(p).exists():
            raise FileNotFoundError(p)
    return mda.Universe(str(topology), *[str(t) for t in trajectories], **kwargs)


def has_valid_box(dimensions: Optional[np.ndarray]) -> bool:
    """
    Return True if `dimensions` describes a usable periodic box.
    MDAnalysis dimensions are [lx, ly, lz, alpha, beta, gamma] in Å/deg.
    """
    if dimensions is None:
        return False
    dims = np.asarray(dimensions, dtype=float)
    if dims.shape[0] < 6:
        return False
    if not np.all(np.isfinite(dims)):
        return False
    return bool(np.all(dims[:3] > 0.0))


def frame_box(ts) -> Optional[np.ndarray]:
    """Copy of the timestep box, or None when the frame has no periodic cell."""
    if not has_valid_box(ts.dimensions):
        return None
    return np.array(ts.dimensions, dtype=np.float32)


def n_frames_in_range(
    u: mda.Universe,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    step: Optional[int] = None,
) -> int:
    """Number of frames visited by u.trajectory[start:stop:step]."""
    return len(range(*slice(start, stop, step).indices(len(u.trajectory))))


def iter_frames(
    u: mda.Universe,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    step: Optional[int] = None,
) -> Iterator[Tuple[int, object]]:
    """
    Iterate over a frame range once, in order.

    Yields
    ------
    (iframe, ts) : tuple
        iframe counts from 0 within the range; ts is the MDAnalysis
        Timestep, valid until the next iteration.
    """
    if n_frames_in_range(u, start, stop, step) == 0:
        return
    for iframe, ts in enumerate(u.trajectory[start:stop:step]):
        yield iframe, ts


def select_group(u: mda.Universe, group: Union[str, Sequence[int], np.ndarray]) -> np.ndarray:
    """
    Resolve a group into ordered 0-based atom indices.

    Parameters
    ----------
    u : MDAnalysis.Universe
    group : str or sequence of int
        MDAnalysis selection string (e.g. "resname TFE and name O"),
        AtomGroup, or explicit atom indices. Explicit indices keep their order.

    Returns
    -------
    indices : np.ndarray of int64
    """
    if isinstance(group, str):
        return u.select_atoms(group).indices.astype(np.int64)
    if hasattr(group, "indices"):
        return np.asarray(group.indices, dtype=np.int64)
    indices = np.asarray(group, dtype=np.int64).reshape(-1)
    n_atoms = u.atoms.n_atoms
    bad = indices[(indices < 0) | (indices >= n_atoms)]
    if bad.size > 0:
        raise ValueError(f"atom indices out of range [0, {n_atoms}): {bad[:10].tolist()}")
    return indices


def selection_predicate(u: mda.Universe, selection: str) -> Callable:
    """Predicate that is True for atoms matched by an MDAnalysis selection string."""
    selected = set(u.select_atoms(selection).indices.tolist())
    return lambda atom: atom.index in selected
