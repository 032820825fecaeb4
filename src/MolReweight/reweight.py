# MolReweight/reweight.py
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, as_completed, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

import numpy as np
import MDAnalysis as mda

from .perturbations import build_perturbation
from .result import ReweightResult
from .utils.compute import BoltzmannWeights, ContributionMask, FrameEnergy
from .utils.config import ReweightConfig, load_reweight_yaml
from .utils.neighbor import AllPairDistances, CheckMoleculeBlocks, DistanceMode, MinimumDistances
from .utils.trjio import frame_box, iter_frames, n_frames_in_range, select_group, selection_predicate

Group = Union[str, Sequence[int], np.ndarray]


@dataclass(frozen=True, eq=False)
class _FramePlan:
    """Everything a frame energy needs besides the coordinates."""
    perturbation: Callable
    mode: DistanceMode
    cutoff: float
    vectorized: bool
    index_1: np.ndarray
    n_1: int
    mask_1: Optional[np.ndarray]
    index_2: Optional[np.ndarray] = None
    n_2: Optional[int] = None
    mask_2: Optional[np.ndarray] = None


def _snapshot(plan: _FramePlan, ts):
    # fancy indexing copies, so the snapshot survives the next trajectory read
    coords_1 = ts.positions[plan.index_1]
    coords_2 = None if plan.index_2 is None else ts.positions[plan.index_2]
    return coords_1, coords_2, frame_box(ts)


def _frame_energy(plan: _FramePlan, coords_1, coords_2, box) -> float:
    if plan.mode is DistanceMode.ALL_PAIRS:
        records = AllPairDistances(
            coords_1, coords_2, cutoff=plan.cutoff, box=box,
            index_1=plan.index_1, index_2=plan.index_2,
        )
    else:
        records = MinimumDistances(
            coords_1, plan.n_1, coords_2, plan.n_2, cutoff=plan.cutoff, box=box,
            index_1=plan.index_1, index_2=plan.index_2,
        )
    mask_2 = plan.mask_1 if plan.index_2 is None else plan.mask_2
    return FrameEnergy(records, plan.perturbation, plan.mask_1, mask_2, vectorized=plan.vectorized)


def _resolve_config(config: Optional[ReweightConfig], options) -> ReweightConfig:
    return (config or ReweightConfig()).update(**options).validate()


def _resolve_group(u: mda.Universe, group: Group, n_atoms_per_molecule: int, label: str, mode: DistanceMode) -> np.ndarray:
    indices = select_group(u, group)
    if indices.size == 0:
        raise ValueError(f"{label} is empty (group={group!r})")
    # molecule blocks only matter for minimum distances
    if mode is DistanceMode.MINIMUM:
        CheckMoleculeBlocks(indices, n_atoms_per_molecule, label)
    return indices


def _resolve_predicate(u: mda.Universe, contrib):
    if isinstance(contrib, str):
        return selection_predicate(u, contrib)
    return contrib


def _run(u: mda.Universe, plan: _FramePlan, cfg: ReweightConfig, logger=None) -> ReweightResult:
    n_frames = n_frames_in_range(u, cfg.start, cfg.stop, cfg.step)
    energy = np.zeros(n_frames)
    if cfg.verbose:
        print(f"[reweight] frames={n_frames}, mode={plan.mode.value}, cutoff={plan.cutoff}, workers={cfg.n_workers}")

    if cfg.n_workers == 1 or n_frames <= 1:
        for iframe, ts in iter_frames(u, cfg.start, cfg.stop, cfg.step):
            energy[iframe] = _frame_energy(plan, *_snapshot(plan, ts))
    else:
        # frames are read in order in this thread, at most n_workers of them in flight;
        # a failing frame stops the reading
        n_workers = int(cfg.n_workers)
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            pending = {}
            for iframe, ts in iter_frames(u, cfg.start, cfg.stop, cfg.step):
                pending[executor.submit(_frame_energy, plan, *_snapshot(plan, ts))] = iframe
                if len(pending) >= n_workers:
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        energy[pending.pop(future)] = future.result()
            for future in as_completed(pending):
                energy[pending[future]] = future.result()

    probability, relative_probability = BoltzmannWeights(energy, k=cfg.k, T=cfg.T)
    result = ReweightResult(probability, relative_probability, energy)

    if logger is not None:
        for iframe in range(n_frames):
            logger.add_scalar("Reweight/energy", energy[iframe], iframe)
        logger.add_scalar("Reweight/effective_sample_size", result.effective_sample_size, 0)
    if cfg.verbose and n_frames > 0:
        print(f"[reweight] mean energy={np.mean(energy)}, effective sample size={result.effective_sample_size:.3f}")

    return result


def reweight_group(
    u: mda.Universe,
    perturbation: Callable,
    group_1: Group,
    n_atoms_per_molecule: int,
    *,
    config: Optional[ReweightConfig] = None,
    logger=None,
    **options,
) -> ReweightResult:
    """
    Reweight the frames of a trajectory under a perturbation acting inside one group of atoms.

    Parameters
    ----------
    u : MDAnalysis.Universe
        Topology and trajectory.
    perturbation : callable
        perturbation(r) -> energy, evaluated on distances (not squared).
    group_1 : str or sequence of int
        MDAnalysis selection string or 0-based atom indices.
    n_atoms_per_molecule : int
        Atoms per molecule block of group_1. Must divide the group size
        in minimum-distance mode; unused with all_dist=True.
    config : ReweightConfig, optional
        Base options; defaults to ReweightConfig().
    logger : object, optional
        Anything with add_scalar(tag, value, step) (e.g. a TensorBoard SummaryWriter).
    **options
        Overrides of ReweightConfig fields: all_dist=False, cutoff=12.0,
        k=1.0, T=1.0, start, stop, step, n_workers=1, vectorized=False,
        verbose=False.

    Returns
    -------
    result : ReweightResult
        probability, relative_probability and energy per frame.

    Notes
    -----
    - all_dist=True: sum over all unique atom pairs of group_1 within cutoff.
    - all_dist=False: every molecule block contributes its minimum distance
      to the atoms of the other blocks of the group, if within cutoff. A
      block is never compared with its own atoms.
    """
    cfg = _resolve_config(config, options)
    index_1 = _resolve_group(u, group_1, n_atoms_per_molecule, "group_1", cfg.mode)
    plan = _FramePlan(
        perturbation=perturbation,
        mode=cfg.mode,
        cutoff=float(cfg.cutoff),
        vectorized=cfg.vectorized,
        index_1=index_1,
        n_1=int(n_atoms_per_molecule),
        mask_1=None,
    )
    return _run(u, plan, cfg, logger)


def reweight_groups(
    u: mda.Universe,
    perturbation: Callable,
    group_1: Group,
    n_atoms_per_molecule_1: int,
    group_2: Group,
    n_atoms_per_molecule_2: int,
    *,
    mol_1_contrib: Optional[Union[Callable, str]] = None,
    mol_2_contrib: Optional[Union[Callable, str]] = None,
    config: Optional[ReweightConfig] = None,
    logger=None,
    **options,
) -> ReweightResult:
    """
    Reweight the frames of a trajectory under a perturbation acting between two groups of atoms.

    Parameters
    ----------
    u : MDAnalysis.Universe
        Topology and trajectory.
    perturbation : callable
        perturbation(r) -> energy, evaluated on distances (not squared).
    group_1, group_2 : str or sequence of int
        MDAnalysis selection strings or 0-based atom indices.
    n_atoms_per_molecule_1, n_atoms_per_molecule_2 : int
        Molecule block sizes. In minimum-distance mode each must divide its
        group size; unused with all_dist=True.
    mol_1_contrib, mol_2_contrib : callable or str, optional
        predicate(atom) -> bool restricting which atoms of each group may
        contribute, e.g. ``lambda at: at.name == "H"``, or an MDAnalysis
        selection string. A distance contributes only if the atoms realizing
        it pass both predicates. Default: every atom.
    config : ReweightConfig, optional
        Base options; defaults to ReweightConfig().
    logger : object, optional
        Anything with add_scalar(tag, value, step).
    **options
        Overrides of ReweightConfig fields (see `reweight_group`).

    Returns
    -------
    result : ReweightResult

    Notes
    -----
    - all_dist=True: sum over all (group_1 atom, group_2 atom) pairs within
      cutoff, skipping pairs made of the same atom.
    - all_dist=False: every block of group_1 contributes its minimum
      distance to the atoms of group_2, if within cutoff. Atoms of group_2
      that belong to the block itself are left out. The contribution
      predicates are applied to the two atoms realizing that minimum; the
      minimum itself is always taken over all atoms.
    """
    cfg = _resolve_config(config, options)
    index_1 = _resolve_group(u, group_1, n_atoms_per_molecule_1, "group_1", cfg.mode)
    index_2 = _resolve_group(u, group_2, n_atoms_per_molecule_2, "group_2", cfg.mode)

    mol_1_contrib = _resolve_predicate(u, mol_1_contrib)
    mol_2_contrib = _resolve_predicate(u, mol_2_contrib)
    plan = _FramePlan(
        perturbation=perturbation,
        mode=cfg.mode,
        cutoff=float(cfg.cutoff),
        vectorized=cfg.vectorized,
        index_1=index_1,
        n_1=int(n_atoms_per_molecule_1),
        mask_1=None if mol_1_contrib is None else ContributionMask(u.atoms[index_1], mol_1_contrib),
        index_2=index_2,
        n_2=int(n_atoms_per_molecule_2),
        mask_2=None if mol_2_contrib is None else ContributionMask(u.atoms[index_2], mol_2_contrib),
    )
    return _run(u, plan, cfg, logger)


def reweight(
    u: mda.Universe,
    perturbation: Callable,
    group_1: Group,
    n_atoms_per_molecule_1: int,
    group_2: Optional[Group] = None,
    n_atoms_per_molecule_2: Optional[int] = None,
    *,
    mol_1_contrib: Optional[Union[Callable, str]] = None,
    mol_2_contrib: Optional[Union[Callable, str]] = None,
    config: Optional[ReweightConfig] = None,
    logger=None,
    **options,
) -> ReweightResult:
    """
    Compute the energy difference of each frame when a perturbation is applied, and the resulting frame weights.

    Dispatches to `reweight_group` (one group) or `reweight_groups` (two groups).

    Example
    -------
    >>> u = mda.Universe("system.pdb", "traj.xtc")
    >>> i1 = u.select_atoms("index 97 or index 106").indices
    >>> i2 = u.select_atoms("resid 15 and name HB3").indices
    >>> res = reweight(u, lambda r: r / 10, i1, 1, i2, 1, all_dist=True, cutoff=25.0)
    >>> res.energy      # sum of distances (nm) between the atoms, per frame
    >>> print(res)      # mean and standard deviation of the three vectors
    """
    if group_2 is None:
        if n_atoms_per_molecule_2 is not None:
            raise ValueError("n_atoms_per_molecule_2 given without group_2")
        if mol_1_contrib is not None or mol_2_contrib is not None:
            raise ValueError("mol_1_contrib/mol_2_contrib require two groups")
        return reweight_group(
            u, perturbation, group_1, n_atoms_per_molecule_1,
            config=config, logger=logger, **options,
        )
    if n_atoms_per_molecule_2 is None:
        raise ValueError("n_atoms_per_molecule_2 is required with group_2")
    return reweight_groups(
        u, perturbation, group_1, n_atoms_per_molecule_1, group_2, n_atoms_per_molecule_2,
        mol_1_contrib=mol_1_contrib, mol_2_contrib=mol_2_contrib,
        config=config, logger=logger, **options,
    )


def reweight_from_yaml(u: mda.Universe, path: Union[str, Path], logger=None, **options) -> ReweightResult:
    """
    Run a reweighting described by a YAML file (see `load_reweight_yaml`).

    Keyword options override the file's `options` mapping.
    """
    doc = load_reweight_yaml(path)
    pert = dict(doc["perturbation"])
    perturbation = build_perturbation(pert.pop("style"), **pert)
    config = ReweightConfig().update(**doc.get("options", {})).update(**options)
    return reweight(
        u, perturbation,
        doc["group_1"], doc["n_atoms_per_molecule_1"],
        doc.get("group_2"), doc.get("n_atoms_per_molecule_2"),
        mol_1_contrib=doc.get("contrib_1"), mol_2_contrib=doc.get("contrib_2"),
        config=config, logger=logger,
    )
