# MolReweight/utils/config.py
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .neighbor import DistanceMode


@dataclass
class ReweightConfig:
    """
    Parameters
    ----------
    all_dist : bool
        If True, every atom pair within cutoff contributes. If False
        (default), only minimum distances between molecule blocks do.
    cutoff : float
        Distance cutoff, same units as the coordinates (Å for MDAnalysis).
    k : float
        Boltzmann-like constant.
    T : float
        Temperature.
    start, stop, step : int or None
        Frame range, as in u.trajectory[start:stop:step].
    n_workers : int
        Threads computing frame energies. 1 runs frames sequentially.
    vectorized : bool
        Call the perturbation once per frame on the array of distances
        instead of once per distance.
    verbose : bool
        Print progress messages.
    """
    all_dist: bool = False
    cutoff: float = 12.0
    k: float = 1.0
    T: float = 1.0
    start: Optional[int] = None
    stop: Optional[int] = None
    step: Optional[int] = None
    n_workers: int = 1
    vectorized: bool = False
    verbose: bool = False

    @property
    def mode(self) -> DistanceMode:
        return DistanceMode.from_flag(self.all_dist)

    def update(self, **overrides) -> "ReweightConfig":
        """Return a copy with the given fields replaced."""
        names = {f.name for f in fields(self)}
        for key in overrides:
            if key not in names:
                raise AttributeError(f"Unknown ReweightConfig field '{key}'")
        return replace(self, **overrides)

    def validate(self) -> "ReweightConfig":
        if not self.cutoff > 0:
            raise ValueError(f"cutoff must be positive, got {self.cutoff}")
        if not self.k * self.T > 0:
            raise ValueError(f"k*T must be positive, got k={self.k}, T={self.T}")
        if int(self.n_workers) < 1:
            raise ValueError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.step is not None and self.step == 0:
            raise ValueError("step must not be 0")
        return self


# -----------------------------
# YAML input
# -----------------------------

def sanity_check_reweight_yaml(doc: Dict[str, Any]) -> None:
    """
    Basic structural checks on a reweighting YAML document.
    Raises ValueError with actionable messages.
    """
    if not isinstance(doc, dict):
        raise ValueError("reweighting YAML must be a mapping at top level.")
    for key in ("group_1", "n_atoms_per_molecule_1", "perturbation"):
        if key not in doc:
            raise ValueError(f"reweighting YAML missing key '{key}'.")
    if ("group_2" in doc) != ("n_atoms_per_molecule_2" in doc):
        raise ValueError("'group_2' and 'n_atoms_per_molecule_2' must be given together.")
    pert = doc["perturbation"]
    if not isinstance(pert, dict) or "style" not in pert:
        raise ValueError("'perturbation' must be a mapping with a 'style' key, e.g. {style: lj, epsilon: 0.2, sigma: 3.4}.")
    if "options" in doc and not isinstance(doc["options"], dict):
        raise ValueError("'options' must be a mapping of ReweightConfig fields.")
    for key in ("contrib_1", "contrib_2"):
        if key in doc and "group_2" not in doc:
            raise ValueError(f"'{key}' requires 'group_2'.")
        if key in doc and not isinstance(doc[key], str):
            raise ValueError(f"'{key}' must be an MDAnalysis selection string.")


def load_reweight_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load and check a reweighting YAML file.

    Example
    -------
    group_1: resname TFE
    n_atoms_per_molecule_1: 6
    group_2: protein
    n_atoms_per_molecule_2: 1
    contrib_1: name H
    perturbation:
      style: gaussian_decay
      alpha: 0.005
      beta: 0.005
    options:
      all_dist: true
      cutoff: 12.0
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with open(path, "r") as f:
        doc = yaml.safe_load(f)
    sanity_check_reweight_yaml(doc)
    return doc
