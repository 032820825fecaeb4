# MolReweight/result.py
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np

from .utils.compute import EffectiveSampleSize


def _mean_std(x: np.ndarray) -> Tuple[float, float]:
    # sample standard deviation; undefined below two frames
    if x.size == 0:
        return float("nan"), float("nan")
    if x.size == 1:
        return float(x[0]), float("nan")
    return float(np.mean(x)), float(np.std(x, ddof=1))


def _banner(title: str) -> str:
    line = "-" * len(title)
    return f"{line}\n{title}\n{line}"


@dataclass(frozen=True, eq=False)
class ReweightResult:
    """
    Result of a reweighting run, one entry per frame in trajectory order.

    Attributes
    ----------
    probability : np.ndarray
        Normalized weight of each frame after applying the perturbation.
    relative_probability : np.ndarray
        Weight of each frame relative to the unperturbed ensemble, exp(-E/(k·T)).
    energy : np.ndarray
        Perturbation energy of each frame.

    The arrays are read-only copies of what was passed in.
    """
    probability: np.ndarray
    relative_probability: np.ndarray
    energy: np.ndarray

    def __post_init__(self):
        lengths = {}
        for name in ("probability", "relative_probability", "energy"):
            arr = np.array(getattr(self, name), dtype=np.float64)
            if arr.ndim != 1:
                raise ValueError(f"{name} must be 1D, got shape {arr.shape}")
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)
            lengths[name] = arr.shape[0]
        if len(set(lengths.values())) != 1:
            raise ValueError(f"ReweightResult vectors must have the same length, got {lengths}")

    @property
    def n_frames(self) -> int:
        return self.energy.shape[0]

    def __len__(self) -> int:
        return self.n_frames

    @property
    def effective_sample_size(self) -> float:
        """Kish effective number of frames of the reweighted ensemble."""
        return EffectiveSampleSize(self.probability)

    def summary(self) -> str:
        """Mean and standard deviation of the three vectors, as three labeled blocks."""
        p_mean, p_std = _mean_std(self.probability)
        r_mean, r_std = _mean_std(self.relative_probability)
        e_mean, e_std = _mean_std(self.energy)
        blocks = [
            _banner("FRAME WEIGHTS")
            + f"\n\nAverage probability = {p_mean}\nstandard deviation = {p_std}",
            _banner("FRAME WEIGHTS RELATIVE TO THE ORIGINAL ONES")
            + f"\n\nAverage probability = {r_mean}\nstandard deviation = {r_std}",
            _banner("COMPUTED ENERGY AFTER PERTURBATION")
            + f"\n\nAverage energy = {e_mean}\nstandard deviation = {e_std}",
        ]
        return "\n\n".join(blocks) + "\n"

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"ReweightResult(n_frames={self.n_frames})"

    def to_dict(self) -> Dict[str, List[float]]:
        return {
            "probability": self.probability.tolist(),
            "relative_probability": self.relative_probability.tolist(),
            "energy": self.energy.tolist(),
        }

    def write(self, path: Union[str, Path]) -> Path:
        """
        Write the per-frame table `frame probability relative_probability energy`.

        Frames are numbered from 0 within the analysed frame range.
        """
        path = Path(path)
        table = np.column_stack([
            np.arange(self.n_frames, dtype=np.float64),
            self.probability,
            self.relative_probability,
            self.energy,
        ])
        np.savetxt(
            path, table,
            fmt=["%d", "%.12e", "%.12e", "%.12e"],
            header="frame probability relative_probability energy",
        )
        return path
