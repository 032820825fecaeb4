"""
Tests for the ReweightResult container.
"""

import dataclasses

import numpy as np
import pytest

from MolReweight import ReweightResult


@pytest.fixture
def result():
    energy = np.array([1.0, 2.0, 3.0])
    relative = np.exp(-energy)
    return ReweightResult(relative / relative.sum(), relative, energy)


def test_vectors_are_read_only(result):
    with pytest.raises(ValueError):
        result.energy[0] = 10.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.energy = np.zeros(3)


def test_input_is_copied():
    energy = np.array([1.0, 2.0])
    res = ReweightResult(np.array([0.5, 0.5]), np.array([1.0, 1.0]), energy)
    energy[0] = 99.0
    assert res.energy[0] == 1.0


def test_length_mismatch():
    with pytest.raises(ValueError, match="same length"):
        ReweightResult(np.ones(2) / 2, np.ones(2), np.ones(3))


def test_summary_blocks(result):
    text = result.summary()
    assert "FRAME WEIGHTS\n" in text
    assert "FRAME WEIGHTS RELATIVE TO THE ORIGINAL ONES" in text
    assert "COMPUTED ENERGY AFTER PERTURBATION" in text
    assert "Average energy = 2.0" in text
    assert "standard deviation = 1.0" in text
    assert str(result) == text


def test_summary_empty():
    res = ReweightResult(np.array([]), np.array([]), np.array([]))
    assert res.n_frames == 0
    assert "Average energy = nan" in res.summary()


def test_effective_sample_size(result):
    p = result.probability
    assert result.effective_sample_size == pytest.approx(1.0 / np.sum(p**2))


def test_to_dict(result):
    d = result.to_dict()
    assert set(d) == {"probability", "relative_probability", "energy"}
    assert d["energy"] == [1.0, 2.0, 3.0]


def test_write(result, tmp_path):
    path = result.write(tmp_path / "weights.dat")
    table = np.loadtxt(path)
    assert table.shape == (3, 4)
    assert np.array_equal(table[:, 0], [0, 1, 2])
    assert np.allclose(table[:, 1], result.probability)
    assert np.allclose(table[:, 3], result.energy)
    assert path.read_text().startswith("# frame probability relative_probability energy")
