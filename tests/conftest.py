import numpy as np
import pytest
import MDAnalysis as mda
from MDAnalysis.coordinates.memory import MemoryReader

BOX = 20.0

# three molecules of two atoms on a line along x (y = z = 1), cubic box of 20 Å
#   A = atoms 0 (H), 1 (O); B = atoms 2 (H), 3 (O); C = atoms 4 (H), 5 (O)
# molecule C sits across the periodic boundary from A
LINE_FRAMES_X = [
    [1.0, 2.0, 4.0, 5.0, 19.0, 18.0],
    [1.0, 2.0, 5.0, 6.0, 19.0, 18.0],
    [1.0, 2.0, 10.0, 11.0, 19.0, 18.0],
]


def make_universe(coords, names, resnames, atom_resindex, box=None):
    """In-memory Universe with names/resnames; box is a cube edge length or None."""
    coords = np.asarray(coords, dtype=np.float32)
    if coords.ndim == 2:
        coords = coords[None]
    n_frames, n_atoms, _ = coords.shape
    atom_resindex = np.asarray(atom_resindex)
    n_residues = int(atom_resindex.max()) + 1

    u = mda.Universe.empty(n_atoms, n_residues=n_residues, atom_resindex=atom_resindex, trajectory=True)
    u.add_TopologyAttr("name", list(names))
    u.add_TopologyAttr("resname", list(resnames))
    u.add_TopologyAttr("resid", list(range(1, n_residues + 1)))

    dimensions = None
    if box is not None:
        dimensions = np.tile(np.array([box, box, box, 90.0, 90.0, 90.0], dtype=np.float32), (n_frames, 1))
    u.load_new(coords, format=MemoryReader, order="fac", dimensions=dimensions)
    return u


def line_coords():
    x = np.asarray(LINE_FRAMES_X, dtype=np.float32)
    coords = np.ones((x.shape[0], x.shape[1], 3), dtype=np.float32)
    coords[:, :, 0] = x
    return coords


@pytest.fixture
def line_universe():
    return make_universe(
        line_coords(),
        names=["H", "O", "H", "O", "H", "O"],
        resnames=["AAA", "BBB", "CCC"],
        atom_resindex=[0, 0, 1, 1, 2, 2],
        box=BOX,
    )


@pytest.fixture
def line_universe_nobox():
    return make_universe(
        line_coords(),
        names=["H", "O", "H", "O", "H", "O"],
        resnames=["AAA", "BBB", "CCC"],
        atom_resindex=[0, 0, 1, 1, 2, 2],
        box=None,
    )


@pytest.fixture
def line_positions():
    """Frame 0 coordinates and box, for direct adapter tests."""
    box = np.array([BOX, BOX, BOX, 90.0, 90.0, 90.0], dtype=np.float32)
    return line_coords()[0], box


# two reference molecules (H, O) far apart, four single-atom targets, no box
#   R1 = atoms 0 (H, x=0), 1 (O, x=1); R2 = atoms 2 (H, x=50), 3 (O, x=51)
#   targets = atoms 4..7, moving between frames
CONTACT_TARGETS_X = [
    [3.0, 5.0, 7.0, 53.5],
    [3.0, 5.0, 7.0, 48.0],
    [-1.5, 5.0, 7.0, 48.0],
]


@pytest.fixture
def contact_universe():
    n_frames = len(CONTACT_TARGETS_X)
    coords = np.zeros((n_frames, 8, 3), dtype=np.float32)
    coords[:, :4, 0] = [0.0, 1.0, 50.0, 51.0]
    coords[:, 4:, 0] = CONTACT_TARGETS_X
    return make_universe(
        coords,
        names=["H", "O", "H", "O", "N", "N", "N", "N"],
        resnames=["REF", "REF", "TGT", "TGT", "TGT", "TGT"],
        atom_resindex=[0, 0, 1, 1, 2, 3, 4, 5],
        box=None,
    )


@pytest.fixture
def long_universe():
    """Twenty frames of the line geometry, for frame-reading tests."""
    coords = np.concatenate([line_coords()] * 7)[:20]
    return make_universe(
        coords,
        names=["H", "O", "H", "O", "H", "O"],
        resnames=["AAA", "BBB", "CCC"],
        atom_resindex=[0, 0, 1, 1, 2, 2],
        box=BOX,
    )
