import numpy as np
import pytest

from meshinfo import Mesh

CUBE_VERTICES = np.array([
    [-0.5, -0.5, -0.5],
    [0.5, -0.5, -0.5],
    [0.5, 0.5, -0.5],
    [-0.5, 0.5, -0.5],
    [-0.5, -0.5, 0.5],
    [0.5, -0.5, 0.5],
    [0.5, 0.5, 0.5],
    [-0.5, 0.5, 0.5],
])

# Counter-clockwise seen from outside
CUBE_FACES = np.array([
    [0, 2, 1], [0, 3, 2],  # -z
    [4, 5, 6], [4, 6, 7],  # +z
    [0, 1, 5], [0, 5, 4],  # -y
    [3, 7, 6], [3, 6, 2],  # +y
    [0, 4, 7], [0, 7, 3],  # -x
    [1, 2, 6], [1, 6, 5],  # +x
])

TETRA_VERTICES = np.array([
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0],
])

TETRA_FACES = np.array([
    [0, 2, 1],
    [0, 1, 3],
    [0, 3, 2],
    [1, 2, 3],
])


def write_obj(path, vertices, faces):
    lines = [f"v {x} {y} {z}" for x, y, z in vertices]
    lines += [f"f {a + 1} {b + 1} {c + 1}" for a, b, c in faces]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def cube():
    return Mesh.from_arrays(CUBE_VERTICES, CUBE_FACES)


@pytest.fixture
def open_cube():
    """Cube with its first +z triangle (4, 5, 6) removed."""
    return Mesh.from_arrays(CUBE_VERTICES, np.delete(CUBE_FACES, 2, axis=0))


@pytest.fixture
def soup_cube():
    """Cube where every triangle has its own three vertices."""
    vertices = CUBE_VERTICES[CUBE_FACES.ravel()]
    return Mesh.from_arrays(vertices, np.arange(len(vertices)))


@pytest.fixture
def tetra():
    return Mesh.from_arrays(TETRA_VERTICES, TETRA_FACES)


@pytest.fixture
def open_tetra():
    """Tetrahedron without its slanted face (1, 2, 3)."""
    return Mesh.from_arrays(TETRA_VERTICES, TETRA_FACES[:3])


@pytest.fixture
def l_shape():
    """Counter-clockwise L-shaped polygon in the z=0 plane, area 3."""
    return np.array([
        [0.0, 0.0, 0.0],
        [2.0, 0.0, 0.0],
        [2.0, 1.0, 0.0],
        [1.0, 1.0, 0.0],
        [1.0, 2.0, 0.0],
        [0.0, 2.0, 0.0],
    ])
