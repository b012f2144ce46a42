import numpy as np
from dataclasses import dataclass


class InvalidMeshError(ValueError):
    """Raised when vertex or triangle arrays cannot describe a triangle mesh."""


@dataclass(frozen=True, eq=False)
class Mesh:
    """Indexed triangle mesh.

    Attributes:
        vertices: (N, 3) array of vertex positions
        triangles: flat array of triangle vertex indices, three per triangle
    """
    vertices: np.ndarray
    triangles: np.ndarray

    @classmethod
    def from_arrays(cls, vertices, triangles) -> "Mesh":
        """
        Build a mesh from array-likes.

        Args:
            vertices: (N, 3) vertex positions, float32 or float64 dtype is kept
            triangles: flat index sequence or (M, 3) face array

        Returns:
            Mesh with a float vertex array and a flat int64 triangle array

        Raises:
            InvalidMeshError: if the arrays fail validation
        """
        vertices = np.asarray(vertices)
        if vertices.size == 0:
            vertices = vertices.reshape(0, 3)
        if vertices.dtype.kind != "f":
            vertices = vertices.astype(np.float64)

        triangles = np.asarray(triangles)
        if triangles.size and triangles.dtype.kind not in "iu":
            if not np.all(np.equal(np.mod(triangles, 1), 0)):
                raise InvalidMeshError("Triangle indices must be integers")
        triangles = triangles.astype(np.int64).ravel()

        mesh = cls(vertices=vertices, triangles=triangles)
        mesh.validate()
        return mesh

    @property
    def faces(self) -> np.ndarray:
        return self.triangles.reshape(-1, 3)

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_triangles(self) -> int:
        return len(self.triangles) // 3

    def validate(self):
        """Check shapes and index bounds. Raises InvalidMeshError on the first problem."""
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise InvalidMeshError(f"Vertices must have shape (N, 3), got {self.vertices.shape}")
        if self.triangles.ndim != 1:
            raise InvalidMeshError(f"Triangles must be a flat index array, got shape {self.triangles.shape}")
        if len(self.triangles) % 3 != 0:
            raise InvalidMeshError(f"Triangle index count {len(self.triangles)} is not a multiple of 3")
        if len(self.triangles) == 0:
            return
        lo = int(self.triangles.min())
        hi = int(self.triangles.max())
        if lo < 0 or hi >= len(self.vertices):
            raise InvalidMeshError(
                f"Triangle index out of range [0, {len(self.vertices)}): min={lo}, max={hi}"
            )

    def with_triangles(self, extra) -> "Mesh":
        """Return a copy of this mesh with ``extra`` triangle indices appended."""
        extra = np.asarray(extra, dtype=np.int64).ravel()
        return Mesh(vertices=self.vertices.copy(), triangles=np.concatenate([self.triangles, extra]))
