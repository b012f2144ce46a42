"""Reading and writing mesh files."""

import logging
from pathlib import Path
from typing import Union

import igl
import numpy as np
import open3d as o3d

from .mesh import Mesh


def load_mesh(mesh_path: Union[str, Path]) -> Mesh:
    """
    Load a triangle mesh with libigl.

    Args:
        mesh_path: Any format igl.read_triangle_mesh understands (.obj, .off, .ply, .stl, ...)

    Returns:
        Mesh with float64 vertices
    """
    mesh_path = Path(mesh_path)
    if not mesh_path.exists():
        raise FileNotFoundError(f"Mesh file does not exist: {mesh_path}")
    logging.info(f"Loading mesh from {mesh_path}...")
    vertices, faces = igl.read_triangle_mesh(str(mesh_path))
    logging.info(f"Loaded mesh with {len(vertices)} vertices and {len(faces)} faces")
    return Mesh.from_arrays(vertices, faces)


def to_open3d(mesh: Mesh) -> o3d.geometry.TriangleMesh:
    """Convert to an Open3D mesh with freshly computed vertex normals."""
    o3d_mesh = o3d.geometry.TriangleMesh()
    o3d_mesh.vertices = o3d.utility.Vector3dVector(np.asarray(mesh.vertices, dtype=np.float64))
    o3d_mesh.triangles = o3d.utility.Vector3iVector(mesh.faces.astype(np.int32))
    o3d_mesh.compute_vertex_normals()
    return o3d_mesh


def save_mesh(mesh: Mesh, output_path: Union[str, Path]):
    """Write a mesh with Open3D; normals are recomputed for the whole mesh first."""
    output_path = Path(output_path)
    logging.info(f"Saving mesh to {output_path}...")
    ok = o3d.io.write_triangle_mesh(str(output_path), to_open3d(mesh), write_vertex_normals=True)
    if not ok:
        raise IOError(f"Failed to write mesh to {output_path}")
