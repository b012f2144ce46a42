import numpy as np
import pytest

from meshinfo import (
    EngineSettings,
    InvalidMeshError,
    Mesh,
    Runner,
    analyze,
    fill_holes,
    is_closed,
)
from meshinfo.triangulate import polygon_area, triangle_areas


def test_tetrahedron_missing_face(open_tetra, tetra):
    result = fill_holes(open_tetra).run()
    assert result.holes_found == 1
    assert result.holes_filled == 1
    assert result.triangles_added == 1
    new_face = result.mesh.faces[-1]
    assert sorted(new_face) == [1, 2, 3]

    analysis = analyze(result.mesh).run()
    assert analysis.is_closed
    assert analysis.volume == pytest.approx(analyze(tetra).run().volume)


def test_fill_restores_orientation(open_tetra):
    result = fill_holes(open_tetra).run()
    # Same cyclic order as the face that was removed
    face = result.mesh.faces[-1].tolist()
    assert face in ([1, 2, 3], [2, 3, 1], [3, 1, 2])


def test_cube_closes_again(open_cube):
    assert not is_closed(open_cube)
    result = fill_holes(open_cube).run()
    assert result.mesh.num_triangles == 12
    assert is_closed(result.mesh)
    assert analyze(result.mesh).run().volume == pytest.approx(1.0)


def test_closed_mesh_is_left_alone(cube):
    result = fill_holes(cube).run()
    assert result.holes_found == 0
    assert result.triangles_added == 0
    assert np.array_equal(result.mesh.triangles, cube.triangles)


def test_open_box_top_filled_with_planar_fill(cube):
    # Remove both +z triangles: a square hole
    faces = np.delete(cube.faces, [2, 3], axis=0)
    result = fill_holes(Mesh.from_arrays(cube.vertices, faces)).run()
    assert result.holes_filled == 1
    assert result.triangles_added == 2
    added = result.mesh.triangles[-6:]
    assert triangle_areas(cube.vertices, added).sum() == pytest.approx(1.0)
    assert analyze(result.mesh).run().volume == pytest.approx(1.0)


def test_prism_with_octagon_hole():
    n = 8
    angles = np.linspace(0, 2 * np.pi, n, endpoint=False)
    ring = np.stack([np.cos(angles), np.sin(angles)], axis=1)
    bottom = np.column_stack([ring, np.zeros(n)])
    top = np.column_stack([ring, np.ones(n)])
    vertices = np.vstack([bottom, top])
    faces = []
    for i in range(n):
        j = (i + 1) % n
        faces += [[i, j, n + j], [i, n + j, n + i]]
    # Bottom cap as a fan, wound downwards; the top is the hole
    faces += [[0, i + 1, i] for i in range(1, n - 1)]
    result = fill_holes(Mesh.from_arrays(vertices, faces)).run()
    assert result.holes_filled == 1
    assert result.triangles_added == n - 2
    added = result.mesh.triangles[-3 * (n - 2):]
    assert triangle_areas(vertices, added).sum() == pytest.approx(polygon_area(top))
    analysis = analyze(result.mesh).run()
    assert analysis.is_closed
    assert analysis.volume == pytest.approx(polygon_area(bottom))


def test_split_vertices_are_welded_first(soup_cube):
    faces = np.delete(soup_cube.faces, 2, axis=0)
    mesh = Mesh.from_arrays(soup_cube.vertices, faces)
    result = fill_holes(mesh).run()
    assert result.holes_found == 1
    assert analyze(result.mesh).run().is_closed


def test_without_welding_every_soup_triangle_is_a_hole(soup_cube):
    result = fill_holes(soup_cube, settings=EngineSettings(weld_before_fill=False)).run()
    assert result.holes_found == 12
    assert result.triangles_added == 12


def test_pinched_holes_are_reported():
    # Two open fans sharing vertex 0 leave a bowtie boundary
    vertices = np.array([
        [0.0, 0, 0], [1.0, 0, 0], [0.0, 1, 0], [-1.0, 0, 0], [0.0, -1, 0],
        [0.5, 0.5, 1.0], [-0.5, -0.5, 1.0],
    ])
    faces = [[0, 1, 5], [1, 2, 5], [2, 0, 5], [0, 3, 6], [3, 4, 6], [4, 0, 6]]
    result = fill_holes(Mesh.from_arrays(vertices, faces)).run()
    assert result.irregular_vertices == [0]
    assert result.holes_found == 0
    assert result.skipped_chains == 2
    assert result.issues


def test_input_mesh_is_not_modified(open_cube):
    vertices = open_cube.vertices.tobytes()
    triangles = open_cube.triangles.tobytes()
    result = fill_holes(open_cube).run()
    assert result.mesh is not open_cube
    assert open_cube.vertices.tobytes() == vertices
    assert open_cube.triangles.tobytes() == triangles


def test_cancel_mid_fill_leaves_mesh_untouched(open_cube):
    vertices = open_cube.vertices.tobytes()
    triangles = open_cube.triangles.tobytes()
    task = fill_holes(open_cube, settings=EngineSettings(scan_step=1, weld_step=1))
    for _ in range(6):
        task.step()
    assert not task.done
    task.cancel()
    report = task.step()
    assert report.cancelled
    assert task.result is None
    assert open_cube.vertices.tobytes() == vertices
    assert open_cube.triangles.tobytes() == triangles


def test_phase_labels_and_progress(open_cube):
    reports = []
    fill_holes(open_cube).run(reports.append)
    phases = [r.phase for r in reports]
    assert "Analyzing boundary" in phases
    assert "Filling hole 1/1" in phases
    assert "Assembling mesh" in phases
    progress = [r.progress for r in reports]
    assert progress == sorted(progress)
    assert reports[-1].finished


def test_runner_replaces_running_fill(open_cube, cube):
    runner = Runner()
    first = runner.start(fill_holes(open_cube))
    runner.tick()
    runner.start(analyze(cube))
    assert first.cancelled
    assert runner.run_until_done().is_closed


def test_index_out_of_range_fails_synchronously():
    mesh = Mesh(vertices=np.zeros((3, 3)), triangles=np.array([0, 1, 5]))
    with pytest.raises(InvalidMeshError):
        fill_holes(mesh)


def test_length_not_multiple_of_three():
    with pytest.raises(InvalidMeshError):
        Mesh.from_arrays(np.zeros((3, 3)), [0, 1, 2, 0])
