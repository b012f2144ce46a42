import numpy as np
import pytest

from meshinfo import EngineSettings, weld_vertices
from meshinfo.progress import CancellationToken, OperationCancelled
from meshinfo.weld import canonical_count, weld_steps


def test_exact_duplicates_map_to_lowest_index():
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 0.0, 0.0],
    ])
    remap = weld_vertices(vertices)
    assert remap.tolist() == [0, 1, 0, 1, 0]
    assert canonical_count(remap) == 2


def test_near_duplicates_above_epsilon_stay_distinct():
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1e-4, 0.0, 0.0],
        [2e-6, 0.0, 0.0],
    ])
    remap = weld_vertices(vertices)
    # 1e-8 squared distance is above the default 1e-10, 4e-12 is below
    assert remap.tolist() == [0, 1, 0]


def test_remap_points_to_fixed_points(soup_cube):
    remap = weld_vertices(soup_cube.vertices)
    assert np.array_equal(remap[remap], remap)
    assert canonical_count(remap) == 8
    assert np.all(remap <= np.arange(len(remap)))


def test_welding_welded_output_is_identity(soup_cube):
    remap = weld_vertices(soup_cube.vertices)
    canonical = np.unique(remap)
    again = weld_vertices(soup_cube.vertices[canonical])
    assert again.tolist() == list(range(len(canonical)))


def test_single_precision_input():
    vertices = np.array([[0.1, 0.2, 0.3], [0.1, 0.2, 0.3]], dtype=np.float32)
    assert weld_vertices(vertices).tolist() == [0, 0]


def test_empty_input():
    remap = weld_vertices(np.zeros((0, 3)))
    assert remap.shape == (0,)


def test_custom_epsilon():
    vertices = np.array([[0.0, 0.0, 0.0], [0.01, 0.0, 0.0]])
    settings = EngineSettings(weld_epsilon=1e-3)
    assert weld_vertices(vertices, settings).tolist() == [0, 0]


def test_steps_yield_at_checkpoints_and_honor_cancel():
    vertices = np.random.default_rng(0).random((50, 3))
    token = CancellationToken()
    steps = weld_steps(vertices, token, EngineSettings(weld_step=10))
    assert next(steps) == 0.0
    assert next(steps) == pytest.approx(0.2)
    token.cancel()
    with pytest.raises(OperationCancelled):
        next(steps)


def test_settings_reject_zero_checkpoint():
    with pytest.raises(ValueError):
        EngineSettings(weld_step=0)
    with pytest.raises(ValueError):
        EngineSettings(weld_epsilon=-1.0)
