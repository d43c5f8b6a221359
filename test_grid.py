"""
Tests for terrain grid construction and analysis.
"""

import numpy as np
import pytest

from prairiegen import build_terrain_grid, ConfigurationError
from prairiegen.engine import GridManager, HeightmapAnalyzer, TerrainComposer
from prairiegen.engine.grid_manager import grid_indices
from prairiegen.procgen.parameters import PALETTE


def test_small_grid():
    """size 40, segments 2: a 3x3 grid with valid colours."""
    print("Testing 3x3 grid...")

    grid = build_terrain_grid({"size": 40, "segments": 2})

    assert grid.vertex_count == 9
    assert grid.triangle_count == 8
    assert grid.heights.shape == (3, 3)
    assert np.all(np.isfinite(grid.colors))
    assert np.all((grid.colors >= 0.0) & (grid.colors <= 1.0))

    # Colours stay close to the palette's range
    palette = np.array(list(PALETTE.resolve().values()))
    assert np.all(grid.colors >= palette.min(axis=0) - 0.06)
    assert np.all(grid.colors <= palette.max(axis=0) + 0.06)


@pytest.mark.parametrize("segments", [1, 3, 10, 25])
def test_grid_shape(segments):
    grid = build_terrain_grid({"size": 100.0, "segments": segments})

    assert grid.vertex_count == (segments + 1) ** 2
    assert grid.triangle_count == 2 * segments ** 2
    assert grid.indices.dtype == np.uint32
    assert grid.indices.max() < grid.vertex_count
    assert set(np.unique(grid.indices)) == set(range(grid.vertex_count))


def test_vertex_layout():
    grid = build_terrain_grid({"size": 40, "segments": 4})

    first = grid.vertex(0)
    assert first.position[0] == -20.0 and first.position[2] == -20.0

    # Rows run along x
    assert grid.vertex(1).position[0] == -10.0 and grid.vertex(1).position[2] == -20.0
    assert grid.vertex(5).position[0] == -20.0 and grid.vertex(5).position[2] == -10.0
    assert grid.vertex(24).position[0] == 20.0 and grid.vertex(24).position[2] == 20.0


def test_heights_match_height_field():
    composer = TerrainComposer()
    grid = GridManager(composer).build(size=200.0, segments=20)

    expected = np.array([composer.height_at(x, z) for x, _, z in grid.positions])
    assert np.allclose(grid.positions[:, 1], expected, rtol=0.0, atol=1e-9)


def test_normals():
    """Normals are unit length and point up for a height field."""
    print("Testing normals...")

    grid = build_terrain_grid({"size": 120, "segments": 30})

    lengths = np.linalg.norm(grid.normals, axis=1)
    assert np.allclose(lengths, 1.0)
    assert np.all(grid.normals[:, 1] > 0.0)


def test_flat_grid_normals():
    flat = {"hills_amplitude": 0.0, "detail_amplitude": 0.0, "fine_amplitude": 0.0,
            "bluff_strength": 0.0, "hill_strength": 0.0, "trail_floor": 0.0,
            "river_depth": 0.0, "river_shallowing": 0.0}
    grid = GridManager(TerrainComposer(flat)).build(size=10.0, segments=4)

    assert np.all(grid.positions[:, 1] == 0.0)
    assert np.allclose(grid.normals, [0.0, 1.0, 0.0])


def test_index_winding():
    indices = grid_indices(1)
    assert indices.tolist() == [[0, 2, 1], [2, 3, 1]]


def test_grid_deterministic():
    first = build_terrain_grid({"size": 60, "segments": 12, "seed": 3})
    second = build_terrain_grid({"size": 60, "segments": 12, "seed": 3})
    other = build_terrain_grid({"size": 60, "segments": 12, "seed": 4})

    assert np.array_equal(first.positions, second.positions)
    assert np.array_equal(first.colors, second.colors)
    assert np.array_equal(first.positions, other.positions)
    assert not np.array_equal(first.colors, other.colors)


def test_to_arrays():
    arrays = build_terrain_grid({"size": 40, "segments": 5}).to_arrays()

    assert arrays["positions"].dtype == np.float32
    assert arrays["positions"].shape == (36, 3)
    assert arrays["indices"].shape == (50, 3)


@pytest.mark.parametrize("config", [
    {"size": -1.0},
    {"size": 0},
    {"segments": 0},
    {"segments": 2.5},
    {"size": "big"},
    {"seed": -1},
    {"seed": 1.7},
    {"seed": "7"},
    {"seed": True},
])
def test_invalid_grid_config(config):
    with pytest.raises(ConfigurationError):
        build_terrain_grid(config)


def test_build_rejects_bad_arguments():
    with pytest.raises(ConfigurationError):
        GridManager().build(size=10.0, segments=-3)
    with pytest.raises(ConfigurationError):
        GridManager().build(size=10.0, segments=2, seed=-1)


def test_large_seed():
    grid = build_terrain_grid({"size": 20, "segments": 2, "seed": 2**63 + 5})

    assert np.all((grid.colors >= 0.0) & (grid.colors <= 1.0))


def test_analyzer():
    composer = TerrainComposer()
    manager = GridManager(composer)
    grid = manager.build(size=200.0, segments=40)

    analysis = HeightmapAnalyzer(composer.water_level, manager.colorizer.rule_names).analyze(grid)

    stats = analysis["elevation_stats"]
    assert stats["min"] <= stats["mean"] <= stats["max"]
    # The river crosses the whole grid
    assert 0.0 < analysis["water"]["water_fraction"] < 1.0
    assert analysis["water"]["sandbar_patches"] >= 0
    assert sum(analysis["biome_coverage"].values()) == pytest.approx(1.0)
    assert set(analysis["biome_coverage"]) <= set(manager.colorizer.rule_names)


def main():
    """Run all tests."""
    print("Testing terrain grid...")
    print("=" * 50)

    tests = [
        test_small_grid,
        test_vertex_layout,
        test_heights_match_height_field,
        test_normals,
        test_flat_grid_normals,
        test_index_winding,
        test_grid_deterministic,
        test_to_arrays,
        test_build_rejects_bad_arguments,
        test_large_seed,
        test_analyzer,
    ]
    for test in tests:
        test()
        print(f"{test.__name__}: PASS")

    print(f"\nPassed: {len(tests)}/{len(tests)}")


if __name__ == "__main__":
    main()
