"""
Tests for the placement engine.
"""

import logging
import math
import random

import numpy as np
import pytest

from prairiegen import ConfigurationError, height_at, is_near_water, scatter_species
from prairiegen.engine import TerrainComposer
from prairiegen.scatter import (
    ClusterProfile, InstanceTransform, PlacementEngine, SpeciesProfile, instance_matrices
)
from prairiegen.scatter.placement import as_random_state

GRASS = SpeciesProfile("grass", count=300, h_min=-0.3, h_max=100.0, scale_min=0.5, scale_max=1.1)


def test_scatter_respects_height_bound():
    """count 1000, h >= -0.3: re-evaluated heights satisfy the bound."""
    print("Testing height constraints...")

    profile = SpeciesProfile("prairie", count=1000, h_min=-0.3, h_max=100.0)
    instances = scatter_species(profile, seed=7)

    assert len(instances) <= 1000
    assert len(instances) > 0

    checker = random.Random(0)
    for t in checker.sample(instances, min(50, len(instances))):
        x, _, z = t.position
        assert height_at(x, z) >= -0.3 - 1e-9


def test_scatter_deterministic():
    """Same seed, same list; different seed, different list."""
    print("Testing seeded determinism...")

    first = scatter_species(GRASS, seed=1)
    second = scatter_species(GRASS, seed=1)
    other = scatter_species(GRASS, seed=2)

    assert first == second
    assert first != other
    assert len(other) <= GRASS.count


def test_quota_bound():
    engine = PlacementEngine()
    for count, oversample in [(0, 1), (1, 1), (50, 3), (400, 2)]:
        profile = SpeciesProfile("p", count=count, oversample=oversample)
        result = engine.place(profile, 11)
        assert len(result) <= count
        assert result.attempts <= count * oversample


def test_unconstrained_fills_quota():
    result = PlacementEngine().place(SpeciesProfile("any", count=200), 5)

    assert result.placed == 200
    assert result.attempts == 200
    assert not result.underfilled


def test_water_rules():
    composer = TerrainComposer()
    engine = PlacementEngine(composer)

    dry = engine.place(SpeciesProfile("dry", count=200, water="exclude", water_multiplier=2.5, oversample=3), 3)
    wet = engine.place(SpeciesProfile("wet", count=200, water="require", oversample=10), 3)

    assert dry.placed > 0 and wet.placed > 0
    for t in dry:
        assert not composer.is_near_water(t.position[0], t.position[2], 2.5)
    for t in wet:
        assert composer.is_near_water(t.position[0], t.position[2])


def test_riverbank_sampling():
    composer = TerrainComposer()
    profile = SpeciesProfile("bank", count=100, sampling="riverbank", bank_min=1.0, bank_max=2.5, extent=300.0)
    result = PlacementEngine(composer).place(profile, 9)

    assert result.placed == 100
    for t in result:
        x, _, z = t.position
        distance = composer.river.distance_to_river(x, z)
        width = composer.river.width(x)
        assert width * 1.0 - 1e-9 <= distance <= width * 2.5 + 1e-9
        assert abs(x) <= 150.0


def test_underfill_reported(caplog):
    """An impossible band places nothing and logs the shortfall."""

    profile = SpeciesProfile("summit", count=25, h_min=500.0, h_max=600.0, oversample=4)
    with caplog.at_level(logging.INFO, logger="prairiegen.scatter.placement"):
        result = PlacementEngine().place(profile, 1)

    assert result.placed == 0
    assert result.requested == 25
    assert result.attempts == 100
    assert result.underfilled
    assert "summit: placed 0/25 instances after 100 attempts" in caplog.text


def test_custom_predicate():
    def east_only(x, z, height, composer):
        return x > 0.0

    result = PlacementEngine().place(SpeciesProfile("east", count=50, oversample=4, predicates=(east_only,)), 2)
    assert result.placed == 50
    assert all(t.position[0] > 0.0 for t in result)


def test_transform_ranges():
    profile = SpeciesProfile(
        "bush", count=100, scale_min=0.6, scale_max=1.4, y_stretch=(0.8, 1.2), scale_axes=(1.0, 0.5, 1.0)
    )
    result = PlacementEngine().place(profile, 4)

    for t in result:
        sx, sy, sz = t.scale
        assert 0.6 <= sx <= 1.4 and sx == sz
        assert 0.8 * 0.5 * sx - 1e-12 <= sy <= 1.2 * 0.5 * sx + 1e-12
        assert t.rotation[0] == 0.0 and t.rotation[2] == 0.0
        assert 0.0 <= t.rotation_y < 2.0 * math.pi


def test_fixed_and_free_rotation():
    fixed = PlacementEngine().place(SpeciesProfile("post", count=20, rotation="fixed"), 4)
    tumbled = PlacementEngine().place(SpeciesProfile("stone", count=20, rotation="xyz", rotation_range=math.pi), 4)

    assert all(t.rotation == (0.0, 0.0, 0.0) for t in fixed)
    assert all(0.0 <= angle < math.pi for t in tumbled for angle in t.rotation)


def test_sink():
    composer = TerrainComposer()
    result = PlacementEngine(composer).place(SpeciesProfile("rock", count=30, scale_min=0.2, scale_max=0.8, sink=0.3), 8)

    for t in result:
        x, y, z = t.position
        assert y == pytest.approx(composer.height_at(x, z) - 0.3 * t.scale[0], abs=1e-9)


def test_clustered_placement():
    print("Testing clustered placement...")

    composer = TerrainComposer()
    member = SpeciesProfile("reeds", count=200, h_min=-0.5, h_max=1.0)
    cluster = ClusterProfile(member, cluster_count=10, members_min=8, members_max=19, radius=2.0)

    result = PlacementEngine(composer).place_clustered(cluster, 6)

    assert 0 < result.placed <= 200
    for t in result:
        x, y, z = t.position
        assert -0.5 - 1e-9 <= composer.height_at(x, z) <= 1.0 + 1e-9
        # Anchors sit 0.8-1.4 widths out; members stay within the disc radius
        assert composer.river.distance_to_river(x, z) <= 1.4 * composer.river.width(x) + 4.0

    again = PlacementEngine(composer).place_clustered(cluster, 6)
    assert list(result) == list(again)


def test_place_fixed():
    composer = TerrainComposer()
    result = PlacementEngine(composer).place_fixed([(0.0, 0.0), (-40.0, 34.0, 1.5)], min_height=0.5)

    assert result.placed == 2
    # (0, 0) is the channel centre, so it is raised to the floor
    assert result[0].position == (0.0, 0.5, 0.0)
    assert result[1].position[1] == pytest.approx(max(composer.height_at(-40.0, 34.0), 0.5), abs=1e-9)
    assert result[1].rotation_y == 1.5


def test_instance_matrices():
    identity = InstanceTransform(position=(1.0, 2.0, 3.0), rotation=(0.0, 0.0, 0.0), scale=(1.0, 1.0, 1.0))
    turned = InstanceTransform(position=(0.0, 0.0, 0.0), rotation=(0.0, math.pi / 2, 0.0), scale=(2.0, 2.0, 2.0))

    matrices = instance_matrices([identity, turned])
    assert matrices.shape == (2, 4, 4)

    expected = np.eye(4)
    expected[:3, 3] = (1.0, 2.0, 3.0)
    assert np.allclose(matrices[0], expected)

    # Quarter turn about +y sends +x to -z, then scales by 2
    assert np.allclose(matrices[1] @ np.array([1.0, 0.0, 0.0, 1.0]), [0.0, 0.0, -2.0, 1.0])
    assert instance_matrices([]).shape == (0, 4, 4)


@pytest.mark.parametrize("kwargs", [
    {"count": -1},
    {"count": 10, "oversample": 0},
    {"count": 10, "h_min": 5.0, "h_max": 1.0},
    {"count": 10, "water": "sometimes"},
    {"count": 10, "scale_min": 0.0},
    {"count": 10, "extent": -5.0},
    {"count": 10, "color": None, "sampling": "spiral"},
])
def test_invalid_profiles(kwargs):
    with pytest.raises(ConfigurationError):
        PlacementEngine().place(SpeciesProfile("bad", **kwargs), 1)


@pytest.mark.parametrize("kwargs", [
    {"cluster_count": 2.0},
    {"cluster_count": 3, "members_max": 10.5},
    {"cluster_count": 3, "members_min": 2.0, "members_max": 4},
    {"cluster_count": 3, "members_min": True},
    {"cluster_count": 3, "members_min": 9, "members_max": 4},
])
def test_invalid_cluster_profiles(kwargs):
    member = SpeciesProfile("reeds", count=40)
    with pytest.raises(ConfigurationError):
        PlacementEngine().place_clustered(ClusterProfile(member, **kwargs), 1)


def test_seeds():
    assert as_random_state(2**40).random_sample() == as_random_state(2**40).random_sample()
    rng = np.random.RandomState(3)
    assert as_random_state(rng) is rng
    with pytest.raises(ConfigurationError):
        as_random_state(-1)


def test_module_functions_agree():
    assert is_near_water(0.0, 0.0)
    assert height_at(0.0, 0.0) == TerrainComposer().height_at(0.0, 0.0)


def main():
    """Run all tests."""
    print("Testing placement engine...")
    print("=" * 50)

    tests = [
        test_scatter_respects_height_bound,
        test_scatter_deterministic,
        test_quota_bound,
        test_unconstrained_fills_quota,
        test_water_rules,
        test_riverbank_sampling,
        test_custom_predicate,
        test_transform_ranges,
        test_fixed_and_free_rotation,
        test_sink,
        test_clustered_placement,
        test_place_fixed,
        test_instance_matrices,
        test_seeds,
        test_module_functions_agree,
    ]
    for test in tests:
        test()
        print(f"{test.__name__}: PASS")

    print(f"\nPassed: {len(tests)}/{len(tests)}")


if __name__ == "__main__":
    main()
