"""
Tests for vegetation and prop scattering.
"""

import numpy as np
import pytest

from prairiegen import ConfigurationError
from prairiegen.engine import TerrainComposer
from prairiegen.scatter import ClusterProfile, PropScatterer, VegetationSystem
from prairiegen.scatter.vegetation import _species_seeds, species_seed

SMALL = {
    "grass_density": 400,
    "reed_cluster_count": 4,
    "tree_count": 40,
    "bush_count": 15,
    "rock_count": 30,
}


def _inside_settlement(x, z, settlements, clearance):
    for sx, sz, rotation in settlements:
        dx, dz = x - sx, z - sz
        local_x = dx * np.cos(rotation) - dz * np.sin(rotation)
        local_z = dx * np.sin(rotation) + dz * np.cos(rotation)
        if abs(local_x) <= 6.0 + clearance and abs(local_z) <= 5.0 + clearance:
            return True
    return False


def test_population_table():
    vegetation = VegetationSystem(parameters=SMALL)

    assert vegetation.names == [
        "grass", "tall_grass", "reeds", "deciduous", "willow", "poplar", "spruce", "berry_bush"
    ]
    assert vegetation.profiles["grass"].count == 400
    assert vegetation.profiles["tall_grass"].count == 60
    assert vegetation.profiles["reeds"].member.count == 80
    assert isinstance(vegetation.profiles["reeds"], ClusterProfile)
    assert vegetation.profiles["deciduous"].count == 12
    assert vegetation.profiles["willow"].count == 8


def test_every_population_obeys_its_profile():
    """Heights, water rules and settlement clearance hold for every instance."""
    print("Testing vegetation constraints...")

    composer = TerrainComposer()
    vegetation = VegetationSystem(composer, parameters=SMALL)
    results = vegetation.scatter(seed=21)

    for name, result in results.items():
        profile = vegetation.profiles[name]
        if isinstance(profile, ClusterProfile):
            profile = profile.member

        assert len(result) <= profile.count
        for t in result:
            x, _, z = t.position
            h = composer.height_at(x, z)
            assert profile.h_min - 1e-9 <= h <= profile.h_max + 1e-9, name
            if profile.water == "exclude":
                assert not composer.is_near_water(x, z, profile.water_multiplier), name
            if profile.predicates:
                assert not _inside_settlement(x, z, composer.settlements, 8.0), name

    assert results["grass"].placed > 0


def test_grass_colors():
    vegetation = VegetationSystem(parameters=SMALL)
    result = vegetation.scatter_species("grass", seed=3)

    colors = np.array([t.color for t in result])
    assert colors.shape == (result.placed, 3)
    assert np.all((colors >= 0.0) & (colors <= 1.0))
    assert len({tuple(c) for c in colors}) > 1


def test_scatter_deterministic():
    first = VegetationSystem(parameters=SMALL).scatter(seed=5)
    second = VegetationSystem(parameters=SMALL).scatter(seed=5)
    other = VegetationSystem(parameters=SMALL).scatter(seed=6)

    assert all(list(first[name]) == list(second[name]) for name in first)
    assert list(first["grass"]) != list(other["grass"])


def test_scatter_species_matches_scatter():
    vegetation = VegetationSystem(parameters=SMALL)
    everything = vegetation.scatter(seed=9)

    assert list(vegetation.scatter_species("spruce", seed=9)) == list(everything["spruce"])
    with pytest.raises(KeyError):
        vegetation.scatter_species("cactus", seed=9)


def test_populations_draw_separate_streams():
    """Grass and rocks never share a random stream under one world seed."""
    print("Testing sub-seeds...")

    vegetation = VegetationSystem(parameters=SMALL)
    props = PropScatterer(vegetation.composer, parameters=SMALL)

    for seed in (0, 5, 2**40):
        seeds = _species_seeds(seed, vegetation.names)
        seeds.update(_species_seeds(seed, props.names))
        assert len(set(seeds.values())) == len(seeds)
        # Table position plays no part in a sub-seed
        assert _species_seeds(seed, ["rock"])["rock"] == seeds["rock"] == species_seed(seed, "rock")

    grass = vegetation.scatter_species("grass", seed=5)
    rocks = props.scatter_species("rock", seed=5)
    grass_x = np.array([t.position[0] for t in grass][:rocks.placed])
    rock_x = np.array([t.position[0] for t in rocks])
    assert not np.allclose(rock_x, grass_x * (350.0 / 360.0))


def test_rocks():
    print("Testing rock scatter...")

    composer = TerrainComposer()
    props = PropScatterer(composer, parameters=SMALL)
    results = props.scatter(seed=2)

    rocks = results["rock"]
    assert 0 < rocks.placed <= 30
    for t in rocks:
        x, y, z = t.position
        ground = composer.height_at(x, z)
        width = composer.river.width(x)
        distance = composer.river.distance_to_river(x, z)

        assert ground >= -1e-9
        assert (0.5 * width <= distance <= 2.0 * width) or ground > 3.0 - 1e-9
        assert y == pytest.approx(ground - 0.3 * t.scale[0], abs=1e-9)
        assert t.scale[1] == pytest.approx(0.7 * t.scale[0])
        assert all(0.0 <= angle < np.pi for angle in t.rotation)


def test_fireplaces():
    composer = TerrainComposer()
    fireplaces = PropScatterer(composer).scatter(seed=0)["fireplace"]

    assert fireplaces.placed == 6
    assert all(t.position[1] >= 0.5 for t in fireplaces)


def test_zero_counts():
    empty = {key: 0 for key in SMALL}
    results = VegetationSystem(parameters=empty).scatter(seed=1)

    assert all(len(result) == 0 for result in results.values())
    assert not any(result.underfilled for result in results.values())


@pytest.mark.parametrize("parameters", [
    {"grass_density": -1},
    {"tree_count": 2.5},
    {"rock_count": "many"},
    {"mushroom_count": 4},
])
def test_invalid_vegetation_parameters(parameters):
    with pytest.raises(ConfigurationError):
        VegetationSystem(parameters=parameters)


def test_invalid_vegetation_palette():
    with pytest.raises(ConfigurationError):
        VegetationSystem(palette={"grass": "#12"})


def main():
    """Run all tests."""
    print("Testing vegetation...")
    print("=" * 50)

    tests = [
        test_population_table,
        test_every_population_obeys_its_profile,
        test_grass_colors,
        test_scatter_deterministic,
        test_scatter_species_matches_scatter,
        test_populations_draw_separate_streams,
        test_rocks,
        test_fireplaces,
        test_zero_counts,
        test_invalid_vegetation_palette,
    ]
    for test in tests:
        test()
        print(f"{test.__name__}: PASS")

    print(f"\nPassed: {len(tests)}/{len(tests)}")


if __name__ == "__main__":
    main()
