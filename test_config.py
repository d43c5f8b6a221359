"""
Tests for parameter specifications and configuration errors.
"""

import math

import numpy as np
import pytest

from prairiegen import ConfigurationError, World
from prairiegen.engine import TerrainComposer
from prairiegen.procgen.parameters import (
    ParameterSpec, TERRAIN_PARAMETERS, VEGETATION_PARAMETERS, DEFAULT_SETTLEMENTS,
    parse_color, resolve_seed, resolve_settlements, resolve_terrain
)


def test_parameter_spec_resolve():
    spec = ParameterSpec({"a": (0.0, 1.0, 0.5), "n": (1, 10, 3)}, integers=("n",), name="demo")

    assert spec.resolve() == {"a": 0.5, "n": 3}
    assert spec.resolve({"n": 7.0}) == {"a": 0.5, "n": 7}
    assert isinstance(spec.resolve({"n": 7.0})["n"], int)
    assert spec.get_param_ranges() == {"a": (0.0, 1.0), "n": (1, 10)}
    assert spec.validate({"a": 0.25})
    assert not spec.validate({"a": 2.0})


def test_errors_are_collected():
    """Every problem is reported in one exception."""
    print("Testing error collection...")

    spec = ParameterSpec({"a": (0.0, 1.0, 0.5), "n": (1, 10, 3)}, integers=("n",), name="demo")

    with pytest.raises(ConfigurationError) as info:
        spec.resolve({"a": 5.0, "n": 2.5, "b": 1, })
    errors = info.value.errors
    assert len(errors) == 3
    assert any("Unknown demo parameter: b" in e for e in errors)
    assert isinstance(info.value, ValueError)
    assert "Invalid demo" in str(info.value)


@pytest.mark.parametrize("value", [True, "1.0", None, math.nan, math.inf])
def test_non_numbers_rejected(value):
    with pytest.raises(ConfigurationError):
        TERRAIN_PARAMETERS.resolve({"hills_amplitude": value})


@pytest.mark.parametrize("overrides", [
    {"size": -10.0},
    {"segments": 0},
    {"river_width_variation": 8.0},
    {"bluff_band_min": 30.0, "bluff_band_max": 20.0},
    {"color_jitter": 0.9},
])
def test_invalid_terrain(overrides):
    with pytest.raises(ConfigurationError):
        TerrainComposer(overrides)


def test_terrain_defaults():
    parameters = resolve_terrain()

    assert parameters == {name: parameters[name] for name in TERRAIN_PARAMETERS.get_param_names()}
    assert parameters["size"] == 400.0
    assert parameters["segments"] == 200
    assert parameters["river_base_width"] == 8.0
    assert VEGETATION_PARAMETERS.resolve()["grass_density"] == 50000


def test_parse_color():
    red = np.array([1.0, 0.0, 0.0])

    assert np.allclose(parse_color(0xFF0000), red)
    assert np.allclose(parse_color("#ff0000"), red)
    assert np.allclose(parse_color("FF0000"), red)
    assert np.allclose(parse_color("0xff0000"), red)
    assert np.allclose(parse_color((1.0, 0.0, 0.0)), red)
    assert np.allclose(parse_color(0x3A5F0B), [0x3A / 255, 0x5F / 255, 0x0B / 255])

    for bad in (-1, 0x1000000, "#gg0000", "#fff", (1.0, 0.0), (1.5, 0.0, 0.0), True, None):
        with pytest.raises(ValueError):
            parse_color(bad)


def test_settlements():
    assert resolve_settlements() == DEFAULT_SETTLEMENTS
    assert resolve_settlements([(1, 2), {"x": 3, "z": 4, "rot": 0.5}]) == ((1.0, 2.0, 0.0), (3.0, 4.0, 0.5))
    assert resolve_settlements([]) == ()

    with pytest.raises(ConfigurationError):
        resolve_settlements([(1.0,), "abc"])


def test_world_config():
    world = World({"terrain": {"segments": 4}, "seed": 3, "settlements": []})

    assert world.composer.settlements == ()
    assert world.seed == 3
    assert world.height_at(0.0, 0.0) == pytest.approx(-2.5)

    with pytest.raises(ConfigurationError):
        World({"terain": {}})


@pytest.mark.parametrize("seed", [-1, 1.7, "7", True, None, 2**64])
def test_invalid_world_seed(seed):
    """A bad seed fails at construction, before anything is generated."""
    with pytest.raises(ConfigurationError) as info:
        World({"seed": seed})
    assert info.value.context == "seed"


def test_resolve_seed():
    assert resolve_seed(7) == 7
    assert resolve_seed(np.int64(7)) == 7
    assert isinstance(resolve_seed(np.uint32(3)), int)
    assert resolve_seed(2**64 - 1) == 2**64 - 1

    world = World({"seed": 2**40})
    with pytest.raises(ConfigurationError):
        world.scatter_all(seed=-3)


def test_world_color_at():
    world = World()
    color = world.color_at(0.0, 0.0, jitter_seed=12)

    assert color.shape == (3,)
    assert np.array_equal(color, world.color_at(0.0, 0.0, jitter_seed=12))


def main():
    """Run all tests."""
    print("Testing configuration...")
    print("=" * 50)

    tests = [
        test_parameter_spec_resolve,
        test_errors_are_collected,
        test_terrain_defaults,
        test_parse_color,
        test_settlements,
        test_world_config,
        test_resolve_seed,
        test_world_color_at,
    ]
    for test in tests:
        test()
        print(f"{test.__name__}: PASS")

    print(f"\nPassed: {len(tests)}/{len(tests)}")


if __name__ == "__main__":
    main()
