"""
Vegetation and prop scattering.

VegetationSystem owns the plant populations of the valley and
PropScatterer the rocks and campfires. Both turn configuration into
scatter profiles and run one placement per profile.
"""

import hashlib
import logging
import math
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np

from .placement import PlacementEngine, Seed
from .predicates import outside_settlements, riverbank_or_high_ground
from .profiles import ClusterProfile, ColorVariation, PlacementResult, SpeciesProfile, validate_profiles
from ..engine.terrain_composer import TerrainComposer
from ..procgen.parameters import (
    DEFAULT_FIREPLACES, FIREPLACE_MIN_HEIGHT, VEGETATION_PALETTE, VEGETATION_PARAMETERS, resolve_seed
)

logger = logging.getLogger(__name__)

Profile = Union[SpeciesProfile, ClusterProfile]


def species_seed(seed: int, name: str) -> int:
    """Sub-seed of one population, hashed from the world seed and its name."""
    seed_hash = hashlib.md5(f"{seed}:{name}".encode()).hexdigest()
    return int(seed_hash[:8], 16) % (2**31 - 1)


def _species_seeds(seed: Seed, names: Sequence[str]) -> Dict[str, int]:
    """
    One sub-seed per population so each is reproducible on its own.

    Populations with different names never share a stream, whichever
    scatterer owns them.
    """

    if isinstance(seed, np.random.RandomState):
        seed = int(seed.randint(0, 2**31 - 1))
    else:
        seed = resolve_seed(seed)
    return {name: species_seed(seed, name) for name in names}


class _Scatterer:
    """Shared run loop over an ordered table of profiles."""

    def __init__(self, composer: Optional[TerrainComposer] = None):
        self.composer = composer or TerrainComposer()
        self.engine = PlacementEngine(self.composer)
        self.profiles: Dict[str, Profile] = {}

    @property
    def names(self):
        return list(self.profiles)

    def scatter_profile(self, profile: Profile, seed: Seed) -> PlacementResult:
        if isinstance(profile, ClusterProfile):
            return self.engine.place_clustered(profile, seed)
        return self.engine.place(profile, seed)

    def scatter_species(self, name: str, seed: Seed) -> PlacementResult:
        """Run one population with the sub-seed it gets inside ``scatter``."""
        if name not in self.profiles:
            raise KeyError(f"Unknown population {name!r}; expected one of {self.names}")
        return self.scatter_profile(self.profiles[name], _species_seeds(seed, self.names)[name])

    def scatter(self, seed: Seed) -> Dict[str, PlacementResult]:
        """Run every population in table order."""

        seeds = _species_seeds(seed, self.names)
        results = {}
        for name, profile in self.profiles.items():
            results[name] = self.scatter_profile(profile, seeds[name])
            logger.debug("%s: %d instances", name, results[name].placed)
        return results


class VegetationSystem(_Scatterer):
    """
    Grasses, reeds, four tree species and berry bushes.

    Counts derive from the vegetation parameters; each population keeps
    its own height band and water preference.
    """

    def __init__(
        self,
        composer: Optional[TerrainComposer] = None,
        parameters: Optional[Mapping[str, Any]] = None,
        palette: Optional[Mapping[str, Any]] = None
    ):
        super().__init__(composer)
        self.parameters = VEGETATION_PARAMETERS.resolve(parameters)
        self.palette = VEGETATION_PALETTE.resolve(palette)
        self.profiles = self._build_profiles()
        validate_profiles(self.profiles.values())

    def _build_profiles(self) -> Dict[str, Profile]:
        p = self.parameters
        water = p["vegetation_water_multiplier"]
        trees = p["tree_count"]
        clear = outside_settlements(self.composer.settlements, p["settlement_clearance"])

        grass = SpeciesProfile(
            "grass", count=p["grass_density"], h_min=-0.3,
            scale_min=0.5, scale_max=1.1, extent=360.0,
            color=ColorVariation(self.palette["grass"], hue=0.025, saturation=0.05, lightness=0.05,
                                 wet_saturation=0.1, wet_multiplier=water),
        )
        tall_grass = SpeciesProfile(
            "tall_grass", count=int(p["grass_density"] * p["tall_grass_ratio"]),
            h_min=0.5, h_max=6.0, scale_min=0.8, scale_max=1.2, oversample=2, extent=340.0,
            color=ColorVariation(self.palette["tall_grass"], lightness=0.05),
        )
        reeds = ClusterProfile(
            member=SpeciesProfile(
                "reeds", count=p["reed_cluster_count"] * 20, h_min=-0.5, h_max=1.0,
                scale_min=0.8, scale_max=1.2, y_stretch=(0.85, 1.0),
                color=ColorVariation(self.palette["reeds"], lightness=0.05),
            ),
            cluster_count=p["reed_cluster_count"],
        )

        return {
            "grass": grass,
            "tall_grass": tall_grass,
            "reeds": reeds,
            "deciduous": SpeciesProfile(
                "deciduous", count=int(trees * 0.3), h_min=1.0, h_max=8.0,
                water="exclude", water_multiplier=water,
                scale_min=0.8, scale_max=1.6, oversample=3, extent=340.0, predicates=(clear,),
            ),
            "willow": SpeciesProfile(
                "willow", count=int(trees * 0.2), h_min=0.0, h_max=3.0,
                scale_min=0.9, scale_max=1.4, oversample=4, extent=300.0,
                sampling="riverbank", bank_min=1.0, bank_max=2.5,
            ),
            "poplar": SpeciesProfile(
                "poplar", count=int(trees * 0.25), h_min=0.5, h_max=7.0,
                scale_min=0.7, scale_max=1.3, oversample=3, extent=320.0, predicates=(clear,),
            ),
            "spruce": SpeciesProfile(
                "spruce", count=int(trees * 0.15), h_min=2.0, h_max=9.0,
                scale_min=0.6, scale_max=1.4, oversample=4, extent=340.0, predicates=(clear,),
            ),
            "berry_bush": SpeciesProfile(
                "berry_bush", count=p["bush_count"], h_min=0.3, h_max=4.0,
                scale_min=0.6, scale_max=1.4, y_stretch=(0.8, 1.2), oversample=3, extent=300.0,
                predicates=(clear,),
            ),
        }


class PropScatterer(_Scatterer):
    """Rocks on riverbanks and high ground, plus fixed campfires."""

    def __init__(
        self,
        composer: Optional[TerrainComposer] = None,
        parameters: Optional[Mapping[str, Any]] = None,
        fireplaces: Sequence[Sequence[float]] = DEFAULT_FIREPLACES
    ):
        super().__init__(composer)
        self.parameters = VEGETATION_PARAMETERS.resolve(parameters)
        self.fireplaces = tuple(tuple(p) for p in fireplaces)
        self.profiles = {
            "rock": SpeciesProfile(
                "rock", count=self.parameters["rock_count"], h_min=0.0,
                scale_min=0.2, scale_max=0.8, scale_axes=(1.0, 0.7, 1.0),
                rotation="xyz", rotation_range=math.pi, sink=0.3,
                oversample=2, extent=350.0, predicates=(riverbank_or_high_ground(),),
            ),
        }
        validate_profiles(self.profiles.values())

    def place_fireplaces(self) -> PlacementResult:
        return self.engine.place_fixed(self.fireplaces, FIREPLACE_MIN_HEIGHT, name="fireplace")

    def scatter(self, seed: Seed) -> Dict[str, PlacementResult]:
        results = super().scatter(seed)
        results["fireplace"] = self.place_fireplaces()
        return results
