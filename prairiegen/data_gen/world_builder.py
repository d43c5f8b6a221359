"""
Batch world builder.

Builds the terrain grid and every scattered population of a world in
one pass and writes them for a renderer to load:

- world.npz: vertex buffers, instance matrices and polylines
- world_manifest.json: configuration, grid statistics and placement counts
"""

import argparse
import json
import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import numpy as np
from tqdm import tqdm

from ..scatter import instance_matrices
from ..world import World


class WorldBuilder:
    """
    Writes one world to an output directory.

    Generation is deterministic: the same configuration and seed give
    identical arrays.
    """

    def __init__(
        self,
        output_dir: str,
        config: Optional[Mapping[str, Any]] = None,
        seed: Optional[int] = None,
        progress: bool = True
    ):
        self.output_dir = Path(output_dir)
        config = dict(config or {})
        if seed is not None:
            config["seed"] = seed

        self.world = World(config)
        self.seed = self.world.seed
        self.progress = progress

        self.stats: Dict[str, Any] = {
            "populations": {},
            "generation_times": {},
        }

    @classmethod
    def from_config_file(cls, output_dir: str, config_path: str, **kwargs) -> "WorldBuilder":
        with open(config_path, "r") as f:
            return cls(output_dir, json.load(f), **kwargs)

    def build_arrays(self) -> Dict[str, np.ndarray]:
        """Generate every array of the world, keyed by its npz name."""

        arrays: Dict[str, np.ndarray] = {}

        start = time.time()
        grid = self.world.build_grid()
        for key, value in grid.to_arrays().items():
            arrays[f"terrain_{key}"] = value
        arrays["terrain_biomes"] = grid.biomes.astype(np.int16)
        self.stats["generation_times"]["terrain"] = time.time() - start
        self.stats["terrain"] = self.world.analyze(grid)

        half = grid.size / 2.0
        composer = self.world.composer
        arrays["river_centerline"] = composer.river.centerline(np.linspace(-half, half, 512))
        trail, *paths = composer.trails.polylines(-half, half, 512)
        arrays["trail_polyline"] = trail
        arrays["settlement_paths"] = np.array(paths).reshape(-1, 2, 2)
        arrays["settlements"] = np.array(composer.settlements).reshape(-1, 3)

        populations = [(name, self.world.vegetation) for name in self.world.vegetation.names]
        populations += [(name, self.world.props) for name in self.world.props.names]

        for name, scatterer in tqdm(populations, desc="Scattering", disable=not self.progress):
            start = time.time()
            result = scatterer.scatter_species(name, self.seed)
            self._store_population(arrays, name, result)
            self.stats["generation_times"][name] = time.time() - start

        fireplaces = self.world.props.place_fireplaces()
        self._store_population(arrays, "fireplace", fireplaces)

        return arrays

    def _store_population(self, arrays: Dict[str, np.ndarray], name: str, result) -> None:
        arrays[f"{name}_matrices"] = instance_matrices(result).astype(np.float32)
        if result.placed and result[0].color is not None:
            arrays[f"{name}_colors"] = np.array([t.color for t in result], dtype=np.float32)
        self.stats["populations"][name] = result.summary()

    def build(self) -> str:
        """
        Build and write the world.

        Returns:
            Path to the written manifest
        """

        self.output_dir.mkdir(parents=True, exist_ok=True)
        print(f"Building world (seed {self.seed}) to {self.output_dir}")

        arrays = self.build_arrays()

        arrays_path = self.output_dir / "world.npz"
        np.savez_compressed(arrays_path, **arrays)

        manifest = {
            "world_info": {
                "seed": self.seed,
                "terrain_parameters": self.world.composer.parameters,
                "settlements": [list(s) for s in self.world.composer.settlements],
                "vegetation_parameters": self.world.vegetation.parameters,
            },
            "arrays_file": arrays_path.name,
            "arrays": {key: list(value.shape) for key, value in arrays.items()},
            "generation_stats": self.stats,
        }

        manifest_path = self.output_dir / "world_manifest.json"
        with open(manifest_path, "w") as f:
            json.dump(manifest, f, indent=2)

        underfilled = [name for name, s in self.stats["populations"].items() if s["underfilled"]]

        print(f"\nWorld built successfully!")
        print(f"Vertices: {len(arrays['terrain_positions'])}")
        for name, summary in self.stats["populations"].items():
            print(f"  {name}: {summary['placed']}/{summary['requested']}")
        if underfilled:
            print(f"Under-filled populations: {', '.join(underfilled)}")
        print(f"Manifest saved to: {manifest_path}")

        return str(manifest_path)


def main(argv=None):
    """CLI entry point for world building."""

    parser = argparse.ArgumentParser(description="Build a procedural prairie world")
    parser.add_argument("--output", type=str, required=True, help="Output directory")
    parser.add_argument("--config", type=str, default=None, help="World configuration JSON")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides the config)")
    parser.add_argument("--segments", type=int, default=None, help="Grid cells per side")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")

    args = parser.parse_args(argv)

    config: Dict[str, Any] = {}
    if args.config:
        with open(args.config, "r") as f:
            config = json.load(f)
    if args.segments is not None:
        config.setdefault("terrain", {})["segments"] = args.segments

    builder = WorldBuilder(
        output_dir=args.output,
        config=config,
        seed=args.seed,
        progress=not args.no_progress
    )
    builder.build()


if __name__ == "__main__":
    main()
