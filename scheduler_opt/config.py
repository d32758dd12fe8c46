"""
Tunable parameters for the search-based schedulers and Round Robin.

Every budget, rate and weight used by the optimizers lives here so that
runs can be reproduced (together with a seed) and shrunk for tests.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

DEFAULT_QUANTUM = 2


def _check_budget(name: str, value: int) -> None:
    if value < 1:
        raise ValueError(f"{name} must be at least 1")


def _check_unit(name: str, value: float) -> None:
    if not (0 <= value <= 1):
        raise ValueError(f"{name} must be between 0 and 1")


@dataclass
class GeneticConfig:
    population_size: int = 50
    generations: int = 100
    mutation_rate: float = 0.1
    tournament_size: int = 3

    def validate(self) -> None:
        _check_budget("population_size", self.population_size)
        _check_budget("generations", self.generations)
        _check_budget("tournament_size", self.tournament_size)
        _check_unit("mutation_rate", self.mutation_rate)


@dataclass
class SwarmConfig:
    particles: int = 40
    iterations: int = 80
    inertia: float = 0.7
    cognitive: float = 1.5
    social: float = 1.5

    def validate(self) -> None:
        _check_budget("particles", self.particles)
        _check_budget("iterations", self.iterations)
        if self.inertia < 0 or self.cognitive < 0 or self.social < 0:
            raise ValueError("inertia, cognitive and social weights must be non-negative")


@dataclass
class ColonyConfig:
    """
    Ant colony parameters.

    ``close_tour`` deposits pheromone on the edge from each ant's last
    process back to its first, as in cyclic tour problems.
    """

    ants: int = 30
    iterations: int = 100
    alpha: float = 1.0
    beta: float = 3.0
    evaporation: float = 0.1
    deposit: float = 100.0
    close_tour: bool = True

    def validate(self) -> None:
        _check_budget("ants", self.ants)
        _check_budget("iterations", self.iterations)
        _check_unit("evaporation", self.evaporation)
        if self.deposit <= 0:
            raise ValueError("deposit must be positive")


@dataclass
class AnnealingConfig:
    initial_temperature: float = 100.0
    cooling_rate: float = 0.98
    min_temperature: float = 0.1
    iterations_per_temperature: int = 30

    def validate(self) -> None:
        _check_budget("iterations_per_temperature", self.iterations_per_temperature)
        if self.min_temperature <= 0 or self.initial_temperature <= 0:
            raise ValueError("temperatures must be positive")
        if not (0 < self.cooling_rate < 1):
            raise ValueError("cooling_rate must be between 0 and 1 (exclusive)")


@dataclass
class OptimizerConfig:
    """
    All algorithm parameters in one place.
    """

    quantum: float = DEFAULT_QUANTUM
    genetic: GeneticConfig = field(default_factory=GeneticConfig)
    swarm: SwarmConfig = field(default_factory=SwarmConfig)
    colony: ColonyConfig = field(default_factory=ColonyConfig)
    annealing: AnnealingConfig = field(default_factory=AnnealingConfig)

    def validate(self) -> None:
        if self.quantum <= 0:
            raise ValueError("quantum must be positive")
        self.genetic.validate()
        self.swarm.validate()
        self.colony.validate()
        self.annealing.validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptimizerConfig":
        sections = {
            "genetic": GeneticConfig,
            "swarm": SwarmConfig,
            "colony": ColonyConfig,
            "annealing": AnnealingConfig,
        }
        unknown = set(data) - set(sections) - {"quantum"}
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        kwargs: Dict[str, Any] = {}
        if "quantum" in data:
            kwargs["quantum"] = data["quantum"]
        for key, section_cls in sections.items():
            if key in data:
                kwargs[key] = _section_from_dict(section_cls, key, data[key])

        config = cls(**kwargs)
        config.validate()
        return config


def _section_from_dict(section_cls, key: str, values: Any):
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{key}' must be an object")
    allowed = {f.name for f in fields(section_cls)}
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in '{key}': {', '.join(sorted(unknown))}")
    return section_cls(**values)


def load_config(path: str | Path) -> OptimizerConfig:
    """
    Read an OptimizerConfig from a JSON file; missing keys keep their defaults.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a JSON object")

    return OptimizerConfig.from_dict(raw)
