"""
crow_eye/config.py

Every tunable in one place.

Each component keeps its own dataclass config; SimulationConfig
bundles them with the run settings and reads them from YAML.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from crow_eye.core.agent import AlertLevel, CrowConfig
from crow_eye.environments.threat_field import FieldConfig
from crow_eye.navigation.fractal import FractalConfig
from crow_eye.protocols.consensus import VoterConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "configs" / "default.yaml"


@dataclass
class SimulationConfig:
    """A complete, reproducible simulation run."""
    steps: int = 15
    num_crows: int = 10
    seed: Optional[int] = None
    threats_path: str = "data/threats.csv"

    crow: CrowConfig = field(default_factory=CrowConfig)
    fractal: FractalConfig = field(default_factory=FractalConfig)
    voter: VoterConfig = field(default_factory=VoterConfig)
    environment: FieldConfig = field(default_factory=FieldConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SimulationConfig:
        """
        Build a config from nested dictionaries.

        Missing keys keep their defaults. Unknown keys raise ValueError.
        """
        data = dict(data or {})
        sections = {
            "crow": CrowConfig,
            "fractal": FractalConfig,
            "voter": VoterConfig,
            "environment": FieldConfig,
        }

        kwargs: Dict[str, Any] = {}
        for name, section_cls in sections.items():
            if name in data:
                kwargs[name] = _build_section(name, section_cls, data.pop(name) or {})

        run_keys = {f.name for f in fields(cls)} - set(sections)
        unknown = set(data) - run_keys
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        kwargs.update(data)

        config = cls(**kwargs)
        config.validate()
        return config

    def validate(self) -> None:
        if self.steps < 0:
            raise ValueError(f"steps must be non-negative, got {self.steps}")
        if self.num_crows < 0:
            raise ValueError(f"num_crows must be non-negative, got {self.num_crows}")
        if self.crow.memory_capacity < 1:
            raise ValueError("crow.memory_capacity must be at least 1")
        if not 0.0 <= self.voter.consensus_threshold <= 1.0:
            raise ValueError("voter.consensus_threshold must be in [0, 1]")
        if self.voter.proximity_radius <= 0:
            raise ValueError("voter.proximity_radius must be positive")
        low, high = self.environment.bounds
        if low >= high:
            raise ValueError(f"environment.bounds must be increasing, got {self.environment.bounds}")


def _build_section(name: str, section_cls: type, values: Dict[str, Any]) -> Any:
    known = {f.name for f in fields(section_cls)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{name}' config: {sorted(unknown)}")

    values = dict(values)
    # YAML has no tuples or enum keys
    if "bounds" in values:
        values["bounds"] = tuple(float(v) for v in values["bounds"])
    if "alert_modifiers" in values:
        modifiers = {}
        for level, modifier in values["alert_modifiers"].items():
            try:
                modifiers[AlertLevel[str(level).upper()]] = float(modifier)
            except KeyError:
                raise ValueError(f"Unknown alert level in '{name}' config: {level!r}") from None
        values["alert_modifiers"] = modifiers
    return section_cls(**values)


def load_config(path: Optional[str | Path] = None) -> SimulationConfig:
    """Load a SimulationConfig from YAML (defaults to the packaged config)."""
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    with open(path) as f:
        data = yaml.safe_load(f)
    logger.info(f"Loaded simulation config from {path}")
    return SimulationConfig.from_dict(data or {})
