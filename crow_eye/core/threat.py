"""
core/threat.py

Something is wrong in the forest.

A threat is a point event: where it happened, what kind it is,
how bad it is. Once seen, it does not change.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import numpy as np


SEVERITY_MIN = 0.1
SEVERITY_MAX = 1.0


class ThreatCategory(Enum):
    """Kinds of threat the swarm can report."""
    PRIMARY_ALERT = "primary_alert"      # Logging - always escalated
    SECONDARY_ALERT = "secondary_alert"  # Fire - put to a vote

    @property
    def default_severity(self) -> float:
        return _DEFAULT_SEVERITY[self]

    @classmethod
    def parse(cls, label: str) -> ThreatCategory:
        """
        Map a record label to a category.

        Accepts enum names and values in any case, plus the field
        labels used by survey data ("logging", "fire").
        """
        key = label.strip().lower()
        if key in _LABEL_ALIASES:
            return _LABEL_ALIASES[key]
        for category in cls:
            if key in (category.value, category.name.lower()):
                return category
        raise ValueError(f"Unknown threat category: {label!r}")


_DEFAULT_SEVERITY = {
    ThreatCategory.PRIMARY_ALERT: 0.8,
    ThreatCategory.SECONDARY_ALERT: 0.6,
}

_LABEL_ALIASES = {
    "logging": ThreatCategory.PRIMARY_ALERT,
    "fire": ThreatCategory.SECONDARY_ALERT,
}


@dataclass(frozen=True)
class Threat:
    """
    An environmental event at a fixed point.

    Severity defaults by category and is always clamped to [0.1, 1.0].
    """
    x: float
    y: float
    category: ThreatCategory
    severity: Optional[float] = None

    def __post_init__(self):
        severity = self.severity
        if severity is None:
            severity = self.category.default_severity
        severity = min(SEVERITY_MAX, max(SEVERITY_MIN, float(severity)))
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "severity", severity)

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)

    @property
    def is_primary(self) -> bool:
        return self.category is ThreatCategory.PRIMARY_ALERT

    def distance_to(self, point: np.ndarray) -> float:
        """Euclidean distance from this threat to a 2D point."""
        return float(np.hypot(self.x - point[0], self.y - point[1]))

    def __str__(self) -> str:
        return (
            f"Threat[{self.category.value} {self.severity * 100:.0f}% "
            f"at {self.x:.1f},{self.y:.1f}]"
        )
