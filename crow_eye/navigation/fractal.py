"""
navigation/fractal.py

Search paths grown from a grammar.

Real crows wander in Levy-like flights: long runs, tight loops,
long runs again. A two-rule rewriting grammar produces the same
self-similar texture, and a gentle pull toward known threats keeps
the path from drifting away from where the trouble is.

Inspired by:
- Lindenmayer systems
- Levy flight foraging
- Turtle graphics
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Sequence
import logging
import math
import numpy as np

if TYPE_CHECKING:
    from crow_eye.core.threat import Threat

logger = logging.getLogger(__name__)


@dataclass
class FractalConfig:
    """Shape of the generated search path."""
    step_size: float = 5.0                # Stride per move symbol (scaled by trust)
    branch_angle: float = math.pi / 4     # Heading change on '+' / '-'
    heading_blend: float = 0.7            # Weight of own heading vs. threat bearing
    base_depth: int = 3                   # Rewrites for a trust-0 crow
    depth_trust_scale: float = 2.0        # Extra rewrites earned by trust
    axiom: str = "A"
    rules: Dict[str, str] = field(default_factory=lambda: {"A": "A+B", "B": "A-B"})


def rewrite(axiom: str, depth: int, rules: Dict[str, str]) -> str:
    """
    Apply the grammar `depth` times to every symbol at once.

    Symbols without a rule pass through unchanged.
    """
    current = axiom
    for _ in range(depth):
        current = "".join(rules.get(symbol, symbol) for symbol in current)
    return current


def expand(symbol: str, depth: int, rules: Dict[str, str]) -> Iterator[str]:
    """
    Lazily yield the symbols of `rewrite(symbol, depth, rules)`.

    The grammar is context free, so expanding each symbol on its own
    gives the same string without ever holding it in memory.
    """
    if depth <= 0 or symbol not in rules:
        yield symbol
        return
    for child in rules[symbol]:
        yield from expand(child, depth - 1, rules)


class FractalPathGenerator:
    """
    Turns threats into an ordered list of waypoints.

    Stateless: the same threats, memory and trust always give
    the same path.
    """

    def __init__(self, config: Optional[FractalConfig] = None):
        self.config = config or FractalConfig()

    def depth_for(self, trust: float) -> int:
        """Veterans search deeper."""
        return int(math.floor(self.config.base_depth + trust * self.config.depth_trust_scale))

    def generate(
        self,
        threats: Sequence[Threat],
        trust: float,
        memory: Sequence[Threat] = ()
    ) -> np.ndarray:
        """
        Generate a waypoint path of shape (n, 2).

        The first waypoint is the centroid of current and remembered
        threats; every move symbol in the expanded grammar adds one more.
        With no current threats the path is a single point at the origin.
        """
        if not threats:
            return np.zeros((1, 2))

        known = np.array(
            [[t.x, t.y] for t in list(threats) + list(memory)],
            dtype=np.float64
        )
        centroid = known.mean(axis=0)

        depth = self.depth_for(trust)
        stride = self.config.step_size * trust
        blend = self.config.heading_blend

        waypoints = [centroid.copy()]
        position = centroid.copy()
        heading = 0.0

        for symbol in self._symbols(depth):
            if symbol == "+":
                heading += self.config.branch_angle
            elif symbol == "-":
                heading -= self.config.branch_angle
            elif symbol in self.config.rules:
                target = self._nearest(known, position)
                bearing = math.atan2(target[1] - position[1], target[0] - position[0])
                angle = blend * heading + (1.0 - blend) * bearing
                position = position + stride * np.array([math.cos(angle), math.sin(angle)])
                waypoints.append(position)

        logger.debug(
            f"Generated {len(waypoints)} waypoints at depth {depth} "
            f"from {len(known)} threats"
        )
        return np.array(waypoints)

    def _symbols(self, depth: int) -> Iterator[str]:
        for symbol in self.config.axiom:
            yield from expand(symbol, depth, self.config.rules)

    @staticmethod
    def _nearest(points: np.ndarray, position: np.ndarray) -> np.ndarray:
        # argmin returns the first of equally near points
        distances = np.hypot(points[:, 0] - position[0], points[:, 1] - position[1])
        return points[int(np.argmin(distances))]
