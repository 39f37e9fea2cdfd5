"""
core/agent.py

A crow: watchful, tireless until it isn't, remembers what it has seen.

Each tick a crow
1. notices threats nearby and decides how worried to be,
2. either follows its fractal search path or flies straight at the
   most pressing threat,
3. keeps its distance from the rest of the flock,
4. catches its breath.

Inspired by:
- Corvid mobbing behaviour
- Reynolds boids separation
- Levy flight foraging
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Deque, Optional, Sequence
import logging
import numpy as np

from crow_eye.core.threat import Threat, ThreatCategory
from crow_eye.navigation.fractal import FractalPathGenerator

logger = logging.getLogger(__name__)

MEMORY_CAPACITY = 10


class AlertLevel(IntEnum):
    """How worried a crow is. The ordinal scales flight speed."""
    CALM = 0
    ALERT = 1
    ALARMED = 2


@dataclass
class CrowConfig:
    """
    The unchanging nature of a crow.
    Set at hatching, honoured throughout life.
    """
    # Perception
    memory_radius: float = 15.0           # Threats closer than this are remembered
    alert_radius: float = 20.0            # Threats closer than this raise alert
    alarm_count: int = 3                  # Nearby threats needed to be ALARMED
    memory_capacity: int = MEMORY_CAPACITY  # Oldest memory forgotten first

    # Experience
    fractal_trust: float = 0.7            # Trust above which a crow remembers and searches
    veteran_trust: float = 0.8            # Trust above which a crow leads

    # Fractal flight
    min_fractal_energy: float = 20.0      # Below this, fall back to direct flight
    recompute_fraction: float = 0.8       # Re-plan after this share of the path
    waypoint_reach: float = 2.0           # Close enough to count as arrived
    waypoint_reward: float = 2.0          # Energy regained on arrival
    fractal_speed: float = 0.5
    alert_speed_bonus: float = 0.3        # Per alert level
    fractal_cost: float = 0.8

    # Direct flight
    primary_weight: float = 0.9           # Logging outranks fire
    secondary_weight: float = 0.7
    distance_discount: float = 0.01
    approach_rate: float = 0.01           # Share of the gap closed per tick
    direct_cost: float = 0.5

    # Energy
    min_energy_factor: float = 0.3        # Exhausted crows still crawl
    max_energy: float = 100.0
    energy_recovery: float = 0.1

    # Separation
    crowd_radius: float = 10.0
    crowd_push: float = 0.5


@dataclass
class CrowState:
    """
    What a crow IS at this moment.

    The active path is an (n, 2) array of waypoints, or None
    before the first plan. Memory defaults to MEMORY_CAPACITY;
    Crow sizes it from CrowConfig.memory_capacity instead.
    """
    position: np.ndarray
    trust: float
    energy: float = 100.0
    alert_level: AlertLevel = AlertLevel.CALM
    memory: Deque[Threat] = field(default_factory=lambda: deque(maxlen=MEMORY_CAPACITY))
    active_path: Optional[np.ndarray] = None
    path_cursor: int = 0

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64)
        self.trust = float(np.clip(self.trust, 0.0, 1.0))
        self.alert_level = AlertLevel(self.alert_level)

    @property
    def has_path(self) -> bool:
        return self.active_path is not None and len(self.active_path) > 0


class Crow:
    """
    A single crow in the swarm.

    Mutates only its own state. Reads the threats and the rest
    of the flock but never changes them.
    """

    def __init__(
        self,
        crow_id: str,
        position: np.ndarray,
        trust: float,
        config: Optional[CrowConfig] = None,
        pathfinder: Optional[FractalPathGenerator] = None
    ):
        self.id = crow_id
        self.config = config or CrowConfig()
        self.pathfinder = pathfinder or FractalPathGenerator()
        self.state = CrowState(
            position=position,
            trust=trust,
            energy=self.config.max_energy,
            memory=deque(maxlen=self.config.memory_capacity),
        )

    # ==================== Derived properties ====================

    @property
    def position(self) -> np.ndarray:
        return self.state.position

    @property
    def trust(self) -> float:
        return self.state.trust

    @property
    def energy(self) -> float:
        return self.state.energy

    @property
    def alert_level(self) -> AlertLevel:
        return self.state.alert_level

    @property
    def alert_status(self) -> str:
        return self.state.alert_level.name

    @property
    def memory(self) -> list:
        return list(self.state.memory)

    @property
    def is_veteran(self) -> bool:
        return self.state.trust > self.config.veteran_trust

    @property
    def is_using_fractal_path(self) -> bool:
        return self._fractal_eligible() and self.state.has_path

    # ==================== Core Loop ====================

    def update(self, threats: Sequence[Threat], flock: Sequence[Crow]) -> None:
        """
        Advance this crow by one tick.

        Order matters: alert level feeds the path decision and speed,
        movement happens before separation, and recovery always comes last.
        """
        self._refresh_memory_and_alert(threats)

        energy_factor = max(
            self.config.min_energy_factor,
            self.state.energy / self.config.max_energy
        )

        if self._fractal_eligible():
            self._follow_fractal_path(threats, energy_factor)
        else:
            self._fly_direct(threats, energy_factor)

        self._avoid_crowding(flock)
        self._change_energy(self.config.energy_recovery)

    def select_threat(self, threats: Sequence[Threat]) -> Optional[Threat]:
        """
        Pick the most pressing threat: category weight discounted by distance.

        Ties go to the earlier threat.
        """
        best, best_priority = None, -np.inf
        for threat in threats:
            priority = self._category_weight(threat.category) / (
                1.0 + self.config.distance_discount * threat.distance_to(self.state.position)
            )
            if priority > best_priority:
                best, best_priority = threat, priority
        return best

    # ==================== Internal Mechanisms ====================

    def _fractal_eligible(self) -> bool:
        return (
            self.state.trust > self.config.fractal_trust
            and self.state.energy > self.config.min_fractal_energy
        )

    def _refresh_memory_and_alert(self, threats: Sequence[Threat]) -> None:
        """Remember close threats (experienced crows only), then re-assess alarm."""
        position = self.state.position

        if self.state.trust > self.config.fractal_trust:
            for threat in threats:
                if (threat.distance_to(position) < self.config.memory_radius
                        and threat not in self.state.memory):
                    # deque(maxlen) drops the oldest entry
                    self.state.memory.append(threat)

        nearby = sum(
            1 for t in threats if t.distance_to(position) < self.config.alert_radius
        )
        if nearby >= self.config.alarm_count:
            self.state.alert_level = AlertLevel.ALARMED
        elif nearby >= 1:
            self.state.alert_level = AlertLevel.ALERT
        else:
            self.state.alert_level = AlertLevel(max(AlertLevel.CALM, self.state.alert_level - 1))

    def _needs_new_path(self) -> bool:
        state = self.state
        if not state.has_path:
            return True
        if state.path_cursor >= self.config.recompute_fraction * len(state.active_path):
            return True
        return state.alert_level == AlertLevel.ALARMED

    def _follow_fractal_path(self, threats: Sequence[Threat], energy_factor: float) -> None:
        state = self.state

        if self._needs_new_path():
            state.active_path = self.pathfinder.generate(threats, state.trust, list(state.memory))
            state.path_cursor = 0
            logger.debug(f"{self.id} planned {len(state.active_path)} waypoints")

        if state.path_cursor >= len(state.active_path):
            return

        waypoint = state.active_path[state.path_cursor]
        offset = waypoint - state.position
        distance = float(np.hypot(offset[0], offset[1]))

        if distance < self.config.waypoint_reach:
            state.path_cursor += 1
            self._change_energy(self.config.waypoint_reward)
        else:
            speed = (
                self.config.fractal_speed * state.trust * energy_factor
                * (1.0 + int(state.alert_level) * self.config.alert_speed_bonus)
            )
            state.position = state.position + offset / distance * speed
            self._change_energy(-self.config.fractal_cost)

    def _fly_direct(self, threats: Sequence[Threat], energy_factor: float) -> None:
        target = self.select_threat(threats)
        if target is None:
            return

        rate = self.config.approach_rate * self.state.trust * energy_factor
        self.state.position = self.state.position + (target.position - self.state.position) * rate
        self._change_energy(-self.config.direct_cost)

    def _avoid_crowding(self, flock: Sequence[Crow]) -> None:
        """Push away from every crow inside the crowd radius, one at a time."""
        for other in flock:
            if other is self:
                continue
            offset = self.state.position - other.state.position
            distance = float(np.hypot(offset[0], offset[1]))
            # Coincident crows have no direction to separate along
            if 0.0 < distance < self.config.crowd_radius:
                self.state.position = self.state.position + offset / distance * self.config.crowd_push

    def _change_energy(self, delta: float) -> None:
        self.state.energy = float(np.clip(self.state.energy + delta, 0.0, self.config.max_energy))

    def _category_weight(self, category: ThreatCategory) -> float:
        if category is ThreatCategory.PRIMARY_ALERT:
            return self.config.primary_weight
        return self.config.secondary_weight

    # ==================== Utilities ====================

    def distance_to(self, point: np.ndarray) -> float:
        """Euclidean distance to a 2D point."""
        return float(np.linalg.norm(self.state.position - np.asarray(point, dtype=np.float64)))

    def __repr__(self) -> str:
        mode = "FRACTAL" if self.is_using_fractal_path else "DIRECT"
        return (
            f"Crow(id={self.id}, "
            f"pos=[{self.state.position[0]:.1f}, {self.state.position[1]:.1f}], "
            f"trust={self.state.trust:.2f}, "
            f"mode={mode}, "
            f"energy={self.state.energy:.0f}, "
            f"alert={self.alert_status})"
        )
