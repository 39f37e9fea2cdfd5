"""
environments/threat_field.py

A square of forest with threats in it and crows above it.

The field owns the flock and the tick. Crows move one at a time
in the order they hatched; every few ticks the flock votes on the
most critical threat and the decision goes to whoever is listening.

Inspired by:
- Reynolds boids simulation
- Discrete-time agent-based models
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import numpy as np

from crow_eye.core.agent import Crow, CrowConfig, AlertLevel
from crow_eye.core.threat import Threat
from crow_eye.navigation.fractal import FractalPathGenerator, FractalConfig
from crow_eye.protocols.consensus import ConsensusVoter, VoterConfig, VoteResult

logger = logging.getLogger(__name__)

EscalationSink = Callable[[bool], None]


@dataclass
class FieldConfig:
    """Configuration for the threat field."""
    bounds: Tuple[float, float] = (0.0, 100.0)   # Hatching area, both axes
    vote_interval: int = 5                        # Ticks between votes


@dataclass
class SwarmStats:
    """Flock-wide summary after a tick."""
    fractal_crows: int
    alert_crows: int
    average_energy: float


@dataclass
class StepReport:
    """What happened during one tick."""
    time: int
    stats: SwarmStats
    leaders: List[Crow]
    critical_threat: Optional[Threat] = None
    vote: Optional[VoteResult] = None


class ThreatField:
    """
    Sequential, deterministic driver for a crow swarm.

    Given the same seed, threats and configuration, two runs produce
    identical flocks and identical votes.
    """

    def __init__(
        self,
        threats: Sequence[Threat],
        config: Optional[FieldConfig] = None,
        crow_config: Optional[CrowConfig] = None,
        fractal_config: Optional[FractalConfig] = None,
        voter_config: Optional[VoterConfig] = None,
        escalation_sink: Optional[EscalationSink] = None,
        seed: Optional[int] = None
    ):
        self.threats: List[Threat] = list(threats)
        self.config = config or FieldConfig()
        self.crow_config = crow_config or CrowConfig()
        self.pathfinder = FractalPathGenerator(fractal_config)
        self.voter = ConsensusVoter(voter_config)
        self.escalation_sink = escalation_sink
        self.rng = np.random.default_rng(seed)

        self.crows: List[Crow] = []
        self.time = 0

    def add_crow(
        self,
        position: Optional[np.ndarray] = None,
        trust: Optional[float] = None,
        crow_id: Optional[str] = None
    ) -> Crow:
        """Hatch a crow. Missing position and trust are drawn uniformly."""
        low, high = self.config.bounds
        if position is None:
            position = self.rng.uniform(low, high, size=2)
        if trust is None:
            trust = self.rng.uniform(0.0, 1.0)
        if crow_id is None:
            crow_id = f"crow_{len(self.crows)}"

        crow = Crow(crow_id, position, trust, self.crow_config, self.pathfinder)
        self.crows.append(crow)
        return crow

    def populate(self, count: int) -> List[Crow]:
        """Hatch `count` random crows."""
        return [self.add_crow() for _ in range(count)]

    def step(self) -> StepReport:
        """
        Advance the swarm by one tick.

        1. Every crow updates, in hatching order
        2. On vote ticks, the flock votes on the critical threat
        3. The decision is handed to the escalation sink
        """
        self.time += 1

        for crow in self.crows:
            crow.update(self.threats, self.crows)

        report = StepReport(time=self.time, stats=self.stats(), leaders=self.leaders())

        if self._is_vote_tick() and self.threats:
            report.critical_threat = self.select_critical_threat()
            report.vote = self.voter.vote(report.critical_threat, self.crows)
            logger.info(f"Tick {self.time}: {report.vote.summary()}")
            if self.escalation_sink is not None:
                self.escalation_sink(report.vote.decision)

        return report

    def run(self, steps: int) -> List[StepReport]:
        """Run a fixed number of ticks."""
        return [self.step() for _ in range(steps)]

    def select_critical_threat(self) -> Optional[Threat]:
        """
        Most critical threat: severe and close to some crow.

        Scored as `severity * 2 - distance to nearest crow`; the earlier
        threat wins ties.
        """
        best, best_score = None, -np.inf
        for threat in self.threats:
            score = threat.severity * 2.0 - self._min_distance_to_flock(threat)
            if score > best_score:
                best, best_score = threat, score
        return best

    def stats(self) -> SwarmStats:
        if not self.crows:
            return SwarmStats(0, 0, 0.0)
        return SwarmStats(
            fractal_crows=sum(1 for c in self.crows if c.is_using_fractal_path),
            alert_crows=sum(1 for c in self.crows if c.alert_level != AlertLevel.CALM),
            average_energy=float(np.mean(self.get_energies())),
        )

    def leaders(self) -> List[Crow]:
        """Veterans lead the swarm."""
        return [c for c in self.crows if c.is_veteran]

    def _is_vote_tick(self) -> bool:
        interval = self.config.vote_interval
        return interval > 0 and self.time % interval == 0

    def _min_distance_to_flock(self, threat: Threat) -> float:
        if not self.crows:
            return float("inf")
        return min(threat.distance_to(c.position) for c in self.crows)

    # ==================== Snapshots ====================

    def get_positions(self) -> np.ndarray:
        """Get positions of all crows as array."""
        return np.array([c.position for c in self.crows]).reshape(-1, 2)

    def get_energies(self) -> np.ndarray:
        """Get energy levels of all crows."""
        return np.array([c.energy for c in self.crows])

    def get_alert_levels(self) -> np.ndarray:
        return np.array([int(c.alert_level) for c in self.crows])

    def __repr__(self) -> str:
        return (
            f"ThreatField(crows={len(self.crows)}, "
            f"threats={len(self.threats)}, "
            f"time={self.time})"
        )
