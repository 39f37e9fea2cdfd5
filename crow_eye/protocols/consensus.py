"""
protocols/consensus.py

Crow democracy: should the humans be told?

Some threats are too serious to debate; logging always goes
straight to the rangers. Everything else is put to the flock.
Experienced crows carry more weight, and worried, nearby crows
are quicker to say yes.

Inspired by:
- Corvid "funerals" and group mobbing decisions
- Quorum sensing in bacteria
- Weighted majority voting
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional, Sequence
import logging

from crow_eye.core.agent import AlertLevel
from crow_eye.core.threat import Threat

if TYPE_CHECKING:
    from crow_eye.core.agent import Crow

logger = logging.getLogger(__name__)


@dataclass
class VoterConfig:
    """Rules of the vote."""
    consensus_threshold: float = 0.7       # Weighted share of yes needed to escalate
    veteran_multiplier: float = 2.0        # Voting power of a veteran
    yes_cutoff: float = 0.5                # Vote strength above which a crow says yes
    alert_modifiers: Dict[AlertLevel, float] = field(default_factory=lambda: {
        AlertLevel.CALM: 0.0,
        AlertLevel.ALERT: 0.2,
        AlertLevel.ALARMED: 0.4,
    })
    severity_weight: float = 0.3
    proximity_radius: float = 50.0         # Independent of the crows' sensing radii
    proximity_weight: float = 0.2


@dataclass(frozen=True)
class VoteResult:
    """Outcome and tally of a single vote."""
    decision: bool
    reason: str
    threat: Optional[Threat] = None
    total_voters: int = 0
    yes_votes: float = 0.0
    total_voting_power: float = 0.0
    consensus_ratio: float = 0.0
    veteran_voters: int = 0
    yes_voters: int = 0
    no_voters: int = 0

    def summary(self) -> str:
        verdict = "ALERT" if self.decision else "NO ALERT"
        return (
            f"Vote Result: {verdict} ({self.reason}) - "
            f"{self.yes_voters}/{self.total_voters} crows, "
            f"{self.consensus_ratio * 100:.1f}% consensus"
        )


class ConsensusVoter:
    """
    Weighted yes/no vote on escalating a threat.

    Pure: reads crows and threat, never changes them, keeps no state
    between calls.
    """

    def __init__(self, config: Optional[VoterConfig] = None):
        self.config = config or VoterConfig()

    def vote(self, threat: Threat, flock: Sequence[Crow]) -> VoteResult:
        """
        Decide whether to escalate `threat`.

        An empty flock never escalates, whatever the threat.
        Primary alerts escalate without a tally.
        """
        if not flock:
            return VoteResult(decision=False, reason="no voters", threat=threat)

        if threat.is_primary:
            logger.info(f"Automatic escalation for {threat}")
            return VoteResult(
                decision=True,
                reason="automatic escalation",
                threat=threat,
                total_voters=len(flock),
                consensus_ratio=1.0,
            )

        yes_votes = 0.0
        total_power = 0.0
        veterans = yes_voters = no_voters = 0

        for crow in flock:
            power = self.config.veteran_multiplier if crow.is_veteran else 1.0
            total_power += power
            if crow.is_veteran:
                veterans += 1

            if self.vote_strength(crow, threat) > self.config.yes_cutoff:
                yes_votes += power
                yes_voters += 1
            else:
                no_voters += 1

        ratio = yes_votes / total_power
        decision = ratio >= self.config.consensus_threshold
        reason = (
            f"{ratio * 100:.1f}% consensus "
            f"{'meets' if decision else 'below'} "
            f"{self.config.consensus_threshold * 100:.0f}% threshold"
        )

        logger.debug(
            f"Voting power: {yes_votes:.1f} YES / {total_power:.1f} TOTAL "
            f"({yes_voters} yes, {no_voters} no)"
        )

        return VoteResult(
            decision=decision,
            reason=reason,
            threat=threat,
            total_voters=len(flock),
            yes_votes=yes_votes,
            total_voting_power=total_power,
            consensus_ratio=ratio,
            veteran_voters=veterans,
            yes_voters=yes_voters,
            no_voters=no_voters,
        )

    def vote_strength(self, crow: Crow, threat: Threat) -> float:
        """
        How strongly one crow favours escalation, capped at 1.

        Trust, worry, severity and closeness all push toward yes.
        """
        alert = self.config.alert_modifiers.get(crow.alert_level, 0.0)
        intensity = threat.severity * self.config.severity_weight

        distance = threat.distance_to(crow.position)
        radius = self.config.proximity_radius
        proximity = max(0.0, (radius - distance) / radius) * self.config.proximity_weight

        return min(1.0, crow.trust + alert + intensity + proximity)
