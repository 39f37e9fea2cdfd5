"""
Core components of the crow swarm.

- threat: What the crows are looking for
- agent: The Crow - watchful, tireless until it isn't
"""

from .threat import Threat, ThreatCategory
from .agent import Crow, CrowState, CrowConfig, AlertLevel

__all__ = [
    "Threat", "ThreatCategory",
    "Crow", "CrowState", "CrowConfig", "AlertLevel",
]
