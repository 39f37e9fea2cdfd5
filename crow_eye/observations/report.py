"""
observations/report.py

Plain-text account of each tick, for the console.
"""

from __future__ import annotations
from typing import List

from crow_eye.environments.threat_field import StepReport

RULE = "=" * 40


def format_step(report: StepReport) -> List[str]:
    """Render one tick as lines of text."""
    lines = [f"--- Step {report.time} ---"]
    lines.extend(f"LEADER: {crow!r}" for crow in report.leaders)

    stats = report.stats
    lines.append(
        f"Stats: {stats.fractal_crows} fractal, {stats.alert_crows} alert, "
        f"avg energy: {stats.average_energy:.1f}"
    )
    if stats.alert_crows > 0:
        lines.append(f"SWARM ALERT: {stats.alert_crows} crows detecting threats!")

    if report.vote is not None:
        lines.extend(format_vote(report))

    return lines


def format_vote(report: StepReport) -> List[str]:
    vote = report.vote
    lines = [
        "=== CROW DEMOCRACY SESSION ===",
        f"Voting on: {report.critical_threat}",
        vote.summary(),
    ]
    if vote.decision:
        lines.append("RANGERS ALERTED! Human intervention requested.")
    else:
        lines.append("Swarm decides to handle threat independently.")
    lines.append(RULE)
    return lines
