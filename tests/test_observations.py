"""
Tests for crow_eye/observations/

Console reports and matplotlib rendering.
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np

from crow_eye.core.threat import Threat, ThreatCategory
from crow_eye.environments.threat_field import SwarmStats, StepReport, ThreatField
from crow_eye.observations.report import format_step
from crow_eye.observations.visualize import SwarmVisualizer
from crow_eye.protocols.consensus import VoteResult


FIRE = Threat(80.0, 70.0, ThreatCategory.SECONDARY_ALERT)
LOGGING = Threat(50.0, 30.0, ThreatCategory.PRIMARY_ALERT)


class TestReport:
    """Tests for console step rendering."""

    def test_quiet_step(self):
        report = StepReport(time=3, stats=SwarmStats(0, 0, 99.7), leaders=[])
        assert format_step(report) == [
            "--- Step 3 ---",
            "Stats: 0 fractal, 0 alert, avg energy: 99.7",
        ]

    def test_step_with_leaders_alert_and_vote(self):
        field = ThreatField([LOGGING])
        leader = field.add_crow(position=np.array([50.0, 30.0]), trust=0.95)
        vote = VoteResult(decision=True, reason="automatic escalation",
                          threat=LOGGING, total_voters=1, consensus_ratio=1.0)
        report = StepReport(
            time=5,
            stats=SwarmStats(1, 1, 90.0),
            leaders=[leader],
            critical_threat=LOGGING,
            vote=vote,
        )
        lines = format_step(report)

        assert lines[1] == f"LEADER: {leader!r}"
        assert "SWARM ALERT: 1 crows detecting threats!" in lines
        assert "=== CROW DEMOCRACY SESSION ===" in lines
        assert f"Voting on: {LOGGING}" in lines
        assert "RANGERS ALERTED! Human intervention requested." in lines

    def test_vote_against_escalation(self):
        vote = VoteResult(decision=False, reason="below", threat=FIRE)
        report = StepReport(time=5, stats=SwarmStats(0, 0, 50.0), leaders=[],
                            critical_threat=FIRE, vote=vote)
        assert "Swarm decides to handle threat independently." in format_step(report)


class TestSwarmVisualizer:
    """Tests for SwarmVisualizer on a headless backend."""

    def make_field(self):
        field = ThreatField([LOGGING, FIRE], seed=4)
        field.populate(6)
        field.add_crow(position=np.array([50.0, 35.0]), trust=0.95)
        return field

    def test_save_before_render_is_noop(self, tmp_path):
        viz = SwarmVisualizer(self.make_field())
        out = tmp_path / "frame.png"
        viz.save_frame(str(out))
        viz.close()
        assert not out.exists()

    def test_close_releases_figure(self):
        viz = SwarmVisualizer(self.make_field(), figsize=(3, 3))
        viz.render(pause=0)
        viz.close()
        assert viz._fig is None

    def test_render_and_save(self, tmp_path):
        field = self.make_field()
        viz = SwarmVisualizer(field, figsize=(4, 4))
        try:
            for _ in range(3):
                field.step()
                viz.render(pause=0)
            out = tmp_path / "frame.png"
            viz.save_frame(str(out))
        finally:
            viz.close()
        assert out.exists()

    def test_render_empty_field(self):
        viz = SwarmVisualizer(ThreatField([]), figsize=(3, 3))
        try:
            viz.render(pause=0)
        finally:
            viz.close()
