"""
Tests for environments/threat_field.py

The step driver: hatching, ticking, voting, escalating.
"""

import numpy as np
import pytest

from crow_eye.core.agent import CrowConfig
from crow_eye.core.threat import Threat, ThreatCategory
from crow_eye.environments.threat_field import FieldConfig, ThreatField
from crow_eye.protocols.consensus import VoterConfig


FIRE = Threat(80.0, 70.0, ThreatCategory.SECONDARY_ALERT)
LOGGING = Threat(50.0, 30.0, ThreatCategory.PRIMARY_ALERT)


class TestFieldConfig:
    """Tests for FieldConfig dataclass."""

    def test_default_config(self):
        config = FieldConfig()
        assert config.bounds == (0.0, 100.0)
        assert config.vote_interval == 5


class TestThreatField:
    """Tests for ThreatField environment."""

    def test_field_creation(self):
        field = ThreatField([LOGGING, FIRE])
        assert field.time == 0
        assert field.crows == []
        assert len(field.threats) == 2

    def test_populate_within_bounds(self):
        field = ThreatField([FIRE], seed=3)
        crows = field.populate(25)
        assert len(crows) == 25
        positions = field.get_positions()
        assert positions.shape == (25, 2)
        assert np.all((positions >= 0.0) & (positions <= 100.0))
        assert all(0.0 <= c.trust <= 1.0 for c in crows)

    def test_crow_ids_follow_hatching_order(self):
        field = ThreatField([FIRE], seed=1)
        field.populate(3)
        assert [c.id for c in field.crows] == ["crow_0", "crow_1", "crow_2"]

    def test_same_seed_same_swarm(self):
        a = ThreatField([FIRE], seed=11)
        b = ThreatField([FIRE], seed=11)
        a.populate(6)
        b.populate(6)
        np.testing.assert_array_equal(a.get_positions(), b.get_positions())
        assert [c.trust for c in a.crows] == [c.trust for c in b.crows]

    def test_add_crow_explicit(self):
        field = ThreatField([FIRE])
        crow = field.add_crow(position=np.array([1.0, 2.0]), trust=0.4, crow_id="scout")
        assert crow.id == "scout"
        assert crow.trust == 0.4
        np.testing.assert_array_equal(crow.position, [1.0, 2.0])

    def test_step_advances_time(self):
        field = ThreatField([FIRE], seed=0)
        field.populate(3)
        report = field.step()
        assert field.time == 1
        assert report.time == 1

    def test_votes_on_cadence(self):
        field = ThreatField([LOGGING, FIRE], seed=0)
        field.populate(5)
        reports = field.run(10)
        voted = [r.time for r in reports if r.vote is not None]
        assert voted == [5, 10]

    def test_escalation_sink_receives_decisions(self):
        decisions = []
        field = ThreatField([LOGGING], escalation_sink=decisions.append, seed=2)
        field.populate(4)
        field.run(15)
        assert decisions == [True, True, True]

    def test_no_threats_no_vote(self):
        decisions = []
        field = ThreatField([], escalation_sink=decisions.append, seed=2)
        field.populate(4)
        reports = field.run(5)
        assert reports[-1].vote is None
        assert decisions == []

    def test_custom_vote_interval(self):
        field = ThreatField([FIRE], config=FieldConfig(vote_interval=2), seed=0)
        field.populate(2)
        reports = field.run(6)
        assert [r.time for r in reports if r.vote is not None] == [2, 4, 6]

    def test_voter_config_used(self):
        """A zero threshold escalates any fire."""
        field = ThreatField([FIRE], voter_config=VoterConfig(consensus_threshold=0.0), seed=0)
        field.populate(3)
        reports = field.run(5)
        assert reports[-1].vote.decision is True

    def test_select_critical_threat(self):
        near_fire = Threat(5.0, 0.0, ThreatCategory.SECONDARY_ALERT)
        far_logging = Threat(50.0, 0.0, ThreatCategory.PRIMARY_ALERT)
        field = ThreatField([far_logging, near_fire])
        field.add_crow(position=np.zeros(2), trust=0.5)
        assert field.select_critical_threat() is near_fire

    def test_select_critical_threat_empty(self):
        field = ThreatField([])
        field.add_crow(position=np.zeros(2), trust=0.5)
        assert field.select_critical_threat() is None

    def test_stats_and_leaders(self):
        field = ThreatField([Threat(10.0, 0.0, ThreatCategory.SECONDARY_ALERT)])
        veteran = field.add_crow(position=np.zeros(2), trust=0.9)
        field.add_crow(position=np.array([90.0, 90.0]), trust=0.2)
        report = field.step()

        assert report.leaders == [veteran]
        assert report.stats.fractal_crows == 1
        assert report.stats.alert_crows == 1
        assert report.stats.average_energy == pytest.approx(
            np.mean([c.energy for c in field.crows])
        )

    def test_empty_field_stats(self):
        stats = ThreatField([FIRE]).stats()
        assert stats.fractal_crows == 0
        assert stats.alert_crows == 0
        assert stats.average_energy == 0.0

    def test_deterministic_runs(self):
        def run():
            field = ThreatField([LOGGING, FIRE], seed=42)
            field.populate(10)
            reports = field.run(15)
            return field.get_positions(), [r.vote for r in reports if r.vote]

        positions_a, votes_a = run()
        positions_b, votes_b = run()
        np.testing.assert_array_equal(positions_a, positions_b)
        assert votes_a == votes_b

    def test_invariants_hold_over_long_run(self):
        threats = [
            LOGGING, FIRE,
            Threat(20.0, 20.0, ThreatCategory.SECONDARY_ALERT, 0.3),
            Threat(25.0, 22.0, ThreatCategory.SECONDARY_ALERT, 0.9),
        ]
        field = ThreatField(threats, crow_config=CrowConfig(), seed=5)
        field.populate(12)
        for _ in range(120):
            field.step()
            for crow in field.crows:
                assert 0.0 <= crow.energy <= 100.0
                assert 0.0 <= crow.trust <= 1.0
                assert len(crow.memory) <= 10

    def test_repr(self):
        field = ThreatField([FIRE])
        assert repr(field) == "ThreatField(crows=0, threats=1, time=0)"
