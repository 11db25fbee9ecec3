"""Tests for the attack timeline and bounded attack history."""

from datetime import UTC, datetime, timedelta

from chainsentry.modules.chain.models import AttackVector
from chainsentry.modules.history import AttackHistory, build_attack_timeline, determine_severity

START = datetime(2024, 1, 1, tzinfo=UTC)


class TestDetermineSeverity:
    def test_high_confidence_critical_types(self):
        for kind in ("Integer Overflow/Underflow", "Access Control Violation"):
            assert determine_severity(AttackVector(type=kind, confidence="high")) == "critical"

    def test_other_high_confidence(self):
        assert determine_severity(AttackVector(type="Reentrancy", confidence="high")) == "high"

    def test_medium_and_low(self):
        overflow_medium = AttackVector(type="Integer Overflow/Underflow", confidence="medium")
        assert determine_severity(overflow_medium) == "medium"
        assert determine_severity(AttackVector(type="Denial of Service", confidence="low")) == "low"


class TestBuildAttackTimeline:
    def test_one_event_per_vector_sorted(self, make_analysis):
        late = make_analysis(
            "late",
            START + timedelta(hours=2),
            vectors=[AttackVector(type="Reentrancy", confidence="medium", evidence=("a", "b"))],
        )
        early = make_analysis(
            "early",
            START,
            vectors=[
                AttackVector(type="Integer Overflow/Underflow", confidence="high"),
                AttackVector(type="Denial of Service", confidence="low"),
            ],
        )
        clean = make_analysis("clean", START + timedelta(hours=1))

        timeline = build_attack_timeline([late, clean, early])

        assert [e.signature for e in timeline] == ["early", "early", "late"]
        assert [e.severity for e in timeline] == ["critical", "low", "medium"]
        assert timeline[2].description == "a; b"
        assert timeline[2].program == "vault"


class TestAttackHistory:
    def _events(self, make_analysis, count: int):
        analyses = [
            make_analysis(
                f"s{i}",
                START + timedelta(minutes=i),
                vectors=[AttackVector(type="Reentrancy", confidence="medium")],
            )
            for i in range(count)
        ]
        return build_attack_timeline(analyses)

    def test_oldest_events_evicted(self, make_analysis):
        history = AttackHistory(limit=3)
        history.extend(self._events(make_analysis, 5))

        assert len(history) == 3
        assert [e.signature for e in history.events] == ["s2", "s3", "s4"]
