"""Tests for the results database and ResultStore."""

import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from chainsentry.db.init import get_session, init_db
from chainsentry.db.models import DetectionRun
from chainsentry.modules.detection import build_detection_report
from chainsentry.modules.history import AttackEvent
from chainsentry.modules.storage import ResultStore

NOW = datetime(2024, 2, 1, tzinfo=UTC)


@pytest.fixture
def store(tmp_path):
    result_store = ResultStore(tmp_path / "results.db")
    yield result_store
    result_store.close()


def _event(signature: str, minutes: int) -> AttackEvent:
    return AttackEvent(
        timestamp=NOW + timedelta(minutes=minutes),
        type="Reentrancy",
        severity="medium",
        program="vault",
        signature=signature,
        description="Recursive program calls detected",
    )


class TestInitDb:
    def test_init_creates_db(self, tmp_path):
        db_path = tmp_path / "nested" / "results.db"
        init_db(db_path)
        assert db_path.exists()

    def test_get_session(self, tmp_path):
        db_path = tmp_path / "results.db"
        init_db(db_path)
        session = get_session(db_path)
        assert session.query(DetectionRun).count() == 0
        session.close()


class TestSaveReport:
    def test_report_with_findings(self, store, overflow_outcome, reentrancy_outcome):
        report = build_detection_report(
            "vault", [overflow_outcome, reentrancy_outcome], timestamp=NOW
        )

        run_id = store.save_report(report)

        assert isinstance(run_id, int)
        runs = store.recent_runs()
        assert len(runs) == 1
        run = runs[0]
        assert run.id == run_id
        assert run.program == "vault"
        assert run.risk_score == 100
        assert run.risk_level == "critical"
        assert len(run.findings) == 3
        assert run.recommendations.splitlines() == list(report.recommendations)

    def test_recent_runs_filters_and_orders(self, store, overflow_outcome):
        store.save_report(build_detection_report("vault", [overflow_outcome], timestamp=NOW))
        store.save_report(
            build_detection_report("vault", [], timestamp=NOW + timedelta(hours=1))
        )
        store.save_report(build_detection_report("other", [], timestamp=NOW))

        runs = store.recent_runs("vault")

        assert [r.vulnerabilities_found for r in runs] == [0, 1]
        assert len(store.recent_runs(limit=1)) == 1


class TestSaveEvents:
    def test_events_round_trip(self, store):
        written = store.save_events([_event("a", 0), _event("b", 5)])

        assert written == 2
        events = store.recent_events("vault")
        assert [e.signature for e in events] == ["b", "a"]
        assert events[0].severity == "medium"

    def test_no_events(self, store):
        assert store.save_events([]) == 0


class TestStorageFailures:
    def test_unwritable_location_is_logged(self, tmp_path: Path, caplog, overflow_outcome):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        store = ResultStore(blocker / "results.db")

        with caplog.at_level(logging.WARNING):
            run_id = store.save_report(build_detection_report("vault", [overflow_outcome]))

        assert run_id is None
        assert store.save_events([_event("a", 0)]) == 0
        assert store.recent_runs() == []
        assert "Failed to open results DB" in caplog.text
