"""ResultStore: persists detection reports and attack events to SQLite."""

import logging
from pathlib import Path

from chainsentry.db.init import get_session, init_db
from chainsentry.db.models import AttackEventRecord, DetectionRun, RunFinding
from chainsentry.modules.detection.models import DetectionReport
from chainsentry.modules.history.models import AttackEvent

logger = logging.getLogger(__name__)


class ResultStore:
    """Records analysis results; storage failures never interrupt analysis."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._session = None

    def _get_session(self):
        if self._session is None:
            try:
                init_db(self.db_path)
                self._session = get_session(self.db_path)
            except Exception:
                logger.warning("Failed to open results DB at %s", self.db_path, exc_info=True)
        return self._session

    def save_report(self, report: DetectionReport) -> int | None:
        """Store a detection report with its findings; return the run id."""
        session = self._get_session()
        if session is None:
            return None
        try:
            run = DetectionRun(
                program=report.program,
                run_at=report.timestamp,
                vulnerabilities_found=report.vulnerabilities_found,
                critical_vulnerabilities=report.critical_vulnerabilities,
                risk_score=report.risk_score,
                risk_level=report.risk_level,
                recommendations="\n".join(report.recommendations),
            )
            run.findings = [
                RunFinding(
                    category=f.category,
                    type=f.type,
                    severity=f.severity,
                    target_function=f.target_function,
                    success=f.success,
                    details=f.details,
                )
                for f in report.findings
            ]
            session.add(run)
            session.commit()
            return run.id
        except Exception:
            logger.warning("Failed to save detection report", exc_info=True)
            session.rollback()
            return None

    def save_events(self, events: list[AttackEvent]) -> int:
        """Store attack events; return how many were written."""
        if not events:
            return 0
        session = self._get_session()
        if session is None:
            return 0
        try:
            session.add_all(
                AttackEventRecord(
                    program=e.program,
                    signature=e.signature,
                    occurred_at=e.timestamp,
                    type=e.type,
                    severity=e.severity,
                    description=e.description,
                )
                for e in events
            )
            session.commit()
            return len(events)
        except Exception:
            logger.warning("Failed to save attack events", exc_info=True)
            session.rollback()
            return 0

    def recent_runs(self, program: str | None = None, limit: int = 10) -> list[DetectionRun]:
        """Return stored detection runs, newest first."""
        session = self._get_session()
        if session is None:
            return []
        try:
            query = session.query(DetectionRun)
            if program:
                query = query.filter_by(program=program)
            return query.order_by(DetectionRun.run_at.desc()).limit(limit).all()
        except Exception:
            logger.warning("Failed to query detection runs", exc_info=True)
            return []

    def recent_events(self, program: str | None = None, limit: int = 50) -> list[AttackEventRecord]:
        """Return stored attack events, most recent first."""
        session = self._get_session()
        if session is None:
            return []
        try:
            query = session.query(AttackEventRecord)
            if program:
                query = query.filter_by(program=program)
            return query.order_by(AttackEventRecord.occurred_at.desc()).limit(limit).all()
        except Exception:
            logger.warning("Failed to query attack events", exc_info=True)
            return []

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
