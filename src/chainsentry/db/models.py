"""Database models for ChainSentry using SQLAlchemy."""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship


def _utc_now() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class DetectionRun(Base):
    """One analyzed batch of attack outcomes."""

    __tablename__ = "detection_runs"

    id = Column(Integer, primary_key=True)
    program = Column(String, nullable=False)
    run_at = Column(DateTime(timezone=True), nullable=False)
    vulnerabilities_found = Column(Integer, default=0)
    critical_vulnerabilities = Column(Integer, default=0)
    risk_score = Column(Integer, default=0)
    risk_level = Column(String, default="minimal")
    recommendations = Column(Text, default="")  # newline separated
    created_at = Column(DateTime(timezone=True), default=_utc_now)

    findings = relationship("RunFinding", back_populates="run", cascade="all, delete-orphan")


class RunFinding(Base):
    """A finding recorded against a detection run."""

    __tablename__ = "run_findings"

    id = Column(Integer, primary_key=True)
    run_id = Column(Integer, ForeignKey("detection_runs.id"), nullable=False)

    category = Column(String, nullable=False)
    type = Column(String, nullable=False)
    severity = Column(String, nullable=False)  # critical, high, medium, low
    target_function = Column(String, default="")
    success = Column(Boolean, default=False)
    details = Column(Text)

    run = relationship("DetectionRun", back_populates="findings")


class AttackEventRecord(Base):
    """An attack event observed during historical analysis."""

    __tablename__ = "attack_events"

    id = Column(Integer, primary_key=True)
    program = Column(String, nullable=False, index=True)
    signature = Column(String, nullable=False)
    occurred_at = Column(DateTime(timezone=True), nullable=False)
    type = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utc_now)
