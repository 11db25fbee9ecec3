"""Models produced by historical transaction analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class TimeRange:
    start: datetime
    end: datetime


@dataclass
class HistoricalPattern:
    """A recurring or anomalous pattern found in an analysis window."""

    type: str  # attack | anomaly | normal
    pattern: str
    frequency: int
    time_range: TimeRange
    affected_programs: list[str] = field(default_factory=list)
    confidence: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TrendPoint:
    """Metrics for one hourly, daily or weekly period."""

    timestamp: datetime
    transaction_volume: int
    error_rate: float
    suspicious_activity: int
    attack_attempts: int
    unique_accounts: int


@dataclass(frozen=True, slots=True)
class TrendPrediction:
    next_period_volume: int
    risk_level: str  # low | medium | high
    confidence: float


@dataclass
class TrendAnalysis:
    """Ordered per-period metrics plus a next-period prediction."""

    period: str  # hourly | daily | weekly
    trends: list[TrendPoint]
    predictions: TrendPrediction


@dataclass(frozen=True, slots=True)
class AttackEvent:
    """One detected attack vector in one transaction."""

    timestamp: datetime
    type: str
    severity: str
    program: str
    signature: str
    description: str


@dataclass
class HistoricalReport:
    """Everything learned from one historical window."""

    time_range: TimeRange
    total_transactions: int
    patterns: list[HistoricalPattern]
    trends: TrendAnalysis
    risk_score: int
    recommendations: list[str]
    attack_timeline: list[AttackEvent]


@dataclass
class PeriodComparison:
    """Difference between two adjacent historical windows."""

    earlier: HistoricalReport
    recent: HistoricalReport
    volume_change: int
    risk_change: int
    new_patterns: list[HistoricalPattern]
    resolved_patterns: list[HistoricalPattern]
