"""Data models for chain signatures and per-transaction analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class SignatureInfo:
    """One entry of a backward-paginated signature listing."""

    signature: str
    block_time: int | None = None
    err: Any = None


@dataclass(frozen=True, slots=True)
class AttackVector:
    """A suspected exploit technique observed in one transaction."""

    type: str
    confidence: str  # low | medium | high
    evidence: tuple[str, ...] = ()
    recommendation: str = ""


@dataclass
class TransactionAnalysis:
    """Security-relevant facts extracted from one transaction."""

    signature: str
    timestamp: datetime
    program: str
    success: bool
    suspicious: bool = False
    suspicious_reasons: list[str] = field(default_factory=list)
    instruction_count: int = 0
    compute_units_used: int = 0
    accounts_involved: list[str] = field(default_factory=list)
    cross_program_invocations: list[str] = field(default_factory=list)
    error_details: Any = None
    attack_vectors: list[AttackVector] = field(default_factory=list)


@dataclass
class TimeSeriesPoint:
    """Hourly aggregate of analyzed transactions."""

    timestamp: datetime
    transaction_count: int = 0
    suspicious_count: int = 0
    average_compute_units: float = 0.0


@dataclass
class BatchSummary:
    """Aggregate view over a batch of transaction analyses."""

    total_transactions: int
    suspicious_transactions: int
    failed_transactions: int
    attack_vectors_summary: dict[str, int]
    program_activity: dict[str, int]
    time_series: list[TimeSeriesPoint]
    high_risk_accounts: list[str]
