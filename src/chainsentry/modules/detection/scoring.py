"""Per-run risk score and risk-level bucketing."""

from __future__ import annotations

from collections.abc import Iterable

from chainsentry.config import RiskWeights

from .models import Finding

MAX_SCORE = 100

RISK_LEVELS: tuple[tuple[int, str], ...] = (
    (80, "critical"),
    (60, "high"),
    (40, "medium"),
    (20, "low"),
)


def calculate_risk_score(
    findings: Iterable[Finding],
    weights: RiskWeights | None = None,
) -> int:
    """Additive score over findings, saturating at 100."""
    weights = weights or RiskWeights()
    findings = list(findings)
    critical = sum(1 for f in findings if f.severity == "critical")

    score = min(len(findings) * weights.per_finding, weights.base_cap)
    score += critical * weights.critical_bonus
    score += sum(weights.severity_weight(f.severity) for f in findings)
    return max(0, min(score, MAX_SCORE))


def risk_level(score: int) -> str:
    """Bucket a 0-100 score into a reporting level."""
    for floor, level in RISK_LEVELS:
        if score >= floor:
            return level
    return "minimal"
