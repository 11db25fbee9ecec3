"""Historical risk score and recommendations.

The historical score has its own scale, separate from the per-run detection
score in ``chainsentry.modules.detection.scoring``.
"""

from __future__ import annotations

from chainsentry.config import HistorySettings

from .models import AttackEvent, HistoricalPattern, TrendAnalysis
from .patterns import SUSPICIOUS_ACCOUNT_PATTERN

HIGH_ERROR_RATE = 0.1


def calculate_historical_risk_score(
    patterns: list[HistoricalPattern],
    trends: TrendAnalysis,
    timeline: list[AttackEvent],
    settings: HistorySettings | None = None,
) -> int:
    """Weighted sum of patterns, recent error rate and severe events, clamped to 0-100."""
    settings = settings or HistorySettings()
    score = 0.0

    for pattern in patterns:
        if pattern.type == "attack":
            score += pattern.frequency * settings.attack_pattern_weight
        elif pattern.type == "anomaly":
            score += pattern.frequency * settings.anomaly_pattern_weight

    recent = trends.trends[-settings.prediction_window :]
    if recent:
        avg_error_rate = sum(t.error_rate for t in recent) / len(recent)
        score += avg_error_rate * settings.error_rate_weight

    critical = sum(1 for e in timeline if e.severity == "critical")
    high = sum(1 for e in timeline if e.severity == "high")
    score += critical * settings.critical_event_weight
    score += high * settings.high_event_weight

    return max(0, min(100, int(score + 0.5)))


def generate_historical_recommendations(
    patterns: list[HistoricalPattern],
    trends: TrendAnalysis,
    risk_score: int,
) -> list[str]:
    recommendations: list[str] = []

    if risk_score >= 80:
        recommendations.append("CRITICAL: Immediate security review required")
        recommendations.append("Consider temporary suspension of high-risk operations")
    elif risk_score >= 60:
        recommendations.append("HIGH RISK: Increase monitoring frequency")
        recommendations.append("Review and strengthen access controls")

    for pattern in patterns:
        name = pattern.pattern.lower()
        if "overflow" in name:
            recommendations.append("Implement comprehensive overflow protection")
        if "high activity" in name:
            recommendations.append("Implement rate limiting during peak hours")
        if pattern.pattern == SUSPICIOUS_ACCOUNT_PATTERN:
            recommendations.append("Add account blacklisting capability")

    if trends.predictions.risk_level == "high":
        recommendations.append("Prepare for increased attack activity")
        recommendations.append("Ensure incident response team is on standby")

    if trends.trends and trends.trends[-1].error_rate > HIGH_ERROR_RATE:
        recommendations.append("High error rate detected - investigate failed transactions")

    return list(dict.fromkeys(recommendations))
