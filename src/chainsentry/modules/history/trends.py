"""Period-over-period trend metrics and next-period prediction."""

from __future__ import annotations

from datetime import UTC, datetime

from chainsentry.config import HistorySettings
from chainsentry.modules.chain.models import TransactionAnalysis

from .models import TrendAnalysis, TrendPoint, TrendPrediction

PERIOD_SECONDS = {
    "hourly": 3600,
    "daily": 86_400,
    "weekly": 604_800,
}


def select_period(hours_back: float) -> str:
    """Pick the bucket size for a lookback window."""
    if hours_back <= 24:
        return "hourly"
    if hours_back <= 168:
        return "daily"
    return "weekly"


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def predict_next_period(
    trends: list[TrendPoint],
    settings: HistorySettings | None = None,
) -> TrendPrediction:
    """Moving-average prediction over the most recent periods."""
    settings = settings or HistorySettings()
    window = settings.prediction_window
    if len(trends) < window:
        return TrendPrediction(
            next_period_volume=trends[-1].transaction_volume if trends else 0,
            risk_level="medium",
            confidence=settings.fallback_confidence,
        )

    recent = trends[-window:]
    avg_volume = sum(t.transaction_volume for t in recent) / window
    avg_suspicious = sum(t.suspicious_activity for t in recent) / window

    if avg_suspicious > settings.prediction_high_suspicious:
        level = "high"
    elif avg_suspicious > settings.prediction_medium_suspicious:
        level = "medium"
    else:
        level = "low"

    return TrendPrediction(
        next_period_volume=_round_half_up(avg_volume),
        risk_level=level,
        confidence=settings.prediction_confidence,
    )


def analyze_trends(
    analyses: list[TransactionAnalysis],
    hours_back: float,
    settings: HistorySettings | None = None,
) -> TrendAnalysis:
    """Bucket analyses into periods and compute per-period metrics."""
    period = select_period(hours_back)
    seconds = PERIOD_SECONDS[period]

    groups: dict[int, list[TransactionAnalysis]] = {}
    for analysis in analyses:
        key = int(analysis.timestamp.timestamp() // seconds)
        groups.setdefault(key, []).append(analysis)

    trends: list[TrendPoint] = []
    for key in sorted(groups):
        members = groups[key]
        accounts = {account for a in members for account in a.accounts_involved}
        trends.append(
            TrendPoint(
                timestamp=datetime.fromtimestamp(key * seconds, UTC),
                transaction_volume=len(members),
                error_rate=sum(1 for a in members if not a.success) / len(members),
                suspicious_activity=sum(1 for a in members if a.suspicious),
                attack_attempts=sum(1 for a in members if a.attack_vectors),
                unique_accounts=len(accounts),
            )
        )

    return TrendAnalysis(
        period=period,
        trends=trends,
        predictions=predict_next_period(trends, settings),
    )
