"""Recurring-vector, time-of-day and account pattern detection."""

from __future__ import annotations

from chainsentry.config import HistorySettings
from chainsentry.modules.chain.models import TransactionAnalysis

from .models import HistoricalPattern, TimeRange

HOURS_PER_DAY = 24
SUSPICIOUS_ACCOUNT_PATTERN = "Suspicious account activity"


def detect_vector_patterns(
    analyses: list[TransactionAnalysis],
    time_range: TimeRange,
    settings: HistorySettings | None = None,
) -> list[HistoricalPattern]:
    """Attack patterns for (vector type, confidence) pairs above the minimum rate."""
    settings = settings or HistorySettings()
    total = len(analyses)
    if total == 0:
        return []

    counts: dict[tuple[str, str], int] = {}
    programs: dict[tuple[str, str], dict[str, None]] = {}
    for analysis in analyses:
        for vector in analysis.attack_vectors:
            key = (vector.type, vector.confidence)
            counts[key] = counts.get(key, 0) + 1
            programs.setdefault(key, {})[analysis.program] = None

    threshold = total * settings.pattern_min_rate
    patterns: list[HistoricalPattern] = []
    for (vector_type, confidence), count in counts.items():
        if count < threshold:
            continue
        rate = count / total
        patterns.append(
            HistoricalPattern(
                type="attack",
                pattern=vector_type,
                frequency=count,
                time_range=time_range,
                affected_programs=list(programs[(vector_type, confidence)]),
                confidence=rate,
                details={
                    "vector_confidence": confidence,
                    "occurrences": count,
                    "percentage": f"{rate * 100:.2f}%",
                },
            )
        )
    return patterns


def detect_time_patterns(
    analyses: list[TransactionAnalysis],
    time_range: TimeRange,
    settings: HistorySettings | None = None,
) -> list[HistoricalPattern]:
    """Anomalies for hours of day (UTC) with unusually high activity."""
    settings = settings or HistorySettings()
    hourly: dict[int, int] = {}
    programs: dict[int, dict[str, None]] = {}
    for analysis in analyses:
        hour = analysis.timestamp.hour
        hourly[hour] = hourly.get(hour, 0) + 1
        programs.setdefault(hour, {})[analysis.program] = None

    average = len(analyses) / HOURS_PER_DAY
    patterns: list[HistoricalPattern] = []
    for hour in sorted(hourly):
        count = hourly[hour]
        if count <= average * settings.hourly_spike_factor:
            continue
        patterns.append(
            HistoricalPattern(
                type="anomaly",
                pattern=f"High activity at hour {hour}:00",
                frequency=count,
                time_range=time_range,
                affected_programs=list(programs[hour]),
                confidence=settings.hourly_anomaly_confidence,
                details={"hour": hour, "activity_count": count, "average_expected": average},
            )
        )
    return patterns


def detect_account_patterns(
    analyses: list[TransactionAnalysis],
    time_range: TimeRange,
    settings: HistorySettings | None = None,
) -> list[HistoricalPattern]:
    """Anomalies for accounts that mostly appear in suspicious transactions."""
    settings = settings or HistorySettings()
    activity: dict[str, int] = {}
    suspicious: dict[str, int] = {}
    for analysis in analyses:
        for account in analysis.accounts_involved:
            activity[account] = activity.get(account, 0) + 1
            if analysis.suspicious:
                suspicious[account] = suspicious.get(account, 0) + 1

    patterns: list[HistoricalPattern] = []
    for account, suspicious_count in suspicious.items():
        total = activity[account]
        rate = suspicious_count / total
        if rate <= settings.account_suspicious_rate:
            continue
        if suspicious_count < settings.account_min_suspicious:
            continue
        patterns.append(
            HistoricalPattern(
                type="anomaly",
                pattern=SUSPICIOUS_ACCOUNT_PATTERN,
                frequency=suspicious_count,
                time_range=time_range,
                confidence=rate,
                details={
                    "account": account,
                    "total_transactions": total,
                    "suspicious_transactions": suspicious_count,
                    "suspicious_rate": f"{rate * 100:.2f}%",
                },
            )
        )
    return patterns


def detect_patterns(
    analyses: list[TransactionAnalysis],
    time_range: TimeRange,
    settings: HistorySettings | None = None,
) -> list[HistoricalPattern]:
    """Run every detector; attack patterns first, then time and account anomalies."""
    return [
        *detect_vector_patterns(analyses, time_range, settings),
        *detect_time_patterns(analyses, time_range, settings),
        *detect_account_patterns(analyses, time_range, settings),
    ]
