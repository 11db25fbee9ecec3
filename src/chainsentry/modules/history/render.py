"""Markdown rendering for historical reports."""

from __future__ import annotations

from .models import HistoricalReport

TIMELINE_LIMIT = 10
TREND_LIMIT = 5


def render_historical_report(report: HistoricalReport) -> str:
    """Render a historical report as markdown."""
    lines = [
        "# Historical Analysis Report",
        "",
        "## Time Range",
        f"- Start: {report.time_range.start.isoformat()}",
        f"- End: {report.time_range.end.isoformat()}",
        f"- Total Transactions: {report.total_transactions}",
        f"- Risk Score: {report.risk_score}/100",
        "",
        "## Detected Patterns",
    ]
    for pattern in report.patterns:
        lines.extend(
            [
                "",
                f"### {pattern.pattern}",
                f"- Type: {pattern.type}",
                f"- Frequency: {pattern.frequency}",
                f"- Confidence: {pattern.confidence * 100:.2f}%",
                f"- Programs: {', '.join(pattern.affected_programs) or 'N/A'}",
            ]
        )

    lines.extend(["", "## Attack Timeline"])
    for event in report.attack_timeline[-TIMELINE_LIMIT:]:
        lines.append(
            f"- {event.timestamp.isoformat()} [{event.severity}] {event.type}: {event.description}"
        )

    lines.extend(["", f"## Trend Analysis ({report.trends.period})"])
    for point in report.trends.trends[-TREND_LIMIT:]:
        lines.extend(
            [
                "",
                f"### {point.timestamp.isoformat()}",
                f"- Volume: {point.transaction_volume}",
                f"- Error Rate: {point.error_rate * 100:.2f}%",
                f"- Suspicious: {point.suspicious_activity}",
                f"- Attacks: {point.attack_attempts}",
            ]
        )

    prediction = report.trends.predictions
    lines.extend(
        [
            "",
            "## Predictions",
            f"- Next Period Volume: {prediction.next_period_volume}",
            f"- Risk Level: {prediction.risk_level}",
            f"- Confidence: {prediction.confidence * 100:.2f}%",
            "",
            "## Recommendations",
        ]
    )
    lines.extend(f"- {rec}" for rec in report.recommendations)
    return "\n".join(lines) + "\n"
