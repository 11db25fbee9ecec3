"""Detection report assembly and executive summary rendering."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from chainsentry.config import Settings

from .classifier import classify_outcome
from .correlator import correlate_outcomes
from .models import AttackOutcome, DetectionReport, Finding
from .recommendations import generate_recommendations
from .scoring import calculate_risk_score, risk_level


def build_detection_report(
    program: str,
    outcomes: Iterable[AttackOutcome],
    *,
    settings: Settings | None = None,
    timestamp: datetime | None = None,
) -> DetectionReport:
    """Classify, correlate, score and package one test run."""
    settings = settings or Settings()
    batch = list(outcomes)

    findings: list[Finding] = []
    for outcome in batch:
        finding = classify_outcome(outcome, settings.detection)
        if finding is not None:
            findings.append(finding)
    findings.extend(correlate_outcomes(batch, settings.detection))

    return DetectionReport(
        program=program,
        timestamp=timestamp or datetime.now(UTC),
        vulnerabilities_found=len(findings),
        critical_vulnerabilities=sum(1 for f in findings if f.severity == "critical"),
        findings=tuple(findings),
        recommendations=tuple(generate_recommendations(findings)),
        risk_score=calculate_risk_score(findings, settings.risk),
    )


def summarize_categories(findings: Iterable[Finding]) -> dict[str, int]:
    """Count successful findings per category, in first-seen order."""
    counts: dict[str, int] = {}
    for finding in findings:
        if finding.success:
            counts[finding.category] = counts.get(finding.category, 0) + 1
    return counts


def generate_executive_summary(report: DetectionReport) -> str:
    """Render a short markdown executive summary for a detection report."""
    level = risk_level(report.risk_score).upper()
    if report.critical_vulnerabilities > 0:
        action = "CRITICAL: Immediate remediation required for critical vulnerabilities."
    else:
        action = "No critical vulnerabilities found."
    top = "\n".join(f"- {rec}" for rec in report.recommendations[:3])
    categories = "\n".join(
        f"- {category}: {count} vulnerabilities"
        for category, count in summarize_categories(report.findings).items()
    )

    return f"""# Security Audit Executive Summary

**Program:** {report.program}
**Date:** {report.timestamp.isoformat()}
**Overall Risk Level:** {level} (Score: {report.risk_score}/100)

## Key Findings
- Total Vulnerabilities: {report.vulnerabilities_found}
- Critical Vulnerabilities: {report.critical_vulnerabilities}

## Immediate Actions Required
{action}

## Top Recommendations
{top}

## Risk Categories
{categories}""".strip()


class AttackSuccessDetector:
    """Turns batches of attack outcomes into detection reports."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def analyze(self, program: str, outcomes: Iterable[AttackOutcome]) -> DetectionReport:
        """Build the report for one test run."""
        return build_detection_report(program, outcomes, settings=self.settings)

    def executive_summary(self, report: DetectionReport) -> str:
        return generate_executive_summary(report)
