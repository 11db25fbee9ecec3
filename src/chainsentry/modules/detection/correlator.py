"""Batch-level correlation of attack outcomes."""

from __future__ import annotations

from collections.abc import Iterable

from chainsentry.config import DetectionThresholds

from .models import (
    AccessControlOutcome,
    AttackOutcome,
    DoubleSpendOutcome,
    Finding,
    InputValidationOutcome,
    OverflowOutcome,
    ReentrancyOutcome,
)

CATEGORY_SYSTEMIC = "Systemic"
CATEGORY_COMBINED = "Combined Attack"
CATEGORY_MISSING_PROTECTION = "Missing Protection"


def _successful(outcomes: list[AttackOutcome], kind: type) -> int:
    return sum(1 for o in outcomes if isinstance(o, kind) and o.success)


def correlate_outcomes(
    outcomes: Iterable[AttackOutcome],
    thresholds: DetectionThresholds | None = None,
) -> list[Finding]:
    """Return findings only visible across the whole batch of outcomes."""
    thresholds = thresholds or DetectionThresholds()
    batch = list(outcomes)
    findings: list[Finding] = []

    if _successful(batch, InputValidationOutcome) >= thresholds.systemic_input_validation_min:
        findings.append(
            Finding(
                category=CATEGORY_SYSTEMIC,
                type="multiple-input-validation",
                severity="high",
                target_function="multiple",
                success=True,
                details=(
                    "Multiple input validation vulnerabilities suggest systemic validation issues"
                ),
            )
        )

    if _successful(batch, AccessControlOutcome) and _successful(batch, DoubleSpendOutcome):
        findings.append(
            Finding(
                category=CATEGORY_COMBINED,
                type="access-control-double-spend",
                severity="critical",
                target_function="multiple",
                success=True,
                details=(
                    "Access control and double spending vulnerabilities can be combined "
                    "for maximum damage"
                ),
            )
        )

    if _successful(batch, ReentrancyOutcome) and _successful(batch, OverflowOutcome):
        findings.append(
            Finding(
                category=CATEGORY_MISSING_PROTECTION,
                type="no-basic-protections",
                severity="critical",
                target_function="program-wide",
                success=True,
                details=(
                    "Program lacks basic security protections (reentrancy guards, overflow checks)"
                ),
            )
        )

    return findings
