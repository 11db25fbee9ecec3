"""Single-outcome classification into vulnerability findings."""

from __future__ import annotations

from collections.abc import Callable

from chainsentry.config import DetectionThresholds

from .models import (
    AccessControlOutcome,
    AttackOutcome,
    DosOutcome,
    DoubleSpendOutcome,
    Finding,
    InputValidationOutcome,
    OverflowOutcome,
    ReentrancyOutcome,
    ResourceUsage,
)

CATEGORY_OVERFLOW = "Integer Overflow/Underflow"
CATEGORY_REENTRANCY = "Reentrancy"
CATEGORY_ACCESS_CONTROL = "Access Control"
CATEGORY_INPUT_VALIDATION = "Input Validation"
CATEGORY_DOUBLE_SPEND = "Double Spending"
CATEGORY_DOS = "Denial of Service"

ADMIN_ROLES = frozenset({"admin", "owner", "authority", "super-admin", "superadmin"})

_DEFAULT_THRESHOLDS = DetectionThresholds()


def dos_severity(
    resources: ResourceUsage, thresholds: DetectionThresholds = _DEFAULT_THRESHOLDS
) -> str:
    """Map consumed resources to a severity; first matching rule wins."""
    compute = resources.compute_units or 0
    if compute > thresholds.dos_critical_compute_units:
        return "critical"
    if (resources.accounts_created or 0) > thresholds.dos_critical_accounts_created:
        return "critical"
    if (resources.transactions_sent or 0) > thresholds.dos_high_transactions_sent:
        return "high"
    if (resources.data_size or 0) > thresholds.dos_high_data_size:
        return "high"
    if compute > thresholds.dos_medium_compute_units:
        return "medium"
    return "low"


def _classify_overflow(outcome: OverflowOutcome, _: DetectionThresholds) -> Finding:
    return Finding(
        category=CATEGORY_OVERFLOW,
        type=outcome.type,
        severity="critical",
        target_function=outcome.target_function,
        success=outcome.success,
        details=(
            f"Integer {outcome.type} vulnerability detected with value {outcome.attempted_value}"
        ),
    )


def _classify_reentrancy(outcome: ReentrancyOutcome, _: DetectionThresholds) -> Finding:
    return Finding(
        category=CATEGORY_REENTRANCY,
        type=outcome.type,
        severity="critical" if outcome.type == "cross-program" else "high",
        target_function=outcome.target_function,
        success=outcome.success,
        details=f"Reentrancy vulnerability with depth {outcome.depth}",
    )


def _is_admin_violation(outcome: AccessControlOutcome) -> bool:
    if outcome.type == "unauthorized-admin":
        return True
    return outcome.required_role.strip().lower() in ADMIN_ROLES


def _classify_access_control(outcome: AccessControlOutcome, _: DetectionThresholds) -> Finding:
    return Finding(
        category=CATEGORY_ACCESS_CONTROL,
        type=outcome.type,
        severity="critical" if _is_admin_violation(outcome) else "high",
        target_function=outcome.target_function,
        success=outcome.success,
        details=(
            f"Access control bypass: {outcome.attacker_role} accessed "
            f"{outcome.required_role} function"
        ),
    )


def _classify_input_validation(
    outcome: InputValidationOutcome, _: DetectionThresholds
) -> Finding:
    return Finding(
        category=CATEGORY_INPUT_VALIDATION,
        type=outcome.type,
        severity="medium" if outcome.type == "boundary-test" else "high",
        target_function=outcome.target_function,
        success=outcome.success,
        details=f"Input validation failure with value: {outcome.input_value}",
    )


def _classify_double_spend(outcome: DoubleSpendOutcome, _: DetectionThresholds) -> Finding:
    return Finding(
        category=CATEGORY_DOUBLE_SPEND,
        type=outcome.type,
        severity="critical",
        target_function=outcome.target_function,
        success=outcome.success,
        details=(
            f"Double spending vulnerability: {outcome.successful_spends} of "
            f"{outcome.attempted_spends} succeeded"
        ),
    )


def _classify_dos(outcome: DosOutcome, thresholds: DetectionThresholds) -> Finding:
    impact = outcome.performance_impact or "Resource exhaustion detected"
    return Finding(
        category=CATEGORY_DOS,
        type=outcome.type,
        severity=dos_severity(outcome.resources_consumed, thresholds),
        target_function=outcome.target_function,
        success=outcome.success,
        details=f"DOS vulnerability: {impact}",
    )


_CLASSIFIERS: dict[type, Callable[[AttackOutcome, DetectionThresholds], Finding]] = {
    OverflowOutcome: _classify_overflow,
    ReentrancyOutcome: _classify_reentrancy,
    AccessControlOutcome: _classify_access_control,
    InputValidationOutcome: _classify_input_validation,
    DoubleSpendOutcome: _classify_double_spend,
    DosOutcome: _classify_dos,
}


def classify_outcome(
    outcome: AttackOutcome | object,
    thresholds: DetectionThresholds = _DEFAULT_THRESHOLDS,
) -> Finding | None:
    """Classify one attack outcome; return None when it shows no vulnerability."""
    handler = _CLASSIFIERS.get(type(outcome))
    if handler is None or not getattr(outcome, "success", False):
        return None
    return handler(outcome, thresholds)
