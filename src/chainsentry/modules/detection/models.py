"""Attack outcome, finding and report models for the detection engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar

SEVERITIES = ("low", "medium", "high", "critical")


class AttackFamily(Enum):
    """Discriminant for the attack outcome union."""

    OVERFLOW = "overflow"
    REENTRANCY = "reentrancy"
    ACCESS_CONTROL = "access_control"
    INPUT_VALIDATION = "input_validation"
    DOUBLE_SPEND = "double_spend"
    DOS = "dos"


@dataclass(frozen=True, slots=True)
class OverflowOutcome:
    """Result of an integer overflow/underflow attempt."""

    family: ClassVar[AttackFamily] = AttackFamily.OVERFLOW

    success: bool
    target_function: str
    program: str
    type: str  # overflow | underflow
    attempted_value: int
    result_value: int | None = None
    compute_units: int | None = None
    error: str | None = None
    logs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReentrancyOutcome:
    """Result of a reentrancy attempt."""

    family: ClassVar[AttackFamily] = AttackFamily.REENTRANCY

    success: bool
    target_function: str
    program: str
    type: str  # simple | cross-program | callback
    depth: int
    state_changes: tuple[str, ...] = ()
    compute_units: int | None = None
    error: str | None = None
    logs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AccessControlOutcome:
    """Result of an access-control bypass attempt."""

    family: ClassVar[AttackFamily] = AttackFamily.ACCESS_CONTROL

    success: bool
    target_function: str
    program: str
    type: str  # unauthorized-admin | privilege-escalation | access-bypass | role-manipulation
    attacker_role: str
    required_role: str
    compute_units: int | None = None
    error: str | None = None
    logs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class InputValidationOutcome:
    """Result of an input-validation probe."""

    family: ClassVar[AttackFamily] = AttackFamily.INPUT_VALIDATION

    success: bool
    target_function: str
    program: str
    type: str  # zero-amount | negative-value | invalid-params | boundary-test
    input_value: str | int
    expected_range: str | None = None
    compute_units: int | None = None
    error: str | None = None
    logs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DoubleSpendOutcome:
    """Result of a double-spend attempt."""

    family: ClassVar[AttackFamily] = AttackFamily.DOUBLE_SPEND

    success: bool
    target_function: str
    program: str
    type: str  # concurrent-spend | race-condition | replay-attack | nonce-manipulation
    attempted_spends: int
    successful_spends: int
    total_amount_spent: int | None = None
    signatures: tuple[str, ...] = ()
    error: str | None = None
    logs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ResourceUsage:
    """Resources consumed by a denial-of-service attempt."""

    compute_units: int | None = None
    accounts_created: int | None = None
    transactions_sent: int | None = None
    data_size: int | None = None


@dataclass(frozen=True, slots=True)
class DosOutcome:
    """Result of a denial-of-service attempt."""

    family: ClassVar[AttackFamily] = AttackFamily.DOS

    success: bool
    target_function: str
    program: str
    type: str  # resource-exhaustion | state-bloat | transaction-spam | compute-exhaustion
    resources_consumed: ResourceUsage = field(default_factory=ResourceUsage)
    performance_impact: str | None = None
    error: str | None = None
    logs: tuple[str, ...] = ()


AttackOutcome = (
    OverflowOutcome
    | ReentrancyOutcome
    | AccessControlOutcome
    | InputValidationOutcome
    | DoubleSpendOutcome
    | DosOutcome
)

OUTCOME_TYPES: dict[AttackFamily, type] = {
    AttackFamily.OVERFLOW: OverflowOutcome,
    AttackFamily.REENTRANCY: ReentrancyOutcome,
    AttackFamily.ACCESS_CONTROL: AccessControlOutcome,
    AttackFamily.INPUT_VALIDATION: InputValidationOutcome,
    AttackFamily.DOUBLE_SPEND: DoubleSpendOutcome,
    AttackFamily.DOS: DosOutcome,
}


@dataclass(frozen=True, slots=True)
class Finding:
    """A classified vulnerability."""

    category: str
    type: str
    severity: str  # low | medium | high | critical
    target_function: str
    success: bool
    details: str


@dataclass(frozen=True, slots=True)
class DetectionReport:
    """Findings, score and guidance for one test run."""

    program: str
    timestamp: datetime
    vulnerabilities_found: int
    critical_vulnerabilities: int
    findings: tuple[Finding, ...]
    recommendations: tuple[str, ...]
    risk_score: int

    @property
    def risk_level(self) -> str:
        from .scoring import risk_level

        return risk_level(self.risk_score)

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "program": self.program,
            "timestamp": self.timestamp.isoformat(),
            "vulnerabilities_found": self.vulnerabilities_found,
            "critical_vulnerabilities": self.critical_vulnerabilities,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "findings": [
                {
                    "category": f.category,
                    "type": f.type,
                    "severity": f.severity,
                    "target_function": f.target_function,
                    "success": f.success,
                    "details": f.details,
                }
                for f in self.findings
            ],
            "recommendations": list(self.recommendations),
        }
