"""Static vulnerability pattern catalog and log indicator matching."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VulnerabilityPattern:
    """A catalog entry describing one vulnerability class."""

    pattern: str
    severity: str
    category: str
    indicators: tuple[str, ...]


VULNERABILITY_PATTERNS: tuple[VulnerabilityPattern, ...] = (
    VulnerabilityPattern(
        pattern="integer_overflow",
        severity="critical",
        category="Arithmetic",
        indicators=("overflow", "underflow", "exceeds maximum", "wrapped"),
    ),
    VulnerabilityPattern(
        pattern="reentrancy",
        severity="high",
        category="Control Flow",
        indicators=("reentrant", "recursive call", "already processing"),
    ),
    VulnerabilityPattern(
        pattern="access_control",
        severity="critical",
        category="Authorization",
        indicators=("unauthorized", "access denied", "not authorized"),
    ),
    VulnerabilityPattern(
        pattern="input_validation",
        severity="medium",
        category="Data Validation",
        indicators=("invalid", "out of range", "malformed"),
    ),
    VulnerabilityPattern(
        pattern="double_spend",
        severity="critical",
        category="Transaction",
        indicators=("already spent", "duplicate", "replay"),
    ),
    VulnerabilityPattern(
        pattern="dos",
        severity="high",
        category="Availability",
        indicators=("exhausted", "limit exceeded", "too many"),
    ),
)


def match_indicators(
    text: str,
    patterns: tuple[VulnerabilityPattern, ...] = VULNERABILITY_PATTERNS,
) -> list[VulnerabilityPattern]:
    """Return catalog entries whose indicators occur in ``text`` (case-insensitive)."""
    lowered = (text or "").lower()
    if not lowered:
        return []
    return [p for p in patterns if any(ind in lowered for ind in p.indicators)]


def scan_logs(logs: list[str] | tuple[str, ...]) -> list[VulnerabilityPattern]:
    """Match catalog indicators against a list of program log lines."""
    return match_indicators(" ".join(logs))
