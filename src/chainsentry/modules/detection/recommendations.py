"""Remediation guidance per finding category."""

from __future__ import annotations

from collections.abc import Iterable

from .classifier import (
    CATEGORY_ACCESS_CONTROL,
    CATEGORY_DOS,
    CATEGORY_DOUBLE_SPEND,
    CATEGORY_INPUT_VALIDATION,
    CATEGORY_OVERFLOW,
    CATEGORY_REENTRANCY,
)
from .correlator import CATEGORY_COMBINED, CATEGORY_MISSING_PROTECTION, CATEGORY_SYSTEMIC
from .models import Finding

IMMEDIATE_ACTION = "Immediate action required to address identified vulnerabilities."
NO_VULNERABILITIES = "No vulnerabilities detected. Continue with regular security audits."

REMEDIATIONS: dict[str, tuple[str, ...]] = {
    CATEGORY_OVERFLOW: (
        "Use checked arithmetic operations (checked_add, checked_sub, etc.)",
        "Implement SafeMath library or use built-in overflow protection",
        "Add explicit bounds checking for all numeric inputs",
    ),
    CATEGORY_REENTRANCY: (
        "Implement reentrancy guards using checks-effects-interactions pattern",
        "Use mutex locks for critical functions",
        "Avoid external calls in the middle of state changes",
    ),
    CATEGORY_ACCESS_CONTROL: (
        "Implement role-based access control (RBAC)",
        "Use program-derived addresses (PDAs) for authority management",
        "Add explicit signer checks for all privileged operations",
    ),
    CATEGORY_INPUT_VALIDATION: (
        "Validate all inputs at the beginning of functions",
        "Implement whitelisting instead of blacklisting",
        "Use custom types with built-in validation",
    ),
    CATEGORY_DOUBLE_SPEND: (
        "Implement nonce-based transaction ordering",
        "Use account locks during critical operations",
        "Add idempotency keys to prevent replay attacks",
    ),
    CATEGORY_DOS: (
        "Implement rate limiting and compute budget limits",
        "Add account size limits and cleanup mechanisms",
        "Use efficient data structures and algorithms",
    ),
}

# Batch-level categories reuse the guidance of the families they combine.
_CORRELATED_CATEGORIES: dict[str, tuple[str, ...]] = {
    CATEGORY_SYSTEMIC: (CATEGORY_INPUT_VALIDATION,),
    CATEGORY_COMBINED: (CATEGORY_ACCESS_CONTROL, CATEGORY_DOUBLE_SPEND),
    CATEGORY_MISSING_PROTECTION: (CATEGORY_REENTRANCY, CATEGORY_OVERFLOW),
}


def recommendations_for(category: str) -> list[str]:
    """Return the fixed remediation list for one finding category."""
    if category in REMEDIATIONS:
        return list(REMEDIATIONS[category])
    output: list[str] = []
    for base in _CORRELATED_CATEGORIES.get(category, ()):
        output.extend(REMEDIATIONS[base])
    return output


def generate_recommendations(findings: Iterable[Finding]) -> list[str]:
    """Build the de-duplicated recommendation list for a run."""
    findings = list(findings)
    if not findings:
        return [NO_VULNERABILITIES]

    collected: list[str] = []
    if any(f.severity == "critical" for f in findings):
        collected.append(IMMEDIATE_ACTION)
    for finding in findings:
        collected.extend(recommendations_for(finding.category))

    seen: set[str] = set()
    output: list[str] = []
    for rec in collected:
        if rec in seen:
            continue
        seen.add(rec)
        output.append(rec)
    return output
