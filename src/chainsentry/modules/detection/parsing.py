"""Decode raw attack-routine records into typed outcomes."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from .models import (
    OUTCOME_TYPES,
    AccessControlOutcome,
    AttackFamily,
    AttackOutcome,
    DosOutcome,
    DoubleSpendOutcome,
    InputValidationOutcome,
    OverflowOutcome,
    ReentrancyOutcome,
    ResourceUsage,
)

logger = logging.getLogger(__name__)

_FAMILY_ALIASES = {
    "access-control": AttackFamily.ACCESS_CONTROL,
    "input-validation": AttackFamily.INPUT_VALIDATION,
    "double-spend": AttackFamily.DOUBLE_SPEND,
    "double-spending": AttackFamily.DOUBLE_SPEND,
    "denial-of-service": AttackFamily.DOS,
    "underflow": AttackFamily.OVERFLOW,
}


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _normalize_keys(record: Mapping[str, Any]) -> dict[str, Any]:
    return {_snake(str(k)): v for k, v in record.items()}


def _resolve_family(value: Any) -> AttackFamily | None:
    if isinstance(value, AttackFamily):
        return value
    text = str(value or "").strip().lower()
    if not text:
        return None
    try:
        return AttackFamily(text.replace("-", "_"))
    except ValueError:
        return _FAMILY_ALIASES.get(text)


def infer_family(record: Mapping[str, Any]) -> AttackFamily | None:
    """Guess the family of an untagged record from its distinctive fields."""
    data = _normalize_keys(record)
    if data.get("type") in {"overflow", "underflow"}:
        return AttackFamily.OVERFLOW
    if "depth" in data:
        return AttackFamily.REENTRANCY
    if "attacker_role" in data and "required_role" in data:
        return AttackFamily.ACCESS_CONTROL
    if "input_value" in data:
        return AttackFamily.INPUT_VALIDATION
    if "attempted_spends" in data and "successful_spends" in data:
        return AttackFamily.DOUBLE_SPEND
    if "resources_consumed" in data:
        return AttackFamily.DOS
    return None


def _opt_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def _strings(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _resources(value: Any) -> ResourceUsage:
    data = _normalize_keys(value or {})
    return ResourceUsage(
        compute_units=_opt_int(data.get("compute_units")),
        accounts_created=_opt_int(data.get("accounts_created")),
        transactions_sent=_opt_int(data.get("transactions_sent")),
        data_size=_opt_int(data.get("data_size")),
    )


def _build(family: AttackFamily, data: dict[str, Any]) -> AttackOutcome:
    common = {
        "success": data["success"] is True,
        "target_function": str(data.get("target_function", "")),
        "program": str(data.get("program", "")),
        "type": str(data.get("type", "")),
        "error": data.get("error"),
        "logs": _strings(data.get("logs")),
    }
    if family is AttackFamily.OVERFLOW:
        return OverflowOutcome(
            **common,
            attempted_value=int(data["attempted_value"]),
            result_value=_opt_int(data.get("result_value")),
            compute_units=_opt_int(data.get("compute_units")),
        )
    if family is AttackFamily.REENTRANCY:
        return ReentrancyOutcome(
            **common,
            depth=int(data["depth"]),
            state_changes=_strings(data.get("state_changes")),
            compute_units=_opt_int(data.get("compute_units")),
        )
    if family is AttackFamily.ACCESS_CONTROL:
        return AccessControlOutcome(
            **common,
            attacker_role=str(data["attacker_role"]),
            required_role=str(data["required_role"]),
            compute_units=_opt_int(data.get("compute_units")),
        )
    if family is AttackFamily.INPUT_VALIDATION:
        return InputValidationOutcome(
            **common,
            input_value=data["input_value"],
            expected_range=data.get("expected_range"),
            compute_units=_opt_int(data.get("compute_units")),
        )
    if family is AttackFamily.DOUBLE_SPEND:
        return DoubleSpendOutcome(
            **common,
            attempted_spends=int(data["attempted_spends"]),
            successful_spends=int(data["successful_spends"]),
            total_amount_spent=_opt_int(data.get("total_amount_spent")),
            signatures=_strings(data.get("signatures")),
        )
    return DosOutcome(
        **common,
        resources_consumed=_resources(data.get("resources_consumed")),
        performance_impact=data.get("performance_impact"),
    )


def parse_outcome(record: Any) -> AttackOutcome | None:
    """Decode one record; return None for anything that is not a known outcome."""
    if isinstance(record, tuple(OUTCOME_TYPES.values())):
        return record
    if not isinstance(record, Mapping):
        logger.debug("Skipping non-mapping outcome record: %r", type(record).__name__)
        return None

    data = _normalize_keys(record)
    family = _resolve_family(data.get("family")) if "family" in data else infer_family(data)
    if family is None or "success" not in data:
        logger.debug("Skipping unrecognized outcome record with keys %s", sorted(data))
        return None
    try:
        return _build(family, data)
    except (KeyError, TypeError, ValueError):
        logger.debug("Skipping malformed %s outcome", family.value, exc_info=True)
        return None


def parse_outcomes(records: Iterable[Any]) -> list[AttackOutcome]:
    """Decode a batch, dropping malformed records."""
    outcomes: list[AttackOutcome] = []
    for record in records:
        outcome = parse_outcome(record)
        if outcome is not None:
            outcomes.append(outcome)
    return outcomes

