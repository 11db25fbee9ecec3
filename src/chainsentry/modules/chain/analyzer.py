"""Per-transaction security analysis of parsed chain transactions."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, Protocol

from chainsentry.modules.detection.catalog import scan_logs

from .models import AttackVector, BatchSummary, SignatureInfo, TimeSeriesPoint, TransactionAnalysis
from .rpc import ChainRPCError

logger = logging.getLogger(__name__)

MAX_U64 = 18_446_744_073_709_551_615

HIGH_COMPUTE_SUSPICIOUS = 900_000
HIGH_COMPUTE_DOS = 1_200_000
MAX_BALANCE_CHANGES = 10
MAX_ACCOUNT_KEYS = 20
MAX_INSTRUCTIONS = 10
REPEATED_CPI_CALLS = 3

_MANIPULATION_PATTERN = re.compile(r"(manipulat|exploit|bypass)")


class SignatureSource(Protocol):
    """Backward-paginated signature listings for a program address."""

    async def get_signatures_for_address(
        self,
        address: str,
        before: str | None = None,
        limit: int = 1000,
    ) -> list[SignatureInfo]:
        """Return signatures newest first, starting before ``before``."""
        ...


class TransactionSource(Protocol):
    """Produces one security analysis per transaction signature."""

    async def analyze_transaction(self, signature: str) -> TransactionAnalysis:
        """Analyze one transaction."""
        ...


class TransactionFetcher(Protocol):
    async def get_transaction(self, signature: str) -> dict[str, Any] | None: ...


def _program_id(ix: Mapping[str, Any]) -> str:
    return str(ix.get("programId") or "")


def _contains_max_u64(value: Any) -> bool:
    if isinstance(value, Mapping):
        return any(_contains_max_u64(v) for v in value.values())
    if isinstance(value, list):
        return any(_contains_max_u64(v) for v in value)
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return str(value).strip() == str(MAX_U64)
    return False


class TransactionAnalyzer:
    """Extracts suspicious signals and attack vectors from parsed transactions."""

    def __init__(
        self,
        fetcher: TransactionFetcher | None = None,
        program_names: Mapping[str, str] | None = None,
    ):
        self.fetcher = fetcher
        self.program_names = dict(program_names or {})

    async def analyze_transaction(self, signature: str) -> TransactionAnalysis:
        """Fetch and analyze one transaction by signature."""
        if self.fetcher is None:
            raise RuntimeError("No transaction fetcher configured.")
        logger.debug("Analyzing transaction %s", signature)
        tx = await self.fetcher.get_transaction(signature)
        if not tx:
            raise ChainRPCError(f"Transaction not found: {signature}")
        return self.analyze_parsed(signature, tx)

    def analyze_parsed(self, signature: str, tx: Mapping[str, Any]) -> TransactionAnalysis:
        """Analyze an already-fetched ``jsonParsed`` transaction."""
        meta = tx.get("meta") or {}
        message = (tx.get("transaction") or {}).get("message") or {}
        log_text = " ".join(meta.get("logMessages") or []).lower()

        program, instruction_count, accounts, cpis = self._extract_details(message, meta)
        reasons = self._suspicious_reasons(meta, log_text)

        return TransactionAnalysis(
            signature=signature,
            timestamp=datetime.fromtimestamp(tx.get("blockTime") or 0, UTC),
            program=program,
            success=meta.get("err") is None,
            suspicious=bool(reasons),
            suspicious_reasons=reasons,
            instruction_count=instruction_count,
            compute_units_used=int(meta.get("computeUnitsConsumed") or 0),
            accounts_involved=accounts,
            cross_program_invocations=cpis,
            error_details=meta.get("err"),
            attack_vectors=self._detect_attack_vectors(message, meta, log_text),
        )

    def _extract_details(
        self, message: Mapping[str, Any], meta: Mapping[str, Any]
    ) -> tuple[str, int, list[str], list[str]]:
        accounts: dict[str, None] = {}
        cpis: dict[str, None] = {}
        main_program = ""
        instruction_count = 0

        for ix in message.get("instructions") or []:
            instruction_count += 1
            program_id = _program_id(ix)
            if program_id:
                if not main_program:
                    main_program = program_id
                if program_id != main_program:
                    cpis[program_id] = None
            for account in ix.get("accounts") or []:
                accounts[str(account)] = None

        for inner in meta.get("innerInstructions") or []:
            for ix in inner.get("instructions") or []:
                instruction_count += 1
                program_id = _program_id(ix)
                if program_id and program_id != main_program:
                    cpis[program_id] = None

        program = self.program_names.get(main_program, main_program)
        return program, instruction_count, list(accounts), list(cpis)

    def _suspicious_reasons(self, meta: Mapping[str, Any], log_text: str) -> list[str]:
        reasons: list[str] = []
        for entry in scan_logs(meta.get("logMessages") or []):
            reasons.append(f"Suspicious {entry.pattern} pattern detected")
        if _MANIPULATION_PATTERN.search(log_text):
            reasons.append("Suspicious manipulation pattern detected")

        if int(meta.get("computeUnitsConsumed") or 0) > HIGH_COMPUTE_SUSPICIOUS:
            reasons.append("Abnormally high compute usage")

        pre = meta.get("preBalances") or []
        post = meta.get("postBalances") or []
        changed = sum(1 for before, after in zip(pre, post, strict=False) if before != after)
        if changed > MAX_BALANCE_CHANGES:
            reasons.append("Unusually high number of account modifications")

        if meta.get("err") is not None:
            error_text = json.dumps(meta["err"]).lower()
            if "overflow" in error_text or "underflow" in error_text:
                reasons.append("Arithmetic overflow/underflow attempt")
            if "unauthorized" in error_text or "access" in error_text:
                reasons.append("Unauthorized access attempt")
        return reasons

    def _detect_attack_vectors(
        self, message: Mapping[str, Any], meta: Mapping[str, Any], log_text: str
    ) -> list[AttackVector]:
        vectors: list[AttackVector] = []
        if self._has_overflow(message, log_text):
            vectors.append(
                AttackVector(
                    type="Integer Overflow/Underflow",
                    confidence="high",
                    evidence=("Arithmetic error in logs", "Large numeric values detected"),
                    recommendation="Implement checked arithmetic operations",
                )
            )
        if self._has_reentrancy(meta, log_text):
            vectors.append(
                AttackVector(
                    type="Reentrancy",
                    confidence="medium",
                    evidence=(
                        "Recursive program calls detected",
                        "Multiple identical instructions",
                    ),
                    recommendation="Add reentrancy guards to critical functions",
                )
            )
        if self._has_access_violation(meta, log_text):
            vectors.append(
                AttackVector(
                    type="Access Control Violation",
                    confidence="high",
                    evidence=("Unauthorized access attempt", "Signer mismatch"),
                    recommendation="Strengthen access control checks",
                )
            )
        if any(k in log_text for k in ("already spent", "duplicate", "nonce", "replay")):
            vectors.append(
                AttackVector(
                    type="Double Spending",
                    confidence="medium",
                    evidence=("Multiple spend attempts", "Duplicate transaction patterns"),
                    recommendation="Implement nonce-based ordering",
                )
            )
        if self._has_dos(message, meta, log_text):
            vectors.append(
                AttackVector(
                    type="Denial of Service",
                    confidence="low",
                    evidence=("High resource consumption", "Excessive operations"),
                    recommendation="Add rate limiting and resource caps",
                )
            )
        return vectors

    @staticmethod
    def _has_overflow(message: Mapping[str, Any], log_text: str) -> bool:
        if "overflow" in log_text or "underflow" in log_text:
            return True
        return any(_contains_max_u64(ix.get("parsed")) for ix in message.get("instructions") or [])

    @staticmethod
    def _has_reentrancy(meta: Mapping[str, Any], log_text: str) -> bool:
        if "reentrant" in log_text or "recursive" in log_text:
            return True
        calls: dict[str, int] = {}
        for inner in meta.get("innerInstructions") or []:
            for ix in inner.get("instructions") or []:
                program_id = _program_id(ix)
                if program_id:
                    calls[program_id] = calls.get(program_id, 0) + 1
        return any(count > REPEATED_CPI_CALLS for count in calls.values())

    @staticmethod
    def _has_access_violation(meta: Mapping[str, Any], log_text: str) -> bool:
        if any(k in log_text for k in ("unauthorized", "access denied", "not authorized")):
            return True
        err = meta.get("err")
        return err is not None and "SignerMissing" in json.dumps(err)

    @staticmethod
    def _has_dos(message: Mapping[str, Any], meta: Mapping[str, Any], log_text: str) -> bool:
        if int(meta.get("computeUnitsConsumed") or 0) > HIGH_COMPUTE_DOS:
            return True
        if len(message.get("accountKeys") or []) > MAX_ACCOUNT_KEYS:
            return True
        if len(message.get("instructions") or []) > MAX_INSTRUCTIONS:
            return True
        return any(k in log_text for k in ("exhausted", "limit exceeded", "too many"))


def summarize_batch(analyses: Iterable[TransactionAnalysis]) -> BatchSummary:
    """Aggregate analyses into totals, vector counts and an hourly series."""
    analyses = list(analyses)
    vectors: dict[str, int] = {}
    programs: dict[str, int] = {}
    high_risk: dict[str, None] = {}
    series: dict[datetime, TimeSeriesPoint] = {}

    for analysis in analyses:
        programs[analysis.program] = programs.get(analysis.program, 0) + 1
        for vector in analysis.attack_vectors:
            vectors[vector.type] = vectors.get(vector.type, 0) + 1
        if analysis.suspicious or analysis.attack_vectors:
            for account in analysis.accounts_involved:
                high_risk[account] = None

        hour = analysis.timestamp.replace(minute=0, second=0, microsecond=0)
        point = series.setdefault(hour, TimeSeriesPoint(timestamp=hour))
        point.transaction_count += 1
        if analysis.suspicious:
            point.suspicious_count += 1
        point.average_compute_units += (
            analysis.compute_units_used - point.average_compute_units
        ) / point.transaction_count

    return BatchSummary(
        total_transactions=len(analyses),
        suspicious_transactions=sum(1 for a in analyses if a.suspicious),
        failed_transactions=sum(1 for a in analyses if not a.success),
        attack_vectors_summary=vectors,
        program_activity=programs,
        time_series=[series[key] for key in sorted(series)],
        high_risk_accounts=list(high_risk),
    )


def _percent(part: int, total: int) -> str:
    return f"{(part / total * 100) if total else 0:.2f}%"


def render_batch_summary(summary: BatchSummary) -> str:
    """Render a batch summary as markdown."""
    total = summary.total_transactions
    lines = [
        "# Transaction Analysis Report",
        "",
        "## Summary",
        f"- Total Transactions Analyzed: {total}",
        f"- Suspicious Transactions: {summary.suspicious_transactions} "
        f"({_percent(summary.suspicious_transactions, total)})",
        f"- Failed Transactions: {summary.failed_transactions} "
        f"({_percent(summary.failed_transactions, total)})",
        "",
        "## Attack Vectors Detected",
    ]
    lines.extend(
        f"- {vector}: {count} occurrences"
        for vector, count in summary.attack_vectors_summary.items()
    )
    lines.extend(["", "## Program Activity"])
    lines.extend(
        f"- {program}: {count} transactions" for program, count in summary.program_activity.items()
    )
    if summary.high_risk_accounts:
        lines.extend(["", "## High Risk Accounts"])
        lines.extend(f"- {account}" for account in summary.high_risk_accounts[:10])
    return "\n".join(lines) + "\n"
