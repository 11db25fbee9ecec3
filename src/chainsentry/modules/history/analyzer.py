"""Historical analysis sessions over a program's past transactions."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from chainsentry.config import HistorySettings
from chainsentry.modules.chain.analyzer import SignatureSource, TransactionSource
from chainsentry.modules.chain.models import TransactionAnalysis

from .models import HistoricalReport, PeriodComparison, TimeRange
from .patterns import detect_patterns
from .scoring import calculate_historical_risk_score, generate_historical_recommendations
from .timeline import AttackHistory, build_attack_timeline
from .trends import analyze_trends

logger = logging.getLogger(__name__)


class HistoricalAnalyzer:
    """Analyzes windows of past transactions for patterns, trends and risk."""

    def __init__(
        self,
        signatures: SignatureSource,
        transactions: TransactionSource,
        settings: HistorySettings | None = None,
        history: AttackHistory | None = None,
    ):
        self.signatures = signatures
        self.transactions = transactions
        self.settings = settings or HistorySettings()
        if history is None:
            history = AttackHistory(self.settings.history_limit)
        self.history = history

    async def analyze_program(
        self,
        program_id: str,
        hours_back: float = 24,
        end_time: datetime | None = None,
    ) -> HistoricalReport:
        """Analyze ``hours_back`` hours of history ending at ``end_time`` (default now)."""
        end = end_time or datetime.now(UTC)
        start = end - timedelta(hours=hours_back)
        time_range = TimeRange(start=start, end=end)
        logger.info("Analyzing %s hours of history for %s", hours_back, program_id)

        signatures = await self.fetch_signatures(program_id, start, end)
        logger.info("Found %d transactions to analyze", len(signatures))
        analyses = await self.analyze_signatures(signatures)

        patterns = detect_patterns(analyses, time_range, self.settings)
        trends = analyze_trends(analyses, hours_back, self.settings)
        timeline = build_attack_timeline(analyses)
        risk_score = calculate_historical_risk_score(patterns, trends, timeline, self.settings)

        # Only completed scans reach the shared history.
        self.history.extend(timeline)
        logger.debug("Attack history holds %d events", len(self.history))

        return HistoricalReport(
            time_range=time_range,
            total_transactions=len(analyses),
            patterns=patterns,
            trends=trends,
            risk_score=risk_score,
            recommendations=generate_historical_recommendations(patterns, trends, risk_score),
            attack_timeline=timeline,
        )

    async def fetch_signatures(
        self, program_id: str, start: datetime, end: datetime
    ) -> list[str]:
        """Page backward through signatures until the window start is passed.

        A failure on the first page propagates; later failures end the
        listing with what was gathered so far.
        """
        collected: list[str] = []
        before: str | None = None
        first_page = True

        while True:
            try:
                page = await self.signatures.get_signatures_for_address(
                    program_id, before=before, limit=self.settings.signature_page_limit
                )
            except Exception:
                if first_page:
                    raise
                logger.warning(
                    "Signature listing for %s failed after %d signatures",
                    program_id,
                    len(collected),
                    exc_info=True,
                )
                return collected
            first_page = False

            if not page:
                return collected

            for info in page:
                timestamp = datetime.fromtimestamp(info.block_time or 0, UTC)
                if start <= timestamp <= end:
                    collected.append(info.signature)
                elif timestamp < start:
                    return collected

            before = page[-1].signature
            await asyncio.sleep(self.settings.batch_delay)

    async def analyze_signatures(self, signatures: list[str]) -> list[TransactionAnalysis]:
        """Analyze signatures in concurrent batches, dropping failed lookups."""
        analyses: list[TransactionAnalysis] = []
        batch_size = max(1, self.settings.batch_size)

        for offset in range(0, len(signatures), batch_size):
            batch = signatures[offset : offset + batch_size]
            results = await asyncio.gather(
                *(self.transactions.analyze_transaction(sig) for sig in batch),
                return_exceptions=True,
            )
            for signature, result in zip(batch, results, strict=True):
                if isinstance(result, BaseException):
                    logger.warning("Failed to analyze transaction %s: %s", signature, result)
                    continue
                analyses.append(result)

            done = min(offset + batch_size, len(signatures))
            logger.debug("Analyzed %d/%d transactions", done, len(signatures))
            if done < len(signatures):
                await asyncio.sleep(self.settings.batch_delay)

        return analyses

    async def compare_periods(
        self,
        program_id: str,
        earlier_hours: float,
        recent_hours: float,
        end_time: datetime | None = None,
    ) -> PeriodComparison:
        """Compare the ``recent_hours`` window with the adjacent window before it."""
        end = end_time or datetime.now(UTC)
        boundary = end - timedelta(hours=recent_hours)
        earlier = await self.analyze_program(program_id, earlier_hours, end_time=boundary)
        recent = await self.analyze_program(program_id, recent_hours, end_time=end)

        earlier_names = {p.pattern for p in earlier.patterns}
        recent_names = {p.pattern for p in recent.patterns}
        return PeriodComparison(
            earlier=earlier,
            recent=recent,
            volume_change=recent.total_transactions - earlier.total_transactions,
            risk_change=recent.risk_score - earlier.risk_score,
            new_patterns=[p for p in recent.patterns if p.pattern not in earlier_names],
            resolved_patterns=[p for p in earlier.patterns if p.pattern not in recent_names],
        )
