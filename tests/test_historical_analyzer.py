"""Tests for HistoricalAnalyzer sessions."""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

import pytest

from chainsentry.config import HistorySettings
from chainsentry.modules.chain import AttackVector, ChainRPCError, SignatureInfo
from chainsentry.modules.history import (
    AttackHistory,
    HistoricalAnalyzer,
    HistoricalReport,
    TimeRange,
    analyze_trends,
    build_attack_timeline,
    render_historical_report,
)

END = datetime(2024, 1, 1, 12, tzinfo=UTC)
FAST = HistorySettings(batch_delay=0, batch_size=2)
REENTRANCY = AttackVector(type="Reentrancy", confidence="medium", evidence=("recursive",))


def _sig(name: str, hours_ago: float) -> SignatureInfo:
    return SignatureInfo(
        signature=name, block_time=int((END - timedelta(hours=hours_ago)).timestamp())
    )


class FakeSignatures:
    """Serves fixed pages; a page may be an exception to raise."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.calls: list[tuple[str, str | None, int]] = []

    async def get_signatures_for_address(self, address, before=None, limit=1000):
        self.calls.append((address, before, limit))
        index = len(self.calls) - 1
        if index >= len(self.pages):
            return []
        page = self.pages[index]
        if isinstance(page, Exception):
            raise page
        return page


class FakeTransactions:
    """Analyzes signatures from a lookup table of analyses or exceptions."""

    def __init__(self, results):
        self.results = results
        self.seen: list[str] = []

    async def analyze_transaction(self, signature):
        self.seen.append(signature)
        result = self.results[signature]
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def analyses_for(make_analysis):
    def _build(signatures, vectors=None):
        return {
            info.signature: make_analysis(
                info.signature,
                datetime.fromtimestamp(info.block_time, UTC),
                vectors=vectors,
            )
            for info in signatures
        }

    return _build


class TestFetchSignatures:
    async def test_pages_until_window_start(self):
        source = FakeSignatures(
            [
                [_sig("future", -1), _sig("s1", 1), _sig("s2", 2)],
                [_sig("s3", 3), _sig("old", 30), _sig("older", 31)],
            ]
        )
        analyzer = HistoricalAnalyzer(source, FakeTransactions({}), FAST)

        signatures = await analyzer.fetch_signatures("prog", END - timedelta(hours=24), END)

        assert signatures == ["s1", "s2", "s3"]
        assert source.calls == [("prog", None, 1000), ("prog", "s2", 1000)]

    async def test_stops_on_empty_page(self):
        source = FakeSignatures([[_sig("s1", 1)], []])
        analyzer = HistoricalAnalyzer(source, FakeTransactions({}), FAST)

        signatures = await analyzer.fetch_signatures("prog", END - timedelta(hours=24), END)

        assert signatures == ["s1"]
        assert len(source.calls) == 2

    async def test_first_page_failure_propagates(self):
        source = FakeSignatures([ChainRPCError("node down")])
        analyzer = HistoricalAnalyzer(source, FakeTransactions({}), FAST)

        with pytest.raises(ChainRPCError):
            await analyzer.fetch_signatures("prog", END - timedelta(hours=24), END)

    async def test_later_page_failure_keeps_partial_list(self, caplog):
        source = FakeSignatures([[_sig("s1", 1), _sig("s2", 2)], ChainRPCError("timeout")])
        analyzer = HistoricalAnalyzer(source, FakeTransactions({}), FAST)

        with caplog.at_level(logging.WARNING):
            signatures = await analyzer.fetch_signatures(
                "prog", END - timedelta(hours=24), END
            )

        assert signatures == ["s1", "s2"]
        assert "failed after 2 signatures" in caplog.text


class TestAnalyzeProgram:
    async def test_report_and_history(self, analyses_for):
        page = [_sig("s1", 1), _sig("s2", 2), _sig("s3", 3)]
        transactions = FakeTransactions(analyses_for(page, vectors=[REENTRANCY]))
        history = AttackHistory()
        analyzer = HistoricalAnalyzer(FakeSignatures([page]), transactions, FAST, history)

        report = await analyzer.analyze_program("prog", hours_back=24, end_time=END)

        assert report.total_transactions == 3
        assert report.time_range.end == END
        assert report.time_range.start == END - timedelta(hours=24)
        assert report.trends.period == "hourly"
        assert "Reentrancy" in [p.pattern for p in report.patterns]
        assert len(report.attack_timeline) == 3
        assert [e.signature for e in report.attack_timeline] == ["s3", "s2", "s1"]
        assert 0 <= report.risk_score <= 100
        assert len(history) == 3
        assert analyzer.history is history

    async def test_failed_transactions_are_dropped(self, analyses_for, caplog):
        page = [_sig("s1", 1), _sig("s2", 2), _sig("s3", 3)]
        results = analyses_for(page)
        results["s2"] = ChainRPCError("Transaction not found: s2")
        analyzer = HistoricalAnalyzer(FakeSignatures([page]), FakeTransactions(results), FAST)

        with caplog.at_level(logging.WARNING):
            report = await analyzer.analyze_program("prog", hours_back=24, end_time=END)

        assert report.total_transactions == 2
        assert "Failed to analyze transaction s2" in caplog.text

    async def test_cancelled_lookup_is_dropped(self, analyses_for):
        page = [_sig("s1", 1), _sig("s2", 2)]
        results = analyses_for(page)
        results["s1"] = asyncio.CancelledError()
        analyzer = HistoricalAnalyzer(FakeSignatures([page]), FakeTransactions(results), FAST)

        analyses = await analyzer.analyze_signatures(["s1", "s2"])

        assert [a.signature for a in analyses] == ["s2"]

    async def test_all_signatures_analyzed_across_batches(self, analyses_for):
        page = [_sig(f"s{i}", i + 1) for i in range(5)]
        transactions = FakeTransactions(analyses_for(page))
        analyzer = HistoricalAnalyzer(FakeSignatures([page]), transactions, FAST)

        report = await analyzer.analyze_program("prog", hours_back=24, end_time=END)

        assert sorted(transactions.seen) == sorted(info.signature for info in page)
        assert report.total_transactions == 5

    async def test_failed_listing_leaves_history_untouched(self):
        history = AttackHistory()
        analyzer = HistoricalAnalyzer(
            FakeSignatures([ChainRPCError("down")]), FakeTransactions({}), FAST, history
        )

        with pytest.raises(ChainRPCError):
            await analyzer.analyze_program("prog", end_time=END)
        assert len(history) == 0

    async def test_empty_window(self):
        analyzer = HistoricalAnalyzer(FakeSignatures([]), FakeTransactions({}), FAST)

        report = await analyzer.analyze_program("prog", end_time=END)

        assert report.total_transactions == 0
        assert report.patterns == []
        assert report.risk_score == 0
        assert report.trends.predictions.confidence == 0.3

    def test_default_history_uses_settings_limit(self):
        analyzer = HistoricalAnalyzer(
            FakeSignatures([]), FakeTransactions({}), HistorySettings(history_limit=5)
        )
        assert analyzer.history.limit == 5


class TestComparePeriods:
    async def test_adjacent_windows(self, make_analysis):
        recent_sigs = [_sig("r1", 1), _sig("r2", 2)]
        earlier_sigs = [_sig("e1", 30)]
        results = {
            info.signature: make_analysis(
                info.signature,
                datetime.fromtimestamp(info.block_time, UTC),
                vectors=[REENTRANCY],
            )
            for info in recent_sigs
        }
        results["e1"] = make_analysis("e1", END - timedelta(hours=30))

        class AllSignatures:
            async def get_signatures_for_address(self, address, before=None, limit=1000):
                return [] if before else [*recent_sigs, *earlier_sigs]

        analyzer = HistoricalAnalyzer(AllSignatures(), FakeTransactions(results), FAST)

        comparison = await analyzer.compare_periods("prog", 24, 24, end_time=END)

        assert comparison.earlier.total_transactions == 1
        assert comparison.recent.total_transactions == 2
        assert comparison.earlier.time_range.end == END - timedelta(hours=24)
        assert comparison.volume_change == 1
        assert comparison.risk_change == (
            comparison.recent.risk_score - comparison.earlier.risk_score
        )
        assert "Reentrancy" in [p.pattern for p in comparison.new_patterns]
        assert [p.pattern for p in comparison.resolved_patterns] == [
            "High activity at hour 6:00"
        ]


def test_render_historical_report(make_analysis):
    analyses = [
        make_analysis(f"s{i}", END - timedelta(minutes=i), vectors=[REENTRANCY])
        for i in range(12)
    ]
    timeline = build_attack_timeline(analyses)
    report = HistoricalReport(
        time_range=TimeRange(start=END - timedelta(hours=24), end=END),
        total_transactions=12,
        patterns=[],
        trends=analyze_trends(analyses, 24),
        risk_score=42,
        recommendations=["Add reentrancy guards"],
        attack_timeline=timeline,
    )

    text = render_historical_report(report)

    assert text.startswith("# Historical Analysis Report")
    assert "- Risk Score: 42/100" in text
    assert "## Trend Analysis (hourly)" in text
    assert "- Confidence: 30.00%" in text
    assert "- Add reentrancy guards" in text
    assert text.count("[medium] Reentrancy") == 10
