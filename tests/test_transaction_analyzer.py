"""Tests for per-transaction analysis and batch summaries."""

from datetime import UTC, datetime, timedelta

import pytest

from chainsentry.modules.chain import (
    ChainRPCError,
    TransactionAnalyzer,
    render_batch_summary,
    summarize_batch,
)

BLOCK_TIME = 1_700_000_000


def _tx(logs=None, err=None, compute=5_000, instructions=None, inner=None, balances=None):
    pre, post = balances or ([100, 100], [100, 100])
    return {
        "blockTime": BLOCK_TIME,
        "meta": {
            "err": err,
            "logMessages": logs or ["Program Prog1 invoke [1]", "Program Prog1 success"],
            "computeUnitsConsumed": compute,
            "preBalances": pre,
            "postBalances": post,
            "innerInstructions": inner or [],
        },
        "transaction": {
            "message": {
                "accountKeys": ["A", "B", "C"],
                "instructions": instructions
                or [
                    {"programId": "Prog1", "accounts": ["A", "B"]},
                    {"programId": "Token", "accounts": ["B", "C"]},
                ],
            }
        },
    }


class TestAnalyzeParsed:
    def test_clean_transaction(self):
        analysis = TransactionAnalyzer().analyze_parsed("sig", _tx())

        assert analysis.signature == "sig"
        assert analysis.timestamp == datetime.fromtimestamp(BLOCK_TIME, UTC)
        assert analysis.program == "Prog1"
        assert analysis.success is True
        assert analysis.suspicious is False
        assert analysis.instruction_count == 2
        assert analysis.accounts_involved == ["A", "B", "C"]
        assert analysis.cross_program_invocations == ["Token"]
        assert analysis.attack_vectors == []

    def test_program_names(self):
        analyzer = TransactionAnalyzer(program_names={"Prog1": "vault"})
        assert analyzer.analyze_parsed("sig", _tx()).program == "vault"

    def test_overflow_logs(self):
        analysis = TransactionAnalyzer().analyze_parsed(
            "sig", _tx(logs=["Program log: arithmetic overflow"])
        )

        assert analysis.suspicious is True
        assert "Suspicious integer_overflow pattern detected" in analysis.suspicious_reasons
        vector = analysis.attack_vectors[0]
        assert vector.type == "Integer Overflow/Underflow"
        assert vector.confidence == "high"

    def test_arithmetic_error(self):
        err = {"InstructionError": [0, "ArithmeticOverflow"]}
        analysis = TransactionAnalyzer().analyze_parsed("sig", _tx(err=err))

        assert analysis.success is False
        assert analysis.error_details == err
        assert "Arithmetic overflow/underflow attempt" in analysis.suspicious_reasons

    def test_repeated_inner_calls_are_reentrancy(self):
        inner = [{"index": 0, "instructions": [{"programId": "Prog1"}] * 4}]
        analysis = TransactionAnalyzer().analyze_parsed("sig", _tx(inner=inner))

        assert [v.type for v in analysis.attack_vectors] == ["Reentrancy"]
        assert analysis.instruction_count == 6

    def test_access_denied(self):
        analysis = TransactionAnalyzer().analyze_parsed(
            "sig", _tx(logs=["Program log: Error: access denied"])
        )
        assert "Access Control Violation" in [v.type for v in analysis.attack_vectors]

    def test_replay_is_double_spend(self):
        analysis = TransactionAnalyzer().analyze_parsed(
            "sig", _tx(logs=["Program log: nonce already used"])
        )
        assert [v.type for v in analysis.attack_vectors] == ["Double Spending"]

    def test_high_compute(self):
        analysis = TransactionAnalyzer().analyze_parsed("sig", _tx(compute=1_300_000))

        assert "Abnormally high compute usage" in analysis.suspicious_reasons
        dos = [v for v in analysis.attack_vectors if v.type == "Denial of Service"]
        assert dos and dos[0].confidence == "low"

    def test_many_balance_changes(self):
        balances = (list(range(11)), [b + 1 for b in range(11)])
        analysis = TransactionAnalyzer().analyze_parsed("sig", _tx(balances=balances))
        assert "Unusually high number of account modifications" in analysis.suspicious_reasons

    def test_max_u64_argument_is_overflow(self):
        instructions = [
            {
                "programId": "Prog1",
                "parsed": {"info": {"amount": "18446744073709551615"}},
            }
        ]
        analysis = TransactionAnalyzer().analyze_parsed("sig", _tx(instructions=instructions))
        assert [v.type for v in analysis.attack_vectors] == ["Integer Overflow/Underflow"]


class FakeFetcher:
    def __init__(self, tx):
        self.tx = tx

    async def get_transaction(self, signature):
        return self.tx


class TestAnalyzeTransaction:
    async def test_fetches_and_analyzes(self):
        analysis = await TransactionAnalyzer(FakeFetcher(_tx())).analyze_transaction("sig")
        assert analysis.program == "Prog1"

    async def test_missing_transaction(self):
        with pytest.raises(ChainRPCError, match="not found"):
            await TransactionAnalyzer(FakeFetcher(None)).analyze_transaction("sig")

    async def test_requires_fetcher(self):
        with pytest.raises(RuntimeError):
            await TransactionAnalyzer().analyze_transaction("sig")


class TestBatchSummary:
    def test_summarize_and_render(self, make_analysis):
        hour = datetime(2024, 1, 1, 10, tzinfo=UTC)
        first = make_analysis("a", hour + timedelta(minutes=1), accounts=["X"], suspicious=True)
        first.compute_units_used = 100
        second = make_analysis("b", hour + timedelta(minutes=2), accounts=["Y"], success=False)
        second.compute_units_used = 300

        summary = summarize_batch([first, second])

        assert summary.total_transactions == 2
        assert summary.suspicious_transactions == 1
        assert summary.failed_transactions == 1
        assert summary.program_activity == {"vault": 2}
        assert summary.high_risk_accounts == ["X"]
        assert len(summary.time_series) == 1
        assert summary.time_series[0].timestamp == hour
        assert summary.time_series[0].average_compute_units == 200

        text = render_batch_summary(summary)
        assert "- Suspicious Transactions: 1 (50.00%)" in text
        assert "- vault: 2 transactions" in text
        assert "## High Risk Accounts" in text

    def test_empty_batch(self):
        text = render_batch_summary(summarize_batch([]))
        assert "- Total Transactions Analyzed: 0" in text
        assert "(0.00%)" in text
