"""Test configuration and fixtures for ChainSentry."""

import tempfile
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from chainsentry.config import ENV_KEYS
from chainsentry.modules.chain.models import AttackVector, TransactionAnalysis
from chainsentry.modules.detection.models import (
    AccessControlOutcome,
    DoubleSpendOutcome,
    InputValidationOutcome,
    OverflowOutcome,
    ReentrancyOutcome,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Point home and cwd at a temp dir and clear ChainSentry env vars."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(Path, "home", lambda: temp_dir)
    monkeypatch.chdir(temp_dir)
    return temp_dir


@pytest.fixture
def overflow_outcome() -> OverflowOutcome:
    return OverflowOutcome(
        success=True,
        target_function="deposit",
        program="vault",
        type="overflow",
        attempted_value=18_446_744_073_709_551_615,
    )


@pytest.fixture
def reentrancy_outcome() -> ReentrancyOutcome:
    return ReentrancyOutcome(
        success=True,
        target_function="withdraw",
        program="vault",
        type="simple",
        depth=3,
    )


@pytest.fixture
def access_outcome() -> AccessControlOutcome:
    return AccessControlOutcome(
        success=True,
        target_function="set_fee",
        program="vault",
        type="privilege-escalation",
        attacker_role="user",
        required_role="operator",
    )


@pytest.fixture
def double_spend_outcome() -> DoubleSpendOutcome:
    return DoubleSpendOutcome(
        success=True,
        target_function="transfer",
        program="vault",
        type="concurrent-spend",
        attempted_spends=3,
        successful_spends=2,
    )


@pytest.fixture
def make_input_outcome():
    """Factory for input-validation outcomes."""

    def _make(success: bool = True, type: str = "zero-amount") -> InputValidationOutcome:
        return InputValidationOutcome(
            success=success,
            target_function="deposit",
            program="vault",
            type=type,
            input_value=0,
        )

    return _make


def _make_analysis(
    signature: str,
    timestamp: datetime = BASE_TIME,
    *,
    program: str = "vault",
    success: bool = True,
    suspicious: bool = False,
    accounts: list[str] | None = None,
    vectors: list[AttackVector] | None = None,
) -> TransactionAnalysis:
    """Build a transaction analysis without touching the chain."""
    return TransactionAnalysis(
        signature=signature,
        timestamp=timestamp,
        program=program,
        success=success,
        suspicious=suspicious,
        accounts_involved=list(accounts or []),
        attack_vectors=list(vectors or []),
    )


@pytest.fixture
def make_analysis():
    """Factory for transaction analyses."""
    return _make_analysis
