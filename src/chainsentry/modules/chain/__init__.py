"""Chain data access and per-transaction analysis."""

from .analyzer import (
    SignatureSource,
    TransactionAnalyzer,
    TransactionSource,
    render_batch_summary,
    summarize_batch,
)
from .models import AttackVector, BatchSummary, SignatureInfo, TimeSeriesPoint, TransactionAnalysis
from .rpc import ChainRPCError, SolanaRPCClient

__all__ = [
    "AttackVector",
    "BatchSummary",
    "ChainRPCError",
    "SignatureInfo",
    "SignatureSource",
    "SolanaRPCClient",
    "TimeSeriesPoint",
    "TransactionAnalysis",
    "TransactionAnalyzer",
    "TransactionSource",
    "render_batch_summary",
    "summarize_batch",
]
