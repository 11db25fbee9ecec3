"""Historical transaction pattern, trend and risk analysis."""

from .analyzer import HistoricalAnalyzer
from .models import (
    AttackEvent,
    HistoricalPattern,
    HistoricalReport,
    PeriodComparison,
    TimeRange,
    TrendAnalysis,
    TrendPoint,
    TrendPrediction,
)
from .patterns import (
    detect_account_patterns,
    detect_patterns,
    detect_time_patterns,
    detect_vector_patterns,
)
from .render import render_historical_report
from .scoring import calculate_historical_risk_score, generate_historical_recommendations
from .timeline import AttackHistory, build_attack_timeline, determine_severity
from .trends import analyze_trends, predict_next_period, select_period

__all__ = [
    "AttackEvent",
    "AttackHistory",
    "HistoricalAnalyzer",
    "HistoricalPattern",
    "HistoricalReport",
    "PeriodComparison",
    "TimeRange",
    "TrendAnalysis",
    "TrendPoint",
    "TrendPrediction",
    "analyze_trends",
    "build_attack_timeline",
    "calculate_historical_risk_score",
    "detect_account_patterns",
    "detect_patterns",
    "detect_time_patterns",
    "detect_vector_patterns",
    "determine_severity",
    "generate_historical_recommendations",
    "predict_next_period",
    "render_historical_report",
    "select_period",
]
