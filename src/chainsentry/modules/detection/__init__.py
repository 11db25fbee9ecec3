"""Attack outcome classification, correlation and risk scoring."""

from .catalog import VULNERABILITY_PATTERNS, VulnerabilityPattern, match_indicators, scan_logs
from .classifier import classify_outcome, dos_severity
from .correlator import correlate_outcomes
from .models import (
    AccessControlOutcome,
    AttackFamily,
    AttackOutcome,
    DetectionReport,
    DosOutcome,
    DoubleSpendOutcome,
    Finding,
    InputValidationOutcome,
    OverflowOutcome,
    ReentrancyOutcome,
    ResourceUsage,
)
from .parsing import parse_outcome, parse_outcomes
from .recommendations import generate_recommendations
from .report import AttackSuccessDetector, build_detection_report, generate_executive_summary
from .scoring import calculate_risk_score, risk_level

__all__ = [
    "AccessControlOutcome",
    "AttackFamily",
    "AttackOutcome",
    "AttackSuccessDetector",
    "DetectionReport",
    "DosOutcome",
    "DoubleSpendOutcome",
    "Finding",
    "InputValidationOutcome",
    "OverflowOutcome",
    "ReentrancyOutcome",
    "ResourceUsage",
    "VULNERABILITY_PATTERNS",
    "VulnerabilityPattern",
    "build_detection_report",
    "calculate_risk_score",
    "classify_outcome",
    "correlate_outcomes",
    "dos_severity",
    "generate_executive_summary",
    "generate_recommendations",
    "match_indicators",
    "parse_outcome",
    "parse_outcomes",
    "risk_level",
    "scan_logs",
]
