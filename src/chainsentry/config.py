"""
Configuration management for chainsentry.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Local .env file (./.env)
3. Global config file (~/.chainsentry/config.yml)
4. Default values (lowest priority)
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

ENV_KEYS = (
    "CHAINSENTRY_RPC_URL",
    "CHAINSENTRY_DATA_DIR",
    "CHAINSENTRY_VERBOSE",
    "CHAINSENTRY_HISTORY_LIMIT",
)

DEFAULT_RPC_URL = "http://127.0.0.1:8899"


@dataclass(frozen=True)
class DetectionThresholds:
    """Classifier and correlator cut-offs."""

    dos_critical_compute_units: int = 1_000_000
    dos_critical_accounts_created: int = 50
    dos_high_transactions_sent: int = 100
    dos_high_data_size: int = 100_000
    dos_medium_compute_units: int = 500_000
    systemic_input_validation_min: int = 2


@dataclass(frozen=True)
class RiskWeights:
    """Weights of the per-run risk score."""

    per_finding: int = 10
    base_cap: int = 40
    critical_bonus: int = 20
    critical: int = 15
    high: int = 10
    medium: int = 5
    low: int = 2

    def severity_weight(self, severity: str) -> int:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
        }.get(severity, 0)


@dataclass(frozen=True)
class HistorySettings:
    """Thresholds and pacing for historical analysis."""

    pattern_min_rate: float = 0.01
    hourly_spike_factor: float = 2.0
    hourly_anomaly_confidence: float = 0.7
    account_suspicious_rate: float = 0.5
    account_min_suspicious: int = 5
    prediction_window: int = 3
    prediction_high_suspicious: float = 10
    prediction_medium_suspicious: float = 5
    fallback_confidence: float = 0.3
    prediction_confidence: float = 0.7
    attack_pattern_weight: float = 2
    anomaly_pattern_weight: float = 1
    error_rate_weight: float = 50
    critical_event_weight: float = 10
    high_event_weight: float = 5
    batch_size: int = 50
    signature_page_limit: int = 1000
    batch_delay: float = 0.1
    history_limit: int = 10_000


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    detection: DetectionThresholds = field(default_factory=DetectionThresholds)
    risk: RiskWeights = field(default_factory=RiskWeights)
    history: HistorySettings = field(default_factory=HistorySettings)
    rpc_url: str = DEFAULT_RPC_URL
    data_dir: Path = field(default_factory=lambda: Path.home() / ".chainsentry")
    verbose: bool = False


def get_global_config_path() -> Path:
    """Return the path of the global YAML config."""
    return Path.home() / ".chainsentry" / "config.yml"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from .env file."""
    env_vars = {}
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    # Remove quotes if present
                    value = value.strip().strip("\"'")
                    env_vars[key.strip()] = value
    return env_vars


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.chainsentry/config.yml."""
    config_path = get_global_config_path()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def _as_bool(value: str | None) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def _override(section: Any, values: Any, name: str) -> Any:
    """Return ``section`` with known keys from ``values`` applied."""
    if not isinstance(values, dict):
        if values is not None:
            logger.warning("Ignoring non-mapping config section %r", name)
        return section
    known = {f.name: f for f in fields(section)}
    updates: dict[str, Any] = {}
    for key, raw in values.items():
        if key not in known:
            logger.warning("Unknown config key %s.%s ignored", name, key)
            continue
        current = getattr(section, key)
        try:
            updates[key] = type(current)(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid value for %s.%s: %r", name, key, raw)
    return replace(section, **updates)


def _merge_env_values(env_path: Path | None) -> dict[str, str]:
    merged: dict[str, str] = {}
    if env_path and env_path.exists():
        merged.update(load_env_file(env_path))
    # Process environment wins over the .env file.
    for key in ENV_KEYS:
        env_val = os.environ.get(key)
        if env_val:
            merged[key] = env_val
    return merged


def load_settings(
    env_path: Path | None = None,
    global_config: dict[str, Any] | None = None,
) -> Settings:
    """Resolve settings from the environment, .env file and global config."""
    if env_path is None:
        env_path = Path.cwd() / ".env"
    if global_config is None:
        try:
            global_config = load_global_config()
        except (OSError, yaml.YAMLError):
            logger.warning("Could not read global config", exc_info=True)
            global_config = {}

    settings = Settings()
    settings = replace(
        settings,
        detection=_override(settings.detection, global_config.get("detection"), "detection"),
        risk=_override(settings.risk, global_config.get("risk"), "risk"),
        history=_override(settings.history, global_config.get("history"), "history"),
    )
    if global_config.get("rpc_url"):
        settings = replace(settings, rpc_url=str(global_config["rpc_url"]))

    env = _merge_env_values(env_path)
    if env.get("CHAINSENTRY_RPC_URL"):
        settings = replace(settings, rpc_url=env["CHAINSENTRY_RPC_URL"])
    if env.get("CHAINSENTRY_DATA_DIR"):
        settings = replace(settings, data_dir=Path(env["CHAINSENTRY_DATA_DIR"]))
    if "CHAINSENTRY_VERBOSE" in env:
        settings = replace(settings, verbose=_as_bool(env["CHAINSENTRY_VERBOSE"]))
    if env.get("CHAINSENTRY_HISTORY_LIMIT"):
        try:
            limit = int(env["CHAINSENTRY_HISTORY_LIMIT"])
            settings = replace(settings, history=replace(settings.history, history_limit=limit))
        except ValueError:
            logger.warning(
                "Invalid CHAINSENTRY_HISTORY_LIMIT: %r", env["CHAINSENTRY_HISTORY_LIMIT"]
            )
    return settings


def get_db_path(settings: Settings) -> Path:
    """Get the results database path."""
    return settings.data_dir / "chainsentry.db"


def create_global_config() -> Path:
    """Write a commented global config template if none exists."""
    config_path = get_global_config_path()
    if config_path.exists():
        return config_path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    defaults = Settings()
    template = {"rpc_url": defaults.rpc_url}
    for name in ("detection", "risk", "history"):
        section = getattr(defaults, name)
        template[name] = {f.name: getattr(section, f.name) for f in fields(section)}
    header = "# chainsentry global configuration\n# Remove keys you do not want to override.\n"
    config_path.write_text(header + yaml.safe_dump(template, sort_keys=False))
    return config_path
