"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``STOCK_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The forecasting core takes an ``AppConfig`` (or falls back to ``AppConfig()``
defaults, which mirror ``config/default.toml``) — never raw dicts or
individual env var lookups scattered through the codebase.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class ForecastConfig(BaseModel):
    """Ensemble forecast settings."""

    model_config = ConfigDict(frozen=True)

    horizon_days: int = 7
    min_history_points: int = 5
    default_current_price: float = 100.0
    deadline_seconds: float = 5.0
    parallel_fit: bool = True

    @field_validator("horizon_days", "min_history_points")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v

    @field_validator("default_current_price", "deadline_seconds")
    @classmethod
    def validate_positive_float(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Value must be > 0, got {v}.")
        return v


class SentimentConfig(BaseModel):
    """Lexicon scorer and news aggregation parameters."""

    model_config = ConfigDict(frozen=True)

    decay: float = 0.1
    label_threshold: float = 0.15
    outlook_threshold: float = 0.1
    default_item_score: float = 0.5

    @field_validator("decay")
    @classmethod
    def validate_decay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"decay must be non-negative, got {v}.")
        return v


class IndicatorConfig(BaseModel):
    """Technical indicator windows."""

    model_config = ConfigDict(frozen=True)

    rsi_period: int = 14
    bollinger_period: int = 20
    bollinger_width: float = 2.0
    macd_fast: int = 12
    macd_slow: int = 26
    volume_window: int = 5

    @model_validator(mode="after")
    def validate_macd_windows(self) -> "IndicatorConfig":
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) must be < macd_slow ({self.macd_slow})."
            )
        return self


class ModelsConfig(BaseModel):
    """Training hyperparameters for the statistical model bank."""

    model_config = ConfigDict(frozen=True)

    regressor_learning_rate: float = 0.01
    regressor_epochs: int = 100
    regressor_tolerance: float = 0.01
    ar_learning_rate: float = 0.001
    ar_iterations: int = 1000


class DataConfig(BaseModel):
    """Synthetic fallback data settings."""

    model_config = ConfigDict(frozen=True)

    seed_file: str = "config/seed/market_seed.json"
    lookback_days: int = 30
    news_limit: int = 8


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env.
    ``AppConfig()`` on its own yields the built-in defaults.
    """

    model_config = ConfigDict(frozen=True)

    forecast: ForecastConfig = ForecastConfig()
    sentiment: SentimentConfig = SentimentConfig()
    indicators: IndicatorConfig = IndicatorConfig()
    models: ModelsConfig = ModelsConfig()
    data: DataConfig = DataConfig()
    logging: LoggingConfig = LoggingConfig()
    seed: Optional[int] = None
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply STOCK_FORECASTER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply STOCK_FORECASTER_* env vars to the raw config dict.

    Supported overrides:
      STOCK_FORECASTER_LOG_LEVEL  → raw["logging"]["level"]
      STOCK_FORECASTER_SEED_FILE  → raw["data"]["seed_file"]
      STOCK_FORECASTER_SEED       → raw["seed"]
      STOCK_FORECASTER_DEBUG      → raw["debug"]
    """
    if log_level := os.environ.get("STOCK_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if seed_file := os.environ.get("STOCK_FORECASTER_SEED_FILE"):
        raw.setdefault("data", {})["seed_file"] = seed_file

    if seed := os.environ.get("STOCK_FORECASTER_SEED"):
        raw["seed"] = int(seed)

    if debug := os.environ.get("STOCK_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        forecast=ForecastConfig(**raw.get("forecast", {})),
        sentiment=SentimentConfig(**raw.get("sentiment", {})),
        indicators=IndicatorConfig(**raw.get("indicators", {})),
        models=ModelsConfig(**raw.get("models", {})),
        data=DataConfig(**raw.get("data", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        seed=raw.get("seed", project.get("seed")),
        debug=raw.get("debug", project.get("debug", False)),
    )


def resolve_path(path: str | Path) -> Path:
    """Resolve a config-relative path (e.g. ``data.seed_file``) against the project root."""
    path = Path(path)
    return path if path.is_absolute() else _find_project_root() / path
