"""
Central configuration — reads from .env file.

Nothing here is a global service: load_config() builds an immutable
ServiceConfig once at startup and the caller hands it to the server,
the Gemini provider and the extraction engine explicitly.

Environment variables:
  GEMINI_API_KEY            → required for analysis (service reports
                              ConfigurationMissing without it)
  GEMINI_MODEL              → default gemini-2.5-flash
  GEMINI_TEMPERATURE        → default 0.1
  GEMINI_MAX_OUTPUT_TOKENS  → default 3000 (raise this on Truncated errors)
  EXTRACTION_MAX_DEPTH      → default 64, bound on payload traversal depth
  HOST / PORT               → default 0.0.0.0 / 3001
  MAX_BODY_MB               → default 50 (base64 photos are large)
  LOG_LEVEL                 → default INFO
  DATA_DIR                  → default data (log file lives here)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class ExtractionConfig:
    """Knobs of the response extraction engine."""
    # Nodes nested deeper than this are treated as dead ends
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")


@dataclass(frozen=True)
class ServiceConfig:
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    temperature: float = 0.1
    max_output_tokens: int = 3000
    host: str = "0.0.0.0"
    port: int = 3001
    max_body_mb: int = 50
    log_level: str = "INFO"
    data_dir: str = "data"
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)

    @property
    def is_configured(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_model)

    @property
    def max_body_bytes(self) -> int:
        return self.max_body_mb * 1024 * 1024


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_config() -> ServiceConfig:
    """Build a ServiceConfig from the environment (and .env, loaded at import)."""
    return ServiceConfig(
        gemini_api_key    = os.getenv("GEMINI_API_KEY", "").strip() or None,
        gemini_model      = os.getenv("GEMINI_MODEL", "").strip() or DEFAULT_MODEL,
        temperature       = _env_float("GEMINI_TEMPERATURE", 0.1),
        max_output_tokens = _env_int("GEMINI_MAX_OUTPUT_TOKENS", 3000),
        host              = os.getenv("HOST", "0.0.0.0"),
        port              = _env_int("PORT", 3001),
        max_body_mb       = _env_int("MAX_BODY_MB", 50),
        log_level         = os.getenv("LOG_LEVEL", "INFO").upper(),
        data_dir          = os.getenv("DATA_DIR", "data"),
        extraction        = ExtractionConfig(
            max_depth=_env_int("EXTRACTION_MAX_DEPTH", DEFAULT_MAX_DEPTH),
        ),
    )
