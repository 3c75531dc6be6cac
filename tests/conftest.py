"""
Shared pytest fixtures and payload builders.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ExtractionConfig, ServiceConfig  # noqa: E402


def make_record(**overrides) -> dict:
    """A conforming classification in wire shape."""
    record = {
        "names":           ["Flasche"],
        "materials":       ["Glas"],
        "material_colors": ["#869D7A"],
        "description":     'Ab in den <span style="background-color:#869D7A;">Glascontainer</span>.',
    }
    record.update(overrides)
    return record


@pytest.fixture
def record() -> dict:
    return make_record()


@pytest.fixture
def extraction_config() -> ExtractionConfig:
    return ExtractionConfig()


@pytest.fixture
def service_config() -> ServiceConfig:
    return ServiceConfig(gemini_api_key="test-key", gemini_model="gemini-2.5-flash")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's real .env / shell from leaking into config tests."""
    for name in (
        "GEMINI_API_KEY", "GEMINI_MODEL", "GEMINI_TEMPERATURE", "GEMINI_MAX_OUTPUT_TOKENS",
        "EXTRACTION_MAX_DEPTH", "HOST", "PORT", "MAX_BODY_MB", "LOG_LEVEL", "DATA_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
