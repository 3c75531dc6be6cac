"""
Shared types and base class for vision providers.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from extraction.types import TargetSchema

logger = logging.getLogger(__name__)

# ── Prompt & response schema ──────────────────────────────────────────────────
# Content is product copy; the extraction engine treats it as opaque.

SYSTEM_PROMPT = """Du bist Experte für Mülltrennung in Deutschland. Analysiere das Foto und gib JSON zurück:
{
  "names": ["maximal 2 Objekte"],
  "materials": ["Materialien der Objekte"],
  "material_colors": ["HEX-Farben der Materialien nach Mülltrennung:
    Gelber Sack: #F9C846, Blauer Mülleimer (Papier): #05B2DC,
    Brauner Mülleimer (Bio): #643924, Restmüll: #2E3138,
    Glascontainer: #869D7A, Pfand: #73915D, Sperrmüll: #85583D,
    Sondermüll: #B22222, Bauschutt: #A9A9A9, Textilien: #FF69B4"
  ],
  "description": "Kurzbeschreibung, wo dieser Gegenstand entsorgt oder abgegeben werden soll (inkl. Pfand-Rückgabe, Sperrmüll, Sondermüll usw.), unter Berücksichtigung der Details; muss ein <span style=\\"background-color:#HEX;\\">Container</span> sein; maximal 20 Wörter. Gib nur JSON zurück, ohne zusätzliche Erklärungen."
}"""

RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "names": {
            "type": "ARRAY",
            "description": "Namen der Gegenstände (maximal 2).",
            "items": {"type": "STRING"},
            "max_items": 2,
        },
        "materials": {
            "type": "ARRAY",
            "description": "Materialien der entsprechenden Gegenstände "
                           "(in der gleichen Reihenfolge, maximal 2).",
            "items": {"type": "STRING"},
        },
        "material_colors": {
            "type": "ARRAY",
            "description": "Nur HEX-Farben für jedes Material, in der gleichen "
                           "Reihenfolge wie materials.",
            "items": {"type": "STRING", "format": "hex-color"},
        },
        "description": {
            "type": "STRING",
            "description": "Kurze Beschreibung, wo dieser Gegenstand entsorgt oder "
                           "abgegeben werden soll, inklusive Pfand, Sperrmüll, "
                           "Sondermüll, Bio usw. Verwende <span/> mit background-color.",
        },
    },
    "required": ["names", "materials", "material_colors", "description"],
}


# ── Shared result type ─────────────────────────────────────────────────────────

@dataclass
class ProviderResult:
    """Result from a single vision provider call."""
    provider_name: str          # e.g. "google/gemini-2.5-flash"
    model_id: str
    classification: TargetSchema
    strategy: str               # extraction strategy that recovered it
    latency_ms: int             # wall-clock time for the model call
    input_tokens: int
    output_tokens: int
    cost_usd: float             # estimated cost

    @property
    def cost_str(self) -> str:
        if self.cost_usd < 0.001:
            return f"${self.cost_usd * 1000:.3f}m"   # show in milli-dollars
        return f"${self.cost_usd:.4f}"


# ── Abstract base ──────────────────────────────────────────────────────────────

class VisionProvider(ABC):
    """Base class all vision providers must implement."""

    name: str           # e.g. "google"
    model_id: str       # e.g. "gemini-2.5-flash"
    cost_per_1k_input_tokens: float
    cost_per_1k_output_tokens: float
    # Extra per-image cost for vision input
    cost_per_image: float = 0.0

    @abstractmethod
    async def analyse(self, image_bytes: bytes, mime_type: str) -> ProviderResult:
        """
        Classify the photographed object.
        Raises ExtractionError when no classification can be recovered.
        """
        ...

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            self.cost_per_image
            + input_tokens / 1000 * self.cost_per_1k_input_tokens
            + output_tokens / 1000 * self.cost_per_1k_output_tokens
        )
