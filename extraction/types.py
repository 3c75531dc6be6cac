"""
Shared types for the extraction engine: the target record, the candidate
and response containers fed into it, and the result / error surface.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from extraction.node import TARGET_STRING_KEY, is_target_shape, stringify


# ── Target record ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TargetSchema:
    """
    Waste-sorting classification of a photographed object.

    The three sequences are positionally aligned (material_colors[i] is the
    bin colour of materials[i]) and are kept exactly in the order the source
    produced them. Values are passed through, not validated.
    """
    names: tuple[str, ...]
    materials: tuple[str, ...]
    material_colors: tuple[str, ...]
    description: str            # may carry inline <span> markup

    @classmethod
    def from_node(cls, node: Any) -> "TargetSchema":
        """Build from a conforming mapping. Raises ValueError otherwise."""
        if not is_target_shape(node):
            raise ValueError("Mapping does not match the target schema shape")
        return cls(
            names           = _as_strings(node["names"]),
            materials       = _as_strings(node["materials"]),
            material_colors = _as_strings(node["material_colors"]),
            description     = node[TARGET_STRING_KEY],
        )

    def to_dict(self) -> dict:
        """Wire shape consumed by the frontend."""
        return {
            "names":           list(self.names),
            "materials":       list(self.materials),
            "material_colors": list(self.material_colors),
            "description":     self.description,
        }


def _as_strings(seq) -> tuple[str, ...]:
    return tuple(stringify(v) for v in seq)


# ── Upstream response ─────────────────────────────────────────────────────────

class FinishState(enum.Enum):
    COMPLETED           = "completed"
    TRUNCATED_BY_LENGTH = "truncated_by_length"
    OTHER               = "other"

    @classmethod
    def from_reason(cls, reason: Any) -> "FinishState":
        """
        Map a provider finish reason onto the three states we care about.
        Accepts raw strings ("STOP", "MAX_TOKENS") or SDK enum members.
        """
        if isinstance(reason, enum.Enum):
            reason = reason.value
        if not isinstance(reason, str):
            return cls.OTHER
        return _FINISH_REASONS.get(reason.strip().upper(), cls.OTHER)


_FINISH_REASONS = {
    "STOP":                FinishState.COMPLETED,
    "COMPLETED":           FinishState.COMPLETED,
    "MAX_TOKENS":          FinishState.TRUNCATED_BY_LENGTH,
    "TRUNCATED_BY_LENGTH": FinishState.TRUNCATED_BY_LENGTH,
}


@dataclass
class Candidate:
    """One alternative answer from the model call."""
    content: Any                # node graph
    finish_state: FinishState = FinishState.OTHER


@dataclass
class ModelResponse:
    """All candidates of one model call plus the raw response graph."""
    candidates: list[Candidate] = field(default_factory=list)
    raw: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ModelResponse":
        """
        Build from a Gemini-shaped node graph:
          {"candidates": [{"content": {...}, "finishReason": "STOP"}, ...], ...}
        A candidate without content is used as its own content.
        """
        candidates: list[Candidate] = []
        raw_candidates = payload.get("candidates") if isinstance(payload, dict) else None
        if isinstance(raw_candidates, (list, tuple)):
            for item in raw_candidates:
                if isinstance(item, dict):
                    content = item.get("content")
                    if content is None or content == "":
                        content = item
                    reason = item.get("finishReason", item.get("finish_reason"))
                else:
                    content, reason = item, None
                candidates.append(Candidate(content, FinishState.from_reason(reason)))
        return cls(candidates=candidates, raw=payload)


# ── Errors & results ──────────────────────────────────────────────────────────

class ErrorKind(enum.Enum):
    TRUNCATED              = "Truncated"
    NO_EXTRACTABLE_CONTENT = "NoExtractableContent"
    UNKNOWN                = "Unknown"
    # raised by the transport / decoding layer and passed through unchanged
    MALFORMED_INPUT        = "MalformedInput"
    CONFIGURATION_MISSING  = "ConfigurationMissing"


class ExtractionError(Exception):
    """Classified failure of the analysis pipeline."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}

    def __repr__(self) -> str:
        return f"ExtractionError({self.kind.value}: {self.message})"


@dataclass(frozen=True)
class Success:
    value: TargetSchema
    strategy: str                       # which strategy recovered it
    candidate_index: Optional[int] = None   # None for the whole-response scan


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str

    def to_error(self) -> ExtractionError:
        return ExtractionError(self.kind, self.message)

    def raise_error(self) -> None:
        raise self.to_error()


ExtractionResult = Union[Success, Failure]
