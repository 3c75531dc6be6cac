"""
Node model — the untrusted response payload as a plain JSON-like graph.

A node is one of: str, int/float, bool, None, list/tuple, dict with str keys.
Provider SDK objects are normalised into that shape by to_node(); plain
dict/list graphs pass through untouched so shared and cyclic references keep
their identity (the traversals track visited composites by id()).
"""
from __future__ import annotations

import enum
import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Keys of the target record and the variant each one must carry
TARGET_SEQUENCE_KEYS = ("names", "materials", "material_colors")
TARGET_STRING_KEY = "description"


class NodeKind(enum.Enum):
    STRING   = "string"
    NUMBER   = "number"
    BOOL     = "bool"
    NULL     = "null"
    SEQUENCE = "sequence"
    MAPPING  = "mapping"


COMPOSITE_KINDS = (NodeKind.SEQUENCE, NodeKind.MAPPING)


def kind_of(value: Any) -> NodeKind:
    """Classify value into the closed node variant. Raises TypeError otherwise."""
    if isinstance(value, str):
        return NodeKind.STRING
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return NodeKind.BOOL
    if isinstance(value, (int, float)):
        return NodeKind.NUMBER
    if value is None:
        return NodeKind.NULL
    if isinstance(value, (list, tuple)):
        return NodeKind.SEQUENCE
    if isinstance(value, dict):
        return NodeKind.MAPPING
    raise TypeError(f"Not a node value: {type(value).__name__}")


def kind_or_none(value: Any) -> Optional[NodeKind]:
    """Like kind_of(), but foreign leaf types classify as None instead of raising."""
    try:
        return kind_of(value)
    except TypeError:
        return None


def is_target_shape(node: Any) -> bool:
    """
    True when node is a mapping carrying names/materials/material_colors as
    sequences and description as a string. Extra keys are allowed.
    """
    if not isinstance(node, dict):
        return False
    for key in TARGET_SEQUENCE_KEYS:
        if key not in node or not isinstance(node[key], (list, tuple)):
            return False
    return isinstance(node.get(TARGET_STRING_KEY), str)


def parse_json(text: str) -> tuple[bool, Any]:
    """
    Strict JSON parse that never raises.
    Returns (True, value) on success, (False, None) otherwise. A parsed
    `null` is (True, None), so callers must look at the flag.
    """
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


def looks_like_json(text: str) -> bool:
    """Trimmed text is bracketed as an object or an array."""
    s = text.strip()
    return (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]"))


def to_node(value: Any) -> Any:
    """
    Normalise a provider response object into a node graph.

    - node values (dict/list/str/...) are returned as-is, without copying
    - pydantic models (google-genai responses) are dumped via model_dump()
    - objects with to_dict() are dumped via to_dict()
    - enums collapse to their value, bytes decode as latin-1
    Anything else becomes its str() so the graph stays closed.
    """
    if kind_or_none(value) is not None:
        return value
    if isinstance(value, enum.Enum):
        return to_node(value.value)
    if hasattr(value, "model_dump"):
        return _normalise(value.model_dump(mode="json", exclude_none=True))
    if hasattr(value, "to_dict"):
        return _normalise(value.to_dict())
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    logger.debug("Coercing unknown payload type %s to string", type(value).__name__)
    return str(value)


def _normalise(value: Any) -> Any:
    """Recursively apply to_node() to a freshly dumped (hence acyclic) structure."""
    if isinstance(value, dict):
        return {str(k): _normalise(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalise(v) for v in value]
    return to_node(value)


def stringify(value: Any) -> str:
    """Render a leaf as text: strings unchanged, other values as JSON."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)
