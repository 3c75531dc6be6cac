"""
Heuristic field mapper — last per-candidate attempt, for answers that carry
the right information under different key names ("ObjectName",
"MaterialType", "wo_entsorgt", ...).
"""
from __future__ import annotations

from typing import Any, Optional

from extraction.node import is_target_shape, stringify
from extraction.types import TargetSchema

# (field, keywords) in field priority; matched as case-insensitive substrings
FIELD_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("names",           ("name", "names", "object")),
    ("materials",       ("material", "materials")),
    ("material_colors", ("color", "hex")),
    ("description",     ("description", "where", "entsorgt")),
)


def _coerce(field: str, value: Any):
    """Coerced value for field, or None when the value can't fill it."""
    if field == "description":
        return value if isinstance(value, str) and value else None
    if isinstance(value, (list, tuple)):
        return tuple(stringify(v) for v in value)
    if isinstance(value, str):
        return (value,)
    return None


def map_fields(mapping: Any) -> Optional[TargetSchema]:
    """
    Best-effort reassignment of loosely named keys onto the target record.

    Each field takes the first key whose name matches one of its keywords and
    whose value is usable. The result is accepted only when a description was
    found and at least one of names/materials; missing sequences default to
    empty. Returns None when the mapping doesn't qualify.
    """
    if not isinstance(mapping, dict):
        return None
    if is_target_shape(mapping):
        return TargetSchema.from_node(mapping)

    resolved: dict[str, Any] = {}
    for key, value in mapping.items():
        lower = str(key).lower()
        for field, keywords in FIELD_KEYWORDS:
            if field in resolved or not any(k in lower for k in keywords):
                continue
            coerced = _coerce(field, value)
            if coerced is not None:
                resolved[field] = coerced

    if "description" not in resolved:
        return None
    if "names" not in resolved and "materials" not in resolved:
        return None

    return TargetSchema(
        names           = resolved.get("names", ()),
        materials       = resolved.get("materials", ()),
        material_colors = resolved.get("material_colors", ()),
        description     = resolved["description"],
    )
