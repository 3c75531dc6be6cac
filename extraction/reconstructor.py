"""
String reconstructor — for answers the model split across several text
fields (e.g. one JSON document spread over multiple `parts[*].text`).

collect() flattens every reachable string leaf in discovery order, looking
at the usual payload-carrying keys first. reconstruct() glues the fragments
back together and parses the result.

Every node is visited once: the generic pass over a mapping skips the
privileged keys already handled, and composites are tracked by identity.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from config import ExtractionConfig
from extraction.node import NodeKind, kind_or_none, parse_json

logger = logging.getLogger(__name__)

# Field names SDKs commonly use for model output, probed first and in this order
PRIVILEGED_KEYS = (
    "text",
    "message",
    "content",
    "parts",
    "output",
    "payload",
    "value",
    "structuredOutput",
)


class _Collector:

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self.out: list[str] = []
        self._seen: set[int] = set()

    def visit(self, node: Any, depth: int) -> None:
        if depth > self.max_depth:
            return

        kind = kind_or_none(node)
        if kind is NodeKind.STRING:
            self.out.append(node)
            return
        if kind not in (NodeKind.SEQUENCE, NodeKind.MAPPING):
            return

        if id(node) in self._seen:
            return
        self._seen.add(id(node))

        if kind is NodeKind.SEQUENCE:
            for item in node:
                self.visit(item, depth + 1)
            return

        for key in PRIVILEGED_KEYS:
            if key in node:
                self.visit(node[key], depth + 1)
        for key, value in node.items():
            if key in PRIVILEGED_KEYS:
                continue
            self.visit(value, depth + 1)


def collect(node: Any, config: Optional[ExtractionConfig] = None) -> list[str]:
    """All string leaves under node, privileged keys first, each leaf once."""
    collector = _Collector((config or ExtractionConfig()).max_depth)
    collector.visit(node, 0)
    return collector.out


def reconstruct(strings: list[str]) -> Optional[Any]:
    """
    Join trimmed fragments without a separator and parse them.
    Tries the slice from the first '{' to the last '}' first, then the
    whole joined text. Returns the parsed value, or None.
    """
    joined = "".join(s.strip() for s in strings)
    if not joined:
        return None

    start = joined.find("{")
    end   = joined.rfind("}")
    if start != -1 and end > start:
        ok, value = parse_json(joined[start:end + 1])
        if ok:
            return value
        logger.debug("Bracket slice of %d joined chars is not valid JSON", end + 1 - start)

    ok, value = parse_json(joined)
    return value if ok else None
