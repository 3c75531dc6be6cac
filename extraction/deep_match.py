"""
Deep match finder — depth-first hunt for a mapping that already has the
target shape, anywhere in the payload graph.

Priority at each node:
  1. string that looks like JSON → parse it and search the parsed value
  2. mapping with the target shape → match, stop here
  3. sequence → elements in order, first hit wins
  4. other mapping → values in key-insertion order, first hit wins
  5. scalars → no match

A parsed string leaf only counts when it contains a conforming mapping;
syntactically valid JSON of any other shape is a dead end, not a match.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from config import ExtractionConfig
from extraction.node import (
    COMPOSITE_KINDS, NodeKind, is_target_shape, kind_or_none, looks_like_json, parse_json,
)

logger = logging.getLogger(__name__)


class _DeepMatch:
    """One search. Visited composites are keyed by id() and kept alive here."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self._seen: dict[int, Any] = {}
        self._too_deep = False

    def visit(self, node: Any, depth: int) -> Optional[dict]:
        if depth > self.max_depth:
            if not self._too_deep:
                logger.warning("Payload deeper than %d levels, pruning search", self.max_depth)
                self._too_deep = True
            return None

        kind = kind_or_none(node)

        if kind is NodeKind.STRING:
            if not looks_like_json(node):
                return None
            ok, parsed = parse_json(node.strip())
            if not ok:
                return None
            return self.visit(parsed, depth + 1)

        if kind not in COMPOSITE_KINDS:
            return None

        if id(node) in self._seen:
            return None
        self._seen[id(node)] = node

        if kind is NodeKind.MAPPING:
            if is_target_shape(node):
                return node
            children = node.values()
        else:
            children = node

        for child in children:
            found = self.visit(child, depth + 1)
            if found is not None:
                return found
        return None


def find(node: Any, config: Optional[ExtractionConfig] = None) -> Optional[dict]:
    """Return the first target-shaped mapping reachable from node, or None."""
    max_depth = (config or ExtractionConfig()).max_depth
    return _DeepMatch(max_depth).visit(node, 0)
