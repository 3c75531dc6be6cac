"""
Extraction orchestrator — turns one model response into a TargetSchema or a
classified failure.

Per candidate, first hit wins:
  deep_match     → a target-shaped mapping anywhere in the content
  reconstructed  → string leaves joined back into one JSON document
  field_mapper   → loosely named keys mapped onto the schema (mappings only)

If no candidate yields anything, the whole raw response is searched once more
(response_scan). Only then is a Failure reported, classified from the first
candidate's finish state:
  truncated_by_length → Truncated
  completed           → NoExtractableContent
  anything else       → Unknown

Pure and synchronous: no I/O, all traversal state lives in one call.
"""
from __future__ import annotations

import logging
import reprlib
from typing import Any, Callable, Optional

from config import ExtractionConfig
from extraction import deep_match, field_mapper, reconstructor
from extraction.node import NodeKind, kind_or_none
from extraction.types import (
    ErrorKind, ExtractionResult, Failure, FinishState, ModelResponse, Success, TargetSchema,
)

logger = logging.getLogger(__name__)


def _attempt(strategy: str, fn: Callable[[], Optional[Any]]) -> Optional[Any]:
    """Run one strategy; a strategy blowing up counts as a miss."""
    try:
        return fn()
    except (TypeError, ValueError, RecursionError) as exc:
        logger.debug("Strategy %s raised %s: %s; treating as no match",
                     strategy, type(exc).__name__, exc)
        return None


def _from_deep_match(content: Any, config: ExtractionConfig) -> Optional[TargetSchema]:
    found = deep_match.find(content, config)
    return TargetSchema.from_node(found) if found is not None else None


def _from_reconstruction(content: Any, config: ExtractionConfig) -> Optional[TargetSchema]:
    strings = reconstructor.collect(content, config)
    if not strings:
        return None
    document = reconstructor.reconstruct(strings)
    if document is None:
        return None
    # The rebuilt document must itself contain the target shape
    found = deep_match.find(document, config)
    return TargetSchema.from_node(found) if found is not None else None


def _from_field_mapper(content: Any, config: ExtractionConfig) -> Optional[TargetSchema]:
    if kind_or_none(content) is not NodeKind.MAPPING:
        return None
    return field_mapper.map_fields(content)


# Bounded rendering of untrusted payloads for logs
_PREVIEW = reprlib.Repr()
_PREVIEW.maxlevel  = 4
_PREVIEW.maxstring = 200
_PREVIEW.maxother  = 200
_PREVIEW.maxdict   = 10
_PREVIEW.maxlist   = 10


def _preview(node: Any) -> str:
    return _PREVIEW.repr(node)[:500]


_STRATEGIES: tuple[tuple[str, Callable[[Any, ExtractionConfig], Optional[TargetSchema]]], ...] = (
    ("deep_match",    _from_deep_match),
    ("reconstructed", _from_reconstruction),
    ("field_mapper",  _from_field_mapper),
)


def _classify_failure(response: ModelResponse) -> Failure:
    if not response.candidates:
        state = FinishState.OTHER
        detail = "Model returned no candidates"
    else:
        state = response.candidates[0].finish_state
        detail = "Model returned no parsable JSON/text"

    if state is FinishState.TRUNCATED_BY_LENGTH:
        return Failure(
            ErrorKind.TRUNCATED,
            f"{detail} and output was truncated (finish state: {state.value}). "
            "Increase GEMINI_MAX_OUTPUT_TOKENS or shrink the response schema.",
        )
    if state is FinishState.COMPLETED:
        return Failure(
            ErrorKind.NO_EXTRACTABLE_CONTENT,
            f"Model finished normally (finish state: {state.value}) "
            "but no usable classification was found in the response.",
        )
    return Failure(ErrorKind.UNKNOWN, f"{detail} (finish state: {state.value}).")


def extract(response: ModelResponse, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
    """Recover the classification from response, or explain why not."""
    config = config or ExtractionConfig()

    for index, candidate in enumerate(response.candidates):
        for name, strategy in _STRATEGIES:
            value = _attempt(name, lambda: strategy(candidate.content, config))
            if value is not None:
                logger.info("Classification recovered via %s (candidate %d)", name, index)
                return Success(value, name, index)
            logger.debug("Strategy %s found nothing in candidate %d", name, index)

    logger.debug("Candidates exhausted, scanning the whole response")
    value = _attempt("response_scan", lambda: _from_deep_match(response.raw, config))
    if value is not None:
        logger.info("Classification recovered via response_scan")
        return Success(value, "response_scan", None)

    failure = _classify_failure(response)
    logger.warning("Extraction failed [%s]: %s", failure.kind.value, failure.message)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Unparsable response: %s", _preview(response.raw))
    return failure
