"""
Response extraction engine: recovers the waste-sorting classification from a
model response whose exact shape the caller doesn't control.
"""
from extraction.orchestrator import extract
from extraction.types import (
    Candidate,
    ErrorKind,
    ExtractionError,
    ExtractionResult,
    Failure,
    FinishState,
    ModelResponse,
    Success,
    TargetSchema,
)

__all__ = [
    "Candidate",
    "ErrorKind",
    "ExtractionError",
    "ExtractionResult",
    "Failure",
    "FinishState",
    "ModelResponse",
    "Success",
    "TargetSchema",
    "extract",
]
