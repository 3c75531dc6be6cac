"""
Tests for extraction/types.py.

Covers:
  - TargetSchema: from_node / to_dict round trip, immutability, shape errors
  - FinishState.from_reason(): strings, SDK-style enums, missing values
  - ModelResponse.from_payload(): camelCase and snake_case candidates
  - ExtractionError / Failure error surface
"""
from __future__ import annotations

import dataclasses
import enum

import pytest

from conftest import make_record
from extraction.types import (
    Candidate, ErrorKind, ExtractionError, Failure, FinishState, ModelResponse, TargetSchema,
)


class TestTargetSchema:
    def test_round_trip_identity(self):
        rec = make_record(names=["Flasche", "Deckel"], materials=["Glas", "Metall"],
                          material_colors=["#869D7A", "#F9C846"])
        assert TargetSchema.from_node(rec).to_dict() == rec

    def test_extra_keys_dropped_from_wire_shape(self):
        rec = make_record(confidence="high")
        assert "confidence" not in TargetSchema.from_node(rec).to_dict()

    def test_values_passed_through_unvalidated(self):
        rec = make_record(names=["a", "b", "c"], material_colors=["not-a-hex"])
        schema = TargetSchema.from_node(rec)
        assert schema.names == ("a", "b", "c")
        assert schema.material_colors == ("not-a-hex",)

    def test_frozen(self):
        schema = TargetSchema.from_node(make_record())
        with pytest.raises(dataclasses.FrozenInstanceError):
            schema.description = "changed"

    def test_non_conforming_raises(self):
        with pytest.raises(ValueError):
            TargetSchema.from_node({"names": ["x"]})


class TestFinishState:
    @pytest.mark.parametrize("reason, state", [
        ("STOP",       FinishState.COMPLETED),
        ("stop",       FinishState.COMPLETED),
        ("MAX_TOKENS", FinishState.TRUNCATED_BY_LENGTH),
        ("SAFETY",     FinishState.OTHER),
        (None,         FinishState.OTHER),
        (3,            FinishState.OTHER),
    ])
    def test_reasons(self, reason, state):
        assert FinishState.from_reason(reason) is state

    def test_sdk_enum_member(self):
        class FinishReason(enum.Enum):
            MAX_TOKENS = "MAX_TOKENS"
        assert FinishState.from_reason(FinishReason.MAX_TOKENS) is FinishState.TRUNCATED_BY_LENGTH


class TestModelResponseFromPayload:
    def test_camel_case_payload(self):
        content = {"parts": [{"text": "{}"}]}
        payload = {"candidates": [{"content": content, "finishReason": "MAX_TOKENS"}]}
        response = ModelResponse.from_payload(payload)
        assert response.raw is payload
        assert response.candidates == [Candidate(content, FinishState.TRUNCATED_BY_LENGTH)]

    def test_snake_case_payload(self):
        payload = {"candidates": [{"content": {"parts": []}, "finish_reason": "STOP"}]}
        assert ModelResponse.from_payload(payload).candidates[0].finish_state is FinishState.COMPLETED

    def test_candidate_without_content_is_its_own_content(self):
        item = {"text": "hello", "finishReason": "STOP"}
        response = ModelResponse.from_payload({"candidates": [item]})
        assert response.candidates[0].content is item

    @pytest.mark.parametrize("content", [{}, []])
    def test_empty_container_content_kept(self, content):
        response = ModelResponse.from_payload({"candidates": [{"content": content, "finishReason": "STOP"}]})
        assert response.candidates[0].content is content

    @pytest.mark.parametrize("content", [None, ""])
    def test_null_or_blank_content_falls_back_to_item(self, content):
        item = {"content": content, "text": "hello", "finishReason": "STOP"}
        response = ModelResponse.from_payload({"candidates": [item]})
        assert response.candidates[0].content is item

    def test_no_candidates(self):
        response = ModelResponse.from_payload({"promptFeedback": {"blockReason": "SAFETY"}})
        assert response.candidates == []

    def test_non_mapping_payload(self):
        response = ModelResponse.from_payload("garbage")
        assert response.candidates == []
        assert response.raw == "garbage"


class TestErrors:
    def test_error_surface(self):
        err = ExtractionError(ErrorKind.MALFORMED_INPUT, "bad data uri")
        assert err.to_dict() == {"kind": "MalformedInput", "message": "bad data uri"}
        assert str(err) == "bad data uri"

    def test_failure_raises_matching_error(self):
        failure = Failure(ErrorKind.TRUNCATED, "cut off")
        with pytest.raises(ExtractionError) as info:
            failure.raise_error()
        assert info.value.kind is ErrorKind.TRUNCATED
