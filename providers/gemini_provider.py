"""
Google Gemini vision provider — uses the google-genai SDK.

The model is asked for JSON under a response schema, but the answer still
comes back in whatever shape the SDK hands us (parsed object, text split over
several parts, or nothing when truncated). The response is normalised into a
node graph and handed to the extraction engine; an unrecoverable response is
raised as ExtractionError.

Pricing (per 1M tokens):
  gemini-2.5-pro:        $1.25 input,  $10.00 output
  gemini-2.5-flash:      $0.30 input,  $2.50  output
  gemini-2.5-flash-lite: $0.10 input,  $0.40  output
  gemini-2.0-flash:      $0.10 input,  $0.40  output
Images are billed as input tokens.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

from google import genai
from google.genai import types as genai_types

from config import ServiceConfig
from extraction import ErrorKind, ExtractionError, Failure, ModelResponse, extract
from extraction.node import to_node
from image_data import sniff_mime
from providers.base import RESPONSE_SCHEMA, SYSTEM_PROMPT, ProviderResult, VisionProvider

logger = logging.getLogger(__name__)

_PRICING: dict[str, tuple[float, float]] = {
    # model_id: ($/1k_input_tokens, $/1k_output_tokens)
    "gemini-2.5-pro":        (0.00125, 0.01),
    "gemini-2.5-flash":      (0.0003,  0.0025),
    "gemini-2.5-flash-lite": (0.0001,  0.0004),
    "gemini-2.0-flash":      (0.0001,  0.0004),
}


class GeminiProvider(VisionProvider):

    def __init__(self, config: ServiceConfig, client: Optional[genai.Client] = None):
        if not config.gemini_api_key:
            raise ExtractionError(
                ErrorKind.CONFIGURATION_MISSING,
                "GEMINI_API_KEY is not set in environment",
            )
        self.name     = "google"
        self.model_id = config.gemini_model
        self._config  = config
        self._client  = client or genai.Client(api_key=config.gemini_api_key)

        rates = _PRICING.get(self.model_id, _PRICING["gemini-2.5-flash"])
        self.cost_per_1k_input_tokens  = rates[0]
        self.cost_per_1k_output_tokens = rates[1]

    def _generation_config(self) -> genai_types.GenerateContentConfig:
        return genai_types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            temperature=self._config.temperature,
            max_output_tokens=self._config.max_output_tokens,
        )

    async def analyse(self, image_bytes: bytes, mime_type: Optional[str] = None) -> ProviderResult:
        mime = mime_type or sniff_mime(image_bytes)
        t0 = time.monotonic()

        response = await self._client.aio.models.generate_content(
            model=self.model_id,
            contents=[
                genai_types.Content(
                    role="user",
                    parts=[genai_types.Part.from_bytes(data=image_bytes, mime_type=mime)],
                ),
            ],
            config=self._generation_config(),
        )

        latency_ms = int((time.monotonic() - t0) * 1000)

        usage         = response.usage_metadata
        input_tokens  = getattr(usage, "prompt_token_count", None) or 0
        output_tokens = getattr(usage, "candidates_token_count", None) or 0

        payload = to_node(response)
        result  = extract(ModelResponse.from_payload(payload), self._config.extraction)
        if isinstance(result, Failure):
            logger.error("[%s] %s: %s", self.full_name, result.kind.value, result.message)
            result.raise_error()

        cost = self.estimate_cost(input_tokens, output_tokens)
        provider_result = ProviderResult(
            provider_name  = self.full_name,
            model_id       = self.model_id,
            classification = result.value,
            strategy       = result.strategy,
            latency_ms     = latency_ms,
            input_tokens   = input_tokens,
            output_tokens  = output_tokens,
            cost_usd       = cost,
        )
        logger.info(
            "[%s] OK — strategy=%s cost=%s latency=%dms",
            self.full_name, provider_result.strategy, provider_result.cost_str, latency_ms,
        )
        return provider_result
