"""
server.py — HTTP API used by the camera frontend.

Runs as an aiohttp web server.

Endpoints:
  POST /api/analyze-image  → {"imageData": "data:image/jpeg;base64,..."}
                             200 {"success": true, "data": {names, materials,
                                  material_colors, description}}
  GET  /health             → {"status": "ok", "timestamp": "<ISO-8601 UTC>"}

Error responses carry {"error", "message"} and, for classified failures,
the ErrorKind under "kind":
  400  missing imageData / MalformedInput
  500  ConfigurationMissing, unexpected errors
  502  upstream model error, Truncated / NoExtractableContent / Unknown
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web
from google.genai import errors as genai_errors

from config import ServiceConfig
from extraction import ErrorKind, ExtractionError
from image_data import decode_data_uri
from providers.base import VisionProvider

logger = logging.getLogger(__name__)

CONFIG_KEY   = web.AppKey("config", ServiceConfig)
PROVIDER_KEY = web.AppKey("provider", dict)   # {"provider": VisionProvider | None}

_STATUS_BY_KIND = {
    ErrorKind.MALFORMED_INPUT:       400,
    ErrorKind.CONFIGURATION_MISSING: 500,
}


def _get_provider(app: web.Application) -> VisionProvider:
    """Provider injected at build time, or a GeminiProvider created on first use."""
    slot = app[PROVIDER_KEY]
    provider = slot.get("provider")
    if provider is None:
        from providers.gemini_provider import GeminiProvider
        provider = GeminiProvider(app[CONFIG_KEY])
        slot["provider"] = provider
        logger.info("Loaded provider: %s", provider.full_name)
    return provider


# ── Middleware ─────────────────────────────────────────────────────────────────

@web.middleware
async def error_middleware(request: web.Request, handler):
    """Last resort: anything unhandled becomes a JSON 500."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return web.json_response(
            {"error": "Internal server error", "message": str(exc)},
            status=500,
        )


# ── Request handlers ───────────────────────────────────────────────────────────

async def handle_analyze(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except ValueError:
        body = None
    image_data = body.get("imageData") if isinstance(body, dict) else None

    if not image_data:
        return web.json_response(
            {"error": "Missing imageData", "message": "Please provide imageData in the request body"},
            status=400,
        )

    config = request.app[CONFIG_KEY]
    if request.app[PROVIDER_KEY].get("provider") is None and not config.is_configured:
        return web.json_response(
            {
                "error":   "Service not configured",
                "kind":    ErrorKind.CONFIGURATION_MISSING.value,
                "message": "Gemini service is not properly configured",
            },
            status=500,
        )

    try:
        image_bytes, mime_type = decode_data_uri(image_data)
        provider = _get_provider(request.app)
        result = await provider.analyse(image_bytes, mime_type)
    except ExtractionError as exc:
        logger.warning("Analysis failed [%s]: %s", exc.kind.value, exc.message)
        return web.json_response(
            {"error": "Analysis failed", **exc.to_dict()},
            status=_STATUS_BY_KIND.get(exc.kind, 502),
        )
    except genai_errors.APIError as exc:
        logger.error("Gemini API request failed: %s", exc)
        return web.json_response(
            {"error": "Analysis failed", "message": str(exc)},
            status=502,
        )

    return web.json_response({"success": True, "data": result.classification.to_dict()})


async def handle_health(request: web.Request) -> web.Response:
    """Health check for uptime monitors / liveness probes."""
    return web.json_response({
        "status":    "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


# ── App factory ────────────────────────────────────────────────────────────────

def build_web_app(
    config: ServiceConfig,
    provider: Optional[VisionProvider] = None,
) -> web.Application:
    app = web.Application(
        middlewares=[error_middleware],
        client_max_size=config.max_body_bytes,
    )
    app[CONFIG_KEY]   = config
    app[PROVIDER_KEY] = {"provider": provider}
    app.router.add_get("/health",             handle_health)
    app.router.add_post("/api/analyze-image", handle_analyze)
    return app


async def start_server(config: ServiceConfig) -> web.AppRunner:
    """Start the web server. Returns runner so caller can shut it down cleanly."""
    app    = build_web_app(config)
    runner = web.AppRunner(app, access_log=logger)
    await runner.setup()
    site = web.TCPSite(runner, config.host, config.port)
    await site.start()
    logger.info(
        "🚀 Backend listening on http://%s:%d  (model: %s, configured: %s)",
        config.host, config.port, config.gemini_model, config.is_configured,
    )
    return runner
