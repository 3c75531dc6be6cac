"""
main.py — Single entry point.

Runs the analysis API in one asyncio event loop until SIGINT/SIGTERM.

Architecture:
  asyncio event loop
    └── aiohttp web server  (POST /api/analyze-image, GET /health)
          └── GeminiProvider → extraction engine
"""
import asyncio
import logging
import signal
import sys
from pathlib import Path

from config import ServiceConfig, load_config
from server import start_server

logger = logging.getLogger(__name__)


def setup_logging(config: ServiceConfig) -> None:
    # Log file lives in DATA_DIR so a single volume mount captures it
    data_dir = Path(config.data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=getattr(logging, config.log_level, logging.INFO),
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(str(data_dir / "server.log"), encoding="utf-8"),
        ],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


async def run(config: ServiceConfig) -> None:
    if not config.is_configured:
        logger.warning("GEMINI_API_KEY is not set — /api/analyze-image will report ConfigurationMissing")

    runner = await start_server(config)

    stop_event = asyncio.Event()

    def _stop(*_):
        logger.info("Shutdown signal received.")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _stop)
        except (NotImplementedError, RuntimeError):
            # Windows doesn't support add_signal_handler for all signals
            pass

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down…")
        await runner.cleanup()
        logger.info("Goodbye.")


def main() -> None:
    config = load_config()
    setup_logging(config)
    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
