"""Main entry point for the DuoChat debate engine."""

import argparse
import asyncio
import logging
import os
from pathlib import Path

from duochat.config.settings import AppConfig, get_default_config
from duochat.debate_engine.core import DebateEngine

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the console and the web server."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def start_web_server(config: AppConfig) -> None:
    """Start the FastAPI web server for ``config``."""
    import uvicorn

    from duochat.web.api import create_app
    from duochat.web.session_manager import SessionManager

    port = int(os.environ.get("PORT", 8000))
    app = create_app(SessionManager(config))

    print("Starting DuoChat Web Server...")
    print(f"API Documentation: http://localhost:{port}/docs")
    print(f"WebSocket: ws://localhost:{port}/ws/session")

    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info", access_log=True)


async def run_console_debate(
    config: AppConfig, topic: str | None = None, turns: int = 4
) -> DebateEngine:
    """Run a debate for ``turns`` turns, printing each utterance as it lands."""

    async def print_event(event_type: str, data: dict) -> None:
        if event_type == "message":
            print(f"\n{data['sender']}: {data['text']}")
        elif event_type == "error":
            print(f"\n[{data['message']}]")

    engine = DebateEngine(config, event_callback=print_event)
    try:
        await engine.start(topic, max_turns=turns)
    finally:
        await engine.close()

    scores = engine.scores
    print("\n" + "=" * 40)
    for name, total in scores.totals.items():
        print(f"{name}: {total}")
    print(f"Momentum: {scores.momentum:+d}")
    return engine


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="DuoChat two-agent debate engine")
    parser.add_argument("--web", action="store_true", help="Start the web server")
    parser.add_argument("--topic", help="Debate topic (defaults to the configured one)")
    parser.add_argument("--turns", type=int, default=4, help="Turns to run in console mode")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("duochat_config.json"),
        help="Config file (JSON or YAML); created from the template if missing",
    )
    parser.add_argument(
        "--headless", action="store_true", help="Use the silent audio backend"
    )
    args = parser.parse_args()

    config = get_default_config(args.config)
    setup_logging(config.system.log_level)

    if args.headless:
        config.system.audio.backend = "null"

    if args.web:
        start_web_server(config)
        return

    asyncio.run(run_console_debate(config, args.topic, args.turns))


if __name__ == "__main__":
    main()
