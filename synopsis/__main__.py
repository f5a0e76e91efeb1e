from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from synopsis.config import Settings, load_settings
from synopsis.core.controller import SummarizationRequest, WordCountRange
from synopsis.errors import SummarizationError
from synopsis.service import SynopsisService
from synopsis.utils.logging import setup_logging


logger = logging.getLogger("synopsis.cli")

ROOT_DIR = Path(__file__).resolve().parents[1]


def _config_path(args: argparse.Namespace) -> Optional[str]:
    return args.config or os.environ.get("SYNOPSIS_CONFIG")


def _load_settings(args: argparse.Namespace) -> Settings:
    # Same resolution order as the app module: .env first, then SYNOPSIS_CONFIG.
    load_dotenv(ROOT_DIR / ".env")
    return load_settings(_config_path(args))


def _serve(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    config_path = _config_path(args)
    if config_path:
        # The app module reads its settings at import time.
        os.environ["SYNOPSIS_CONFIG"] = str(config_path)

    import uvicorn

    uvicorn.run(
        "synopsis.api.app:app",
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
    )

    from synopsis.api.app import app

    if app.state.service.load_failed:
        logger.critical("Exiting: summarization model failed to load")
        return 1
    return 0


def _summarize(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    settings.server.fail_fast = False
    setup_logging(Path(settings.logging.log_dir), settings.logging.level)

    text = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
    request = SummarizationRequest(text=text, target_range=WordCountRange(min=args.min, max=args.max))

    service = SynopsisService(settings)
    service.start()
    try:
        res = service.summarize_blocking(request)
    except SummarizationError as e:
        logger.error("Summarization failed: %s", e)
        return 1
    finally:
        service.shutdown()

    logger.info("passes=%d words=%d stop=%s", res.iterations, res.word_count, res.stop_reason)
    print(res.summary)
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="synopsis", description="Summarize text into a target word-count range")
    ap.add_argument("--config", default=None, help="Path to config.yaml")
    sub = ap.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=_serve)

    summ = sub.add_parser("summarize", help="Summarize a local text file ('-' for stdin)")
    summ.add_argument("file")
    summ.add_argument("--min", type=int, required=True)
    summ.add_argument("--max", type=int, required=True)
    summ.set_defaults(func=_summarize)

    args = ap.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
