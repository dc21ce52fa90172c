"""
Main application entry point.

serve   - run the generate-text service (default)
scan    - scan a receipt image and print the enriched items
suggest - suggest recipes for a list of pantry items
"""

# Standard library imports
import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

# Third-party imports
import uvicorn
from dotenv import load_dotenv

# Local imports
from adapters.openai_adapter import OpenAIAdapter
from common.config import Config, load_config
from common.logging import get_logger, setup_logging
from common.models import Preferences
from core.lifecycle import RequestState
from core.receipt_scanner import ReceiptItemExtractor
from core.recipe_suggestions import RecipeSuggestionEngine
from gateway.extraction_gateway import (
    DirectExtractionGateway,
    ExtractionGateway,
    HttpExtractionGateway,
)
from gateway.generate_text import create_generate_text_app

# Load environment variables from .env file at module level
load_dotenv()

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Pantry AI backend")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the generate-text service")
    serve.add_argument("--port", type=int, help="Override the port to run on")
    serve.add_argument("--host", type=str, help="Override the host to run on")

    scan = sub.add_parser("scan", help="Scan a receipt image")
    scan.add_argument("image", type=Path)
    scan.add_argument("--direct", action="store_true", help="Call the provider in-process")

    suggest = sub.add_parser("suggest", help="Suggest recipes for pantry items")
    suggest.add_argument("items", nargs="+")
    suggest.add_argument("--dietary")
    suggest.add_argument("--cuisine")
    suggest.add_argument("--difficulty")
    suggest.add_argument("--direct", action="store_true", help="Call the provider in-process")

    return parser.parse_args(argv)


def build_gateway(config: Config, direct: bool) -> ExtractionGateway:
    if direct:
        return DirectExtractionGateway(
            OpenAIAdapter(api_key_env=config.generation.provider_api_key_env)
        )
    return HttpExtractionGateway(config.generation)


def _print_state(state: RequestState) -> int:
    if state.is_failed:
        print(json.dumps({"error": state.error.message, "kind": state.error.kind.value}))
        return 1
    data = state.data
    if isinstance(data, list):
        print(json.dumps([item.model_dump(mode="json") for item in data], indent=2))
    else:
        print(data.model_dump_json(indent=2))
    return 0


async def run_scan(config: Config, image: Path, direct: bool) -> int:
    gateway = build_gateway(config, direct)
    try:
        extractor = ReceiptItemExtractor(gateway, config.receipt)
        mime_type = mimetypes.guess_type(str(image))[0] or "image/jpeg"
        state = await extractor.scan(image.read_bytes(), mime_type)
    finally:
        await gateway.aclose()
    return _print_state(state)


async def run_suggest(config: Config, args: argparse.Namespace) -> int:
    gateway = build_gateway(config, args.direct)
    try:
        engine = RecipeSuggestionEngine(gateway, config.recipes)
        preferences = Preferences(
            dietary=args.dietary, cuisine=args.cuisine, difficulty=args.difficulty
        )
        state = await engine.suggest(args.items, preferences)
    finally:
        await gateway.aclose()
    return _print_state(state)


def serve(config: Config, host: Optional[str], port: Optional[int]) -> None:
    app = create_generate_text_app(config)

    host = host or config.service.host
    port = port or config.service.port

    logger.info(event="starting_server", host=host, port=port)

    # Run uvicorn synchronously (it creates its own event loop)
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=None,  # Use our custom logging setup
        access_log=False,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    try:
        args = parse_args(argv)
        config = load_config(args.config)
        setup_logging(config)

        if args.command == "scan":
            sys.exit(asyncio.run(run_scan(config, args.image, args.direct)))
        elif args.command == "suggest":
            sys.exit(asyncio.run(run_suggest(config, args)))
        else:
            serve(config, getattr(args, "host", None), getattr(args, "port", None))

    except KeyboardInterrupt:
        logger.info(event="application_shutdown", reason="Keyboard interrupt")
    except SystemExit:
        raise
    except Exception as e:
        logger.critical(event="application_crashed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
