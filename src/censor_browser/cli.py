"""CLI entry point for Censor Browser."""

import argparse
import logging
import sys
from pathlib import Path

from .app import CensorBrowserApp
from .config import Config
from .session import BrowserSession

logger = logging.getLogger("censor_browser")


def setup_logging(log_file: str, level: str) -> None:
    """Log to a file; the terminal belongs to the UI."""
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(path, encoding="utf-8")],
    )
    # Request-level chatter from the HTTP stack is not useful here.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Censor Browser - play the internet regulator in a simulated web"
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to configuration YAML file",
    )
    parser.add_argument(
        "--store",
        type=str,
        help="Path of the site cache JSON file",
    )
    parser.add_argument(
        "--no-persist",
        action="store_true",
        help="Keep the site cache in memory only",
    )
    parser.add_argument(
        "--model", "-m",
        type=str,
        help="LLM model name as known to the LiteLLM proxy",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    config = Config.load(args.config)
    if args.store:
        config.store_path = args.store
    if args.model:
        config.model = args.model
    if args.log_level:
        config.log_level = args.log_level

    setup_logging(config.log_file, config.log_level)
    logger.info(f"LLM endpoint: {config.litellm_url} (model {config.model})")

    try:
        session = BrowserSession.from_config(config, persist=not args.no_persist)
        app = CensorBrowserApp(session)
        app.run()
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
