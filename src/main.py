"""
Live Flea Prices - Standalone Runner

Runs the updater against a JSON dump of the host's templates tables instead
of a live server. Handy for checking what a price pull would do to a
database before the server picks it up.

Usage:
    python main.py --tables templates.json --once              # one cycle, exit
    python main.py --tables templates.json --once --force      # ignore nextUpdate
    python main.py --tables templates.json --output prices.out.json
    python main.py --tables templates.json                     # keep running hourly
"""

import sys
import os
import json
import logging
import argparse
from pathlib import Path

# Add src to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import CONFIG_DIR, LOG_FILE
from core.host import HostTables
from flea_updater import FleaPriceUpdater
from mod_config import ConfigLoadError
from price_fetcher import FetchError

logger = logging.getLogger("live-flea-prices")


def load_tables(path: Path) -> HostTables:
    """Load a templates dump shaped like {"templates": {prices, items, handbook}}."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if "templates" not in data:
        data = {"templates": data}
    return HostTables.from_database(data)


def write_prices(path: Path, prices: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(prices, fh, indent=2, sort_keys=True)
    logger.info(f"Wrote {len(prices)} prices to {path}")


def setup_logging(debug: bool = False):
    """Configure logging.

    Console shows INFO+; the log file gets DEBUG (clamp details) with --debug.
    """
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(
        "%(asctime)s %(message)s",
        datefmt="%H:%M:%S"
    ))

    file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.addHandler(console)
    root_logger.addHandler(file_handler)


def run(args) -> int:
    tables = load_tables(args.tables)
    updater = FleaPriceUpdater(tables, config_dir=args.config_dir)

    if args.once:
        updater.start(force=True if args.force else None)
        updater.cancel()
    else:
        updater.start()
        try:
            while updater.task.running:
                updater.task.join(timeout=1.0)
        except KeyboardInterrupt:
            updater.cancel()
            print("\nGoodbye!")

    if args.output:
        write_prices(args.output, tables.prices)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Live Flea Prices - apply community flea prices to a templates dump",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--tables", "-t",
        type=Path,
        required=True,
        help="JSON dump of the templates tables (prices, items, handbook)"
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=CONFIG_DIR,
        help=f"Directory holding config.json and prices.json (default: {CONFIG_DIR})"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write the updated price table here"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Apply prices once and exit instead of updating hourly"
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="With --once, fetch fresh prices even if nextUpdate hasn't passed"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    setup_logging(debug=args.debug)

    try:
        sys.exit(run(args))
    except (ConfigLoadError, FetchError) as e:
        logger.critical(f"Update failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
