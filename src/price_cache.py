"""
Live Flea Prices - Price Cache File

The last successfully fetched price table, kept on disk as a flat
{item_id: price} JSON object. Used instead of the network when a cycle
does not need a fresh fetch.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PriceCacheError(Exception):
    """prices.json could not be read back as a flat JSON object."""


class PriceCacheFile:
    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                prices = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise PriceCacheError(f"Could not load {self.path}: {e}") from e

        if not isinstance(prices, dict):
            raise PriceCacheError(
                f"{self.path} holds {type(prices).__name__}, expected an object")

        logger.debug(f"Loaded {len(prices)} prices from {self.path}")
        return prices

    def save(self, prices: dict):
        """Overwrite the cache with exactly the given payload."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(prices, fh)
