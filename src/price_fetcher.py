"""
Live Flea Prices - Fetcher

Pulls the community price table from GitHub, mirrors it to the local
price cache file and pushes nextUpdate forward one hour. Failed fetches
are retried immediately up to maxRetries times; after that the recurring
update is cancelled and the error is raised to the caller.
"""

import logging
import time
from typing import Callable, Optional

import requests

from config import (
    PRICES_URL,
    REQUEST_TIMEOUT,
    NEXT_UPDATE_DELAY,
    USER_AGENT,
    LOG_PREFIX,
)
from mod_config import ConfigStore, ModConfig
from price_cache import PriceCacheFile

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """The price table could not be fetched, even after retrying."""


def is_price(value) -> bool:
    """True for int/float values; bool is rejected even though it subclasses int."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class PriceFetcher:
    def __init__(self, config: ModConfig, config_store: ConfigStore,
                 cache_file: PriceCacheFile,
                 session: Optional[requests.Session] = None,
                 url: str = PRICES_URL,
                 on_exhausted: Optional[Callable[[], None]] = None,
                 clock: Callable[[], float] = time.time):
        self.config = config
        self.config_store = config_store
        self.cache_file = cache_file
        self.session = session or requests.Session()
        self.url = url
        self.on_exhausted = on_exhausted
        self._clock = clock

    def fetch_prices(self, force: bool = True) -> dict:
        """Return the current price table.

        Goes to the network when ``force`` is set or nothing has been cached
        yet, otherwise returns the cached table as-is.
        """
        if not force and self.cache_file.exists():
            return self.cache_file.load()

        logger.info(f"{LOG_PREFIX} Fetching Flea Prices...")
        attempt = 1
        while True:
            try:
                prices = self._download()
                self._persist(prices)
            except FetchError as e:
                if attempt <= self.config.max_retries:
                    logger.info(f"{LOG_PREFIX} Error fetching flea prices, retrying. "
                                f"Attempt #{attempt}")
                    logger.debug(f"{LOG_PREFIX} Fetch error: {e}")
                    attempt += 1
                    continue
                logger.info(f"{LOG_PREFIX} Retry count reached, stopping fetch attempts.")
                if self.on_exhausted:
                    self.on_exhausted()
                raise

            logger.info(f"{LOG_PREFIX} Successfully fetched flea prices.")
            return prices

    def _download(self) -> dict:
        try:
            resp = self.session.get(self.url, timeout=REQUEST_TIMEOUT,
                                    headers={"User-Agent": USER_AGENT})
            resp.raise_for_status()
            prices = resp.json()
        except requests.RequestException as e:
            raise FetchError(f"GET {self.url} failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"Response from {self.url} is not valid JSON: {e}") from e

        if not isinstance(prices, dict):
            raise FetchError(f"Expected a JSON object from {self.url}, "
                             f"got {type(prices).__name__}")

        bad = [k for k, v in prices.items() if not is_price(v)]
        if bad:
            raise FetchError(f"Non-numeric prices from {self.url} for {len(bad)} items, "
                             f"e.g. {bad[0]}={prices[bad[0]]!r}")
        return prices

    def _persist(self, prices: dict):
        try:
            self.cache_file.save(prices)
            next_update = int(self._clock()) + NEXT_UPDATE_DELAY
            self.config.next_update = next_update
            self.config_store.save(self.config)
        except OSError as e:
            raise FetchError(f"Could not save fetched prices: {e}") from e
