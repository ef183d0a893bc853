"""
Live Flea Prices - Updater

Entry point the host calls once its database has loaded. Snapshots the
original price table, applies prices once (fetching fresh data only if
nextUpdate has passed), then re-applies freshly fetched prices every hour
until the fetch retries run out or the process ends.

Usage (from the host's post-database-load hook):
    from flea_updater import on_database_loaded
    on_database_loaded(container)
"""

import copy
import logging
import time
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Optional

import requests

from config import (
    CONFIG_DIR,
    CONFIG_FILE_NAME,
    PRICES_FILE_NAME,
    PRICES_URL,
    UPDATE_INTERVAL,
    LOG_PREFIX,
)
from core.host import (
    DynamicPriceRegenerator,
    HostLogHandler,
    HostServices,
    HostTables,
    ServiceResolver,
)
from mod_config import ConfigStore, ModConfig
from price_cache import PriceCacheFile
from price_fetcher import PriceFetcher
from price_merger import PriceMerger
from repeating_task import RepeatingTask

logger = logging.getLogger(__name__)

# Loggers forwarded to the host logger when running inside a host
MODULE_LOGGERS = (
    "flea_updater",
    "mod_config",
    "price_cache",
    "price_fetcher",
    "price_merger",
    "repeating_task",
)


class FleaPriceUpdater:
    """
    Owns the config, the original-price snapshot and the hourly task.
    One instance per process.
    """

    def __init__(self, tables: HostTables,
                 pricing: Optional[DynamicPriceRegenerator] = None,
                 config_dir: Path = CONFIG_DIR,
                 session: Optional[requests.Session] = None,
                 url: str = PRICES_URL,
                 interval: float = UPDATE_INTERVAL,
                 clock: Callable[[], float] = time.time):
        config_dir = Path(config_dir)
        self.tables = tables
        self.pricing = pricing
        self.config_store = ConfigStore(config_dir / CONFIG_FILE_NAME)
        self.cache_file = PriceCacheFile(config_dir / PRICES_FILE_NAME)
        self.session = session
        self.url = url
        self.interval = interval
        self._clock = clock

        self.config: Optional[ModConfig] = None
        self.original_prices = None
        self.fetcher: Optional[PriceFetcher] = None
        self.merger: Optional[PriceMerger] = None
        self._task: Optional[RepeatingTask] = None

    @property
    def task(self) -> Optional[RepeatingTask]:
        return self._task

    def start(self, force: Optional[bool] = None) -> bool:
        """Run the startup cycle and schedule the hourly one.

        Args:
            force: Override the nextUpdate check. None fetches only when
                nextUpdate has passed (or nothing is cached yet).

        Returns:
            True once the repeating task is registered.

        Raises:
            ConfigLoadError: config.json missing or malformed.
            FetchError: the startup fetch failed after all retries. Nothing
                is scheduled in that case.
        """
        self.config = self.config_store.load()

        # Baseline for clamping; must not share references with the live table
        self.original_prices = MappingProxyType(copy.deepcopy(self.tables.prices))

        self.fetcher = PriceFetcher(
            self.config, self.config_store, self.cache_file,
            session=self.session, url=self.url,
            on_exhausted=self.cancel, clock=self._clock,
        )
        self.merger = PriceMerger(
            self.tables, self.original_prices, self.config,
            self.fetcher, self.pricing,
        )

        if force is None:
            force_fetch = int(self._clock()) > self.config.next_update
        else:
            force_fetch = force
        if not force_fetch:
            logger.debug(f"{LOG_PREFIX} Next fetch due at {self.config.next_update}, "
                         f"using cached prices")

        if not self.merger.apply_prices(force_fetch):
            return False

        self._task = RepeatingTask(self.interval, self.run_cycle, name="FleaPriceUpdater")
        self._task.start()
        return True

    def run_cycle(self) -> bool:
        """One scheduled cycle: always fetches fresh prices."""
        return self.merger.apply_prices(True)

    def cancel(self):
        """Stop the hourly task. Safe to call any number of times."""
        if self._task is not None:
            self._task.cancel()

    stop = cancel


def attach_host_logger(host_logger, level=logging.DEBUG) -> HostLogHandler:
    handler = HostLogHandler(host_logger)
    for name in MODULE_LOGGERS:
        module_logger = logging.getLogger(name)
        module_logger.addHandler(handler)
        if module_logger.level == logging.NOTSET or module_logger.level > level:
            module_logger.setLevel(level)
    return handler


def on_database_loaded(resolver: ServiceResolver,
                       config_dir: Optional[Path] = None) -> FleaPriceUpdater:
    """Host hook: wire up services and start updating.

    Startup errors propagate to the host.
    """
    services = HostServices.from_resolver(resolver)
    attach_host_logger(services.logger)

    updater = FleaPriceUpdater(
        services.tables(),
        pricing=services.pricing,
        config_dir=config_dir or CONFIG_DIR,
    )
    updater.start()
    return updater
