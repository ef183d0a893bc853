"""
Live Flea Prices - Price Merger

Writes fetched prices into the host's live price table, bounded by a
multiple of each item's original price so a bad upstream value can't blow
up the economy. The baseline is the snapshot taken at startup, falling back
to the handbook price, falling back to 0.

Note that an item with no known baseline clamps to 0. That zeroes the
price of anything the server has no reference price for.
"""

import logging
from typing import Dict, Mapping, Optional

from config import LOG_PREFIX
from core.host import DynamicPriceRegenerator, HostTables
from mod_config import ModConfig
from price_fetcher import PriceFetcher, is_price

logger = logging.getLogger(__name__)


def build_handbook_index(handbook: dict) -> Dict[str, float]:
    """Map handbook item id -> Price. First entry wins on duplicates."""
    index = {}
    for entry in handbook.get("Items", []):
        item_id = entry.get("Id")
        if item_id is not None and item_id not in index:
            index[item_id] = entry.get("Price")
    return index


def resolve_base_price(item_id: str, snapshot: Mapping[str, float],
                       handbook_index: Mapping[str, float]) -> float:
    base = snapshot.get(item_id)
    if not base:
        base = handbook_index.get(item_id)
    return base if base is not None else 0


def clamp_price(fetched: float, base_price: float, max_increase_mult: float):
    """Return (price_to_write, was_clamped)."""
    max_price = base_price * max_increase_mult
    if max_price != 0 and fetched <= max_price:
        return fetched, False
    return max_price, True


class PriceMerger:
    def __init__(self, tables: HostTables, snapshot: Mapping[str, float],
                 config: ModConfig, fetcher: PriceFetcher,
                 pricing: Optional[DynamicPriceRegenerator] = None):
        self.tables = tables
        self.snapshot = snapshot
        self.config = config
        self.fetcher = fetcher
        self.pricing = pricing

    def apply_prices(self, force: bool = True) -> bool:
        prices = self.fetcher.fetch_prices(force)

        logger.info(f"{LOG_PREFIX} Applying flea data to server.")
        price_table = self.tables.prices
        item_table = self.tables.items
        handbook_index = build_handbook_index(self.tables.handbook)
        mult = self.config.max_increase_mult

        updated = clamped = skipped = 0
        for item_id, fetched in prices.items():
            if item_id not in item_table:
                continue
            if not is_price(fetched):
                logger.debug(f"Skipping {item_id}: non-numeric price {fetched!r}")
                skipped += 1
                continue

            base = resolve_base_price(item_id, self.snapshot, handbook_index)
            price, was_clamped = clamp_price(fetched, base, mult)
            if was_clamped:
                logger.debug(f"Setting {item_id} to {price} instead of {fetched} "
                             f"due to over inflation")
                clamped += 1
            price_table[item_id] = price
            updated += 1

        logger.debug(f"{LOG_PREFIX} {updated} prices written, {clamped} clamped, "
                     f"{skipped} skipped")
        logger.info(f"{LOG_PREFIX} Flea Prices Updated!")

        if self.pricing is not None:
            self.pricing.generate_dynamic_prices()
        return True
