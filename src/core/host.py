"""
Host collaborators: the narrow surface Live Flea Prices needs from the
server it runs inside.

The host owns the database tables and the flea market price service. This
module describes what we call on them and adapts whatever the host hands us
(service objects or plain nested dicts) into that shape.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, runtime_checkable

from config import LOGGER_SERVICE, DATABASE_SERVICE, PRICING_SERVICE


@runtime_checkable
class ServiceResolver(Protocol):
    """Produces named singleton services (the host's DI container)."""

    def resolve(self, name: str) -> Any: ...


@runtime_checkable
class DynamicPriceRegenerator(Protocol):
    """Rebuilds the host's dynamic flea prices from its price table."""

    def generate_dynamic_prices(self) -> None: ...


@runtime_checkable
class HostLogger(Protocol):
    def info(self, message: str) -> Any: ...

    def debug(self, message: str) -> Any: ...


@dataclass
class HostTables:
    """Live views of the host tables this module reads and writes.

    ``prices`` is mutated in place; ``items`` and ``handbook`` are read only.
    """

    prices: Dict[str, float]
    items: Dict[str, Any]
    handbook: Dict[str, List[Dict[str, Any]]]

    @classmethod
    def from_database(cls, database) -> "HostTables":
        """Pull the templates tables out of a database service or a dict.

        Accepts an object exposing ``get_tables()`` or a mapping shaped like
        ``{"templates": {"prices": ..., "items": ..., "handbook": ...}}``.
        """
        tables = database.get_tables() if hasattr(database, "get_tables") else database
        templates = _get(tables, "templates")
        return cls(
            prices=_get(templates, "prices"),
            items=_get(templates, "items"),
            handbook=_get(templates, "handbook"),
        )


def _get(obj, key):
    if isinstance(obj, dict):
        return obj[key]
    return getattr(obj, key)


@dataclass
class HostServices:
    logger: HostLogger
    database: Any
    pricing: DynamicPriceRegenerator

    @classmethod
    def from_resolver(cls, resolver: ServiceResolver) -> "HostServices":
        return cls(
            logger=resolver.resolve(LOGGER_SERVICE),
            database=resolver.resolve(DATABASE_SERVICE),
            pricing=resolver.resolve(PRICING_SERVICE),
        )

    def tables(self) -> HostTables:
        return HostTables.from_database(self.database)


class HostLogHandler(logging.Handler):
    """Forwards stdlib log records to the host logger.

    DEBUG records go to ``debug``; everything else goes to ``info`` since
    that is all the host logger is guaranteed to expose.
    """

    def __init__(self, host_logger: HostLogger, level=logging.DEBUG):
        super().__init__(level)
        self.host_logger = host_logger

    def emit(self, record: logging.LogRecord):
        try:
            msg = self.format(record)
            if record.levelno <= logging.DEBUG:
                self.host_logger.debug(msg)
            else:
                self.host_logger.info(msg)
        except Exception:
            self.handleError(record)
