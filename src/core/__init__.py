"""
Live Flea Prices core: host-facing types.

Usage:
    from core import HostServices, HostLogHandler

    services = HostServices.from_resolver(container)
    tables = services.tables()
"""

from core.host import (
    DynamicPriceRegenerator,
    HostLogger,
    HostLogHandler,
    HostServices,
    HostTables,
    ServiceResolver,
)

__all__ = [
    "DynamicPriceRegenerator",
    "HostLogger",
    "HostLogHandler",
    "HostServices",
    "HostTables",
    "ServiceResolver",
]
