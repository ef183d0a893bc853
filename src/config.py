"""
Live Flea Prices - Configuration
All tunable constants in one place.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# ─────────────────────────────────────────────
# Paths
# ─────────────────────────────────────────────
PROJECT_DIR = Path(__file__).resolve().parent.parent

# config.json and prices.json live side by side in here
CONFIG_DIR = Path(os.environ.get("LFP_CONFIG_DIR", PROJECT_DIR / "config"))
CONFIG_FILE_NAME = "config.json"
PRICES_FILE_NAME = "prices.json"

# ─────────────────────────────────────────────
# Price Data
# ─────────────────────────────────────────────
PRICES_URL = os.environ.get(
    "LFP_PRICES_URL",
    "https://raw.githubusercontent.com/DrakiaXYZ/SPT-LiveFleaPriceDB/main/prices.json",
)

USER_AGENT = "LiveFleaPrices/1.0"


def _read_timeout():
    raw = os.environ.get("LFP_REQUEST_TIMEOUT", "").strip()
    if not raw:
        return None  # client default
    return float(raw)


REQUEST_TIMEOUT = _read_timeout()

# How often the price table is re-applied (seconds)
UPDATE_INTERVAL = 3600  # 1 hour

# nextUpdate is pushed this far past a successful fetch (seconds)
NEXT_UPDATE_DELAY = 3600

# ─────────────────────────────────────────────
# Host Services
# ─────────────────────────────────────────────
LOGGER_SERVICE = "WinstonLogger"
DATABASE_SERVICE = "DatabaseServer"
PRICING_SERVICE = "RagfairPriceService"

# ─────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────
LOG_PREFIX = "[LFP]"
LOG_LEVEL = "INFO"
LOG_FILE = Path(os.environ.get(
    "LFP_LOG_FILE",
    Path(os.path.expanduser("~")) / ".live-flea-prices" / "updater.log",
))
