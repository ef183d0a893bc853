"""Shared fixtures for the Live Flea Prices test suite."""

import sys
import json
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Ensure src/ is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from core.host import HostTables

logger = logging.getLogger(__name__)

NOW = 1_700_000_000


# ── Helper factories ─────────────────────────────────────

def write_config(config_dir: Path, next_update=0, max_increase_mult=1.5,
                 max_retries=2, **extra):
    config_dir.mkdir(parents=True, exist_ok=True)
    data = {
        "nextUpdate": next_update,
        "maxIncreaseMult": max_increase_mult,
        "maxRetries": max_retries,
        **extra,
    }
    path = config_dir / "config.json"
    path.write_text(json.dumps(data, indent=4), encoding="utf-8")
    return path


def make_response(payload=None, status=200, text=None):
    """A stand-in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    if text is not None:
        resp.json.side_effect = json.JSONDecodeError("Expecting value", text, 0)
    else:
        resp.json.return_value = payload
    return resp


def make_session(*responses):
    """Session whose get() yields the given responses / exceptions in order.

    A single response is returned for every call.
    """
    session = MagicMock()
    if len(responses) == 1 and not isinstance(responses[0], BaseException):
        session.get.return_value = responses[0]
    else:
        session.get.side_effect = list(responses)
    return session


def make_tables(prices=None, items=None, handbook_items=None) -> HostTables:
    return HostTables(
        prices=dict(prices or {}),
        items={k: {"_id": k} for k in (items or [])},
        handbook={"Items": list(handbook_items or [])},
    )


class FakePricing:
    """Records generate_dynamic_prices() calls."""

    def __init__(self):
        self.calls = 0

    def generate_dynamic_prices(self):
        self.calls += 1


# ── Fixtures ─────────────────────────────────────────────

@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def pricing():
    return FakePricing()
