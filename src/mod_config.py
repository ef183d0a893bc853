"""
Live Flea Prices - Persistent Config Store

Reads and writes config/config.json:

    {
        "nextUpdate": 1700000000,
        "maxIncreaseMult": 2.0,
        "maxRetries": 3
    }

Only nextUpdate is ever changed at runtime. Keys this module does not know
about are carried through untouched when the file is rewritten.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


class ConfigLoadError(Exception):
    """config.json is missing, unreadable or malformed."""


@dataclass
class ModConfig:
    max_increase_mult: float
    next_update: int = 0
    max_retries: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ModConfig":
        if not isinstance(data, dict):
            raise ConfigLoadError(f"Expected a JSON object, got {type(data).__name__}")

        if "maxIncreaseMult" not in data:
            raise ConfigLoadError("Missing required key 'maxIncreaseMult'")

        try:
            mult = float(data["maxIncreaseMult"])
            next_update = int(data.get("nextUpdate", 0))
            max_retries = int(data.get("maxRetries", 0))
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid config value: {e}") from e

        if mult <= 0:
            raise ConfigLoadError(f"maxIncreaseMult must be positive, got {mult}")
        if max_retries < 0:
            raise ConfigLoadError(f"maxRetries must not be negative, got {max_retries}")

        extra = {k: v for k, v in data.items()
                 if k not in ("nextUpdate", "maxIncreaseMult", "maxRetries")}
        return cls(
            max_increase_mult=mult,
            next_update=next_update,
            max_retries=max_retries,
            extra=extra,
        )

    def to_dict(self) -> dict:
        d = dict(self.extra)
        d["nextUpdate"] = self.next_update
        d["maxIncreaseMult"] = self.max_increase_mult
        d["maxRetries"] = self.max_retries
        return d


class ConfigStore:
    """Single-writer store for the on-disk ModConfig."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> ModConfig:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError as e:
            raise ConfigLoadError(f"Config file not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Config file is not valid JSON: {self.path} ({e})") from e
        except OSError as e:
            raise ConfigLoadError(f"Could not read {self.path}: {e}") from e

        config = ModConfig.from_dict(data)
        logger.debug(f"Loaded config from {self.path}: {config.to_dict()}")
        return config

    def save(self, config: ModConfig):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(config.to_dict(), fh, indent=4)
