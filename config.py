"""
Central configuration for the purchase-order intake tools.

API endpoint, data locations and picker settings are defined here.
Override via environment variables or by passing a Config instance directly.

Settings priority (highest wins):
  1. Environment variables
  2. config/intake_settings.json  (admin-editable, persisted)
  3. Hardcoded defaults in this file
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from models.purchase_order import PURCHASE_ORDER_STATUSES

logger = logging.getLogger(__name__)

# Project root (directory containing this file)
PROJECT_ROOT = Path(__file__).parent

# Default data locations (relative to project root)
DEFAULT_DATA_DIR        = PROJECT_ROOT / "data"
DEFAULT_API_BASE_URL    = "http://localhost:8000/api"

# Settings-file keys that an environment variable can pin
_ENV_OVERRIDES = {
    "api_base_url":          "INVENTORY_API_URL",
    "api_timeout_seconds":   "INVENTORY_API_TIMEOUT",
    "default_order_status":  "DEFAULT_ORDER_STATUS",
}


def _data_dir() -> Path:
    return Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))


@dataclass
class Config:
    # --- Inventory API ---
    # Base URL of the inventory REST API (collections are Hydra/JSON-LD).
    #
    # Local backend:   INVENTORY_API_URL=http://localhost:8000/api
    # Hosted:          INVENTORY_API_URL=https://inventory.example.com/api  INVENTORY_API_TOKEN=...
    api_base_url: str = field(
        default_factory=lambda: os.getenv("INVENTORY_API_URL", DEFAULT_API_BASE_URL)
    )
    api_token: Optional[str] = field(
        default_factory=lambda: os.getenv("INVENTORY_API_TOKEN")
    )
    api_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("INVENTORY_API_TIMEOUT", "30"))
    )

    # --- Offline reference data (CSV) ---
    warehouses_csv: Path = field(default_factory=lambda: _data_dir() / "warehouses.csv")
    suppliers_csv:  Path = field(default_factory=lambda: _data_dir() / "suppliers.csv")

    # --- Draft defaults ---
    default_order_status: str = field(
        default_factory=lambda: os.getenv("DEFAULT_ORDER_STATUS", "DRAFT").upper()
    )

    # --- Supplier picker ---
    supplier_fuzzy_threshold: int = 75    # Minimum rapidfuzz score (0-100)

    def __post_init__(self) -> None:
        """Overlay runtime-tunable settings from intake_settings.json if present."""
        self._load_settings_file()
        if self.default_order_status not in PURCHASE_ORDER_STATUSES:
            raise ValueError(
                f"Invalid default order status '{self.default_order_status}'. "
                f"Expected one of: {', '.join(PURCHASE_ORDER_STATUSES)}"
            )

    def _load_settings_file(self) -> None:
        config_dir = Path(os.getenv("CONFIG_DIR", str(PROJECT_ROOT / "config")))
        settings_file = config_dir / "intake_settings.json"
        if not settings_file.exists():
            return
        _type_map: dict[str, type] = {
            "api_base_url":              str,
            "api_timeout_seconds":       float,
            "default_order_status":      str,
            "supplier_fuzzy_threshold":  int,
        }
        try:
            with open(settings_file, encoding="utf-8") as f:
                overrides = {k: v for k, v in json.load(f).items() if not k.startswith("_")}
            for key, val in overrides.items():
                if key in _type_map and hasattr(self, key):
                    # Environment variables still win over the settings file
                    env_var = _ENV_OVERRIDES.get(key)
                    if env_var and os.getenv(env_var):
                        continue
                    setattr(self, key, _type_map[key](val))
        except Exception as exc:
            logger.warning("Failed to load intake_settings.json: %s", exc)
        self.default_order_status = self.default_order_status.upper()
