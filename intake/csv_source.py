"""
CSV-backed reference data for offline use and demos.

CSV formats:
  warehouses.csv:  id, company, code, name
  suppliers.csv:   id, company, name, contact_name, email, phone, status

Rows are filtered by the company column and returned in file order.
"""
import csv
import logging
from pathlib import Path
from typing import Optional

from config import Config
from models.supplier import Supplier
from models.warehouse import Warehouse

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def _read_rows(path: Path) -> list[dict[str, str]]:
    if not path.exists():
        logger.warning("Reference CSV not found: %s", path)
        return []
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


class CsvReferenceData:
    """ReferenceDataService reading from two CSV files. Files are re-read on every call."""

    def __init__(self, warehouses_csv: str | Path, suppliers_csv: str | Path):
        self.warehouses_csv = Path(warehouses_csv)
        self.suppliers_csv = Path(suppliers_csv)

    @classmethod
    def from_config(cls, config: Config) -> "CsvReferenceData":
        return cls(config.warehouses_csv, config.suppliers_csv)

    async def list_warehouses(self, context_id: str) -> list[Warehouse]:
        warehouses = [
            Warehouse(
                id=row["id"].strip(),
                code=_clean(row.get("code")),
                name=row["name"].strip(),
            )
            for row in _read_rows(self.warehouses_csv)
            if (row.get("company") or "").strip() == context_id
        ]
        logger.info("Loaded %d warehouses for %s from %s",
                    len(warehouses), context_id, self.warehouses_csv.name)
        return warehouses

    async def list_suppliers(self, context_id: str) -> list[Supplier]:
        suppliers = [
            Supplier(
                id=row["id"].strip(),
                name=row["name"].strip(),
                contact_name=_clean(row.get("contact_name")),
                email=_clean(row.get("email")),
                phone=_clean(row.get("phone")),
                status=_clean(row.get("status")),
            )
            for row in _read_rows(self.suppliers_csv)
            if (row.get("company") or "").strip() == context_id
        ]
        logger.info("Loaded %d suppliers for %s from %s",
                    len(suppliers), context_id, self.suppliers_csv.name)
        return suppliers
