"""
Supplier picker state.

Holds the loaded supplier directory, the free-text query typed into the
picker, and the concrete selection. Free text and a selection are mutually
exclusive: typing clears the selection, picking sets both at once.

Matching for the picker list is plain case-insensitive substring search on
name, contact name and email. best_match() additionally ranks suppliers
with rapidfuzz for callers that need to turn a typed name into one pick.
"""
import logging
from typing import Iterable, Optional

from config import Config
from models.supplier import Supplier

logger = logging.getLogger(__name__)


def filter_suppliers(suppliers: Iterable[Supplier], query: str) -> list[Supplier]:
    """Suppliers whose name, contact or email contains query, in load order."""
    term = (query or "").strip().lower()
    if not term:
        return list(suppliers)
    return [s for s in suppliers if any(term in f for f in s.searchable_fields)]


class SupplierSearchIndex:

    def __init__(self, fuzzy_threshold: int = Config.supplier_fuzzy_threshold) -> None:
        self.fuzzy_threshold = fuzzy_threshold
        self.suppliers: list[Supplier] = []
        self.query: str = ""
        self.selected_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def filtered(self) -> list[Supplier]:
        return filter_suppliers(self.suppliers, self.query)

    @property
    def selected(self) -> Optional[Supplier]:
        return self.find(self.selected_id) if self.selected_id else None

    def find(self, supplier_id: str) -> Optional[Supplier]:
        return next((s for s in self.suppliers if s.id == supplier_id), None)

    def replace(self, suppliers: Iterable[Supplier]) -> None:
        """
        Take a freshly loaded supplier list. A single supplier is picked
        automatically; with two or more nothing is auto-selected. A selection
        that is missing from the new list is dropped.
        """
        self.suppliers = list(suppliers)
        if self.selected_id and self.find(self.selected_id) is None:
            self.selected_id = None
        if len(self.suppliers) == 1:
            only = self.suppliers[0]
            logger.debug("Auto-selecting only supplier %s (%s)", only.id, only.name)
            self.selected_id = only.id
            self.query = only.name

    def set_query(self, text: str) -> None:
        """User typed in the picker: store the text and drop the selection."""
        self.query = text
        self.selected_id = None

    def pick(self, supplier_id: str) -> bool:
        """
        Select supplier_id and show its name. Returns False when the supplier
        was already picked and nothing changed.
        """
        supplier = self.find(supplier_id)
        if supplier is None:
            raise KeyError(f"Unknown supplier: {supplier_id}")
        if self.selected_id == supplier.id and self.query == supplier.name:
            return False
        self.selected_id = supplier.id
        self.query = supplier.name
        return True

    def clear(self) -> None:
        self.suppliers = []
        self.query = ""
        self.selected_id = None

    def best_match(self, text: str, threshold: Optional[int] = None) -> Optional[Supplier]:
        """Use rapidfuzz to find the supplier whose name best matches text."""
        from rapidfuzz import fuzz

        if threshold is None:
            threshold = self.fuzzy_threshold

        name = (text or "").strip().lower()
        if not name:
            return None

        best_score = 0.0
        best_supplier: Optional[Supplier] = None
        for s in self.suppliers:
            score = fuzz.token_sort_ratio(name, s.name.lower())
            if score > best_score:
                best_score = score
                best_supplier = s

        if best_supplier and best_score >= threshold:
            logger.info("Supplier fuzzy matched: '%s' -> '%s' (score=%d)",
                        text, best_supplier.name, best_score)
            return best_supplier

        logger.debug("Best fuzzy match score was %d (threshold=%d)", best_score, threshold)
        return None
