"""
Draft purchase-order validation.

Rules, checked in this order (the first failure is reported):
  Context:    a company must be selected
  Supplier:   the picked supplier must exist in the loaded directory
  Warehouse:  a warehouse must be chosen
  Dates:      order date required; expected arrival not before the order date
"""
import logging
from typing import Iterable, Optional

from models.purchase_order import DraftOrder
from models.state import ValidationResult
from models.supplier import Supplier

logger = logging.getLogger(__name__)

NO_CONTEXT_MESSAGE = "No company selected. Choose a company before creating purchase orders."
NO_SUPPLIER_MESSAGE = "Select a supplier from your directory."
NO_WAREHOUSE_MESSAGE = "Select a warehouse for the purchase order."
NO_ORDER_DATE_MESSAGE = "Order date is required."
DATE_ORDER_MESSAGE = "Expected arrival cannot be before the order date."


class DraftValidator:
    """
    Stateless; validate() depends only on its arguments.

    Usage:
        result = DraftValidator().validate(draft, has_context=True, suppliers=loaded)
        if not result.ok:
            show(result.message)
    """

    def validate(
        self,
        draft: DraftOrder,
        has_context: bool,
        suppliers: Iterable[Supplier],
    ) -> ValidationResult:
        message = self.check_context(has_context)
        if message:
            return ValidationResult.failure(message)

        supplier = self.resolve_supplier(draft, suppliers)
        if supplier is None:
            return ValidationResult.failure(NO_SUPPLIER_MESSAGE)

        message = self.check_warehouse(draft) or self.check_dates(draft)
        if message:
            logger.debug("Draft rejected: %s", message)
            return ValidationResult.failure(message)

        return ValidationResult.success(supplier)

    # ------------------------------------------------------------------
    # Individual rules
    # ------------------------------------------------------------------

    def check_context(self, has_context: bool) -> Optional[str]:
        return None if has_context else NO_CONTEXT_MESSAGE

    def resolve_supplier(self, draft: DraftOrder, suppliers: Iterable[Supplier]) -> Optional[Supplier]:
        if not draft.supplier_id:
            return None
        return next((s for s in suppliers if s.id == draft.supplier_id), None)

    def check_warehouse(self, draft: DraftOrder) -> Optional[str]:
        return None if draft.warehouse_id else NO_WAREHOUSE_MESSAGE

    def check_dates(self, draft: DraftOrder) -> Optional[str]:
        if draft.order_date is None:
            return NO_ORDER_DATE_MESSAGE
        if draft.expected_date is not None and draft.expected_date < draft.order_date:
            return DATE_ORDER_MESSAGE
        return None
