from datetime import date
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional, Literal

from .supplier import Supplier


PurchaseOrderStatus = Literal["DRAFT", "OPEN", "PARTIAL", "CLOSED", "CANCELLED"]

PURCHASE_ORDER_STATUSES: tuple[str, ...] = ("DRAFT", "OPEN", "PARTIAL", "CLOSED", "CANCELLED")


class DraftOrder(BaseModel):
    """
    The in-progress purchase order assembled by the user.

    Fields are edited one at a time by the view. Dates are ISO 8601 strings
    (YYYY-MM-DD) on input; an empty string clears the date.
    """
    model_config = ConfigDict(validate_assignment=True)

    context_id: Optional[str] = None
    warehouse_id: str = ""
    supplier_id: str = ""
    supplier_display_name: str = ""
    order_date: Optional[date] = Field(default_factory=date.today)
    expected_date: Optional[date] = None
    status: PurchaseOrderStatus = "DRAFT"

    @field_validator("order_date", "expected_date", mode="before")
    @classmethod
    def _blank_date_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DraftOrderPayload(BaseModel):
    """
    What the order submission service receives for a validated draft.
    Serialises with the camelCase names of the inventory API.
    """
    model_config = ConfigDict(populate_by_name=True)

    context_id: str = Field(alias="contextId")
    warehouse_id: str = Field(alias="warehouseId")
    supplier_id: str = Field(alias="supplierId")
    supplier_display_name: str = Field(alias="supplierDisplayName")
    order_date: date = Field(alias="orderDate")
    expected_date: Optional[date] = Field(default=None, alias="expectedDate")
    status: PurchaseOrderStatus = "DRAFT"

    @classmethod
    def from_draft(cls, draft: DraftOrder, supplier: Supplier) -> "DraftOrderPayload":
        """Project a validated draft, using the supplier's canonical name."""
        return cls(
            context_id=draft.context_id,
            warehouse_id=draft.warehouse_id,
            supplier_id=supplier.id,
            supplier_display_name=supplier.name,
            order_date=draft.order_date,
            expected_date=draft.expected_date,
            status=draft.status,
        )

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict with ISO dates; expectedDate is omitted when unset."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
