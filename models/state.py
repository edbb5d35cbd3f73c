from datetime import date
from pydantic import BaseModel, ConfigDict, Field
from typing import Generic, List, Literal, Optional, TypeVar

from .purchase_order import PurchaseOrderStatus
from .supplier import Supplier
from .warehouse import Warehouse


T = TypeVar("T")

LoadStatus = Literal["idle", "loading", "ready", "error"]
SubmissionStatus = Literal["idle", "submitting", "succeeded", "failed"]


class LoadState(BaseModel, Generic[T]):
    """
    Lifecycle of one reference-data fetch: idle -> loading -> ready | error.
    A new context restarts the cycle at idle.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: LoadStatus = "idle"
    data: List[T] = Field(default_factory=list)
    error_message: Optional[str] = None
    # Original exception, kept for logs/debugging; never serialised
    cause: Optional[BaseException] = Field(default=None, exclude=True, repr=False)

    @property
    def is_loading(self) -> bool:
        return self.status == "loading"


class SubmissionState(BaseModel):
    """State of the submit channel. At most one submission is ever in flight."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: SubmissionStatus = "idle"
    error_message: Optional[str] = None
    order_id: Optional[str] = None
    cause: Optional[BaseException] = Field(default=None, exclude=True, repr=False)


class ValidationResult(BaseModel):
    """Outcome of validating a draft. On success carries the resolved supplier."""
    ok: bool
    message: Optional[str] = None
    supplier: Optional[Supplier] = None

    @classmethod
    def success(cls, supplier: Supplier) -> "ValidationResult":
        return cls(ok=True, supplier=supplier)

    @classmethod
    def failure(cls, message: str) -> "ValidationResult":
        return cls(ok=False, message=message)


class LoaderErrors(BaseModel):
    warehouse: Optional[str] = None
    supplier: Optional[str] = None


class IntakeView(BaseModel):
    """
    Snapshot of the intake form pushed to the view after every change.
    The view renders from this and never mutates it.
    """
    context_id: Optional[str] = None

    warehouses: List[Warehouse] = Field(default_factory=list)
    suppliers: List[Supplier] = Field(default_factory=list)
    filtered_suppliers: List[Supplier] = Field(default_factory=list)

    supplier_query: str = ""
    selected_supplier_id: Optional[str] = None
    warehouse_id: str = ""
    order_date: Optional[date] = None
    expected_date: Optional[date] = None
    status: PurchaseOrderStatus = "DRAFT"

    loader_errors: LoaderErrors = Field(default_factory=LoaderErrors)
    submit_error: Optional[str] = None

    warehouses_loading: bool = False
    suppliers_loading: bool = False
    is_submitting: bool = False
    form_disabled: bool = True
