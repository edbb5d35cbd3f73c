from .warehouse import Warehouse
from .supplier import Supplier, SupplierStatus
from .purchase_order import DraftOrder, DraftOrderPayload, PurchaseOrderStatus, PURCHASE_ORDER_STATUSES
from .state import (
    LoadState, LoadStatus, SubmissionState, SubmissionStatus,
    ValidationResult, LoaderErrors, IntakeView,
)

__all__ = [
    "Warehouse",
    "Supplier", "SupplierStatus",
    "DraftOrder", "DraftOrderPayload", "PurchaseOrderStatus", "PURCHASE_ORDER_STATUSES",
    "LoadState", "LoadStatus", "SubmissionState", "SubmissionStatus",
    "ValidationResult", "LoaderErrors", "IntakeView",
]
