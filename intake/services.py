"""
Collaborator contracts consumed by the intake controller.

The controller only ever talks to these two protocols; the HTTP client in
api_client.py and the CSV source in csv_source.py are concrete implementations.
Every failure crossing this seam is a ServiceError.
"""
from typing import Optional, Protocol

from models.purchase_order import DraftOrderPayload
from models.supplier import Supplier
from models.warehouse import Warehouse


class ServiceError(Exception):
    """Raised when a remote service call fails. message may be empty."""

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ReferenceDataService(Protocol):
    async def list_warehouses(self, context_id: str) -> list[Warehouse]: ...

    async def list_suppliers(self, context_id: str) -> list[Supplier]: ...


class OrderSubmissionService(Protocol):
    async def create_purchase_order(self, payload: DraftOrderPayload) -> str: ...


def describe_error(exc: BaseException, fallback: str) -> str:
    """Human-readable text for exc, or fallback when the error carries none."""
    if isinstance(exc, ServiceError):
        message = exc.message
    else:
        message = str(exc)
    message = (message or "").strip()
    return message or fallback
