"""
HTTP client for the inventory REST API.

Implements both ReferenceDataService and OrderSubmissionService on top of
httpx.AsyncClient. Collections come back as Hydra/JSON-LD documents
(`member` or `hydra:member`); related resources are addressed by IRI
(`/api/companies/<id>`). Every failure is raised as ServiceError with the
most useful message the API gave us.
"""
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from config import Config
from models.purchase_order import DraftOrderPayload
from models.supplier import Supplier
from models.warehouse import Warehouse
from .services import ServiceError

logger = logging.getLogger(__name__)

USER_AGENT = "PO-Intake/1.0"
HTML_RESPONSE_MESSAGE = "API request failed: unexpected HTML response"


def company_iri(company_id: str) -> str:
    return f"/api/companies/{company_id}"


def _iri(collection: str, resource_id: str) -> str:
    prefix = f"/api/{collection}/"
    return resource_id if resource_id.startswith(prefix) else f"{prefix}{resource_id}"


def _collection_members(payload: Any) -> list[dict]:
    """Pull the item list out of a Hydra or plain collection document."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    members = payload.get("member")
    if members is None:
        members = payload.get("hydra:member")
    return members or []


def extract_error_message(response: httpx.Response) -> str:
    """Best human-readable description of a failed API response."""
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("detail", "title", "hydra:description", "message"):
                if body.get(key):
                    return str(body[key])
    else:
        text = response.text.strip()
        if text.startswith("<"):
            return HTML_RESPONSE_MESSAGE
        if text:
            return text
    return f"API request failed ({response.status_code})"


class InventoryApiClient:
    """
    Thin async client for the endpoints the intake form needs.

    Usage:
        async with InventoryApiClient.from_config(Config()) as api:
            warehouses = await api.list_warehouses("company-1")
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, config: Config, client: Optional[httpx.AsyncClient] = None) -> "InventoryApiClient":
        return cls(
            config.api_base_url,
            token=config.api_token,
            timeout=config.api_timeout_seconds,
            client=client,
        )

    async def __aenter__(self) -> "InventoryApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_warehouses(self, context_id: str) -> list[Warehouse]:
        payload = await self._request(
            "GET", "/warehouses", context_id, params={"company": company_iri(context_id)},
        )
        return self._parse_items(Warehouse, _collection_members(payload))

    async def list_suppliers(
        self,
        context_id: str,
        search_term: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Supplier]:
        params = {"company": company_iri(context_id)}
        if search_term:
            params["name"] = search_term
        if status:
            params["status"] = status
        payload = await self._request("GET", "/suppliers", context_id, params=params)
        return self._parse_items(Supplier, _collection_members(payload))

    async def create_purchase_order(self, payload: DraftOrderPayload) -> str:
        wire = payload.to_wire()
        body: dict[str, Any] = {
            "company": company_iri(payload.context_id),
            "warehouse": _iri("warehouses", payload.warehouse_id),
            "supplier": _iri("suppliers", payload.supplier_id),
            "supplierName": wire["supplierDisplayName"],
            "orderDate": wire["orderDate"],
            "status": wire["status"],
        }
        if "expectedDate" in wire:
            body["expectedDate"] = wire["expectedDate"]

        created = await self._request("POST", "/purchase_orders", payload.context_id, json=body)
        order_id = created.get("poId") if isinstance(created, dict) else None
        if not order_id:
            raise ServiceError("API response did not include a purchase order id")
        return str(order_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _headers(self, context_id: Optional[str]) -> dict[str, str]:
        headers = {
            "Accept": "application/json, application/ld+json",
            "User-Agent": USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if context_id:
            # Tenant scoping for the multi-company backend
            headers["X-Company-Id"] = context_id
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        context_id: Optional[str],
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(
                method, url, params=params, json=json, headers=self._headers(context_id),
            )
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ServiceError(f"API request failed: {e}") from e

        if response.is_error:
            message = extract_error_message(response)
            logger.error("%s %s returned HTTP %d: %s", method, url, response.status_code, message)
            raise ServiceError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            if response.text.strip().startswith("<"):
                raise ServiceError(HTML_RESPONSE_MESSAGE, status_code=response.status_code)
            raise ServiceError("API request failed: expected JSON response",
                               status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise ServiceError("Received malformed JSON response from API") from e

    @staticmethod
    def _parse_items(model, items: list[dict]) -> list:
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            logger.error("Unexpected %s payload from API: %s", model.__name__, e)
            raise ServiceError(f"Unexpected {model.__name__.lower()} data from API") from e
