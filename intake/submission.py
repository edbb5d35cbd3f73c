"""
Guarded purchase-order submission.

State machine: idle -> submitting -> succeeded | failed.

submit() while a submission is in flight does nothing, so rapid repeated
triggers create exactly one order. Validation failures go straight to
"failed" without touching the service; service failures keep the draft
untouched so the user can fix it and resubmit.
"""
import logging
from typing import Callable, Iterable, Optional

from models.purchase_order import DraftOrder, DraftOrderPayload
from models.state import SubmissionState
from models.supplier import Supplier
from .services import OrderSubmissionService, describe_error
from .validator import DraftValidator

logger = logging.getLogger(__name__)

SUBMIT_FALLBACK_MESSAGE = "Failed to create purchase order. Please try again."


def _always_current() -> bool:
    return True


class SubmissionController:

    def __init__(
        self,
        service: OrderSubmissionService,
        validator: Optional[DraftValidator] = None,
        fallback_message: str = SUBMIT_FALLBACK_MESSAGE,
        on_change: Optional[Callable[[SubmissionState], None]] = None,
    ):
        self.service = service
        self.validator = validator or DraftValidator()
        self.fallback_message = fallback_message
        self._on_change = on_change
        self.state = SubmissionState()

    @property
    def is_submitting(self) -> bool:
        return self.state.status == "submitting"

    def reset(self) -> None:
        """Back to idle. An in-flight submission keeps its guard until it resolves."""
        if self.is_submitting:
            return
        if self.state.status != "idle":
            self._set(SubmissionState())

    def clear_error(self) -> None:
        if self.state.status == "failed":
            self._set(SubmissionState())

    async def submit(
        self,
        draft: DraftOrder,
        has_context: bool,
        suppliers: Iterable[Supplier],
        is_current: Callable[[], bool] = _always_current,
    ) -> Optional[str]:
        """
        Validate and submit draft. Returns the new order id on success,
        otherwise None (details are in self.state).
        """
        if self.is_submitting:
            logger.debug("Submit ignored: a submission is already in flight")
            return None

        result = self.validator.validate(draft, has_context, suppliers)
        if not result.ok:
            self._set(SubmissionState(status="failed", error_message=result.message))
            return None

        payload = DraftOrderPayload.from_draft(draft, result.supplier)
        self._set(SubmissionState(status="submitting"))

        try:
            order_id = await self.service.create_purchase_order(payload)
        except Exception as exc:
            if not is_current():
                logger.warning("Discarding failed submission for superseded context %s: %s",
                               payload.context_id, exc)
                self._set(SubmissionState())
                return None
            message = describe_error(exc, self.fallback_message)
            logger.error("Failed to create purchase order for %s: %s",
                         payload.context_id, message, exc_info=exc)
            self._set(SubmissionState(status="failed", error_message=message, cause=exc))
            return None

        if not is_current():
            logger.warning("Purchase order %s created for superseded context %s; result ignored",
                           order_id, payload.context_id)
            self._set(SubmissionState())
            return None

        logger.info("Created purchase order %s (supplier=%s, warehouse=%s)",
                    order_id, payload.supplier_id, payload.warehouse_id)
        self._set(SubmissionState(status="succeeded", order_id=order_id))
        return order_id

    def _set(self, state: SubmissionState) -> None:
        self.state = state
        if self._on_change is not None:
            self._on_change(state)
