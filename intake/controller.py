"""
Purchase-order intake controller.

IntakeController ties the context binding, the two reference-data loaders,
the supplier picker and the submission controller into one observable state
object for the view:

  1. ContextBinding change   -- reset draft, picker, loaders, submit channel
  2. ReferenceDataLoader x2  -- warehouses and suppliers load concurrently
  3. SupplierSearchIndex     -- picker fed from the supplier load
  4. View intents            -- field edits, supplier query / pick
  5. SubmissionController    -- validate, submit once, report

Everything runs on one asyncio event loop. mount() (and every context
change) must happen while that loop is running, because loads are scheduled
as tasks. Results from superseded contexts or from before close() are dropped.
"""
import asyncio
import logging
from datetime import date
from typing import Callable, Coroutine, Optional, Union

from config import Config
from models.purchase_order import DraftOrder, PurchaseOrderStatus
from models.state import IntakeView, LoaderErrors
from models.supplier import Supplier
from models.warehouse import Warehouse
from .context import ContextBinding, ContextToken
from .loader import ReferenceDataLoader
from .services import OrderSubmissionService, ReferenceDataService
from .submission import SubmissionController
from .supplier_search import SupplierSearchIndex
from .validator import DraftValidator

logger = logging.getLogger(__name__)

WAREHOUSE_FALLBACK_MESSAGE = "Unable to load warehouses. Please try again."
SUPPLIER_FALLBACK_MESSAGE = "Unable to load suppliers. Please try again."

ViewListener = Callable[[IntakeView], None]
SubmittedCallback = Callable[[str], None]
DateInput = Union[str, date, None]


def _add_listener(listeners: list, listener) -> Callable[[], None]:
    listeners.append(listener)

    def remove() -> None:
        if listener in listeners:
            listeners.remove(listener)

    return remove


class IntakeController:
    """
    Usage:
        binding = ContextBinding()
        async with IntakeController(binding, api, api) as intake:
            intake.subscribe(render)
            binding.bind("company-1")
            await intake.wait_until_settled()
            intake.pick_supplier("sup-1")
            order_id = await intake.submit()
    """

    def __init__(
        self,
        binding: ContextBinding,
        reference_service: ReferenceDataService,
        submission_service: OrderSubmissionService,
        config: Optional[Config] = None,
        validator: Optional[DraftValidator] = None,
    ):
        self.config = config or Config()
        self.binding = binding

        self.search = SupplierSearchIndex(fuzzy_threshold=self.config.supplier_fuzzy_threshold)
        self.warehouses: ReferenceDataLoader[Warehouse] = ReferenceDataLoader(
            "warehouses",
            reference_service.list_warehouses,
            is_current=self._is_current,
            fallback_message=WAREHOUSE_FALLBACK_MESSAGE,
            on_change=self._on_warehouses_changed,
        )
        self.suppliers: ReferenceDataLoader[Supplier] = ReferenceDataLoader(
            "suppliers",
            reference_service.list_suppliers,
            is_current=self._is_current,
            fallback_message=SUPPLIER_FALLBACK_MESSAGE,
            on_change=self._on_suppliers_changed,
        )
        self.submission = SubmissionController(
            submission_service,
            validator=validator,
            on_change=lambda _state: self._notify(),
        )

        self._token: ContextToken = binding.token()
        self._draft = self._new_draft(binding.current)
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[ViewListener] = []
        self._submitted_callbacks: list[SubmittedCallback] = []
        self._unsubscribe_context: Optional[Callable[[], None]] = None
        self._mounted = False
        self._closed = False
        self._paused = False
        # Bumped by close(); work started under an older mount is stale
        self._mount_generation = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> "IntakeController":
        """Start following the context binding and load for its current context."""
        if self._mounted:
            return self
        self._mounted = True
        self._closed = False
        self._unsubscribe_context = self.binding.subscribe(self._on_context_changed)
        self._start(self.binding.current)
        return self

    def close(self) -> None:
        """
        Unmount (the view navigated away). Pending loads and submissions keep
        running on the wire but their results are ignored.
        """
        if not self._mounted:
            return
        self._mounted = False
        self._closed = True
        self._mount_generation += 1
        if self._unsubscribe_context is not None:
            self._unsubscribe_context()
            self._unsubscribe_context = None
        self._listeners.clear()
        self._submitted_callbacks.clear()
        logger.debug("Intake controller closed (context=%s)", self._token.context_id)

    async def __aenter__(self) -> "IntakeController":
        return self.mount()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Call listener with a fresh IntakeView after every change."""
        return _add_listener(self._listeners, listener)

    def on_submitted(self, callback: SubmittedCallback) -> Callable[[], None]:
        """Call callback with the new order id after a successful submit."""
        return _add_listener(self._submitted_callbacks, callback)

    async def wait_until_settled(self) -> None:
        """Wait for every scheduled reference-data load to finish."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    def reload(self) -> None:
        """Re-run both loads for the current context, keeping the draft."""
        if not self._mounted or self._token.context_id is None:
            return
        logger.info("Reloading reference data for context %s", self._token.context_id)
        self._schedule_loads()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def draft(self) -> DraftOrder:
        return self._draft

    @property
    def form_disabled(self) -> bool:
        return (
            not self.binding.is_bound
            or self.submission.is_submitting
            or self.warehouses.state.is_loading
            or self.suppliers.state.is_loading
            or not self.warehouses.data
            or not self.suppliers.data
        )

    def snapshot(self) -> IntakeView:
        return IntakeView(
            context_id=self._token.context_id,
            warehouses=self.warehouses.data,
            suppliers=self.suppliers.data,
            filtered_suppliers=self.search.filtered,
            supplier_query=self.search.query,
            selected_supplier_id=self.search.selected_id,
            warehouse_id=self._draft.warehouse_id,
            order_date=self._draft.order_date,
            expected_date=self._draft.expected_date,
            status=self._draft.status,
            loader_errors=LoaderErrors(
                warehouse=self.warehouses.state.error_message,
                supplier=self.suppliers.state.error_message,
            ),
            submit_error=self.submission.state.error_message,
            warehouses_loading=self.warehouses.state.is_loading,
            suppliers_loading=self.suppliers.state.is_loading,
            is_submitting=self.submission.is_submitting,
            form_disabled=self.form_disabled,
        )

    # ------------------------------------------------------------------
    # View intents
    # ------------------------------------------------------------------

    def set_warehouse(self, warehouse_id: str) -> None:
        self._draft.warehouse_id = warehouse_id
        self._notify()

    def set_order_date(self, value: DateInput) -> None:
        self._draft.order_date = value
        self._notify()

    def set_expected_date(self, value: DateInput) -> None:
        self._draft.expected_date = value
        self._notify()

    def set_status(self, status: PurchaseOrderStatus) -> None:
        self._draft.status = status
        self._notify()

    def set_supplier_query(self, text: str) -> None:
        self.search.set_query(text)
        self._sync_supplier_fields()
        self._notify()

    def pick_supplier(self, supplier_id: str) -> None:
        """Select a supplier from the picker; also dismisses a stale submit error."""
        changed = self.search.pick(supplier_id)
        self.submission.clear_error()
        if changed:
            self._sync_supplier_fields()
            self._notify()

    async def submit(self) -> Optional[str]:
        """
        Validate and submit the draft. Returns the new order id, or None when
        nothing was created (see snapshot().submit_error). A closed controller
        never reaches the submission service.
        """
        if not self._mounted:
            logger.warning("Submit ignored: intake controller is not mounted")
            return None
        token = self._token
        mount = self._mount_generation
        order_id = await self.submission.submit(
            self._draft,
            has_context=self.binding.is_bound,
            suppliers=self.suppliers.data,
            is_current=lambda: mount == self._mount_generation and self._is_current(token),
        )
        if order_id is None:
            return None

        self._draft = self._new_draft(token.context_id)
        self.search.set_query("")
        self._sync_supplier_fields()
        self._apply_warehouse_default()
        self._notify()
        for callback in list(self._submitted_callbacks):
            callback(order_id)
        return order_id

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _new_draft(self, context_id: Optional[str]) -> DraftOrder:
        return DraftOrder(context_id=context_id, status=self.config.default_order_status)

    def _is_current(self, token: ContextToken) -> bool:
        return not self._closed and self.binding.is_current(token)

    def _on_context_changed(self, context_id: Optional[str]) -> None:
        self._start(context_id)

    def _start(self, context_id: Optional[str]) -> None:
        self._paused = True
        try:
            self._token = self.binding.token()
            self._draft = self._new_draft(context_id)
            self.search.clear()
            self.submission.reset()
            self.warehouses.reset()
            self.suppliers.reset()
            if context_id is not None:
                self._schedule_loads()
        finally:
            self._paused = False
        self._notify()

    def _schedule_loads(self) -> None:
        loop = asyncio.get_running_loop()
        for loader in (self.warehouses, self.suppliers):
            self._spawn(loop, loader.load(self._token))

    def _spawn(self, loop: asyncio.AbstractEventLoop, coro: Coroutine) -> None:
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_warehouses_changed(self, loader: ReferenceDataLoader[Warehouse]) -> None:
        status = loader.state.status
        if status == "ready":
            self._apply_warehouse_default()
        elif status == "error":
            # Previous pick may no longer exist
            self._draft.warehouse_id = ""
        self._notify()

    def _on_suppliers_changed(self, loader: ReferenceDataLoader[Supplier]) -> None:
        status = loader.state.status
        if status in ("ready", "error"):
            self.search.replace(loader.data)
            self._sync_supplier_fields()
        self._notify()

    def _apply_warehouse_default(self) -> None:
        if not self._draft.warehouse_id and self.warehouses.data:
            self._draft.warehouse_id = self.warehouses.data[0].id

    def _sync_supplier_fields(self) -> None:
        self._draft.supplier_id = self.search.selected_id or ""
        self._draft.supplier_display_name = self.search.query

    def _notify(self) -> None:
        if self._paused or not self._listeners:
            return
        view = self.snapshot()
        for listener in list(self._listeners):
            listener(view)
