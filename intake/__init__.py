from .context import ContextBinding, ContextToken
from .services import ServiceError, ReferenceDataService, OrderSubmissionService, describe_error
from .loader import ReferenceDataLoader
from .supplier_search import SupplierSearchIndex, filter_suppliers
from .validator import DraftValidator
from .submission import SubmissionController
from .controller import IntakeController
from .api_client import InventoryApiClient
from .csv_source import CsvReferenceData

__all__ = [
    "ContextBinding", "ContextToken",
    "ServiceError", "ReferenceDataService", "OrderSubmissionService", "describe_error",
    "ReferenceDataLoader", "SupplierSearchIndex", "filter_suppliers",
    "DraftValidator", "SubmissionController", "IntakeController",
    "InventoryApiClient", "CsvReferenceData",
]
