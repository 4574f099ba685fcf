from .locator import DEFAULT_STRATEGIES, LookupStrategy, OperationLocator
from .log import ProfileLog
from .namespace import Namespace, resolve_namespace
from .records import OPERATION_TYPES, ProfiledOperation, normalize_operation_type

__all__ = [
    "DEFAULT_STRATEGIES",
    "LookupStrategy",
    "OperationLocator",
    "ProfileLog",
    "Namespace",
    "resolve_namespace",
    "OPERATION_TYPES",
    "ProfiledOperation",
    "normalize_operation_type",
]
