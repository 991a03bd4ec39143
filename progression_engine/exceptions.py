"""
Exception hierarchy for the progression engine

The engine prefers clamping and idempotence over raising. Exceptions are
reserved for configuration problems caught at startup (bad achievement or
quote catalogs, invalid settings) and for the persistence layer.

Every error logs itself once, with its context, when it is created.
"""

from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class ProgressionError(Exception):
    """
    Base exception for all progression engine errors

    Example:
        raise ProgressionError(
            message="Failed to apply completion",
            user_id="user-1",
            operation="complete_item",
            context={"item_id": "dua-12"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.request_id = str(uuid4())

        logger.error(
            f"{self.__class__.__name__}: {message}",
            extra={
                "request_id": self.request_id,
                "user_id": user_id,
                "operation": operation,
                "error_context": self.context,
            },
            exc_info=cause
        )


class ValidationError(ProgressionError):
    """Caller input that cannot be clamped into a valid value"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(message, context={"field": field, "value": value}, **kwargs)


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(ProgressionError):
    """Setting is invalid or missing; main() turns this into exit code 1"""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        self.config_key = config_key
        kwargs.setdefault("context", {"config_key": config_key})
        super().__init__(message, **kwargs)


class CatalogError(ConfigurationError):
    """
    Static catalog data (achievements, quotes) failed validation

    Raised while the catalog is being built, never while events are evaluated.
    """

    def __init__(
        self,
        message: str,
        catalog_name: Optional[str] = None,
        entry_id: Optional[str] = None,
        **kwargs
    ):
        self.catalog_name = catalog_name
        self.entry_id = entry_id
        super().__init__(
            message,
            config_key=catalog_name,
            context={"catalog_name": catalog_name, "entry_id": entry_id},
            **kwargs
        )


# ==========================================
# Persistence Errors
# ==========================================

class StorageError(ProgressionError):
    """Base class for persistence collaborator errors"""


class RecordNotFoundError(StorageError):
    """
    Requested record does not exist

    Only for lookups that must succeed. A user without a profile yet is
    normal and goes through ProgressStore.find_profile instead.
    """

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message,
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )
