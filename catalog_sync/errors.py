# catalog_sync/errors.py
# --------------------------------------------------------------------------------------
# Error taxonomy for the catalog bridge.
#   MetadataError       malformed attribute schema, aborts the whole run
#   TransportError      non-2xx / top-level GraphQL errors, fails one product pipeline
#   AdvisoryUserError   userErrors inside a successful response, logged + collected only
# --------------------------------------------------------------------------------------
from __future__ import annotations

from typing import Any, Dict, List, Optional


class CatalogSyncError(Exception):
    """Base class for every error raised by the bridge."""

    # SyncResult of the product pipeline that was running when this was raised
    partial_result = None


class MetadataError(CatalogSyncError):
    pass


class TransportError(CatalogSyncError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class AdvisoryUserError(CatalogSyncError):
    """
    Validation messages returned inside an otherwise successful mutation.
    The reconciler never raises this; it logs it and keeps going.
    """

    def __init__(self, operation: str, user_errors: List[Dict[str, Any]]):
        self.operation = operation
        self.user_errors = list(user_errors or [])
        super().__init__(f"{operation}: {self.summary()}")

    def summary(self) -> str:
        parts = []
        for err in self.user_errors:
            field = err.get("field")
            if isinstance(field, (list, tuple)):
                field = ".".join(str(f) for f in field)
            msg = err.get("message") or ""
            parts.append(f"{field}: {msg}" if field else msg)
        return "; ".join(parts)


class ReconcileError(CatalogSyncError):
    """The destination accepted the request but returned nothing to reconcile against."""
