"""Custom exceptions for CatalogRec.

Defines specific exception types for feature context construction, catalog
loading and recommendation lookup. Each carries an HTTP status code so the API
can report it without further translation.
"""

from typing import Any, Dict, Optional


class CatalogRecException(Exception):
    """Base exception for CatalogRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class EmptyInputError(CatalogRecException):
    """Raised when the catalog or the user set is empty."""

    def __init__(self, input_name: str):
        message = (
            f"Cannot compute normalization bounds: {input_name} is empty."
        )
        super().__init__(
            message=message,
            status_code=422,
            details={"input": input_name},
        )


class UnknownCategoricalValueError(CatalogRecException):
    """Raised when a category or color is absent from the index tables."""

    def __init__(self, field: str, value: Any, product_name: Optional[str] = None):
        message = f"Unknown {field} '{value}'"
        if product_name is not None:
            message += f" for product '{product_name}'"
        message += ": value was not present in the catalog when the context was built."
        super().__init__(
            message=message,
            status_code=422,
            details={"field": field, "value": value, "product": product_name},
        )


class MissingProductReferenceError(CatalogRecException):
    """Raised in strict mode when a purchase names a product not in the catalog."""

    def __init__(self, product_name: str, count: int = 1):
        message = (
            f"Purchase references product '{product_name}' "
            f"which is not in the catalog ({count} record(s))."
        )
        super().__init__(
            message=message,
            status_code=422,
            details={"product": product_name, "count": count},
        )


class CatalogError(CatalogRecException):
    """Raised when the catalog cannot be loaded or is malformed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=422, details=details)


class ContextNotReadyError(CatalogRecException):
    """Raised when a recommendation is requested before training."""

    def __init__(self, reason: str = "No feature context has been published yet."):
        super().__init__(
            message=f"{reason} Please train a model first.",
            status_code=503,
        )
