"""Custom exceptions for CafeBot."""
from __future__ import annotations


class CafeBotException(Exception):
    """Base exception for all CafeBot errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class DatabaseException(CafeBotException):
    """Database-related errors."""

    pass


class ConcurrentModificationException(DatabaseException):
    """A conditional write lost the race against another writer."""

    def __init__(self, collection: str, doc_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"{collection}/{doc_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.collection = collection
        self.doc_id = doc_id
        self.expected = expected
        self.actual = actual


class ValidationException(CafeBotException):
    """Input validation errors."""

    def __init__(self, message: str, required: list[str] | None = None) -> None:
        super().__init__(message)
        self.required = required


class NotFoundException(CafeBotException):
    """Referenced entity does not exist."""

    pass


class OrderNotFoundException(NotFoundException):
    """Order (or pending order) not found."""

    def __init__(self, order_id: str | None = None) -> None:
        super().__init__("Order not found")
        self.order_id = order_id


class TenantNotFoundException(NotFoundException):
    """Restaurant account not found."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(f"Restaurant {tenant_id} not found")
        self.tenant_id = tenant_id


class DeliveryCompanyNotFoundException(NotFoundException):
    """Delivery company is not in the catalog."""

    def __init__(self, company_id: str) -> None:
        super().__init__("Delivery company not found")
        self.company_id = company_id


class UnsupportedCompanyException(CafeBotException):
    """No client implementation exists for the delivery company."""

    def __init__(self, company_id: str) -> None:
        super().__init__("Unsupported delivery company")
        self.company_id = company_id


class InvalidStateException(CafeBotException):
    """Operation not allowed in the entity's current state."""

    pass


class ExternalCallException(CafeBotException):
    """Delivery platform call failed."""

    def __init__(self, message: str, company_id: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.company_id = company_id
        self.retryable = retryable


class DuplicateSubmissionException(CafeBotException):
    """One-shot action was already performed."""

    pass


class AuthorizationException(CafeBotException):
    """Authorization/permission errors."""

    pass


class ConfigurationException(CafeBotException):
    """Configuration errors."""

    pass
