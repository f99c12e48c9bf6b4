"""Typed errors raised by the commitment, reconciliation and status flows.

Every error carries a ``messages`` mapping of ``{field: [message, ...]}``,
mirroring the shape of ``protean.exceptions.ValidationError`` so API
responses look the same whichever layer rejected the request.
"""


class StorefrontError(Exception):
    """Base class for storefront business errors."""

    status_code = 400

    def __init__(self, messages: dict[str, list[str]]):
        super().__init__(messages)
        self.messages = messages

    def __str__(self) -> str:
        return "; ".join(f"{field}: {', '.join(msgs)}" for field, msgs in self.messages.items())


class ProductNotFound(StorefrontError):
    status_code = 404


class OrderNotFound(StorefrontError):
    status_code = 404


class PriceMismatch(StorefrontError):
    """The cart was priced against a stale or tampered catalogue price."""

    status_code = 400


class InsufficientStock(StorefrontError):
    status_code = 400


class Forbidden(StorefrontError):
    status_code = 403


class InvalidTransition(StorefrontError):
    status_code = 409


class SignatureInvalid(StorefrontError):
    """Webhook payload could not be authenticated against the shared secret."""

    status_code = 401


class Conflict(StorefrontError):
    """Concurrent writers kept winning the race; the caller should retry."""

    status_code = 409
