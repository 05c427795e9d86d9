"""Error kinds raised by the stock ledger.

``ValidationError`` is protean's own, so field validation on the aggregate and
explicit checks in the service surface the same way. The other kinds extend
protean's exception hierarchy and carry the same ``{field: [messages]}`` shape.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

__all__ = [
    "ConflictError",
    "InsufficientStockError",
    "NotFoundError",
    "ValidationError",
    "error_message",
]


def error_message(exc: Exception) -> str:
    """Flatten an exception's messages into one human-readable line."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        flattened = []
        for field_messages in messages.values():
            if isinstance(field_messages, (list, tuple)):
                flattened.extend(str(message) for message in field_messages)
            else:
                flattened.append(str(field_messages))
        return "; ".join(flattened)
    return str(exc)


class _ReadableMessages:
    def __str__(self):
        return error_message(self)


class NotFoundError(_ReadableMessages, ObjectNotFoundError):
    """A referenced product does not exist."""

    _LABELS = {"product_id": "ID", "sku": "SKU"}

    def __init__(self, product_id, field="product_id"):
        self.product_id = product_id
        label = self._LABELS.get(field, field)
        self.messages = {field: [f"Product with {label} '{product_id}' not found"]}
        super().__init__(self.messages)


class ConflictError(_ReadableMessages, InvalidOperationError):
    """The request collides with current state (duplicate SKU, discontinued product)."""

    def __init__(self, field, message):
        self.messages = {field: [message]}
        super().__init__(self.messages)


class InsufficientStockError(_ReadableMessages, InvalidOperationError):
    """A decrease would drive stock below zero."""

    def __init__(self, available, requested, field="quantity"):
        self.available = available
        self.requested = requested
        self.messages = {field: [f"Insufficient stock: {available} available, {requested} requested"]}
        super().__init__(self.messages)
