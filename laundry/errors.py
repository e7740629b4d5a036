class LaundryError(Exception):
    """Base class for every error surfaced to a user action."""


class ValidationError(LaundryError):
    """Malformed input: empty name, non-positive load count or amount."""


class AuthorizationError(LaundryError):
    """The acting principal is not allowed to perform the read or write."""


class TransportError(LaundryError):
    """The store (or the notification topic) could not be reached."""


class OrderNotFoundError(LaundryError):
    def __init__(self, order_id):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class InvalidTransitionError(LaundryError):
    """The order changed stage since it was read; the write was refused."""
