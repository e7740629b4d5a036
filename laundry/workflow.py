"""
Order status pipeline and pricing.

An order moves through STATUS_PIPELINE one step at a time. It never skips
a stage and never moves backwards; Completed is terminal.
"""
import uuid
from decimal import Decimal, InvalidOperation

from .errors import ValidationError
from .models import Order, OrderStatus, to_money

PRICE_PER_LOAD = Decimal("75.00")

STATUS_PIPELINE = (
    OrderStatus.PENDING_PICKUP,
    OrderStatus.WASHING,
    OrderStatus.FOLDING,
    OrderStatus.READY_FOR_RETURN,
    OrderStatus.COMPLETED,
)
INITIAL_STATUS = STATUS_PIPELINE[0]
TERMINAL_STATUS = STATUS_PIPELINE[-1]


def parse_status(status):
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown order status: {status!r}") from None


def next_status(status):
    """Return the stage after `status`, or None when it is terminal."""
    index = STATUS_PIPELINE.index(parse_status(status))
    if index == len(STATUS_PIPELINE) - 1:
        return None
    return STATUS_PIPELINE[index + 1]


def progress(status):
    """(step number, total steps) for progress indicators; step is 1-based."""
    return STATUS_PIPELINE.index(parse_status(status)) + 1, len(STATUS_PIPELINE)


def validate_load_count(load_count):
    # bool is an int subclass, reject it explicitly
    if isinstance(load_count, bool) or not isinstance(load_count, int):
        raise ValidationError("Load count must be a whole number.")
    if load_count < 1:
        raise ValidationError("Load count must be at least 1.")
    return load_count


def compute_price(load_count, unit_price=PRICE_PER_LOAD):
    validate_load_count(load_count)
    return to_money(load_count * to_money(unit_price))


def validate_text(value, label):
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} cannot be empty.")
    return text


def validate_amount(amount):
    try:
        money = to_money(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {amount!r}") from None
    if not money.is_finite() or money <= 0:
        raise ValidationError("Amount must be greater than zero.")
    return money


def new_order(owner_id, client_name, load_count, instructions=None,
              unit_price=PRICE_PER_LOAD, now=None):
    """
    Build a validated order in the initial stage. Nothing is persisted here.
    """
    name = validate_text(client_name, "Client name")
    price = compute_price(load_count, unit_price)
    return Order(
        order_id=str(uuid.uuid4()),
        user_id=str(owner_id),
        client_name=name,
        load_count=load_count,
        instructions=(instructions or "").strip() or None,
        price=price,
        status=INITIAL_STATUS,
        created_at=now,
        updated_at=now,
    )


def advance(order, now):
    """
    Move an order to the next stage. A completed order comes back unchanged.
    """
    following = next_status(order.status)
    if following is None:
        return order
    return order.with_status(following, now)
