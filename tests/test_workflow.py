from datetime import datetime, timezone
from decimal import Decimal

import pytest

from laundry.errors import ValidationError
from laundry.models import OrderStatus
from laundry.workflow import (
    INITIAL_STATUS,
    PRICE_PER_LOAD,
    STATUS_PIPELINE,
    TERMINAL_STATUS,
    advance,
    compute_price,
    new_order,
    next_status,
    progress,
    validate_amount,
)

NOW = datetime(2025, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("loads", [1, 2, 3, 10, 250])
def test_price_is_loads_times_unit_price(loads):
    assert compute_price(loads) == loads * PRICE_PER_LOAD


def test_price_uses_custom_unit_price():
    assert compute_price(4, Decimal("12.50")) == Decimal("50.00")


@pytest.mark.parametrize("loads", [0, -1, -75])
def test_price_rejects_non_positive_loads(loads):
    with pytest.raises(ValidationError):
        compute_price(loads)


@pytest.mark.parametrize("loads", [1.5, "3", True, None])
def test_price_rejects_non_integer_loads(loads):
    with pytest.raises(ValidationError):
        compute_price(loads)


def test_pipeline_order():
    assert [s.value for s in STATUS_PIPELINE] == [
        "Pending Pickup", "Washing", "Folding", "Ready for Return", "Completed",
    ]
    assert INITIAL_STATUS is OrderStatus.PENDING_PICKUP
    assert TERMINAL_STATUS is OrderStatus.COMPLETED


def test_next_status_walks_the_pipeline():
    assert next_status("Pending Pickup") is OrderStatus.WASHING
    assert next_status(OrderStatus.WASHING) is OrderStatus.FOLDING
    assert next_status(OrderStatus.FOLDING) is OrderStatus.READY_FOR_RETURN
    assert next_status(OrderStatus.READY_FOR_RETURN) is OrderStatus.COMPLETED
    assert next_status(OrderStatus.COMPLETED) is None


def test_next_status_rejects_unknown_status():
    with pytest.raises(ValidationError):
        next_status("Lost")


def test_progress_is_one_based():
    assert progress(OrderStatus.PENDING_PICKUP) == (1, 5)
    assert progress(OrderStatus.COMPLETED) == (5, 5)


def test_new_order_starts_pending_with_price():
    order = new_order("u1", "  Thandi  ", 3, instructions="", now=NOW)

    assert order.price == Decimal("225.00")
    assert order.status is OrderStatus.PENDING_PICKUP
    assert order.client_name == "Thandi"
    assert order.instructions is None
    assert order.created_at == order.updated_at == NOW


@pytest.mark.parametrize("name", ["", "   ", None])
def test_new_order_requires_a_name(name):
    with pytest.raises(ValidationError):
        new_order("u1", name, 1, now=NOW)


def test_advance_four_times_then_noop():
    order = new_order("u1", "Sipho", 1, now=NOW)
    seen = []
    for _ in range(4):
        order = advance(order, NOW)
        seen.append(order.status)

    assert seen == [
        OrderStatus.WASHING,
        OrderStatus.FOLDING,
        OrderStatus.READY_FOR_RETURN,
        OrderStatus.COMPLETED,
    ]
    assert advance(order, NOW) is order


@pytest.mark.parametrize("amount", [0, "0.00", -5, "-0.01", "abc", None, "NaN"])
def test_amount_must_be_positive(amount):
    with pytest.raises(ValidationError):
        validate_amount(amount)


def test_amount_is_quantized_to_cents():
    assert validate_amount("19.999") == Decimal("20.00")
    assert validate_amount(12) == Decimal("12.00")
