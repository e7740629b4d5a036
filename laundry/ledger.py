from dataclasses import dataclass
from decimal import Decimal

from .models import CENTS


@dataclass(frozen=True)
class LedgerSummary:
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    completed_count: int
    expense_count: int


def active_orders(orders):
    return [o for o in orders if not o.is_completed]


def completed_orders(orders):
    return [o for o in orders if o.is_completed]


def current_order(orders):
    """The order a customer is waiting on: first active one of a newest-first list."""
    return next((o for o in orders if not o.is_completed), None)


def summarize(orders, expenses):
    """
    Revenue counts completed orders only. Net profit may go negative.
    """
    completed = completed_orders(orders)
    expenses = list(expenses)
    revenue = sum((o.price for o in completed), Decimal("0")).quantize(CENTS)
    spent = sum((e.amount for e in expenses), Decimal("0")).quantize(CENTS)
    return LedgerSummary(
        total_revenue=revenue,
        total_expenses=spent,
        net_profit=revenue - spent,
        completed_count=len(completed),
        expense_count=len(expenses),
    )
