import logging
import threading
import uuid
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from aws_config import get_sns_topic_arn
from aws_lib.sns_client import SNSClient

from . import workflow
from .feed import INSERT, UPDATE, ChangeEvent, ChangeFeed, SNSNotifier, TableSnapshot
from .ledger import summarize
from .models import Expense
from .store import DynamoVersions, LaundryStore

logger = logging.getLogger(__name__)


class LaundryService:
    """
    The operations behind the customer and admin views. Each write goes to
    the store first and is published on the change feed once committed.
    """

    def __init__(self, store, feed, price_per_load=workflow.PRICE_PER_LOAD, clock=timezone.now):
        self.store = store
        self.feed = feed
        self.price_per_load = Decimal(str(price_per_load))
        self.clock = clock

        # Admin-wide lists; the per-request policy check still runs first
        self.all_orders = TableSnapshot(feed, store.orders_table, store.fetch_orders)
        self.all_expenses = TableSnapshot(feed, store.expenses_table, store.fetch_expenses)

    # orders

    def create_order(self, principal, client_name, load_count, instructions=None):
        order = workflow.new_order(
            principal.user_id,
            client_name,
            load_count,
            instructions,
            unit_price=self.price_per_load,
            now=self.clock(),
        )
        self.store.insert_order(principal, order)
        self.feed.publish(ChangeEvent(self.store.orders_table, INSERT, order.to_item()))
        return order

    def advance_status(self, principal, order_id):
        """
        Move an order one stage forward. Completed orders are returned
        untouched: no write, no event.
        """
        self.store.policy.check_order_update(principal)
        order = self.store.get_order(principal, order_id)
        advanced = workflow.advance(order, self.clock())
        if advanced is order:
            logger.info("Order %s is already %s", order_id, order.status.value)
            return order

        saved = self.store.update_order_status(principal, advanced, expected_status=order.status)
        self.feed.publish(ChangeEvent(self.store.orders_table, UPDATE, saved.to_item()))
        return saved

    def list_orders(self, principal, owner_id=None):
        if owner_id is None:
            self.store.policy.check_order_read(principal, None)
            return self.all_orders.rows()
        return self.store.list_orders(principal, owner_id)

    def customer_orders(self, principal):
        return self.store.list_orders(principal, owner_id=principal.user_id)

    # expenses

    def record_expense(self, principal, description, amount, date=None):
        text = workflow.validate_text(description, "Description")
        money = workflow.validate_amount(amount)
        now = self.clock()
        expense = Expense(
            expense_id=str(uuid.uuid4()),
            description=text,
            amount=money,
            date=date or now,
            created_at=now,
        )
        self.store.insert_expense(principal, expense)
        self.feed.publish(ChangeEvent(self.store.expenses_table, INSERT, expense.to_item()))
        return expense

    def list_expenses(self, principal):
        self.store.policy.check_expense_access(principal)
        return self.all_expenses.rows()

    # reporting

    def ledger(self, principal):
        return summarize(self.list_orders(principal), self.list_expenses(principal))


def build_feed():
    """
    Single process: local counters, no forwarding. With
    LAUNDRY_PUBLISH_CHANGES the counters live in DynamoDB, shared by every
    web worker, and events go out over SNS for consume_changes to apply.
    """
    if getattr(settings, "LAUNDRY_PUBLISH_CHANGES", False):
        return ChangeFeed(
            notifier=SNSNotifier(SNSClient(), get_sns_topic_arn),
            versions=DynamoVersions(),
        )
    return ChangeFeed()


_service = None
_service_lock = threading.Lock()


def get_service():
    """Process-wide service built from Django settings."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = LaundryService(
                    LaundryStore(),
                    build_feed(),
                    price_per_load=getattr(settings, "LAUNDRY_PRICE_PER_LOAD", workflow.PRICE_PER_LOAD),
                )
    return _service


def reset_service():
    global _service
    with _service_lock:
        _service = None
