import logging
from contextlib import contextmanager

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from aws_config import EXPENSES_TABLE, ORDERS_TABLE, VERSIONS_TABLE
from aws_lib.dynamodb_client import DynamoDBClient

from .errors import InvalidTransitionError, OrderNotFoundError, TransportError
from .models import Expense, Order
from .policy import default_policy

logger = logging.getLogger(__name__)


def _error_code(exc):
    return exc.response.get("Error", {}).get("Code", "")


@contextmanager
def store_call(action):
    """Translate botocore failures into TransportError."""
    try:
        yield
    except ClientError as exc:
        logger.error("%s failed: %s", action, _error_code(exc) or exc)
        raise TransportError(f"Could not {action}. Please try again.") from exc
    except BotoCoreError as exc:
        logger.error("%s failed: %s", action, exc)
        raise TransportError(f"Could not {action}. Please try again.") from exc


class LaundryStore:
    """
    Orders and Expenses tables in DynamoDB. Every call is checked against
    the access policy before it reaches the table.
    """

    def __init__(self, ddb=None, policy=default_policy,
                 orders_table=ORDERS_TABLE, expenses_table=EXPENSES_TABLE):
        self.ddb = ddb or DynamoDBClient()
        self.policy = policy
        self.orders_table = orders_table
        self.expenses_table = expenses_table

    # orders

    def insert_order(self, principal, order):
        self.policy.check_order_insert(principal, order)
        with store_call("save the order"):
            self.ddb.put(
                self.orders_table,
                order.to_item(),
                condition=Attr("order_id").not_exists(),
            )
        logger.info("Order %s created for user %s (%s loads)",
                    order.order_id, order.user_id, order.load_count)
        return order

    def get_order(self, principal, order_id):
        with store_call("load the order"):
            item = self.ddb.get(self.orders_table, {"order_id": order_id})
        if not item:
            raise OrderNotFoundError(order_id)
        order = Order.from_item(item)
        self.policy.check_order_read(principal, order.user_id)
        return order

    def list_orders(self, principal, owner_id=None):
        """Newest first. owner_id None lists every owner (admins only)."""
        self.policy.check_order_read(principal, owner_id)
        return self.fetch_orders(owner_id)

    def fetch_orders(self, owner_id=None):
        """
        Unchecked read behind list_orders. Callers run the read policy
        first; TableSnapshot loaders use it directly.
        """
        condition = Attr("user_id").eq(str(owner_id)) if owner_id is not None else None
        with store_call("load orders"):
            items = self.ddb.scan(self.orders_table, filter_expression=condition)
        orders = [Order.from_item(i) for i in items]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def update_order_status(self, principal, order, expected_status):
        """
        Write an order's status together with its refreshed updated_at.
        The write only lands while the stored status is still
        expected_status, so a late writer cannot move an order backwards.
        """
        self.policy.check_order_update(principal)
        try:
            with store_call("update the order"):
                item = self.ddb.update(
                    self.orders_table,
                    {"order_id": order.order_id},
                    {
                        "status": order.status.value,
                        "updated_at": order.updated_at.isoformat(),
                    },
                    condition=Attr("order_id").exists() & Attr("status").eq(expected_status.value),
                )
        except TransportError as exc:
            cause = exc.__cause__
            if isinstance(cause, ClientError) and _error_code(cause) == "ConditionalCheckFailedException":
                raise self._update_conflict(order.order_id, expected_status) from None
            raise
        logger.info("Order %s moved to %s", order.order_id, order.status.value)
        return Order.from_item(item)

    def _update_conflict(self, order_id, expected_status):
        with store_call("load the order"):
            item = self.ddb.get(self.orders_table, {"order_id": order_id})
        if not item:
            return OrderNotFoundError(order_id)
        current = item.get("status")
        logger.warning("Order %s is %s, not %s; update refused", order_id, current, expected_status.value)
        return InvalidTransitionError(
            f"Order was already moved to {current}. Refresh and try again."
        )

    def delete_orders_for_owner(self, owner_id):
        """
        Cascade for a deleted account. Runs outside any principal: the
        account it would be checked against no longer exists.
        """
        with store_call("delete orders"):
            items = self.ddb.scan(
                self.orders_table,
                filter_expression=Attr("user_id").eq(str(owner_id)),
            )
            for item in items:
                self.ddb.delete(self.orders_table, {"order_id": item["order_id"]})
        if items:
            logger.info("Deleted %d orders of removed user %s", len(items), owner_id)
        return [Order.from_item(i) for i in items]

    # expenses

    def insert_expense(self, principal, expense):
        self.policy.check_expense_access(principal)
        with store_call("save the expense"):
            self.ddb.put(
                self.expenses_table,
                expense.to_item(),
                condition=Attr("expense_id").not_exists(),
            )
        logger.info("Expense %s logged: %s", expense.expense_id, expense.amount)
        return expense

    def list_expenses(self, principal):
        self.policy.check_expense_access(principal)
        return self.fetch_expenses()

    def fetch_expenses(self):
        """Unchecked read behind list_expenses, newest date first."""
        with store_call("load expenses"):
            items = self.ddb.scan(self.expenses_table)
        expenses = [Expense.from_item(i) for i in items]
        return sorted(expenses, key=lambda e: e.date, reverse=True)


class DynamoVersions:
    """
    Change-feed version counters kept in DynamoDB so every web worker and
    the consume_changes process see the same numbers.
    """

    def __init__(self, ddb=None, table=VERSIONS_TABLE):
        self.ddb = ddb or DynamoDBClient()
        self.table = table

    @staticmethod
    def _scope(key):
        return "|".join(key)

    def get(self, key):
        with store_call("read change versions"):
            item = self.ddb.get(self.table, {"scope": self._scope(key)})
        return int(item.get("version", 0)) if item else 0

    def bump(self, keys):
        with store_call("bump change versions"):
            for key in keys:
                self.ddb.increment(self.table, {"scope": self._scope(key)}, "version")
