from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

CENTS = Decimal("0.01")


class OrderStatus(str, Enum): # Stages of the laundry pipeline, in order
    PENDING_PICKUP = "Pending Pickup"
    WASHING = "Washing"
    FOLDING = "Folding"
    READY_FOR_RETURN = "Ready for Return"
    COMPLETED = "Completed"


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS)


def _parse_time(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Order: # A customer's laundry order as stored in the Orders table
    order_id: str
    user_id: str
    client_name: str
    load_count: int
    price: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    instructions: Optional[str] = None

    @property
    def is_completed(self):
        return self.status is OrderStatus.COMPLETED

    def with_status(self, status, updated_at):
        return replace(self, status=status, updated_at=updated_at)

    def to_item(self):
        return {
            "order_id": self.order_id,
            "user_id": self.user_id,
            "client_name": self.client_name,
            "load_count": self.load_count,
            "instructions": self.instructions,
            "price": self.price,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_item(cls, item):
        return cls(
            order_id=item["order_id"],
            user_id=str(item["user_id"]),
            client_name=item["client_name"],
            load_count=int(item["load_count"]),
            instructions=item.get("instructions") or None,
            price=to_money(item["price"]),
            status=OrderStatus(item["status"]),
            created_at=_parse_time(item["created_at"]),
            updated_at=_parse_time(item["updated_at"]),
        )


@dataclass(frozen=True)
class Expense: # A business cost logged by an admin
    expense_id: str
    description: str
    amount: Decimal
    date: datetime
    created_at: Optional[datetime] = None

    def to_item(self):
        return {
            "expense_id": self.expense_id,
            "description": self.description,
            "amount": self.amount,
            "date": self.date.isoformat(),
            "created_at": (self.created_at or self.date).isoformat(),
        }

    @classmethod
    def from_item(cls, item):
        return cls(
            expense_id=item["expense_id"],
            description=item["description"],
            amount=to_money(item["amount"]),
            date=_parse_time(item["date"]),
            created_at=_parse_time(item["created_at"]),
        )
