"""
Row-level access rules for the Orders and Expenses tables.

LaundryStore consults AccessPolicy before every read and write. Admin is a
server-side role claim taken from the Django user, never a flag the browser
holds.
"""
from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from .errors import AuthorizationError


@dataclass(frozen=True)
class Principal:
    user_id: Optional[str]
    is_admin: bool = False

    @property
    def is_authenticated(self):
        return self.user_id is not None

    @classmethod
    def anonymous(cls):
        return cls(user_id=None)

    @classmethod
    def from_user(cls, user):
        if user is None or not user.is_authenticated:
            return cls.anonymous()
        return cls(user_id=str(user.pk), is_admin=is_laundry_admin(user))


def is_laundry_admin(user):
    if not user.is_authenticated or not user.is_active:
        return False
    if user.is_staff:
        return True
    group = getattr(settings, "LAUNDRY_ADMIN_GROUP", "Laundry Admins")
    return user.groups.filter(name=group).exists()


class AccessPolicy:

    def require_authenticated(self, principal):
        if not principal.is_authenticated:
            raise AuthorizationError("You must be signed in.")

    def require_admin(self, principal, action):
        self.require_authenticated(principal)
        if not principal.is_admin:
            raise AuthorizationError(f"Only admins may {action}.")

    def check_order_insert(self, principal, order):
        self.require_authenticated(principal)
        if order.user_id != principal.user_id:
            raise AuthorizationError("Orders can only be placed for your own account.")

    def check_order_read(self, principal, owner_id):
        """owner_id None means every owner's orders."""
        self.require_authenticated(principal)
        if principal.is_admin:
            return
        if owner_id is None or str(owner_id) != principal.user_id:
            raise AuthorizationError("You can only view your own orders.")

    def check_order_update(self, principal):
        self.require_admin(principal, "update order status")

    def check_expense_access(self, principal):
        self.require_admin(principal, "manage expenses")


default_policy = AccessPolicy()
