from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.urls import reverse

from laundry.models import OrderStatus
from laundry.policy import Principal

pytestmark = pytest.mark.django_db


@pytest.fixture
def customer_user():
    return User.objects.create_user("thandi", password="pw")


@pytest.fixture
def admin_user():
    return User.objects.create_user("boss", password="pw", is_staff=True)


@pytest.fixture
def customer_client(client, customer_user):
    client.force_login(customer_user)
    return client


@pytest.fixture
def admin_client(client, admin_user):
    client.force_login(admin_user)
    return client


def admin_principal(user):
    return Principal(str(user.pk), is_admin=True)


def test_dashboard_requires_login(client, service):
    response = client.get(reverse("dashboard"))
    assert response.status_code == 302
    assert reverse("login") in response["Location"]


def test_customer_places_order(customer_client, customer_user, service):
    response = customer_client.post(
        reverse("create_order"),
        {"client_name": "Thandi", "load_count": 3, "instructions": "Cold wash"},
        follow=True,
    )

    assert response.status_code == 200
    assert "Order placed! Total: R225.00" in response.content.decode()

    orders = service.customer_orders(Principal(str(customer_user.pk)))
    assert len(orders) == 1
    assert orders[0].price == Decimal("225.00")
    assert response.context["active_order"] == orders[0]
    assert response.context["active_step"] == 1


def test_invalid_order_form_stores_nothing(customer_client, customer_user, service):
    response = customer_client.post(reverse("create_order"), {"client_name": "Thandi", "load_count": 0})

    assert response.status_code == 200
    assert response.context["form"].errors["load_count"]
    assert service.customer_orders(Principal(str(customer_user.pk))) == []


def test_create_order_rejects_get(customer_client, service):
    assert customer_client.get(reverse("create_order")).status_code == 405


def test_customer_cannot_open_admin_view(customer_client, service):
    assert customer_client.get(reverse("admin_dashboard")).status_code == 403


def test_customer_cannot_advance_orders(customer_client, customer_user, admin_user, service):
    order = service.create_order(Principal(str(customer_user.pk)), "Thandi", 1)

    response = customer_client.post(reverse("advance_order", args=[order.order_id]))

    assert response.status_code == 403
    stored = service.store.get_order(admin_principal(admin_user), order.order_id)
    assert stored.status is OrderStatus.PENDING_PICKUP


def test_admin_advances_order(admin_client, admin_user, service):
    order = service.create_order(Principal("42"), "Sipho", 2)

    response = admin_client.post(reverse("advance_order", args=[order.order_id]), follow=True)

    assert "Status updated to: Washing" in response.content.decode()
    stored = service.store.get_order(admin_principal(admin_user), order.order_id)
    assert stored.status is OrderStatus.WASHING


def test_admin_advance_unknown_order_shows_error(admin_client, service):
    response = admin_client.post(reverse("advance_order", args=["nope"]), follow=True)

    assert response.status_code == 200
    assert "Order nope not found" in response.content.decode()


def test_admin_dashboard_shows_ledger(admin_client, admin_user, service):
    admin = admin_principal(admin_user)
    done = service.create_order(Principal("42"), "Sipho", 2)
    service.create_order(Principal("42"), "Sipho", 4)
    for _ in range(4):
        service.advance_status(admin, done.order_id)
    service.record_expense(admin, "Detergent", "50")

    response = admin_client.get(reverse("admin_dashboard"))

    summary = response.context["summary"]
    assert summary.total_revenue == Decimal("150.00")
    assert summary.total_expenses == Decimal("50.00")
    assert summary.net_profit == Decimal("100.00")
    assert len(response.context["active_orders"]) == 1


def test_admin_adds_expense(admin_client, admin_user, service):
    response = admin_client.post(
        reverse("add_expense"), {"description": "Water bill", "amount": "120.50"}, follow=True
    )

    assert "Expense added" in response.content.decode()
    expenses = service.list_expenses(admin_principal(admin_user))
    assert [(e.description, e.amount) for e in expenses] == [("Water bill", Decimal("120.50"))]


def test_zero_expense_rejected_by_form(admin_client, admin_user, service):
    response = admin_client.post(reverse("add_expense"), {"description": "Soap", "amount": "0"})

    assert response.status_code == 200
    assert response.context["expense_form"].errors["amount"]
    assert service.list_expenses(admin_principal(admin_user)) == []


def test_changes_endpoint_scoped_for_customer(customer_client, customer_user, service):
    url = reverse("changes")
    assert customer_client.get(url).json() == {"table": "orders", "version": 0}

    service.create_order(Principal("someone-else"), "Other", 1)
    assert customer_client.get(url).json()["version"] == 0

    service.create_order(Principal(str(customer_user.pk)), "Thandi", 1)
    assert customer_client.get(url).json()["version"] == 1

    assert customer_client.get(url, {"table": "expenses"}).status_code == 403
    assert customer_client.get(url, {"table": "users"}).status_code == 400


def test_changes_endpoint_for_admin(admin_client, admin_user, service):
    service.record_expense(admin_principal(admin_user), "Soap", "10")
    response = admin_client.get(reverse("changes"), {"table": "expenses"})
    assert response.json() == {"table": "expenses", "version": 1}


def test_signup_logs_in(client, service):
    response = client.post(
        reverse("signup"),
        {"username": "newbie", "email": "", "password1": "a-Strong-pass-123", "password2": "a-Strong-pass-123"},
    )
    assert response.status_code == 302
    assert User.objects.filter(username="newbie").exists()


def test_deleting_user_cascades_orders(customer_user, admin_user, service):
    principal = Principal(str(customer_user.pk))
    service.create_order(principal, "Thandi", 1)
    service.create_order(principal, "Thandi", 2)

    customer_user.delete()

    assert service.list_orders(admin_principal(admin_user)) == []


def test_changes_endpoint_reports_unreachable_counters(customer_client, service, monkeypatch):
    from laundry.errors import TransportError

    def unreachable(*scope):
        raise TransportError("Could not read change versions. Please try again.")

    monkeypatch.setattr(service.feed, "version", unreachable)

    assert customer_client.get(reverse("changes")).status_code == 503
    assert customer_client.get(reverse("dashboard")).context["feed_version"] == 0
