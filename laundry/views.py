import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import login
from django.contrib.auth.decorators import login_required, user_passes_test
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from .errors import LaundryError
from .forms import CreateOrderForm, ExpenseForm, SignUpForm
from .ledger import active_orders, completed_orders, current_order, summarize
from .policy import Principal, is_laundry_admin
from .services import get_service
from .workflow import STATUS_PIPELINE, progress

logger = logging.getLogger(__name__)

RECENT_EXPENSES = 5


def admin_required(view):
    """Login required, then the admin role; non-admins get a 403."""
    def check(user):
        if not is_laundry_admin(user):
            raise PermissionDenied
        return True
    return login_required(user_passes_test(check)(view))


def _currency():
    return getattr(settings, "LAUNDRY_CURRENCY", "R")


def _page_version(service, table, column=None, value=None):
    """Feed version a page starts polling from; 0 when the counters are unreachable."""
    try:
        return service.feed.version(table, column, value)
    except LaundryError as exc:
        logger.warning("Change version unavailable for %s: %s", table, exc)
        return 0


# customer view
@login_required
def dashboard(request, form=None):
    """
    Loads the signed-in customer's orders and shows:
    - the order form
    - the one order currently in progress
    - completed order history
    """
    service = get_service()
    principal = Principal.from_user(request.user)

    orders = []
    try:
        orders = service.customer_orders(principal)
    except LaundryError as exc:
        messages.error(request, "Failed to load orders")
        logger.warning("Customer dashboard load failed for %s: %s", principal.user_id, exc)

    active = current_order(orders)
    step, total = progress(active.status) if active else (0, len(STATUS_PIPELINE))

    return render(request, "laundry/dashboard.html", {
        "form": form or CreateOrderForm(),
        "active_order": active,
        "active_step": step,
        "total_steps": total,
        "pipeline": [s.value for s in STATUS_PIPELINE],
        "completed_orders": completed_orders(orders),
        "price_per_load": service.price_per_load,
        "currency": _currency(),
        "is_admin": principal.is_admin,
        "feed_version": _page_version(service, service.store.orders_table, "user_id", principal.user_id),
    })


@login_required
@require_POST
def create_order(request):
    """
    Places a new order for the signed-in customer.
    On bad input the dashboard is re-rendered with the form errors.
    """
    form = CreateOrderForm(request.POST)
    if not form.is_valid():
        return dashboard(request, form=form)

    principal = Principal.from_user(request.user)
    try:
        order = get_service().create_order(
            principal,
            form.cleaned_data["client_name"],
            form.cleaned_data["load_count"],
            form.cleaned_data["instructions"],
        )
    except LaundryError as exc:
        messages.error(request, str(exc) or "Failed to place order")
        return redirect("dashboard")

    messages.success(request, f"Order placed! Total: {_currency()}{order.price}")
    return redirect("dashboard")


# admin view
@admin_required
def admin_dashboard(request, expense_form=None):
    """
    Ledger figures, active orders with a Next Step button,
    expense form and the most recent expenses.
    """
    service = get_service()
    principal = Principal.from_user(request.user)

    orders, expenses = [], []
    try:
        orders = service.list_orders(principal)
    except LaundryError:
        messages.error(request, "Failed to load orders")
    try:
        expenses = service.list_expenses(principal)
    except LaundryError:
        messages.error(request, "Failed to load expenses")

    return render(request, "laundry/admin_dashboard.html", {
        "summary": summarize(orders, expenses),
        "active_orders": active_orders(orders),
        "recent_expenses": expenses[:RECENT_EXPENSES],
        "expense_form": expense_form or ExpenseForm(),
        "is_admin": True,
        "currency": _currency(),
        "orders_version": _page_version(service, service.store.orders_table),
        "expenses_version": _page_version(service, service.store.expenses_table),
    })


@admin_required
@require_POST
def advance_order(request, order_id):
    principal = Principal.from_user(request.user)
    try:
        order = get_service().advance_status(principal, order_id)
    except LaundryError as exc:
        messages.error(request, str(exc) or "Failed to update status")
        return redirect("admin_dashboard")

    messages.success(request, f"Status updated to: {order.status.value}")
    return redirect("admin_dashboard")


@admin_required
@require_POST
def add_expense(request):
    form = ExpenseForm(request.POST)
    if not form.is_valid():
        return admin_dashboard(request, expense_form=form)

    principal = Principal.from_user(request.user)
    try:
        get_service().record_expense(
            principal,
            form.cleaned_data["description"],
            form.cleaned_data["amount"],
            form.cleaned_data.get("date"),
        )
    except LaundryError as exc:
        messages.error(request, str(exc) or "Failed to add expense")
        return redirect("admin_dashboard")

    messages.success(request, "Expense added")
    return redirect("admin_dashboard")


# change feed polling
@login_required
@require_GET
def changes(request):
    """
    Version counter of a table scope. The page reloads when it moves.
    Customers only ever see the counter of their own orders.
    """
    service = get_service()
    principal = Principal.from_user(request.user)
    table = request.GET.get("table", "orders")

    tables = {"orders": service.store.orders_table, "expenses": service.store.expenses_table}
    if table not in tables:
        return JsonResponse({"error": f"Unknown table: {table}"}, status=400)

    if principal.is_admin:
        scope = (tables[table],)
    elif table == "orders":
        scope = (tables[table], "user_id", principal.user_id)
    else:
        return JsonResponse({"error": "Forbidden"}, status=403)

    try:
        version = service.feed.version(*scope)
    except LaundryError as exc:
        return JsonResponse({"error": str(exc)}, status=503)

    return JsonResponse({"table": table, "version": version})


# auth
def signup(request):
    if request.user.is_authenticated:
        return redirect("dashboard")

    if request.method == "POST":
        form = SignUpForm(request.POST)
        if form.is_valid():
            user = form.save()
            login(request, user)
            messages.success(request, "Account created")
            return redirect("dashboard")
    else:
        form = SignUpForm()

    return render(request, "registration/signup.html", {"form": form})
