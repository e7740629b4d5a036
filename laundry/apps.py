from django.apps import AppConfig


class LaundryConfig(AppConfig):
    name = "laundry"
    verbose_name = "Laundry Orders"

    def ready(self):
        # Registers the account-deletion cascade
        from . import signals  # noqa: F401
