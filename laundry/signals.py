import logging

from django.conf import settings
from django.db.models.signals import post_delete
from django.dispatch import receiver

from .feed import DELETE, ChangeEvent
from .services import get_service

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=settings.AUTH_USER_MODEL)
def delete_owned_orders(sender, instance, **kwargs):
    """Orders go with the account that placed them."""
    service = get_service()
    removed = service.store.delete_orders_for_owner(instance.pk)
    for order in removed:
        service.feed.publish(ChangeEvent(service.store.orders_table, DELETE, order.to_item()))
