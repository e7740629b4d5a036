import logging

from django.core.management.base import BaseCommand

from aws_config import get_sqs_url
from aws_lib.sqs_client import SQSClient
from laundry.errors import LaundryError
from laundry.feed import ChangeEvent
from laundry.services import get_service

logger = logging.getLogger(__name__)


def process_messages(sqs, queue_url, feed, max_messages=10, wait_seconds=5):
    """
    Receive one batch from the changes queue and deliver it to the feed,
    which bumps the shared version counters every web worker polls.
    Malformed messages are deleted; a message whose delivery failed stays
    on the queue for SQS to hand out again.
    Returns the number of events delivered.
    """
    delivered = 0
    for msg in sqs.receive_messages(queue_url, max_messages=max_messages, wait_seconds=wait_seconds):
        try:
            event = ChangeEvent.from_message(msg["Body"])
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Dropping malformed change message %s: %s", msg.get("MessageId"), exc)
        else:
            try:
                feed.deliver(event)
            except LaundryError as exc:
                logger.error("Could not deliver %s on %s, leaving it queued: %s", event.kind, event.table, exc)
                continue
            delivered += 1
            logger.info("[Event] %s on %s", event.kind, event.table)
        sqs.delete_message(queue_url, msg["ReceiptHandle"])
    return delivered


class Command(BaseCommand):
    help = "Long-poll the changes queue and apply events to the shared change-feed versions."

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="Process a single batch and exit.")
        parser.add_argument("--wait", type=int, default=20, help="Long-poll wait in seconds.")

    def handle(self, *args, **options):
        sqs = SQSClient()
        queue_url = get_sqs_url()
        feed = get_service().feed

        self.stdout.write(f"Consuming change events from {queue_url}")
        while True:
            count = process_messages(sqs, queue_url, feed, wait_seconds=options["wait"])
            if options["once"]:
                self.stdout.write(f"Delivered {count} events")
                break
