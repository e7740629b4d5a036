"""
Change feed for the Orders and Expenses tables.

Every committed write is published as a ChangeEvent. Local listeners are
called in-process; when a topic is configured the event is also pushed to
SNS so other processes can pick it up from the subscribed SQS queue
(see the consume_changes management command).

Version counters per scope let pages and TableSnapshot notice changes
made anywhere; with several processes they live in DynamoDB
(store.DynamoVersions). Listeners should treat an event as "your copy is
stale", not as data to apply: TableSnapshot re-reads the table on its
next access.
"""
import itertools
import json
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError
from django.utils import timezone

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
EVENT_KINDS = (INSERT, UPDATE, DELETE)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: str
    record: dict
    occurred_at: datetime = field(default_factory=timezone.now)

    def __post_init__(self):
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unknown change kind: {self.kind}")

    def to_message(self):
        return json.dumps({
            "table": self.table,
            "kind": self.kind,
            "record": self.record,
            "occurred_at": self.occurred_at.isoformat(),
        }, default=str)

    @classmethod
    def from_message(cls, body):
        data = json.loads(body)
        return cls(
            table=data["table"],
            kind=data["kind"],
            record=data.get("record") or {},
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
        )


@dataclass(frozen=True)
class Subscription:
    sub_id: int
    table: str
    listener: Callable[[ChangeEvent], Any]
    column: Optional[str] = None
    value: Any = None

    def matches(self, event):
        if event.table != self.table:
            return False
        if self.column is None:
            return True
        return str(event.record.get(self.column)) == str(self.value)


class LocalVersions:
    """Version counters for a single process."""

    def __init__(self):
        self._counts = defaultdict(int)
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            return self._counts[key]

    def bump(self, keys):
        with self._lock:
            for key in keys:
                self._counts[key] += 1


class ChangeFeed:

    def __init__(self, notifier=None, versions=None, scoped_columns=("user_id",)):
        """
        notifier: optional callable(ChangeEvent) forwarding events off-process.
        versions: counter store; LocalVersions unless shared across processes.
        scoped_columns: columns whose values get their own version counter.

        With a notifier, the process consuming the queue bumps the versions
        (consume_changes calls deliver); publish only bumps them itself when
        forwarding fails.
        """
        self._notifier = notifier
        self._versions = versions if versions is not None else LocalVersions()
        self._scoped_columns = tuple(scoped_columns)
        self._subscriptions = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, table, listener, column=None, value=None):
        sub = Subscription(next(self._ids), table, listener, column, value)
        with self._lock:
            self._subscriptions[sub.sub_id] = sub
        return sub

    def unsubscribe(self, subscription):
        with self._lock:
            self._subscriptions.pop(subscription.sub_id, None)

    def version(self, table, column=None, value=None):
        return self._versions.get(self._scope_key(table, column, value))

    def publish(self, event):
        if self._notifier is None:
            self.deliver(event)
            return

        self._notify_listeners(event)
        try:
            self._notifier(event)
        except (BotoCoreError, ClientError):
            # The write is already committed; move the counters from here
            logger.exception("Failed to forward %s event on %s", event.kind, event.table)
            self._versions.bump(self._event_keys(event))

    def deliver(self, event):
        """Bump the event's version counters and call local listeners."""
        self._versions.bump(self._event_keys(event))
        return self._notify_listeners(event)

    def _notify_listeners(self, event):
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(event)]

        for sub in targets:
            try:
                sub.listener(event)
            except Exception:
                logger.exception("Change listener %s failed on %s", sub.sub_id, event.table)
        return len(targets)

    def _event_keys(self, event):
        keys = [self._scope_key(event.table)]
        for column in self._scoped_columns:
            if event.record.get(column) is not None:
                keys.append(self._scope_key(event.table, column, event.record[column]))
        return keys

    @staticmethod
    def _scope_key(table, column=None, value=None):
        if column is None:
            return (table,)
        return (table, column, str(value))


class TableSnapshot:
    """
    Cached rows of one table scope. A local change event marks it stale,
    and so does a move of the scope's version counter, which is how writes
    made by other processes show up.
    """

    def __init__(self, feed, table, loader, column=None, value=None):
        self._loader = loader
        self._scope = (table, column, value)
        self._rows = None
        self._stale = True
        self._loaded_version = None
        self._lock = threading.Lock()
        self._subscription = feed.subscribe(table, self.invalidate, column, value)
        self._feed = feed

    @property
    def stale(self):
        return self._stale

    def invalidate(self, event=None):
        self._stale = True

    def rows(self):
        with self._lock:
            version = self._feed.version(*self._scope)
            if self._stale or version != self._loaded_version:
                # Clear first so an event landing mid-load marks it stale again
                self._stale = False
                try:
                    self._rows = list(self._loader())
                except BaseException:
                    self._stale = True
                    raise
                self._loaded_version = version
            return list(self._rows)

    def close(self):
        self._feed.unsubscribe(self._subscription)


class SNSNotifier:
    """Forwards change events to the SNS change topic."""

    def __init__(self, sns_client, topic_arn_lookup):
        self._sns = sns_client
        self._lookup = topic_arn_lookup
        self._topic_arn = None

    def __call__(self, event):
        if self._topic_arn is None:
            self._topic_arn = self._lookup()
        self._sns.publish(
            self._topic_arn,
            event.to_message(),
            attributes={"table": event.table, "kind": event.kind},
        )
        logger.debug("Forwarded %s on %s to %s", event.kind, event.table, self._topic_arn)
