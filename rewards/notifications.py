"""
Notification sinks: the outside world's view of ledger events.

The sink class is chosen with the REWARD_LEDGER_NOTIFICATION_SINK setting.
"""

import logging

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class NotificationSink:
    """
    Base class for notification sinks.
    """

    def deliver(self, kind: str, payload: dict) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    """
    Writes every notification to the application log.
    """

    def deliver(self, kind, payload):
        logger.info("Ledger notification %s: %s", kind, payload)


class InMemoryNotificationSink(NotificationSink):
    """
    Keeps notifications in a process-wide list. Used by the test suite.
    """

    delivered = []

    def deliver(self, kind, payload):
        self.delivered.append((kind, dict(payload)))

    @classmethod
    def clear(cls):
        cls.delivered.clear()

    @classmethod
    def kinds(cls):
        return [kind for kind, _ in cls.delivered]


def get_notification_sink() -> NotificationSink:
    sink_class = import_string(settings.REWARD_LEDGER_NOTIFICATION_SINK)
    return sink_class()
