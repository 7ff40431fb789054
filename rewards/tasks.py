import logging

from celery import shared_task

from rewards.notifications import get_notification_sink

logger = logging.getLogger(__name__)


@shared_task
def deliver_notification(kind, payload):
    """
    Delivers one ledger notification to the configured sink.
    Failures propagate so Celery can report (and, if configured, retry) them.
    """
    sink = get_notification_sink()
    sink.deliver(kind, payload)
    logger.debug("Delivered %s notification to %s", kind, type(sink).__name__)
    return f"Delivered {kind}"
