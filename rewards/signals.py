"""
Signals for the Reward Ledger application.

Every successful mutating ledger operation sends exactly one of the notification
signals below, and only once its transaction has committed. Receivers here forward
them to the notification sink and keep the catalogue cache fresh.
"""

import logging
from functools import partial

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from rewards import caching
from rewards.models import LedgerState, RewardItem
from rewards.tasks import deliver_notification

logger = logging.getLogger(__name__)

merchant_status_changed = Signal()
administration_transferred = Signal()
paused_changed = Signal()
reward_rate_updated = Signal()
reward_added = Signal()
reward_availability_changed = Signal()
reward_issued = Signal()
reward_redeemed = Signal()
collected_tokens_burned = Signal()

NOTIFICATION_KINDS = {
    merchant_status_changed: "merchant_status_changed",
    administration_transferred: "administration_transferred",
    paused_changed: "paused_changed",
    reward_rate_updated: "reward_rate_updated",
    reward_added: "reward_added",
    reward_availability_changed: "reward_availability_changed",
    reward_issued: "reward_issued",
    reward_redeemed: "reward_redeemed",
    collected_tokens_burned: "collected_tokens_burned",
}


def send_on_commit(signal, state_id, **payload):
    """
    Sends `signal` after the current transaction commits. Nothing is sent on rollback.
    """
    transaction.on_commit(partial(_send_committed, signal, state_id, payload))


def _send_committed(signal, state_id, payload):
    # Runs after commit: receiver errors are logged, never raised to the caller.
    for receiver_fn, response in signal.send_robust(sender=LedgerState, state_id=state_id, **payload):
        if isinstance(response, Exception):
            logger.error(
                "Ledger #%s: %s notification failed in %s",
                state_id,
                NOTIFICATION_KINDS[signal],
                getattr(receiver_fn, "__name__", receiver_fn),
                exc_info=response,
            )


@receiver(list(NOTIFICATION_KINDS))
def forward_notification(sender, signal, **kwargs):
    """
    Hands every ledger notification to the delivery task.
    """
    deliver_notification.delay(NOTIFICATION_KINDS[signal], kwargs)


@receiver([post_save, post_delete], sender=RewardItem)
def clear_reward_cache(sender, instance, **kwargs):
    """
    Retires the cached catalogue entry once the write that changed it commits.
    """
    state_id, reward_id = instance.state_id, instance.reward_id
    transaction.on_commit(lambda: caching.invalidate(state_id, reward_id), robust=True)
