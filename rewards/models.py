"""
Models for the Reward Ledger application.
"""

import hashlib

from django.db import models

from core.models import TimeStampedModel


class LedgerState(TimeStampedModel):
    """
    The state of one loyalty program: who administers it, whether it is paused,
    how many points a unit of purchase earns, and which token it issues.

    `engine_account` is the program's own principal on the token ledger. It holds
    minting authority and collects the points customers spend on rewards.
    """

    administrator = models.CharField(max_length=255)
    paused = models.BooleanField(default=False)
    reward_rate = models.PositiveBigIntegerField()
    token = models.ForeignKey("tokens.Token", on_delete=models.PROTECT, related_name="ledger_states")
    engine_account = models.CharField(max_length=255, unique=True)

    def __str__(self):
        status = "paused" if self.paused else "running"
        return f"Ledger #{self.pk} ({self.token.symbol}, {status})"


class Merchant(TimeStampedModel):
    """
    A principal authorized to issue rewards. Membership is the existence of the row.
    """

    state = models.ForeignKey(LedgerState, on_delete=models.CASCADE, related_name="merchants")
    principal = models.CharField(max_length=255)

    class Meta:
        unique_together = [("state", "principal")]

    def __str__(self):
        return self.principal


class RewardItem(TimeStampedModel):
    """
    An entry of the reward catalogue.

    stock == 0 means unlimited for rewards added without stock. Rewards added with
    a finite stock are flagged `limited`, and for them stock == 0 means sold out.
    A cost of 0 marks the zero-value item returned for unknown ids.
    """

    state = models.ForeignKey(LedgerState, on_delete=models.CASCADE, related_name="catalogue")
    reward_id = models.CharField(max_length=64)
    name = models.CharField(max_length=255, blank=True)
    cost = models.PositiveBigIntegerField(default=0)
    stock = models.PositiveBigIntegerField(default=0)
    available = models.BooleanField(default=False)
    limited = models.BooleanField(default=False)

    class Meta:
        unique_together = [("state", "reward_id")]

    def __str__(self):
        return f"{self.name} ({self.cost} pts)"

    @property
    def exists(self) -> bool:
        return self.cost > 0

    @property
    def sold_out(self) -> bool:
        return self.limited and self.stock == 0

    def as_dict(self) -> dict:
        return {
            "id": self.reward_id,
            "name": self.name,
            "cost": self.cost,
            "stock": self.stock,
            "available": self.available,
        }

    @staticmethod
    def cache_key(state_id, reward_id) -> str:
        digest = hashlib.md5(str(reward_id).encode("utf-8")).hexdigest()
        return f"reward_item:{state_id}:{digest}"
