"""
Models for the Token Ledger application.
Holds point balances, spending allowances and the set of principals allowed to mint.
"""

from django.db import models

from core.models import TimeStampedModel

# Largest amount a balance, allowance or total supply may hold (64-bit signed integer column).
MAX_AMOUNT = 2**63 - 1


class Token(TimeStampedModel):
    """
    A fungible loyalty point token.
    The owner manages who may mint; total_supply changes only through mint and burn.
    """

    name = models.CharField(max_length=255)
    symbol = models.CharField(max_length=16)
    owner = models.CharField(max_length=255)
    total_supply = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"{self.name} ({self.symbol})"


class TokenAccount(TimeStampedModel):
    """
    Balance of a single holder for a single token.
    Rows are created lazily on the first credit.
    """

    token = models.ForeignKey(Token, on_delete=models.CASCADE, related_name="accounts")
    holder = models.CharField(max_length=255)
    balance = models.PositiveBigIntegerField(default=0)

    class Meta:
        unique_together = [("token", "holder")]

    def __str__(self):
        return f"{self.holder}: {self.balance} {self.token.symbol}"


class Allowance(TimeStampedModel):
    """
    Amount `spender` may move out of `owner`'s account via transfer_from.
    """

    token = models.ForeignKey(Token, on_delete=models.CASCADE, related_name="allowances")
    owner = models.CharField(max_length=255)
    spender = models.CharField(max_length=255)
    amount = models.PositiveBigIntegerField(default=0)

    class Meta:
        unique_together = [("token", "owner", "spender")]

    def __str__(self):
        return f"{self.owner} -> {self.spender}: {self.amount}"


class Minter(TimeStampedModel):
    """
    A principal holding minting authority on a token.
    """

    token = models.ForeignKey(Token, on_delete=models.CASCADE, related_name="minters")
    principal = models.CharField(max_length=255)

    class Meta:
        unique_together = [("token", "principal")]

    def __str__(self):
        return f"{self.principal} may mint {self.token.symbol}"
