"""
Service layer for the Token Ledger.
Handles minting, burning, transfers and allowances with conservation guarantees:
transfers never create or destroy points, only mint and burn change the total supply.
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from tokens.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    MintUnauthorized,
    SupplyOverflow,
    TokenPermissionDenied,
)
from tokens.models import MAX_AMOUNT, Allowance, Minter, Token, TokenAccount

logger = logging.getLogger(__name__)


def _check_amount(amount) -> int:
    # bool is an int subclass, but True is never a meaningful amount.
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0 or amount > MAX_AMOUNT:
        raise InvalidAmount(amount)
    return amount


class TokenLedger:
    """
    Balance keeping for one Token.

    Every mutating method runs inside `transaction.atomic` and locks the rows it
    touches, so callers may nest it inside their own transaction and have it
    rolled back together with their changes.
    """

    def __init__(self, token: Token):
        self.token = token

    @classmethod
    def deploy(cls, name: str, symbol: str, owner: str) -> "TokenLedger":
        """
        Creates a new token. The owner is not a minter until granted.
        """
        token = Token.objects.create(name=name, symbol=symbol, owner=owner)
        logger.info("Deployed token %s owned by %s", token, owner)
        return cls(token)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def balance_of(self, holder: str) -> int:
        balance = (
            TokenAccount.objects.filter(token_id=self.token.pk, holder=holder)
            .values_list("balance", flat=True)
            .first()
        )
        return balance or 0

    def allowance(self, owner: str, spender: str) -> int:
        amount = (
            Allowance.objects.filter(token_id=self.token.pk, owner=owner, spender=spender)
            .values_list("amount", flat=True)
            .first()
        )
        return amount or 0

    def total_supply(self) -> int:
        return Token.objects.values_list("total_supply", flat=True).get(pk=self.token.pk)

    def is_minter(self, principal: str) -> bool:
        return Minter.objects.filter(token_id=self.token.pk, principal=principal).exists()

    # ------------------------------------------------------------------
    # Minting authority
    # ------------------------------------------------------------------

    @transaction.atomic
    def grant_minter(self, caller: str, principal: str) -> None:
        token = self._locked_token()
        if caller != token.owner:
            raise TokenPermissionDenied(caller)
        Minter.objects.get_or_create(token=token, principal=principal)
        logger.info("Granted minting authority on %s to %s", token.symbol, principal)

    @transaction.atomic
    def revoke_minter(self, caller: str, principal: str) -> None:
        token = self._locked_token()
        if caller != token.owner:
            raise TokenPermissionDenied(caller)
        Minter.objects.filter(token=token, principal=principal).delete()
        logger.info("Revoked minting authority on %s from %s", token.symbol, principal)

    def mint_capability(self, minter: str) -> "MintCapability":
        """
        Returns a handle that mints on behalf of `minter`.
        Authority is checked on every call, so a revoked minter fails immediately.
        """
        return MintCapability(ledger=self, minter=minter)

    # ------------------------------------------------------------------
    # Supply changes
    # ------------------------------------------------------------------

    @transaction.atomic
    def mint(self, minter: str, to: str, amount: int) -> None:
        _check_amount(amount)
        token = self._locked_token()

        if not Minter.objects.filter(token=token, principal=minter).exists():
            raise MintUnauthorized(minter)
        if token.total_supply + amount > MAX_AMOUNT:
            raise SupplyOverflow(token.total_supply, amount)

        account = self._locked_account(to)
        account.balance += amount
        account.save(update_fields=["balance", "updated_at"])

        token.total_supply += amount
        token.save(update_fields=["total_supply", "updated_at"])
        logger.debug("Minted %s %s to %s (minter=%s)", amount, token.symbol, to, minter)

    @transaction.atomic
    def burn(self, holder: str, amount: int) -> None:
        _check_amount(amount)
        token = self._locked_token()

        account = self._locked_account(holder)
        if account.balance < amount:
            raise InsufficientBalance(holder, account.balance, amount)

        account.balance -= amount
        account.save(update_fields=["balance", "updated_at"])

        token.total_supply -= amount
        token.save(update_fields=["total_supply", "updated_at"])
        logger.debug("Burned %s %s from %s", amount, token.symbol, holder)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    @transaction.atomic
    def approve(self, owner: str, spender: str, amount: int) -> None:
        _check_amount(amount)
        Allowance.objects.update_or_create(
            token_id=self.token.pk, owner=owner, spender=spender, defaults={"amount": amount}
        )
        logger.debug("%s approved %s to spend %s", owner, spender, amount)

    @transaction.atomic
    def transfer(self, sender: str, to: str, amount: int) -> None:
        _check_amount(amount)
        self._move(sender, to, amount)

    @transaction.atomic
    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        """
        Moves `amount` from `owner` to `to`, consuming `spender`'s allowance.
        """
        _check_amount(amount)

        allowance = (
            Allowance.objects.select_for_update()
            .filter(token_id=self.token.pk, owner=owner, spender=spender)
            .first()
        )
        available = allowance.amount if allowance else 0
        if available < amount:
            raise InsufficientAllowance(owner, spender, available, amount)

        self._move(owner, to, amount)

        if allowance is not None:
            allowance.amount -= amount
            allowance.save(update_fields=["amount", "updated_at"])

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _locked_token(self) -> Token:
        return Token.objects.select_for_update().get(pk=self.token.pk)

    def _locked_account(self, holder: str) -> TokenAccount:
        account, _ = TokenAccount.objects.select_for_update().get_or_create(token_id=self.token.pk, holder=holder)
        return account

    def _move(self, sender: str, to: str, amount: int) -> None:
        # Accounts are always locked in sorted holder order.
        accounts = {holder: self._locked_account(holder) for holder in sorted({sender, to})}
        source = accounts[sender]

        if source.balance < amount:
            raise InsufficientBalance(sender, source.balance, amount)
        if sender == to:
            return

        target = accounts[to]
        source.balance -= amount
        target.balance += amount
        source.save(update_fields=["balance", "updated_at"])
        target.save(update_fields=["balance", "updated_at"])
        logger.debug("Transferred %s from %s to %s", amount, sender, to)


@dataclass(frozen=True)
class MintCapability:
    """
    Minting authority of a single principal on a single token ledger.
    """

    ledger: TokenLedger
    minter: str

    def mint(self, to: str, amount: int) -> None:
        self.ledger.mint(self.minter, to, amount)

    def is_active(self) -> bool:
        return self.ledger.is_minter(self.minter)
