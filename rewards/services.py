"""
Service layer for the Reward Ledger.

Access control, the pause switch, the reward catalogue and the engine that ties
them to the token ledger. Every mutating operation runs in one database
transaction that starts by locking the program's LedgerState row, so operations
on a program are serialized and either commit completely or leave no trace.
"""

import functools
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from core.exceptions import (
    ArithmeticOverflow,
    InvalidArgument,
    MintFailed,
    NotFound,
    OutOfStock,
    RewardLedgerError,
    RewardUnavailable,
    SystemPaused,
    TransferFailed,
    Unauthorized,
)
from core.principals import MAX_PRINCIPAL_LENGTH, exceeds_principal_length, is_null_principal
from rewards import caching, signals
from rewards.models import LedgerState, Merchant, RewardItem
from tokens.exceptions import TokenLedgerError
from tokens.models import MAX_AMOUNT
from tokens.services import MintCapability, TokenLedger

logger = logging.getLogger(__name__)


def _is_amount(value) -> bool:
    """Non-negative integer that fits a ledger amount column."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_AMOUNT


def _check_principal(principal, role: str) -> None:
    if is_null_principal(principal):
        raise InvalidArgument(f"{role} must not be the null principal.")
    if exceeds_principal_length(principal):
        raise InvalidArgument(f"{role} must be at most {MAX_PRINCIPAL_LENGTH} characters long.")


def _logs_rejections(method):
    """
    Logs a warning for every RewardLedgerError leaving `method`, then re-raises it.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except RewardLedgerError as exc:
            logger.warning("%s rejected on ledger #%s: %s (%s)", method.__name__, self.state.pk, exc.code, exc)
            raise

    return wrapper


@dataclass(frozen=True)
class Issuance:
    customer: str
    amount: int
    merchant: str


@dataclass(frozen=True)
class Redemption:
    customer: str
    reward_id: str
    cost: int
    remaining_stock: int


class _StateBound:
    """
    Base for components operating on a single LedgerState.
    """

    def __init__(self, state: LedgerState):
        self.state = state

    def _lock(self) -> LedgerState:
        # Must be called inside transaction.atomic; the row lock serializes writers.
        return LedgerState.objects.select_for_update().get(pk=self.state.pk)

    def _fresh(self) -> LedgerState:
        return LedgerState.objects.get(pk=self.state.pk)


class AccessControl(_StateBound):
    """
    Tracks the single administrator and the set of authorized merchants.
    """

    def is_administrator(self, principal: str) -> bool:
        return LedgerState.objects.filter(pk=self.state.pk, administrator=principal).exists()

    def is_merchant(self, principal: str) -> bool:
        return Merchant.objects.filter(state_id=self.state.pk, principal=principal).exists()

    def require_administrator(self, locked_state: LedgerState, caller: str) -> None:
        if is_null_principal(caller) or caller != locked_state.administrator:
            raise Unauthorized(f"{caller!r} is not the administrator.")

    @transaction.atomic
    def set_merchant(self, caller: str, principal: str, authorized: bool) -> None:
        state = self._lock()
        self.require_administrator(state, caller)
        _check_principal(principal, "Merchant")

        authorized = bool(authorized)
        if authorized:
            Merchant.objects.get_or_create(state=state, principal=principal)
        else:
            Merchant.objects.filter(state=state, principal=principal).delete()

        signals.send_on_commit(
            signals.merchant_status_changed, state.pk, merchant=principal, authorized=authorized
        )
        logger.info("Ledger #%s: merchant %s authorized=%s", state.pk, principal, authorized)

    @transaction.atomic
    def transfer_administration(self, caller: str, new_admin: str) -> None:
        state = self._lock()
        self.require_administrator(state, caller)
        _check_principal(new_admin, "New administrator")

        previous = state.administrator
        state.administrator = new_admin
        state.save(update_fields=["administrator", "updated_at"])

        signals.send_on_commit(
            signals.administration_transferred, state.pk, previous_administrator=previous, new_administrator=new_admin
        )
        logger.info("Ledger #%s: administration transferred from %s to %s", state.pk, previous, new_admin)


class PauseSwitch(_StateBound):
    """
    Global running/paused flag gating issuance and redemption.
    """

    def __init__(self, state: LedgerState, access: AccessControl):
        super().__init__(state)
        self.access = access

    def is_paused(self) -> bool:
        return self._fresh().paused

    def ensure_running(self, locked_state: LedgerState) -> None:
        if locked_state.paused:
            raise SystemPaused()

    @transaction.atomic
    def set_paused(self, caller: str, value: bool) -> None:
        state = self._lock()
        self.access.require_administrator(state, caller)

        state.paused = bool(value)
        state.save(update_fields=["paused", "updated_at"])

        signals.send_on_commit(signals.paused_changed, state.pk, paused=state.paused)
        logger.info("Ledger #%s: paused=%s", state.pk, state.paused)


class RewardCatalogue(_StateBound):
    """
    Rewards customers can redeem points for.

    Only the administrator adds rewards or changes their availability; the engine
    itself only ever touches `stock`, one unit per redemption.
    """

    def __init__(self, state: LedgerState, access: AccessControl):
        super().__init__(state)
        self.access = access

    def get_reward(self, reward_id: str) -> RewardItem:
        """
        Returns the catalogue entry, or the zero-value item (cost 0) if there is none.

        Reads outside a transaction go through the versioned cache (rewards.caching).
        Reads inside one go to the database, so uncommitted rows are never cached.
        """
        if transaction.get_connection().in_atomic_block:
            return self._load(reward_id)
        return caching.get_or_load(self.state.pk, reward_id, functools.partial(self._load, reward_id))

    def _load(self, reward_id: str) -> RewardItem:
        return RewardItem.objects.filter(state_id=self.state.pk, reward_id=reward_id).first() or RewardItem()

    @transaction.atomic
    def add_reward(self, caller: str, reward_id: str, name: str, cost: int, stock: int) -> RewardItem:
        """
        Creates or overwrites the entry at `reward_id`. A stock of 0 means unlimited.
        """
        state = self._lock()
        self.access.require_administrator(state, caller)

        if not isinstance(reward_id, str) or not reward_id.strip():
            raise InvalidArgument("Reward id must be a non-empty string.")
        if len(reward_id) > RewardItem._meta.get_field("reward_id").max_length:
            raise InvalidArgument(f"Reward id {reward_id[:16]!r}... is too long.")
        if name is not None and not isinstance(name, str):
            raise InvalidArgument(f"Reward name must be a string, got {name!r}.")
        if name and len(name) > RewardItem._meta.get_field("name").max_length:
            raise InvalidArgument(f"Reward name {name[:16]!r}... is too long.")
        if not _is_amount(cost) or cost == 0:
            raise InvalidArgument(f"Reward cost must be a positive integer, got {cost!r}.")
        if not _is_amount(stock):
            raise InvalidArgument(f"Reward stock must be a non-negative integer, got {stock!r}.")

        item, created = RewardItem.objects.update_or_create(
            state=state,
            reward_id=reward_id,
            defaults={
                "name": name or "",
                "cost": cost,
                "stock": stock,
                "available": True,
                "limited": stock > 0,
            },
        )

        signals.send_on_commit(
            signals.reward_added, state.pk, reward_id=reward_id, name=item.name, cost=cost, stock=stock
        )
        logger.info(
            "Ledger #%s: reward %s %s (cost=%s, stock=%s)",
            state.pk,
            reward_id,
            "added" if created else "replaced",
            cost,
            stock or "unlimited",
        )
        return item

    @transaction.atomic
    def set_availability(self, caller: str, reward_id: str, available: bool) -> None:
        state = self._lock()
        self.access.require_administrator(state, caller)

        item = self.lock_reward(reward_id)
        if item is None or not item.exists:
            raise NotFound(f"Reward {reward_id!r} does not exist.")

        item.available = bool(available)
        item.save(update_fields=["available", "updated_at"])

        signals.send_on_commit(
            signals.reward_availability_changed, state.pk, reward_id=reward_id, available=item.available
        )
        logger.info("Ledger #%s: reward %s available=%s", state.pk, reward_id, item.available)

    def lock_reward(self, reward_id: str) -> Optional[RewardItem]:
        return RewardItem.objects.select_for_update().filter(state_id=self.state.pk, reward_id=reward_id).first()

    def take_one(self, item: RewardItem) -> None:
        """
        Consumes one unit of a limited reward. Unlimited rewards are left untouched.
        Must run inside the redemption transaction so a failed payment restores the unit.
        """
        if item.sold_out:
            raise OutOfStock(f"Reward {item.reward_id!r} is out of stock.")
        if not item.limited:
            return
        item.stock -= 1
        item.save(update_fields=["stock", "updated_at"])


class RewardEngine(_StateBound):
    """
    Issuance and redemption of loyalty points for one program.

    The engine holds a mint capability obtained once at construction; the program's
    token owner must have granted `engine_account` minting authority for issuance
    to succeed.
    """

    def __init__(self, state: LedgerState, mint_capability: Optional[MintCapability] = None):
        super().__init__(state)
        self.token_ledger = TokenLedger(state.token)
        self.mint_capability = mint_capability or self.token_ledger.mint_capability(state.engine_account)
        self.access = AccessControl(state)
        self.pause_switch = PauseSwitch(state, self.access)
        self.catalogue = RewardCatalogue(state, self.access)

    @classmethod
    @transaction.atomic
    def initialize(
        cls, token_ledger: TokenLedger, initial_rate: int, administrator: str, engine_account: Optional[str] = None
    ) -> "RewardEngine":
        """
        Creates a new program issuing `token_ledger`'s token and returns its engine.
        """
        _check_principal(administrator, "Administrator")
        if not _is_amount(initial_rate):
            raise InvalidArgument(f"Reward rate must be a non-negative integer, got {initial_rate!r}.")
        if engine_account is None:
            engine_account = f"reward-engine:{uuid.uuid4()}"
        else:
            _check_principal(engine_account, "Engine account")

        state = LedgerState.objects.create(
            administrator=administrator,
            reward_rate=initial_rate,
            token=token_ledger.token,
            engine_account=engine_account,
        )
        logger.info(
            "Initialized ledger #%s (token=%s, rate=%s, administrator=%s)",
            state.pk,
            token_ledger.token.symbol,
            initial_rate,
            administrator,
        )
        return cls(state, token_ledger.mint_capability(engine_account))

    @classmethod
    def for_state(cls, state_id) -> "RewardEngine":
        return cls(LedgerState.objects.select_related("token").get(pk=state_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_administrator(self, principal: str) -> bool:
        return self.access.is_administrator(principal)

    def is_merchant(self, principal: str) -> bool:
        return self.access.is_merchant(principal)

    def is_paused(self) -> bool:
        return self.pause_switch.is_paused()

    def reward_rate(self) -> int:
        return LedgerState.objects.values_list("reward_rate", flat=True).get(pk=self.state.pk)

    def get_reward_details(self, reward_id: str) -> RewardItem:
        return self.catalogue.get_reward(reward_id)

    def get_user_balance(self, principal: str) -> int:
        return self.token_ledger.balance_of(principal)

    def collected_balance(self) -> int:
        """Points customers have spent on rewards and that have not been burned yet."""
        return self.token_ledger.balance_of(self.state.engine_account)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    @_logs_rejections
    def set_merchant(self, caller: str, principal: str, authorized: bool) -> None:
        self.access.set_merchant(caller, principal, authorized)

    @_logs_rejections
    def transfer_administration(self, caller: str, new_admin: str) -> None:
        self.access.transfer_administration(caller, new_admin)

    @_logs_rejections
    def set_paused(self, caller: str, value: bool) -> None:
        self.pause_switch.set_paused(caller, value)

    @_logs_rejections
    def add_reward(self, caller: str, reward_id: str, name: str, cost: int, stock: int) -> RewardItem:
        return self.catalogue.add_reward(caller, reward_id, name, cost, stock)

    @_logs_rejections
    def set_availability(self, caller: str, reward_id: str, available: bool) -> None:
        self.catalogue.set_availability(caller, reward_id, available)

    @_logs_rejections
    @transaction.atomic
    def set_reward_rate(self, caller: str, new_rate: int) -> None:
        state = self._lock()
        self.access.require_administrator(state, caller)
        if not _is_amount(new_rate):
            raise InvalidArgument(f"Reward rate must be a non-negative integer, got {new_rate!r}.")

        previous = state.reward_rate
        state.reward_rate = new_rate
        state.save(update_fields=["reward_rate", "updated_at"])

        signals.send_on_commit(signals.reward_rate_updated, state.pk, previous_rate=previous, new_rate=new_rate)
        logger.info("Ledger #%s: reward rate %s -> %s", state.pk, previous, new_rate)

    @_logs_rejections
    @transaction.atomic
    def burn_collected(self, caller: str, amount: Optional[int] = None) -> int:
        """
        Burns points collected from redemptions. Burns everything collected when
        `amount` is omitted. Returns the burned amount.
        """
        state = self._lock()
        self.access.require_administrator(state, caller)

        collected = self.token_ledger.balance_of(state.engine_account)
        if amount is None:
            amount = collected
        if not _is_amount(amount) or amount == 0:
            raise InvalidArgument(f"Burn amount must be a positive integer, got {amount!r}.")
        if amount > collected:
            raise InvalidArgument(f"Cannot burn {amount}; only {collected} collected.")

        self.token_ledger.burn(state.engine_account, amount)

        signals.send_on_commit(signals.collected_tokens_burned, state.pk, amount=amount)
        logger.info("Ledger #%s: burned %s collected points", state.pk, amount)
        return amount

    # ------------------------------------------------------------------
    # Economic operations
    # ------------------------------------------------------------------

    @_logs_rejections
    @transaction.atomic
    def issue_rewards(self, caller: str, customer: str, purchase_amount: int) -> Issuance:
        """
        Credits `customer` with purchase_amount * reward_rate points on behalf of merchant `caller`.
        """
        state = self._lock()
        self.pause_switch.ensure_running(state)

        if not self.access.is_merchant(caller):
            raise Unauthorized(f"{caller!r} is not an authorized merchant.")
        _check_principal(customer, "Customer")
        if not _is_amount(purchase_amount):
            raise InvalidArgument(f"Purchase amount must be a non-negative integer, got {purchase_amount!r}.")

        reward_amount = purchase_amount * state.reward_rate
        if reward_amount > MAX_AMOUNT:
            raise ArithmeticOverflow(f"{purchase_amount} * {state.reward_rate} exceeds {MAX_AMOUNT}.")

        try:
            self.mint_capability.mint(customer, reward_amount)
        except TokenLedgerError as exc:
            raise MintFailed(str(exc)) from exc

        signals.send_on_commit(signals.reward_issued, state.pk, customer=customer, amount=reward_amount, merchant=caller)
        logger.info("Ledger #%s: %s issued %s points to %s", state.pk, caller, reward_amount, customer)
        return Issuance(customer=customer, amount=reward_amount, merchant=caller)

    @_logs_rejections
    @transaction.atomic
    def redeem_reward(self, caller: str, reward_id: str) -> Redemption:
        """
        Spends the reward's cost from `caller`'s balance and consumes one unit of stock.

        The caller must have approved `engine_account` to spend at least the cost.
        Stock consumption and payment commit together: if the payment fails the
        stock is restored.
        """
        state = self._lock()
        self.pause_switch.ensure_running(state)

        item = self.catalogue.lock_reward(reward_id)
        if item is None or not item.exists:
            raise NotFound(f"Reward {reward_id!r} does not exist.")
        if not item.available:
            raise RewardUnavailable(f"Reward {reward_id!r} is not available.")

        self.catalogue.take_one(item)

        try:
            self.token_ledger.transfer_from(
                spender=state.engine_account, owner=caller, to=state.engine_account, amount=item.cost
            )
        except TokenLedgerError as exc:
            raise TransferFailed(str(exc)) from exc

        signals.send_on_commit(signals.reward_redeemed, state.pk, customer=caller, reward_id=reward_id, cost=item.cost)
        logger.info("Ledger #%s: %s redeemed %s for %s points", state.pk, caller, reward_id, item.cost)
        return Redemption(customer=caller, reward_id=reward_id, cost=item.cost, remaining_stock=item.stock)
