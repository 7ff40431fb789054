"""
Factories for the rewards application
"""

import factory
from factory.django import DjangoModelFactory

from rewards.models import LedgerState, Merchant, RewardItem
from tests.factories.tokens import MinterFactory, TokenFactory

ADMIN = "admin"
MERCHANT = "merchant-1"
CUSTOMER = "customer-1"


class LedgerStateFactory(DjangoModelFactory):
    """
    Factory for creating LedgerState instances in tests.
    The engine account is granted minting authority unless `grant_minting=False` is passed.
    """

    class Meta:
        model = LedgerState

    administrator = ADMIN
    paused = False
    reward_rate = 10
    token = factory.SubFactory(TokenFactory)
    engine_account = factory.Sequence(lambda n: f"reward-engine-{n}")

    @factory.post_generation
    def grant_minting(obj, create, extracted, **kwargs):
        if create and extracted is not False:
            MinterFactory(token=obj.token, principal=obj.engine_account)


class MerchantFactory(DjangoModelFactory):
    class Meta:
        model = Merchant

    state = factory.SubFactory(LedgerStateFactory)
    principal = factory.Sequence(lambda n: f"merchant_{n}")


class RewardItemFactory(DjangoModelFactory):
    """
    Factory for creating catalogue entries. Unlimited stock by default.
    """

    class Meta:
        model = RewardItem

    state = factory.SubFactory(LedgerStateFactory)
    reward_id = factory.Sequence(lambda n: f"R{n}")
    name = factory.Faker("catch_phrase")
    cost = factory.Faker("random_int", min=50, max=1000)
    stock = 0
    available = True
    limited = factory.LazyAttribute(lambda o: o.stock > 0)

    # Usage: RewardItemFactory(sold_out=True)
    class Params:
        sold_out = factory.Trait(stock=0, limited=True)


def fund(engine, customer, points, approve=True):
    """
    Mints `points` to `customer` through the engine's capability and, by default,
    approves the engine to spend them.
    """
    engine.mint_capability.mint(customer, points)
    if approve:
        engine.token_ledger.approve(customer, engine.state.engine_account, points)
