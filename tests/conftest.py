import pytest
from django.core.cache import cache

from rewards.notifications import InMemoryNotificationSink
from rewards.services import RewardEngine
from tests.factories.rewards import ADMIN, MERCHANT, LedgerStateFactory, MerchantFactory


@pytest.fixture(autouse=True)
def enable_db_access_for_all_tests(db):
    """
    Automatically enables database access for all tests.
    """
    pass


@pytest.fixture(autouse=True)
def clean_cache_and_notifications():
    """
    Catalogue cache and the in-memory notification sink are process-wide; reset them per test.
    """
    cache.clear()
    InMemoryNotificationSink.clear()
    yield
    cache.clear()
    InMemoryNotificationSink.clear()


@pytest.fixture
def ledger_state():
    """
    A running program administered by ADMIN, rate 10, whose engine may mint.
    """
    return LedgerStateFactory(administrator=ADMIN, reward_rate=10)


@pytest.fixture
def engine(ledger_state):
    """
    Engine bound to `ledger_state`, with MERCHANT already authorized.
    """
    MerchantFactory(state=ledger_state, principal=MERCHANT)
    return RewardEngine(ledger_state)


@pytest.fixture
def notifications():
    """
    The sink configured for tests; lists delivered (kind, payload) pairs.
    """
    return InMemoryNotificationSink
