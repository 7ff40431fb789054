"""
Versioned cache entries for the reward catalogue.

Every catalogue entry is cached under a key that embeds the reward's current
version token. Committed writes replace the token (see rewards.signals), so a row
read before a commit is never served after it, even if its reader stores it late.
"""

import uuid

from django.conf import settings
from django.core.cache import cache

from rewards.models import RewardItem


def _version_key(state_id, reward_id) -> str:
    return f"{RewardItem.cache_key(state_id, reward_id)}:version"


def current_version(state_id, reward_id) -> str:
    key = _version_key(state_id, reward_id)
    version = cache.get(key)
    if version is None:
        candidate = uuid.uuid4().hex
        version = candidate if cache.add(key, candidate, None) else cache.get(key, candidate)
    return version


def entry_key(state_id, reward_id, version: str) -> str:
    return f"{RewardItem.cache_key(state_id, reward_id)}:{version}"


def get_or_load(state_id, reward_id, load):
    """
    Returns the cached entry for the reward's current version, calling `load` on a miss.
    The version is read before `load` runs.
    """
    key = entry_key(state_id, reward_id, current_version(state_id, reward_id))
    item = cache.get(key)
    if item is None:
        item = load()
        cache.set(key, item, settings.REWARD_LEDGER_CACHE_TIMEOUT)
    return item


def invalidate(state_id, reward_id) -> None:
    """Retires every entry cached for the reward so far."""
    cache.set(_version_key(state_id, reward_id), uuid.uuid4().hex, None)
