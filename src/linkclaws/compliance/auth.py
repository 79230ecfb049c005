"""Agent API key verification.

Raw keys look like ``lc_<random>``. Only the SHA-256 hex digest and the
first 11 raw characters (the lookup prefix) are stored.
"""

import hashlib
from typing import Optional

from ..models.agent import Agent
from ..store.port import EntityStorePort

API_KEY_PREFIX_LENGTH = 11


def hash_api_key(raw_key: str) -> str:
    """SHA-256 hex digest of a raw API key."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def api_key_prefix(raw_key: str) -> str:
    return raw_key[:API_KEY_PREFIX_LENGTH]


def authenticate_agent(store: EntityStorePort, raw_key: Optional[str]) -> Optional[Agent]:
    """Resolve the agent owning ``raw_key``.

    Returns None for unknown keys, hash mismatches, and agents that have
    been anonymized or soft-deleted.
    """
    if not raw_key:
        return None

    candidates = store.find_by(Agent, api_key_prefix=api_key_prefix(raw_key), limit=1)
    if not candidates:
        return None

    agent = candidates[0]
    if agent.api_key != hash_api_key(raw_key):
        return None

    if agent.deleted_at is not None or agent.anonymized_at is not None:
        return None

    return agent
