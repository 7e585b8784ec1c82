"""Temporary security group exemptions stored in Redis."""
from __future__ import annotations

import logging
from typing import Any, List

import redis

from .errors import CollaboratorError

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = "localhost:6379"
DEFAULT_ALLOW_LIST_KEY = "allowed_sg"


def redis_client(url: str = DEFAULT_REDIS_URL) -> "redis.Redis":
    """Return a client for ``url``; a bare ``host:port`` is accepted."""

    if "://" not in url:
        url = f"redis://{url}/0"
    return redis.Redis.from_url(url, decode_responses=True)


def fetch_allowed_groups(client: Any, key: str = DEFAULT_ALLOW_LIST_KEY) -> List[str]:
    """Return the security group ids currently exempted from notification."""

    try:
        values = client.lrange(key, 0, -1)
    except redis.RedisError as exc:
        raise CollaboratorError("fetch allow list", exc) from exc

    allowed = [value.decode() if isinstance(value, bytes) else str(value) for value in values]
    logger.info("Temporary allowed security groups: %s", allowed)
    return allowed


__all__ = [
    "DEFAULT_ALLOW_LIST_KEY",
    "DEFAULT_REDIS_URL",
    "fetch_allowed_groups",
    "redis_client",
]
