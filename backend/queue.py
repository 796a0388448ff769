"""
Queue abstraction for history commits.

Finished calculations are handed off here and persisted by the worker, so the
calculator never waits on the history store. Supports an in-memory fallback
for tests/local runs and a Redis-backed implementation for production.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

from calculation.calculator import HistoryCommit

logger = logging.getLogger(__name__)


class CommitQueue(Protocol):
    """Minimal queue interface for handing history commits to the worker."""

    def enqueue(self, commit: HistoryCommit) -> None:
        ...

    def dequeue(
        self, *, block: bool = True, timeout: int | None = None
    ) -> Optional[HistoryCommit]:
        ...


def encode_commit(commit: HistoryCommit) -> str:
    return json.dumps({"expression": commit.expression, "result": commit.result})


def decode_commit(payload: bytes | str) -> HistoryCommit:
    data = json.loads(payload)
    return HistoryCommit(expression=data["expression"], result=data["result"])


@dataclass
class InMemoryCommitQueue:
    """Simple FIFO queue for testing/dev."""

    # Drains can run concurrently in the threadpool; popleft is atomic.
    items: deque[HistoryCommit] = field(default_factory=deque)

    def enqueue(self, commit: HistoryCommit) -> None:
        self.items.append(commit)

    def dequeue(
        self, *, block: bool = True, timeout: int | None = None
    ) -> Optional[HistoryCommit]:
        try:
            return self.items.popleft()
        except IndexError:
            return None


@dataclass
class RedisCommitQueue:
    """Redis-backed queue using list push/pop operations."""

    url: str
    queue_key: str = "calc:history"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def enqueue(self, commit: HistoryCommit) -> None:
        self.client.rpush(self.queue_key, encode_commit(commit))

    def dequeue(
        self, *, block: bool = True, timeout: int | None = None
    ) -> Optional[HistoryCommit]:
        try:
            if block:
                result = self.client.blpop(self.queue_key, timeout=timeout or 0)
                if result is None:
                    return None
                _, payload = result
            else:
                payload = self.client.lpop(self.queue_key)
                if payload is None:
                    return None
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect and report empty.
            logger.warning("Redis connection lost while reading %s", self.queue_key)
            self.client = redis.Redis.from_url(self.url)
            return None
        return decode_commit(payload)
