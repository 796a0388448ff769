"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from backend.config import get_settings
from backend.db import HistoryStore, InMemoryHistoryStore, PostgresHistoryStore
from backend.queue import CommitQueue, InMemoryCommitQueue, RedisCommitQueue

logger = logging.getLogger(__name__)

_history_store: HistoryStore | None = None
_commit_queue: CommitQueue | None = None


def get_history_store() -> HistoryStore:
    """
    Return a singleton history store so entries persist across requests.
    """
    global _history_store
    if _history_store:
        return _history_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _history_store = InMemoryHistoryStore()
    else:
        _history_store = PostgresHistoryStore(settings.database_url)
    logger.info("Using history store %s", _history_store.__class__.__name__)
    return _history_store


def get_commit_queue() -> CommitQueue:
    """
    Return a singleton queue for handing history commits to the worker.
    """
    global _commit_queue
    if _commit_queue:
        return _commit_queue

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _commit_queue = RedisCommitQueue(
            url=settings.redis_url,
            queue_key=settings.redis_queue_key,
        )
    else:
        _commit_queue = InMemoryCommitQueue()
    return _commit_queue
