"""
Worker loop that persists queued history commits.

Commits are best-effort: a failed write is logged and dropped, and the
calculator state that produced it is left untouched.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from backend.db import HistoryEntry, HistoryStore
from backend.dependencies import get_commit_queue, get_history_store
from backend.queue import CommitQueue

logger = logging.getLogger(__name__)


def process_next(
    *,
    db: Optional[HistoryStore] = None,
    queue: Optional[CommitQueue] = None,
    block: bool = True,
    timeout: Optional[int] = None,
) -> bool:
    """
    Take one commit off the queue and append it to the history. Returns True if a commit was taken.
    """
    db = db or get_history_store()
    queue = queue or get_commit_queue()

    commit = queue.dequeue(block=block, timeout=timeout)
    if commit is None:
        return False

    try:
        entry: HistoryEntry = db.append(commit.expression, commit.result)
    except Exception:
        logger.exception("Failed to save calculation %r", commit.expression)
        return True

    logger.info("Saved calculation %s: %s = %s", entry.id, entry.expression, entry.result)
    return True


def drain(
    *, db: Optional[HistoryStore] = None, queue: Optional[CommitQueue] = None
) -> int:
    """Persist every commit currently queued without blocking. Returns how many were taken."""
    taken = 0
    while process_next(db=db, queue=queue, block=False):
        taken += 1
    return taken


def run_loop(poll_interval_seconds: float = 2.0) -> None:
    """
    Simple polling loop that blocks on the queue. Intended to be run under systemd/supervisor.
    """
    db = get_history_store()
    queue = get_commit_queue()
    logger.info("History worker started (%s)", queue.__class__.__name__)
    while True:
        processed = process_next(
            db=db, queue=queue, block=True, timeout=int(poll_interval_seconds)
        )
        if not processed:
            time.sleep(poll_interval_seconds)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_loop()
