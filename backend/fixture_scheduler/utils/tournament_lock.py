"""
Tournament-scoped exclusive lock, held until the owning transaction ends.

PostgreSQL: pg_advisory_xact_lock keyed by tournament id. The server releases
it at commit or rollback, across every process sharing the database.

Other dialects (SQLite in tests and local runs): an in-process lock per
tournament id, released from the session's after_transaction_end event of the
root transaction, and dropped from the registry once no transaction holds or
waits for it. This only serializes writers inside one process, so such
deployments must run a single writer.

Acquiring the same tournament twice inside one transaction is a no-op.
"""

import logging
import threading
from typing import Dict

from sqlalchemy import event, text
from sqlmodel import Session

logger = logging.getLogger(__name__)

LOCK_ADVISORY = "advisory"
LOCK_LOCAL = "local"

_HELD_KEY = "fixture_scheduler.tournament_locks"
_LISTENER_KEY = "fixture_scheduler.tournament_lock_listener"

class _LocalLock:
    """In-process lock for one tournament; users counts the holder and waiters"""

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


_registry_guard = threading.Lock()
_local_locks: Dict[int, _LocalLock] = {}


def _check_out_local_lock(tournament_id: int) -> threading.Lock:
    with _registry_guard:
        entry = _local_locks.get(tournament_id)
        if entry is None:
            entry = _LocalLock()
            _local_locks[tournament_id] = entry
        entry.users += 1
        return entry.lock


def _release_local_lock(tournament_id: int) -> None:
    # Entries are dropped once nobody holds or waits for them
    with _registry_guard:
        entry = _local_locks[tournament_id]
        entry.lock.release()
        entry.users -= 1
        if entry.users == 0:
            del _local_locks[tournament_id]


def _held(session: Session) -> Dict[int, str]:
    return session.info.setdefault(_HELD_KEY, {})


def _on_transaction_end(session: Session, transaction) -> None:
    # Savepoints end inside the transaction; only the root releases
    if transaction.parent is not None:
        return
    held = session.info.get(_HELD_KEY)
    if not held:
        return
    for tournament_id, kind in sorted(held.items()):
        if kind == LOCK_LOCAL:
            _release_local_lock(tournament_id)
        logger.debug(f"Released tournament lock {tournament_id} ({kind})")
    held.clear()


def _ensure_release_listener(session: Session) -> None:
    if session.info.get(_LISTENER_KEY):
        return
    event.listen(session, "after_transaction_end", _on_transaction_end)
    session.info[_LISTENER_KEY] = True


def is_tournament_locked(session: Session, tournament_id: int) -> bool:
    """True if this session's current transaction holds the tournament lock."""
    return tournament_id in session.info.get(_HELD_KEY, {})


def acquire_tournament_lock(session: Session, tournament_id: int) -> None:
    """
    Block until this session's transaction holds the lock for tournament_id.

    Must be called before reading enrollment or match state. The lock lives
    exactly as long as the current transaction.
    """
    held = _held(session)
    if tournament_id in held:
        return

    _ensure_release_listener(session)
    # Begin explicitly so after_transaction_end is guaranteed to fire for this lock
    if not session.in_transaction():
        session.begin()

    if session.get_bind().dialect.name == "postgresql":
        session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": int(tournament_id)})
        held[tournament_id] = LOCK_ADVISORY
    else:
        _check_out_local_lock(tournament_id).acquire()
        held[tournament_id] = LOCK_LOCAL
    logger.debug(f"Acquired tournament lock {tournament_id} ({held[tournament_id]})")
