"""
Base repository with transaction management over the in-memory store.

Provides a context manager that handles:
- Holding the store lock for the duration of the block
- Keeping changes on success
- Restoring the previous collections on failure
"""

from contextlib import contextmanager
from typing import Generator

from data_access.store import MemoryStore


class BaseRepository:
    """
    Base class for all repositories.

    Subclasses should use self.transaction() for writes and
    self.read() for reads.
    """

    def __init__(self, store: MemoryStore):
        self.store = store

    @contextmanager
    def transaction(self) -> Generator[MemoryStore, None, None]:
        """
        Context manager for write operations.

        Automatically handles:
        - Taking the store lock
        - Rolling back every collection on exception
        - Releasing the lock in all cases

        Yields:
            The store, for direct access to its collections.

        Example:
            with self.transaction() as store:
                store.leaderboard.append(entry)
        """
        with self.store.lock:
            snapshot = self.store.snapshot()
            try:
                yield self.store
            except Exception:
                self.store.restore(snapshot)
                raise

    @contextmanager
    def read(self) -> Generator[MemoryStore, None, None]:
        """
        Context manager for read-only operations.

        Same lock as transaction() but without the snapshot.
        """
        with self.store.lock:
            yield self.store
