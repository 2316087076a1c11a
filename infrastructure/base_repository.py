# ============================================================================
# BASE REPOSITORY
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Base repository patterns
# PURPOSE: Shared error wrapping for audit trail repositories
# CREATED: 19 OCT 2026
# ============================================================================
"""
Base Repository

Audit trail reads and writes are not retried. A failure is logged with the
operation name and raised as RepositoryError chained to the driver error.
"""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import Optional


class RepositoryError(Exception):
    """A repository operation failed; __cause__ holds the driver error."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        super().__init__(message)
        self.operation = operation
        self.entity_id = entity_id


class BaseRepository(ABC):
    """
    Args:
        db: PostgreSQLRepository or any object with fetch_one / fetch_all
    """

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(type(self).__name__)

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Wrap driver errors raised inside the block.

        Example:
            with self._error_context("changeset lookup", changeset_id):
                row = self.db.fetch_one(query, (changeset_id,))
        """
        try:
            yield
        except RepositoryError:
            raise
        except Exception as e:
            target = f" for {entity_id}" if entity_id else ""
            message = f"{operation} failed{target}: {e}"
            self.logger.error(message)
            raise RepositoryError(message, operation=operation, entity_id=entity_id) from e


__all__ = [
    "BaseRepository",
    "RepositoryError",
]
