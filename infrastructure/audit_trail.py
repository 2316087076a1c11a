# ============================================================================
# AUDIT TRAIL REPOSITORY
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Audit and changeset rows
# PURPOSE: Open changesets and read captured audit rows
# CREATED: 19 OCT 2026
# ============================================================================
"""
Audit Trail Repository

Write side: open_changeset() inserts a changeset row inside the caller's
transaction and sets the transaction-local ``audit.changeset_id`` setting,
so every audit row written by log_action() in that transaction references
the changeset.

Read side: list_actions(), row_history() and get_changeset() return typed
AuditRecord / ChangesetRecord models.

Usage:
    trail = AuditTrailRepository.for_model(db, config)
    with db.get_connection() as conn:
        with conn.transaction():
            trail.open_changeset(conn, user_id=7, request_url="/orders/1")
            conn.execute("UPDATE shop.orders SET status = 'paid' WHERE id = 1")

    history = trail.row_history("shop.orders", {"id": 1})
"""

from typing import Any, Dict, List, Optional

from psycopg import sql
from psycopg.types.json import Jsonb

from core.config import get_defaults
from core.contracts import CHANGESET_SETTING, DEFAULT_SCHEMA
from core.models.records import AuditRecord, ChangesetRecord
from core.models.tracking import TrackedModelConfig, split_qualified_name
from infrastructure.base_repository import BaseRepository, RepositoryError


def _table_identifier(qualified: str) -> sql.Composable:
    schema, table = split_qualified_name(qualified)
    return sql.Identifier(schema or DEFAULT_SCHEMA, table)


class AuditTrailRepository(BaseRepository):
    """
    Repository for one audit table and its changeset table.

    Args:
        db: PostgreSQLRepository
        audit_table: Qualified audit table name
        changeset_table: Qualified changeset table name, None if disabled
    """

    def __init__(self, db, audit_table: Optional[str] = None, changeset_table: Optional[str] = None):
        super().__init__(db)
        defaults = get_defaults()
        self.audit_table = audit_table or defaults.qualified_audit_table
        self.changeset_table = changeset_table
        self._audit_ident = _table_identifier(self.audit_table)

    @classmethod
    def for_model(cls, db, config: TrackedModelConfig) -> "AuditTrailRepository":
        names = config.resolve()
        return cls(db, names.qualified_audit_table, names.qualified_changeset_table)

    # =========================================================================
    # CHANGESETS
    # =========================================================================

    def open_changeset(
        self,
        conn,
        user_id: Optional[int] = None,
        session_id: Optional[str] = None,
        request_url: Optional[str] = None,
        request_addr: Optional[str] = None,
    ) -> int:
        """
        Insert a changeset and bind it to the current transaction.

        Must be called inside the caller's transaction; the setting is
        transaction-local and is cleared on commit or rollback.

        Returns:
            New changeset id

        Raises:
            RepositoryError: If changesets are disabled or the insert fails
        """
        if self.changeset_table is None:
            raise RepositoryError(
                f"Changesets are disabled for {self.audit_table}",
                operation="open changeset",
            )

        query = sql.SQL(
            "INSERT INTO {} (transaction_id, user_id, session_id, request_date, request_url, request_addr) "
            "VALUES (txid_current(), %s, %s, now(), %s, %s) RETURNING id"
        ).format(_table_identifier(self.changeset_table))

        with self._error_context("open changeset", self.changeset_table):
            with conn.cursor() as cur:
                cur.execute(query, (user_id, session_id, request_url, request_addr))
                changeset_id = cur.fetchone()["id"]
                cur.execute(
                    "SELECT set_config(%s, %s, true)",
                    (CHANGESET_SETTING, str(changeset_id)),
                )

        self.logger.debug(f"Opened changeset {changeset_id} in {self.changeset_table}")
        return changeset_id

    def get_changeset(self, changeset_id: int) -> Optional[ChangesetRecord]:
        """Get a changeset by id."""
        if self.changeset_table is None:
            return None

        query = sql.SQL("SELECT * FROM {} WHERE id = %s").format(
            _table_identifier(self.changeset_table)
        )
        with self._error_context("get changeset", str(changeset_id)):
            row = self.db.fetch_one(query, (changeset_id,))
        return ChangesetRecord(**row) if row else None

    # =========================================================================
    # AUDIT ROWS
    # =========================================================================

    def list_actions(self, table_name: Optional[str] = None, limit: int = 100) -> List[AuditRecord]:
        """
        List captured events, newest first.

        Args:
            table_name: Optional tracked table filter (defaults schema to public)
            limit: Maximum rows returned
        """
        params: List[Any] = []
        where = sql.SQL("")
        if table_name is not None:
            schema, table = split_qualified_name(table_name)
            where = sql.SQL(" WHERE schema_name = %s AND table_name = %s")
            params.extend([schema or DEFAULT_SCHEMA, table])
        params.append(limit)

        query = sql.SQL("SELECT * FROM {}{} ORDER BY action_id DESC LIMIT %s").format(
            self._audit_ident, where
        )
        with self._error_context("list actions", table_name):
            rows = self.db.fetch_all(query, tuple(params))
        return [AuditRecord(**row) for row in rows]

    def row_history(self, table_name: str, key: Dict[str, Any], limit: int = 100) -> List[AuditRecord]:
        """
        History of one row, oldest first.

        Matches row_data by JSONB containment, so ``key`` is usually the
        primary key columns, e.g. {"id": 42}.
        """
        schema, table = split_qualified_name(table_name)
        query = sql.SQL(
            "SELECT * FROM {} "
            "WHERE schema_name = %s AND table_name = %s AND row_data @> %s "
            "ORDER BY action_id LIMIT %s"
        ).format(self._audit_ident)

        with self._error_context("row history", f"{table_name} {key}"):
            rows = self.db.fetch_all(query, (schema or DEFAULT_SCHEMA, table, Jsonb(key), limit))
        return [AuditRecord(**row) for row in rows]


__all__ = [
    "AuditTrailRepository",
]
