# ============================================================================
# AUDIT RECORD MODELS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core model - Rows written by log_action()
# PURPOSE: Typed read-side view of audit and changeset rows
# CREATED: 19 OCT 2026
# EXPORTS: AuditRecord, ChangesetRecord
# DEPENDENCIES: pydantic
# ============================================================================
"""
Audit Record Models

Rows in the audit and changeset tables are created only inside the database
(by the log_action() trigger function, or by opening a changeset). These
models are the read-side representation returned by AuditTrailRepository.

Maps to:
    <schema>.<audit_table>      -> AuditRecord
    <schema>.<changeset_table>  -> ChangesetRecord
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, IPvAnyAddress

from core.contracts import ActionType


class ChangesetRecord(BaseModel):
    """One logical request grouping several audit rows."""

    id: int
    transaction_id: Optional[int] = None
    user_id: Optional[int] = None
    session_id: Optional[str] = None
    request_date: datetime
    request_url: Optional[str] = None
    request_addr: Optional[IPvAnyAddress] = None


class AuditRecord(BaseModel):
    """
    One captured DML event.

    row_data holds the old row for UPDATE/DELETE and the new row for INSERT.
    changed_fields is only set for UPDATE. Statement-level events carry
    neither and have statement_only set.
    """

    action_id: int
    schema_name: str
    table_name: str
    relation_id: int
    transaction_date: datetime
    statement_date: datetime
    action_date: datetime
    transaction_id: Optional[int] = None
    session_user_name: Optional[str] = None
    application_name: Optional[str] = None
    client_addr: Optional[IPvAnyAddress] = None
    client_port: Optional[int] = None
    query: Optional[str] = None
    action_type: ActionType
    row_data: Optional[Dict[str, Any]] = None
    changed_fields: Optional[Dict[str, Any]] = None
    statement_only: bool = False
    changeset_id: Optional[int] = Field(default=None)

    @property
    def qualified_table_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"

    def new_values(self) -> Optional[Dict[str, Any]]:
        """
        Row state after the event, where it can be reconstructed.

        UPDATE: old row overlaid with changed fields. INSERT: row_data.
        DELETE and statement-only events have no new state.
        """
        if self.statement_only or self.action_type is ActionType.DELETE:
            return None
        if self.action_type is ActionType.UPDATE:
            return {**(self.row_data or {}), **(self.changed_fields or {})}
        return self.row_data


__all__ = [
    "AuditRecord",
    "ChangesetRecord",
]
