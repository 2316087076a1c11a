# ============================================================================
# TRACKED MODEL CONFIGURATION
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core model - Per-table tracking configuration
# PURPOSE: Describe which table is audited and where its audit rows go
# CREATED: 19 OCT 2026
# EXPORTS: TrackedModelConfig, TriggerOptions, ResolvedAuditNames,
#          TrackingConfigError, split_qualified_name
# DEPENDENCIES: pydantic
# ============================================================================
"""
Tracked Model Configuration

A TrackedModelConfig is the explicit, typed replacement for looking up
tracking behaviour on an ORM model at runtime. It names:

- the tracked (source) table
- the audit table receiving one row per DML event
- the optional changeset table grouping audit rows per request

Audit and changeset tables always live in the same schema. An unqualified
audit table name resolves to the "public" schema.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from core.contracts import DEFAULT_SCHEMA


class TrackingConfigError(ValueError):
    """Raised when a tracking configuration cannot be turned into DDL."""

    def __init__(self, message: str, model_id: Optional[str] = None):
        self.model_id = model_id
        super().__init__(message)


def split_qualified_name(name: str) -> Tuple[Optional[str], str]:
    """
    Split "schema.table" into (schema, table).

    Returns (None, name) for unqualified names.
    """
    schema, dot, table = name.partition(".")
    if not dot:
        return None, name
    if not schema or not table:
        raise TrackingConfigError(f"Malformed qualified name: {name!r}")
    return schema, table


class TriggerOptions(BaseModel):
    """
    Arguments passed to log_action() by the installed triggers.

    Maps to TG_ARGV[0..2] inside the trigger function.
    """
    log_query: bool = Field(default=True, description="Capture client query text")
    excluded_columns: List[str] = Field(
        default_factory=list,
        description="Columns omitted from changed_fields, and from row_data on INSERT/DELETE (UPDATE row_data keeps the full old row)"
    )
    log_client: bool = Field(
        default=True,
        description="Capture session user, application name, client address and port"
    )

    @property
    def is_default(self) -> bool:
        return self.log_query and self.log_client and not self.excluded_columns


class ResolvedAuditNames(BaseModel):
    """Schema-split names used by the templates."""
    schema_name: str
    audit_table: str
    changeset_table: Optional[str] = None
    source_table: str

    @property
    def qualified_audit_table(self) -> str:
        return f"{self.schema_name}.{self.audit_table}"

    @property
    def qualified_changeset_table(self) -> Optional[str]:
        if self.changeset_table is None:
            return None
        return f"{self.schema_name}.{self.changeset_table}"


class TrackedModelConfig(BaseModel):
    """
    Tracking configuration for one table.

    Example:
        TrackedModelConfig(
            model_id="orders",
            table_name="shop.orders",
            audit_table_name="audits.logged_actions",
            changeset_table_name="audits.changesets",
        )
    """

    model_id: str = Field(..., min_length=1, max_length=128)
    table_name: str = Field(..., min_length=1, description="Tracked table, schema-qualified")
    audit_table_name: str = Field(..., min_length=1)
    changeset_table_name: Optional[str] = Field(default=None)
    trigger_options: TriggerOptions = Field(default_factory=TriggerOptions)

    @field_validator("table_name", "audit_table_name", "changeset_table_name")
    @classmethod
    def _strip_names(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("table names must not be blank")
        return v

    @property
    def qualified_table_name(self) -> str:
        """Tracked table name, defaulting the schema to public."""
        schema, table = split_qualified_name(self.table_name)
        return f"{schema or DEFAULT_SCHEMA}.{table}"

    @property
    def tracks_changesets(self) -> bool:
        return self.changeset_table_name is not None

    def resolve(self) -> ResolvedAuditNames:
        """
        Resolve audit/changeset names into one schema.

        Raises:
            TrackingConfigError: If the changeset table is qualified with a
                schema other than the audit table's
        """
        audit_schema, audit_table = split_qualified_name(self.audit_table_name)
        schema = audit_schema or DEFAULT_SCHEMA

        changeset_table = None
        if self.changeset_table_name is not None:
            changeset_schema, changeset_table = split_qualified_name(self.changeset_table_name)
            if changeset_schema is not None and changeset_schema != schema:
                raise TrackingConfigError(
                    f"Changeset and audit tables cannot be in different schemas "
                    f"({changeset_schema!r} vs {schema!r})",
                    model_id=self.model_id,
                )

        return ResolvedAuditNames(
            schema_name=schema,
            audit_table=audit_table,
            changeset_table=changeset_table,
            source_table=self.qualified_table_name,
        )


__all__ = [
    "TrackedModelConfig",
    "TriggerOptions",
    "ResolvedAuditNames",
    "TrackingConfigError",
    "split_qualified_name",
]
