# ============================================================================
# AUDIT OBJECT SPECS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core model - Ephemeral DDL specs and migration commands
# PURPOSE: Carry generated DDL together with live existence state
# CREATED: 19 OCT 2026
# EXPORTS: ColumnListIndex, RawClauseIndex, IndexSpec, AuditObjectSpec,
#          AuditTableSpec, PlannedStatement, MigrationCommand
# DEPENDENCIES: psycopg
# ============================================================================
"""
Audit Object Specs

These objects are recomputed on every check or planning call from the
current configuration and catalog state. Nothing here is cached or persisted.

Every statement is a psycopg.sql.Composable so identifiers are always
quoted by psycopg rather than by string concatenation.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from psycopg import sql

from core.contracts import AuditObjectKind, Direction


# ============================================================================
# INDEX SPECS
# ============================================================================

@dataclass(frozen=True)
class ColumnListIndex:
    """Plain index over one or more columns."""
    columns: Tuple[str, ...]


@dataclass(frozen=True)
class RawClauseIndex:
    """Index with an explicit access method / operator class clause."""
    column: str
    method: str
    opclass: Optional[str] = None


IndexSpec = Union[ColumnListIndex, RawClauseIndex]


# ============================================================================
# OBJECT SPECS
# ============================================================================

@dataclass
class AuditObjectSpec:
    """
    A database object (or fixed group of objects) with its forward and
    reverse DDL.

    up and down are ordered mappings of member name -> statement. down is the
    structural reverse of up. present records catalog existence per member.
    """
    kind: AuditObjectKind
    name: str
    up: Dict[str, sql.Composable]
    down: Dict[str, sql.Composable]
    present: Dict[str, bool] = field(default_factory=dict)
    # up statements are CREATE OR REPLACE and can be re-run over existing members
    replaceable: bool = False

    @property
    def exists(self) -> bool:
        """True when every member exists."""
        return bool(self.present) and all(self.present.values())

    @property
    def absent(self) -> bool:
        """True when no member exists."""
        return not any(self.present.values())

    def in_state(self, direction: Direction) -> bool:
        """Whether the catalog already matches the target state."""
        if direction is Direction.UP:
            return self.exists
        return self.absent

    def statements(self, direction: Direction) -> Dict[str, sql.Composable]:
        return self.up if direction is Direction.UP else self.down


@dataclass
class AuditTableSpec:
    """Table-shaped spec: columns and indexes are rendered by the planner."""
    schema_name: str
    table_name: str
    columns: Dict[str, Union[str, sql.Composable]]
    indexes: List[IndexSpec] = field(default_factory=list)
    exists: bool = False

    @property
    def name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


# ============================================================================
# MIGRATION COMMAND
# ============================================================================

@dataclass(frozen=True)
class PlannedStatement:
    """One DDL statement and the object it creates or drops."""
    object_name: str
    statement: sql.Composable


@dataclass
class MigrationCommand:
    """
    Ordered DDL for one tracked model in one direction.

    Returned to the caller for execution; the planner never executes it.
    """
    model_id: str
    direction: Direction
    statements: List[PlannedStatement] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self) -> Iterator[PlannedStatement]:
        return iter(self.statements)

    @property
    def is_empty(self) -> bool:
        return not self.statements

    @property
    def object_names(self) -> List[str]:
        return [s.object_name for s in self.statements]

    def render(self, context=None) -> List[str]:
        """
        Render statements to SQL text.

        Args:
            context: Optional psycopg connection used for quoting
        """
        return [s.statement.as_string(context) for s in self.statements]


__all__ = [
    "ColumnListIndex",
    "RawClauseIndex",
    "IndexSpec",
    "AuditObjectSpec",
    "AuditTableSpec",
    "PlannedStatement",
    "MigrationCommand",
]
