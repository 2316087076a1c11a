# ============================================================================
# MIGRATION PLANNER
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Service - Existence-gated DDL planning
# PURPOSE: Produce the ordered up/down DDL for one tracked model
# CREATED: 19 OCT 2026
# ============================================================================
"""
Migration Planner

Given a tracked model and a direction, returns exactly the statements needed
to reach the fully provisioned (UP) or fully removed (DOWN) state, skipping
objects already in that state. Nothing is executed here; callers run the
returned MigrationCommand, ideally inside one transaction.

Planning order (UP):
    1. schema, action_type           (only if missing)
    2. changeset table, audit table  (CREATE TABLE + indexes, missing only)
    3. functions                     (all-or-nothing)
    4. triggers                      (all-or-nothing)

DOWN builds the same blocks from the down statements and emits them in
reverse block order, so triggers go first and the changeset table last.
The audit schema and the action_type enum are never dropped: other objects
may live in the schema and other audit tables may use the type.
"""

import logging
from typing import List, Union

from core.contracts import Direction
from core.logging import log_context
from core.models.audit_objects import (
    AuditObjectSpec,
    AuditTableSpec,
    MigrationCommand,
    PlannedStatement,
)
from core.models.tracking import TrackedModelConfig
from core.schema.audit_templates import AuditTemplateGenerator

logger = logging.getLogger(__name__)


class MigrationPlanner:
    """
    Plans audit DDL for tracked models.

    Usage:
        planner = MigrationPlanner(AuditTemplateGenerator(inspector))
        command = planner.get_db_commands(config, Direction.UP)
        for stmt in command:
            cur.execute(stmt.statement)
    """

    def __init__(self, generator: AuditTemplateGenerator):
        self.generator = generator

    @classmethod
    def from_inspector(cls, inspector) -> "MigrationPlanner":
        return cls(AuditTemplateGenerator(inspector))

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_db_commands(
        self,
        config: TrackedModelConfig,
        direction: Union[Direction, str] = Direction.UP,
    ) -> MigrationCommand:
        """
        Plan the statements for one model.

        Args:
            config: Tracking configuration of the model
            direction: Direction.UP / Direction.DOWN (or "up" / "down")

        Returns:
            MigrationCommand, empty when nothing needs to change

        Raises:
            ValueError: Invalid direction
            TrackingConfigError: Audit and changeset schemas disagree
        """
        direction = Direction.parse(direction)
        names = config.resolve()

        with log_context(model_id=config.model_id, direction=direction.value):
            blocks: List[List[PlannedStatement]] = []

            if direction is Direction.UP:
                blocks.append(self._object_block(
                    self.generator.schema_template(names.schema_name), direction
                ))
                blocks.append(self._object_block(
                    self.generator.action_type_template(names.schema_name), direction
                ))

            tables = self.generator.table_templates(
                names.audit_table, names.changeset_table, names.schema_name
            )
            blocks.append(self._table_block(tables, direction))

            functions = self.generator.function_template(
                names.audit_table, names.changeset_table, names.schema_name
            )
            blocks.append(self._object_block(functions, direction))

            triggers = self.generator.trigger_template(
                names.source_table, names.schema_name, config.trigger_options
            )
            blocks.append(self._object_block(triggers, direction))

            if direction is Direction.DOWN:
                blocks.reverse()

            command = MigrationCommand(
                model_id=config.model_id,
                direction=direction,
                statements=[stmt for block in blocks for stmt in block],
            )

            if command.is_empty:
                logger.info(f"Audit objects for {config.model_id} already in {direction.value} state")
            else:
                logger.info(
                    f"Planned {len(command)} {direction.value} statements for {config.model_id}"
                )
                for planned in command:
                    logger.debug(f"   {planned.object_name}")

            return command

    # =========================================================================
    # BLOCK BUILDERS
    # =========================================================================

    def _table_block(
        self,
        tables: List[AuditTableSpec],
        direction: Direction,
    ) -> List[PlannedStatement]:
        """
        UP: create missing tables in declared order.
        DOWN: drop existing tables in reverse declared order.
        """
        block: List[PlannedStatement] = []

        if direction is Direction.UP:
            for spec in tables:
                if spec.exists:
                    continue
                for name, stmt in self.generator.create_table_statements(spec).items():
                    block.append(PlannedStatement(name, stmt))
            return block

        for spec in reversed(tables):
            if not spec.exists:
                continue
            block.append(PlannedStatement(spec.name, self.generator.drop_table_statement(spec)))
        return block

    @staticmethod
    def _object_block(spec: AuditObjectSpec, direction: Direction) -> List[PlannedStatement]:
        """
        Emit every statement of spec for direction unless the catalog already
        matches the target state.

        A partially present, non-replaceable group (e.g. only one of the two
        triggers) is dropped before being recreated.
        """
        if spec.in_state(direction):
            return []

        block: List[PlannedStatement] = []
        if direction is Direction.UP and not spec.absent and not spec.replaceable:
            logger.warning(f"{spec.kind.value} {spec.name} partially present, recreating")
            block.extend(PlannedStatement(n, s) for n, s in spec.down.items())

        block.extend(PlannedStatement(n, s) for n, s in spec.statements(direction).items())
        return block


__all__ = [
    "MigrationPlanner",
]
