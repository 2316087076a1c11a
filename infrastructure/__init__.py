# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Database operations
# PURPOSE: Catalog inspection, audit DDL execution and audit trail access
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for audit provisioning.

Provides:
- PostgreSQLRepository: Connections and single-transaction execution
- CatalogInspector: Existence checks against the system catalogs
- AuditInstaller: Plan and execute audit DDL for tracked models
- AuditTrailRepository: Open changesets and read audit rows

Usage:
    from infrastructure import AuditInstaller, PostgreSQLRepository

    installer = AuditInstaller(PostgreSQLRepository())
    result = installer.apply("orders", "up")
"""

from infrastructure.postgresql import (
    PostgreSQLRepository,
    build_connection_string,
    get_postgres_repository,
)
from infrastructure.base_repository import (
    BaseRepository,
    RepositoryError,
)
from infrastructure.catalog import CatalogInspector
from infrastructure.audit_installer import (
    AuditInstaller,
    InstallationResult,
    StepResult,
)
from infrastructure.audit_trail import AuditTrailRepository

__all__ = [
    # PostgreSQL
    'PostgreSQLRepository',
    'build_connection_string',
    'get_postgres_repository',
    # Repository base
    'BaseRepository',
    'RepositoryError',
    # Catalog
    'CatalogInspector',
    # Installation
    'AuditInstaller',
    'InstallationResult',
    'StepResult',
    # Audit trail
    'AuditTrailRepository',
]
