from campaigndb.infrastructure.database.migrations.migration_manager import (
    CONTROL_TABLE,
    MigrationRunner,
)
from campaigndb.infrastructure.database.migrations.registry import (
    build_registry,
    load_registry,
)

__all__ = ["CONTROL_TABLE", "MigrationRunner", "build_registry", "load_registry"]
