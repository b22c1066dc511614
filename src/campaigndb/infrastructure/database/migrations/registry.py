"""
Migration registry: the ordered, immutable list of descriptors.

Version modules live in the ``versions`` package and are discovered by
file name (``vNNN_<slug>.py``), so a scaffolded migration is picked up
without editing this file.
"""

import importlib
import logging
import pkgutil
from typing import Iterable, Tuple

from campaigndb.domain.types import Migration

logger = logging.getLogger(__name__)

VERSIONS_PACKAGE = "campaigndb.infrastructure.database.migrations.versions"

Registry = Tuple[Migration, ...]


def build_registry(migrations: Iterable[Migration]) -> Registry:
    """
    Sort descriptors by version and reject duplicates.

    Raises:
        ValueError: If two descriptors share a version
    """
    ordered = sorted(migrations, key=lambda m: m.version)
    seen = set()
    for migration in ordered:
        if migration.version in seen:
            raise ValueError(f"Duplicate migration version: {migration.version}")
        seen.add(migration.version)
    return tuple(ordered)


def load_registry(package: str = VERSIONS_PACKAGE) -> Registry:
    """Import every ``v*`` module of ``package`` and collect its MIGRATION."""
    pkg = importlib.import_module(package)
    migrations = []
    for module_info in pkgutil.iter_modules(pkg.__path__):
        if not module_info.name.startswith("v"):
            continue
        module = importlib.import_module(f"{package}.{module_info.name}")
        migration = getattr(module, "MIGRATION", None)
        if migration is None:
            logger.warning(f"Skipping {module_info.name}: no MIGRATION defined")
            continue
        migrations.append(migration)
    return build_registry(migrations)


def latest_version(registry: Registry) -> int:
    return registry[-1].version if registry else 0
