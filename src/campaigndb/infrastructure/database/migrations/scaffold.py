"""Scaffold new migration version modules."""

import logging
import re
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from campaigndb.domain.types import Migration
from campaigndb.infrastructure.database.migrations.registry import latest_version

logger = logging.getLogger(__name__)

VERSIONS_DIR = Path(__file__).parent / "versions"

TEMPLATE = '''"""
Migration {version:03d}: {slug}

Created: {created}
"""

from campaigndb.infrastructure.database.migrations.sql_migration import sql_migration

SQL_UP = """
-- Statements applying the change, for example:
-- ALTER TABLE campaigns ADD COLUMN budget INTEGER;
"""

SQL_DOWN = """
-- Statements undoing exactly what SQL_UP did, for example:
-- ALTER TABLE campaigns DROP COLUMN budget;
"""

MIGRATION = sql_migration(
    version={version},
    description={name!r},
    sql_up=SQL_UP,
    sql_down=SQL_DOWN,
)
'''


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    if not slug:
        raise ValueError(f"Migration name must contain letters or digits: {name!r}")
    return slug


def scaffold_migration(
    name: str,
    registry: Sequence[Migration],
    directory: Optional[Path] = None,
) -> Path:
    """
    Write a new ``vNNN_<slug>.py`` module for the next free version.

    Args:
        name: Human description of the change
        registry: Current registry, used to pick the next version
        directory: Target directory (default: the versions package)

    Returns:
        Path of the created file

    Raises:
        FileExistsError: If the target file already exists
        ValueError: If the name is empty after slugging or has control characters
    """
    if any(not ch.isprintable() for ch in name):
        raise ValueError(f"Migration name must not contain control characters: {name!r}")

    directory = directory or VERSIONS_DIR
    version = latest_version(registry) + 1
    slug = slugify(name)
    path = directory / f"v{version:03d}_{slug}.py"
    if path.exists():
        raise FileExistsError(f"Migration file already exists: {path}")

    directory.mkdir(parents=True, exist_ok=True)
    path.write_text(
        TEMPLATE.format(
            version=version,
            slug=slug,
            name=name,
            created=date.today().isoformat(),
        )
    )
    logger.info(f"✓ Created migration {version}: {path}")
    return path
