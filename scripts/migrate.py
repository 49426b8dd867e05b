"""Run Alembic migrations.

Usage:
    python scripts/migrate.py                 upgrade to head
    python scripts/migrate.py down [revision] downgrade (default: one step)
    python scripts/migrate.py create <message>
"""

import sys

from alembic import command
from alembic.config import Config


def _config() -> Config:
    return Config("alembic.ini")


def upgrade() -> None:
    """Upgrade the database to the latest revision."""
    print("Running database migrations...")
    command.upgrade(_config(), "head")
    print("✓ Migrations completed successfully!")


def downgrade(revision: str = "-1") -> None:
    """Downgrade the database to ``revision``."""
    print(f"Downgrading database to {revision}...")
    command.downgrade(_config(), revision)
    print("✓ Downgrade completed successfully!")


def create_migration(message: str) -> None:
    """Autogenerate a new revision from the model metadata."""
    print(f"Creating migration: {message}")
    command.revision(_config(), message=message, autogenerate=True)
    print("✓ Migration created successfully!")


def main(argv: list[str]) -> int:
    try:
        if not argv:
            upgrade()
        elif argv[0] == "down":
            downgrade(argv[1] if len(argv) > 1 else "-1")
        elif argv[0] == "create" and len(argv) > 1:
            create_migration(" ".join(argv[1:]))
        else:
            print(__doc__)
            return 2
    except Exception as e:
        print(f"✗ Migration command failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
