"""Run or create Alembic migrations.

Usage:
    python scripts/migrate.py                   upgrade to head
    python scripts/migrate.py create <message>  autogenerate a revision
    python scripts/migrate.py downgrade <rev>   downgrade to a revision
"""

import sys

from alembic import command
from alembic.config import Config

ALEMBIC_INI = "alembic.ini"


def main(argv: list[str]) -> int:
    """Dispatch the migration command."""
    alembic_cfg = Config(ALEMBIC_INI)

    try:
        if not argv:
            command.upgrade(alembic_cfg, "head")
            print("✓ Migrations completed successfully!")
        elif argv[0] == "create" and len(argv) > 1:
            command.revision(alembic_cfg, message=" ".join(argv[1:]), autogenerate=True)
            print("✓ Migration created successfully!")
        elif argv[0] == "downgrade" and len(argv) == 2:
            command.downgrade(alembic_cfg, argv[1])
            print(f"✓ Downgraded to {argv[1]}")
        else:
            print(__doc__)
            return 2
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
