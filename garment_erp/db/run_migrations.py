"""
Programmatic Alembic migration runner.

Allows running migrations without an alembic.ini by configuring the script location
to this package's migrations directory.

Usage examples:
    python -m garment_erp.db.run_migrations upgrade head
    python -m garment_erp.db.run_migrations downgrade -1
    python -m garment_erp.db.run_migrations revision -m "add column" --autogenerate
"""

import logging
import sys
from pathlib import Path
from typing import List

from alembic import command
from alembic.config import Config

from garment_erp.db.config import get_settings

logger = logging.getLogger(__name__)


def build_config() -> Config:
    """Alembic Config pointing at the migrations folder next to this file."""
    cfg = Config()
    script_location = Path(__file__).resolve().parent / "migrations"
    cfg.set_main_option("script_location", str(script_location))

    # Offline URL; env.py builds its own async engine for online runs.
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """Run Alembic command with programmatic configuration."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("No Alembic arguments provided. Example: upgrade head")
        sys.exit(1)

    cfg = build_config()
    cmd, other = args[0], args[1:]
    logger.info("alembic %s %s", cmd, " ".join(other))

    if cmd == "upgrade":
        command.upgrade(cfg, *(other or ["head"]))
    elif cmd == "downgrade":
        command.downgrade(cfg, *(other or ["-1"]))
    elif cmd == "history":
        command.history(cfg)
    elif cmd == "current":
        command.current(cfg)
    elif cmd == "heads":
        command.heads(cfg)
    elif cmd == "show":
        if not other:
            print("Usage: show <revision>")
            sys.exit(2)
        command.show(cfg, other[0])
    elif cmd == "revision":
        message = None
        if "-m" in other:
            idx = other.index("-m")
            message = other[idx + 1] if idx + 1 < len(other) else None
        command.revision(cfg, message=message, autogenerate="--autogenerate" in other)
    else:
        print(f"Unsupported Alembic command: {cmd}")
        sys.exit(2)


if __name__ == "__main__":
    main()
