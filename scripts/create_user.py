#!/usr/bin/env python3
"""Create a scrob user from the command line.

Hey future me - this is the out-of-band bootstrap path. There is no signup
endpoint, so every account starts here (or via BOOTSTRAP__ADMIN_* at startup).
It uses the same Settings as the server, so DATABASE__URL decides which
database gets the user.

Usage:
    python scripts/create_user.py <username> <password> [is_admin]

    # is_admin accepts true/false, yes/no, 1/0 (default: false)
    python scripts/create_user.py alice secret true
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from scrob.application.services import CredentialStore  # noqa: E402
from scrob.config import get_settings  # noqa: E402
from scrob.domain.exceptions import DomainException  # noqa: E402
from scrob.infrastructure.persistence import Database, UserRepository  # noqa: E402

TRUTHY = {"1", "true", "yes", "y", "on"}
FALSY = {"0", "false", "no", "n", "off"}


def parse_is_admin(value: str | None) -> bool:
    """Parse the optional is_admin argument."""
    if value is None:
        return False
    lowered = value.strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    raise ValueError(f"is_admin must be one of {sorted(TRUTHY | FALSY)}, got {value!r}")


async def create_user(username: str, password: str, is_admin: bool) -> int:
    """Create the user and return its id."""
    settings = get_settings()
    db = Database(settings.database)
    try:
        if settings.database.create_schema_on_startup:
            await db.create_tables()
        async with db.session_scope() as session:
            store = CredentialStore(UserRepository(session), settings.security)
            user = await store.create_user(username, password, is_admin=is_admin)
            return user.id
    finally:
        await db.close()


if __name__ == "__main__":
    if len(sys.argv) not in (3, 4):
        print(__doc__.split("Usage:")[1].strip().splitlines()[0].strip())
        sys.exit(2)

    try:
        admin = parse_is_admin(sys.argv[3] if len(sys.argv) == 4 else None)
        user_id = asyncio.run(create_user(sys.argv[1], sys.argv[2], admin))
    except (ValueError, DomainException) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    role = "admin" if admin else "user"
    print(f"Created {role} '{sys.argv[1]}' (id {user_id})")
