"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m app.scripts.create_user admin your-secure-password admin
"""
import argparse
import logging
import sys

from dotenv import load_dotenv

from app.core.config import get_settings
from app.core.container import build_container
from app.core.errors import AppError
from app.core.logging_config import configure_logging
from app.schemas.user import KNOWN_ROLES, ROLE_ADMIN

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user account.")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", help="Password (1-128 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(KNOWN_ROLES))
    args = parser.parse_args(argv)

    load_dotenv()
    settings = get_settings()
    configure_logging(settings)
    container = build_container(settings)
    try:
        container.repository.seed_default_roles()
        user = container.directory.create_user(args.username, args.password)
        if args.role == ROLE_ADMIN:
            user = container.directory.grant_role(user.id, ROLE_ADMIN)
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        container.engine.dispose()
    print(f"Created user '{user.username}' (id={user.id}) with roles {', '.join(user.roles)}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
