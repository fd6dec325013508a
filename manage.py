#!/usr/bin/env python3
"""
Operator commands for the admin portal.

Examples:
  python manage.py init-db
  python manage.py create-admin --username admin --email admin@example.com --password 'Adm1n!Pass'
  python manage.py generate-keys --out config
  python manage.py generate-settings-key
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from utils.auth.transit import TransitDecryptor, generate_key_pair, private_key_to_pem
from utils.security.crypto import generate_settings_key


async def init_db() -> None:
    from config import get_settings
    from database.core import AsyncDatabaseEngine

    db = AsyncDatabaseEngine(get_settings())
    try:
        await db.create_all()
    finally:
        await db.close()


async def create_admin(username: str, email: str, password: str) -> int:
    """
    Create an admin account.

    Returns:
        Exit code (0 on success)
    """
    from config import get_settings
    from database.core import AsyncDatabaseEngine
    from database.models.user import UserRole
    from database.operations import user_ops
    from utils.auth import validators

    errors = (
        validators.check_username(username)
        + validators.check_email(email)
        + validators.check_new_password(password)
    )
    if errors:
        for error in errors:
            print(f"❌ {error}")
        return 1

    db = AsyncDatabaseEngine(get_settings())
    try:
        await db.create_all()
        async with db.session() as session:
            if await user_ops.find_conflicting_user(session, email=email, username=username):
                print("❌ User with this email or username already exists")
                return 1
            user = await user_ops.create_user(session, username, email, password, role=UserRole.ADMIN)
            await session.commit()
            print(f"✅ Admin created: {user.username} (id={user.id})")
            return 0
    finally:
        await db.close()


def generate_keys(out_dir: str) -> None:
    """Write a 2048-bit RSA pair as private.pem / public.pem."""
    target = Path(out_dir)
    target.mkdir(parents=True, exist_ok=True)

    key = generate_key_pair()
    private_path = target / "private.pem"
    public_path = target / "public.pem"

    private_path.write_bytes(private_key_to_pem(key))
    private_path.chmod(0o600)

    public_path.write_text(TransitDecryptor(key).public_key_pem())

    print(f"✅ Wrote {private_path} and {public_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Admin portal management commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create database tables")

    admin = commands.add_parser("create-admin", help="Create an admin account")
    admin.add_argument("--username", required=True)
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)

    keys = commands.add_parser("generate-keys", help="Generate the RSA transit key pair")
    keys.add_argument("--out", default="config", help="Output directory (default: config)")

    commands.add_parser("generate-settings-key", help="Print a new SETTINGS_ENCRYPT_KEY")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "init-db":
        asyncio.run(init_db())
        print("✅ Database tables created")
        return 0
    if args.command == "create-admin":
        return asyncio.run(create_admin(args.username, args.email, args.password))
    if args.command == "generate-keys":
        generate_keys(args.out)
        return 0
    if args.command == "generate-settings-key":
        print(generate_settings_key())
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
