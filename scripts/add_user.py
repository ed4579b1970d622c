#!/usr/bin/env python3
"""
Create a user in the configured store (local JSON or remote, per DATABASE_URL).

Usage:
  python scripts/add_user.py --email ana@example.com --name "Ana" [--role Admin] [--password s3cret]
"""
from __future__ import annotations

import argparse
import asyncio
import secrets
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from spincity.core.config import get_settings  # noqa: E402
from spincity.domain.entities import USER_ROLES, USERS  # noqa: E402
from spincity.repositories.factory import build_stores  # noqa: E402
from spincity.services.auth_service import AuthService  # noqa: E402
from spincity.services.settings_service import SettingsStore  # noqa: E402


def gen_password(length: int = 12) -> str:
    return secrets.token_urlsafe(length)[:length]


async def create(args) -> dict:
    settings = get_settings()
    stores = build_stores(settings)
    auth = AuthService(stores.collection(USERS), SettingsStore(stores.kv), settings.default_admin_email)
    email = (args.email or "").strip()
    if not email or "@" not in email:
        raise SystemExit("Invalid e-mail")
    if await auth.find_by_email(email):
        raise SystemExit(f"User '{email}' already exists")
    user = await auth.create_user(
        {
            "name": args.name or email.split("@")[0],
            "email": email,
            "password": args.password,
            "role": args.role,
            "avatar": args.avatar or f"https://picsum.photos/seed/{email}/40/40",
        }
    )
    if user is None:
        raise SystemExit("Could not save the user (see log)")
    return user


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a user")
    ap.add_argument("--email", required=True)
    ap.add_argument("--name")
    ap.add_argument("--role", choices=USER_ROLES, default="User")
    ap.add_argument("--password", help="default: random")
    ap.add_argument("--avatar")
    args = ap.parse_args()
    generated = not args.password
    if generated:
        args.password = gen_password()

    user = asyncio.run(create(args))
    print("OK: user created")
    print(f"  id: {user['id']}")
    print(f"  e-mail: {user['email']}")
    print(f"  role: {user['role']}")
    if generated:
        print(f"  password: {args.password}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
