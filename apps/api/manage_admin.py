"""
管理者ユーザーの作成 / パスワード変更

    python manage_admin.py --username admin
    python manage_admin.py --username admin --password 'new-password'

--password を省略した場合は対話入力。
"""
from __future__ import annotations

import argparse
import getpass

from dotenv import load_dotenv

load_dotenv()

from marketplace.db import SessionLocal  # noqa: E402
from marketplace.services.auth_service import AuthService  # noqa: E402

MIN_PASSWORD_LENGTH = 8


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or update an admin user")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", default=None)
    parser.add_argument("--role", default="admin")
    args = parser.parse_args()

    password = args.password
    if not password:
        password = getpass.getpass("New password: ")
        if password != getpass.getpass("Confirm password: "):
            print("Passwords do not match.")
            return 1

    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return 1

    with SessionLocal() as db:
        user = AuthService(db).set_password(args.username, password, role=args.role)

    print(f"Admin user saved: id={user.id} username={user.username} role={user.role}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
