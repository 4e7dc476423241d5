#!/usr/bin/env python3
"""
CLI script to create the platform super admin user.

Usage (interactive):
    python scripts/create_super_admin.py

Usage (non-interactive, for deployments):
    python scripts/create_super_admin.py --email admin@iep.app --password yourpassword --first-name Ayşe --last-name Yılmaz
"""

import argparse
import asyncio
import sys
from getpass import getpass

from sqlalchemy import select

from iep.database import async_session_factory, engine
from iep.models import Role, User
from iep.utils.security import hash_password

MIN_PASSWORD_LENGTH = 8


def _valid_email(email: str) -> bool:
    return "@" in email and "." in email.rsplit("@", 1)[-1]


def _prompt_email() -> str:
    while True:
        email = input("E-posta adresi: ").strip().lower()
        if _valid_email(email):
            return email
        print("Geçerli bir e-posta adresi girin.")


def _prompt_password() -> str | None:
    while True:
        password = getpass(f"Şifre (en az {MIN_PASSWORD_LENGTH} karakter): ")
        if len(password) >= MIN_PASSWORD_LENGTH:
            break
        print(f"Şifre en az {MIN_PASSWORD_LENGTH} karakter olmalı.")

    if getpass("Şifre (tekrar): ") != password:
        print("\nŞifreler eşleşmiyor. İptal edildi.")
        return None
    return password


async def create_super_admin(
    email: str | None = None,
    password: str | None = None,
    first_name: str = "Super",
    last_name: str = "Admin",
    interactive: bool = True,
    force: bool = False,
) -> bool:
    """Create a super admin user. Returns False when nothing was created."""
    print("\n" + "=" * 50)
    print("İ-EP.APP - Super Admin Setup")
    print("=" * 50 + "\n")

    if email:
        email = email.strip().lower()
        if not _valid_email(email):
            print("Invalid email address.")
            return False
    else:
        email = _prompt_email()

    if password:
        if len(password) < MIN_PASSWORD_LENGTH:
            print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
            return False
    else:
        password = _prompt_password()
        if password is None:
            return False

    async with async_session_factory() as session:
        result = await session.execute(
            select(User).where(
                User.role == Role.SUPER_ADMIN.value,
                User.deleted_at.is_(None),
            )
        )
        existing = result.scalars().first()

        if existing and not force:
            print(f"\nA super admin already exists: {existing.email}")
            if not interactive:
                print("Use --force to create another super admin.")
                return False
            if input("Create another super admin? (y/n): ").strip().lower() != "y":
                print("Aborting.")
                return False

        result = await session.execute(
            select(User).where(
                User.email == email,
                User.tenant_id.is_(None),
                User.deleted_at.is_(None),
            )
        )
        if result.scalar_one_or_none():
            print(f"\nUser with email {email} already exists.")
            return False

        # Super admins belong to no tenant
        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=Role.SUPER_ADMIN.value,
            tenant_id=None,
            is_active=True,
            language="tr",
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)

        print("\n" + "=" * 50)
        print("Super Admin Created Successfully!")
        print("=" * 50)
        print(f"  Email: {user.email}")
        print(f"  Name: {user.first_name} {user.last_name}")
        print(f"  ID: {user.id}")
        print("=" * 50 + "\n")

        return True


async def main():
    parser = argparse.ArgumentParser(description="Create an İ-EP.APP super admin user")
    parser.add_argument("--email", "-e", help="Admin email address")
    parser.add_argument("--password", "-p", help=f"Admin password (min {MIN_PASSWORD_LENGTH} chars)")
    parser.add_argument("--first-name", "-f", help="First name", default="Super")
    parser.add_argument("--last-name", "-l", help="Last name", default="Admin")
    parser.add_argument("--force", action="store_true", help="Create even if a super admin exists")

    args = parser.parse_args()
    interactive = not (args.email and args.password)

    try:
        success = await create_super_admin(
            email=args.email,
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
            interactive=interactive,
            force=args.force,
        )
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\nAborted by user.")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
