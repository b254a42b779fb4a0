"""Create (or promote) an admin user.

    python -m dentflow.scripts.create_admin --email admin@clinicmail.com --username admin
"""
import argparse
import asyncio
import getpass
import logging

from sqlalchemy import select

from dentflow.core.db import SessionLocal
from dentflow.core.logging_config import setup_logging
from dentflow.core.security import hash_password
from dentflow.models.user import User, RoleEnum

logger = logging.getLogger("dentflow.create_admin")


async def create_admin(email: str, username: str, phone: str, password: str) -> User:
    email = email.strip().lower()
    async with SessionLocal() as db:
        user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
        if user:
            user.role = RoleEnum.admin
            user.is_active = True
            logger.info(f"Promoted existing user {user.id} ({email}) to admin")
        else:
            user = User(
                email=email,
                username=username,
                phone=phone,
                role=RoleEnum.admin,
                hashed_password=hash_password(password),
            )
            db.add(user)
            logger.info(f"Created admin {email}")
        await db.commit()
        await db.refresh(user)
        return user


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--username", default="admin")
    parser.add_argument("--phone", default="")
    parser.add_argument("--password", help="prompted for when omitted")
    args = parser.parse_args(argv)

    setup_logging()
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        parser.error("password must be at least 6 characters")
    asyncio.run(create_admin(args.email, args.username, args.phone, password))


if __name__ == "__main__":
    main()
