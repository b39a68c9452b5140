"""
Seed script for the first admin, demo teachers and demo students.

Run once (e.g. after schema_check) with env set:
  SEED_ADMIN_EMAIL=admin@yourschool.edu
  SEED_ADMIN_PASSWORD=YourSecurePassword

Idempotent by email: existing users are left untouched, except that the
admin user is re-promoted to admin and gets the configured password.
Demo accounts share DEMO_PASSWORD.
"""
import asyncio
import logging
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import hash_password
from app.auth.services import get_user_by_email
from app.core.config import settings
from app.core.enums import UserRole
from app.core.logging_config import configure_logging
from app.db.schema_check import ensure_tables
from app.db.session import AsyncSessionLocal, engine

logger = logging.getLogger(__name__)

# Default admin (used when SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD not set)
DEFAULT_ADMIN_EMAIL = "admin@school.edu"
DEFAULT_ADMIN_PASSWORD = "ChangeMe123"
DEFAULT_ADMIN_FULL_NAME = "Admin User"

DEMO_PASSWORD = "password123"

DEMO_TEACHERS: List[Tuple[str, str]] = [
    ("Encik Rosli", "rosli@school.edu"),
    ("Puan Mariam", "mariam@school.edu"),
]

DEMO_STUDENTS: List[Tuple[str, str]] = [
    ("Ahmad Razak", "ahmad@student.edu"),
    ("Siti Nurhaliza", "siti@student.edu"),
    ("Muhammad Faiz", "faiz@student.edu"),
    ("Nur Aisyah", "aisyah@student.edu"),
    ("Hafiz Rahman", "hafiz@student.edu"),
    ("Fatimah Zahra", "fatimah@student.edu"),
    ("Amir Hassan", "amir@student.edu"),
    ("Nurul Huda", "nurul@student.edu"),
    ("Zulkifli Ahmad", "zulkifli@student.edu"),
    ("Aminah Yusof", "aminah@student.edu"),
]


async def _ensure_user(db: AsyncSession, full_name: str, email: str, password: str, role: str) -> bool:
    """Create the user if the email is free. Returns True when created."""
    if await get_user_by_email(db, email):
        return False
    db.add(
        User(
            full_name=full_name,
            email=email.lower(),
            password_hash=hash_password(password),
            role=role,
            status="ACTIVE",
        )
    )
    await db.flush()
    return True


async def seed_users(db: AsyncSession) -> None:
    # 1. Admin user (create or promote)
    email = settings.seed_admin_email or DEFAULT_ADMIN_EMAIL
    password = settings.seed_admin_password or DEFAULT_ADMIN_PASSWORD
    admin = await get_user_by_email(db, email)
    if not admin:
        await _ensure_user(db, DEFAULT_ADMIN_FULL_NAME, email, password, UserRole.ADMIN.value)
        logger.info("Created admin user: %s", email)
    else:
        admin.role = UserRole.ADMIN.value
        admin.password_hash = hash_password(password)
        logger.info("Updated existing user to admin: %s", email)

    # 2. Demo teachers and students
    created = 0
    for full_name, demo_email in DEMO_TEACHERS:
        created += await _ensure_user(db, full_name, demo_email, DEMO_PASSWORD, UserRole.TEACHER.value)
    for full_name, demo_email in DEMO_STUDENTS:
        created += await _ensure_user(db, full_name, demo_email, DEMO_PASSWORD, UserRole.STUDENT.value)

    await db.commit()
    logger.info("User seed done (%d demo accounts created).", created)


async def main() -> None:
    configure_logging(settings.log_level)
    await ensure_tables(engine)
    async with AsyncSessionLocal() as db:
        try:
            await seed_users(db)
        except Exception:
            await db.rollback()
            logger.exception("User seed failed")
            raise
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
