#!/usr/bin/env python3
"""
Seed a development database with the platform owner, three demo schools
with published fee schedules, their administrators and a demo guardian.

Usage:
  python scripts/seed_demo.py
  # Requires DATABASE_URL and SECRET_KEY in .env (or export).
  # DEMO_PASSWORD sets the password of every seeded account.

Safe to re-run: existing schools and accounts are left untouched.
"""
import asyncio
import os
import sys
from decimal import Decimal

# Load .env from project root
try:
    from dotenv import load_dotenv
    _root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    load_dotenv(os.path.join(_root, ".env"))
except ImportError:
    pass

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from schoolpay.core.logging import get_logger, setup_logging
from schoolpay.database import AsyncSessionLocal, close_db, init_db
from schoolpay.models.enums import UserRole
from schoolpay.models.school import School
from schoolpay.schemas.auth import BankDetails
from schoolpay.services.user_service import UserService

logger = get_logger("scripts.seed_demo")

PASSWORD = os.getenv("DEMO_PASSWORD", "demo-pass-123")

OWNER = {"name": "System Admin", "email": "owner@schoolpay.example.com"}
GUARDIAN = {"name": "Demo Parent", "email": "parent@schoolpay.example.com"}

SCHOOLS = [
    {
        "name": "Febison Montessori Groomers School",
        "address": "106, C.A.C Agbeye Junction, Eyita, Ikorodu, Lagos",
        "contact_email": "info@febison.edu.ng",
        "fees": {
            "Basic 1": "120000", "Basic 2": "120000", "Basic 3": "125000",
            "Basic 4": "130000", "JSS1": "180000", "SS1": "220000",
        },
        "admin": {"name": "Febison Bursar", "email": "bursar@febison.edu.ng"},
        "bank": BankDetails(bank_name="Moniepoint", account_name="Febison Montessori School", account_number="9090390581"),
    },
    {
        "name": "Westhills School",
        "address": "Westhills avenue, Eyita, Ikorodu, Lagos",
        "contact_email": "admin@westhills.edu.ng",
        "fees": {"Reception 1": "85000", "Nursery 1": "90000", "Basic 1": "110000"},
        "admin": {"name": "Okafor Nonso", "email": "bursar@westhills.edu.ng"},
        "bank": BankDetails(bank_name="Access Bank", account_name="Okafor Nonso", account_number="1101010101"),
    },
    {
        "name": "Inglewood School",
        "address": "Oshewa street, Ori-Okuta, Ikorodu, Lagos",
        "contact_email": "contact@inglewood.edu.ng",
        "fees": {"JSS1": "150000", "JSS2": "155000", "JSS3": "160000"},
        "admin": {"name": "Inglewood Finance", "email": "finance@inglewood.edu.ng"},
        "bank": BankDetails(bank_name="UBA", account_name="Inglewood school", account_number="8130311200"),
    },
]


async def _ensure_user(db, email: str, name: str, role: UserRole, school_id=None, bank=None) -> None:
    if await UserService.get_user_by_email(db, email):
        logger.info("Account exists, skipping", extra={"email": email})
        return
    await UserService.create_user(
        db, email=email, password=PASSWORD, name=name, role=role,
        school_id=school_id, bank_details=bank, auto_commit=False,
    )
    logger.info("Account seeded", extra={"email": email, "role": role.value})


async def seed() -> None:
    await init_db()
    async with AsyncSessionLocal() as db:
        await _ensure_user(db, OWNER["email"], OWNER["name"], UserRole.PLATFORM_OWNER)
        await _ensure_user(db, GUARDIAN["email"], GUARDIAN["name"], UserRole.GUARDIAN)

        for spec in SCHOOLS:
            result = await db.execute(select(School).where(School.name == spec["name"]))
            school = result.scalar_one_or_none()
            if school is None:
                school = School(
                    name=spec["name"],
                    address=spec["address"],
                    contact_email=spec["contact_email"],
                    fee_schedule={grade: str(Decimal(amount)) for grade, amount in spec["fees"].items()},
                )
                db.add(school)
                await db.flush()
                logger.info("School seeded", extra={"school_id": school.id})
            await _ensure_user(
                db, spec["admin"]["email"], spec["admin"]["name"],
                UserRole.SCHOOL_ADMINISTRATOR, school_id=school.id, bank=spec["bank"],
            )

        await db.commit()
    await close_db()


def main():
    setup_logging()
    asyncio.run(seed())
    print(f"Seeded demo data. Platform owner: {OWNER['email']}")


if __name__ == "__main__":
    main()
