"""Seed demo accounts and a weekday availability schedule.

Existing accounts are left untouched, so the script can be run repeatedly.
"""

import asyncio
import sys
from datetime import time

from app.database import AsyncSessionLocal, engine
from app.schemas.availability import AvailabilityTemplateCreate
from app.services.availability_service import AvailabilityService
from app.services.user_service import UserService

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    ("patient@arogyam.com", "patient", {"full_name": "John Patient", "phone": "+1234567890"}),
    (
        "doctor@arogyam.com",
        "doctor",
        {"full_name": "Bob Doctor", "phone": "+1234567892", "specialization": "Cardiology"},
    ),
    ("admin@arogyam.com", "admin", {"full_name": "Admin User"}),
    (
        "consultant@arogyam.com",
        "consultant",
        {"full_name": "Jane Consultant", "specialization": "General Medicine"},
    ),
]

# Monday to Friday, 0 = Sunday
WEEKDAYS = [1, 2, 3, 4, 5]


async def seed() -> None:
    """Create demo users and give the consultant a weekday schedule."""
    async with AsyncSessionLocal() as db:
        created = {}
        for email, role, profile in DEMO_USERS:
            user = await UserService.get_user_by_email(db, email)
            if user:
                print(f"- {email} already exists")
                continue

            created[role] = await UserService.create_user(
                db,
                email=email,
                password=DEMO_PASSWORD,
                role=role,
                doctor_license="DOC-0001" if role == "doctor" else None,
                profile=profile,
            )
            print(f"✓ Created {role} {email}")

        consultant = created.get("consultant")
        if consultant:
            service = AvailabilityService(db)
            for day in WEEKDAYS:
                await service.create_template(
                    consultant,
                    consultant["id"],
                    AvailabilityTemplateCreate(
                        day_of_week=day,
                        start_time=time(9, 0),
                        end_time=time(17, 0),
                    ),
                )
            print("✓ Created weekday availability 09:00-17:00")

    await engine.dispose()


if __name__ == "__main__":
    try:
        asyncio.run(seed())
    except Exception as e:
        print(f"✗ Seeding failed: {e}", file=sys.stderr)
        sys.exit(1)
