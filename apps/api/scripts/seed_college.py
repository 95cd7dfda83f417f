"""
Seed Development College

Creates a college, its principal account and the festival events, then
prints a bearer token for the principal so the API can be exercised
locally. Safe to run more than once; existing rows are reused.

Usage:
    cd apps/api
    python scripts/seed_college.py
"""

import asyncio
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import fest_api.models  # noqa: F401 - registers every table
from fest_api.core.config import settings
from fest_api.core.security import create_access_token
from fest_api.modules.colleges.models import College
from fest_api.modules.events.models import FESTIVAL_EVENT_CODES, Event
from fest_api.modules.users.models import User, UserRole

COLLEGE_CODE = "DEV001"
PRINCIPAL_EMAIL = "principal@dev-college.test"

# Group events accept whole teams; everything else is one participant per college
GROUP_EVENT_SIZES = {
    "mime": 6,
    "skit": 6,
    "one_act_play": 9,
    "group_song_indian": 6,
    "group_song_western": 6,
    "folk_orchestra": 9,
    "folk_dance": 10,
    "debate": 2,
    "quiz": 3,
    "installation": 4,
}


async def seed_college() -> None:
    """Create the development college, principal and events if they don't exist."""

    engine = create_async_engine(settings.database_url, echo=False)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as db:
        result = await db.execute(select(College).where(College.college_code == COLLEGE_CODE))
        college = result.scalar_one_or_none()
        if college is None:
            college = College(
                college_code=COLLEGE_CODE,
                college_name="Development College of Engineering",
                place="Bengaluru",
            )
            db.add(college)
            await db.flush()
            print(f"College created: {COLLEGE_CODE} (id={college.college_id})")
        else:
            print(f"College already exists: {COLLEGE_CODE} (id={college.college_id})")

        result = await db.execute(select(User).where(User.email == PRINCIPAL_EMAIL))
        principal = result.scalar_one_or_none()
        if principal is None:
            principal = User(
                college_id=college.college_id,
                full_name="Dev Principal",
                email=PRINCIPAL_EMAIL,
                role=UserRole.PRINCIPAL,
                is_active=True,
            )
            db.add(principal)
            await db.flush()
            print(f"Principal created: {PRINCIPAL_EMAIL} (id={principal.user_id})")

        result = await db.execute(select(Event.event_code))
        existing_codes = set(result.scalars().all())
        new_events = [
            Event(
                event_code=code,
                event_name=code.replace("_", " ").title(),
                max_participants_per_college=GROUP_EVENT_SIZES.get(code, 1),
                max_accompanists_per_college=2 if code in GROUP_EVENT_SIZES else 1,
            )
            for code in FESTIVAL_EVENT_CODES
            if code not in existing_codes
        ]
        db.add_all(new_events)
        print(f"Events created: {len(new_events)}")

        await db.commit()

        token = create_access_token(
            principal.user_id,
            additional_claims={"college_id": college.college_id, "role": principal.role.value},
        )
        print("\nBearer token for the principal:")
        print(token)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_college())
