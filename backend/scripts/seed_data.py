"""Seed the database with an admin account, a traveller and sample tours.

Idempotent: existing seed users and tours with the same titles are removed
and recreated so the data is always in a known state.

Run from the backend directory after applying migrations:
    alembic upgrade head
    python -m scripts.seed_data
"""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, func

from travelworld.auth.passwords import hash_password
from travelworld.database import database
from travelworld.models.experience import Experience, default_author
from travelworld.models.tour import Tour
from travelworld.models.user import ROLE_ADMIN, ROLE_USER, User

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN_USER = {
    "username": "admin",
    "email": "admin@travelworld.dev",
    "password": "admin1234",
    "role": ROLE_ADMIN,
}

TRAVELLER = {
    "username": "traveller",
    "email": "traveller@travelworld.dev",
    "password": "travel1234",
    "role": ROLE_USER,
}

TOURS = [
    {
        "title": "Westminster Bridge",
        "city": "London",
        "address": "Westminster Bridge Rd, London SE1 7PB",
        "distance": 300,
        "desc": "Walk across the Thames with views of Parliament and the London Eye.",
        "price": Decimal("99.00"),
        "max_group_size": 10,
        "featured": True,
        "lat": 51.5008,
        "lng": -0.1219,
    },
    {
        "title": "Bali, Indonesia",
        "city": "Bali",
        "address": "Jl. Raya Ubud, Ubud",
        "distance": 400,
        "desc": "Rice terraces, temples and a sunset on the Uluwatu cliffs.",
        "price": Decimal("99.00"),
        "max_group_size": 8,
        "featured": True,
        "lat": -8.5069,
        "lng": 115.2625,
    },
    {
        "title": "Snowy Mountains, Thailand",
        "city": "Bangkok",
        "address": "Doi Inthanon National Park",
        "distance": 500,
        "desc": "Trek through cloud forest to the highest point in Thailand.",
        "price": Decimal("99.00"),
        "max_group_size": 8,
        "featured": True,
        "lat": 18.5886,
        "lng": 98.4867,
    },
    {
        "title": "Beautiful Sunrise, Thailand",
        "city": "Phuket",
        "address": "Promthep Cape, Rawai",
        "distance": 500,
        "desc": "An early start for sunrise over the Andaman Sea.",
        "price": Decimal("99.00"),
        "max_group_size": 8,
        "featured": False,
    },
    {
        "title": "Nusa Pendia Bali, Indonesia",
        "city": "Bali",
        "address": "Kelingking Beach, Nusa Penida",
        "distance": 500,
        "desc": "Day trip by fast boat to the cliffs and beaches of Nusa Penida.",
        "price": Decimal("99.00"),
        "max_group_size": 8,
        "featured": False,
    },
    {
        "title": "Cherry Blossoms Spring",
        "city": "Tokyo",
        "address": "Ueno Park, Taito City",
        "distance": 500,
        "desc": "Hanami picnics under the cherry trees of Ueno and Shinjuku Gyoen.",
        "price": Decimal("99.00"),
        "max_group_size": 8,
        "featured": False,
    },
]

EXPERIENCE = {
    "title": "Five slow days in Ubud",
    "destination": "Bali, Indonesia",
    "description": "Yoga mornings, rice terrace walks and far too much nasi campur.",
    "duration": 5,
    "group_size": 2,
    "budget_range": "mid-range",
    "categories": ["cultural", "nature", "food"],
    "itinerary": [
        {"day": 1, "activities": "Arrive, Campuhan Ridge walk at sunset"},
        {"day": 2, "activities": "Tegallalang rice terraces", "meals": "Warung Babi Guling"},
    ],
    "tips": "Rent a scooter only if you already ride one at home.",
    "total_cost": Decimal("850.00"),
    "tags": ["ubud", "yoga"],
}


async def _reset(session) -> None:
    emails = [ADMIN_USER["email"], TRAVELLER["email"]]
    await session.execute(delete(User).where(func.lower(User.email).in_(emails)))
    await session.execute(delete(Tour).where(Tour.title.in_([t["title"] for t in TOURS])))
    await session.execute(delete(Experience).where(Experience.title == EXPERIENCE["title"]))
    await session.flush()


async def seed() -> None:
    """Populate the database with sample users, tours and one experience."""
    session_factory = await database.connect()

    async with session_factory() as session:
        await _reset(session)

        users = {}
        for data in (ADMIN_USER, TRAVELLER):
            user = User(
                username=data["username"],
                email=data["email"],
                hashed_password=hash_password(data["password"]),
                role=data["role"],
            )
            session.add(user)
            users[data["role"]] = user
        await session.flush()
        print(f"✅ Created admin {ADMIN_USER['email']} and traveller {TRAVELLER['email']}")

        for tour_data in TOURS:
            session.add(Tour(**tour_data))
            print(f"   🗺️  {tour_data['title']} — {tour_data['city']} (${tour_data['price']})")
        await session.flush()

        traveller = users[ROLE_USER]
        session.add(Experience(**EXPERIENCE, images=[], **default_author(traveller.username, traveller.id)))
        await session.commit()

        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Users:       2 ({ADMIN_USER['email']} / {ADMIN_USER['password']})")
        print(f"   Tours:       {len(TOURS)}")
        print("   Experiences: 1")
        print("=" * 60)
        print("🎉 Done! You can now log in at /api/v1/auth/login")

    await database.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
