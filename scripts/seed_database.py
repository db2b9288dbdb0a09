#!/usr/bin/env python3
"""
Seed local dev database with sample fighters and gyms for manual testing.

Creates 5 users with fighter profiles around California plus a handful of
gyms. Idempotent: skips users and gyms that already exist.

Usage:
    python scripts/seed_database.py
"""

import asyncio
import json
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from sqlalchemy import select  # noqa: E402
from sparmatch.database.db import AsyncSessionLocal, init_database  # noqa: E402
from sparmatch.database.models import FighterProfile, Gym, User  # noqa: E402

LOS_ANGELES = (34.0522, -118.2437)
SAN_DIEGO = (32.7157, -117.1611)
SAN_FRANCISCO = (37.7749, -122.4194)

SAMPLE_FIGHTERS = [
    {
        "email": "marcus.rodriguez@example.com",
        "first_name": "Marcus",
        "last_name": "Rodriguez",
        "discipline": "boxing",
        "experience_level": "intermediate",
        "weight_class": "Welterweight (170 lbs)",
        "weight": 170,
        "location": "Los Angeles, CA",
        "coords": LOS_ANGELES,
        "bio": "Looking for technical sparring partners. Focus on footwork and combinations.",
        "availability": "Weekday evenings 6-8 PM",
        "rating": 4.9,
        "total_ratings": 12,
        "verified": False,
    },
    {
        "email": "sarah.chen@example.com",
        "first_name": "Sarah",
        "last_name": "Chen",
        "discipline": "mma",
        "experience_level": "advanced",
        "weight_class": "Flyweight (125 lbs)",
        "weight": 125,
        "location": "Los Angeles, CA",
        "coords": LOS_ANGELES,
        "bio": "Former amateur competitor. Enjoy working on ground game and striking.",
        "availability": "Weekend mornings 8-10 AM",
        "rating": 4.8,
        "total_ratings": 8,
        "verified": False,
    },
    {
        "email": "jake.thompson@example.com",
        "first_name": "Jake",
        "last_name": "Thompson",
        "discipline": "boxing",
        "experience_level": "professional",
        "weight_class": "Middleweight (160 lbs)",
        "weight": 160,
        "location": "Los Angeles, CA",
        "coords": LOS_ANGELES,
        "bio": "Professional boxer, mentor-style sparring for intermediate to advanced partners.",
        "availability": "Flexible schedule",
        "rating": 5.0,
        "total_ratings": 25,
        "verified": True,
    },
    {
        "email": "maria.santos@example.com",
        "first_name": "Maria",
        "last_name": "Santos",
        "discipline": "muay-thai",
        "experience_level": "intermediate",
        "weight_class": "Bantamweight (135 lbs)",
        "weight": 135,
        "location": "San Diego, CA",
        "coords": SAN_DIEGO,
        "bio": "Traditional Muay Thai practitioner. Love working on clinch and elbows.",
        "availability": "Tuesday/Thursday evenings",
        "rating": 4.7,
        "total_ratings": 15,
        "verified": False,
    },
    {
        "email": "alex.kim@example.com",
        "first_name": "Alex",
        "last_name": "Kim",
        "discipline": "bjj",
        "experience_level": "advanced",
        "weight_class": "Lightweight (155 lbs)",
        "weight": 155,
        "location": "San Francisco, CA",
        "coords": SAN_FRANCISCO,
        "bio": "Brown belt with competition experience. Open to all skill levels.",
        "availability": "Weekend afternoons",
        "rating": 4.9,
        "total_ratings": 18,
        "verified": False,
    },
]

SAMPLE_GYMS = [
    {
        "name": "Elite Boxing Academy",
        "address": "1234 Boxing Blvd",
        "city": "Los Angeles",
        "state": "CA",
        "zip_code": "90028",
        "coords": LOS_ANGELES,
        "disciplines": ["boxing", "fitness"],
        "amenities": ["heavy bags", "speed bags", "ring", "showers", "parking"],
        "rating": 4.8,
        "total_ratings": 127,
    },
    {
        "name": "Iron MMA Gym",
        "address": "5678 Fighter Ave",
        "city": "Los Angeles",
        "state": "CA",
        "zip_code": "90210",
        "coords": (34.0736, -118.4004),
        "disciplines": ["mma", "bjj", "boxing", "muay-thai"],
        "amenities": ["mats", "cage", "heavy bags", "grappling area"],
        "rating": 4.9,
        "total_ratings": 89,
    },
    {
        "name": "Gracie Jiu-Jitsu Academy",
        "address": "3456 Grappling St",
        "city": "San Diego",
        "state": "CA",
        "zip_code": "92101",
        "coords": SAN_DIEGO,
        "disciplines": ["bjj", "self-defense"],
        "amenities": ["mats", "changing rooms", "kids classes"],
        "rating": 4.9,
        "total_ratings": 203,
    },
    {
        "name": "Bay Area Combat Sports",
        "address": "7890 Fighter Blvd",
        "city": "San Francisco",
        "state": "CA",
        "zip_code": "94102",
        "coords": SAN_FRANCISCO,
        "disciplines": ["mma", "boxing", "muay-thai", "bjj", "wrestling"],
        "amenities": ["ring", "cage", "mats", "sauna"],
        "rating": 4.8,
        "total_ratings": 94,
    },
]


async def main():
    """Create sample fighters and gyms."""
    print("\n🥊  Seeding sample data...\n")
    await init_database()

    async with AsyncSessionLocal() as session:
        for fighter in SAMPLE_FIGHTERS:
            result = await session.execute(select(User).where(User.email == fighter["email"]))
            existing_user = result.scalar_one_or_none()
            if existing_user:
                print(f"  ⏭️  {fighter['first_name']} already exists (user #{existing_user.id})")
                continue

            user = User(
                email=fighter["email"],
                first_name=fighter["first_name"],
                last_name=fighter["last_name"],
            )
            session.add(user)
            await session.flush()

            latitude, longitude = fighter["coords"]
            profile = FighterProfile(
                user_id=user.id,
                discipline=fighter["discipline"],
                experience_level=fighter["experience_level"],
                weight_class=fighter["weight_class"],
                weight=fighter["weight"],
                location=fighter["location"],
                latitude=latitude,
                longitude=longitude,
                bio=fighter["bio"],
                availability=fighter["availability"],
                rating=fighter["rating"],
                total_ratings=fighter["total_ratings"],
                verified=fighter["verified"],
            )
            session.add(profile)
            await session.flush()
            print(f"  ✅ Created {fighter['first_name']} {fighter['last_name']} (user #{user.id})")

        for gym_data in SAMPLE_GYMS:
            result = await session.execute(select(Gym.id).where(Gym.name == gym_data["name"]))
            if result.scalar_one_or_none():
                print(f"  ⏭️  {gym_data['name']} already exists")
                continue

            latitude, longitude = gym_data["coords"]
            session.add(
                Gym(
                    name=gym_data["name"],
                    address=gym_data["address"],
                    city=gym_data["city"],
                    state=gym_data["state"],
                    zip_code=gym_data["zip_code"],
                    latitude=latitude,
                    longitude=longitude,
                    disciplines=json.dumps(gym_data["disciplines"]),
                    amenities=json.dumps(gym_data["amenities"]),
                    rating=gym_data["rating"],
                    total_ratings=gym_data["total_ratings"],
                    verified=True,
                )
            )
            print(f"  ✅ Created gym {gym_data['name']}")

        await session.commit()

    print("\n💡 Send requests with header X-User-Id: <user id> to act as a seeded fighter\n")


if __name__ == "__main__":
    asyncio.run(main())
