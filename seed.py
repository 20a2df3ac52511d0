"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 12 sample vehicles (spread around Amsterdam Centraal), 2 of them booked
  - 6 sample reviews (mix of completed and pending)
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from ridehail.domain.entities import Review, Vehicle
from ridehail.infrastructure.database import async_session_factory, engine
from ridehail.infrastructure.repositories import ReviewRepository, VehicleRepository
from ridehail.services.reviews import generate_guid

# Amsterdam Centraal coordinates (approx)
STATION_LAT, STATION_LNG = 52.3791, 4.9003


VEHICLES = [
    # brand, first name, last name, lat offset, lng offset, per km, start, booked
    ("Toyota", "Daan", "de Vries", 0.0010, 0.0008, 2.10, 3.00, False),
    ("Skoda", "Emma", "Jansen", -0.0021, 0.0015, 1.95, 3.50, False),
    ("Tesla", "Sem", "Bakker", 0.0032, -0.0011, 2.80, 4.00, False),
    ("Kia", "Julia", "Visser", -0.0008, -0.0027, 1.80, 2.50, False),
    ("Mercedes", "Lucas", "Smit", 0.0051, 0.0043, 3.20, 5.00, True),
    ("Volkswagen", "Mila", "Meijer", -0.0044, 0.0030, 2.00, 3.00, False),
    ("Toyota", "Levi", "de Boer", 0.0067, -0.0052, 2.10, 3.00, False),
    ("Hyundai", "Tess", "Mulder", -0.0071, -0.0018, 1.85, 2.75, True),
    ("BMW", "Finn", "de Groot", 0.0089, 0.0061, 3.10, 4.50, False),
    ("Skoda", "Sara", "Bos", -0.0093, 0.0077, 1.95, 3.50, False),
    ("Peugeot", "Noah", "Vos", 0.0105, -0.0084, 1.90, 3.00, False),
    ("Tesla", "Zoë", "Peters", -0.0112, -0.0095, 2.80, 4.00, False),
]

# vehicle index, requester, days ago, price, rate (None = pending), comment
REVIEWS = [
    (0, "anna@example.com", 3, 14.20, 5, "Spotless car, friendly driver."),
    (0, "bram@example.com", 2, 9.80, 4, None),
    (1, "anna@example.com", 6, 21.35, 3, "Took a detour."),
    (2, "chris@example.com", 1, 18.00, 5, "Quiet and fast."),
    (3, "anna@example.com", 0, 7.60, None, None),
    (5, "bram@example.com", 0, 11.10, None, None),
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM vehicles"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Vehicles ──────────────────────────────────────────────────
        vehicle_repo = VehicleRepository(session)
        vehicles = []
        for brand, first, last, dlat, dlng, per_km, start, booked in VEHICLES:
            vehicle = Vehicle(
                uuid=generate_guid(),
                brand=brand,
                first_name=first,
                last_name=last,
                latitude=STATION_LAT + dlat,
                longitude=STATION_LNG + dlng,
                price_per_km=per_km,
                start_price=start,
                booked=booked,
            )
            vehicles.append(await vehicle_repo.add(vehicle))

        # ── Reviews ───────────────────────────────────────────────────
        review_repo = ReviewRepository(session)
        now = datetime.now(timezone.utc)
        for idx, email, days_ago, price, rate, comment in REVIEWS:
            review = Review(
                uuid=generate_guid(),
                email=email,
                vehicle_id=vehicles[idx].uuid,
                date_of_ride=now - timedelta(days=days_ago),
                price=price,
            )
            if rate is not None:
                review.complete(rate, comment)
            await review_repo.insert(review)

        await session.commit()
        print(f"Seeded {len(vehicles)} vehicles and {len(REVIEWS)} reviews.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
