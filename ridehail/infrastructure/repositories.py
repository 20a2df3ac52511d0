"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work), exposes
domain-relevant queries only and speaks in domain entities: ORM rows never
leave this module.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ReviewModel, VehicleModel
from ridehail.domain.entities import PENDING, Completed, Review, Vehicle


# ── Row <-> entity mapping ────────────────────────────────────────────


def vehicle_from_row(row: VehicleModel) -> Vehicle:
    return Vehicle(
        uuid=row.uuid,
        brand=row.brand,
        first_name=row.first_name,
        last_name=row.last_name,
        latitude=row.latitude,
        longitude=row.longitude,
        price_per_km=row.price_per_km,
        start_price=row.start_price,
        booked=bool(row.booked),
    )


def vehicle_patch(vehicle: Vehicle) -> dict[str, Any]:
    """Every mutable column of *vehicle*, keyed by column name."""
    patch = asdict(vehicle)
    patch.pop("uuid")
    return patch


def review_from_row(row: ReviewModel) -> Review:
    outcome = (
        Completed(rate=row.rate, comment=row.comment) if row.completed else PENDING
    )
    return Review(
        uuid=row.uuid,
        email=row.email,
        vehicle_id=row.vehicle_id,
        date_of_ride=row.date_of_ride,
        price=row.price,
        outcome=outcome,
    )


def review_patch(review: Review) -> dict[str, Any]:
    return {
        "completed": review.completed,
        "rate": review.rate,
        "comment": review.comment,
    }


# ── Repositories ──────────────────────────────────────────────────────


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> list[Vehicle]:
        result = await self.session.execute(
            select(VehicleModel).order_by(VehicleModel.id)
        )
        return [vehicle_from_row(row) for row in result.scalars().all()]

    async def find_one(self, uuid: str) -> Optional[Vehicle]:
        result = await self.session.execute(
            select(VehicleModel).where(VehicleModel.uuid == uuid)
        )
        row = result.scalar_one_or_none()
        return vehicle_from_row(row) if row is not None else None

    async def add(self, vehicle: Vehicle) -> Vehicle:
        self.session.add(VehicleModel(uuid=vehicle.uuid, **vehicle_patch(vehicle)))
        await self.session.flush()
        return vehicle

    async def update(
        self,
        uuid: str,
        patch: dict[str, Any],
        expected_booked: Optional[bool] = None,
    ) -> bool:
        """
        Write *patch* to the vehicle row.  Returns False if no row matched.

        With *expected_booked* the write is a compare-and-swap: it only
        applies while the stored ``booked`` flag still has that value.
        """
        query = update(VehicleModel).where(VehicleModel.uuid == uuid)
        if expected_booked is not None:
            query = query.where(VehicleModel.booked.is_(expected_booked))
        result = await self.session.execute(
            query.values(**patch).execution_options(synchronize_session=False)
        )
        return result.rowcount > 0


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_one(self, uuid: str) -> Optional[Review]:
        result = await self.session.execute(
            select(ReviewModel).where(ReviewModel.uuid == uuid)
        )
        row = result.scalar_one_or_none()
        return review_from_row(row) if row is not None else None

    async def find_all_for_user(
        self, email: str
    ) -> list[tuple[Review, Optional[Vehicle]]]:
        """Reviews of one requester joined with their vehicle, newest first."""
        result = await self.session.execute(
            select(ReviewModel, VehicleModel)
            .outerjoin(VehicleModel, VehicleModel.uuid == ReviewModel.vehicle_id)
            .where(ReviewModel.email == email)
            .order_by(ReviewModel.date_of_ride.desc(), ReviewModel.id.desc())
        )
        return [
            (review_from_row(review), vehicle_from_row(vehicle) if vehicle else None)
            for review, vehicle in result.all()
        ]

    async def find_all_for_vehicle(self, vehicle_id: str) -> list[Review]:
        """Completed reviews of *vehicle_id*, oldest first."""
        result = await self.session.execute(
            select(ReviewModel)
            .where(
                ReviewModel.vehicle_id == vehicle_id,
                ReviewModel.completed.is_(True),
            )
            .order_by(ReviewModel.id)
        )
        return [review_from_row(row) for row in result.scalars().all()]

    async def insert(self, review: Review) -> Review:
        self.session.add(
            ReviewModel(
                uuid=review.uuid,
                email=review.email,
                vehicle_id=review.vehicle_id,
                date_of_ride=review.date_of_ride,
                price=review.price,
                **review_patch(review),
            )
        )
        await self.session.flush()
        return review

    async def update(
        self,
        uuid: str,
        patch: dict[str, Any],
        expected_completed: Optional[bool] = None,
    ) -> bool:
        query = update(ReviewModel).where(ReviewModel.uuid == uuid)
        if expected_completed is not None:
            query = query.where(ReviewModel.completed.is_(expected_completed))
        result = await self.session.execute(
            query.values(**patch).execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
