"""
Review Service
==============

Reviews are created as *pending* stubs when a ride finishes and completed
once, when the requester submits a rating.  Only completed reviews are
visible to drivers and count towards a vehicle's average rating.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridehail.domain.entities import (
    InvalidStateTransition,
    Review,
    StorageFailure,
    Vehicle,
)
from ridehail.infrastructure.repositories import ReviewRepository, review_patch

logger = logging.getLogger(__name__)


def generate_guid() -> str:
    return str(uuid.uuid4())


@dataclass
class ReviewWithVehicle:
    review: Review
    vehicle: Optional[Vehicle]


@dataclass
class UserReviews:
    completed: list[ReviewWithVehicle] = field(default_factory=list)
    pending: list[ReviewWithVehicle] = field(default_factory=list)


class ReviewService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        id_factory: Callable[[], str] = generate_guid,
    ):
        self._session_factory = session_factory
        self._id_factory = id_factory

    async def get(self, uuid: str) -> Optional[Review]:
        try:
            async with self._session_factory() as session:
                return await ReviewRepository(session).find_one(uuid)
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not load review {uuid}") from exc

    async def insert_review_request(
        self, email: str, vehicle_id: str, price: float
    ) -> Review:
        """Create the pending review the requester can fill out later."""
        review = Review(
            uuid=self._id_factory(),
            email=email,
            vehicle_id=vehicle_id,
            date_of_ride=datetime.now(timezone.utc),
            price=price,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await ReviewRepository(session).insert(review)
        except SQLAlchemyError as exc:
            logger.exception("Could not store review request for %s", vehicle_id)
            raise StorageFailure("Could not store review request") from exc
        logger.info("Review request %s created for vehicle %s", review.uuid, vehicle_id)
        return review

    async def get_all_reviews(self, email: str) -> UserReviews:
        """All of a requester's reviews, split into completed and pending."""
        try:
            async with self._session_factory() as session:
                rows = await ReviewRepository(session).find_all_for_user(email)
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not load reviews of {email}") from exc

        reviews = UserReviews()
        for review, vehicle in rows:
            bucket = reviews.completed if review.completed else reviews.pending
            bucket.append(ReviewWithVehicle(review=review, vehicle=vehicle))
        return reviews

    async def leave_review(
        self, uuid: str, rate: float, comment: Optional[str] = None
    ) -> Optional[Review]:
        """
        Complete a pending review.  Returns None if it does not exist and
        raises ``InvalidStateTransition`` if it was already completed.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    repo = ReviewRepository(session)
                    review = await repo.find_one(uuid)
                    if review is None:
                        return None
                    review.complete(rate, comment)
                    applied = await repo.update(
                        uuid, review_patch(review), expected_completed=False
                    )
        except SQLAlchemyError as exc:
            logger.exception("Could not store review %s", uuid)
            raise StorageFailure(f"Could not store review {uuid}") from exc

        if not applied:
            # a concurrent submission completed it between read and write
            raise InvalidStateTransition(f"Review {uuid} is already COMPLETED")
        return review

    async def vehicle_reviews(self, vehicle_id: str) -> list[Review]:
        """Completed reviews of one vehicle, oldest first."""
        try:
            async with self._session_factory() as session:
                return await ReviewRepository(session).find_all_for_vehicle(
                    vehicle_id
                )
        except SQLAlchemyError as exc:
            raise StorageFailure(
                f"Could not load reviews of vehicle {vehicle_id}"
            ) from exc
