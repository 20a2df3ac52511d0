"""Review service tests against an in-memory SQLite store."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from ridehail.domain.entities import (
    Completed,
    InvalidStateTransition,
    Review,
    StorageFailure,
)
from ridehail.domain.enums import ReviewStatus
from ridehail.infrastructure.repositories import ReviewRepository
from ridehail.services.reviews import ReviewService, generate_guid
from tests.conftest import store_review


def review(uuid, vehicle_id="v1", email="anna@example.com", days_ago=0, outcome=None):
    kwargs = {"outcome": outcome} if outcome is not None else {}
    return Review(
        uuid=uuid,
        email=email,
        vehicle_id=vehicle_id,
        date_of_ride=datetime(2026, 5, 10) - timedelta(days=days_ago),
        price=15.0,
        **kwargs,
    )


class TestReviewRequest:
    @pytest.mark.asyncio
    async def test_insert_creates_pending_stub(self, review_service):
        created = await review_service.insert_review_request(
            "anna@example.com", "v1", 23.5
        )

        assert created.uuid == "r1"
        assert created.status == ReviewStatus.PENDING

        loaded = await review_service.get("r1")
        assert loaded.email == "anna@example.com"
        assert loaded.vehicle_id == "v1"
        assert loaded.price == 23.5
        assert loaded.rate is None

    @pytest.mark.asyncio
    async def test_generated_ids_are_unique(self, seeded_factory):
        service = ReviewService(seeded_factory)
        a = await service.insert_review_request("anna@example.com", "v1", 1.0)
        b = await service.insert_review_request("anna@example.com", "v1", 1.0)
        assert a.uuid != b.uuid

    def test_generate_guid(self):
        assert len(generate_guid()) == 36

    @pytest.mark.asyncio
    async def test_get_missing_is_none(self, review_service):
        assert await review_service.get("nope") is None


class TestLeaveReview:
    @pytest.mark.asyncio
    async def test_completes_pending_review(self, review_service):
        await review_service.insert_review_request("anna@example.com", "v1", 10.0)

        done = await review_service.leave_review("r1", 4, "Nice")

        assert done.outcome == Completed(rate=4, comment="Nice")
        assert (await review_service.get("r1")).rate == 4

    @pytest.mark.asyncio
    async def test_second_submission_rejected(self, review_service):
        await review_service.insert_review_request("anna@example.com", "v1", 10.0)
        await review_service.leave_review("r1", 4)

        with pytest.raises(InvalidStateTransition):
            await review_service.leave_review("r1", 1, "changed my mind")
        assert (await review_service.get("r1")).rate == 4

    @pytest.mark.asyncio
    async def test_missing_review_is_none(self, review_service):
        assert await review_service.leave_review("nope", 5) is None


class TestVehicleReviews:
    @pytest.mark.asyncio
    async def test_only_completed_reviews(self, seeded_factory, review_service):
        await store_review(seeded_factory, review("a", outcome=Completed(rate=4)))
        await store_review(seeded_factory, review("b", outcome=Completed(rate=5)))
        await store_review(seeded_factory, review("c"))
        await store_review(seeded_factory, review("d", vehicle_id="v2", outcome=Completed(rate=1)))

        found = await review_service.vehicle_reviews("v1")

        assert [r.uuid for r in found] == ["a", "b"]
        assert [r.rate for r in found] == [4, 5]

    @pytest.mark.asyncio
    async def test_vehicle_without_reviews(self, review_service):
        assert await review_service.vehicle_reviews("v2") == []


class TestUserReviews:
    @pytest.mark.asyncio
    async def test_split_and_joined_with_vehicle(self, seeded_factory, review_service):
        await store_review(
            seeded_factory, review("old", days_ago=3, outcome=Completed(rate=5))
        )
        await store_review(seeded_factory, review("new", vehicle_id="v2", days_ago=1))
        await store_review(
            seeded_factory, review("gone", vehicle_id="deleted", days_ago=2)
        )
        await store_review(seeded_factory, review("other", email="bram@example.com"))

        result = await review_service.get_all_reviews("anna@example.com")

        assert [r.review.uuid for r in result.completed] == ["old"]
        assert result.completed[0].vehicle.uuid == "v1"
        assert [r.review.uuid for r in result.pending] == ["new", "gone"]
        assert result.pending[0].vehicle.brand == "Skoda"
        assert result.pending[1].vehicle is None

    @pytest.mark.asyncio
    async def test_unknown_user(self, review_service):
        result = await review_service.get_all_reviews("nobody@example.com")
        assert result.completed == [] and result.pending == []


class TestStorageRules:
    @pytest.mark.asyncio
    async def test_pending_row_cannot_carry_rating(self, seeded_factory):
        await store_review(seeded_factory, review("x"))
        with pytest.raises(IntegrityError):
            async with seeded_factory() as session:
                await ReviewRepository(session).update("x", {"rate": 3.0})
                await session.commit()

    @pytest.mark.asyncio
    async def test_completed_row_requires_rating(self, seeded_factory):
        await store_review(seeded_factory, review("x"))
        with pytest.raises(IntegrityError):
            async with seeded_factory() as session:
                await ReviewRepository(session).update("x", {"completed": True})
                await session.commit()

    @pytest.mark.asyncio
    async def test_vehicle_query_skips_pending(self, seeded_factory):
        await store_review(seeded_factory, review("a"))
        await store_review(seeded_factory, review("b", outcome=Completed(rate=3)))
        async with seeded_factory() as session:
            found = await ReviewRepository(session).find_all_for_vehicle("v1")
        assert [r.uuid for r in found] == ["b"]

    @pytest.mark.asyncio
    async def test_driver_error_becomes_storage_failure(self, seeded_factory):
        service = ReviewService(seeded_factory, id_factory=lambda: "dup")
        await service.insert_review_request("anna@example.com", "v1", 1.0)
        with pytest.raises(StorageFailure):
            await service.insert_review_request("anna@example.com", "v1", 1.0)
