"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ridehail.config import settings
from ridehail.domain.distance import Position
from ridehail.domain.entities import Review, Vehicle
from ridehail.domain.matching import RideOffer


# ── Requests ──────────────────────────────────────────────────────────


class PositionIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_position(self) -> Position:
        return Position(self.latitude, self.longitude)


class OfferRequest(BaseModel):
    position: PositionIn
    destination: PositionIn
    count: int = Field(
        settings.default_offer_count, ge=1, le=settings.max_offer_count
    )


class FinishRideRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    position: PositionIn = Field(..., description="Where the ride ended.")
    price: float = Field(..., ge=0)


class LeaveReviewRequest(BaseModel):
    rate: float = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


# ── Responses ─────────────────────────────────────────────────────────


class VehicleResponse(BaseModel):
    uuid: str
    brand: str
    first_name: str
    last_name: str
    latitude: float
    longitude: float
    price_per_km: float
    start_price: float
    booked: bool

    model_config = {"from_attributes": True}


class VehicleReviewResponse(BaseModel):
    uuid: str
    date_of_ride: datetime
    rate: float
    comment: Optional[str] = None

    @classmethod
    def from_review(cls, review: Review) -> "VehicleReviewResponse":
        return cls(
            uuid=review.uuid,
            date_of_ride=review.date_of_ride,
            rate=review.rate,
            comment=review.comment,
        )


class RideOfferResponse(BaseModel):
    vehicle: VehicleResponse
    distance_to_driver: float
    price: float
    reviews: list[VehicleReviewResponse] = []
    average_rating: float

    @classmethod
    def from_offer(cls, offer: RideOffer) -> "RideOfferResponse":
        return cls(
            vehicle=VehicleResponse.model_validate(offer.vehicle),
            distance_to_driver=offer.distance_to_driver,
            price=offer.price,
            reviews=[VehicleReviewResponse.from_review(r) for r in offer.reviews],
            average_rating=offer.average_rating,
        )


class ReviewVehicleSummary(BaseModel):
    vehicle_id: str
    brand: str
    first_name: str
    last_name: str


class ReviewResponse(BaseModel):
    uuid: str
    date_of_ride: datetime
    price: float
    status: str
    rate: Optional[float] = None
    comment: Optional[str] = None
    vehicle: Optional[ReviewVehicleSummary] = None

    @classmethod
    def from_review(
        cls, review: Review, vehicle: Optional[Vehicle] = None, joined: bool = False
    ) -> "ReviewResponse":
        """With *joined*, a missing vehicle is reported with placeholder text."""
        summary = None
        if joined:
            summary = ReviewVehicleSummary(
                vehicle_id=vehicle.uuid if vehicle else "Id not found",
                brand=vehicle.brand if vehicle else "Brand not found",
                first_name=vehicle.first_name if vehicle else "First name not found",
                last_name=vehicle.last_name if vehicle else "Last name not found",
            )
        return cls(
            uuid=review.uuid,
            date_of_ride=review.date_of_ride,
            price=review.price,
            status=review.status.value,
            rate=review.rate,
            comment=review.comment,
            vehicle=summary,
        )


class UserReviewsResponse(BaseModel):
    completed: list[ReviewResponse] = []
    pending: list[ReviewResponse] = []


class CacheReloadResponse(BaseModel):
    vehicles: int


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
