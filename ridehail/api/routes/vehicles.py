"""
Vehicle endpoints
=================

POST /api/v1/vehicles/offers         -- nearest unbooked vehicles, priced and rated
GET  /api/v1/vehicles/{uuid}         -- one vehicle
POST /api/v1/vehicles/{uuid}/book    -- book a vehicle for a ride
POST /api/v1/vehicles/{uuid}/finish  -- end the ride and open a review request
"""

import logging

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, HTTPException, Request

from ridehail.api.dependencies import (
    build_matching_engine,
    get_registry,
    get_review_service,
)
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import (
    ErrorResponse,
    FinishRideRequest,
    OfferRequest,
    RideOfferResponse,
    VehicleResponse,
)
from ridehail.config import settings
from ridehail.domain.distance import distance
from ridehail.domain.entities import BookingConflict, StorageFailure, VehicleNotFound
from ridehail.infrastructure.locks import DistributedLock
from ridehail.infrastructure.redis_client import get_redis
from ridehail.services.reviews import ReviewService
from ridehail.services.vehicle_registry import VehicleRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "/offers",
    response_model=list[RideOfferResponse],
    summary="Rank the closest available vehicles",
)
@limiter.limit(RATE_LIMIT)
async def create_offers(
    request: Request,
    body: OfferRequest,
    registry: VehicleRegistry = Depends(get_registry),
    reviews: ReviewService = Depends(get_review_service),
):
    rider = body.position.to_position()
    distance_to_destination = distance(rider, body.destination.to_position())

    try:
        fleet = await registry.get_all_vehicles()
        offers = await build_matching_engine(reviews).find_closest_vehicles(
            rider, fleet, body.count, distance_to_destination
        )
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return [RideOfferResponse.from_offer(o) for o in offers]


@router.get(
    "/{uuid}",
    response_model=VehicleResponse,
    responses=_ERRORS,
    summary="Get a vehicle",
)
@limiter.limit(RATE_LIMIT)
async def get_vehicle(
    request: Request,
    uuid: str,
    registry: VehicleRegistry = Depends(get_registry),
):
    try:
        vehicle = await registry.get_vehicle(uuid)
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if vehicle is None:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return VehicleResponse.model_validate(vehicle)


@router.post(
    "/{uuid}/book",
    response_model=VehicleResponse,
    responses=_ERRORS,
    summary="Book a vehicle",
)
@limiter.limit(RATE_LIMIT)
async def book_vehicle(
    request: Request,
    uuid: str,
    registry: VehicleRegistry = Depends(get_registry),
    redis: aioredis.Redis = Depends(get_redis),
):
    lock = DistributedLock(
        redis, f"vehicle:{uuid}", ttl_seconds=settings.booking_lock_ttl_seconds
    )
    if not await lock.acquire():
        logger.info("Booking of vehicle %s rejected: lock held elsewhere", uuid)
        raise HTTPException(
            status_code=409, detail="Vehicle is being booked by another request"
        )

    try:
        vehicle = await registry.get_vehicle(uuid)
        if vehicle is None:
            raise HTTPException(status_code=404, detail="Vehicle not found")
        booked = await registry.book(vehicle)
    except VehicleNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except BookingConflict as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    finally:
        await lock.release()
    return VehicleResponse.model_validate(booked)


@router.post(
    "/{uuid}/finish",
    response_model=VehicleResponse,
    responses=_ERRORS,
    summary="Finish a ride",
    description=(
        "Moves the vehicle to where the ride ended, makes it bookable again "
        "and opens a pending review for the requester."
    ),
)
@limiter.limit(RATE_LIMIT)
async def finish_ride(
    request: Request,
    uuid: str,
    body: FinishRideRequest,
    registry: VehicleRegistry = Depends(get_registry),
    reviews: ReviewService = Depends(get_review_service),
):
    try:
        vehicle = await registry.get_vehicle(uuid)
        if vehicle is None:
            raise HTTPException(status_code=404, detail="Vehicle not found")
        freed = await registry.finish_ride(vehicle, body.position.to_position())
        await reviews.insert_review_request(body.email, uuid, body.price)
    except VehicleNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except BookingConflict as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return VehicleResponse.model_validate(freed)
