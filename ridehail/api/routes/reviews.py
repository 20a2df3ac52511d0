"""
Review endpoints
================

GET /api/v1/reviews?email=...            -- a requester's completed and pending reviews
GET /api/v1/reviews/{uuid}               -- one review
PUT /api/v1/reviews/{uuid}               -- submit rating / comment (once)
GET /api/v1/reviews/vehicle/{vehicle_id} -- completed reviews of a vehicle
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ridehail.api.dependencies import get_review_service
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import (
    ErrorResponse,
    LeaveReviewRequest,
    ReviewResponse,
    UserReviewsResponse,
    VehicleReviewResponse,
)
from ridehail.domain.entities import InvalidStateTransition, StorageFailure
from ridehail.services.reviews import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get(
    "",
    response_model=UserReviewsResponse,
    summary="List a requester's reviews",
)
@limiter.limit(RATE_LIMIT)
async def list_reviews(
    request: Request,
    email: str = Query(..., min_length=3),
    reviews: ReviewService = Depends(get_review_service),
):
    try:
        result = await reviews.get_all_reviews(email)
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return UserReviewsResponse(
        completed=[
            ReviewResponse.from_review(r.review, r.vehicle, joined=True)
            for r in result.completed
        ],
        pending=[
            ReviewResponse.from_review(r.review, r.vehicle, joined=True)
            for r in result.pending
        ],
    )


@router.get(
    "/vehicle/{vehicle_id}",
    response_model=list[VehicleReviewResponse],
    summary="Completed reviews of a vehicle",
)
@limiter.limit(RATE_LIMIT)
async def vehicle_reviews(
    request: Request,
    vehicle_id: str,
    reviews: ReviewService = Depends(get_review_service),
):
    try:
        found = await reviews.vehicle_reviews(vehicle_id)
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return [VehicleReviewResponse.from_review(r) for r in found]


@router.get(
    "/{uuid}",
    response_model=ReviewResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a review",
)
@limiter.limit(RATE_LIMIT)
async def get_review(
    request: Request,
    uuid: str,
    reviews: ReviewService = Depends(get_review_service),
):
    try:
        review = await reviews.get(uuid)
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return ReviewResponse.from_review(review)


@router.put(
    "/{uuid}",
    response_model=ReviewResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Leave a review",
)
@limiter.limit(RATE_LIMIT)
async def leave_review(
    request: Request,
    uuid: str,
    body: LeaveReviewRequest,
    reviews: ReviewService = Depends(get_review_service),
):
    try:
        review = await reviews.leave_review(uuid, body.rate, body.comment)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return ReviewResponse.from_review(review)
