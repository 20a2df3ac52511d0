"""
FastAPI dependency injection helpers.

The registry and review service are built once in the app lifespan and
kept on ``app.state``; tests override these providers with instances
bound to their own database.
"""

from fastapi import Request

from ridehail.domain.matching import MatchingEngine
from ridehail.services.reviews import ReviewService
from ridehail.services.vehicle_registry import VehicleRegistry


def get_registry(request: Request) -> VehicleRegistry:
    return request.app.state.registry


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.reviews


def build_matching_engine(reviews: ReviewService) -> MatchingEngine:
    return MatchingEngine(reviews)
