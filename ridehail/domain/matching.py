"""
Proximity Matching Engine
=========================

1. **Distance**  -- great-circle distance from the rider to every
   candidate vehicle.
2. **Ranking**   -- candidates sorted ascending by that distance.  The sort
   is stable, so vehicles at equal distance keep their fleet order.
3. **Filtering** -- booked vehicles are skipped.
4. **Enrichment** -- each surviving vehicle gets its completed reviews, an
   average rating and a ride price.
5. **Cut-off**   -- stop as soon as ``count`` offers exist.

Average rating is the arithmetic mean of the rated reviews and 0.0 when a
vehicle has none.  0.0 is a value, not a "no rating" marker.

Complexity
----------
Let V = candidate vehicles, N = requested offers.

* Distances:   O(V)
* Sort:        O(V log V)
* Enrichment:  O(N) review lookups (skipped vehicles cost nothing)

Review lookups are awaited one vehicle at a time, in rank order, so no
more lookups run than offers are returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from .distance import HasPosition, distance
from .entities import Review, Vehicle
from .pricing import PricingStrategy, StandardPricing, quote

logger = logging.getLogger(__name__)


class ReviewSource(Protocol):
    async def vehicle_reviews(self, vehicle_id: str) -> list[Review]: ...


@dataclass
class RideOffer:
    vehicle: Vehicle
    distance_to_driver: float
    price: float
    reviews: list[Review] = field(default_factory=list)
    average_rating: float = 0.0


def average_rating(reviews: Sequence[Review]) -> float:
    rates = [r.rate for r in reviews if r.rate is not None]
    if not rates:
        return 0.0
    return sum(rates) / len(rates)


def rank_by_distance(
    user_position: HasPosition, vehicles: Sequence[Vehicle]
) -> list[tuple[Vehicle, float]]:
    """Pair each vehicle with its distance to the rider, nearest first."""
    ranked = [(v, distance(user_position, v)) for v in vehicles]
    ranked.sort(key=lambda pair: pair[1])
    return ranked


class MatchingEngine:
    """Turns a fleet snapshot into ranked, priced ride offers."""

    def __init__(
        self,
        review_source: ReviewSource,
        pricing: PricingStrategy | None = None,
    ):
        self.review_source = review_source
        self.pricing = pricing or StandardPricing()

    async def find_closest_vehicles(
        self,
        user_position: HasPosition,
        vehicles: Sequence[Vehicle],
        count: int,
        distance_to_destination: float,
    ) -> list[RideOffer]:
        """
        Return at most *count* offers for unbooked vehicles, nearest first.

        The result has ``min(count, unbooked vehicles)`` entries.
        """
        if count <= 0 or not vehicles:
            return []

        offers: list[RideOffer] = []
        for vehicle, dist in rank_by_distance(user_position, vehicles):
            if vehicle.booked:
                continue

            reviews = await self.review_source.vehicle_reviews(vehicle.uuid)
            offers.append(
                RideOffer(
                    vehicle=vehicle,
                    distance_to_driver=dist,
                    price=quote(vehicle, distance_to_destination, self.pricing),
                    reviews=reviews,
                    average_rating=average_rating(reviews),
                )
            )
            if len(offers) == count:
                break

        logger.debug(
            "Matched %d of %d candidate vehicles", len(offers), len(vehicles)
        )
        return offers
