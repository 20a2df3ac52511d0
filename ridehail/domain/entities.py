"""
Domain entities with business logic.

Patterns used
-------------
- **Tagged variant** on ``Review.outcome``: a review is either ``Pending``
  or ``Completed(rate, comment)``, so a rating can only exist on a
  completed review.
- **State Pattern** on ``Review.complete``: PENDING -> COMPLETED, once.
- ``Vehicle`` snapshots are replaced, never mutated in place, by the
  registry (see ``ridehail.services.vehicle_registry``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from .distance import Position
from .enums import REVIEW_TRANSITIONS, ReviewStatus


class InvalidStateTransition(Exception):
    """Raised when a review status change violates the state machine."""


class StorageFailure(Exception):
    """The backing store is unreachable or rejected a write."""


class BookingConflict(Exception):
    """The vehicle is not in the booked state the operation requires."""


class VehicleNotFound(Exception):
    """A write targeted a vehicle that storage does not know about."""


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Vehicle:
    uuid: str
    brand: str = ""
    first_name: str = ""
    last_name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    price_per_km: float = 0.0
    start_price: float = 0.0
    booked: bool = False

    @property
    def position(self) -> Position:
        return Position(self.latitude, self.longitude)


# ── Review outcome (tagged variant) ───────────────────────────────────


@dataclass(frozen=True)
class Pending:
    status = ReviewStatus.PENDING


@dataclass(frozen=True)
class Completed:
    rate: float
    comment: Optional[str] = None

    status = ReviewStatus.COMPLETED


ReviewOutcome = Union[Pending, Completed]

PENDING = Pending()


@dataclass
class Review:
    uuid: str
    email: str
    vehicle_id: str
    date_of_ride: datetime
    price: float
    outcome: ReviewOutcome = PENDING

    @property
    def status(self) -> ReviewStatus:
        return self.outcome.status

    @property
    def completed(self) -> bool:
        return isinstance(self.outcome, Completed)

    @property
    def rate(self) -> Optional[float]:
        return self.outcome.rate if isinstance(self.outcome, Completed) else None

    @property
    def comment(self) -> Optional[str]:
        return self.outcome.comment if isinstance(self.outcome, Completed) else None

    def complete(self, rate: float, comment: Optional[str] = None) -> None:
        """Attach the requester's rating; only a pending review accepts one."""
        if ReviewStatus.COMPLETED not in REVIEW_TRANSITIONS[self.status]:
            raise InvalidStateTransition(
                f"Review {self.uuid} is already {self.status.value}"
            )
        self.outcome = Completed(rate=rate, comment=comment)
