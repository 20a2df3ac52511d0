"""Domain enumerations and state-transition rules."""

import enum


class ReviewStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


# State machine: maps current status -> set of valid next statuses
REVIEW_TRANSITIONS: dict[ReviewStatus, set[ReviewStatus]] = {
    ReviewStatus.PENDING: {ReviewStatus.COMPLETED},
    ReviewStatus.COMPLETED: set(),
}
