"""
Distance calculation using the Haversine formula.

Assumption
----------
We use great-circle (Haversine) distance instead of a real routing engine
to keep the matching step free of network calls.  A vehicle ten blocks
away across a river ranks the same as one ten blocks away on a straight
road; in production the ranking distance would come from a routing-service
client.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

EARTH_RADIUS_KM = 6_371.0


class InvalidPosition(ValueError):
    """Raised for NaN / infinite / out-of-range coordinates."""


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float


class HasPosition(Protocol):
    latitude: float
    longitude: float


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    # float rounding can push ``a`` a hair above 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def validate(point: HasPosition) -> None:
    lat, lng = point.latitude, point.longitude
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidPosition(f"Non-finite coordinates: ({lat}, {lng})")
    if not -90.0 <= lat <= 90.0:
        raise InvalidPosition(f"Latitude out of range: {lat}")
    if not -180.0 <= lng <= 180.0:
        raise InvalidPosition(f"Longitude out of range: {lng}")


def distance(a: HasPosition, b: HasPosition) -> float:
    """Distance in km between two points; accepts vehicles as well."""
    validate(a)
    validate(b)
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)
