"""
In-process fleet cache.

The whole fleet is held in memory keyed by vehicle ``uuid``.  There is no
eviction and no expiry: once loaded, the cache is the read path for the
fleet until it is cleared or the process restarts.

"Never loaded" and "loaded with zero vehicles" are different states.  The
registry only goes to storage for the full fleet in the first one, so an
empty fleet is fetched once, not on every request.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ridehail.domain.entities import Vehicle

logger = logging.getLogger(__name__)


class VehicleCache:
    def __init__(self) -> None:
        # None until the first add_all
        self._vehicles: Optional[dict[str, Vehicle]] = None

    def is_empty(self) -> bool:
        """True iff the cache has never been populated."""
        return self._vehicles is None

    def add_all(self, vehicles: Iterable[Vehicle]) -> None:
        if self._vehicles is None:
            self._vehicles = {}
        for vehicle in vehicles:
            self._vehicles[vehicle.uuid] = vehicle
        logger.debug("Vehicle cache holds %d vehicles", len(self._vehicles))

    def get_all(self) -> list[Vehicle]:
        if self._vehicles is None:
            return []
        return list(self._vehicles.values())

    def get(self, uuid: str) -> Optional[Vehicle]:
        if self._vehicles is None:
            return None
        return self._vehicles.get(uuid)

    def set(self, vehicle: Vehicle) -> bool:
        """
        Upsert one vehicle.  Returns False (and stores nothing) if the cache
        was never loaded: a single record must not pass for the fleet.
        """
        if self._vehicles is None:
            return False
        self._vehicles[vehicle.uuid] = vehicle
        return True

    def discard(self, uuid: str) -> None:
        if self._vehicles is not None:
            self._vehicles.pop(uuid, None)

    def clear(self) -> None:
        """Back to the never-loaded state."""
        self._vehicles = None

    def __len__(self) -> int:
        return len(self._vehicles) if self._vehicles is not None else 0
