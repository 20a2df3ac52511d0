"""
Vehicle Registry
================

Mediates between the in-process ``VehicleCache`` and the ``vehicles``
table.

Read policy
-----------
* ``get_all_vehicles`` fills the cache from storage once, then serves
  every later call from memory.  Concurrent first calls wait on one
  ``asyncio.Lock`` and re-check, so the fleet is fetched exactly once.
* ``get_vehicle`` is cache-first once the cache is loaded; before that it
  is a direct point lookup and does **not** trigger a full-fleet load.

Write policy (book / finish_ride)
---------------------------------
1. Take the per-vehicle ``asyncio.Lock`` (serialises same-vehicle writes
   inside this process).
2. Write the new snapshot to the cache.
3. Write it to storage as a compare-and-swap on the ``booked`` flag.
4. If step 3 raises, is cancelled or the swap does not apply, restore
   the previous cache entry before the error reaches the caller.

Fleet loads (first fill and ``reload``) wait until no write is between
steps 2 and 4, and writes wait while a load is running, so a load never
reads a row whose cache entry is about to change.

Writes made to storage behind the registry's back are only seen after
``reload()`` or a process restart.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import AsyncIterator, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridehail.domain.distance import Position, validate
from ridehail.domain.entities import (
    BookingConflict,
    StorageFailure,
    Vehicle,
    VehicleNotFound,
)
from ridehail.infrastructure.repositories import VehicleRepository, vehicle_patch
from ridehail.infrastructure.vehicle_cache import VehicleCache

logger = logging.getLogger(__name__)


class VehicleRegistry:
    def __init__(
        self,
        cache: VehicleCache,
        session_factory: async_sessionmaker[AsyncSession],
        repository_cls: Type[VehicleRepository] = VehicleRepository,
    ):
        self.cache = cache
        self._session_factory = session_factory
        self._repository_cls = repository_cls
        self._load_lock = asyncio.Lock()
        self._vehicle_locks: defaultdict[str, asyncio.Lock] = defaultdict(
            asyncio.Lock
        )
        self._gate = asyncio.Condition()
        self._in_flight = 0
        self._loading = False

    # ── Reads ─────────────────────────────────────────────────────────

    async def get_all_vehicles(self) -> list[Vehicle]:
        if not self.cache.is_empty():
            return self.cache.get_all()

        async with self._load_lock:
            # another task may have loaded while we waited
            if self.cache.is_empty():
                async with self._exclusive_load():
                    vehicles = await self._fetch_fleet()
                    self.cache.add_all(vehicles)
                logger.info("Vehicle cache loaded with %d vehicles", len(vehicles))
        return self.cache.get_all()

    async def get_vehicle(self, uuid: str) -> Optional[Vehicle]:
        if not self.cache.is_empty():
            return self.cache.get(uuid)
        try:
            async with self._session_factory() as session:
                return await self._repository_cls(session).find_one(uuid)
        except SQLAlchemyError as exc:
            logger.exception("Vehicle lookup failed for %s", uuid)
            raise StorageFailure(f"Could not load vehicle {uuid}") from exc

    async def reload(self) -> int:
        """Drop the cache and load the fleet again.  Returns the fleet size."""
        async with self._load_lock:
            async with self._exclusive_load():
                vehicles = await self._fetch_fleet()
                self.cache.clear()
                self.cache.add_all(vehicles)
        logger.info("Vehicle cache reloaded with %d vehicles", len(vehicles))
        return len(vehicles)

    def close(self) -> None:
        self.cache.clear()
        self._vehicle_locks.clear()

    # ── Writes ────────────────────────────────────────────────────────

    async def book(self, vehicle: Vehicle) -> Vehicle:
        """Mark *vehicle* booked in cache and storage.  Returns the new snapshot."""
        async with self._vehicle_locks[vehicle.uuid], self._writing():
            current = self.cache.get(vehicle.uuid) or vehicle
            if current.booked:
                raise BookingConflict(f"Vehicle {vehicle.uuid} is already booked")

            booked = replace(current, booked=True)
            await self._write_through(current, booked, expected_booked=False)
            logger.info("Vehicle %s booked", vehicle.uuid)
            return booked

    async def finish_ride(self, vehicle: Vehicle, new_position: Position) -> Vehicle:
        """Park *vehicle* at *new_position* and make it bookable again."""
        validate(new_position)
        async with self._vehicle_locks[vehicle.uuid], self._writing():
            current = self.cache.get(vehicle.uuid) or vehicle
            if not current.booked:
                raise BookingConflict(f"Vehicle {vehicle.uuid} is not on a ride")

            freed = replace(
                current,
                latitude=new_position.latitude,
                longitude=new_position.longitude,
                booked=False,
            )
            await self._write_through(current, freed, expected_booked=True)
            logger.info(
                "Vehicle %s finished ride at (%f, %f)",
                vehicle.uuid,
                new_position.latitude,
                new_position.longitude,
            )
            return freed

    # ── Internals ─────────────────────────────────────────────────────

    @asynccontextmanager
    async def _writing(self) -> AsyncIterator[None]:
        async with self._gate:
            await self._gate.wait_for(lambda: not self._loading)
            self._in_flight += 1
        try:
            yield
        finally:
            async with self._gate:
                self._in_flight -= 1
                self._gate.notify_all()

    @asynccontextmanager
    async def _exclusive_load(self) -> AsyncIterator[None]:
        async with self._gate:
            self._loading = True
            try:
                await self._gate.wait_for(lambda: self._in_flight == 0)
            except BaseException:
                self._loading = False
                self._gate.notify_all()
                raise
        try:
            yield
        finally:
            async with self._gate:
                self._loading = False
                self._gate.notify_all()

    async def _fetch_fleet(self) -> list[Vehicle]:
        try:
            async with self._session_factory() as session:
                return await self._repository_cls(session).find_all()
        except SQLAlchemyError as exc:
            logger.exception("Fleet load failed")
            raise StorageFailure("Could not load the fleet") from exc

    async def _write_through(
        self, previous: Vehicle, updated: Vehicle, expected_booked: bool
    ) -> None:
        was_cached = self.cache.get(previous.uuid) is not None
        self.cache.set(updated)

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    repo = self._repository_cls(session)
                    applied = await repo.update(
                        updated.uuid,
                        vehicle_patch(updated),
                        expected_booked=expected_booked,
                    )
                    stored = None if applied else await repo.find_one(updated.uuid)
        except SQLAlchemyError as exc:
            self._rollback(previous, was_cached)
            logger.exception("Storage write failed for vehicle %s", updated.uuid)
            raise StorageFailure(f"Could not write vehicle {updated.uuid}") from exc
        except BaseException:
            # cancelled mid-write; the transaction is rolled back with the session
            self._rollback(previous, was_cached)
            raise

        if applied:
            return

        self._rollback(previous, was_cached)
        if stored is None:
            raise VehicleNotFound(f"Vehicle {updated.uuid} does not exist")

        # storage disagrees with the cache; storage wins
        self.cache.set(stored)
        logger.warning(
            "Vehicle %s booked=%s in storage, expected %s",
            updated.uuid,
            stored.booked,
            expected_booked,
        )
        raise BookingConflict(
            f"Vehicle {updated.uuid} is {'already' if stored.booked else 'not'} booked"
        )

    def _rollback(self, previous: Vehicle, was_cached: bool) -> None:
        if was_cached:
            self.cache.set(previous)
        else:
            self.cache.discard(previous.uuid)
        logger.warning("Rolled back cache entry for vehicle %s", previous.uuid)
