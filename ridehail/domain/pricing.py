"""
Ride Pricing  (Strategy Pattern)
================================

Formula
-------
Price = Start_Price + Distance_To_Destination x Price_Per_KM

Both tariffs are per vehicle: each owner sets their own flat start price
and per-km rate.  The distance is rider -> destination, not driver ->
rider; the approach leg is not billed.

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .entities import Vehicle


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(
        self, distance_km: float, start_price: float, price_per_km: float
    ) -> float: ...


class StandardPricing(PricingStrategy):
    def calculate(
        self, distance_km: float, start_price: float, price_per_km: float
    ) -> float:
        return distance_km * price_per_km + start_price


# ── Facade ────────────────────────────────────────────────────────────


def quote(
    vehicle: Vehicle,
    distance_to_destination: float,
    strategy: PricingStrategy | None = None,
) -> float:
    """Total price of a ride of *distance_to_destination* km in *vehicle*."""
    strategy = strategy or StandardPricing()
    return strategy.calculate(
        distance_to_destination, vehicle.start_price, vehicle.price_per_km
    )
