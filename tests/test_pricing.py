"""Unit tests for ride pricing."""

import pytest

from ridehail.domain.pricing import PricingStrategy, StandardPricing, quote
from tests.conftest import make_vehicle


class FlatPricing(PricingStrategy):
    def calculate(self, distance_km, start_price, price_per_km):
        return start_price


class TestPricingStrategies:
    def test_standard_pricing(self):
        strategy = StandardPricing()
        assert strategy.calculate(10.0, 5.0, 2.0) == 25.0  # 10*2 + 5

    def test_zero_distance_costs_start_price(self):
        assert StandardPricing().calculate(0.0, 3.5, 2.0) == 3.5

    def test_standard_pricing_is_not_rounded(self):
        assert StandardPricing().calculate(3.0, 1.0, 1.1111) == pytest.approx(4.3333)


class TestQuote:
    def test_uses_vehicle_tariff(self):
        vehicle = make_vehicle("v1", price_per_km=2.0, start_price=5.0)
        assert quote(vehicle, 10.0) == 25.0

    def test_default_strategy_is_standard(self):
        vehicle = make_vehicle("v1", price_per_km=1.0 / 3, start_price=0.0)
        assert quote(vehicle, 1.0) == pytest.approx(1.0 / 3)

    def test_explicit_strategy(self):
        vehicle = make_vehicle("v1", price_per_km=2.0, start_price=4.0)
        assert quote(vehicle, 10.0, FlatPricing()) == 4.0
