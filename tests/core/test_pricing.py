# tests/core/test_pricing.py

import pytest

from clustercost.core.pricing import NodePriceLookup, lookup_price


def test_known_instance_type_is_case_insensitive():
    lookup = NodePriceLookup({"M5.Large": 0.096}, default_price=0.1)

    assert lookup.price("m5.large") == 0.096
    assert lookup.price("M5.LARGE") == 0.096


def test_unknown_or_empty_instance_type_uses_default():
    lookup = NodePriceLookup({"m5.large": 0.096}, default_price=0.1)

    assert lookup.price("c5.xlarge") == 0.1
    assert lookup.price("") == 0.1
    assert lookup.price(None) == 0.1


def test_invalid_entries_are_dropped():
    lookup = NodePriceLookup({"": 1.0, "spot": -0.5, "t3.micro": 0.0104}, default_price=0.2)

    assert len(lookup) == 1
    assert lookup.price("spot") == 0.2


def test_zero_price_is_kept():
    lookup = NodePriceLookup({"free": 0.0}, default_price=0.1)

    assert lookup.price("free") == 0.0


@pytest.mark.parametrize("instance_type", ["m5.large", "", None])
def test_missing_lookup_prices_at_zero(instance_type):
    assert lookup_price(None, instance_type) == 0.0


def test_lookup_price_delegates():
    assert lookup_price(NodePriceLookup({"m5.large": 0.3}), "m5.large") == 0.3
