"""Tests for tiered pricing and sponsorship quotes."""

import pytest

from changebag.services import pricing


@pytest.mark.parametrize("quantity,price", [
    (50, 10),
    (499, 10),
    (500, 9),
    (999, 9),
    (1000, 8),
    (4999, 8),
    (5000, 7),
    (6999, 7),
    (7000, 5),
    (10000, 5),
])
def test_unit_price_tiers(quantity, price):
    assert pricing.unit_price_for(quantity) == price


@pytest.mark.parametrize("raw,expected", [
    (10, 50),
    (50, 50),
    (750, 750),
    (25000, 10000),
    ("200", 200),
    ("lots", 50),
    (None, 50),
])
def test_clamp_quantity(raw, expected):
    assert pricing.clamp_quantity(raw) == expected


def test_quote_totals_and_impact():
    result = pricing.quote(1000)

    assert result["toteQuantity"] == 1000
    assert result["unitPrice"] == 8
    assert result["totalAmount"] == 8000
    assert result["impact"] == {
        "treesSaved": 200.0,
        "plasticReducedKg": 500.0,
        "carbonReducedKg": 300.0,
    }


def test_quote_clamps_before_pricing():
    result = pricing.quote(20)
    assert result["toteQuantity"] == 50
    assert result["totalAmount"] == 500
