"""Tiered tote pricing and impact estimates for sponsorship quotes."""

MIN_QUOTE_QUANTITY = 50
MAX_QUOTE_QUANTITY = 10000

# (minimum quantity, unit price in INR), highest tier first
PRICE_TIERS = [
    (7000, 5),
    (5000, 7),
    (1000, 8),
    (500, 9),
    (0, 10),
]

TREES_PER_TOTE = 0.2
PLASTIC_KG_PER_TOTE = 0.5
CARBON_KG_PER_TOTE = 0.3


def unit_price_for(quantity: int) -> int:
    for minimum, price in PRICE_TIERS:
        if quantity >= minimum:
            return price
    return PRICE_TIERS[-1][1]


def clamp_quantity(quantity) -> int:
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        quantity = MIN_QUOTE_QUANTITY
    return max(MIN_QUOTE_QUANTITY, min(MAX_QUOTE_QUANTITY, quantity))


def quote(quantity) -> dict:
    """Price and estimated impact for *quantity* totes (clamped to 50..10000)."""
    quantity = clamp_quantity(quantity)
    unit_price = unit_price_for(quantity)
    return {
        "toteQuantity": quantity,
        "unitPrice": unit_price,
        "totalAmount": quantity * unit_price,
        "impact": {
            "treesSaved": round(quantity * TREES_PER_TOTE, 1),
            "plasticReducedKg": round(quantity * PLASTIC_KG_PER_TOTE, 1),
            "carbonReducedKg": round(quantity * CARBON_KG_PER_TOTE, 1),
        },
    }
