"""
Down Payment Rules

Minimum down payment for an insured purchase, plus conversions between a
down payment amount and its percentage of the purchase price. These are
advisory: the cashflow calculation accepts any down payment.
"""

TIER_ONE_LIMIT = 500_000.0
TIER_TWO_LIMIT = 1_000_000.0

TIER_ONE_RATE = 0.05
TIER_TWO_RATE = 0.10
UNINSURABLE_RATE = 0.20


def minimum_down_payment(purchase_price: float) -> float:
    """
    Calculate the minimum down payment for a purchase price.

    Under $500,000: 5%
    $500,000 to $999,999: 5% of the first $500,000 plus 10% of the remainder
    $1,000,000 and up: 20%
    """
    if purchase_price <= 0:
        return 0.0

    if purchase_price < TIER_ONE_LIMIT:
        return purchase_price * TIER_ONE_RATE

    if purchase_price < TIER_TWO_LIMIT:
        return (
            TIER_ONE_LIMIT * TIER_ONE_RATE
            + (purchase_price - TIER_ONE_LIMIT) * TIER_TWO_RATE
        )

    return purchase_price * UNINSURABLE_RATE


def percentage_from_amount(amount: float, purchase_price: float) -> float:
    """Down payment amount as a percentage of purchase price."""
    if purchase_price <= 0:
        return 0.0
    return amount / purchase_price * 100


def amount_from_percentage(percentage: float, purchase_price: float) -> float:
    """Down payment amount for a percentage of purchase price."""
    return purchase_price * percentage / 100


def down_payment_shortfall(amount: float, purchase_price: float) -> float:
    """How far a down payment falls below the minimum (0 if it meets it)."""
    return max(0.0, minimum_down_payment(purchase_price) - amount)
