"""
Mortgage Default Insurance (CMHC) Calculations

High-ratio mortgages (loan-to-value above 80%) carry a one-time insurance
premium charged on the loan amount. The premium is financed: it is added
to the mortgage principal rather than paid at closing.

Premium schedule:
    LTV <= 80%        no premium
    80.01% to 85%     2.80% of loan amount
    85.01% to 90%     3.10% of loan amount
    90.01% to 95%     4.00% of loan amount
    above 95%         4.50% of loan amount
"""

from dataclasses import dataclass

# LTV at or below this needs no insurance
HIGH_RATIO_THRESHOLD = 80.0

# Absorbs rounding from percentage-based down payment entry
LTV_TOLERANCE = 0.001

# (upper LTV bound inclusive, premium rate %)
PREMIUM_TIERS = (
    (85.0, 2.80),
    (90.0, 3.10),
    (95.0, 4.00),
)
MAX_PREMIUM_RATE = 4.50


@dataclass(frozen=True)
class CMHCResult:
    """Insurance premium for a single loan."""

    premium: float
    rate: float  # Premium rate as a percentage of the loan amount
    loan_to_value: float  # Percentage


def premium_rate_for_ltv(loan_to_value: float) -> float:
    """Look up the premium rate (%) for a loan-to-value percentage."""
    if loan_to_value <= HIGH_RATIO_THRESHOLD + LTV_TOLERANCE:
        return 0.0

    for upper_bound, rate in PREMIUM_TIERS:
        if loan_to_value <= upper_bound:
            return rate

    return MAX_PREMIUM_RATE


def insurance_premium(loan_amount: float, purchase_price: float) -> CMHCResult:
    """
    Calculate the mortgage insurance premium for a loan.

    Args:
        loan_amount: Amount borrowed before the premium
        purchase_price: Property purchase price

    Returns:
        CMHCResult with premium rounded to cents and LTV to 2 decimals
    """
    if purchase_price <= 0 or loan_amount <= 0:
        return CMHCResult(premium=0.0, rate=0.0, loan_to_value=0.0)

    ltv = (loan_amount / purchase_price) * 100
    rate = premium_rate_for_ltv(ltv)

    if rate == 0:
        return CMHCResult(premium=0.0, rate=0.0, loan_to_value=round(ltv, 2))

    premium = loan_amount * rate / 100

    return CMHCResult(
        premium=round(premium, 2),
        rate=rate,
        loan_to_value=round(ltv, 2),
    )


def total_mortgage_amount(loan_amount: float, purchase_price: float) -> float:
    """Loan amount plus the financed insurance premium."""
    loan_amount = max(loan_amount, 0.0)
    cmhc = insurance_premium(loan_amount, purchase_price)
    return round(loan_amount + cmhc.premium, 2)
