"""
Financial Calculation Engine

Pure calculation modules for rental property cash flow analysis.
No module here performs I/O or holds state.
"""

from listing_cashflow.calculations import (
    amortization,
    insurance,
    down_payment,
    cashflow,
    formatting,
)
from listing_cashflow.calculations.amortization import monthly_payment
from listing_cashflow.calculations.insurance import CMHCResult, insurance_premium
from listing_cashflow.calculations.down_payment import (
    minimum_down_payment,
    percentage_from_amount,
    amount_from_percentage,
)
from listing_cashflow.calculations.cashflow import (
    CashflowInputs,
    CashflowResult,
    calculate_cashflow,
)

__all__ = [
    "amortization",
    "insurance",
    "down_payment",
    "cashflow",
    "formatting",
    "monthly_payment",
    "CMHCResult",
    "insurance_premium",
    "minimum_down_payment",
    "percentage_from_amount",
    "amount_from_percentage",
    "CashflowInputs",
    "CashflowResult",
    "calculate_cashflow",
]
