"""
Cash Flow Calculations

Monthly and annual cash flow for a single rental property bought with a
mortgage. Recurring cost inputs are monthly figures; percentage inputs are
percentages of gross monthly rent.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict

from listing_cashflow.calculations.amortization import monthly_payment
from listing_cashflow.calculations.insurance import insurance_premium

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashflowInputs:
    """Inputs for a single cash flow calculation."""

    purchase_price: float
    down_payment: float
    interest_rate: float  # Annual, percentage (5.5 = 5.5%)
    loan_term: int  # Years
    monthly_rent: float
    property_taxes: float = 0.0  # Monthly
    insurance: float = 0.0  # Monthly
    property_management: float = 0.0  # % of rent
    maintenance_reserve: float = 0.0  # % of rent
    vacancy: float = 0.0  # % of rent
    cap_ex_reserve: float = 0.0  # % of rent
    hoa_fees: float = 0.0  # Monthly
    other_expenses: float = 0.0  # Monthly

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class CashflowResult:
    """Calculated cash flow and return metrics, rounded to cents."""

    monthly_mortgage: float
    monthly_expenses: float
    monthly_income: float
    monthly_cashflow: float
    annual_cashflow: float
    cash_on_cash_return: float  # Percentage
    cap_rate: float  # Percentage
    total_cash_required: float
    cmhc_premium: float
    cmhc_rate: float
    cmhc_ltv: float
    total_mortgage_amount: float

    def to_dict(self) -> Dict:
        return asdict(self)


def calculate_percent_of_rent(monthly_rent: float, percent: float) -> float:
    """Monthly amount for an expense expressed as a percentage of rent."""
    return monthly_rent * percent / 100


def calculate_expense_breakdown(
    inputs: CashflowInputs, monthly_mortgage: float
) -> Dict[str, float]:
    """
    Itemize monthly expenses.

    Percentage lines are taken against gross rent, not post-vacancy rent.
    Values are unrounded.
    """
    rent = inputs.monthly_rent
    return {
        "mortgage": monthly_mortgage,
        "property_taxes": inputs.property_taxes,
        "insurance": inputs.insurance,
        "property_management": calculate_percent_of_rent(rent, inputs.property_management),
        "maintenance_reserve": calculate_percent_of_rent(rent, inputs.maintenance_reserve),
        "vacancy": calculate_percent_of_rent(rent, inputs.vacancy),
        "cap_ex_reserve": calculate_percent_of_rent(rent, inputs.cap_ex_reserve),
        "hoa_fees": inputs.hoa_fees,
        "other_expenses": inputs.other_expenses,
    }


def calculate_noi(inputs: CashflowInputs) -> float:
    """
    Calculate annual Net Operating Income.

    Excludes debt service. Vacancy comes off gross income rather than being
    counted as an operating expense.
    """
    expenses = calculate_expense_breakdown(inputs, 0.0)

    annual_operating_expenses = (
        inputs.property_taxes + inputs.insurance + inputs.hoa_fees + inputs.other_expenses
    ) * 12 + (
        expenses["property_management"]
        + expenses["maintenance_reserve"]
        + expenses["cap_ex_reserve"]
    ) * 12

    gross_annual_income = inputs.monthly_rent * 12
    effective_annual_income = gross_annual_income - expenses["vacancy"] * 12

    return effective_annual_income - annual_operating_expenses


def calculate_cashflow(inputs: CashflowInputs) -> CashflowResult:
    """
    Calculate monthly cash flow and returns for a rental property.

    Monthly Cash Flow = Monthly Rent - Monthly Expenses, where expenses
    include the mortgage payment on the loan plus any financed insurance
    premium.
    """
    # Loan amount, floored so an oversized down payment carries no financing cost
    loan_amount = max(inputs.purchase_price - inputs.down_payment, 0.0)

    # Premium must be added before amortizing
    cmhc = insurance_premium(loan_amount, inputs.purchase_price)
    total_mortgage_amount = loan_amount + cmhc.premium

    monthly_mortgage = (
        monthly_payment(total_mortgage_amount, inputs.interest_rate, inputs.loan_term)
        if total_mortgage_amount > 0
        else 0.0
    )

    logger.debug(
        f"loan_amount={loan_amount}, cmhc_premium={cmhc.premium}, "
        f"total_mortgage_amount={total_mortgage_amount}, "
        f"monthly_mortgage={monthly_mortgage}"
    )

    expenses = calculate_expense_breakdown(inputs, monthly_mortgage)
    monthly_expenses = sum(expenses.values())

    # Vacancy is already an expense line; income stays at gross rent
    monthly_income = inputs.monthly_rent

    monthly_cashflow = monthly_income - monthly_expenses
    annual_cashflow = monthly_cashflow * 12

    total_cash_required = inputs.down_payment
    cash_on_cash_return = (
        annual_cashflow / total_cash_required * 100 if total_cash_required > 0 else 0.0
    )

    noi = calculate_noi(inputs)
    cap_rate = noi / inputs.purchase_price * 100 if inputs.purchase_price > 0 else 0.0

    return CashflowResult(
        monthly_mortgage=round(monthly_mortgage, 2),
        monthly_expenses=round(monthly_expenses, 2),
        monthly_income=round(monthly_income, 2),
        monthly_cashflow=round(monthly_cashflow, 2),
        annual_cashflow=round(annual_cashflow, 2),
        cash_on_cash_return=round(cash_on_cash_return, 2),
        cap_rate=round(cap_rate, 2),
        total_cash_required=round(total_cash_required, 2),
        cmhc_premium=cmhc.premium,
        cmhc_rate=cmhc.rate,
        cmhc_ltv=cmhc.loan_to_value,
        total_mortgage_amount=round(total_mortgage_amount, 2),
    )
