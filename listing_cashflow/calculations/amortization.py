"""
Mortgage Amortization Calculations

Fixed-rate monthly payment and amortization schedule for a residential
mortgage. Rates are nominal annual percentages (5.5 means 5.5%) and terms
are in whole years, matching the inputs a listing analysis works with.
"""

from typing import List, Dict, Optional
from datetime import date
from dateutil.relativedelta import relativedelta


def monthly_payment(
    principal: float, annual_rate_percent: float, term_years: int
) -> float:
    """
    Calculate the fixed monthly mortgage payment (principal + interest).

    Args:
        principal: Amount financed
        annual_rate_percent: Nominal annual rate as a percentage (e.g., 5.5)
        term_years: Amortization period in years

    Returns:
        Monthly payment at full precision (not rounded)
    """
    if principal <= 0:
        return 0.0

    num_payments = term_years * 12

    if annual_rate_percent == 0:
        # No interest: straight-line repayment
        return principal / num_payments

    monthly_rate = annual_rate_percent / 100 / 12
    growth = (1 + monthly_rate) ** num_payments

    return principal * (monthly_rate * growth) / (growth - 1)


def remaining_balance(
    principal: float,
    annual_rate_percent: float,
    term_years: int,
    payments_completed: int,
) -> float:
    """Calculate remaining loan balance after N monthly payments."""
    payment = monthly_payment(principal, annual_rate_percent, term_years)

    if annual_rate_percent == 0:
        return max(0.0, principal - payment * payments_completed)

    monthly_rate = annual_rate_percent / 100 / 12
    balance = principal * ((1 + monthly_rate) ** payments_completed) - payment * (
        ((1 + monthly_rate) ** payments_completed - 1) / monthly_rate
    )

    return max(0.0, balance)


def generate_amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    term_years: int,
    start_date: Optional[date] = None,
) -> List[Dict]:
    """
    Generate a full amortization schedule.

    Args:
        principal: Amount financed (including any financed insurance premium)
        annual_rate_percent: Nominal annual rate as a percentage
        term_years: Amortization period in years
        start_date: Date of first payment (defaults to today)

    Returns:
        List of amortization rows, one per month
    """
    schedule = []
    if principal <= 0:
        return schedule

    balance = principal
    monthly_rate = annual_rate_percent / 100 / 12
    payment = monthly_payment(principal, annual_rate_percent, term_years)
    total_months = term_years * 12

    if start_date is None:
        start_date = date.today()

    for period in range(1, total_months + 1):
        period_date = start_date + relativedelta(months=period - 1)

        interest = balance * monthly_rate

        if period == total_months:
            # Final payment clears any rounding residue
            principal_pmt = balance
        else:
            principal_pmt = min(payment - interest, balance)

        ending_balance = balance - principal_pmt

        schedule.append(
            {
                "period": period,
                "date": period_date.isoformat(),
                "beginning_balance": round(balance, 2),
                "payment": round(principal_pmt + interest, 2),
                "interest": round(interest, 2),
                "principal": round(principal_pmt, 2),
                "ending_balance": round(max(0, ending_balance), 2),
            }
        )

        balance = max(0.0, ending_balance)

        if balance == 0:
            break

    return schedule


def total_interest(schedule: List[Dict]) -> float:
    """Calculate total interest paid over the schedule."""
    return round(sum(row["interest"] for row in schedule), 2)
