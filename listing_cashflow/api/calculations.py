"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results. Field names
are camelCase on the wire to match the browser extension's records.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import date

from listing_cashflow.calculations import amortization, insurance
from listing_cashflow.calculations import down_payment as down_payment_rules
from listing_cashflow.calculations.cashflow import (
    CashflowInputs,
    CashflowResult,
    calculate_cashflow,
)
from listing_cashflow.services.listing import PropertyData, build_inputs

router = APIRouter()


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CashflowInputModel(CamelModel):
    """Input for cash flow calculation."""

    # Financing
    purchase_price: float = Field(ge=0)
    down_payment: float = 0.0
    interest_rate: float = Field(default=0.0, ge=0)
    loan_term: int = Field(default=25, gt=0)

    # Income
    monthly_rent: float = 0.0

    # Monthly costs
    property_taxes: float = 0.0
    insurance: float = 0.0
    hoa_fees: float = 0.0
    other_expenses: float = 0.0

    # Percent of rent
    property_management: float = 0.0
    maintenance_reserve: float = 0.0
    vacancy: float = 0.0
    cap_ex_reserve: float = 0.0

    def to_inputs(self) -> CashflowInputs:
        return CashflowInputs(**self.model_dump())

    @classmethod
    def from_inputs(cls, inputs: CashflowInputs) -> "CashflowInputModel":
        return cls(**inputs.to_dict())


class CashflowResultModel(CamelModel):
    """Calculated cash flow and return metrics."""

    monthly_mortgage: float
    monthly_expenses: float
    monthly_income: float
    monthly_cashflow: float
    annual_cashflow: float
    cash_on_cash_return: float
    cap_rate: float
    total_cash_required: float
    cmhc_premium: float
    cmhc_rate: float
    cmhc_ltv: float
    total_mortgage_amount: float

    @classmethod
    def from_result(cls, result: CashflowResult) -> "CashflowResultModel":
        return cls(**result.to_dict())


@router.post("/cashflow", response_model=CashflowResultModel)
async def calculate_cashflow_endpoint(inputs: CashflowInputModel):
    """Calculate monthly cash flow, cash-on-cash return and cap rate."""
    result = calculate_cashflow(inputs.to_inputs())
    return CashflowResultModel.from_result(result)


class MortgagePaymentInput(CamelModel):
    """Input for mortgage payment calculation."""

    principal: float = Field(ge=0)
    annual_rate_percent: float = Field(ge=0)
    term_years: int = Field(gt=0)


class MortgagePaymentResponse(CamelModel):
    monthly_payment: float


@router.post("/mortgage-payment", response_model=MortgagePaymentResponse)
async def calculate_mortgage_payment(inputs: MortgagePaymentInput):
    """Calculate the fixed monthly payment for a loan."""
    payment = amortization.monthly_payment(
        inputs.principal, inputs.annual_rate_percent, inputs.term_years
    )
    return MortgagePaymentResponse(monthly_payment=round(payment, 2))


class CMHCInput(CamelModel):
    """Input for mortgage insurance premium calculation."""

    loan_amount: float = Field(ge=0)
    purchase_price: float = Field(ge=0)


class CMHCResponse(CamelModel):
    premium: float
    rate: float
    loan_to_value: float
    total_mortgage_amount: float


@router.post("/cmhc", response_model=CMHCResponse)
async def calculate_cmhc(inputs: CMHCInput):
    """Calculate the insurance premium and the resulting mortgage amount."""
    cmhc = insurance.insurance_premium(inputs.loan_amount, inputs.purchase_price)
    return CMHCResponse(
        premium=cmhc.premium,
        rate=cmhc.rate,
        loan_to_value=cmhc.loan_to_value,
        total_mortgage_amount=round(inputs.loan_amount + cmhc.premium, 2),
    )


class DownPaymentInput(CamelModel):
    """
    Input for down payment rules.

    Supply either an amount or a percentage to have the other filled in.
    """

    purchase_price: float = Field(ge=0)
    amount: Optional[float] = None
    percentage: Optional[float] = None


class DownPaymentResponse(CamelModel):
    minimum_down_payment: float
    minimum_percentage: float
    amount: Optional[float] = None
    percentage: Optional[float] = None
    meets_minimum: Optional[bool] = None
    shortfall: Optional[float] = None


@router.post("/down-payment", response_model=DownPaymentResponse)
async def calculate_down_payment(inputs: DownPaymentInput):
    """Minimum down payment and amount/percentage conversion."""
    price = inputs.purchase_price
    minimum = down_payment_rules.minimum_down_payment(price)

    response = DownPaymentResponse(
        minimum_down_payment=round(minimum, 2),
        minimum_percentage=round(down_payment_rules.percentage_from_amount(minimum, price), 2),
    )

    amount = inputs.amount
    if amount is None and inputs.percentage is not None:
        amount = down_payment_rules.amount_from_percentage(inputs.percentage, price)

    if amount is not None:
        shortfall = down_payment_rules.down_payment_shortfall(amount, price)
        response.amount = round(amount, 2)
        response.percentage = round(down_payment_rules.percentage_from_amount(amount, price), 2)
        response.meets_minimum = shortfall == 0
        response.shortfall = round(shortfall, 2)

    return response


class AmortizationInput(CamelModel):
    """Input for amortization calculation."""

    principal: float = Field(ge=0)
    annual_rate_percent: float = Field(ge=0)
    term_years: int = Field(gt=0)
    start_date: Optional[date] = None


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate_percent=inputs.annual_rate_percent,
        term_years=inputs.term_years,
        start_date=inputs.start_date,
    )

    return {
        "schedule": schedule,
        "totalInterest": amortization.total_interest(schedule),
        "totalPrincipal": round(sum(row["principal"] for row in schedule), 2),
    }


class ListingCalculationInput(CamelModel):
    """Listing data plus an optional down payment override."""

    listing: PropertyData
    down_payment: Optional[float] = None


class ListingCalculationResponse(CamelModel):
    inputs: CashflowInputModel
    results: CashflowResultModel
    warnings: List[str] = []


@router.post("/from-listing", response_model=ListingCalculationResponse)
async def calculate_from_listing(payload: ListingCalculationInput):
    """Fill inputs from a listing, then calculate cash flow."""
    inputs = build_inputs(payload.listing, down_payment=payload.down_payment)
    result = calculate_cashflow(inputs)

    warnings = []
    shortfall = down_payment_rules.down_payment_shortfall(
        inputs.down_payment, inputs.purchase_price
    )
    if shortfall > 0:
        warnings.append(
            f"Down payment is {shortfall:,.2f} below the minimum for this price"
        )
    if inputs.monthly_rent == 0:
        warnings.append("No rent estimate for this listing")

    return ListingCalculationResponse(
        inputs=CashflowInputModel.from_inputs(inputs),
        results=CashflowResultModel.from_result(result),
        warnings=warnings,
    )
