"""
Listing to calculation input mapping.

Listing data arrives best-effort from the scraping/extraction side: any
financial estimate may be missing. Missing amounts become zero and missing
rates/percentages fall back to configured defaults.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from listing_cashflow.calculations.cashflow import CashflowInputs
from listing_cashflow.calculations.down_payment import minimum_down_payment
from listing_cashflow.config import Settings, get_settings


class PropertyData(BaseModel):
    """Property details extracted from a listing page."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    price: float = Field(ge=0)
    address: str = ""
    property_type: str = ""
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    sqft: Optional[float] = None
    year_built: Optional[int] = None
    listing_id: Optional[str] = None
    url: Optional[str] = None

    # Monthly estimates, when the listing or extractor supplied them
    monthly_rent: Optional[float] = None
    property_tax: Optional[float] = None
    insurance: Optional[float] = None
    hoa_fees: Optional[float] = None
    interest_rate: Optional[float] = None


def build_inputs(
    property_data: PropertyData,
    settings: Optional[Settings] = None,
    down_payment: Optional[float] = None,
) -> CashflowInputs:
    """
    Build calculation inputs for a listing.

    Down payment defaults to the minimum for the listing price.
    """
    settings = settings or get_settings()

    if down_payment is None:
        down_payment = minimum_down_payment(property_data.price)

    interest_rate = property_data.interest_rate
    if interest_rate is None:
        interest_rate = settings.default_interest_rate

    return CashflowInputs(
        purchase_price=property_data.price,
        down_payment=down_payment,
        interest_rate=interest_rate,
        loan_term=settings.default_loan_term,
        monthly_rent=property_data.monthly_rent or 0.0,
        property_taxes=property_data.property_tax or 0.0,
        insurance=property_data.insurance or 0.0,
        property_management=settings.default_property_management,
        maintenance_reserve=settings.default_maintenance_reserve,
        vacancy=settings.default_vacancy,
        cap_ex_reserve=settings.default_cap_ex_reserve,
        hoa_fees=property_data.hoa_fees or 0.0,
        other_expenses=0.0,
    )
