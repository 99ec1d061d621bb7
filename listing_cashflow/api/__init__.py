"""
API routes for cash flow calculations.
"""

from fastapi import APIRouter

from listing_cashflow.api import calculations, saved_calculations

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(
    saved_calculations.router, prefix="/calculations", tags=["saved calculations"]
)
