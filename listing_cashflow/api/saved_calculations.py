"""
Saved calculation API endpoints.

Stores {inputs, results} pairs produced by the calculation endpoints and
exports them as a spreadsheet.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import Response
from pydantic import Field, field_validator
from typing import Optional, List
from sqlalchemy.orm import Session

from listing_cashflow.api.calculations import (
    CamelModel,
    CashflowInputModel,
    CashflowResultModel,
)
from listing_cashflow.calculations.cashflow import calculate_cashflow
from listing_cashflow.db.database import get_db
from listing_cashflow.db.models import SavedCalculation
from listing_cashflow.services.export import export_to_xlsx, export_filename

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class SavedCalculationCreate(CamelModel):
    """Schema for saving a calculation."""

    name: str
    address: Optional[str] = None
    listing_url: Optional[str] = None
    notes: Optional[str] = None
    inputs: CashflowInputModel
    # Recomputed from inputs when omitted
    results: Optional[CashflowResultModel] = None


class SavedCalculationUpdate(CamelModel):
    """Schema for updating a saved calculation."""

    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    listing_url: Optional[str] = None
    notes: Optional[str] = None
    inputs: Optional[CashflowInputModel] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        # Column is NOT NULL; omit the field to leave it unchanged
        if value is None:
            raise ValueError("name cannot be null")
        return value


class SavedCalculationResponse(CamelModel):
    """Schema for saved calculation response."""

    id: str
    name: str
    address: Optional[str]
    listing_url: Optional[str]
    notes: Optional[str]
    inputs: CashflowInputModel
    results: CashflowResultModel
    saved_at: Optional[str] = None
    updated_at: Optional[str] = None


class SavedCalculationListResponse(CamelModel):
    """Response for listing saved calculations."""

    calculations: List[SavedCalculationResponse]
    total: int


def calculation_to_response(calc: SavedCalculation) -> SavedCalculationResponse:
    """Convert SavedCalculation model to response schema."""
    return SavedCalculationResponse(
        id=calc.id,
        name=calc.name,
        address=calc.address,
        listing_url=calc.listing_url,
        notes=calc.notes,
        inputs=CashflowInputModel(**calc.inputs),
        results=CashflowResultModel(**calc.results),
        saved_at=calc.created_at.isoformat() if calc.created_at else None,
        updated_at=calc.updated_at.isoformat() if calc.updated_at else None,
    )


def get_calculation_or_404(db: Session, calculation_id: str) -> SavedCalculation:
    calc = (
        db.query(SavedCalculation)
        .filter(
            SavedCalculation.id == calculation_id,
            SavedCalculation.is_deleted == False,
        )
        .first()
    )

    if not calc:
        raise HTTPException(status_code=404, detail="Calculation not found")

    return calc


def active_calculations(db: Session):
    """Saved calculations that are not deleted, newest first."""
    return (
        db.query(SavedCalculation)
        .filter(SavedCalculation.is_deleted == False)
        .order_by(SavedCalculation.created_at.desc())
    )


@router.get("/", response_model=SavedCalculationListResponse)
async def list_calculations(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    """List saved calculations, newest first."""
    query = active_calculations(db)

    total = query.count()
    calculations = query.offset(skip).limit(limit).all()

    return SavedCalculationListResponse(
        calculations=[calculation_to_response(c) for c in calculations],
        total=total,
    )


@router.post("/", response_model=SavedCalculationResponse, status_code=201)
async def save_calculation(
    calculation_data: SavedCalculationCreate,
    db: Session = Depends(get_db),
):
    """Save a calculation."""
    results = calculation_data.results
    if results is None:
        results = CashflowResultModel.from_result(
            calculate_cashflow(calculation_data.inputs.to_inputs())
        )

    db_calculation = SavedCalculation(
        name=calculation_data.name,
        address=calculation_data.address,
        listing_url=calculation_data.listing_url,
        notes=calculation_data.notes,
        inputs=calculation_data.inputs.model_dump(),
        results=results.model_dump(),
    )

    db.add(db_calculation)
    db.commit()
    db.refresh(db_calculation)

    logger.info(f"Calculation saved: {db_calculation.id}")
    return calculation_to_response(db_calculation)


@router.get("/export")
async def export_calculations(db: Session = Depends(get_db)):
    """Download all saved calculations as an Excel workbook."""
    calculations = active_calculations(db).all()

    try:
        content = export_to_xlsx(calculations)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/{calculation_id}", response_model=SavedCalculationResponse)
async def get_calculation(
    calculation_id: str,
    db: Session = Depends(get_db),
):
    """Get a saved calculation by ID."""
    return calculation_to_response(get_calculation_or_404(db, calculation_id))


@router.put("/{calculation_id}", response_model=SavedCalculationResponse)
async def update_calculation(
    calculation_id: str,
    calculation_data: SavedCalculationUpdate,
    db: Session = Depends(get_db),
):
    """Update a saved calculation. New inputs recompute the results."""
    db_calculation = get_calculation_or_404(db, calculation_id)

    # Update only provided fields
    update_data = calculation_data.model_dump(exclude_unset=True, exclude={"inputs"})
    for field, value in update_data.items():
        setattr(db_calculation, field, value)

    if calculation_data.inputs is not None:
        result = calculate_cashflow(calculation_data.inputs.to_inputs())
        db_calculation.inputs = calculation_data.inputs.model_dump()
        db_calculation.results = result.to_dict()

    db.commit()
    db.refresh(db_calculation)

    logger.info(f"Calculation updated: {calculation_id}")
    return calculation_to_response(db_calculation)


@router.delete("/{calculation_id}")
async def delete_calculation(
    calculation_id: str,
    db: Session = Depends(get_db),
):
    """Soft delete a saved calculation."""
    db_calculation = get_calculation_or_404(db, calculation_id)

    db_calculation.is_deleted = True
    db.commit()

    logger.info(f"Calculation deleted: {calculation_id}")
    return {"deleted": True, "id": calculation_id}
