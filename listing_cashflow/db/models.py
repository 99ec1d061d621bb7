"""
SQLAlchemy ORM models for saved calculations.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    JSON,
    Text,
)
from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


class AuditMixin:
    """Mixin for audit fields on all models."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
    is_deleted = Column(Boolean, default=False, nullable=False)


class SavedCalculation(AuditMixin, Base):
    """A cash flow calculation saved from a listing, with its inputs and results."""

    __tablename__ = "saved_calculations"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    listing_url = Column(String(2048), nullable=True)
    notes = Column(Text, nullable=True)

    # Stored verbatim as snake_case dicts of CashflowInputs / CashflowResult
    inputs = Column(JSON, nullable=False)
    results = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<SavedCalculation {self.name}>"
