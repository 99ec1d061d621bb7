"""
Database configuration and models.
"""

from listing_cashflow.db.database import engine, SessionLocal, get_db
from listing_cashflow.db.models import Base, SavedCalculation

__all__ = ["engine", "SessionLocal", "get_db", "Base", "SavedCalculation"]
