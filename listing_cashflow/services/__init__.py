"""
Application services module.
"""

from listing_cashflow.services.export import export_to_xlsx, export_filename
from listing_cashflow.services.listing import PropertyData, build_inputs

__all__ = ["export_to_xlsx", "export_filename", "PropertyData", "build_inputs"]
