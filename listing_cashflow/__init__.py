"""
Listing Cashflow: rental property cash flow analysis.
"""
