"""
Seed the database with a demo saved calculation.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listing_cashflow.calculations.cashflow import CashflowInputs, calculate_cashflow
from listing_cashflow.db.database import get_db_context, init_db
from listing_cashflow.db.models import SavedCalculation

DEMO_NAME = "Demo Duplex"


def main():
    init_db()

    with get_db_context() as db:
        existing = db.query(SavedCalculation).filter(SavedCalculation.name == DEMO_NAME).first()
        if existing:
            print(f"Calculation '{DEMO_NAME}' already exists (ID: {existing.id})")
            return

        inputs = CashflowInputs(
            purchase_price=650000,
            down_payment=65000,
            interest_rate=4.79,
            loan_term=25,
            monthly_rent=3900,
            property_taxes=340,
            insurance=110,
            property_management=8,
            maintenance_reserve=5,
            vacancy=5,
            cap_ex_reserve=5,
            hoa_fees=0,
            other_expenses=75,
        )
        results = calculate_cashflow(inputs)

        calculation = SavedCalculation(
            name=DEMO_NAME,
            address="88 Demo Crescent, Hamilton, ON",
            notes="Side-by-side duplex, both units tenanted",
            inputs=inputs.to_dict(),
            results=results.to_dict(),
        )
        db.add(calculation)
        db.flush()

        print(f"Created '{DEMO_NAME}' (ID: {calculation.id})")
        print(f"  Monthly cashflow: {results.monthly_cashflow}")
        print(f"  Cap rate: {results.cap_rate}%")


if __name__ == "__main__":
    main()
