"""
Spreadsheet export for saved calculations using openpyxl.

Produces one summary sheet followed by one report sheet per calculation.
"""

import logging
import re
from datetime import datetime
from io import BytesIO
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from listing_cashflow.calculations.cashflow import (
    CashflowInputs,
    calculate_expense_breakdown,
)
from listing_cashflow.calculations.formatting import format_currency, format_percentage
from listing_cashflow.config import get_settings

logger = logging.getLogger(__name__)

MAX_SHEET_NAME = 31
INVALID_SHEET_CHARS = re.compile(r"[/\\?*\[\]:]")

SUMMARY_HEADERS = [
    "Property Name",
    "Address",
    "Monthly Cashflow",
    "Cap Rate",
    "Cash-on-Cash Return",
]
SUMMARY_WIDTHS = [25, 40, 18, 12, 20]
REPORT_WIDTHS = [28, 22, 16]

SECTION_FONT = Font(bold=True)

SECTION_HEADINGS = {
    "PROPERTY ANALYSIS REPORT",
    "Property Information",
    "INVESTMENT INPUTS",
    "INCOME",
    "MONTHLY ANALYSIS",
    "ANNUAL ANALYSIS",
    "EXPENSE BREAKDOWN (Monthly)",
}


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%b %d, %Y %H:%M")


def safe_sheet_name(name: str, existing: Iterable[str]) -> str:
    """
    Build a valid, unique worksheet name.

    Strips characters Excel rejects, truncates long names with an ellipsis
    and appends _N until the name is unused.
    """
    cleaned = INVALID_SHEET_CHARS.sub("", name).strip() or "Property"
    sheet_name = cleaned[:28]
    if len(sheet_name) < len(cleaned):
        sheet_name += "..."

    taken = set(existing)
    final_name = sheet_name
    counter = 1
    while final_name in taken:
        final_name = f"{sheet_name[:25]}_{counter}"
        counter += 1

    return final_name[:MAX_SHEET_NAME]


def _set_widths(sheet, widths: List[int]) -> None:
    for index, width in enumerate(widths, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width


def _write_summary(sheet, calculations, currency_code: str) -> None:
    sheet.append(["Property Analysis Summary"])
    sheet.append(["Generated:", format_timestamp(datetime.now())])
    sheet.append(["Total Properties:", len(calculations)])
    sheet.append([])
    sheet.append(SUMMARY_HEADERS)

    for cell in sheet[sheet.max_row]:
        cell.font = SECTION_FONT
    sheet["A1"].font = SECTION_FONT

    for calc in calculations:
        results = calc.results
        sheet.append(
            [
                calc.name,
                calc.address or "",
                format_currency(results["monthly_cashflow"], currency_code),
                format_percentage(results["cap_rate"]),
                format_percentage(results["cash_on_cash_return"]),
            ]
        )

    _set_widths(sheet, SUMMARY_WIDTHS)


def _report_rows(calc, currency_code: str) -> List[list]:
    """Rows for a single calculation's report sheet."""
    inputs = CashflowInputs(**calc.inputs)
    results = calc.results

    def money(value: float) -> str:
        return format_currency(value, currency_code)

    expenses = calculate_expense_breakdown(inputs, results["monthly_mortgage"])
    operating_expenses = results["monthly_expenses"] - results["monthly_mortgage"]
    cashflow_label = "POSITIVE" if results["monthly_cashflow"] >= 0 else "NEGATIVE"

    return [
        ["PROPERTY ANALYSIS REPORT"],
        [],
        ["Property Information"],
        ["Property Name:", calc.name],
        ["Address:", calc.address or "N/A"],
        ["Listing URL:", calc.listing_url or "N/A"],
        ["Analysis Date:", format_timestamp(calc.created_at)],
        ["Notes:", calc.notes or "N/A"],
        [],
        ["INVESTMENT INPUTS"],
        ["Purchase Price:", money(inputs.purchase_price)],
        ["Down Payment:", money(inputs.down_payment)],
        ["Loan Amount:", money(max(inputs.purchase_price - inputs.down_payment, 0))],
        ["CMHC Premium:", money(results["cmhc_premium"]), format_percentage(results["cmhc_rate"])],
        ["Total Mortgage:", money(results["total_mortgage_amount"])],
        ["Interest Rate:", format_percentage(inputs.interest_rate)],
        ["Loan Term:", f"{inputs.loan_term} years"],
        [],
        ["INCOME"],
        ["Monthly Rent:", money(inputs.monthly_rent)],
        ["Annual Rent:", money(inputs.monthly_rent * 12)],
        [],
        ["MONTHLY ANALYSIS"],
        ["Monthly Income:", money(results["monthly_income"])],
        ["Monthly Mortgage (P&I):", money(results["monthly_mortgage"])],
        ["Monthly Operating Expenses:", money(operating_expenses)],
        ["Total Monthly Expenses:", money(results["monthly_expenses"])],
        ["NET MONTHLY CASHFLOW:", money(results["monthly_cashflow"]), cashflow_label],
        [],
        ["ANNUAL ANALYSIS"],
        ["Annual Cashflow:", money(results["annual_cashflow"])],
        ["Cash-on-Cash Return:", format_percentage(results["cash_on_cash_return"])],
        ["Cap Rate:", format_percentage(results["cap_rate"])],
        ["Total Cash Required:", money(results["total_cash_required"])],
        [],
        ["EXPENSE BREAKDOWN (Monthly)"],
        ["Mortgage Payment:", money(expenses["mortgage"])],
        ["Property Taxes:", money(expenses["property_taxes"])],
        ["Insurance:", money(expenses["insurance"])],
        [
            "Property Management:",
            money(expenses["property_management"]),
            f"{inputs.property_management}% of rent",
        ],
        [
            "Maintenance Reserve:",
            money(expenses["maintenance_reserve"]),
            f"{inputs.maintenance_reserve}% of rent",
        ],
        ["Vacancy Allowance:", money(expenses["vacancy"]), f"{inputs.vacancy}% of rent"],
        [
            "CapEx Reserve:",
            money(expenses["cap_ex_reserve"]),
            f"{inputs.cap_ex_reserve}% of rent",
        ],
        ["HOA Fees:", money(expenses["hoa_fees"])],
        ["Other Expenses:", money(expenses["other_expenses"])],
        ["TOTAL EXPENSES:", money(results["monthly_expenses"])],
    ]


def build_workbook(calculations: List, currency_code: Optional[str] = None) -> Workbook:
    """
    Build the export workbook.

    Args:
        calculations: Saved calculations (objects exposing name, address,
            listing_url, notes, created_at, inputs and results)
        currency_code: Currency for display; defaults to settings

    Raises:
        ValueError: If there is nothing to export
    """
    if not calculations:
        raise ValueError("No saved calculations to export")

    currency_code = currency_code or get_settings().currency_code

    workbook = Workbook()
    summary = workbook.active
    summary.title = "Summary"
    _write_summary(summary, calculations, currency_code)

    for calc in calculations:
        sheet = workbook.create_sheet(safe_sheet_name(calc.name, workbook.sheetnames))
        for row in _report_rows(calc, currency_code):
            sheet.append(row)
            if row and row[0] in SECTION_HEADINGS:
                sheet.cell(row=sheet.max_row, column=1).font = SECTION_FONT
        _set_widths(sheet, REPORT_WIDTHS)

    return workbook


def export_to_xlsx(calculations: List, currency_code: Optional[str] = None) -> bytes:
    """Render saved calculations as .xlsx file contents."""
    workbook = build_workbook(calculations, currency_code)

    buffer = BytesIO()
    workbook.save(buffer)

    logger.info(f"Exported {len(calculations)} calculations to spreadsheet")
    return buffer.getvalue()


def export_filename(today: Optional[datetime] = None) -> str:
    today = today or datetime.now()
    return f"Property_Analysis_{today.date().isoformat()}.xlsx"
