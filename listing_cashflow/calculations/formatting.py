"""
Display formatting for currency and percentage values.
"""

CURRENCY_SYMBOLS = {"CAD": "$", "USD": "$", "EUR": "€", "GBP": "£"}


def format_currency(amount: float, currency_code: str = "CAD") -> str:
    """Format an amount as currency, e.g. -$1,234.50."""
    symbol = CURRENCY_SYMBOLS.get(currency_code, f"{currency_code} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_percentage(percentage: float) -> str:
    return f"{percentage:.2f}%"
