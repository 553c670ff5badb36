from decimal import Decimal

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
}

# Unrecognised codes render with the rupee glyph, not the code itself
DEFAULT_SYMBOL = CURRENCY_SYMBOLS["INR"]


def currency_symbol(currency: str) -> str:
    """Display glyph for a 3-letter currency code"""
    return CURRENCY_SYMBOLS.get(currency, DEFAULT_SYMBOL)


def format_amount(amount: Decimal, currency: str) -> str:
    """Render an amount the way the balance cards show it, e.g. "$ 40.00" """
    return f"{currency_symbol(currency)} {Decimal(amount):.2f}"
