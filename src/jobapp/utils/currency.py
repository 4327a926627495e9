"""Currency formatting utilities."""

from typing import Any, Dict, NamedTuple, Optional


class CurrencyFormat(NamedTuple):
    symbol: str
    position: str  # "before" or "after"
    decimals: int


CURRENCY_CONFIG: Dict[str, CurrencyFormat] = {
    "MYR": CurrencyFormat("RM", "before", 2),
    "USD": CurrencyFormat("$", "before", 2),
    "SGD": CurrencyFormat("S$", "before", 2),
    "EUR": CurrencyFormat("€", "before", 2),
    "GBP": CurrencyFormat("£", "before", 2),
    "AUD": CurrencyFormat("A$", "before", 2),
    "JPY": CurrencyFormat("¥", "before", 0),
    "CNY": CurrencyFormat("¥", "before", 2),
    "INR": CurrencyFormat("₹", "before", 2),
    "THB": CurrencyFormat("฿", "before", 2),
    "IDR": CurrencyFormat("Rp", "before", 0),
    "PHP": CurrencyFormat("₱", "before", 2),
    "VND": CurrencyFormat("₫", "after", 0),
    "KRW": CurrencyFormat("₩", "before", 0),
    "HKD": CurrencyFormat("HK$", "before", 2),
    "TWD": CurrencyFormat("NT$", "before", 0),
}


def format_currency(amount: Any, currency_code: str = "MYR", show_code: bool = False) -> str:
    """Format a number as currency.

    Args:
        amount: Number or numeric string; None and non-numeric values render as "-"
        currency_code: ISO code, unknown codes fall back to MYR
        show_code: Append the ISO code after the amount

    Returns:
        str: e.g. "RM 1,234.50" or "12,000 ₫"
    """
    value: Optional[float]
    try:
        value = float(amount) if amount is not None else None
    except (TypeError, ValueError):
        value = None
    if value is None or value != value:
        return "-"

    fmt = CURRENCY_CONFIG.get(currency_code.upper(), CURRENCY_CONFIG["MYR"])
    number = f"{value:,.{fmt.decimals}f}"

    if fmt.position == "after":
        result = f"{number} {fmt.symbol}"
    else:
        result = f"{fmt.symbol} {number}"

    if show_code:
        result = f"{result} {currency_code.upper()}"
    return result
