# utils/currency.py
from typing import Optional, Union

Number = Union[str, float, int, None]


def as_currency(value: float) -> float:
    """Rounds a dollar amount to cent precision."""
    return round(float(value), 2)


def as_percentage_of(value: float, total: float, decimals: int = 3) -> float:
    """
    Share of `total` represented by `value`, rounded to `decimals`.
    Returns 0.0 when total is zero.
    """
    if total == 0:
        return 0.0
    return round(value / total, decimals)


# ----------------------------------------------------------------------
# Parsing config text
# ----------------------------------------------------------------------

def clean_currency(raw: Number) -> Optional[float]:
    """
    "$140,000.00" -> 140000.0. Blank input means "not set" and gives None;
    anything else that is not a number raises ValueError.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)

    text = raw.replace("$", "").replace(",", "").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"Not a currency amount: {raw!r}") from None


def clean_percent(raw: Number) -> Optional[float]:
    """
    "2.5%" -> 0.025, "0.20" -> 0.20. A trailing % marks a percentage,
    a bare number is already a fraction. Blank gives None.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)

    text = raw.replace(" ", "").strip()
    if not text:
        return None
    is_percent = text.endswith("%")
    try:
        value = float(text.rstrip("%"))
    except ValueError:
        raise ValueError(f"Not a percentage: {raw!r}") from None
    return value / 100.0 if is_percent else value


# ----------------------------------------------------------------------
# Display
# ----------------------------------------------------------------------

def format_percent_output(value: Optional[float], decimal_places: int = 1) -> str:
    """0.23 -> '23.0%'"""
    if value is None:
        return ""
    return f"{float(value):.{decimal_places}%}"


def format_currency_output(val, decimals=2):
    """1234567 -> '$1,234,567.00'"""
    if val is None:
        val = 0.0
    return f"${val:,.{decimals}f}"
