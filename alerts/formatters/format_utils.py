"""
Shared Formatting Utilities
Small helpers used by the Telegram formatter and the CLI
"""

from typing import Optional


def format_pct(value: Optional[float]) -> str:
    """
    Format a probability as a percentage with one decimal

    Args:
        value: Probability in [0, 1], or None

    Returns:
        "91.5%" style string, or "n/a"
    """
    if value is None:
        return "n/a"
    return f"{value * 100:.1f}%"


def format_cents(price: float) -> str:
    """
    Format a token price the way Polymarket shows it

    Returns:
        "4¢", "0.25¢", or "$1.00"
    """
    price_cents = price * 100

    if price >= 1.0:
        return f"${price:.2f}"
    elif price_cents < 1.0:
        # Less than 1¢ - show with 2 decimals for precision
        return f"{price_cents:.2f}¢"
    else:
        return f"{round(price_cents)}¢"


def truncate(text: str, max_len: int) -> str:
    return text if len(text) <= max_len else text[:max_len - 1] + "…"
