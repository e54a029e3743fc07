# acaishop/utils/formatting.py
from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Normalize int/float/str/Decimal to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(value) -> str:
    """
    BRL with pt-BR separators, always two decimals.

    >>> format_currency(1234.5)
    'R$ 1.234,50'
    """
    amount = to_money(value)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}"  # 1,234.50
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"


def price_label(value, free_text: str = "Grátis") -> str:
    if to_money(value) > 0:
        return format_currency(value)
    return free_text
