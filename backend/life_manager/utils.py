from decimal import Decimal, ROUND_HALF_UP

MONEY_QUANT = Decimal("0.01")


def quantize_amount(value: Decimal | int | float | str | None) -> Decimal:
    """
    Normalize money values to NUMERIC(12,2) precision.
    None (an absent column value) counts as zero.
    """
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def money(value: Decimal | None) -> float:
    """Decimal("1200.005") -> 1200.01, as a JSON number."""
    return float(quantize_amount(value))
