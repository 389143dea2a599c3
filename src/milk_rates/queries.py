from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, DecimalException
from typing import Any

from milk_rates.errors import InvalidInput
from milk_rates.models import AxisValues, RateTable
from milk_rates.resolver import parse_measurement

CENTS = Decimal("0.01")


def list_axis_values(table: RateTable) -> AxisValues:
    """
    Axis labels exactly as the chart wrote them, in chart order.

    Form consumers compare user selections with these labels as strings, so
    this deliberately does not use the resolver's sorted numeric view.
    """
    return AxisValues(fat=table.fat_labels, snf=table.snf_labels)


def collection_amount(rate: Decimal, quantity: Any) -> Decimal:
    qty = parse_measurement(quantity, field="quantity")
    if qty < 0:
        raise InvalidInput("quantity", quantity)
    try:
        return (rate * qty).quantize(CENTS, rounding=ROUND_HALF_UP)
    except DecimalException as e:
        raise InvalidInput("quantity", quantity) from e
