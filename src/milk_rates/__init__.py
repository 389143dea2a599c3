"""
Milk Rate Engine

Prices milk collections from a FAT x SNF rate chart:
- Loads the chart (xlsx / csv) into an immutable RateTable
- Resolves a FAT/SNF reading to a rate, exact match first, nearest otherwise
- Swaps in an edited chart without interrupting lookups

Usage:
    from milk_rates import ReloadController, resolve

    controller = ReloadController()
    controller.reload(Path("data/rate-charts/milk_rate_chart.xlsx"))
    rate = resolve(controller.current_table(), fat=4.2, snf=8.5)
"""

from .controller import ReloadController
from .errors import InvalidInput, LoadError, RateEngineError, RateUnavailable
from .loader import load
from .models import AxisEntry, AxisValues, RateQuote, RateTable, ReloadResult
from .queries import collection_amount, list_axis_values
from .resolver import resolve, resolve_quote
from .service import MilkRateService

__all__ = [
    "ReloadController",
    "MilkRateService",
    "load",
    "resolve",
    "resolve_quote",
    "list_axis_values",
    "collection_amount",
    "RateTable",
    "AxisEntry",
    "AxisValues",
    "RateQuote",
    "ReloadResult",
    "RateEngineError",
    "LoadError",
    "InvalidInput",
    "RateUnavailable",
]
