"""
MilkRateService - query surface used by collection recording and forms.

Wraps a ReloadController with the configured chart file:
- rate(fat, snf[, quantity]) for pricing a collection entry
- available_values() for building FAT/SNF pickers
- reload() / refresh_if_changed() for picking up an edited chart
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any

from milk_rates.config import AppConfig
from milk_rates.controller import ReloadController
from milk_rates.errors import LoadError, RateUnavailable
from milk_rates.models import AxisValues, RateQuote, ReloadResult
from milk_rates.queries import collection_amount, list_axis_values
from milk_rates.resolver import parse_measurement, resolve_quote

logger = logging.getLogger(__name__)


class MilkRateService:
    """
    Rate lookups against the chart named in the app config.

    Usage:
        service = MilkRateService(load_app_config(Path("config.toml")))
        service.load_initial()
        quote = service.rate(fat=4.2, snf=8.5, quantity=10.5)
    """

    def __init__(self, config: AppConfig, controller: ReloadController | None = None):
        self._config = config
        self._controller = controller or ReloadController(sheet_name=config.rates.sheet_name)

    @property
    def controller(self) -> ReloadController:
        return self._controller

    def load_initial(self) -> ReloadResult | None:
        """Load the chart at startup; a bad chart leaves the service running empty."""
        try:
            return self.reload()
        except LoadError as e:
            logger.error("Initial rate chart load failed, lookups will be unavailable: %s", e)
            return None

    def reload(self) -> ReloadResult:
        return self._controller.reload(self._config.chart_path)

    def refresh_if_changed(self) -> ReloadResult | None:
        """Reload when the chart file's mtime differs from the published table's."""
        path = self._config.chart_path
        try:
            mtime = path.stat().st_mtime
        except OSError:
            return None
        if self._controller.current_table().source_mtime == mtime:
            return None
        return self.reload()

    def rate(self, fat: Any, snf: Any, quantity: Any = None) -> RateQuote:
        if self._config.rates.auto_reload:
            self._refresh_quietly()

        quote = resolve_quote(self._controller.current_table(), fat, snf)
        if quantity is None:
            return quote
        amount = collection_amount(quote.rate, quantity)
        return replace(quote, quantity=parse_measurement(quantity, field="quantity"), amount=amount)

    def available_values(self) -> AxisValues:
        table = self._controller.current_table()
        if table.is_empty:
            raise RateUnavailable("Rate chart data is not available")
        return list_axis_values(table)

    def _refresh_quietly(self) -> None:
        try:
            self.refresh_if_changed()
        except LoadError as e:
            logger.warning("Changed rate chart could not be loaded, still serving the previous one: %s", e)
