from __future__ import annotations

import asyncio
from dataclasses import replace
import logging
import threading

from milk_rates.errors import LoadError
from milk_rates.loader import ChartSource, load
from milk_rates.models import RateTable, ReloadResult

logger = logging.getLogger(__name__)


class ReloadController:
    """
    Owner of the currently published RateTable.

    Tables are immutable, so readers just grab the current reference and work
    on it without locking. The lock only guards the reference swap; parsing a
    new chart happens before it is taken, so a slow reload never holds up a
    lookup and a lookup that started on the old table finishes on it.
    """

    def __init__(self, initial: RateTable | None = None, *, sheet_name: str | int | None = None):
        self._table = initial if initial is not None else RateTable()
        self._sheet_name = sheet_name
        self._lock = threading.Lock()

    def current_table(self) -> RateTable:
        with self._lock:
            return self._table

    def reload(self, source: ChartSource) -> ReloadResult:
        try:
            table = load(source, sheet_name=self._sheet_name)
        except LoadError as e:
            logger.warning("Rate chart reload rejected, keeping version %d: %s", self.current_table().version, e)
            raise
        return self.publish(table)

    async def reload_async(self, source: ChartSource) -> ReloadResult:
        # Cancelling the awaiting task drops the parsed table before publish.
        try:
            table = await asyncio.to_thread(load, source, sheet_name=self._sheet_name)
        except LoadError as e:
            logger.warning("Rate chart reload rejected, keeping version %d: %s", self.current_table().version, e)
            raise
        return self.publish(table)

    def publish(self, table: RateTable) -> ReloadResult:
        with self._lock:
            published = replace(table, version=self._table.version + 1)
            self._table = published
        logger.info(
            "Published rate chart version %d (%d x %d) from %s",
            published.version,
            published.row_count,
            published.column_count,
            published.source,
        )
        return ReloadResult(
            row_count=published.row_count,
            column_count=published.column_count,
            version=published.version,
            source=published.source,
        )
