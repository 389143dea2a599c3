"""
REST API for the milk rate engine.

Endpoints (all under /api/v1):
- GET  /health               - Health check plus published chart dimensions
- GET  /fat/snf              - Rate for ?fat=&snf= (and amount for &quantity=)
- GET  /fat/snf/values       - FAT/SNF labels for form pickers
- POST /fat/snf/reload       - Re-read the chart file (admin)

Run with: python -m milk_rates serve
"""

from __future__ import annotations

from decimal import Decimal
import os
from pathlib import Path
from typing import Any

from fastapi import APIRouter, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from milk_rates.config import AppConfig, default_config, load_app_config
from milk_rates.errors import InvalidInput, LoadError, RateUnavailable
from milk_rates.models import RateQuote
from milk_rates.service import MilkRateService


CONFIG_PATH = Path(os.getenv("MILK_RATES_CONFIG", "config.toml"))


class RateData(BaseModel):
    fat: float
    snf: float
    rate: float
    matched_fat: str
    matched_snf: str
    exact: bool
    table_version: int
    quantity: float | None = None
    amount: float | None = None


class RateResponse(BaseModel):
    success: bool = True
    data: RateData


class AxisValuesData(BaseModel):
    fat: list[str]
    snf: list[str]


class AxisValuesResponse(BaseModel):
    success: bool = True
    data: AxisValuesData


class ReloadResponse(BaseModel):
    success: bool = True
    message: str
    row_count: int
    column_count: int
    version: int


def _load_base_config() -> AppConfig:
    if CONFIG_PATH.exists():
        return load_app_config(CONFIG_PATH)
    return default_config()


def _as_float(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


def _rate_payload(quote: RateQuote) -> RateData:
    return RateData(
        fat=float(quote.fat),
        snf=float(quote.snf),
        rate=float(quote.rate),
        matched_fat=quote.matched_fat,
        matched_snf=quote.matched_snf,
        exact=quote.exact,
        table_version=quote.table_version,
        quantity=_as_float(quote.quantity),
        amount=_as_float(quote.amount),
    )


def _require_admin(*, config: AppConfig, provided: str | None) -> None:
    expected = config.api.admin_token
    if not expected:
        return
    if not provided or provided.strip() != expected:
        raise HTTPException(status_code=401, detail="Reloading the rate chart requires a valid X-Admin-Token.")


def create_app(config: AppConfig | None = None, service: MilkRateService | None = None) -> FastAPI:
    config = config or _load_base_config()
    if service is None:
        service = MilkRateService(config)
        service.load_initial()

    app = FastAPI(title="Milk Rate Engine API", version="1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.rate_service = service

    router = APIRouter(prefix="/api/v1")

    @router.get("/health")
    def health() -> dict[str, Any]:
        table = service.controller.current_table()
        return {
            "ok": True,
            "table_version": table.version,
            "rows": table.row_count,
            "columns": table.column_count,
        }

    @router.get("/fat/snf", response_model=RateResponse)
    def get_rate(fat: str | None = None, snf: str | None = None, quantity: str | None = None) -> RateResponse:
        if fat is None or snf is None:
            raise HTTPException(status_code=400, detail="Fat and SNF values are required")
        try:
            quote = service.rate(fat, snf, quantity)
        except InvalidInput as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except RateUnavailable as e:
            raise HTTPException(status_code=503, detail=str(e)) from e
        return RateResponse(data=_rate_payload(quote))

    @router.get("/fat/snf/values", response_model=AxisValuesResponse)
    def get_available_values() -> AxisValuesResponse:
        try:
            values = service.available_values()
        except RateUnavailable as e:
            raise HTTPException(status_code=503, detail=str(e)) from e
        return AxisValuesResponse(data=AxisValuesData(fat=list(values.fat), snf=list(values.snf)))

    @router.api_route("/fat/snf/reload", methods=["GET", "POST"], response_model=ReloadResponse)
    def reload_chart(x_admin_token: str | None = Header(default=None)) -> ReloadResponse:
        _require_admin(config=config, provided=x_admin_token)
        try:
            result = service.reload()
        except LoadError as e:
            raise HTTPException(status_code=422, detail=e.to_dict()) from e
        return ReloadResponse(
            message="Rate chart reloaded successfully",
            row_count=result.row_count,
            column_count=result.column_count,
            version=result.version,
        )

    app.include_router(router)
    return app
