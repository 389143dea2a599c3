from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import tomllib

from dotenv import load_dotenv


@dataclass(frozen=True)
class DataConfig:
    data_dir: Path


@dataclass(frozen=True)
class RatesConfig:
    chart_file: str
    sheet_name: str | None
    auto_reload: bool


@dataclass(frozen=True)
class ApiConfig:
    host: str
    port: int
    admin_token: str | None


@dataclass(frozen=True)
class LoggingConfig:
    level: str


@dataclass(frozen=True)
class AppConfig:
    data: DataConfig
    rates: RatesConfig
    api: ApiConfig
    logging: LoggingConfig

    @property
    def chart_path(self) -> Path:
        override = os.getenv("MILK_RATE_CHART")
        if override and override.strip():
            return Path(override.strip()).resolve()
        return (self.data.data_dir / self.rates.chart_file).resolve()


def load_app_config(config_path: Path) -> AppConfig:
    config_path = config_path.resolve()
    app_dir = config_path.parent

    env_path = app_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    with config_path.open("rb") as f:
        raw = tomllib.load(f)

    return _build_config(raw, app_dir=app_dir)


def default_config(app_dir: Path | None = None) -> AppConfig:
    return _build_config({}, app_dir=(app_dir or Path.cwd()).resolve())


def _build_config(raw: dict, *, app_dir: Path) -> AppConfig:
    data_raw = raw.get("data", {})
    rates_raw = raw.get("rates", {})
    api_raw = raw.get("api", {})
    logging_raw = raw.get("logging", {})

    sheet_name = rates_raw.get("sheet_name")

    return AppConfig(
        data=DataConfig(data_dir=(app_dir / data_raw.get("data_dir", "data")).resolve()),
        rates=RatesConfig(
            chart_file=str(rates_raw.get("chart_file", "rate-charts/milk_rate_chart.xlsx")),
            sheet_name=str(sheet_name) if sheet_name else None,
            auto_reload=bool(rates_raw.get("auto_reload", False)),
        ),
        api=ApiConfig(
            host=str(api_raw.get("host", "127.0.0.1")),
            port=int(os.getenv("API_PORT") or api_raw.get("port", 8000)),
            admin_token=os.getenv("RATES_ADMIN_TOKEN") or None,
        ),
        logging=LoggingConfig(level=str(os.getenv("LOG_LEVEL") or logging_raw.get("level", "INFO")).upper()),
    )
