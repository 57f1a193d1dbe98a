from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "https://www.glo.or.th/api/checking/getLotteryResult"


def _int_from_env(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _float_from_env(value: Optional[str], default: float) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _database_url_from_env() -> str:
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit
    db_path = os.getenv("LOTTERY_DB_PATH", "data/lottery.db")
    return f"sqlite:///{db_path}"


@dataclass(frozen=True)
class ApiSettings:
    url: str = DEFAULT_API_URL
    timeout_seconds: int = 30
    pace_seconds: float = 1.0


@dataclass(frozen=True)
class WebSettings:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///data/lottery.db"
    report_path: str = "reports"
    log_level: str = "INFO"
    api: ApiSettings = ApiSettings()
    web: WebSettings = WebSettings()

    def copy(self, **updates) -> "Settings":
        return replace(self, **updates)


def load_from_environment() -> Settings:
    api = ApiSettings(
        url=os.getenv("GLO_API__URL", DEFAULT_API_URL),
        timeout_seconds=_int_from_env(os.getenv("GLO_API__TIMEOUT_SECONDS"), 30),
        pace_seconds=_float_from_env(os.getenv("GLO_API__PACE_SECONDS"), 1.0),
    )
    web = WebSettings(
        host=os.getenv("WEB__HOST", "127.0.0.1"),
        port=_int_from_env(os.getenv("WEB__PORT"), 8080),
    )
    return Settings(
        database_url=_database_url_from_env(),
        report_path=os.getenv("LOTTERY_REPORT_PATH", "reports"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        api=api,
        web=web,
    )


@lru_cache(maxsize=1)
def load_config(dotenv_path: Optional[str] = None) -> Settings:
    if dotenv_path:
        load_dotenv(dotenv_path)
    else:
        default_path = pathlib.Path(".env")
        if default_path.exists():
            load_dotenv(default_path)
    return load_from_environment()
