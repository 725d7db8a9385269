from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

import yaml

from realty_import.domain.commission import DEFAULT_BROKER_SPLIT
from realty_import.domain.validation.skip_rules import DEFAULT_SKIP_MARKERS


@dataclass(frozen=True)
class Settings:
    # Paths
    log_dir: str = "./logs"
    report_dir: str = "./reports"

    # Logging / reports
    log_level: str = "INFO"
    report_items_limit: int = 200

    # Import
    csv_encoding: str = "utf-8-sig"
    skip_markers: tuple[str, ...] = DEFAULT_SKIP_MARKERS

    # Commission
    broker_split: float = DEFAULT_BROKER_SPLIT


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


ENV_NAMES = {
    "log_dir": "REALTY_LOG_DIR",
    "report_dir": "REALTY_REPORT_DIR",
    "log_level": "REALTY_LOG_LEVEL",
    "report_items_limit": "REALTY_REPORT_ITEMS_LIMIT",
    "csv_encoding": "REALTY_CSV_ENCODING",
    "skip_markers": "REALTY_SKIP_MARKERS",
    "broker_split": "REALTY_BROKER_SPLIT",
}


def _to_markers(value: Any) -> tuple[str, ...]:
    """
    "Total, Pending:" или список YAML -> ("total", "pending:").
    """
    items = value.split(",") if isinstance(value, str) else list(value)
    return tuple(str(item).strip().lower() for item in items if str(item).strip())


def _to_items_limit(value: Any) -> int:
    limit = int(value)
    if limit < 0:
        raise ValueError(f"report_items_limit must be >= 0, got {value}")
    return limit


def _to_percent(value: Any) -> float:
    percent = float(value)
    if not 0 <= percent <= 100:
        raise ValueError(f"broker_split must be within 0..100, got {value}")
    return percent


COERCERS: dict[str, Callable[[Any], Any]] = {
    "log_dir": str,
    "report_dir": str,
    "log_level": str,
    "report_items_limit": _to_items_limit,
    "csv_encoding": str,
    "skip_markers": _to_markers,
    "broker_split": _to_percent,
}


def _read_yaml_config(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    return data if isinstance(data, dict) else {}


def _read_env() -> dict[str, str | None]:
    values: dict[str, str | None] = {}
    for name, envName in ENV_NAMES.items():
        raw = os.getenv(envName)
        values[name] = raw.strip() if raw and raw.strip() else None
    return values


def loadSettings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Назначение:
        Сборка Settings по слоям: defaults < config (YAML) < ENV (REALTY_*) < CLI.

    Алгоритм:
        - Из каждого слоя берутся только известные ключи со значением не None.
        - Слой попадает в sources_used, если дал хотя бы одно значение.
        - Значения приводятся к типам полей Settings (COERCERS).

    Ошибки:
        ValueError/TypeError при некорректном YAML или значениях.
    """
    layers = [
        ("config", _read_yaml_config(Path(config_path)) if config_path else {}),
        ("env", _read_env()),
        ("cli", cli_overrides),
    ]

    merged: dict[str, Any] = asdict(Settings())
    sources: list[str] = []
    for source, values in layers:
        present = {k: v for k, v in values.items() if k in COERCERS and v is not None}
        if present:
            sources.append(source)
            merged.update(present)

    settings = Settings(**{name: COERCERS[name](value) for name, value in merged.items()})
    return LoadedSettings(settings=settings, sources_used=sources)
