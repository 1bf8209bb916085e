"""Configuration loading utilities for evalascendente."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

import yaml

DEFAULT_CONFIG = {
    "workbook_path": "data/evaluaciones.xlsx",
    "report_path": "reports",
    "log_path": "logs/evalascendente.log",
    "log_level": "INFO",
    "log_max_bytes": 2 * 1024 * 1024,
    "log_backup_count": 5,
    "log_console": True,
    "timezone": "America/Mexico_City",
    "level": "operativo",
    "company_name": "VINOPLASTIC",
    "top_n": 3,
    "comment_limit": 5,
    "lock_timeout": 30,
    "excel_export": True,
    "csv_export": False,
    "catalog_path": None,
}


@dataclass(frozen=True)
class AppConfig:
    """Typed configuration container with default fallbacks."""

    workbook_path: Path
    report_path: Path
    log_path: Path
    log_level: str
    timezone: tzinfo
    log_max_bytes: int = 2 * 1024 * 1024
    log_backup_count: int = 5
    log_console: bool = True
    level: str = "operativo"
    company_name: str = "VINOPLASTIC"
    top_n: int = 3
    comment_limit: int = 5
    lock_timeout: float = 30.0
    excel_export: bool = True
    csv_export: bool = False
    catalog_path: Optional[Path] = None

    extra: Mapping[str, object] = field(default_factory=dict)


def _parse_timezone(name: str) -> tzinfo:
    try:
        from zoneinfo import ZoneInfo

        return ZoneInfo(name)
    except Exception as exc:  # pragma: no cover - tzdata may be missing
        raise ValueError(f"Unknown timezone '{name}'") from exc


def read_mapping_file(path: Path) -> MutableMapping[str, object]:
    """Read a YAML or JSON document whose root must be a mapping."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif path.suffix.lower() == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config format: {path.suffix}")
    if not isinstance(data, MutableMapping):
        raise ValueError("Config root must be a mapping")
    return data


def _int_setting(value: object, key: str, minimum: int = 1) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be an integer") from exc
    if number < minimum:
        raise ValueError(f"{key} must be >= {minimum}")
    return number


def load_config(path: Optional[str | Path] = None, overrides: Optional[Mapping[str, object]] = None) -> AppConfig:
    """Load application configuration merging defaults, file and overrides."""

    merged: MutableMapping[str, object] = dict(DEFAULT_CONFIG)
    if path:
        merged.update(read_mapping_file(Path(path)))
    if overrides:
        merged.update(overrides)

    tz = _parse_timezone(str(merged.get("timezone", DEFAULT_CONFIG["timezone"])))

    workbook_path = Path(str(merged.get("workbook_path", DEFAULT_CONFIG["workbook_path"]))).expanduser()
    report_path = Path(str(merged.get("report_path", DEFAULT_CONFIG["report_path"]))).expanduser()
    log_path = Path(str(merged.get("log_path", DEFAULT_CONFIG["log_path"]))).expanduser()
    log_level = str(merged.get("log_level", DEFAULT_CONFIG["log_level"])).upper()

    catalog_value = merged.get("catalog_path")
    catalog_path = Path(str(catalog_value)).expanduser() if catalog_value else None

    lock_timeout_value = merged.get("lock_timeout", DEFAULT_CONFIG["lock_timeout"])
    try:
        lock_timeout = float(lock_timeout_value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError("lock_timeout must be numeric") from exc

    return AppConfig(
        workbook_path=workbook_path,
        report_path=report_path,
        log_path=log_path,
        log_level=log_level,
        log_max_bytes=_int_setting(merged.get("log_max_bytes", DEFAULT_CONFIG["log_max_bytes"]), "log_max_bytes"),
        log_backup_count=_int_setting(
            merged.get("log_backup_count", DEFAULT_CONFIG["log_backup_count"]), "log_backup_count", minimum=0
        ),
        log_console=bool(merged.get("log_console", DEFAULT_CONFIG["log_console"])),
        timezone=tz,
        level=str(merged.get("level", DEFAULT_CONFIG["level"])),
        company_name=str(merged.get("company_name", DEFAULT_CONFIG["company_name"])),
        top_n=_int_setting(merged.get("top_n", DEFAULT_CONFIG["top_n"]), "top_n"),
        comment_limit=_int_setting(merged.get("comment_limit", DEFAULT_CONFIG["comment_limit"]), "comment_limit"),
        lock_timeout=lock_timeout,
        excel_export=bool(merged.get("excel_export", DEFAULT_CONFIG["excel_export"])),
        csv_export=bool(merged.get("csv_export", DEFAULT_CONFIG["csv_export"])),
        catalog_path=catalog_path,
        extra={k: v for k, v in merged.items() if k not in DEFAULT_CONFIG},
    )


__all__ = ["AppConfig", "DEFAULT_CONFIG", "load_config", "read_mapping_file"]
