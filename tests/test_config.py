"""Tests for configuration loading and logging setup."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from evalascendente.config import DEFAULT_CONFIG, load_config
from evalascendente.logging_utils import setup_logging


class TestLoadConfig:
    """Defaults, files and overrides."""

    def test_defaults(self) -> None:
        config = load_config()
        assert config.workbook_path == Path(DEFAULT_CONFIG["workbook_path"])
        assert config.level == "operativo"
        assert config.top_n == 3
        assert config.comment_limit == 5
        assert config.lock_timeout == 30.0
        assert config.excel_export is True
        assert config.csv_export is False
        assert config.catalog_path is None
        assert str(config.timezone) == "America/Mexico_City"
        assert config.log_max_bytes == 2 * 1024 * 1024
        assert config.log_backup_count == 5
        assert config.log_console is True

    def test_yaml_file_and_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("top_n: 5\ncompany_name: ACME\nlog_level: debug\nplanta: norte\n", encoding="utf-8")
        config = load_config(path, overrides={"top_n": 2})
        assert config.top_n == 2
        assert config.company_name == "ACME"
        assert config.log_level == "DEBUG"
        assert config.extra == {"planta": "norte"}

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"csv_export": True, "catalog_path": "catalogo.yaml"}), encoding="utf-8")
        config = load_config(path)
        assert config.csv_export is True
        assert config.catalog_path == Path("catalogo.yaml")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "config.ini"
        path.write_text("[x]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"top_n": 0},
            {"comment_limit": "muchos"},
            {"lock_timeout": "pronto"},
            {"timezone": "Mars/Olympus"},
            {"log_max_bytes": 0},
            {"log_backup_count": -1},
        ],
    )
    def test_invalid_values(self, overrides) -> None:
        with pytest.raises(ValueError):
            load_config(overrides=overrides)


class TestSetupLogging:
    """Handler wiring."""

    def test_handlers_are_not_duplicated(self, app_config) -> None:
        logger = setup_logging(app_config)
        setup_logging(app_config)
        assert logger.name == "evalascendente"
        assert sum(isinstance(h, RotatingFileHandler) for h in logger.handlers) == 1
        assert sum(type(h) is logging.StreamHandler for h in logger.handlers) == 1
        assert app_config.log_path.parent.exists()

    def test_child_loggers_write_to_file(self, app_config) -> None:
        setup_logging(app_config)
        logging.getLogger("evalascendente.report").info("hola")
        for handler in logging.getLogger("evalascendente").handlers:
            handler.flush()
        assert "evalascendente.report: hola" in app_config.log_path.read_text(encoding="utf-8")

    def test_rotation_settings_reach_the_file_handler(self, app_config) -> None:
        config = replace(app_config, log_max_bytes=1024, log_backup_count=2, log_console=False)
        logger = setup_logging(config)
        (file_handler,) = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert file_handler.maxBytes == 1024
        assert file_handler.backupCount == 2
        assert not any(type(h) is logging.StreamHandler for h in logger.handlers)

    def test_console_handler_follows_config(self, app_config) -> None:
        logger = setup_logging(app_config)
        assert sum(type(h) is logging.StreamHandler for h in logger.handlers) == 1
        setup_logging(replace(app_config, log_console=False))
        assert not any(type(h) is logging.StreamHandler for h in logger.handlers)

    def test_new_log_path_replaces_file_handler(self, app_config, tmp_path: Path) -> None:
        setup_logging(app_config)
        moved = replace(app_config, log_path=tmp_path / "otros" / "nuevo.log")
        logger = setup_logging(moved)
        (file_handler,) = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert file_handler.baseFilename == os.path.abspath(moved.log_path)
        logger.info("movido")
        file_handler.flush()
        assert "movido" in moved.log_path.read_text(encoding="utf-8")
