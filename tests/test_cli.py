"""Tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from evalascendente.cli import main
from evalascendente.loader import load_data

# --- Fixtures ---


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """YAML config keeping logs and reports inside tmp_path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        f"log_path: {tmp_path / 'logs' / 'app.log'}\nreport_path: {tmp_path / 'reports'}\n",
        encoding="utf-8",
    )
    return path


def _run(workbook: Path, config_file: Path, *args: str) -> int:
    return main(["--workbook", str(workbook), "--config", str(config_file), *args])


# --- Commands ---


def test_summary_prints_json(workbook: Path, config_file: Path, capsys) -> None:
    assert _run(workbook, config_file, "summary", "--evaluated", "s1") == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["target"] == "Ana López"
    assert payload["overall_average"] == pytest.approx(3.75)
    assert payload["overall_status"] == "Regular"


def test_consolidated_summary_lists_supervisors(workbook: Path, config_file: Path, capsys) -> None:
    assert _run(workbook, config_file, "summary") == 0
    payload = json.loads(capsys.readouterr().out)
    assert [row["id"] for row in payload["supervisors"]] == ["s1", "s2"]


def test_report_writes_pdf(workbook: Path, config_file: Path, tmp_path: Path, capsys) -> None:
    out = tmp_path / "salida"
    assert _run(workbook, config_file, "report", "--evaluated", "s1", "--output", str(out)) == 0
    assert len(list(out.glob("Reporte_Ana_Lopez_*.pdf"))) == 1
    assert "Reporte_Ana_Lopez_" in capsys.readouterr().out


def test_default_command_is_consolidated_report(workbook: Path, config_file: Path, tmp_path: Path) -> None:
    assert _run(workbook, config_file) == 0
    assert len(list((tmp_path / "reports").glob("Reporte_Consolidado_*.pdf"))) == 1


def test_unknown_supervisor_returns_error(workbook: Path, config_file: Path) -> None:
    assert _run(workbook, config_file, "report", "--evaluated", "s9") == 1


def test_missing_workbook_returns_error(tmp_path: Path, config_file: Path) -> None:
    assert _run(tmp_path / "nope.xlsx", config_file, "summary") == 1


def test_record_appends(workbook: Path, config_file: Path) -> None:
    code = _run(
        workbook,
        config_file,
        "record",
        "--evaluated", "s1",
        "--answer", "c1=5",
        "--answer", "c2=4",
        "--shift", "1",
        "--comment", "Gracias",
    )
    assert code == 0
    added = load_data(workbook).responses[-1]
    assert added.answers == {"c1": 5, "c2": 4}
    assert added.comment == "Gracias"
    assert added.evaluator_id is None


@pytest.mark.parametrize("answer", ["c1=9", "c1", "=4", "c1=bien"])
def test_record_rejects_bad_answers(workbook: Path, config_file: Path, answer: str) -> None:
    assert _run(workbook, config_file, "record", "--evaluated", "s1", "--answer", answer) == 1
    assert len(load_data(workbook).responses) == 3


def test_record_requires_answers(workbook: Path, config_file: Path) -> None:
    assert _run(workbook, config_file, "record", "--evaluated", "s1") == 1


def test_classify(workbook: Path, config_file: Path, capsys) -> None:
    assert _run(workbook, config_file, "classify", "Escucha a su gente") == 0
    assert capsys.readouterr().out.strip() == "comunicacion"
    assert _run(workbook, config_file, "classify", "Diversión", "--point") == 0
    assert capsys.readouterr().out.strip() == "diversion"


def test_progress(workbook: Path, config_file: Path, capsys) -> None:
    assert _run(workbook, config_file, "progress") == 0
    assert json.loads(capsys.readouterr().out) == {"total": 4, "completed": 2, "pending": 2, "percentage": 50.0}
    assert _run(workbook, config_file, "progress", "--department", "Producción", "--shift", "1") == 0
    assert json.loads(capsys.readouterr().out) == {"total": 2, "completed": 1, "pending": 1, "percentage": 50.0}


# --- Store selection ---


def test_classify_needs_no_workbook(config_file: Path, capsys) -> None:
    assert main(["--config", str(config_file), "classify", "Escucha a su gente"]) == 0
    assert capsys.readouterr().out.strip() == "comunicacion"


def test_workbook_defaults_to_config(workbook: Path, tmp_path: Path, capsys) -> None:
    path = tmp_path / "con_libro.yaml"
    path.write_text(
        f"workbook_path: {workbook}\nlog_path: {tmp_path / 'logs' / 'app.log'}\n",
        encoding="utf-8",
    )
    assert main(["--config", str(path), "summary", "--evaluated", "s1"]) == 0
    assert json.loads(capsys.readouterr().out)["target"] == "Ana López"


def test_classify_with_missing_catalog_returns_error(tmp_path: Path, capsys) -> None:
    path = tmp_path / "sin_catalogo.yaml"
    path.write_text(
        f"catalog_path: {tmp_path / 'nope.yaml'}\nlog_path: {tmp_path / 'logs' / 'app.log'}\n",
        encoding="utf-8",
    )
    assert main(["--config", str(path), "classify", "Escucha a su gente"]) == 1
    assert capsys.readouterr().out == ""
