"""Tests for appending responses to the workbook."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest
from filelock import FileLock

from evalascendente.aggregation import CompetencyAverage, compute_competency_averages
from evalascendente.loader import ValidationError, load_data
from evalascendente.models import Response
from evalascendente.record import record_response


def test_appends_response(workbook: Path) -> None:
    response = Response(evaluated_id="s2", shift="2", answers={"c1": 4, "c3": 5}, comment="Nuevo")
    row = record_response(workbook, response, timeout=1, now=datetime(2026, 3, 10, 8, 30))

    assert row["fecha"] == datetime(2026, 3, 10, 8, 30)
    data = load_data(workbook)
    assert len(data.responses) == 4
    added = data.responses[-1]
    assert added.evaluated_id == "s2"
    assert added.answers == {"c1": 4, "c3": 5}
    assert added.comment == "Nuevo"
    assert added.evaluator_id is None


def test_other_sheets_preserved(workbook: Path) -> None:
    record_response(workbook, Response(evaluated_id="s1", answers={"c2": 1}), timeout=1)
    sheets = pd.ExcelFile(workbook).sheet_names
    assert set(sheets) == {"Competencias", "Respuestas", "Supervisores", "Empleados"}
    assert len(load_data(workbook).supervisors) == 2


def test_new_competency_column_added(workbook: Path) -> None:
    record_response(workbook, Response(evaluated_id="s1", answers={"c9": 3}), timeout=1)
    assert "c9" in pd.read_excel(workbook, sheet_name="Respuestas").columns


def test_aware_timestamp_is_stored_naive(workbook: Path) -> None:
    from zoneinfo import ZoneInfo

    stamp = datetime(2026, 3, 10, 8, 30, tzinfo=ZoneInfo("America/Mexico_City"))
    row = record_response(workbook, Response(evaluated_id="s1", submitted_at=stamp), timeout=1)
    assert row["fecha"].tzinfo is None


def test_missing_workbook(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        record_response(tmp_path / "nope.xlsx", Response(evaluated_id="s1"))


def test_missing_sheet(tmp_path: Path) -> None:
    path = tmp_path / "otro.xlsx"
    pd.DataFrame([{"a": 1}]).to_excel(path, sheet_name="Hoja1", index=False)
    with pytest.raises(ValidationError):
        record_response(path, Response(evaluated_id="s1"), timeout=1)


def test_lock_contention(workbook: Path) -> None:
    with FileLock(str(workbook) + ".lock"):
        with pytest.raises(TimeoutError):
            record_response(workbook, Response(evaluated_id="s1"), timeout=0.1)


def test_numeric_competency_ids_keep_stored_scores(tmp_path: Path) -> None:
    path = tmp_path / "numericos.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame([{"id": 101, "nombre": "Escucha", "criterio": "comunicacion"}]).to_excel(
            writer, sheet_name="Competencias", index=False
        )
        pd.DataFrame([{"id": "r1", "evaluado": "s1", 101: 5}]).to_excel(writer, sheet_name="Respuestas", index=False)
        pd.DataFrame([{"id": "s1", "nombre": "Ana"}]).to_excel(writer, sheet_name="Supervisores", index=False)

    record_response(path, Response(evaluated_id="s1", answers={"101": 3}), timeout=1)

    columns = [str(column) for column in pd.read_excel(path, sheet_name="Respuestas").columns]
    assert columns.count("101") == 1
    data = load_data(path)
    assert [response.answers for response in data.responses] == [{"101": 5}, {"101": 3}]
    averages = compute_competency_averages(data.responses, data.competencies)
    assert averages["101"] == CompetencyAverage(average=4.0, count=2)
