"""Workbook / JSON loading and validation helpers."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd
from filelock import FileLock, Timeout

from .models import (
    Competency,
    Employee,
    Response,
    Supervisor,
    parse_competencies,
    parse_employees,
    parse_responses,
    parse_supervisors,
)

logger = logging.getLogger("evalascendente.loader")

COMPETENCIES_SHEET = "Competencias"
RESPONSES_SHEET = "Respuestas"
SUPERVISORS_SHEET = "Supervisores"
EMPLOYEES_SHEET = "Empleados"

COMPETENCY_COLUMNS = {
    "id": "id",
    "nombre": "name",
    "descripcion": "description",
    "criterio": "criterion_id",
    "orden": "order",
    "nivel": "level",
    "activa": "active",
}
RESPONSE_COLUMNS = {
    "id": "id",
    "encuesta": "survey_id",
    "evaluador": "evaluator_id",
    "evaluado": "evaluated_id",
    "departamento": "department",
    "turno": "shift",
    "comentario": "comment",
    "fecha": "submitted_at",
}
PERSON_COLUMNS = {
    "id": "id",
    "nombre": "name",
    "puesto": "position",
    "departamento": "department",
    "turno": "shift",
    "nivel": "level",
}

REQUIRED_COLUMNS: Mapping[str, Sequence[str]] = {
    COMPETENCIES_SHEET: ("id",),
    RESPONSES_SHEET: ("evaluado",),
    SUPERVISORS_SHEET: ("id",),
}


class ValidationError(Exception):
    """Raised when input data fails validation rules."""


@dataclass(frozen=True)
class SurveyData:
    """Snapshot of the survey store."""

    competencies: List[Competency]
    responses: List[Response]
    supervisors: List[Supervisor]
    employees: List[Employee] = field(default_factory=list)

    def responses_for(self, evaluated_id: Optional[str] = None) -> List[Response]:
        if evaluated_id is None:
            return list(self.responses)
        return [response for response in self.responses if response.evaluated_id == str(evaluated_id)]

    def competencies_for(self, level: Optional[str] = None) -> List[Competency]:
        """Active competencies of ``level`` (all levels when None), by order."""

        selected = [
            competency
            for competency in self.competencies
            if competency.active and (level is None or competency.level in (None, level))
        ]
        return sorted(selected, key=lambda competency: competency.order)

    def supervisor(self, supervisor_id: str) -> Optional[Supervisor]:
        for supervisor in self.supervisors:
            if supervisor.id == str(supervisor_id):
                return supervisor
        return None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _rename(record: Mapping[str, Any], columns: Mapping[str, str]) -> Dict[str, Any]:
    renamed: Dict[str, Any] = {}
    for key, value in record.items():
        target = columns.get(str(key).strip().lower())
        if target is not None:
            renamed[target] = value
    return renamed


def _response_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    renamed = _rename(record, RESPONSE_COLUMNS)
    nested = record.get("respuestas")
    if isinstance(nested, Mapping):
        items = nested.items()
    else:
        items = (
            (key, value)
            for key, value in record.items()
            if str(key).strip().lower() not in RESPONSE_COLUMNS and str(key).strip().lower() != "respuestas"
        )
    # 101 and "101" name the same competency; a blank cell never replaces a score
    answers: Dict[str, Any] = {}
    for key, value in items:
        if not _is_blank(value):
            answers[str(key).strip()] = value
    renamed["answers"] = answers
    return renamed


def _check_columns(sheet: str, columns: Sequence[str]) -> None:
    present = {str(column).strip().lower() for column in columns}
    missing = [column for column in REQUIRED_COLUMNS.get(sheet, ()) if column not in present]
    if missing:
        raise ValidationError(f"{sheet} sheet must contain column(s): {', '.join(missing)}")


def _read_workbook(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    xl = pd.ExcelFile(path)
    tables: Dict[str, List[Dict[str, Any]]] = {}
    try:
        for sheet in (COMPETENCIES_SHEET, RESPONSES_SHEET, SUPERVISORS_SHEET):
            frame = xl.parse(sheet)
            _check_columns(sheet, list(frame.columns))
            tables[sheet] = frame.to_dict(orient="records")
    except ValueError as exc:
        raise ValidationError(
            f"Workbook must contain {COMPETENCIES_SHEET}, {RESPONSES_SHEET}, {SUPERVISORS_SHEET} sheets"
        ) from exc
    if EMPLOYEES_SHEET in xl.sheet_names:
        tables[EMPLOYEES_SHEET] = xl.parse(EMPLOYEES_SHEET).to_dict(orient="records")
    else:
        tables[EMPLOYEES_SHEET] = []
    return tables


def _read_json(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    try:
        document = json.loads(path.read_text(encoding="utf-8") or "{}")
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON export {path}: {exc}") from exc
    if not isinstance(document, Mapping):
        raise ValidationError("JSON export root must be a mapping")
    keys = {str(key).lower(): value for key, value in document.items()}
    tables: Dict[str, List[Dict[str, Any]]] = {}
    for sheet in (COMPETENCIES_SHEET, RESPONSES_SHEET, SUPERVISORS_SHEET, EMPLOYEES_SHEET):
        records = keys.get(sheet.lower())
        if records is None:
            if sheet == EMPLOYEES_SHEET:
                tables[sheet] = []
                continue
            raise ValidationError(f"JSON export must contain '{sheet.lower()}' collection")
        if not isinstance(records, list):
            raise ValidationError(f"'{sheet.lower()}' must be a list of records")
        tables[sheet] = [dict(record) for record in records if isinstance(record, Mapping)]
    return tables


def load_data(path: str | Path) -> SurveyData:
    """Load competencies, responses and people from a workbook or JSON export."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Workbook not found: {source}")

    if source.suffix.lower() == ".json":
        tables = _read_json(source)
    else:
        tables = _read_workbook(source)

    competencies = parse_competencies(_rename(r, COMPETENCY_COLUMNS) for r in tables[COMPETENCIES_SHEET])
    ids = [competency.id for competency in competencies]
    duplicates = sorted({competency_id for competency_id in ids if ids.count(competency_id) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate competency ids in {COMPETENCIES_SHEET}: {duplicates}")

    data = SurveyData(
        competencies=competencies,
        responses=parse_responses(_response_record(r) for r in tables[RESPONSES_SHEET]),
        supervisors=parse_supervisors(_rename(r, PERSON_COLUMNS) for r in tables[SUPERVISORS_SHEET]),
        employees=parse_employees(_rename(r, PERSON_COLUMNS) for r in tables[EMPLOYEES_SHEET]),
    )
    logger.debug(
        "Loaded %d competencies, %d responses, %d supervisors from %s",
        len(data.competencies),
        len(data.responses),
        len(data.supervisors),
        source,
    )
    return data


def load_locked(path: str | Path, timeout: float = 30.0) -> SurveyData:
    """Load the store while holding its file lock."""

    source = Path(path)
    lock = FileLock(str(source) + ".lock", timeout=timeout)
    try:
        with lock:
            data = load_data(source)
    except Timeout as exc:
        raise TimeoutError(f"Unable to acquire lock for workbook {source} within {timeout} seconds") from exc
    logger.info("Workbook %s loaded", source)
    return data


__all__ = [
    "COMPETENCIES_SHEET",
    "EMPLOYEES_SHEET",
    "RESPONSES_SHEET",
    "SUPERVISORS_SHEET",
    "SurveyData",
    "ValidationError",
    "load_data",
    "load_locked",
]
