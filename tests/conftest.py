"""Shared fixtures for evalascendente tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
import pytest

from evalascendente.config import AppConfig, load_config
from evalascendente.models import Competency, Response, Supervisor


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers setup_logging attached so tests stay isolated."""
    yield
    logger = logging.getLogger("evalascendente")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def competencies() -> list[Competency]:
    """Three competencies: two explicit, one inferred from its text."""
    return [
        Competency(id="c1", name="Da el ejemplo", criterion_id="liderazgo", order=1),
        Competency(id="c2", name="Toma decisiones", criterion_id="liderazgo", order=2),
        Competency(id="c3", name="Escucha a su equipo", description="Mantiene contacto frecuente", order=3),
    ]


@pytest.fixture
def responses() -> list[Response]:
    """Four responses for two supervisors across two shifts."""
    return [
        Response(evaluator_id="e1", evaluated_id="s1", shift="1", answers={"c1": 5, "c2": 3, "c3": 2}, comment="Muy buen jefe"),
        Response(evaluator_id="e2", evaluated_id="s1", shift="2", answers={"c1": 4, "c3": 3}, comment=""),
        Response(evaluator_id="e3", evaluated_id="s2", shift=None, answers={"c1": 2, "c2": 2, "c3": 1}),
        Response(evaluated_id="s2", shift="1", answers={"c3": 2}, comment="Debe escuchar más"),
    ]


@pytest.fixture
def supervisors() -> list[Supervisor]:
    """Two supervisors of the same department."""
    return [
        Supervisor(id="s1", name="Ana López", position="Supervisor de línea", department="Producción", shift="1"),
        Supervisor(id="s2", name="Luis Pérez", position="Supervisor de turno", department="Producción", shift="2"),
    ]


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Config writing logs and reports under tmp_path."""
    return load_config(
        overrides={
            "workbook_path": str(tmp_path / "evaluaciones.xlsx"),
            "report_path": str(tmp_path / "reports"),
            "log_path": str(tmp_path / "logs" / "evalascendente.log"),
        }
    )


@pytest.fixture
def workbook(tmp_path: Path) -> Path:
    """Survey workbook with every sheet the loader expects."""
    path = tmp_path / "evaluaciones.xlsx"
    competencias = pd.DataFrame(
        [
            {"id": "c1", "nombre": "Da el ejemplo", "descripcion": "", "criterio": "liderazgo", "orden": 2, "nivel": "operativo", "activa": True},
            {"id": "c2", "nombre": "Toma decisiones", "descripcion": "", "criterio": "liderazgo", "orden": 1, "nivel": "operativo", "activa": True},
            {"id": "c3", "nombre": "Escucha a su equipo", "descripcion": "", "criterio": None, "orden": 3, "nivel": "operativo", "activa": True},
            {"id": "c4", "nombre": "Pregunta retirada", "descripcion": "", "criterio": None, "orden": 4, "nivel": "operativo", "activa": False},
            {"id": "c5", "nombre": "Pregunta de gerencia", "descripcion": "", "criterio": None, "orden": 5, "nivel": "gerencial", "activa": True},
        ]
    )
    respuestas = pd.DataFrame(
        [
            {"id": "r1", "encuesta": "2026", "evaluador": "e1", "evaluado": "s1", "departamento": "Producción", "turno": 1, "comentario": "A", "fecha": pd.Timestamp("2026-03-01 09:00"), "c1": 5, "c2": 3, "c3": None},
            {"id": "r2", "encuesta": "2026", "evaluador": "e2", "evaluado": "s1", "departamento": "Producción", "turno": 2, "comentario": None, "fecha": pd.Timestamp("2026-03-02 09:00"), "c1": 4, "c2": None, "c3": None},
            {"id": "r3", "encuesta": "2026", "evaluador": None, "evaluado": "s2", "departamento": "Producción", "turno": None, "comentario": "B", "fecha": pd.Timestamp("2026-03-03 09:00"), "c1": 2, "c2": 2, "c3": 2},
        ]
    )
    supervisores = pd.DataFrame(
        [
            {"id": "s1", "nombre": "Ana López", "puesto": "Supervisor de línea", "departamento": "Producción", "turno": 1, "nivel": "operativo"},
            {"id": "s2", "nombre": "Luis Pérez", "puesto": "Supervisor de turno", "departamento": "Producción", "turno": 2, "nivel": "operativo"},
        ]
    )
    empleados = pd.DataFrame(
        [
            {"id": "e1", "nombre": "Carla", "departamento": "Producción", "turno": 1, "nivel": "operativo"},
            {"id": "e2", "nombre": "Diego", "departamento": "Producción", "turno": 2, "nivel": "operativo"},
            {"id": "e3", "nombre": "Elena", "departamento": "Calidad", "turno": 1, "nivel": "operativo"},
            {"id": "e4", "nombre": "Fabián", "departamento": "Producción", "turno": 1, "nivel": "operativo"},
        ]
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        competencias.to_excel(writer, sheet_name="Competencias", index=False)
        respuestas.to_excel(writer, sheet_name="Respuestas", index=False)
        supervisores.to_excel(writer, sheet_name="Supervisores", index=False)
        empleados.to_excel(writer, sheet_name="Empleados", index=False)
    return path
