"""Report orchestration: load, aggregate, render and export."""
from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from .aggregation import AggregationResult, EvaluatedSummary, aggregate, summarize_by_evaluated
from .config import AppConfig
from .criteria import CriteriaCatalog, default_catalog, load_catalog
from .loader import SurveyData, ValidationError, load_locked
from .models import Supervisor
from .pdf import build_consolidated_pdf, build_supervisor_pdf

logger = logging.getLogger("evalascendente.report")

CONSOLIDATED = "Consolidado"

Renderer = Callable[..., None]


class ReportRenderError(RuntimeError):
    """Raised when a report could not be rendered.

    The aggregation result is attached untouched so rendering can be retried
    without recomputing it.
    """

    def __init__(self, message: str, result: AggregationResult):
        super().__init__(message)
        self.result = result


@dataclass(frozen=True)
class ReportBundle:
    result: AggregationResult
    supervisor: Optional[Supervisor] = None
    rows: List[EvaluatedSummary] = field(default_factory=list)
    outputs: List[Path] = field(default_factory=list)

    @property
    def consolidated(self) -> bool:
        return self.supervisor is None


def resolve_catalog(config: AppConfig) -> CriteriaCatalog:
    if config.catalog_path:
        return load_catalog(config.catalog_path)
    return default_catalog()


def build_report(
    data: SurveyData,
    config: AppConfig,
    evaluated_id: Optional[str] = None,
    catalog: Optional[CriteriaCatalog] = None,
) -> ReportBundle:
    """Aggregate one supervisor (or everyone when ``evaluated_id`` is None)."""

    catalog = catalog or resolve_catalog(config)
    competencies = data.competencies_for(config.level)

    if evaluated_id is not None:
        supervisor = data.supervisor(evaluated_id)
        if supervisor is None:
            raise ValidationError(f"Unknown supervisor id: {evaluated_id}")
        result = aggregate(
            data.responses_for(evaluated_id),
            competencies,
            catalog=catalog,
            top_n=config.top_n,
            comment_limit=config.comment_limit,
            target=supervisor.name or supervisor.id,
        )
        return ReportBundle(result=result, supervisor=supervisor)

    result = aggregate(
        data.responses,
        competencies,
        catalog=catalog,
        top_n=config.top_n,
        comment_limit=config.comment_limit,
        target=CONSOLIDATED,
    )
    rows = summarize_by_evaluated(data.responses, competencies, data.supervisors, catalog)
    return ReportBundle(result=result, rows=rows)


def _slug(text: str) -> str:
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^A-Za-z0-9]+", "_", ascii_text).strip("_") or "Reporte"


def _today(config: AppConfig) -> str:
    return datetime.now(tz=config.timezone).strftime("%Y-%m-%d")


def render_report(
    result: AggregationResult,
    output_dir: str | Path,
    config: AppConfig,
    supervisor: Optional[Supervisor] = None,
    rows: Optional[Sequence[EvaluatedSummary]] = None,
    renderer: Optional[Renderer] = None,
) -> Path:
    """Render ``result`` to ``Reporte_<Target>_<YYYY-MM-DD>.pdf`` in ``output_dir``."""

    report_dir = Path(output_dir)
    report_dir.mkdir(parents=True, exist_ok=True)
    target = result.target or (supervisor.name if supervisor else CONSOLIDATED)
    report_file = report_dir / f"Reporte_{_slug(target)}_{_today(config)}.pdf"

    payload = result.to_dict()
    try:
        with report_file.open("wb") as buffer:
            if supervisor is not None or rows is None:
                render = renderer or build_supervisor_pdf
                render(
                    buffer,
                    payload,
                    supervisor=supervisor.model_dump() if supervisor else None,
                    company=config.company_name,
                )
            else:
                render = renderer or build_consolidated_pdf
                render(buffer, [row.to_dict() for row in rows], payload, company=config.company_name)
    except Exception as exc:
        report_file.unlink(missing_ok=True)
        logger.error("Failed to render report for %s: %s", target, exc)
        raise ReportRenderError(f"Unable to render report for {target}: {exc}", result) from exc

    logger.info("PDF report written to %s", report_file)
    return report_file


def criteria_frame(result: AggregationResult) -> pd.DataFrame:
    records: List[Dict[str, Any]] = []
    for position, item in enumerate(result.to_dict()["criteria"], start=1):
        records.append(
            {
                "Posicion": position,
                "Criterio": item["name"],
                "Categoria": item["category"],
                "Promedio": round(item["average"], 2),
                "Competencias": item["competency_count"],
                "Nivel": item["status_display"],
            }
        )
    return pd.DataFrame(records, columns=["Posicion", "Criterio", "Categoria", "Promedio", "Competencias", "Nivel"])


def _export_tables(bundle: ReportBundle, report_dir: Path, stem: str, config: AppConfig) -> List[Path]:
    written: List[Path] = []
    criteria = criteria_frame(bundle.result)
    supervisors = pd.DataFrame([row.to_dict() for row in bundle.rows])

    if config.excel_export:
        excel_file = report_dir / f"{stem}.xlsx"
        with pd.ExcelWriter(excel_file, engine="openpyxl") as writer:
            criteria.to_excel(writer, sheet_name="Criterios", index=False)
            if not supervisors.empty:
                supervisors.to_excel(writer, sheet_name="Supervisores", index=False)
        logger.info("Excel report written to %s", excel_file)
        written.append(excel_file)

    if config.csv_export:
        csv_file = report_dir / f"{stem}_Criterios.csv"
        criteria.to_csv(csv_file, index=False, encoding="utf-8-sig")
        logger.info("CSV report written to %s", csv_file)
        written.append(csv_file)

    return written


def export_report(
    workbook_path: str | Path,
    output_path: str | Path,
    config: AppConfig,
    evaluated_id: Optional[str] = None,
) -> ReportBundle:
    """High-level helper that loads data, renders the PDF and exports tables."""

    data = load_locked(workbook_path, timeout=config.lock_timeout)
    bundle = build_report(data, config, evaluated_id=evaluated_id)

    pdf_file = render_report(
        bundle.result,
        output_path,
        config,
        supervisor=bundle.supervisor,
        rows=None if bundle.supervisor else bundle.rows,
    )
    outputs = [pdf_file] + _export_tables(bundle, pdf_file.parent, pdf_file.stem, config)
    return ReportBundle(result=bundle.result, supervisor=bundle.supervisor, rows=bundle.rows, outputs=outputs)


__all__ = [
    "CONSOLIDATED",
    "ReportBundle",
    "ReportRenderError",
    "build_report",
    "criteria_frame",
    "export_report",
    "render_report",
    "resolve_catalog",
]
