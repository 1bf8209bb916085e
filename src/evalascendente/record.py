"""Utilities for appending new survey responses to the workbook."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
from filelock import FileLock, Timeout

from .loader import RESPONSES_SHEET, ValidationError
from .models import Response

logger = logging.getLogger("evalascendente.record")


def _row(response: Response, submitted_at: datetime) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "id": response.id,
        "encuesta": response.survey_id,
        "evaluador": response.evaluator_id,
        "evaluado": response.evaluated_id,
        "departamento": response.department,
        "turno": response.shift,
        "comentario": response.comment,
        "fecha": submitted_at,
    }
    row.update(response.answers)
    return row


def record_response(
    workbook_path: str | Path,
    response: Response,
    timeout: float = 30.0,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Append a response to the Respuestas sheet and return the written row.

    Other sheets are preserved. Answer columns missing from the sheet are
    added; the evaluator column stays blank for anonymous submissions.
    """

    path = Path(workbook_path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")

    submitted_at = response.submitted_at or now or datetime.now()
    if submitted_at.tzinfo is not None:
        # openpyxl cannot store aware datetimes
        submitted_at = submitted_at.replace(tzinfo=None)
    new_row = _row(response, submitted_at)

    lock = FileLock(str(path) + ".lock", timeout=timeout)
    try:
        with lock:
            excel = pd.ExcelFile(path)
            sheets = {name: excel.parse(name) for name in excel.sheet_names}
            responses = sheets.get(RESPONSES_SHEET)
            if responses is None:
                raise ValidationError(f"Workbook missing '{RESPONSES_SHEET}' sheet")
            # pandas reads numeric headers back as ints; answer keys are strings
            responses.columns = [str(column).strip() for column in responses.columns]

            updated = pd.concat([responses, pd.DataFrame([new_row])], ignore_index=True)
            sheets[RESPONSES_SHEET] = updated

            with pd.ExcelWriter(path, engine="openpyxl", mode="w") as writer:
                for sheet_name, df in sheets.items():
                    df.to_excel(writer, sheet_name=sheet_name, index=False)
    except Timeout as exc:
        raise TimeoutError(
            f"Unable to acquire lock for workbook {path} within {timeout} seconds"
        ) from exc

    logger.info(
        "Response recorded for evaluated=%s with %d answers",
        response.evaluated_id,
        len(response.answers),
    )
    return new_row


__all__ = ["record_response"]
