"""Validated records crossing the store boundary."""
from __future__ import annotations

import logging
import math
from datetime import datetime
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger("evalascendente.models")

SCORE_MIN = 1
SCORE_MAX = 5


def parse_score(value: Any) -> Optional[int]:
    """Return ``value`` as an integer score in 1..5, or None when malformed."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, Real):
        return None
    number = float(value)
    if math.isnan(number) or not number.is_integer():
        return None
    score = int(number)
    if SCORE_MIN <= score <= SCORE_MAX:
        return score
    return None


def _label(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            value = int(value)
    text = str(value).strip()
    return text or None


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Competency(_Record):
    id: str
    name: str = ""
    description: str = ""
    criterion_id: Optional[str] = None
    order: int = 0
    level: Optional[str] = None
    active: bool = True

    @field_validator("name", "description", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> str:
        return _label(value) or ""

    @field_validator("id", "criterion_id", "level", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return _label(value)

    @field_validator("order", mode="before")
    @classmethod
    def _order(cls, value: Any) -> int:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return 0
        return value

    @field_validator("active", mode="before")
    @classmethod
    def _active(cls, value: Any) -> Any:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return True
        if isinstance(value, str) and value.strip().lower() in {"sí", "si", "x"}:
            return True
        return value


class Response(_Record):
    """One survey submission.

    ``answers`` only ever holds integer scores in 1..5; anything else found in
    the raw record is dropped while parsing.
    """

    id: Optional[str] = None
    survey_id: Optional[str] = None
    evaluator_id: Optional[str] = None
    evaluated_id: str
    department: Optional[str] = None
    shift: Optional[str] = None
    answers: Dict[str, int] = {}
    comment: Optional[str] = None
    submitted_at: Optional[datetime] = None

    @field_validator("id", "survey_id", "evaluator_id", "department", "shift", "comment", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return _label(value)

    @field_validator("evaluated_id", mode="before")
    @classmethod
    def _required_text(cls, value: Any) -> Any:
        return _label(value)

    @field_validator("submitted_at", mode="before")
    @classmethod
    def _timestamp(cls, value: Any) -> Any:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return None
        if hasattr(value, "to_pydatetime"):
            if str(value) == "NaT":
                return None
            return value.to_pydatetime()
        return value

    @field_validator("answers", mode="before")
    @classmethod
    def _answers(cls, value: Any) -> Dict[str, int]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("answers must be a mapping of competency id to score")
        answers: Dict[str, int] = {}
        dropped: List[str] = []
        for key, raw in value.items():
            score = parse_score(raw)
            if score is None:
                # blank cells are simply unanswered, not malformed
                if raw is not None and not (isinstance(raw, float) and math.isnan(raw)):
                    dropped.append(str(key))
                continue
            answers[str(key)] = score
        if dropped:
            logger.warning("Malformed answers dropped for competencies: %s", ", ".join(dropped))
        return answers


class Supervisor(_Record):
    id: str
    name: str = ""
    position: str = ""
    department: str = ""
    shift: Optional[str] = None
    level: Optional[str] = None

    @field_validator("name", "position", "department", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> str:
        return _label(value) or ""

    @field_validator("id", "shift", "level", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return _label(value)


class Employee(Supervisor):
    pass


def _parse_many(model: type, records: Iterable[Mapping[str, Any]]) -> list:
    parsed = []
    for position, record in enumerate(records):
        try:
            parsed.append(model.model_validate(dict(record)))
        except ValidationError as exc:
            logger.warning(
                "Skipping invalid %s record #%d: %s",
                model.__name__,
                position,
                exc.errors()[0].get("msg", exc),
            )
    return parsed


def parse_responses(records: Iterable[Mapping[str, Any]]) -> List[Response]:
    return _parse_many(Response, records)


def parse_competencies(records: Iterable[Mapping[str, Any]]) -> List[Competency]:
    return _parse_many(Competency, records)


def parse_supervisors(records: Iterable[Mapping[str, Any]]) -> List[Supervisor]:
    return _parse_many(Supervisor, records)


def parse_employees(records: Iterable[Mapping[str, Any]]) -> List[Employee]:
    return _parse_many(Employee, records)


__all__ = [
    "Competency",
    "Employee",
    "Response",
    "SCORE_MAX",
    "SCORE_MIN",
    "Supervisor",
    "parse_competencies",
    "parse_employees",
    "parse_responses",
    "parse_score",
    "parse_supervisors",
]
