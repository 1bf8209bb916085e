"""Aggregation engine: responses -> competency averages -> ranked criteria.

All functions are pure over their inputs. Empty input never raises; it
produces empty collections and a ``0.0`` overall average.

Averages are means of means on purpose: a criterion average gives every
competency under it one vote whatever its response count, and the overall
average gives every criterion one vote whatever its competency count.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from numbers import Real
from statistics import fmean
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .classifier import classify_competency
from .criteria import CriteriaCatalog, Criterion, default_catalog
from .models import Competency, Employee, Response, Supervisor, parse_score
from .status import StatusLevel, classify_status

logger = logging.getLogger("evalascendente.aggregation")

UNKNOWN_SHIFT = "unknown"


@dataclass(frozen=True)
class CompetencyAverage:
    average: float
    count: int


@dataclass(frozen=True)
class CriterionAggregate:
    criterion: Criterion
    average_score: float
    competency_count: int

    @property
    def status(self) -> StatusLevel:
        return classify_status(self.average_score)


def _is_score(value: Any) -> bool:
    return isinstance(value, Real) and parse_score(value) is not None


def compute_competency_averages(
    responses: Iterable[Response],
    competencies: Iterable[Competency],
) -> Dict[str, CompetencyAverage]:
    """Average every competency over the responses that answered it.

    Competencies nobody answered are left out of the result.
    """

    responses = list(responses)
    averages: Dict[str, CompetencyAverage] = {}
    for competency in competencies:
        if competency.id in averages:
            continue
        values = [
            float(value)
            for value in (response.answers.get(competency.id) for response in responses)
            if value is not None and _is_score(value)
        ]
        if values:
            averages[competency.id] = CompetencyAverage(average=fmean(values), count=len(values))
    return averages


def group_by_criterion(
    competencies: Iterable[Competency],
    competency_averages: Mapping[str, CompetencyAverage],
    catalog: Optional[CriteriaCatalog] = None,
) -> Dict[str, CriterionAggregate]:
    """Group competency averages into criteria, in catalog order.

    Criteria without any averaged competency are omitted.
    """

    catalog = catalog or default_catalog()
    buckets: Dict[str, List[float]] = OrderedDict((criterion_id, []) for criterion_id in catalog.ids())
    seen = set()
    for competency in competencies:
        if competency.id in seen:
            continue
        seen.add(competency.id)
        entry = competency_averages.get(competency.id)
        if entry is None:
            continue
        buckets[classify_competency(competency, catalog)].append(entry.average)

    grouped: Dict[str, CriterionAggregate] = {}
    for criterion_id, values in buckets.items():
        if values:
            grouped[criterion_id] = CriterionAggregate(
                criterion=catalog.get(criterion_id),  # type: ignore[arg-type]
                average_score=fmean(values),
                competency_count=len(values),
            )
    return grouped


AggregateInput = Union[Mapping[str, CriterionAggregate], Iterable[CriterionAggregate]]


def _as_list(aggregates: AggregateInput) -> List[CriterionAggregate]:
    if isinstance(aggregates, Mapping):
        return list(aggregates.values())
    return list(aggregates)


def rank_criteria(aggregates: AggregateInput) -> List[CriterionAggregate]:
    """Sort descending by average; ties keep their incoming order."""

    return sorted(_as_list(aggregates), key=lambda item: item.average_score, reverse=True)


def overall_average(aggregates: AggregateInput) -> float:
    items = _as_list(aggregates)
    if not items:
        return 0.0
    return fmean(item.average_score for item in items)


def top_strengths(ranked: Sequence[CriterionAggregate], n: int = 3) -> List[CriterionAggregate]:
    if n <= 0:
        return []
    return list(ranked[:n])


def top_improvement_areas(ranked: Sequence[CriterionAggregate], n: int = 3) -> List[CriterionAggregate]:
    """Lowest ``n`` criteria, weakest first."""

    if n <= 0:
        return []
    return list(reversed(ranked[-n:]))


def extract_comments(responses: Iterable[Response], limit: int = 5) -> List[str]:
    comments: List[str] = []
    if limit <= 0:
        return comments
    for response in responses:
        comment = response.comment
        if comment and comment.strip():
            comments.append(comment.strip())
            if len(comments) >= limit:
                break
    return comments


def group_by_shift(responses: Iterable[Response]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for response in responses:
        label = response.shift or UNKNOWN_SHIFT
        counts[label] = counts.get(label, 0) + 1
    return counts


def _criterion_record(item: CriterionAggregate, catalog: CriteriaCatalog) -> Dict[str, Any]:
    status = item.status
    return {
        "id": item.criterion.id,
        "name": item.criterion.name,
        "description": item.criterion.description,
        "category": item.criterion.category,
        "icon": item.criterion.icon,
        "color": item.criterion.color,
        "average": item.average_score,
        "competency_count": item.competency_count,
        "status": status.label,
        "status_display": status.display,
        "recommendations": list(catalog.recommendations_for(item.criterion.id)),
    }


@dataclass(frozen=True)
class AggregationResult:
    """Outcome of one aggregation run; plain data, safe to hand to any renderer."""

    target: Optional[str]
    total_responses: int
    evaluated_count: int
    competency_averages: Mapping[str, CompetencyAverage]
    competency_names: Mapping[str, str]
    criteria: List[CriterionAggregate]
    overall_average: float
    strengths: List[CriterionAggregate]
    improvement_areas: List[CriterionAggregate]
    comments: List[str]
    by_shift: Mapping[str, int]
    catalog: CriteriaCatalog = field(default_factory=default_catalog, repr=False, compare=False)

    @property
    def has_data(self) -> bool:
        return bool(self.criteria)

    @property
    def overall_status(self) -> Optional[StatusLevel]:
        return classify_status(self.overall_average) if self.has_data else None

    def to_dict(self) -> Dict[str, Any]:
        status = self.overall_status
        return {
            "target": self.target,
            "catalog_version": self.catalog.version,
            "has_data": self.has_data,
            "total_responses": self.total_responses,
            "evaluated_count": self.evaluated_count,
            "overall_average": self.overall_average,
            "overall_status": status.label if status else None,
            "overall_status_display": status.display if status else None,
            "criteria": [_criterion_record(item, self.catalog) for item in self.criteria],
            "strengths": [_criterion_record(item, self.catalog) for item in self.strengths],
            "improvement_areas": [_criterion_record(item, self.catalog) for item in self.improvement_areas],
            "competencies": {
                competency_id: {
                    "name": self.competency_names.get(competency_id, competency_id),
                    "average": entry.average,
                    "count": entry.count,
                }
                for competency_id, entry in self.competency_averages.items()
            },
            "comments": list(self.comments),
            "by_shift": dict(self.by_shift),
        }


def aggregate(
    responses: Iterable[Response],
    competencies: Iterable[Competency],
    catalog: Optional[CriteriaCatalog] = None,
    top_n: int = 3,
    comment_limit: int = 5,
    target: Optional[str] = None,
) -> AggregationResult:
    """Run the full pipeline over one snapshot of responses and competencies."""

    catalog = catalog or default_catalog()
    responses = list(responses)
    competencies = list(competencies)

    competency_averages = compute_competency_averages(responses, competencies)
    grouped = group_by_criterion(competencies, competency_averages, catalog)
    ranked = rank_criteria(grouped)

    result = AggregationResult(
        target=target,
        total_responses=len(responses),
        evaluated_count=len({response.evaluated_id for response in responses}),
        competency_averages=competency_averages,
        competency_names={competency.id: competency.name or competency.id for competency in competencies},
        criteria=ranked,
        overall_average=overall_average(ranked),
        strengths=top_strengths(ranked, top_n),
        improvement_areas=top_improvement_areas(ranked, top_n),
        comments=extract_comments(responses, comment_limit),
        by_shift=group_by_shift(responses),
        catalog=catalog,
    )
    logger.debug(
        "Aggregated %d responses for %s: %d criteria, overall %.2f",
        result.total_responses,
        target or "all",
        len(ranked),
        result.overall_average,
    )
    return result


@dataclass(frozen=True)
class EvaluatedSummary:
    supervisor: Supervisor
    total_responses: int
    overall_average: float

    @property
    def status(self) -> Optional[StatusLevel]:
        return classify_status(self.overall_average) if self.total_responses else None

    def to_dict(self) -> Dict[str, Any]:
        status = self.status
        return {
            "id": self.supervisor.id,
            "name": self.supervisor.name,
            "department": self.supervisor.department,
            "shift": self.supervisor.shift,
            "total_responses": self.total_responses,
            "overall_average": self.overall_average,
            "status": status.label if status else None,
        }


def summarize_by_evaluated(
    responses: Iterable[Response],
    competencies: Iterable[Competency],
    supervisors: Iterable[Supervisor],
    catalog: Optional[CriteriaCatalog] = None,
) -> List[EvaluatedSummary]:
    """One consolidated row per supervisor, in the given supervisor order."""

    catalog = catalog or default_catalog()
    responses = list(responses)
    competencies = list(competencies)
    by_evaluated: Dict[str, List[Response]] = {}
    for response in responses:
        by_evaluated.setdefault(response.evaluated_id, []).append(response)

    rows: List[EvaluatedSummary] = []
    for supervisor in supervisors:
        own = by_evaluated.get(supervisor.id, [])
        average = 0.0
        if own:
            averages = compute_competency_averages(own, competencies)
            average = overall_average(group_by_criterion(competencies, averages, catalog))
        rows.append(EvaluatedSummary(supervisor=supervisor, total_responses=len(own), overall_average=average))
    return rows


def filter_supervisors(
    supervisors: Iterable[Supervisor],
    department: Optional[str] = None,
    shift: Optional[str] = None,
) -> List[Supervisor]:
    selected = []
    for supervisor in supervisors:
        if department and supervisor.department != department:
            continue
        if shift and supervisor.shift != str(shift):
            continue
        selected.append(supervisor)
    return selected


@dataclass(frozen=True)
class CompletionProgress:
    total: int
    completed: int
    pending: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "pending": self.pending,
            "percentage": self.percentage,
        }


def completion_progress(
    employees: Iterable[Employee],
    responses: Iterable[Response],
    department: Optional[str] = None,
    shift: Optional[str] = None,
) -> CompletionProgress:
    """How many employees already submitted at least one evaluation."""

    evaluators = {response.evaluator_id for response in responses if response.evaluator_id}
    selected = filter_supervisors(employees, department=department, shift=shift)
    total = len(selected)
    completed = sum(1 for employee in selected if employee.id in evaluators)
    percentage = round(completed / total * 100, 1) if total else 0.0
    return CompletionProgress(total=total, completed=completed, pending=total - completed, percentage=percentage)


__all__ = [
    "AggregationResult",
    "CompetencyAverage",
    "CompletionProgress",
    "CriterionAggregate",
    "EvaluatedSummary",
    "UNKNOWN_SHIFT",
    "aggregate",
    "completion_progress",
    "compute_competency_averages",
    "extract_comments",
    "filter_supervisors",
    "group_by_criterion",
    "group_by_shift",
    "overall_average",
    "rank_criteria",
    "summarize_by_evaluated",
    "top_improvement_areas",
    "top_strengths",
]
