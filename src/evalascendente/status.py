"""Map numeric averages on the 1..5 scale to display statuses."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class StatusLevel:
    key: str
    label: str
    display: str
    background: str
    text: str


# (lower bound inclusive, level); evaluated top to bottom
STATUS_LEVELS: Sequence[Tuple[float, StatusLevel]] = (
    (4.5, StatusLevel("excellent", "Excellent", "Excelente", "#d1fae5", "#065f46")),
    (4.0, StatusLevel("good", "Good", "Bueno", "#dbeafe", "#1e40af")),
    (3.0, StatusLevel("regular", "Regular", "Regular", "#fef3c7", "#92400e")),
    (2.0, StatusLevel("needs_improvement", "Needs improvement", "Necesita mejora", "#fee2e2", "#991b1b")),
)
CRITICAL = StatusLevel("critical", "Critical", "Crítico", "#fecaca", "#7f1d1d")

SUCCESS = "#10b981"
WARNING = "#f59e0b"
DANGER = "#ef4444"


@dataclass(frozen=True)
class TrafficLight:
    key: str
    label: str
    color: str


def classify_status(average: float) -> StatusLevel:
    for threshold, level in STATUS_LEVELS:
        if average >= threshold:
            return level
    return CRITICAL


def status_label(average: float) -> str:
    return classify_status(average).label


def traffic_light(average: float) -> TrafficLight:
    """Three-level indicator used next to single scores."""

    if average < 3.0:
        return TrafficLight("danger", "Riesgo", DANGER)
    if average < 4.0:
        return TrafficLight("warning", "Área de mejora", WARNING)
    return TrafficLight("success", "Fortaleza", SUCCESS)


def bar_color(average: float) -> str:
    return traffic_light(average).color


__all__ = [
    "CRITICAL",
    "STATUS_LEVELS",
    "StatusLevel",
    "TrafficLight",
    "bar_color",
    "classify_status",
    "status_label",
    "traffic_light",
]
