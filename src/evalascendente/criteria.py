"""Criterion catalog: the fixed buckets competencies are grouped into."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple

from .config import read_mapping_file

CATEGORIES: Sequence[str] = ("core_12", "additional")

DEFAULT_CRITERION_ID = "resultados_control"
CATALOG_VERSION = "2026.1"


@dataclass(frozen=True)
class Criterion:
    id: str
    name: str
    description: str
    category: str
    icon: str = ""
    color: str = "#3b82f6"


@dataclass(frozen=True)
class TrainingRecommendation:
    title: str
    description: str
    topics: Tuple[str, ...]


DEFAULT_CRITERIA: Tuple[Criterion, ...] = (
    # the "12 points" sub-criteria
    Criterion("resultados_control", "Resultados y Control",
              "Claridad en resultados, indicadores y reportes mensuales del área", "core_12", "📊", "#3b82f6"),
    Criterion("herramientas_trabajo", "Herramientas de Trabajo",
              "Proporciona herramientas adecuadas y simplifica tareas", "core_12", "🔧", "#6366f1"),
    Criterion("objetivos_metas", "Objetivos y Metas",
              "Asigna metas claras, realiza cierres mensuales y planes de trabajo", "core_12", "🎯", "#8b5cf6"),
    Criterion("capacitacion", "Capacitación",
              "Mantiene actualizado y capacitado al personal", "core_12", "📚", "#a855f7"),
    Criterion("productividad", "Productividad",
              "Evalúa y comunica ranking de productividad y avances", "core_12", "📈", "#d946ef"),
    Criterion("reconocimiento", "Reconocimiento",
              "Felicita y reconoce logros del equipo", "core_12", "🏅", "#ec4899"),
    Criterion("comunicacion", "Comunicación",
              "Escucha a su gente y mantiene contacto frecuente", "core_12", "💬", "#f43f5e"),
    Criterion("mejores_practicas", "Mejores Prácticas",
              "Aprovecha expertos y enseña mejores prácticas", "core_12", "⭐", "#f97316"),
    Criterion("cumplimiento", "Cumplimiento",
              "Cumple y hace cumplir políticas y filosofías de la empresa", "core_12", "✅", "#84cc16"),
    Criterion("solucion_problemas", "Solución de Problemas",
              "Permite hacer lo que mejor saben hacer y resuelve problemas", "core_12", "💡", "#22c55e"),
    Criterion("desarrollo", "Desarrollo",
              "Informa sobre oportunidades de crecimiento y apoya el desarrollo", "core_12", "🚀", "#14b8a6"),
    # additional relational categories
    Criterion("nuestras_relaciones", "Nuestras Relaciones",
              "Capacidad de construir y fortalecer relaciones en el equipo", "additional", "🤝", "#06b6d4"),
    Criterion("exitos_compartidos", "Éxitos Compartidos",
              "Fomento del trabajo en equipo y reconocimiento colectivo", "additional", "🏆", "#0ea5e9"),
    Criterion("impulsar", "Impulsar",
              "Motivación y apoyo al desarrollo del equipo", "additional", "🔥", "#f59e0b"),
    Criterion("diversion", "Diversión",
              "Ambiente laboral positivo y entusiasta", "additional", "😊", "#eab308"),
    Criterion("individualidad", "Individualidad",
              "Respeto por la diversidad y personalidad de cada integrante", "additional", "👤", "#10b981"),
    Criterion("liderazgo", "Liderazgo",
              "Cualidades de liderazgo, toma de decisiones y comunicación efectiva", "additional", "👑", "#f59e0b"),
)


def _rec(title: str, description: str, *topics: str) -> TrainingRecommendation:
    return TrainingRecommendation(title=title, description=description, topics=tuple(topics))


DEFAULT_RECOMMENDATIONS: Mapping[str, TrainingRecommendation] = {
    "resultados_control": _rec(
        "Gestión de Resultados", "Mejora en la claridad de resultados e indicadores",
        "Taller de KPIs y métricas de rendimiento", "Curso de reportes mensuales efectivos",
        "Dashboarding y visualización de datos", "Metodología de seguimiento de objetivos OKR",
    ),
    "herramientas_trabajo": _rec(
        "Herramientas de Trabajo", "Optimización de recursos y simplificación de procesos",
        "Gestión eficiente de recursos", "Simplificación de procesos operativos",
        "Taller de productividad personal", "Gestión de herramientas y equipos",
    ),
    "objetivos_metas": _rec(
        "Objetivos y Metas", "Claridad en metas y seguimiento del desempeño",
        "SMART Goals y planificación estratégica", "Cierre de mes efectivo",
        "Planificación semanal y diaria", "Feedback loop con el equipo",
    ),
    "capacitacion": _rec(
        "Desarrollo de Capacidades", "Mantener al equipo actualizado y capacitado",
        "Diseño de programas de capacitación", "Evaluación de necesidades de entrenamiento",
        "Mentoría y transferencia de conocimiento", "Gestión del conocimiento organizacional",
    ),
    "productividad": _rec(
        "Productividad y Desempeño", "Evaluación y mejora de la productividad",
        "Métricas de productividad", "Gestión del tiempo",
        "Ránkings y gamificación productiva", "Mejora continua de procesos",
    ),
    "reconocimiento": _rec(
        "Reconocimiento y Motivación", "Felicitar y reconocer logros del equipo",
        "Programa de reconocimiento laboral", "Feedback positivo y celebración de logros",
        "Motivación de equipos", "Cultura de premios e incentivos",
    ),
    "comunicacion": _rec(
        "Comunicación Efectiva", "Escucha activa y comunicación frecuente",
        "Comunicación asertiva", "Escucha activa",
        "Reuniones efectivas", "Gestión de equipos multiculturales",
    ),
    "mejores_practicas": _rec(
        "Mejores Prácticas", "Compartir conocimiento y experiencia",
        "Comunidades de práctica", "Gestión del conocimiento",
        "Benchmarking interno", "Tutoría y mentoring",
    ),
    "cumplimiento": _rec(
        "Cumplimiento y Políticas", "Asegurar el cumplimiento de políticas",
        "Compliance y ética empresarial", "Gestión de políticas corporativas",
        "Auditoría interna", "Cultura de integridad",
    ),
    "solucion_problemas": _rec(
        "Resolución de Problemas", "Capacidad de resolver obstáculos",
        "Pensamiento analítico", "Toma de decisiones",
        "Gestión de crisis", "Metodología de resolución de problemas",
    ),
    "desarrollo": _rec(
        "Desarrollo Profesional", "Oportunidades de crecimiento del equipo",
        "Plan de carrera", "Desarrollo de liderazgo",
        "Evaluación de potencial", "Gestión de talento",
    ),
    "nuestras_relaciones": _rec(
        "Relaciones en el Equipo", "Construir relaciones sólidas",
        "Trabajo en equipo", "Inteligencia emocional",
        "Gestión de conflictos interpersonales", "Construcción de confianza",
    ),
    "exitos_compartidos": _rec(
        "Éxitos Compartidos", "Fomentar el logro colectivo",
        "Celebración de logros en equipo", "Cultura de colaboración",
        "Gestión de proyectos colaborativos", "Reconocimiento grupal",
    ),
    "impulsar": _rec(
        "Impulso y Motivación", "Motivación y desarrollo del equipo",
        "Liderazgo motivacional", "Coaching para el desarrollo",
        "Gestión del cambio", "Empowerment y autonomía",
    ),
    "diversion": _rec(
        "Ambiente Laboral Positivo", "Crear un ambiente entusiasta",
        "Clima organizacional", "Creatividad e innovación",
        "Gestión del estrés laboral", "Equilibrio vida-trabajo",
    ),
    "individualidad": _rec(
        "Respeto a la Individualidad", "Valorar la diversidad personal",
        "Diversidad e inclusión", "Gestión de personalidades",
        "Respeto y valoración individual", "Personalización del liderazgo",
    ),
    "liderazgo": _rec(
        "Liderazgo Efectivo", "Cualidades de liderazgo",
        "Programa de liderazgo", "Toma de decisiones estratégicas",
        "Comunicación de visión", "Liderazgo por ejemplo",
    ),
}


@dataclass(frozen=True)
class CriteriaCatalog:
    """Read-only criterion enumeration plus its training lookup table.

    Built once and passed explicitly to the classifier and the aggregation
    engine. Enumeration order is significant: it is the ranking tie-break.
    """

    criteria: Tuple[Criterion, ...]
    recommendations: Mapping[str, TrainingRecommendation] = field(default_factory=dict)
    version: str = CATALOG_VERSION
    default_id: str = DEFAULT_CRITERION_ID

    def __post_init__(self) -> None:
        ids = [criterion.id for criterion in self.criteria]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate criterion ids in catalog")
        for criterion in self.criteria:
            if criterion.category not in CATEGORIES:
                raise ValueError(f"Unknown category '{criterion.category}' for criterion {criterion.id}")
        if self.default_id not in ids:
            raise ValueError(f"Default criterion '{self.default_id}' is not part of the catalog")
        object.__setattr__(self, "_by_id", {criterion.id: criterion for criterion in self.criteria})
        object.__setattr__(self, "_positions", {cid: pos for pos, cid in enumerate(ids)})

    def __iter__(self) -> Iterator[Criterion]:
        return iter(self.criteria)

    def __len__(self) -> int:
        return len(self.criteria)

    def __contains__(self, criterion_id: object) -> bool:
        return criterion_id in self._by_id  # type: ignore[attr-defined]

    def ids(self) -> Tuple[str, ...]:
        return tuple(criterion.id for criterion in self.criteria)

    def get(self, criterion_id: str) -> Optional[Criterion]:
        return self._by_id.get(criterion_id)  # type: ignore[attr-defined]

    def index(self, criterion_id: str) -> int:
        return self._positions[criterion_id]  # type: ignore[attr-defined]

    def recommendations_for(self, criterion_id: str) -> Tuple[str, ...]:
        recommendation = self.recommendations.get(criterion_id)
        return recommendation.topics if recommendation else ()


_DEFAULT_CATALOG: Optional[CriteriaCatalog] = None


def default_catalog() -> CriteriaCatalog:
    """Return the built-in catalog (constructed on first use)."""

    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = CriteriaCatalog(
            criteria=DEFAULT_CRITERIA,
            recommendations=dict(DEFAULT_RECOMMENDATIONS),
        )
    return _DEFAULT_CATALOG


def load_catalog(path: str | Path) -> CriteriaCatalog:
    """Load a catalog from YAML or JSON.

    Expected layout::

        version: "2026.1"
        default: resultados_control
        criteria:
          - {id: ..., name: ..., description: ..., category: core_12}
        recommendations:
          capacitacion: {title: ..., description: ..., topics: [...]}
    """

    data = read_mapping_file(Path(path))
    raw_criteria = data.get("criteria")
    if not isinstance(raw_criteria, list) or not raw_criteria:
        raise ValueError("Catalog file must define a non-empty 'criteria' list")

    criteria = []
    for item in raw_criteria:
        if not isinstance(item, Mapping) or not item.get("id"):
            raise ValueError(f"Invalid criterion entry: {item!r}")
        criteria.append(
            Criterion(
                id=str(item["id"]),
                name=str(item.get("name", item["id"])),
                description=str(item.get("description", "")),
                category=str(item.get("category", "core_12")),
                icon=str(item.get("icon", "")),
                color=str(item.get("color", "#3b82f6")),
            )
        )

    recommendations: Dict[str, TrainingRecommendation] = {}
    raw_recs = data.get("recommendations") or {}
    if not isinstance(raw_recs, Mapping):
        raise ValueError("'recommendations' must be a mapping keyed by criterion id")
    for criterion_id, rec in raw_recs.items():
        if not isinstance(rec, Mapping):
            raise ValueError(f"Invalid recommendation entry for {criterion_id}")
        recommendations[str(criterion_id)] = TrainingRecommendation(
            title=str(rec.get("title", "")),
            description=str(rec.get("description", "")),
            topics=tuple(str(topic) for topic in rec.get("topics", []) or []),
        )

    return CriteriaCatalog(
        criteria=tuple(criteria),
        recommendations=recommendations,
        version=str(data.get("version", CATALOG_VERSION)),
        default_id=str(data.get("default", DEFAULT_CRITERION_ID)),
    )


__all__ = [
    "CATEGORIES",
    "CriteriaCatalog",
    "Criterion",
    "DEFAULT_CRITERIA",
    "DEFAULT_CRITERION_ID",
    "DEFAULT_RECOMMENDATIONS",
    "TrainingRecommendation",
    "default_catalog",
    "load_catalog",
]
