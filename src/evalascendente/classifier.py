"""Map competency text to exactly one criterion id.

Two ordered rule chains are kept:

* ``POINT_RULES`` handle the legacy single "point" labels of the question
  bank: short category labels are matched exactly first, then the long
  "12 points" statements are matched by distinctive phrases.
* ``COMPETENCY_RULES`` handle competencies created by HR, matched by keyword
  over ``name + " " + description``.

Rules are evaluated top to bottom and the first match wins. Text that no
rule matches lands in the catalog default criterion.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .criteria import CriteriaCatalog, default_catalog
from .models import Competency

logger = logging.getLogger("evalascendente.classifier")

Predicate = Callable[[str], bool]


@dataclass(frozen=True)
class Rule:
    predicate: Predicate
    criterion_id: str
    name: str = ""

    def matches(self, text: str) -> bool:
        return self.predicate(text)


def exact_label(label: str) -> Predicate:
    expected = label.lower()
    return lambda text: text == expected


def any_keyword(*keywords: str) -> Predicate:
    return lambda text: any(keyword in text for keyword in keywords)


def all_keywords(*keywords: str) -> Predicate:
    return lambda text: all(keyword in text for keyword in keywords)


POINT_RULES: Sequence[Rule] = (
    Rule(exact_label("nuestras relaciones"), "nuestras_relaciones", "label"),
    Rule(exact_label("éxitos compartidos"), "exitos_compartidos", "label"),
    Rule(exact_label("impulsar"), "impulsar", "label"),
    Rule(exact_label("diversión"), "diversion", "label"),
    Rule(exact_label("individualidad"), "individualidad", "label"),
    Rule(exact_label("liderazgo"), "liderazgo", "label"),
    Rule(any_keyword("perfeccionista", "indicadores por persona"), "resultados_control", "point 1"),
    Rule(any_keyword("simplifica las tareas", "herramientas adecuadas"), "herramientas_trabajo", "point 2"),
    Rule(any_keyword("objetivos y metas", "cierre de mes"), "objetivos_metas", "point 3"),
    Rule(any_keyword("nunca deja de estudiar", "capacitado a todo su personal"), "capacitacion", "point 4"),
    Rule(any_keyword("califica periódicamente", "más al menos productivo"), "productividad", "point 5"),
    Rule(any_keyword("zanahorias", "reconoce el esfuerzo"), "reconocimiento", "point 6"),
    Rule(any_keyword("tiempo necesario para escuchar", "inquietudes de su primer nivel"), "comunicacion", "point 7"),
    Rule(any_keyword("aprovecha a los expertos", "clones"), "mejores_practicas", "point 8"),
    Rule(any_keyword("cumplir y hacer cumplir", "puntos de gestión"), "cumplimiento", "point 9"),
    Rule(any_keyword("hacer diario lo que mejor sabe hacer", "alternativas de solución"), "solucion_problemas", "point 10"),
    Rule(any_keyword("plan de crecimiento", "escalafón"), "desarrollo", "point 11"),
    Rule(any_keyword("impecable en su actuación", "bienestar del grupo"), "liderazgo", "point 12"),
)

COMPETENCY_RULES: Sequence[Rule] = (
    # additional categories
    Rule(all_keywords("relacion", "equipo"), "nuestras_relaciones"),
    Rule(any_keyword("éxito", "nosotros"), "exitos_compartidos"),
    Rule(any_keyword("impulsa", "confía"), "impulsar"),
    Rule(any_keyword("sonríe", "alegría", "entusiasmo"), "diversion"),
    Rule(any_keyword("individual", "personalidad", "orgullo"), "individualidad"),
    Rule(any_keyword("ejemplo", "lider", "decisiones", "inspira"), "liderazgo"),
    # 12 points sub-criteria
    Rule(any_keyword("resultado", "indicador"), "resultados_control"),
    Rule(any_keyword("herramienta", "simple"), "herramientas_trabajo"),
    Rule(any_keyword("objetivo", "meta", "cierre"), "objetivos_metas"),
    Rule(any_keyword("capacita", "curso", "actualiz"), "capacitacion"),
    Rule(any_keyword("productiv", "ranking", "avance"), "productividad"),
    Rule(any_keyword("felicit", "reconoc", "logro"), "reconocimiento"),
    Rule(any_keyword("escucha", "contacto", "reun"), "comunicacion"),
    Rule(any_keyword("tutor", "clon", "práctica"), "mejores_practicas"),
    Rule(any_keyword("cumpl", "política", "filosofía"), "cumplimiento"),
    Rule(any_keyword("libertad", "problema", "solucio"), "solucion_problemas"),
    Rule(any_keyword("crecimiento", "oportunidad", "desarrollo"), "desarrollo"),
)


def _normalize(text: Optional[str]) -> str:
    return (text or "").lower().strip()


def _first_match(rules: Sequence[Rule], text: str, catalog: CriteriaCatalog) -> str:
    if text:
        for rule in rules:
            if rule.criterion_id in catalog and rule.matches(text):
                return rule.criterion_id
    return catalog.default_id


def classify_point(text: Optional[str], catalog: Optional[CriteriaCatalog] = None) -> str:
    """Classify a legacy question-bank "point" label."""

    return _first_match(POINT_RULES, _normalize(text), catalog or default_catalog())


def classify_text(text: Optional[str], catalog: Optional[CriteriaCatalog] = None) -> str:
    """Classify free competency text (name and description joined)."""

    return _first_match(COMPETENCY_RULES, _normalize(text), catalog or default_catalog())


def classify_competency(competency: Competency, catalog: Optional[CriteriaCatalog] = None) -> str:
    """Return the criterion a competency belongs to.

    An explicit ``criterion_id`` known to the catalog wins; anything else is
    inferred from the competency text.
    """

    catalog = catalog or default_catalog()
    explicit = competency.criterion_id
    if explicit:
        if explicit in catalog:
            return explicit
        logger.warning(
            "Competency %s references unknown criterion '%s'; inferring from text",
            competency.id,
            explicit,
        )

    criterion_id = classify_text(f"{competency.name} {competency.description}", catalog)
    if criterion_id == catalog.default_id:
        logger.debug("Competency %s classified into default criterion %s", competency.id, criterion_id)
    return criterion_id


__all__ = [
    "all_keywords",
    "any_keyword",
    "COMPETENCY_RULES",
    "exact_label",
    "POINT_RULES",
    "Rule",
    "classify_competency",
    "classify_point",
    "classify_text",
]
