"""reportlab renderers for supervisor and consolidated reports.

Both builders only read the plain structure produced by
``AggregationResult.to_dict()``.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import (
    Flowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from .status import bar_color, classify_status

PRIMARY = "#1E40AF"
BORDER = "#CBD5E1"
MAX_PDF_COMMENTS = 3
SCALE_MAX = 5.0


class CriterionBars(Flowable):
    """Horizontal bar per criterion on the 0..5 scale."""

    row_height = 18
    label_width = 170

    def __init__(self, criteria: Sequence[Dict[str, Any]], width: float = 520):
        super().__init__()
        self.criteria = list(criteria)
        self.width = width
        self.height = max(1, len(self.criteria)) * self.row_height + 6

    def draw(self):
        c = self.canv
        bar_space = self.width - self.label_width - 40
        y = self.height - self.row_height
        for item in self.criteria:
            average = float(item.get("average", 0) or 0)
            c.setFillColor(colors.HexColor("#0F172A"))
            c.setFont("Helvetica", 8)
            c.drawString(0, y + 5, str(item.get("name", ""))[:38])
            c.setFillColor(colors.HexColor("#E2E8F0"))
            c.rect(self.label_width, y + 3, bar_space, 10, stroke=0, fill=1)
            c.setFillColor(colors.HexColor(bar_color(average)))
            c.rect(self.label_width, y + 3, bar_space * min(average, SCALE_MAX) / SCALE_MAX, 10, stroke=0, fill=1)
            c.setFillColor(colors.HexColor("#0F172A"))
            c.setFont("Helvetica-Bold", 8)
            c.drawRightString(self.width, y + 5, f"{average:.2f}")
            y -= self.row_height


class _NumberedCanvas(pdf_canvas.Canvas):
    """Canvas that knows the page total when drawing footers."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_pages: List[Dict[str, Any]] = []

    def showPage(self):
        self._saved_pages.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_pages)
        for state in self._saved_pages:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        w, _ = letter
        self.saveState()
        self.setFillColor(colors.HexColor("#0F172A"))
        self.rect(16, 16, w - 32, 16, stroke=0, fill=1)
        self.setFillColor(colors.white)
        self.setFont("Helvetica", 8)
        self.drawString(24, 22, f"Evaluación ascendente · {date.today().isoformat()}")
        self.drawRightString(w - 24, 22, f"Página {self._pageNumber} de {total}")
        self.restoreState()


def _on_page(canvas, doc_obj):
    w, h = letter
    canvas.saveState()
    canvas.setStrokeColor(colors.HexColor(BORDER))
    canvas.setLineWidth(1)
    canvas.rect(16, 16, w - 32, h - 32, stroke=1, fill=0)
    canvas.restoreState()


def _header_bar(text: str, color_hex: str = PRIMARY) -> Table:
    t = Table([[text]], colWidths=[520], rowHeights=[20])
    t.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor(color_hex)),
                ("TEXTCOLOR", (0, 0), (-1, -1), colors.white),
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 11),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return t


def _grid_table(rows: List[List[Any]], col_widths: Sequence[float], extra: Sequence[Any] = ()) -> Table:
    table = Table(rows, colWidths=list(col_widths), repeatRows=1)
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(PRIMARY)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor(BORDER)),
        ("FONTSIZE", (0, 1), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.HexColor("#F8FAFC"), colors.white]),
    ]
    table.setStyle(TableStyle(style + list(extra)))
    return table


def _styles() -> Dict[str, ParagraphStyle]:
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("title", parent=styles["Title"], fontSize=18, textColor=colors.HexColor(PRIMARY)),
        "h2": ParagraphStyle("h2", parent=styles["Heading2"], fontSize=13, leading=17, textColor=colors.HexColor("#0F172A")),
        "body": ParagraphStyle("body", parent=styles["BodyText"], fontSize=10, leading=14, textColor=colors.HexColor("#1E293B")),
        "muted": ParagraphStyle("muted", parent=styles["BodyText"], fontSize=9, textColor=colors.HexColor("#64748B")),
    }


def _status_cell(average: float) -> str:
    return classify_status(average).display


def _document(buffer, title: str) -> SimpleDocTemplate:
    return SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=36,
        rightMargin=36,
        topMargin=36,
        bottomMargin=44,
        title=title,
    )


def _no_data(story: List[Any], s: Dict[str, ParagraphStyle]) -> None:
    story.append(Paragraph("No hay evaluaciones suficientes para generar este reporte.", s["body"]))


def build_supervisor_pdf(
    buffer,
    result: Dict[str, Any],
    supervisor: Optional[Dict[str, Any]] = None,
    company: str = "VINOPLASTIC",
) -> None:
    supervisor = supervisor or {}
    name = supervisor.get("name") or result.get("target") or "Supervisor"
    doc = _document(buffer, f"Reporte de evaluación - {name}")
    s = _styles()
    story: List[Any] = []

    story.append(Paragraph(escape(company), s["title"]))
    story.append(Paragraph("Reporte de evaluación ascendente", s["h2"]))
    story.append(Paragraph(f"<b>Supervisor:</b> {escape(str(name))}", s["body"]))
    if supervisor.get("position"):
        story.append(Paragraph(f"<b>Puesto:</b> {escape(supervisor['position'])}", s["body"]))
    if supervisor.get("department"):
        story.append(Paragraph(f"<b>Departamento:</b> {escape(supervisor['department'])}", s["body"]))
    story.append(Spacer(1, 10))

    story.append(_header_bar("Resumen ejecutivo", "#0F766E"))
    story.append(Spacer(1, 8))
    if not result.get("has_data"):
        _no_data(story, s)
        doc.build(story, onFirstPage=_on_page, onLaterPages=_on_page, canvasmaker=_NumberedCanvas)
        return

    overall = float(result.get("overall_average", 0) or 0)
    cards = [
        ["Evaluaciones", "Promedio general", "Escala"],
        [str(result.get("total_responses", 0)), f"{overall:.2f}", "1 - 5"],
    ]
    story.append(
        _grid_table(
            cards,
            [173, 174, 173],
            [
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("FONTSIZE", (0, 1), (-1, 1), 14),
                ("TEXTCOLOR", (1, 1), (1, 1), colors.HexColor(bar_color(overall))),
            ],
        )
    )
    story.append(Paragraph(f"Nivel: {escape(str(result.get('overall_status_display') or ''))}", s["muted"]))
    story.append(Spacer(1, 10))

    by_shift = result.get("by_shift") or {}
    if by_shift:
        story.append(Paragraph("Evaluaciones por turno", s["h2"]))
        rows = [["Turno", "Evaluaciones"]] + [[str(label), str(count)] for label, count in by_shift.items()]
        story.append(_grid_table(rows, [260, 260]))
        story.append(Spacer(1, 10))

    story.append(_header_bar("Resultados por criterio"))
    story.append(Spacer(1, 8))
    story.append(CriterionBars(result.get("criteria", [])))
    story.append(Spacer(1, 12))

    story.append(Paragraph("Fortalezas", s["h2"]))
    for item in result.get("strengths", []):
        story.append(Paragraph(f"- {escape(item['name'])} ({item['average']:.2f})", s["body"]))
    story.append(Spacer(1, 6))
    story.append(Paragraph("Áreas de mejora", s["h2"]))
    for item in result.get("improvement_areas", []):
        story.append(Paragraph(f"- {escape(item['name'])} ({item['average']:.2f})", s["body"]))

    comments = result.get("comments", [])[:MAX_PDF_COMMENTS]
    if comments:
        story.append(Spacer(1, 10))
        story.append(_header_bar("Comentarios anónimos", "#475569"))
        story.append(Spacer(1, 6))
        for comment in comments:
            story.append(Paragraph(f"“{escape(comment)}”", s["body"]))
            story.append(Spacer(1, 4))

    doc.build(story, onFirstPage=_on_page, onLaterPages=_on_page, canvasmaker=_NumberedCanvas)


def build_consolidated_pdf(
    buffer,
    rows: Sequence[Dict[str, Any]],
    result: Dict[str, Any],
    company: str = "VINOPLASTIC",
) -> None:
    doc = _document(buffer, "Reporte consolidado de evaluación ascendente")
    s = _styles()
    story: List[Any] = []

    story.append(Paragraph(escape(company), s["title"]))
    story.append(Paragraph("Reporte consolidado de evaluación ascendente", s["h2"]))
    story.append(
        Paragraph(
            f"<b>Evaluaciones:</b> {result.get('total_responses', 0)} &nbsp; "
            f"<b>Supervisores evaluados:</b> {result.get('evaluated_count', 0)}",
            s["body"],
        )
    )
    story.append(Spacer(1, 10))

    story.append(_header_bar("Resumen de supervisores", "#0F766E"))
    story.append(Spacer(1, 8))
    table_rows: List[List[Any]] = [["Supervisor", "Departamento", "Turno", "Evaluaciones", "Promedio", "Nivel"]]
    for row in rows:
        evaluated = bool(row.get("total_responses"))
        average = float(row.get("overall_average", 0) or 0)
        table_rows.append(
            [
                Paragraph(escape(str(row.get("name") or row.get("id"))), s["body"]),
                str(row.get("department") or ""),
                str(row.get("shift") or ""),
                str(row.get("total_responses", 0)),
                f"{average:.2f}" if evaluated else "-",
                _status_cell(average) if evaluated else "Sin datos",
            ]
        )
    story.append(_grid_table(table_rows, [140, 100, 50, 75, 65, 90]))
    story.append(Spacer(1, 12))

    story.append(_header_bar("Resultados consolidados por criterio"))
    story.append(Spacer(1, 8))
    if not result.get("has_data"):
        _no_data(story, s)
    else:
        criteria = result.get("criteria", [])
        criterion_rows: List[List[Any]] = [["Criterio", "Promedio", "Competencias", "Nivel"]]
        row_styles: List[Any] = []
        for i, item in enumerate(criteria, start=1):
            status = classify_status(float(item["average"]))
            criterion_rows.append(
                [item["name"], f"{item['average']:.2f}", str(item["competency_count"]), status.display]
            )
            row_styles.append(("BACKGROUND", (3, i), (3, i), colors.HexColor(status.background)))
        story.append(_grid_table(criterion_rows, [230, 80, 90, 120], row_styles))
        story.append(Spacer(1, 8))
        story.append(
            Paragraph(
                f"<b>Promedio general:</b> {float(result.get('overall_average', 0)):.2f} "
                f"({escape(str(result.get('overall_status_display') or ''))})",
                s["body"],
            )
        )
        story.append(Spacer(1, 12))

        story.append(_header_bar("Recomendaciones de capacitación", "#B45309"))
        story.append(Spacer(1, 8))
        for item in result.get("improvement_areas", []):
            story.append(Paragraph(f"{escape(item['name'])} ({item['average']:.2f})", s["h2"]))
            for topic in item.get("recommendations", []):
                story.append(Paragraph(f"- {escape(topic)}", s["body"]))
            story.append(Spacer(1, 6))

    doc.build(story, onFirstPage=_on_page, onLaterPages=_on_page, canvasmaker=_NumberedCanvas)


__all__ = ["CriterionBars", "build_consolidated_pdf", "build_supervisor_pdf"]
