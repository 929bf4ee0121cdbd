import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

HEADER_GREEN = colors.HexColor("#4CAF50")
EMPTY_FILL = colors.HexColor("#F2F2F2")
MARGIN = 20
DAY_COL_WIDTH = 90


def _text(value) -> str:
    return "" if value is None else str(value)


def _slot_paragraph(slot, style, detail_style):
    # Plan copies can carry arbitrary JSON values; Paragraph parses markup
    if slot.is_empty:
        return Paragraph("-", style)
    parts = [f"<b>{escape(slot.name)}</b>"]
    tags = slot.recipe.get("tags") or []
    if not isinstance(tags, (list, tuple)):
        tags = [tags]
    detail = [_text(slot.recipe.get("section")), ", ".join(_text(t) for t in tags if t is not None)]
    detail = " · ".join(escape(d) for d in detail if d)
    if detail:
        parts.append(f'<font size="{detail_style.fontSize}" color="#666666">{detail}</font>')
    return Paragraph("<br/>".join(parts), style)


def generate_pdf_for_plan(plan, title: str) -> bytes:
    """Render a plan as a landscape A4 table, one row per day and one column per meal slot.

    Filled cells show the recipe name with its section and tags; empty slots
    print as '-' on a grey background.
    """
    buf = io.BytesIO()
    page_width, _ = landscape(A4)
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4), title=f"Meal Plan {title}",
        rightMargin=MARGIN, leftMargin=MARGIN, topMargin=MARGIN, bottomMargin=MARGIN
    )

    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle("PlanCell", parent=styles["BodyText"], fontSize=10, leading=12)
    detail_style = ParagraphStyle("PlanDetail", parent=cell_style, fontSize=8)
    total = len(plan.days) * len(plan.meals)
    elements = [
        Paragraph(f"Meal Plan – {escape(title)}", styles["Title"]),
        Paragraph(f"{plan.filled_count()} of {total} meals planned", styles["Italic"]),
        Spacer(1, 12),
    ]

    data = [["Day", *plan.meals]]
    empty_cells = []
    for row, day in enumerate(plan.days, start=1):
        cells = [day]
        for col, meal in enumerate(plan.meals, start=1):
            slot = plan.get(day, meal)
            if slot.is_empty:
                empty_cells.append((col, row))
            cells.append(_slot_paragraph(slot, cell_style, detail_style))
        data.append(cells)

    meal_width = (page_width - 2 * MARGIN - DAY_COL_WIDTH) / max(len(plan.meals), 1)
    table = Table(data, repeatRows=1, colWidths=[DAY_COL_WIDTH] + [meal_width] * len(plan.meals))
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_GREEN),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 12),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]
    style.extend(("BACKGROUND", cell, cell, EMPTY_FILL) for cell in empty_cells)
    table.setStyle(TableStyle(style))

    elements.append(table)
    doc.build(elements)
    return buf.getvalue()
