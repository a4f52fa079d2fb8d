import io
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet


def _fmt_amount(value) -> str:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return str(value or '')
    return f"{value:g}"


def generate_pdf_for_shopping_list(plan, items_by_category, adult_equivalent):
    """Render a shopping list as a PDF: one table per ingredient category."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        rightMargin=24, leftMargin=24, topMargin=24, bottomMargin=24
    )

    styles = getSampleStyleSheet()
    elements = [
        Paragraph(f"Shopping List - {plan.name}", styles["Title"]),
        Paragraph(f"Week of {plan.week_start} - scaled for {adult_equivalent} adult equivalents", styles["Normal"]),
        Spacer(1, 16),
    ]

    if not items_by_category:
        elements.append(Paragraph("No items.", styles["Normal"]))

    for category, items in items_by_category.items():
        elements.append(Paragraph(category.replace('_', ' ').title(), styles["Heading2"]))
        data = [["Item", "Quantity", "Unit"]]
        for item in items:
            data.append([item.get('name', ''), _fmt_amount(item.get('quantity')), item.get('unit', '')])
        table = Table(data, repeatRows=1, colWidths=[260, 100, 100])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0,0), (-1,0), colors.HexColor("#4CAF50")),
            ("TEXTCOLOR", (0,0), (-1,0), colors.whitesmoke),
            ("ALIGN", (1,0), (-1,-1), "CENTER"),
            ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
            ("BOTTOMPADDING", (0,0), (-1,0), 8),
            ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 12))

    doc.build(elements)
    return buf.getvalue()
