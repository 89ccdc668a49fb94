import io
from typing import Any, Dict
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.features.reports.utils.report_parser import summarize_report

RATING_COLORS = {
    "good": colors.HexColor("#0cce6b"),
    "needs improvement": colors.HexColor("#ffa400"),
    "poor": colors.HexColor("#ff4e42"),
    "n/a": colors.HexColor("#9e9e9e"),
}

HEADER_BG = colors.HexColor("#263238")


def _table(rows, col_widths, rating_column=None, ratings=None) -> Table:
    table = Table(rows, colWidths=col_widths, hAlign="LEFT")
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#cfd8dc")),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f5f7f8")]),
    ]
    if rating_column is not None and ratings:
        for row_index, rating in enumerate(ratings, start=1):
            style.append(("TEXTCOLOR", (rating_column, row_index), (rating_column, row_index), RATING_COLORS[rating]))
            style.append(("FONTNAME", (rating_column, row_index), (rating_column, row_index), "Helvetica-Bold"))
    table.setStyle(TableStyle(style))
    return table


def build_report_pdf(url: str, report: Dict[str, Any]) -> bytes:
    """Render a one-document summary of a Lighthouse report."""
    summary = summarize_report(url, report)
    styles = getSampleStyleSheet()
    small = ParagraphStyle("Small", parent=styles["Normal"], fontSize=8, textColor=colors.HexColor("#546e7a"))

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=f"Site report - {url}",
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
    )

    story = [
        Paragraph("Website Audit Report", styles["Title"]),
        Paragraph(escape(summary["final_url"]), styles["Heading3"]),
        Paragraph(
            f"Generated {summary['fetch_time'] or 'n/a'} with Lighthouse {summary['lighthouse_version'] or 'n/a'}",
            small,
        ),
        Spacer(1, 0.25 * inch),
        Paragraph("Scores", styles["Heading2"]),
    ]

    categories = summary["categories"]
    if categories:
        rows = [["Category", "Score", "Rating"]]
        rows += [
            [c["title"], "-" if c["score"] is None else str(c["score"]), c["rating"]]
            for c in categories
        ]
        story.append(_table(rows, [3 * inch, 1 * inch, 2 * inch], rating_column=2, ratings=[c["rating"] for c in categories]))
    else:
        story.append(Paragraph("No category scores in this report.", styles["Normal"]))

    if summary["metrics"]:
        story += [Spacer(1, 0.25 * inch), Paragraph("Key metrics", styles["Heading2"])]
        rows = [["Metric", "Value"]] + [[m["title"], m["display_value"] or "-"] for m in summary["metrics"]]
        story.append(_table(rows, [3 * inch, 3 * inch]))

    story += [Spacer(1, 0.25 * inch), Paragraph("Opportunities and failed audits", styles["Heading2"])]
    if summary["failed_audits"]:
        rows = [["Audit", "Score", "Value"]]
        rows += [
            [Paragraph(escape(a["title"]), styles["Normal"]), str(a["score"]), a["display_value"] or ""]
            for a in summary["failed_audits"]
        ]
        story.append(_table(rows, [4 * inch, 0.8 * inch, 1.7 * inch]))
    else:
        story.append(Paragraph("Every scored audit passed.", styles["Normal"]))

    doc.build(story)
    return buffer.getvalue()
