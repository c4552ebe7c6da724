"""
Tabular exports (CSV, XLSX, PDF) for list endpoints.

Every writer takes a header list and a list of rows and returns the file
contents; ``export_response`` wraps the result for download.
"""

import csv
import io
import logging
from decimal import Decimal

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}


def _cell(value):
    return "" if value is None else str(value)


def rows_to_csv(headers, rows) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(v) for v in row])
    return buf.getvalue()


def rows_to_xlsx(headers, rows, title="Export") -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    ws.append(list(headers))

    header_fill = PatternFill(
        start_color="366092", end_color="366092", fill_type="solid"
    )
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = Font(bold=True, color="FFFFFF")
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for row in rows:
        ws.append(
            [v if isinstance(v, (int, float, Decimal)) else _cell(v) for v in row]
        )

    for column in ws.columns:
        width = max(len(_cell(c.value)) for c in column)
        ws.column_dimensions[column[0].column_letter].width = min(width + 2, 50)

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def rows_to_pdf(headers, rows, title="Export") -> bytes:
    out = io.BytesIO()
    doc = SimpleDocTemplate(out, pagesize=landscape(A4))
    styles = getSampleStyleSheet()

    table = Table([list(headers)] + [[_cell(v) for v in row] for row in rows])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#366092")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
            ]
        )
    )
    doc.build([Paragraph(title, styles["Title"]), Spacer(1, 12), table])
    return out.getvalue()


def export_response(export_format, filename, headers, rows, title="Export"):
    export_format = (export_format or "csv").lower()
    if export_format == "csv":
        content = rows_to_csv(headers, rows)
    elif export_format == "xlsx":
        content = rows_to_xlsx(headers, rows, title=title)
    elif export_format == "pdf":
        content = rows_to_pdf(headers, rows, title=title)
    else:
        raise ValueError(f"unsupported export format: {export_format}")

    logger.info("export %s.%s rows=%s", filename, export_format, len(rows))
    resp = HttpResponse(content, content_type=CONTENT_TYPES[export_format])
    resp["Content-Disposition"] = f'attachment; filename="{filename}.{export_format}"'
    return resp
