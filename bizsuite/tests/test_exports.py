import io
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase
from openpyxl import load_workbook

from bizsuite.exports import export_response, rows_to_csv, rows_to_pdf, rows_to_xlsx

HEADERS = ["ID", "Customer", "Total", "Note"]
ROWS = [
    [1, "Acme, Ltd", Decimal("160.00"), None],
    [2, 'He said "hi"', Decimal("5.50"), date(2026, 3, 2)],
]


class CsvExportTests(SimpleTestCase):
    def test_quotes_every_cell(self):
        self.assertEqual(
            rows_to_csv(HEADERS, ROWS),
            '"ID","Customer","Total","Note"\n'
            '"1","Acme, Ltd","160.00",""\n'
            '"2","He said ""hi""","5.50","2026-03-02"\n',
        )

    def test_same_rows_same_bytes(self):
        self.assertEqual(rows_to_csv(HEADERS, ROWS), rows_to_csv(HEADERS, list(ROWS)))

    def test_header_only(self):
        self.assertEqual(rows_to_csv(["A"], []), '"A"\n')


class XlsxExportTests(SimpleTestCase):
    def test_amounts_are_numeric_cells(self):
        ws = load_workbook(io.BytesIO(rows_to_xlsx(HEADERS, ROWS))).active
        self.assertEqual(ws["A1"].value, "ID")
        self.assertEqual(ws["C2"].data_type, "n")
        self.assertEqual(ws["C2"].value, 160)
        self.assertEqual(ws["C3"].value, 5.5)
        self.assertEqual(ws["B2"].value, "Acme, Ltd")


class ExportResponseTests(SimpleTestCase):
    def test_defaults_to_csv(self):
        resp = export_response(None, "orders", HEADERS, ROWS)
        self.assertEqual(resp["Content-Type"], "text/csv; charset=utf-8")
        self.assertEqual(
            resp["Content-Disposition"], 'attachment; filename="orders.csv"'
        )

    def test_pdf(self):
        self.assertTrue(rows_to_pdf(HEADERS, ROWS, title="Orders").startswith(b"%PDF"))
        resp = export_response("PDF", "orders", HEADERS, ROWS)
        self.assertEqual(resp["Content-Type"], "application/pdf")

    def test_unknown_format(self):
        with self.assertRaises(ValueError):
            export_response("docx", "orders", HEADERS, ROWS)
