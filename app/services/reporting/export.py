"""Spreadsheet export of order rows."""
import re
from io import BytesIO
from typing import Iterable
from urllib.parse import quote

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from app.services.reporting.models import ExportRow

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Orders Summary"

# (header, row attribute, column width)
COLUMNS = [
    ("Order ID", "order_id", 25),
    ("User ID", "user_id", 25),
    ("Delivery Date", "delivery_date", 20),
    ("Status", "status", 15),
    ("Item Name", "item_name", 25),
    ("Quantity", "quantity", 10),
    ("Extras", "extras", 30),
    ("Total Price", "total_price", 15),
]


def export_filename(company_name: str, requested_date: str) -> str:
    """Attachment filename for a company's export."""
    safe_name = re.sub(r"\s+", "_", company_name)
    return f"orders_summary_{safe_name}_{requested_date}.xlsx"


def content_disposition(filename: str) -> str:
    """
    Content-Disposition header for downloading ``filename``.

    The quoted ``filename`` parameter is a printable ASCII fallback. When the
    name has characters that need escaping, the exact name is also sent as an
    RFC 5987 ``filename*`` in UTF-8.
    """
    fallback = re.sub(r'[^\x20-\x7e]|["\\;]', "_", filename)
    header = f'attachment; filename="{fallback}"'
    encoded = quote(filename, safe="")
    if encoded != filename:
        header += f"; filename*=UTF-8''{encoded}"
    return header



class OrderSummaryExporter:
    """Writes export rows to an in-memory xlsx workbook."""

    def write(self, rows: Iterable[ExportRow]) -> bytes:
        """Serialize rows, header first, and return the workbook bytes."""
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = SHEET_TITLE

        worksheet.append([header for header, _, _ in COLUMNS])
        for index, (_, _, width) in enumerate(COLUMNS, start=1):
            worksheet.column_dimensions[get_column_letter(index)].width = width
        for cell in worksheet[1]:
            cell.font = Font(bold=True)

        for row in rows:
            worksheet.append([getattr(row, attribute) for _, attribute, _ in COLUMNS])

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
