"""
Spreadsheet and report file handling: DataFrame exports to CSV/XLSX/PDF,
downloadable upload templates and parsing of uploaded CSV/XLSX files.
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import pandas as pd
from fastapi.responses import StreamingResponse

from garment_erp.core.errors import BusinessRuleError

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_FORMATS = ("csv", "xlsx", "pdf")

CUSTOMER_TEMPLATE_COLUMNS = [
    "company_name", "contact_person", "phone", "email", "address", "city", "state",
    "pincode", "gstin", "pan", "customer_type", "customer_tier", "credit_limit",
]
CUSTOMER_TEMPLATE_SAMPLE = {
    "company_name": "Sample Garments Pvt Ltd",
    "contact_person": "Ravi Kumar",
    "phone": "9876543210",
    "email": "ravi@example.com",
    "address": "12 Market Road",
    "city": "Tiruppur",
    "state": "Tamil Nadu",
    "pincode": "641601",
    "gstin": "33ABCDE1234F1Z5",
    "pan": "ABCDE1234F",
    "customer_type": "Wholesale",
    "customer_tier": "silver",
    "credit_limit": 50000,
}
INVENTORY_TEMPLATE_COLUMNS = [
    "sku", "item_name", "category", "product_class", "color", "size", "brand", "uom", "unit_price", "current_stock",
]
INVENTORY_TEMPLATE_SAMPLE = {
    "sku": "TSH-RN-BLK-M", "item_name": "Round neck T-shirt", "category": "T-Shirts", "product_class": "Apparel",
    "color": "Black", "size": "M", "brand": "House", "uom": "pcs", "unit_price": 249, "current_stock": 0,
}
FABRIC_TEMPLATE_COLUMNS = ["fabric_code", "fabric_name", "color", "gsm", "uom", "rate", "inventory"]
FABRIC_TEMPLATE_SAMPLE = {
    "fabric_code": "FAB-CTN-180", "fabric_name": "Cotton Jersey", "color": "White", "gsm": 180,
    "uom": "meters", "rate": 145, "inventory": 0,
}


def _pdf_bytes(df: pd.DataFrame, title: str) -> bytes:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18)
    styles = getSampleStyleSheet()
    elements: list = [Paragraph(f"{title} ({datetime.utcnow().strftime('%Y-%m-%d %H:%M UTC')})", styles["Title"])]

    data = [list(df.columns)] + df.astype(str).values.tolist()
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    return buffer.getvalue()


# PUBLIC_INTERFACE
def export_dataframe(df: pd.DataFrame, filename_base: str, export_format: str) -> StreamingResponse:
    """
    Convert DataFrame to the requested format and return a StreamingResponse.

    Supported formats:
      - csv: text/csv
      - xlsx: application/vnd.openxmlformats-officedocument.spreadsheetml.sheet
      - pdf: application/pdf (simple tabular rendering)
    """
    export_format = (export_format or "csv").lower()
    if export_format in ("xlsx", "excel"):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        headers = {"Content-Disposition": f'attachment; filename="{filename_base}.xlsx"'}
        return StreamingResponse(buffer, media_type=XLSX_MEDIA_TYPE, headers=headers)

    if export_format == "pdf":
        title = filename_base.replace("_", " ").title()
        headers = {"Content-Disposition": f'attachment; filename="{filename_base}.pdf"'}
        return StreamingResponse(io.BytesIO(_pdf_bytes(df, title)), media_type="application/pdf", headers=headers)

    buffer = io.StringIO()
    df.to_csv(buffer, index=False)
    buffer.seek(0)
    headers = {"Content-Disposition": f'attachment; filename="{filename_base}.csv"'}
    return StreamingResponse(buffer, media_type="text/csv", headers=headers)


# PUBLIC_INTERFACE
def template_dataframe(columns: Sequence[str], sample: Dict[str, object]) -> pd.DataFrame:
    """Header row plus one sample row, columns in the given order."""
    return pd.DataFrame([[sample.get(c, "") for c in columns]], columns=list(columns))


# PUBLIC_INTERFACE
def read_upload(content: bytes, filename: Optional[str]) -> pd.DataFrame:
    """
    Parse an uploaded CSV or XLSX file into a DataFrame of strings.

    Column names are normalised to snake_case; blank cells become empty strings.
    """
    name = (filename or "").lower()
    try:
        if name.endswith((".xlsx", ".xls")):
            df = pd.read_excel(io.BytesIO(content), engine="openpyxl", dtype=str)
        elif name.endswith(".csv") or not name:
            df = pd.read_csv(io.BytesIO(content), dtype=str, skip_blank_lines=True)
        else:
            raise BusinessRuleError("Upload a .csv or .xlsx file", {"filename": filename})
    except BusinessRuleError:
        raise
    except Exception as exc:
        raise BusinessRuleError(f"Could not read the uploaded file: {exc}") from exc

    df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]
    return df.fillna("")


# PUBLIC_INTERFACE
def dataframe_records(df: pd.DataFrame) -> List[Dict[str, str]]:
    """Rows as dicts with surrounding whitespace stripped."""
    return [{k: str(v).strip() for k, v in row.items()} for row in df.to_dict(orient="records")]


# PUBLIC_INTERFACE
def parse_number(value: Optional[str], default: float = 0.0) -> float:
    """Lenient number parsing for spreadsheet cells ('1,200.50', '', None)."""
    text = (value or "").replace(",", "").strip()
    if not text:
        return default
    try:
        return float(text)
    except ValueError:
        raise BusinessRuleError(f"'{value}' is not a number")
