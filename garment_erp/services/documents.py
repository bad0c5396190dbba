"""
Printable documents rendered with reportlab: batch assignment sheets,
barcode labels for inventory items and dispatch delivery challans.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from reportlab.graphics.barcode import code128
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from garment_erp.core.errors import BusinessRuleError
from garment_erp.services.pricing import format_currency, format_date

logger = logging.getLogger(__name__)

MAX_BARCODE_LENGTH = 100

_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
    ]
)


@dataclass
class BatchSheetData:
    order_number: str
    customer_name: Optional[str]
    batch_name: str
    batch_code: Optional[str]
    batch_leader_name: Optional[str]
    assignment_date: Optional[date]
    assigned_by_name: Optional[str]
    sizes: List[Tuple[str, int, int]] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class LabelData:
    sku: str
    item_name: str
    unit_price: Optional[float] = None
    size: Optional[str] = None
    color: Optional[str] = None


@dataclass
class ChallanData:
    dispatch_number: str
    dispatch_date: Optional[date]
    order_number: str
    customer_name: Optional[str]
    delivery_address: Optional[str]
    courier_name: Optional[str]
    tracking_number: Optional[str]
    approved_quantity: int
    items: List[Tuple[str, int]] = field(default_factory=list)
    notes: Optional[str] = None


def _header(company_name: str, title: str) -> list:
    styles = getSampleStyleSheet()
    return [
        Paragraph(company_name, styles["Title"]),
        Paragraph(title, styles["Heading2"]),
        Spacer(1, 4 * mm),
    ]


def _key_values(rows: Sequence[Tuple[str, object]]) -> Table:
    data = [[label, "" if value is None else str(value)] for label, value in rows]
    table = Table(data, colWidths=[45 * mm, 120 * mm])
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )
    return table


def _signatures(*labels: str) -> Table:
    table = Table([["_" * 24 for _ in labels], list(labels)], colWidths=[60 * mm] * len(labels))
    table.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER"), ("FONTSIZE", (0, 0), (-1, -1), 9)]))
    return table


def _build(elements: list) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=18 * mm, rightMargin=18 * mm, topMargin=15 * mm, bottomMargin=15 * mm)
    doc.build(elements)
    return buffer.getvalue()


# PUBLIC_INTERFACE
def render_batch_sheet(data: BatchSheetData, company_name: str) -> bytes:
    """Batch assignment sheet handed to the batch leader: order, batch, sizes, signatures."""
    elements = _header(company_name, "Batch Assignment Sheet")
    elements.append(
        _key_values(
            [
                ("Order", data.order_number),
                ("Customer", data.customer_name),
                ("Batch", f"{data.batch_name} ({data.batch_code})" if data.batch_code else data.batch_name),
                ("Batch leader", data.batch_leader_name),
                ("Assigned on", format_date(data.assignment_date)),
                ("Assigned by", data.assigned_by_name),
            ]
        )
    )
    elements.append(Spacer(1, 5 * mm))

    rows = [["Size", "Assigned", "Picked"]]
    rows += [[size, str(qty), str(picked)] for size, qty, picked in data.sizes]
    rows.append(["Total", str(sum(q for _, q, _ in data.sizes)), str(sum(p for _, _, p in data.sizes))])
    table = Table(rows, colWidths=[50 * mm, 40 * mm, 40 * mm], repeatRows=1)
    table.setStyle(_TABLE_STYLE)
    table.setStyle(TableStyle([("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")]))
    elements.append(table)

    if data.notes:
        elements += [Spacer(1, 4 * mm), Paragraph(f"Notes: {data.notes}", getSampleStyleSheet()["Normal"])]
    elements += [Spacer(1, 20 * mm), _signatures("Batch Leader", "Production Manager", "Received By")]
    return _build(elements)


# PUBLIC_INTERFACE
def validate_barcode_value(value: Optional[str]) -> str:
    """
    Code128 accepts printable ASCII; labels additionally cap the length.

    Raises:
        BusinessRuleError: when the value cannot be encoded.
    """
    text = (value or "").strip()
    if not text:
        raise BusinessRuleError("Barcode value is empty")
    if len(text) > MAX_BARCODE_LENGTH:
        raise BusinessRuleError(f"Barcode value longer than {MAX_BARCODE_LENGTH} characters", {"value": text[:20]})
    if any(ord(ch) < 32 or ord(ch) > 126 for ch in text):
        raise BusinessRuleError("Barcode value contains unsupported characters", {"value": text})
    return text


# PUBLIC_INTERFACE
def render_barcode_labels(labels: Sequence[LabelData], columns: int = 3, rows: int = 8) -> bytes:
    """A4 sheet(s) of Code128 labels, one per entry, laid out columns x rows per page."""
    if not labels:
        raise BusinessRuleError("Select at least one item to print labels for")
    values = [validate_barcode_value(label.sku) for label in labels]

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    page_w, page_h = A4
    margin = 8 * mm
    cell_w = (page_w - 2 * margin) / columns
    cell_h = (page_h - 2 * margin) / rows
    per_page = columns * rows

    for index, (label, value) in enumerate(zip(labels, values)):
        if index and index % per_page == 0:
            pdf.showPage()
        slot = index % per_page
        x = margin + (slot % columns) * cell_w
        y = page_h - margin - (slot // columns + 1) * cell_h

        pdf.setFont("Helvetica-Bold", 8)
        pdf.drawString(x + 3 * mm, y + cell_h - 5 * mm, label.item_name[:40])
        barcode = code128.Code128(value, barHeight=cell_h * 0.4, barWidth=0.8)
        bx = x + max(2 * mm, (cell_w - barcode.width) / 2)
        barcode.drawOn(pdf, bx, y + cell_h * 0.3)
        pdf.setFont("Helvetica", 7)
        pdf.drawCentredString(x + cell_w / 2, y + cell_h * 0.3 - 3 * mm, value)
        extras = " | ".join(
            part for part in (
                label.size,
                label.color,
                format_currency(label.unit_price, symbol="Rs. ") if label.unit_price is not None else None,
            ) if part
        )
        if extras:
            pdf.drawCentredString(x + cell_w / 2, y + 3 * mm, extras)

    pdf.save()
    logger.info("Rendered %d barcode labels", len(values))
    return buffer.getvalue()


# PUBLIC_INTERFACE
def render_dispatch_challan(data: ChallanData, company_name: str) -> bytes:
    """Delivery challan for a dispatch: consignee, transport details and per-size quantities."""
    elements = _header(company_name, f"Delivery Challan {data.dispatch_number}")
    elements.append(
        _key_values(
            [
                ("Date", format_date(data.dispatch_date) if data.dispatch_date else format_date(datetime.utcnow().date())),
                ("Order", data.order_number),
                ("Customer", data.customer_name),
                ("Deliver to", data.delivery_address),
                ("Courier", data.courier_name),
                ("Tracking no.", data.tracking_number),
                ("QC approved qty", data.approved_quantity),
            ]
        )
    )
    elements.append(Spacer(1, 5 * mm))

    rows = [["Size", "Quantity"]] + [[size, str(qty)] for size, qty in data.items]
    rows.append(["Total", str(sum(q for _, q in data.items))])
    table = Table(rows, colWidths=[60 * mm, 40 * mm], repeatRows=1)
    table.setStyle(_TABLE_STYLE)
    table.setStyle(TableStyle([("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")]))
    elements.append(table)

    if data.notes:
        elements += [Spacer(1, 4 * mm), Paragraph(f"Notes: {data.notes}", getSampleStyleSheet()["Normal"])]
    elements += [Spacer(1, 20 * mm), _signatures("Prepared By", "Checked By", "Receiver")]
    return _build(elements)
