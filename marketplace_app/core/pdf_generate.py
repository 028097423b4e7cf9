from io import BytesIO

from reportlab.graphics.barcode import code128
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models.enums import TransactionKind

TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ("FONT", (0, 0), (0, -1), "Helvetica-Bold"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
)


def _money(amount, currency: str) -> str:
    return f"{currency} {amount:,.2f}" if amount is not None else "-"


class ReceiptGenerator:
    @staticmethod
    def _styles():
        styles = getSampleStyleSheet()
        styles.add(
            ParagraphStyle(
                name="TitleStyle",
                fontSize=18,
                alignment=TA_CENTER,
                spaceAfter=12,
                textColor=colors.HexColor("#1F2937"),
            )
        )
        styles.add(
            ParagraphStyle(
                name="SectionHeader",
                fontSize=12,
                spaceBefore=14,
                spaceAfter=6,
                textColor=colors.HexColor("#111827"),
                fontName="Helvetica-Bold",
            )
        )
        styles.add(
            ParagraphStyle(
                name="Meta",
                fontSize=9,
                alignment=TA_RIGHT,
                textColor=colors.grey,
            )
        )
        return styles

    @staticmethod
    def _table(rows):
        table = Table(rows, colWidths=[140, None])
        table.setStyle(TABLE_STYLE)
        return table

    @staticmethod
    def generate_pdf_bytes(payment, brand: str = "Buildex") -> bytes:
        """Render a receipt for a SUCCESS payment with payer/property/owner loaded."""
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=30,
            leftMargin=30,
            topMargin=30,
            bottomMargin=30,
        )
        styles = ReceiptGenerator._styles()
        is_rent = payment.kind == TransactionKind.RENT
        title = "RENT PAYMENT RECEIPT" if is_rent else "PROPERTY BOOKING RECEIPT"

        elements = [
            Paragraph(f"{brand} - {title}", styles["TitleStyle"]),
            Paragraph(f"Order: <b>{payment.gateway_order_id}</b>", styles["Meta"]),
            Spacer(1, 10),
            code128.Code128(payment.gateway_order_id, barHeight=15 * mm, barWidth=0.6),
            Spacer(1, 10),
        ]
        if payment.payment_date:
            elements.append(
                Paragraph(
                    f"Paid on: {payment.payment_date.strftime('%d %B %Y %H:%M')} UTC",
                    styles["Meta"],
                )
            )

        prop = payment.property
        elements.append(Paragraph("Property Information", styles["SectionHeader"]))
        elements.append(
            ReceiptGenerator._table(
                [
                    ["Property", prop.title],
                    ["Location", f"{prop.area}, {prop.city}"],
                    ["Type", prop.property_type.value if prop.property_type else "-"],
                    ["Owner", payment.owner.full_name if payment.owner else "-"],
                ]
            )
        )

        payer = payment.payer
        elements.append(Paragraph("Payer Information", styles["SectionHeader"]))
        elements.append(
            ReceiptGenerator._table(
                [
                    ["Name", payer.full_name],
                    ["Email", payer.email],
                    ["Phone", payer.phone_number or "-"],
                ]
            )
        )

        summary = [
            ["Transaction", payment.kind.value],
            ["Transaction ID", payment.gateway_payment_id or "-"],
            ["Amount Paid", _money(payment.payable_amount, payment.currency)],
            ["Total Amount", _money(payment.total_amount, payment.currency)],
            ["Balance Remaining", _money(payment.remaining_amount, payment.currency)],
            ["Status", payment.status.value],
        ]
        if is_rent:
            summary.append(["Billing Period", payment.billing_period or "-"])
            summary.append(
                [
                    "Next Due Date",
                    payment.next_due_date.strftime("%d %B %Y")
                    if payment.next_due_date
                    else "-",
                ]
            )

        elements.append(Paragraph("Payment Summary", styles["SectionHeader"]))
        elements.append(ReceiptGenerator._table(summary))
        elements.append(Spacer(1, 16))
        elements.append(
            Paragraph(
                "This is a system generated receipt and does not require a signature.",
                styles["Normal"],
            )
        )

        doc.build(elements)
        return buffer.getvalue()
