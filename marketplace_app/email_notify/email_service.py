import logging
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from core.breaker import breaker
from core.settings import settings
from models.enums import TransactionKind

logger = logging.getLogger(__name__)


def confirmation_subject(kind: TransactionKind, brand: str) -> str:
    if kind == TransactionKind.RENT:
        return f"Rent Payment Confirmation - {brand}"
    return f"Property Purchase Confirmation - {brand}"


def build_confirmation_message(payment, pdf_bytes: bytes | None) -> MIMEMultipart:
    brand = settings.BRAND_NAME
    prop = payment.property
    rent_line = ""
    if payment.kind == TransactionKind.RENT:
        rent_line = (
            f"<p>Billing period: <b>{payment.billing_period}</b><br>"
            f"Next rent due: <b>{payment.next_due_date}</b></p>"
        )

    html_content = f"""
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6;">
        <h2>Payment Successful</h2>
        <p>Hello {payment.payer.full_name},</p>
        <p>We have received <b>{payment.currency} {payment.payable_amount:,.2f}</b>
        for <b>{prop.title}</b> in {prop.area}, {prop.city}.</p>
        <p>Transaction ID: {payment.gateway_payment_id}<br>
        Order ID: {payment.gateway_order_id}<br>
        Balance remaining: {payment.currency} {payment.remaining_amount:,.2f}</p>
        {rent_line}
        <p>Your receipt is attached to this email.</p>
        <p>Best regards,<br>The {brand} Team</p>
    </body>
    </html>
    """

    message = MIMEMultipart("mixed")
    message["Subject"] = confirmation_subject(payment.kind, brand)
    message["From"] = settings.EMAIL_USER or f"no-reply@{brand.lower()}.com"
    message["To"] = payment.payer.email
    message.attach(MIMEText(html_content, "html"))

    if pdf_bytes:
        attachment = MIMEApplication(pdf_bytes, _subtype="pdf")
        attachment.add_header(
            "Content-Disposition",
            "attachment",
            filename=f"receipt_{payment.id}.pdf",
        )
        message.attach(attachment)

    return message


async def send_payment_confirmation_email(payment, pdf_bytes: bytes | None = None):
    async def handler():
        if not settings.EMAIL_SERVER:
            raise ConnectionError("EMAIL_SERVER is not configured")

        await aiosmtplib.send(
            build_confirmation_message(payment, pdf_bytes),
            hostname=settings.EMAIL_SERVER,
            port=settings.EMAIL_PORT,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASSWORD,
            start_tls=settings.EMAIL_USE_TLS,
        )
        logger.info("Payment confirmation sent to %s", payment.payer.email)

    return await breaker.call(handler)
