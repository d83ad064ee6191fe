"""PDF invoices for captured sponsorship payments."""

import io
import logging
import os
import random
import string
from datetime import timedelta

from flask import current_app
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from changebag.services import email as email_service
from changebag.utils import to_number, utcnow

logger = logging.getLogger(__name__)

DUE_DAYS = 30


def new_invoice_number(now=None) -> str:
    now = now or utcnow()
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"INV-{int(now.timestamp() * 1000)}-{suffix}"


class InvoiceService:

    @staticmethod
    def build_invoice(payment_data: dict) -> dict:
        """Invoice figures from payment metadata. Amounts are in rupees."""
        now = utcnow()
        quantity = int(to_number(payment_data.get("toteQuantity")) or 0)
        unit_price = to_number(payment_data.get("unitPrice")) or 0
        subtotal = quantity * unit_price
        tax = 0
        return {
            "invoiceNumber": new_invoice_number(now),
            "date": now,
            "dueDate": now + timedelta(days=DUE_DAYS),
            "paymentId": payment_data.get("paymentId", ""),
            "orderId": payment_data.get("orderId", ""),
            "organizationName": payment_data.get("organizationName", ""),
            "contactName": payment_data.get("contactName", ""),
            "email": payment_data.get("email", ""),
            "phone": payment_data.get("phone", ""),
            "causeTitle": payment_data.get("causeTitle", ""),
            "currency": payment_data.get("currency") or "INR",
            "items": [{
                "description": f"Sponsored totes for {payment_data.get('causeTitle', '')}",
                "quantity": quantity,
                "unitPrice": unit_price,
                "total": subtotal,
            }],
            "subtotal": subtotal,
            "tax": tax,
            "total": subtotal + tax,
        }

    @staticmethod
    def render_pdf(invoice: dict) -> bytes:
        buffer = io.BytesIO()
        p = canvas.Canvas(buffer, pagesize=A4)
        width, height = A4
        currency = invoice["currency"]

        # Header
        p.setFont("Helvetica-Bold", 22)
        p.drawString(50, height - 70, "INVOICE")
        p.setFont("Helvetica", 10)
        p.drawRightString(width - 50, height - 60, "CauseConnect / ChangeBag")
        p.drawRightString(width - 50, height - 74, f"Invoice #: {invoice['invoiceNumber']}")
        p.drawRightString(width - 50, height - 88, f"Date: {invoice['date']:%d %b %Y}")
        p.drawRightString(width - 50, height - 102, f"Due Date: {invoice['dueDate']:%d %b %Y}")

        # Bill to
        y = height - 150
        p.setFont("Helvetica-Bold", 11)
        p.drawString(50, y, "Bill To:")
        p.setFont("Helvetica", 10)
        for line in (
            invoice["organizationName"],
            invoice["contactName"],
            invoice["email"],
            invoice["phone"],
        ):
            if line:
                y -= 15
                p.drawString(50, y, str(line))

        # Line items
        y -= 40
        p.setStrokeColor(colors.grey)
        p.line(50, y + 12, width - 50, y + 12)
        p.setFont("Helvetica-Bold", 10)
        p.drawString(50, y, "Description")
        p.drawRightString(360, y, "Qty")
        p.drawRightString(450, y, "Unit Price")
        p.drawRightString(width - 50, y, "Total")
        p.line(50, y - 6, width - 50, y - 6)

        p.setFont("Helvetica", 10)
        for item in invoice["items"]:
            y -= 22
            p.drawString(50, y, item["description"][:60])
            p.drawRightString(360, y, str(item["quantity"]))
            p.drawRightString(450, y, f"{currency} {item['unitPrice']:.2f}")
            p.drawRightString(width - 50, y, f"{currency} {item['total']:.2f}")

        # Totals
        y -= 40
        p.drawRightString(450, y, "Subtotal:")
        p.drawRightString(width - 50, y, f"{currency} {invoice['subtotal']:.2f}")
        if invoice["tax"] > 0:
            y -= 16
            p.drawRightString(450, y, "Tax:")
            p.drawRightString(width - 50, y, f"{currency} {invoice['tax']:.2f}")
        y -= 20
        p.setFont("Helvetica-Bold", 12)
        p.drawRightString(450, y, "Total:")
        p.drawRightString(width - 50, y, f"{currency} {invoice['total']:.2f}")

        # Payment reference
        p.setFont("Helvetica", 9)
        p.setFillColor(colors.grey)
        p.drawString(50, 90, f"Payment ID: {invoice['paymentId']}    Order ID: {invoice['orderId']}")
        p.drawString(50, 76, "Thank you for sponsoring totes for the community.")

        p.showPage()
        p.save()
        return buffer.getvalue()

    @staticmethod
    def save_pdf(invoice_number: str, pdf_bytes: bytes):
        folder = current_app.config.get("INVOICE_FOLDER")
        if not folder:
            return None
        os.makedirs(folder, exist_ok=True)
        path = os.path.join(folder, f"invoice-{invoice_number}.pdf")
        with open(path, "wb") as f:
            f.write(pdf_bytes)
        return path

    @staticmethod
    def generate_and_send_invoice(to_email: str, payment_data: dict) -> dict:
        """Render, store and email an invoice. Raises on failure."""
        invoice = InvoiceService.build_invoice(payment_data)
        pdf_bytes = InvoiceService.render_pdf(invoice)
        path = InvoiceService.save_pdf(invoice["invoiceNumber"], pdf_bytes)
        logger.info("Invoice %s generated (%s)", invoice["invoiceNumber"], path or "not stored")

        email_service.send_invoice_email(
            to_email,
            invoice["organizationName"],
            invoice["causeTitle"],
            invoice["invoiceNumber"],
            invoice["total"],
            invoice["currency"],
            pdf_bytes,
        )
        return invoice
