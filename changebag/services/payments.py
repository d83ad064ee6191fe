"""Razorpay orders and payment confirmation."""

import hashlib
import hmac
import logging

import requests
from flask import current_app

from changebag import db
from changebag.errors import ConflictError, DependencyFailure, ValidationError
from changebag.models import PaymentStatus, Sponsorship
from changebag.services import notifications
from changebag.services.invoice import InvoiceService
from changebag.utils import to_number, utcnow

logger = logging.getLogger(__name__)

MIN_INR_PAISE = 100
# Razorpay test mode refuses large orders (about Rs 50,000)
NON_PRODUCTION_MAX_PAISE = 5000000

ORDER_REQUIRED_FIELDS = [
    "amount",
    "currency",
    "email",
    "organizationName",
    "contactName",
    "phone",
    "causeTitle",
]


class RazorpayClient:
    """Minimal client for the Razorpay REST API."""

    def __init__(self, key_id: str, key_secret: str, base_url: str = "https://api.razorpay.com/v1",
                 timeout: int = 15):
        if not key_id or not key_secret:
            raise DependencyFailure("Razorpay credentials are not configured")
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "RazorpayClient":
        config = current_app.config
        return cls(
            config.get("RAZORPAY_KEY_ID"),
            config.get("RAZORPAY_KEY_SECRET"),
            config.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1"),
        )

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.request(
                method, url, auth=(self.key_id, self.key_secret), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise DependencyFailure(f"Payment gateway unreachable: {e}")
        if resp.status_code >= 400:
            try:
                description = resp.json().get("error", {}).get("description") or resp.text
            except ValueError:
                description = resp.text
            raise DependencyFailure(f"Payment gateway error {resp.status_code}: {description}")
        return resp.json()

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> dict:
        return self._request("POST", "/orders", json={
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
            "partial_payment": False,
        })

    def fetch_order(self, order_id: str) -> dict:
        return self._request("GET", f"/orders/{order_id}")

    def fetch_order_payments(self, order_id: str) -> list[dict]:
        return self._request("GET", f"/orders/{order_id}/payments").get("items", [])

    def fetch_payment(self, payment_id: str) -> dict:
        return self._request("GET", f"/payments/{payment_id}")

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        expected = hmac.new(
            self.key_secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256
        ).hexdigest()
        return hmac.compare_digest(expected, signature or "")


def _payment_summary(payment: dict) -> dict:
    return {
        "id": payment.get("id"),
        "order_id": payment.get("order_id"),
        "status": payment.get("status"),
        "amount": payment.get("amount"),
        "currency": payment.get("currency"),
        "method": payment.get("method"),
    }


class PaymentService:

    @staticmethod
    def create_order(data: dict, client: RazorpayClient = None) -> dict:
        missing = [f for f in ORDER_REQUIRED_FIELDS if not data.get(f)]
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)

        amount = to_number(data["amount"])
        if not isinstance(amount, int) or amount <= 0:
            raise ValidationError(
                "Amount must be a whole number of paise",
                invalid_fields={"amount": "must be a positive whole number"},
            )
        currency = str(data["currency"]).upper()
        if currency == "INR" and amount < MIN_INR_PAISE:
            raise ValidationError(
                "Minimum amount for INR is 100 paise",
                invalid_fields={"amount": "below minimum"},
            )
        if (
            current_app.config.get("ENVIRONMENT", "").lower() != "production"
            and currency == "INR"
            and amount > NON_PRODUCTION_MAX_PAISE
        ):
            raise ValidationError(
                "Amount exceeds the test-mode limit. Reduce the quantity or split the payment.",
                invalid_fields={"amount": "above test-mode limit"},
            )

        notes = {
            "email": str(data["email"]),
            "organizationName": str(data["organizationName"]),
            "contactName": str(data["contactName"]),
            "phone": str(data["phone"]),
            "causeTitle": str(data["causeTitle"]),
            "causeId": str(data.get("causeId") or ""),
            "sponsorshipId": str(data.get("sponsorshipId") or ""),
            "toteQuantity": str(data.get("toteQuantity") or 0),
            "unitPrice": str(data.get("unitPrice") or 0),
        }

        client = client or RazorpayClient.from_config()
        order = client.create_order(amount, currency, f"receipt_{int(utcnow().timestamp() * 1000)}", notes)
        logger.info("Payment order %s created for %s (%s %s)", order.get("id"),
                    notes["organizationName"], amount, currency)

        sponsorship_id = to_number(data.get("sponsorshipId"))
        if isinstance(sponsorship_id, int):
            sponsorship = db.session.get(Sponsorship, sponsorship_id)
            if sponsorship:
                sponsorship.payment_order_id = order.get("id")
                sponsorship.payment_status = PaymentStatus.PENDING
                db.session.commit()

        return {
            "id": order.get("id"),
            "amount": order.get("amount"),
            "currency": order.get("currency"),
            "status": order.get("status"),
            "receipt": order.get("receipt"),
            "key": client.key_id,
            **notes,
        }

    @staticmethod
    def confirm_payment(order_id: str, payment_id: str, signature: str,
                        client: RazorpayClient = None) -> dict:
        missing = [
            name for name, value in (
                ("razorpay_order_id", order_id),
                ("razorpay_payment_id", payment_id),
                ("razorpay_signature", signature),
            )
            if not value
        ]
        if missing:
            raise ValidationError("Missing required payment verification fields", missing_fields=missing)

        client = client or RazorpayClient.from_config()
        if not client.verify_signature(order_id, payment_id, signature):
            raise ConflictError("Payment verification failed: invalid signature")

        payment = client.fetch_payment(payment_id)
        try:
            notes = client.fetch_order(payment.get("order_id") or order_id).get("notes") or {}
        except DependencyFailure:
            logger.exception("Could not fetch order %s notes", order_id)
            notes = {}

        if payment.get("status") == "captured":
            PaymentService._record_payment(order_id, payment, notes)
            payment_data = {
                "paymentId": payment.get("id"),
                "orderId": payment.get("order_id") or order_id,
                "amount": payment.get("amount"),
                "currency": payment.get("currency"),
                "email": notes.get("email") or payment.get("email") or "",
                "organizationName": notes.get("organizationName", ""),
                "contactName": notes.get("contactName", ""),
                "phone": notes.get("phone", ""),
                "causeTitle": notes.get("causeTitle", ""),
                "toteQuantity": notes.get("toteQuantity"),
                "unitPrice": notes.get("unitPrice"),
            }
            if payment_data["email"]:
                notifications.dispatch(
                    InvoiceService.generate_and_send_invoice, payment_data["email"], payment_data
                )
        else:
            logger.info("Payment %s not captured (%s)", payment_id, payment.get("status"))

        return _payment_summary(payment)

    @staticmethod
    def _record_payment(order_id: str, payment: dict, notes: dict) -> None:
        sponsorship = None
        sponsorship_id = to_number(notes.get("sponsorshipId"))
        if isinstance(sponsorship_id, int):
            sponsorship = db.session.get(Sponsorship, sponsorship_id)
        if sponsorship is None:
            sponsorship = Sponsorship.query.filter_by(payment_order_id=order_id).first()
        if sponsorship is None:
            logger.warning("No sponsorship found for captured order %s", order_id)
            return

        sponsorship.payment_id = payment.get("id")
        sponsorship.payment_order_id = payment.get("order_id") or order_id
        sponsorship.payment_status = PaymentStatus.COMPLETED
        sponsorship.payment_amount = payment.get("amount")
        sponsorship.payment_currency = payment.get("currency") or "INR"
        sponsorship.payment_date = utcnow()
        db.session.commit()
        logger.info("Payment %s recorded on sponsorship %s", payment.get("id"), sponsorship.id)

    @staticmethod
    def get_payment_status(order_id: str, client: RazorpayClient = None) -> dict:
        if not order_id:
            raise ValidationError("Order ID is required", missing_fields=["orderId"])
        client = client or RazorpayClient.from_config()
        order = client.fetch_order(order_id)
        payments = client.fetch_order_payments(order_id)
        captured = next((p for p in payments if p.get("status") == "captured"), None)
        return {
            "order": {
                "id": order.get("id"),
                "amount": order.get("amount"),
                "currency": order.get("currency"),
                "status": order.get("status"),
                "receipt": order.get("receipt"),
            },
            "payment": _payment_summary(captured) if captured else None,
            "totalPayments": len(payments),
        }
