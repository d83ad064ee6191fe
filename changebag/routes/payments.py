from flask import Blueprint, jsonify, request

from changebag.services import PaymentService

bp = Blueprint("payments", __name__)


@bp.route("/create-order", methods=["POST"])
def create_order():
    order = PaymentService.create_order(request.get_json(silent=True) or {})
    return jsonify(success=True, order=order)


@bp.route("/confirm-payment", methods=["POST"])
def confirm_payment():
    data = request.get_json(silent=True) or {}
    payment = PaymentService.confirm_payment(
        data.get("razorpay_order_id"),
        data.get("razorpay_payment_id"),
        data.get("razorpay_signature"),
    )
    return jsonify(success=True, message="Payment confirmed successfully", payment=payment)


@bp.route("/status/<order_id>")
def status(order_id):
    return jsonify(success=True, **PaymentService.get_payment_status(order_id))
