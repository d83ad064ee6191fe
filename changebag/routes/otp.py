from flask import Blueprint, jsonify, request

from changebag.services import ClaimService, OtpService

bp = Blueprint("otp", __name__)


@bp.route("/send", methods=["POST"])
def send():
    data = request.get_json(silent=True) or {}
    record = OtpService.send_otp(data.get("phone"))
    return jsonify(message="OTP sent successfully", phone=record.phone)


@bp.route("/verify", methods=["POST"])
def verify():
    """Check a code. A claimId in the body marks that claim's email as verified."""
    data = request.get_json(silent=True) or {}
    record = OtpService.verify_otp(data.get("phone"), data.get("otp"))

    body = {"message": "OTP verified successfully", "phone": record.phone, "verified": True}
    if data.get("claimId"):
        claim = ClaimService.mark_email_verified(data["claimId"])
        body["claim"] = claim.to_dict()
    return jsonify(body)
