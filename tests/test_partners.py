"""Tests for API partners and the key-authenticated claim endpoint."""

import pytest

from changebag import db
from changebag.errors import ConflictError, ValidationError
from changebag.models import ApiPartner, CauseStatus, ClaimSource
from changebag.services import PartnerService


@pytest.fixture
def partner(app):
    """An active partner as (id, api key)."""
    with app.app_context():
        created = PartnerService.create_partner({
            "businessName": "Green Grocers",
            "businessEmail": "Ops@GreenGrocers.example",
            "contactName": "Meera Iyer",
        })
        return created.id, created.api_key


def _claim_body(cause_id, name="asha", **extra):
    body = {"causeId": cause_id, "fullName": name.title(), "email": f"{name}@example.org"}
    body.update(extra)
    return body


# ---------------------------------------------------------------------------
# PartnerService
# ---------------------------------------------------------------------------


def test_create_partner_generates_key(ctx, partner):
    stored = db.session.get(ApiPartner, partner[0])

    assert stored.api_key.startswith("cb_")
    assert len(stored.api_key) == 35
    assert stored.business_email == "ops@greengrocers.example"
    assert stored.is_active is True
    assert stored.last_used_at is None


def test_create_partner_validation(ctx):
    with pytest.raises(ValidationError) as exc:
        PartnerService.create_partner({"businessName": "Acme"})
    assert exc.value.missing_fields == ["businessEmail", "contactName"]

    with pytest.raises(ValidationError) as exc:
        PartnerService.create_partner({
            "businessName": 12, "businessEmail": "nope", "contactName": "Asha",
        })
    assert set(exc.value.invalid_fields) == {"businessName", "businessEmail"}


def test_business_names_are_unique(ctx, partner):
    with pytest.raises(ConflictError):
        PartnerService.create_partner({
            "businessName": "Green Grocers",
            "businessEmail": "other@example.org",
            "contactName": "Someone Else",
        })


def test_partner_claims_are_always_tagged(ctx, partner, cause_id, make_sponsorship):
    make_sponsorship(cause_id, tote_quantity=5)
    stored = db.session.get(ApiPartner, partner[0])

    claim = PartnerService.create_claim(stored, _claim_body(cause_id, source=ClaimSource.QR_CODE))

    assert claim.source == ClaimSource.PARTNER_API
    assert claim.qr_code_scanned is False


def test_rotate_key(ctx, partner):
    rotated = PartnerService.rotate_key(partner[0])
    assert rotated.api_key != partner[1]
    assert rotated.api_key.startswith("cb_")


# ---------------------------------------------------------------------------
# /api/partner
# ---------------------------------------------------------------------------


def test_claim_needs_api_key(client, cause_id):
    resp = client.post("/api/partner/claim", json=_claim_body(cause_id))
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "API key required"


def test_claim_with_unknown_key(client, cause_id):
    resp = client.post("/api/partner/claim", json=_claim_body(cause_id),
                       headers={"X-API-Key": "cb_" + "0" * 32})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid API key"


def test_claim_through_partner_api(app, client, partner, cause_id, make_sponsorship):
    make_sponsorship(cause_id, tote_quantity=5)

    resp = client.post("/api/partner/claim", json=_claim_body(cause_id),
                       headers={"X-API-Key": partner[1]})

    assert resp.status_code == 201
    assert resp.get_json()["source"] == "PARTNER_API"
    with app.app_context():
        assert db.session.get(ApiPartner, partner[0]).last_used_at is not None


def test_claim_rules_still_apply(client, partner, cause_id, make_sponsorship):
    make_sponsorship(cause_id, tote_quantity=1)
    headers = {"X-API-Key": partner[1]}

    first = client.post("/api/partner/claim", json=_claim_body(cause_id), headers=headers)
    duplicate = client.post("/api/partner/claim", json=_claim_body(cause_id), headers=headers)
    sold_out = client.post("/api/partner/claim", json=_claim_body(cause_id, "bilal"),
                           headers=headers)

    assert first.status_code == 201
    assert duplicate.status_code == 409
    assert sold_out.get_json()["message"] == "No totes available for this cause"


def test_key_accepted_as_query_arg(client, partner, make_cause):
    make_cause("Live Cause")
    make_cause("Hidden Cause", status=CauseStatus.PENDING)

    resp = client.get(f"/api/partner/causes?apiKey={partner[1]}")

    assert resp.status_code == 200
    assert [c["title"] for c in resp.get_json()] == ["Live Cause"]


def test_disabled_partner_is_refused(admin_client, client, partner, cause_id):
    resp = admin_client.patch(f"/api/partner/partners/{partner[0]}", json={"isActive": False})
    assert resp.get_json()["isActive"] is False

    resp = client.post("/api/partner/claim", json=_claim_body(cause_id),
                       headers={"X-API-Key": partner[1]})
    assert resp.status_code == 401


def test_admin_manages_partners(admin_client, client):
    resp = admin_client.post("/api/partner/partners", json={
        "businessName": "Book Nook",
        "businessEmail": "hello@booknook.example",
        "contactName": "Ravi",
    })
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["apiKey"].startswith("cb_")

    listed = admin_client.get("/api/partner/partners").get_json()
    assert [p["businessName"] for p in listed] == ["Book Nook"]
    assert "apiKey" not in listed[0]

    rotated = admin_client.post(f"/api/partner/partners/{created['id']}/rotate-key").get_json()
    assert rotated["apiKey"] != created["apiKey"]
    resp = client.get("/api/partner/causes", headers={"X-API-Key": created["apiKey"]})
    assert resp.status_code == 401


def test_partner_admin_needs_admin(client):
    assert client.get("/api/partner/partners").status_code == 401
