"""Shared fixtures.

Tests run against an in-memory SQLite database. Factories open their own
app context and return ids, so they work both from service tests (inside
``ctx``) and from HTTP tests that only hold a test client.
"""

from datetime import date

import pytest

from changebag import create_app, db
from changebag.config import Config
from changebag.models import (
    Cause,
    CauseStatus,
    Claim,
    ClaimSource,
    ClaimStatus,
    Sponsorship,
    SponsorshipStatus,
    User,
    UserRole,
)

PASSWORD = "password123"


class ConfigForTests(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SCHEDULER_ENABLED = False
    ASYNC_NOTIFICATIONS = False
    ENVIRONMENT = "testing"
    FRONTEND_URL = "http://frontend.test"
    RAZORPAY_KEY_ID = "rzp_test_key"
    RAZORPAY_KEY_SECRET = "rzp_test_secret"
    RAZORPAY_API_URL = "https://razorpay.test/v1"
    TWILIO_ACCOUNT_SID = "AC123"
    TWILIO_AUTH_TOKEN = "twilio-token"
    TWILIO_FROM_NUMBER = "+15005550006"
    INVOICE_FOLDER = ""


@pytest.fixture
def app():
    app = create_app(ConfigForTests)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Application context for calling services directly."""
    with app.app_context():
        yield app
        db.session.rollback()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(monkeypatch):
    """Capture outgoing email instead of talking to SMTP."""
    from changebag.services import email as email_service

    sent = []

    def fake_send(to, subject, body_html, body_text, attachments=None):
        sent.append({
            "to": to,
            "subject": subject,
            "html": body_html,
            "text": body_text,
            "attachments": attachments or [],
        })

    monkeypatch.setattr(email_service, "is_configured", lambda: True)
    monkeypatch.setattr(email_service, "send_email", fake_send)
    return sent


@pytest.fixture
def make_user(app):
    def _make(email="claimer@example.org", role=UserRole.CLAIMER, name="Test User"):
        with app.app_context():
            user = User(email=email, name=name, role=role)
            user.set_password(PASSWORD)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def admin_id(make_user):
    return make_user("admin@example.org", UserRole.ADMIN, "Admin")


@pytest.fixture
def make_cause(app, admin_id):
    def _make(title="Clean Beaches", status=CauseStatus.APPROVED, creator_id=None,
              category="Environment"):
        with app.app_context():
            cause = Cause(
                title=title,
                description=f"{title} description",
                category=category,
                target_amount=10000,
                current_amount=0,
                creator_id=creator_id or admin_id,
                status=status,
            )
            db.session.add(cause)
            db.session.commit()
            return cause.id
    return _make


@pytest.fixture
def cause_id(make_cause):
    return make_cause()


@pytest.fixture
def make_sponsorship(app):
    """Insert a sponsorship directly in the given status."""
    def _make(cause_id, tote_quantity=100, status=SponsorshipStatus.APPROVED, unit_price=10,
              email="sponsor@example.org", **overrides):
        from changebag.services import CauseService

        with app.app_context():
            fields = dict(
                cause_id=cause_id,
                organization_name="Acme Corp",
                contact_name="Asha Rao",
                email=email,
                phone="9876543210",
                tote_quantity=tote_quantity,
                number_of_totes=tote_quantity,
                unit_price=unit_price,
                total_amount=tote_quantity * unit_price,
                logo_url="https://cdn.example.org/acme.png",
                distribution_type="online",
                selected_cities=["Mumbai"],
                distribution_start_date=date(2026, 11, 1),
                distribution_end_date=date(2026, 12, 1),
                status=status,
                is_online=status == SponsorshipStatus.APPROVED,
            )
            fields.update(overrides)
            sponsorship = Sponsorship(**fields)
            db.session.add(sponsorship)
            CauseService.recompute_current_amount(cause_id)
            db.session.commit()
            return sponsorship.id
    return _make


@pytest.fixture
def make_claim(app):
    """Insert a claim directly, bypassing the availability check."""
    def _make(cause_id, email="claimant@example.org", status=ClaimStatus.PENDING,
              source=ClaimSource.DIRECT, **overrides):
        with app.app_context():
            claim = Claim(
                cause_id=cause_id,
                cause_title="Clean Beaches",
                full_name="Ravi Kumar",
                email=email,
                status=status,
                source=source,
                **overrides,
            )
            db.session.add(claim)
            db.session.commit()
            return claim.id
    return _make


@pytest.fixture
def sponsorship_payload(cause_id):
    """A complete sponsorship request body as the wizard sends it."""
    return {
        "cause": cause_id,
        "organizationName": "Acme Corp",
        "contactName": "Asha Rao",
        "email": "Sponsor@Example.org",
        "phone": "9876543210",
        "toteQuantity": 50,
        "unitPrice": 10,
        "distributionType": "online",
        "selectedCities": ["Mumbai", "Pune"],
        "distributionStartDate": "2026-11-01",
        "distributionEndDate": "2026-12-01",
        "logoUrl": "https://cdn.example.org/acme.png",
    }


def _login(client, email, password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.fixture
def login():
    """Log a test client in through the auth endpoint."""
    return _login


@pytest.fixture
def admin_client(app, admin_id):
    client = app.test_client()
    _login(client, "admin@example.org")
    return client
