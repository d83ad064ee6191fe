import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "postgresql://localhost:5432/changebag"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"connect_timeout": 5},
    }

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Links embedded in outgoing emails
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:8085")
    DEFAULT_LOGO_URL = os.environ.get(
        "DEFAULT_LOGO_URL", "https://api.changebag.org/uploads/default-logo.png"
    )

    # Waitlist magic links
    MAGIC_LINK_HOURS = int(os.environ.get("MAGIC_LINK_HOURS", "48"))

    # Signed logo reupload links sent with rejection emails
    REUPLOAD_LINK_MAX_AGE = 7 * 24 * 3600

    # OTP verification
    OTP_TTL_MINUTES = 10

    # Payment gateway
    RAZORPAY_KEY_ID = os.environ.get("RAZORPAY_KEY_ID", "")
    RAZORPAY_KEY_SECRET = os.environ.get("RAZORPAY_KEY_SECRET", "")
    RAZORPAY_API_URL = os.environ.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1")

    # SMS provider
    TWILIO_ACCOUNT_SID = os.environ.get("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN = os.environ.get("TWILIO_AUTH_TOKEN", "")
    TWILIO_FROM_NUMBER = os.environ.get("TWILIO_FROM_NUMBER", "")

    # Generated invoice PDFs
    INVOICE_FOLDER = os.environ.get("INVOICE_FOLDER", "/tmp/changebag-invoices")

    # Background work
    SCHEDULER_ENABLED = _env_flag("SCHEDULER_ENABLED", "true")
    ASYNC_NOTIFICATIONS = _env_flag("ASYNC_NOTIFICATIONS", "true")

    # Listing defaults
    PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
