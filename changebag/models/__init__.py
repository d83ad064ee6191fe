from changebag.models.user import User, UserRole, admin_required, current_user_id
from changebag.models.cause import Cause, CauseStatus
from changebag.models.sponsorship import (
    Sponsorship,
    SponsorshipStatus,
    DistributionType,
    PaymentStatus,
)
from changebag.models.claim import Claim, ClaimStatus, ClaimSource
from changebag.models.waitlist import WaitlistEntry, WaitlistStatus
from changebag.models.settings import Settings
from changebag.models.otp_verification import OtpVerification
from changebag.models.api_partner import ApiPartner, api_key_required
from changebag.models.distribution import (
    Country,
    City,
    DistributionCategory,
    DistributionPoint,
)

__all__ = [
    "User",
    "UserRole",
    "admin_required",
    "current_user_id",
    "Cause",
    "CauseStatus",
    "Sponsorship",
    "SponsorshipStatus",
    "DistributionType",
    "PaymentStatus",
    "Claim",
    "ClaimStatus",
    "ClaimSource",
    "WaitlistEntry",
    "WaitlistStatus",
    "Settings",
    "OtpVerification",
    "ApiPartner",
    "api_key_required",
    "Country",
    "City",
    "DistributionCategory",
    "DistributionPoint",
]
