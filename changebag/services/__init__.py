from changebag.services.inventory import InventoryService, ToteInventory
from changebag.services.causes import CauseService
from changebag.services.waitlist import WaitlistService
from changebag.services.sponsorships import SponsorshipService
from changebag.services.claims import ClaimService
from changebag.services.invoice import InvoiceService
from changebag.services.payments import PaymentService, RazorpayClient
from changebag.services.otp import OtpService
from changebag.services.stats import StatsService
from changebag.services.partners import PartnerService
from changebag.services.distribution import DistributionService

__all__ = [
    "InventoryService",
    "ToteInventory",
    "CauseService",
    "WaitlistService",
    "SponsorshipService",
    "ClaimService",
    "InvoiceService",
    "PaymentService",
    "RazorpayClient",
    "OtpService",
    "StatsService",
    "PartnerService",
    "DistributionService",
]
