"""SMTP email service."""

import logging
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    """Return True if all required SMTP settings are present."""
    from changebag.models import Settings

    return all(
        Settings.get(k)
        for k in ("smtp_host", "smtp_user", "smtp_from_email")
    )


def send_email(to: str, subject: str, body_html: str, body_text: str, attachments=None) -> None:
    """Send an email via SMTP. Raises on failure.

    *attachments* is an optional list of ``(filename, bytes, subtype)``
    tuples, e.g. ``("invoice.pdf", data, "pdf")``.
    """
    from changebag.models import Settings

    host = Settings.get("smtp_host", "")
    port = int(Settings.get("smtp_port", "587") or "587")
    user = Settings.get("smtp_user", "")
    password = Settings.get("smtp_password", "")
    from_email = Settings.get("smtp_from_email", "")
    use_tls = Settings.get("smtp_use_tls", "true").lower() != "false"

    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = from_email
    msg["To"] = to

    body = MIMEMultipart("alternative")
    body.attach(MIMEText(body_text, "plain"))
    body.attach(MIMEText(body_html, "html"))
    msg.attach(body)

    for filename, data, subtype in attachments or []:
        part = MIMEApplication(data, _subtype=subtype)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    with smtplib.SMTP(host, port, timeout=15) as smtp:
        if use_tls:
            smtp.starttls()
        if user and password:
            smtp.login(user, password)
        smtp.sendmail(from_email, [to], msg.as_string())

    logger.info("Email sent to %s: %s", to, subject)


def _footer_html() -> str:
    from changebag.models import Settings

    support = escape(Settings.get_support_email())
    return (
        '<hr style="margin: 30px 0; border: none; border-top: 1px solid #eee;">'
        '<p style="font-size: 12px; color: #666;">'
        "This email was sent by CauseConnect. "
        f"If you have any questions, please contact us at {support}</p>"
    )


def send_sponsorship_approval_email(to: str, contact_name: str, organization_name: str,
                                    cause_title: str) -> None:
    subject = "Congratulations! Your Logo Has Been Approved"
    body_text = (
        f"Hello {contact_name},\n\n"
        f"Your sponsorship of \"{cause_title}\" on behalf of {organization_name} "
        f"has been approved. Your logo will now be printed on the totes.\n\n"
        f"Thank you for supporting the cause."
    )
    body_html = f"""
<p>Hello {escape(contact_name)},</p>
<p>Your sponsorship of <strong>{escape(cause_title)}</strong> on behalf of
{escape(organization_name)} has been approved. Your logo will now be printed on the totes.</p>
<p>Thank you for supporting the cause.</p>
{_footer_html()}
"""
    send_email(to, subject, body_html, body_text)


def send_logo_rejection_email(to: str, contact_name: str, cause_title: str, reason: str,
                              reupload_url: str) -> None:
    subject = "Action Required: Your Logo Needs Revision"
    reason = reason or "No reason was given."
    body_text = (
        f"Hello {contact_name},\n\n"
        f"Your logo for \"{cause_title}\" could not be approved.\n\n"
        f"Reason: {reason}\n\n"
        f"Upload a revised logo here (the link expires in 7 days):\n\n"
        f"{reupload_url}\n"
    )
    body_html = f"""
<p>Hello {escape(contact_name)},</p>
<p>Your logo for <strong>{escape(cause_title)}</strong> could not be approved.</p>
<p><strong>Reason:</strong> {escape(reason)}</p>
<p>Upload a revised logo here (the link expires in 7 days):</p>
<p><a href="{reupload_url}">{reupload_url}</a></p>
{_footer_html()}
"""
    send_email(to, subject, body_html, body_text)


def send_campaign_completion_email(to: str, contact_name: str, cause_title: str,
                                   tote_quantity: int) -> None:
    subject = f"Your campaign for {cause_title} has ended"
    body_text = (
        f"Hello {contact_name},\n\n"
        f"Your sponsorship campaign for \"{cause_title}\" has been completed. "
        f"{tote_quantity} totes carried your brand to the community.\n\n"
        f"Thank you for making a difference."
    )
    body_html = f"""
<p>Hello {escape(contact_name)},</p>
<p>Your sponsorship campaign for <strong>{escape(cause_title)}</strong> has been completed.
{tote_quantity} totes carried your brand to the community.</p>
<p>Thank you for making a difference.</p>
{_footer_html()}
"""
    send_email(to, subject, body_html, body_text)


def send_waitlist_notification_email(to: str, full_name: str, cause_title: str,
                                     magic_link_url: str, hours: int, reminder: bool = False) -> None:
    """Tell a waitlisted user that totes are available, with their magic link."""
    if reminder:
        subject = f"Reminder: Totes Available - {cause_title}"
        intro = f"This is a reminder that totes are still available for the cause {cause_title}."
    else:
        subject = f"Totes Available: {cause_title}"
        intro = (
            f"Great news! The cause you joined the waitlist for, {cause_title}, "
            f"has received funding and totes are now available for claim."
        )

    body_text = (
        f"Hello {full_name},\n\n"
        f"{intro}\n\n"
        f"As a waitlist member, you have priority access to claim your tote. "
        f"This link expires in {hours} hours:\n\n"
        f"{magic_link_url}\n"
    )
    body_html = f"""
<h2 style="color: #333;">Totes Are Now Available</h2>
<p>Hello {escape(full_name)},</p>
<p>{escape(intro)}</p>
<p><strong>As a waitlist member, you have priority access to claim your tote.</strong>
This link expires in {hours} hours.</p>
<p><a href="{magic_link_url}">Claim Your Tote Now</a></p>
<p style="color: #666;">If the link doesn't work, copy this into your browser:<br>{magic_link_url}</p>
{_footer_html()}
"""
    send_email(to, subject, body_html, body_text)


def send_invoice_email(to: str, organization_name: str, cause_title: str, invoice_number: str,
                       total: float, currency: str, pdf_bytes: bytes) -> None:
    subject = f"Invoice {invoice_number} for your sponsorship of {cause_title}"
    body_text = (
        f"Thank you, {organization_name}!\n\n"
        f"Your payment of {currency} {total:.2f} for \"{cause_title}\" was received. "
        f"Invoice {invoice_number} is attached."
    )
    body_html = f"""
<p>Thank you, {escape(organization_name)}!</p>
<p>Your payment of <strong>{escape(currency)} {total:.2f}</strong> for
<strong>{escape(cause_title)}</strong> was received.</p>
<p>Invoice {escape(invoice_number)} is attached.</p>
{_footer_html()}
"""
    send_email(
        to,
        subject,
        body_html,
        body_text,
        attachments=[(f"invoice-{invoice_number}.pdf", pdf_bytes, "pdf")],
    )
