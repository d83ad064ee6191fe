"""Best-effort delivery of outgoing emails.

Senders run after the primary transaction has committed. A failure is
logged and never propagates to the caller.
"""

import logging
import threading

from flask import current_app

from changebag.services import email as email_service

logger = logging.getLogger(__name__)


def dispatch(send, *args, **kwargs) -> None:
    """Deliver a notification, on a daemon thread when ASYNC_NOTIFICATIONS is set."""
    app = current_app._get_current_object()
    if app.config.get("ASYNC_NOTIFICATIONS"):
        thread = threading.Thread(
            target=_deliver_in_app, args=(app, send, args, kwargs), daemon=True
        )
        thread.start()
        return
    deliver(send, *args, **kwargs)


def deliver(send, *args, **kwargs) -> bool:
    """Run *send* now. Returns True if the email went out."""
    name = getattr(send, "__name__", repr(send))
    if not email_service.is_configured():
        logger.info("SMTP not configured; skipping %s", name)
        return False
    try:
        send(*args, **kwargs)
    except Exception:
        logger.exception("Notification %s failed", name)
        return False
    return True


def _deliver_in_app(app, send, args, kwargs) -> None:
    with app.app_context():
        deliver(send, *args, **kwargs)
