"""SMTP mailer used by the identity and events flows."""

from __future__ import annotations

import hashlib
import logging
from email.message import EmailMessage
from typing import Iterable

import aiosmtplib

from zipo.exceptions import UpstreamError
from zipo.obs import metrics as obs_metrics
from zipo.settings import settings

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    masked = hashlib.sha256(email.lower().encode("utf-8")).hexdigest()
    return masked[:12]


class Mailer:
    """Sends HTML email through the configured SMTP relay."""

    async def _deliver(self, message: EmailMessage) -> None:
        # STARTTLS on 587, implicit TLS on 465.
        start_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 587
        use_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 465
        await aiosmtplib.send(
            message,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            start_tls=start_tls,
            use_tls=use_tls,
        )

    async def send(self, to: str | Iterable[str], subject: str, body_html: str, *, template: str = "generic") -> None:
        """Send an email, raising UpstreamError when delivery fails."""
        recipients = [to] if isinstance(to, str) else list(to)
        if not recipients:
            return
        message = EmailMessage()
        message["From"] = settings.smtp_from_email
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message["Reply-To"] = settings.smtp_reply_to
        message.set_content(body_html, subtype="html")
        try:
            await self._deliver(message)
        except (aiosmtplib.SMTPException, OSError) as exc:
            obs_metrics.email_sent(template, "failed")
            logger.error(
                "email_send_failed",
                extra={"template": template, "recipients": [mask_email(r) for r in recipients], "error": str(exc)},
            )
            raise UpstreamError("Please check that your email is correct and try again.") from exc
        obs_metrics.email_sent(template, "sent")
        logger.info("email_sent", extra={"template": template, "recipients": [mask_email(r) for r in recipients]})

    async def send_best_effort(self, to: str | Iterable[str], subject: str, body_html: str, *, template: str = "generic") -> bool:
        """Send an email; failures are logged and counted, never raised."""
        try:
            await self.send(to, subject, body_html, template=template)
        except UpstreamError:
            return False
        return True


_mailer = Mailer()


def get_mailer() -> Mailer:
    return _mailer


def set_mailer(mailer: Mailer) -> None:
    global _mailer
    _mailer = mailer
