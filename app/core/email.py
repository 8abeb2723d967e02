"""Transactional email via Resend.

EmailService is built once from settings and injected where mail is sent.
An unconfigured service (no RESEND_API_KEY) degrades to a logged no-op, and
provider failures are logged and reported through EmailResult rather than
raised, so callers never fail because mail could not be delivered.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

import resend

from app.core.constants import JinjaCompiledEmailTemplatesEnv
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailResult:
    """Outcome of a send attempt."""

    sent: bool
    message_id: str | None = None
    error: str | None = None


def _render_template(template_name: str, **context: object) -> str:
    """Render a pre-compiled email template.

    Templates are pre-compiled with CSS inlined and HTML minified.
    Run `python scripts/compile_emails.py` after modifying source templates.
    """
    template = JinjaCompiledEmailTemplatesEnv.get_template(template_name)
    return template.render(**context)


class EmailService:
    def __init__(
        self,
        api_key: str | None,
        from_email: str,
        app_name: str = "RT-SYR",
        otp_expires_minutes: int = 15,
    ):
        self._from_email = from_email
        self._app_name = app_name
        self._otp_expires_minutes = otp_expires_minutes
        self.configured = bool(api_key)

        if self.configured:
            resend.api_key = api_key
            logger.info("Email delivery configured (sender %s)", from_email)
        else:
            logger.warning("RESEND_API_KEY not set. Email sending disabled.")

    def send(self, to: str, subject: str, html: str) -> EmailResult:
        """Send one HTML message."""
        if not self.configured:
            logger.warning("Email to %s skipped (not configured): %s", to, subject)
            return EmailResult(sent=False, error="not_configured")

        try:
            response = resend.Emails.send(
                {
                    "from": self._from_email,
                    "to": to,
                    "subject": subject,
                    "html": html,
                }
            )
        except Exception as e:
            logger.error("Failed to send email to %s: %s", to, e)
            return EmailResult(sent=False, error=str(e))

        message_id = response.get("id") if isinstance(response, dict) else None
        logger.info("Email sent to %s (%s)", to, subject)
        return EmailResult(sent=True, message_id=message_id)

    def send_otp(self, email: str, otp: str, full_name: str | None = None) -> EmailResult:
        """Send the email verification code."""
        if not self.configured:
            # Development fallback: the code is only reachable through logs
            logger.warning("[DEV MODE] OTP for %s: %s", email, otp)
            return EmailResult(sent=False, error="not_configured")

        html = _render_template(
            "otp-verification.html",
            app_name=self._app_name,
            full_name=full_name or "there",
            otp=otp,
            expires_minutes=self._otp_expires_minutes,
        )
        result = self.send(email, f"Email Verification - {self._app_name}", html)
        if not result.sent:
            logger.warning("[FALLBACK] OTP for %s: %s", email, otp)
        return result


def build_email_service(settings: Settings) -> EmailService:
    return EmailService(
        api_key=settings.resend_api_key,
        from_email=settings.email_from,
        app_name=settings.app_name,
        otp_expires_minutes=settings.otp_expires_minutes,
    )


@lru_cache
def get_email_service() -> EmailService:
    """Get the process-wide email service (FastAPI dependency)."""
    return build_email_service(get_settings())
