"""
Email client.

Sends email through a Resend-compatible HTTP API. Delivery is best effort:
failures are logged and reported as False, never raised.
"""

import aiohttp
from loguru import logger

from app.config.settings import Settings, settings as default_settings
from app.utils.exceptions import SideEffectFailure, is_safe_to_ignore


class EmailClient:
    """HTTP email API client with bounded timeout and test-mode redirect."""

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize email client.

        Args:
            settings: Settings to read API configuration from
        """
        self.settings = settings or default_settings

    def resolve_recipient(self, to: str, subject: str) -> tuple[str, str]:
        """
        Apply test mode.

        In test mode every email goes to the test recipient and the
        subject names the original recipient.

        Args:
            to: Intended recipient
            subject: Intended subject

        Returns:
            Tuple of (recipient, subject) to actually use
        """
        if self.settings.email_test_mode and self.settings.email_test_recipient:
            return (
                self.settings.email_test_recipient,
                f"[TEST to {to}] {subject}",
            )
        return to, subject

    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            True if the API accepted the email
        """
        if not self.settings.email_api_key:
            logger.warning(
                "Email API key not configured, skipping email",
                extra={"to": to, "subject": subject},
            )
            return False

        recipient, subject = self.resolve_recipient(to, subject)
        payload = {
            "from": self.settings.email_from,
            "to": [recipient],
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {self.settings.email_api_key}"}
        timeout = aiohttp.ClientTimeout(total=self.settings.email_timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.settings.email_api_url,
                    json=payload,
                    headers=headers,
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise SideEffectFailure(
                            f"Email API returned HTTP {response.status}: {body[:200]}"
                        )
        except Exception as e:
            if not is_safe_to_ignore(e):
                raise
            logger.warning(
                "Email delivery failed",
                extra={"to": recipient, "subject": subject, "error": str(e)},
            )
            return False

        logger.info("Email sent", extra={"to": recipient, "subject": subject})
        return True
