"""
Outbound email delivery through an HTTP email API.
"""

from typing import Optional
from urllib.parse import quote

import httpx
from loguru import logger

from volt.core.config import Settings, settings
from volt.utils.exceptions import InternalError


PASSWORD_RESET_SUBJECT = "Password reset"

PASSWORD_RESET_BODY = """
<p style="font-size: 16px">Hi there,<br/>it looks like you forgot your password, click the link below to create a new one.</p>
<p style="font-size: 16px"><a href="{link}">{link}</a></p>
<p style="font-size: 16px">Please note that this link <strong>will expire in {minutes} minutes</strong>. If you're not expecting this email or did not request it, feel free to ignore it.</p>
<hr />
<p style="font-size: 12px">This is an automated email from Volt. Please do not reply.</p>
"""


class EmailService:
    """Sends transactional emails.

    Delivery failures are raised to the caller; there is no retry here.
    """

    def __init__(self, config: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.config.EMAIL_API_KEY)

    def password_reset_link(self, token: str) -> str:
        base = self.config.FRONTEND_URL.rstrip("/")
        return f"{base}/recover/reset?token={quote(token)}"

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.enabled:
            logger.warning(f"Email delivery disabled (no EMAIL_API_KEY); skipped '{subject}' to {to}")
            return

        payload = {
            "from": self.config.EMAIL_FROM,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {self.config.EMAIL_API_KEY}"}

        async with httpx.AsyncClient(
            timeout=self.config.EMAIL_TIMEOUT_SECONDS,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(self.config.EMAIL_API_URL, json=payload, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"Email API rejected message to {to}: HTTP {e.response.status_code}")
                raise InternalError("Could not send email") from e
            except httpx.HTTPError as e:
                logger.error(f"Email delivery to {to} failed: {e.__class__.__name__}")
                raise InternalError("Could not send email") from e

        logger.info(f"Sent '{subject}' email to {to}")

    async def send_password_reset(self, to: str, token: str) -> None:
        body = PASSWORD_RESET_BODY.format(
            link=self.password_reset_link(token),
            minutes=self.config.RECOVERY_TOKEN_EXPIRE_MINUTES,
        )
        await self.send(to, PASSWORD_RESET_SUBJECT, body)


email_service = EmailService(settings)


def get_email_service() -> EmailService:
    """Dependency for the email collaborator."""
    return email_service
