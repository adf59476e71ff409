"""Transactional email delivery over an HTTP email API."""

import logging
from typing import Optional

import httpx

from adjusterhub.clients.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)


class EmailClient(BaseHTTPClient):
    """Send verification, password-reset and welcome emails.

    Without an API key nothing is sent: the attempt is logged and ``send``
    returns False, which keeps local development and tests offline.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        sender: str = "AdjusterHub <no-reply@adjusterhub.local>",
        frontend_url: str = "http://localhost:3000",
        retry_max_attempts: int = 3,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(
            base_url=base_url,
            api_key=api_key or None,
            retry_max_attempts=retry_max_attempts,
            transport=transport,
        )
        self.sender = sender
        self.frontend_url = frontend_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        if not self.configured:
            logger.info("email_delivery_skipped to=%s subject=%r", to, subject)
            return False
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        if text:
            payload["text"] = text
        try:
            result = self._post("/emails", payload)
        except httpx.HTTPError as exc:
            logger.error("Email delivery to %s failed: %s", to, exc)
            return False
        return result is not None

    # ── templates ────────────────────────────────────────────────────

    def send_verification_email(self, to: str, first_name: str, token: str) -> bool:
        link = f"{self.frontend_url}/auth/verify-email?token={token}"
        return self.send(
            to,
            "Verify your AdjusterHub email address",
            f"<p>Hi {first_name},</p><p>Confirm your email address to finish setting up "
            f'your account:</p><p><a href="{link}">Verify email</a></p>'
            "<p>This link expires in 24 hours.</p>",
            text=f"Hi {first_name}, verify your email: {link} (expires in 24 hours)",
        )

    def send_password_reset_email(self, to: str, first_name: str, token: str) -> bool:
        link = f"{self.frontend_url}/auth/reset-password?token={token}"
        return self.send(
            to,
            "Reset your AdjusterHub password",
            f"<p>Hi {first_name},</p><p>Someone asked to reset your password. If it was you, "
            f'<a href="{link}">choose a new password</a>. The link expires in 1 hour.</p>'
            "<p>If it wasn't you, you can ignore this email.</p>",
            text=f"Hi {first_name}, reset your password: {link} (expires in 1 hour)",
        )

    def send_welcome_email(self, to: str, first_name: str) -> bool:
        return self.send(
            to,
            "Welcome to AdjusterHub",
            f"<p>Hi {first_name},</p><p>Your account is ready. Browse available claims "
            f'from your <a href="{self.frontend_url}/dashboard">dashboard</a>.</p>',
        )

    def send_support_ticket_email(self, to: str, first_name: str, ticket_number: str, subject: str) -> bool:
        link = f"{self.frontend_url}/dashboard/support"
        return self.send(
            to,
            f"Support ticket {ticket_number} received",
            f"<p>Hi {first_name},</p><p>We received your support request "
            f"<strong>{subject}</strong> and logged it as ticket {ticket_number}. "
            f'Follow its progress from the <a href="{link}">support page</a>.</p>',
            text=f"Hi {first_name}, your support ticket {ticket_number} ({subject}) was received: {link}",
        )
