"""Time-based one-time passwords (RFC 6238) for two-factor authentication."""

import re

import pyotp

_TOKEN_RE = re.compile(r"^\d{6}$")


class TOTPHelper:
    def __init__(self, issuer: str = "AdjusterHub", valid_window: int = 1):
        self.issuer = issuer
        self.valid_window = valid_window

    def generate_secret(self) -> str:
        return pyotp.random_base32()

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        """otpauth:// URI for authenticator apps (rendered as a QR code client-side)."""
        return pyotp.TOTP(secret).provisioning_uri(name=account_name, issuer_name=self.issuer)

    def verify(self, secret: str, token: str) -> bool:
        if not secret or not token:
            return False
        token = token.strip().replace(" ", "")
        if not _TOKEN_RE.match(token):
            return False
        return pyotp.TOTP(secret).verify(token, valid_window=self.valid_window)
