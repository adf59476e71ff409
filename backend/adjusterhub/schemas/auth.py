"""Authentication request/response schemas."""

from typing import List, Optional

from pydantic import EmailStr, Field, model_validator

from adjusterhub.schemas.common import APIModel
from adjusterhub.schemas.user import UserSummary


class LoginRequest(APIModel):
    email: EmailStr
    password: str = Field(min_length=6)
    two_factor_token: Optional[str] = None


class LoginResponse(APIModel):
    success: bool = True
    user: UserSummary


class TwoFactorChallenge(APIModel):
    requires_two_factor: bool = True


class RegisterRequest(APIModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = None
    license_number: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    years_experience: Optional[int] = Field(default=None, ge=0, le=80)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    travel_radius: Optional[int] = Field(default=None, ge=0, le=2000)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class ForgotPasswordRequest(APIModel):
    email: EmailStr


class ResetPasswordRequest(APIModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=100)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class VerifyEmailRequest(APIModel):
    token: str = Field(min_length=1)


class ResendVerificationRequest(APIModel):
    email: EmailStr


class TwoFactorSetupResponse(APIModel):
    secret: str
    otpauth_url: str
    message: str = "Scan the code with your authenticator app, then verify a token to enable 2FA"


class TwoFactorVerifyRequest(APIModel):
    token: str = Field(pattern=r"^\d{6}$")


class TwoFactorDisableRequest(APIModel):
    password: str = Field(min_length=1)


class MessageResponse(APIModel):
    success: bool = True
    message: str


class CsrfTokenResponse(APIModel):
    csrf_token: str
