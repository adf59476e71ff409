"""Tests for password hashing, session tokens, TOTP, sanitization and upload screening."""

from datetime import datetime, timedelta, timezone

import jwt
import pyotp
import pytest

from adjusterhub.security.passwords import PasswordHasher, validate_password_strength
from adjusterhub.security.sanitize import matches, sanitize_input, sanitize_text
from adjusterhub.security.tokens import SessionTokenCodec, generate_opaque_token, hash_token
from adjusterhub.security.totp import TOTPHelper
from adjusterhub.security.uploads import normalize_filename, validate_upload

SECRET = "unit-test-secret-value-of-sufficient-length"
MB = 1024 * 1024


class TestPasswords:
    def test_hash_and_verify(self, hasher):
        digest = hasher.hash("Adjust3r!Pass")
        assert digest != "Adjust3r!Pass"
        assert hasher.verify("Adjust3r!Pass", digest)
        assert not hasher.verify("adjust3r!pass", digest)

    def test_verify_rejects_empty_and_malformed(self, hasher):
        assert not hasher.verify("", hasher.hash("x"))
        assert not hasher.verify("secret", "")
        assert not PasswordHasher(rounds=4).verify("secret", "not-a-bcrypt-hash")

    def test_strength_scoring(self):
        strong = validate_password_strength("Sup3r$ecret!")
        assert strong.valid
        assert strong.score == 6
        assert strong.feedback == []

        weak = validate_password_strength("password")
        assert not weak.valid
        assert weak.score == 2
        assert "Password must contain uppercase letters" in weak.feedback

    def test_four_rules_is_enough(self):
        assert validate_password_strength("Abcdefg1").valid


class TestSessionTokens:
    def test_issue_and_decode(self):
        codec = SessionTokenCodec(SECRET, ttl_seconds=3600)
        issued = codec.issue(42, "adjuster@example.com", "ADJUSTER")
        claims = codec.decode(issued.token)
        assert claims.user_id == 42
        assert claims.email == "adjuster@example.com"
        assert claims.role == "ADJUSTER"
        assert claims.jti == issued.jti
        assert claims.expires_at == issued.expires_at.replace(microsecond=0)

    def test_expired_token(self):
        codec = SessionTokenCodec(SECRET, ttl_seconds=60)
        issued = codec.issue(1, "a@example.com", "ADJUSTER", now=datetime.now(timezone.utc) - timedelta(hours=1))
        assert codec.decode(issued.token) is None

    def test_forged_token(self):
        issued = SessionTokenCodec("another-secret-of-plenty-length-123456").issue(1, "a@example.com", "ADMIN")
        assert SessionTokenCodec(SECRET).decode(issued.token) is None

    def test_missing_jti(self):
        token = jwt.encode({"sub": "1", "exp": 9_999_999_999}, SECRET, algorithm="HS256")
        assert SessionTokenCodec(SECRET).decode(token) is None

    def test_garbage(self):
        assert SessionTokenCodec(SECRET).decode("not.a.jwt") is None

    def test_hash_token_is_stable_sha256(self):
        assert hash_token("abc") == hash_token("abc")
        assert len(hash_token("abc")) == 64

    def test_opaque_tokens_are_unique(self):
        assert generate_opaque_token() != generate_opaque_token()


class TestTOTP:
    def test_verify_current_code(self):
        helper = TOTPHelper()
        secret = helper.generate_secret()
        assert helper.verify(secret, pyotp.TOTP(secret).now())

    def test_rejects_malformed_codes(self):
        helper = TOTPHelper()
        secret = helper.generate_secret()
        assert not helper.verify(secret, "12345")
        assert not helper.verify(secret, "abcdef")
        assert not helper.verify("", "123456")

    def test_provisioning_uri(self):
        uri = TOTPHelper(issuer="AdjusterHub").provisioning_uri("JBSWY3DPEHPK3PXP", "a@example.com")
        assert uri.startswith("otpauth://totp/")
        assert "issuer=AdjusterHub" in uri


class TestSanitize:
    def test_scripts_are_dropped_with_content(self):
        assert sanitize_input("<script>alert(1)</script><b>bold</b> text") == "<b>bold</b> text"

    def test_attributes_are_stripped(self):
        assert sanitize_input('<p onclick="x()">hi</p>') == "<p>hi</p>"

    def test_plain_text_variant(self):
        assert sanitize_text("  <em>Roof</em> damage  ") == "Roof damage"

    def test_none(self):
        assert sanitize_text(None) == ""

    @pytest.mark.parametrize(
        "name, value, expected",
        [
            ("phone", "+1 (512) 555-0100", True),
            ("phone", "555", False),
            ("zip_code", "78701", True),
            ("zip_code", "78701-1234", True),
            ("zip_code", "7870", False),
            ("claim_number", "CLM-2025-0001", True),
            ("filename", "report_v2.pdf", True),
            ("filename", "report v2.pdf", False),
        ],
    )
    def test_patterns(self, name, value, expected):
        assert matches(name, value) is expected


class TestUploads:
    def test_accepts_pdf(self):
        assert validate_upload("estimate.pdf", "application/pdf", 2048, 10 * MB) is None

    def test_rejections_in_order(self):
        assert validate_upload("a.pdf", "application/pdf", 0, 10 * MB) == "File is empty"
        assert validate_upload("a.pdf", "application/pdf", 11 * MB, 10 * MB) == "File size exceeds 10MB limit"
        assert validate_upload("a.exe", "application/x-msdownload", 10, 10 * MB) == "File type not allowed"
        assert validate_upload("a.php", "text/plain", 10, 10 * MB) == "File extension not allowed"
        assert validate_upload("a$b.txt", "text/plain", 10, 10 * MB) == "Invalid filename characters"

    def test_normalize_filename(self):
        assert normalize_filename("C:\\Users\\me\\Roof photo 1.jpg") == "Roof_photo_1.jpg"
        assert normalize_filename("../../etc/passwd") == "passwd"
