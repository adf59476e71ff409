"""Shared constants and sample payloads for offline tests."""

TEST_PASSWORD = "Adjust3r!Pass"
TEST_JWT_SECRET = "test-jwt-secret-that-is-long-enough-for-hs256"

SAMPLE_PDF = (
    b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    b"2 0 obj\n<< /Type /Pages /Kids [] /Count 0 >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"
)

SAMPLE_ESTIMATE = b"Roof estimate\nShingles: 24 squares\nLabor: 2 days\n"
