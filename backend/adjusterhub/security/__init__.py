"""Authentication primitives: passwords, sessions, TOTP, sanitization, audit."""
