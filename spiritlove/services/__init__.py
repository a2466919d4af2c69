"""Service layer: credential lifecycle, sessions, email and audit logging."""
