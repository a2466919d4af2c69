"""Readiness dependency for routes that need an initialized database."""

from fastapi import HTTPException, Request, status


def require_ready(request: Request) -> None:
    """Answer 503 until the application's readiness gate has opened."""
    gate = getattr(request.app.state, "readiness", None)
    if gate is None or not gate.is_ready:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable - database initializing",
        )
