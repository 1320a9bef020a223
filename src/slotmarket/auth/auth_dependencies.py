"""Common access dependencies for FastAPI routers."""

from __future__ import annotations

from typing import Callable

from fastapi import HTTPException, Request, status

from ..exceptions import AuthError

AdminGuard = Callable[[Request], None]


def get_admin_guard(request: Request) -> AdminGuard | None:
    return getattr(request.app.state, "admin_guard", None)


def require_admin_access(request: Request) -> None:
    """Run the configured admin guard hook; no hook means the caller is trusted.

    The hook raises :class:`AuthError` to deny access. Policy lives with the
    deployment, not here.
    """
    guard = get_admin_guard(request)
    if guard is None:
        return
    try:
        guard(request)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"status": "error", "failure_reason": exc.code, "details": str(exc)},
        ) from exc


__all__ = ["AdminGuard", "get_admin_guard", "require_admin_access"]
