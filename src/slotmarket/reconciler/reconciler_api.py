"""HTTP trigger for the slot reconciler."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from ..exceptions import AuthError
from .reconciler_service import SlotReconciler, authorize_trigger

router = APIRouter(tags=["reconciler"])

logger = structlog.get_logger(__name__)


def get_reconciler(request: Request) -> SlotReconciler:
    try:
        return request.app.state.reconciler  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - misconfigured app
        raise RuntimeError("SlotReconciler is not configured") from exc


def get_reconciler_api_key(request: Request) -> str | None:
    return getattr(request.app.state, "reconciler_api_key", None)


@router.api_route("/api/reconcile", methods=["GET", "POST"])
def trigger_reconcile(
    api_key: str | None = Query(default=None, alias="apiKey"),
    expected_key: str | None = Depends(get_reconciler_api_key),
    reconciler: SlotReconciler = Depends(get_reconciler),
) -> JSONResponse:
    """Run one reconciliation pass; invoked by an external scheduler."""
    try:
        authorize_trigger(expected_key, api_key)
    except AuthError:
        logger.warning("reconciler.trigger.unauthorized")
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Unauthorized"})

    try:
        report = reconciler.run()
    except Exception as exc:
        logger.exception("reconciler.trigger.failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(exc)},
        )

    return JSONResponse(
        content={
            "success": True,
            "processed": report.processed,
            "updated": report.updated,
        }
    )
