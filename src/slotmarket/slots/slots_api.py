"""Admin slot routes (reads, draft review, maintenance, batch)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..api.errors import batch_failure_response, http_error
from ..auth.auth_dependencies import require_admin_access
from ..exceptions import BatchFailed, BatchPartialFailure, SlotEngineError, ValidationError
from .slots_models import SlotStatus
from .slots_schemas import (
    BatchReportResponse,
    BatchRequest,
    DraftSubmissionRequest,
    SlotDetailsResponse,
    SlotResponse,
    SlotStatsResponse,
)
from .slots_service import ADMIN_ACTIONS, SlotAdminService

router = APIRouter(
    prefix="/api/slots",
    tags=["slots"],
    dependencies=[Depends(require_admin_access)],
)


def get_slot_service(request: Request) -> SlotAdminService:
    try:
        return request.app.state.slot_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - misconfigured app
        raise RuntimeError("SlotAdminService is not configured") from exc


def _parse_status(value: str | None) -> SlotStatus | None:
    if value is None or value == "":
        return None
    try:
        return SlotStatus(value)
    except ValueError:
        raise http_error(ValidationError(f"unknown slot status '{value}'")) from None


@router.get("/")
def list_slots(
    status: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=128),
    service: SlotAdminService = Depends(get_slot_service),
) -> list[SlotResponse]:
    slot_status = _parse_status(status)
    try:
        slots = service.list_slots(status=slot_status, search=search)
    except SlotEngineError as exc:
        raise http_error(exc) from exc
    return [SlotResponse.from_domain(slot) for slot in slots]


@router.get("/stats")
def slot_stats(service: SlotAdminService = Depends(get_slot_service)) -> SlotStatsResponse:
    try:
        stats = service.slot_stats()
    except SlotEngineError as exc:
        raise http_error(exc) from exc
    return SlotStatsResponse.from_domain(stats)


@router.get("/{slot_id}")
def fetch_slot(
    slot_id: int,
    service: SlotAdminService = Depends(get_slot_service),
) -> SlotDetailsResponse:
    try:
        slot = service.get_slot(slot_id)
    except SlotEngineError as exc:
        raise http_error(exc) from exc
    base = SlotResponse.from_domain(slot)
    return SlotDetailsResponse(**base.model_dump(), available_actions=service.available_actions(slot))


@router.put("/{slot_id}/draft")
def submit_draft(
    slot_id: int,
    payload: DraftSubmissionRequest,
    service: SlotAdminService = Depends(get_slot_service),
) -> SlotResponse:
    try:
        slot = service.submit_draft(slot_id, payload.to_domain())
    except SlotEngineError as exc:
        raise http_error(exc) from exc
    return SlotResponse.from_domain(slot)


@router.patch("/{slot_id}/draft")
def revise_draft(
    slot_id: int,
    payload: DraftSubmissionRequest,
    service: SlotAdminService = Depends(get_slot_service),
) -> SlotResponse:
    try:
        slot = service.revise_draft(slot_id, payload.to_domain())
    except SlotEngineError as exc:
        raise http_error(exc) from exc
    return SlotResponse.from_domain(slot)


@router.post("/{slot_id}/draft/ready")
def mark_ready_to_publish(
    slot_id: int,
    service: SlotAdminService = Depends(get_slot_service),
) -> SlotResponse:
    try:
        slot = service.mark_ready_to_publish(slot_id)
    except SlotEngineError as exc:
        raise http_error(exc) from exc
    return SlotResponse.from_domain(slot)


@router.post("/{slot_id}/approve")
def approve_draft(slot_id: int, service: SlotAdminService = Depends(get_slot_service)) -> SlotResponse:
    try:
        return SlotResponse.from_domain(service.approve_draft(slot_id))
    except SlotEngineError as exc:
        raise http_error(exc) from exc


@router.post("/{slot_id}/reject")
def reject_draft(slot_id: int, service: SlotAdminService = Depends(get_slot_service)) -> SlotResponse:
    try:
        return SlotResponse.from_domain(service.reject_draft(slot_id))
    except SlotEngineError as exc:
        raise http_error(exc) from exc


@router.post("/{slot_id}/maintenance")
def set_maintenance(slot_id: int, service: SlotAdminService = Depends(get_slot_service)) -> SlotResponse:
    try:
        return SlotResponse.from_domain(service.set_maintenance(slot_id))
    except SlotEngineError as exc:
        raise http_error(exc) from exc


@router.delete("/{slot_id}/maintenance")
def clear_maintenance(slot_id: int, service: SlotAdminService = Depends(get_slot_service)) -> SlotResponse:
    try:
        return SlotResponse.from_domain(service.clear_maintenance(slot_id))
    except SlotEngineError as exc:
        raise http_error(exc) from exc


@router.post("/{slot_id}/remove-product")
def remove_product(slot_id: int, service: SlotAdminService = Depends(get_slot_service)) -> SlotResponse:
    try:
        return SlotResponse.from_domain(service.remove_product(slot_id))
    except SlotEngineError as exc:
        raise http_error(exc) from exc


@router.post("/batch/{operation}", response_model=BatchReportResponse)
def run_batch_operation(
    operation: str,
    payload: BatchRequest,
    service: SlotAdminService = Depends(get_slot_service),
):
    """Apply ``operation`` to every id.

    200 when no item failed, 207 when only some did, 409 when none committed;
    the body is the same per-item report in all three cases.
    """
    action = operation.replace("-", "_")
    if action not in ADMIN_ACTIONS:
        raise http_error(ValidationError(f"unknown batch operation: {operation}"))
    try:
        report = service.run_batch_action(action, payload.slot_ids)
        report.raise_for_failures()
    except (BatchPartialFailure, BatchFailed) as exc:
        return batch_failure_response(exc)
    except SlotEngineError as exc:
        raise http_error(exc) from exc
    return JSONResponse(content=BatchReportResponse.from_domain(report).model_dump(mode="json"))
