# User value: This file helps users see their generated images show up as soon as RunningHub finishes.
# routes/status.py
from fastapi import APIRouter, HTTPException

from schemas.job_contract import COMPLETED_BY_POLL
from schemas.requests import CheckStatusRequest
from schemas.responses import CheckStatusResponse
from services.reconcile import apply_outputs
from services.redis_client import r
from services.runninghub import get_runninghub_client
from utils.metrics import incr
from utils.stage_logging import log_stage

router = APIRouter(prefix="/api")


@router.post("/check-status", response_model=CheckStatusResponse)
# User value: lets the page pull completion for a task when the webhook has not arrived yet.
def check_status(payload: CheckStatusRequest):
    task_id = (payload.taskId or "").strip()
    if not task_id:
        raise HTTPException(
            status_code=400,
            detail={"error_code": "INVALID_REQUEST", "error_message": "Task ID is required"},
        )

    log_stage(task_id=task_id, stage="STATUS_POLL", event="STARTED", source=COMPLETED_BY_POLL)
    try:
        result = get_runninghub_client().get_outputs(task_id)
        apply_outputs(r, task_id=task_id, result=result, source=COMPLETED_BY_POLL)
    except Exception as exc:
        incr("api_status_poll_failed_total")
        log_stage(
            task_id=task_id,
            stage="STATUS_POLL",
            event="FAILED",
            source=COMPLETED_BY_POLL,
            error=f"{exc.__class__.__name__}: {exc}",
        )
        raise HTTPException(
            status_code=500,
            detail={"error_code": "UPSTREAM_ERROR", "error_message": str(exc)},
        ) from exc

    incr("api_status_poll_total", upstream_code=result.get("code"))
    log_stage(
        task_id=task_id,
        stage="STATUS_POLL",
        event="COMPLETED",
        source=COMPLETED_BY_POLL,
        upstream_code=result.get("code"),
        upstream_msg=result.get("msg"),
    )
    return CheckStatusResponse(status=result.get("msg"))
