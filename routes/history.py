# User value: This file gives the page one list of every job, newest first.
# routes/history.py
import logging

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from schemas.responses import TaskRecord
from services.redis_client import r
from services.task_store import list_tasks
from utils.stage_logging import log_stage

router = APIRouter(prefix="/api")
logger = logging.getLogger("api.history")


@router.get("/history", response_model=list[TaskRecord], response_model_exclude_none=True)
# User value: shows every submitted image newest first, including ones still processing.
def history():
    try:
        tasks = list_tasks(r)
    except Exception as exc:
        log_stage(task_id="history", stage="HISTORY_READ", event="FAILED", error=f"{exc.__class__.__name__}: {exc}")
        raise HTTPException(
            status_code=500,
            detail={"error_code": "STORE_UNAVAILABLE", "error_message": str(exc)},
        ) from exc

    records = []
    for task in tasks:
        try:
            records.append(TaskRecord.model_validate(task))
        except ValidationError as exc:
            logger.warning(
                "history_record_skipped task_id=%s errors=%s", task.get("taskId"), exc.error_count()
            )
    logger.debug("history_read count=%s skipped=%s", len(records), len(tasks) - len(records))
    return records
