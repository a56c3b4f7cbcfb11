# User value: This file lets RunningHub push finished images straight into history.
# routes/webhook.py
import json
import logging

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from schemas.job_contract import COMPLETED_BY_WEBHOOK
from schemas.requests import WebhookPayload
from schemas.responses import WebhookResponse
from services.feature_flags import is_webhook_completion_enabled
from services.reconcile import apply_outputs, decode_event_data
from services.redis_client import r
from utils.metrics import incr
from utils.stage_logging import log_stage

router = APIRouter(prefix="/api")
logger = logging.getLogger("api.webhook")


# User value: marks the pushed task complete without holding up other requests on Redis.
def _complete_from_event(payload: WebhookPayload) -> None:
    task_id = (payload.taskId or "").strip()
    if not is_webhook_completion_enabled():
        logger.info("webhook_ignored_disabled task_id=%s", task_id)
        return
    result = decode_event_data(payload.eventData)
    apply_outputs(r, task_id=task_id, result=result, source=COMPLETED_BY_WEBHOOK)


@router.post("/webhook", response_model=WebhookResponse, response_model_exclude_none=True)
# User value: always acknowledges RunningHub so a bad callback never triggers a retry storm.
async def webhook(request: Request):
    # Always 200: RunningHub retries on anything else.
    task_id = ""
    try:
        body = json.loads(await request.body() or b"{}")
        payload = WebhookPayload.model_validate(body)
        task_id = (payload.taskId or "").strip()
        # sync Redis client; keep it off the event loop
        await run_in_threadpool(_complete_from_event, payload)
        incr("api_webhook_received_total", outcome="ok")
        return WebhookResponse()
    except Exception as exc:
        message = str(exc) or "Error processing webhook"
        incr("api_webhook_received_total", outcome="error")
        log_stage(
            task_id=task_id or "unknown",
            stage="WEBHOOK",
            event="FAILED",
            source=COMPLETED_BY_WEBHOOK,
            error=f"{exc.__class__.__name__}: {message}",
        )
        return WebhookResponse(error=message)
