# User value: This file turns a prompt or an uploaded photo into a tracked RunningHub job.
# routes/generate.py
import logging
import uuid
from typing import Any

from fastapi import APIRouter, Body, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

import config
from schemas.job_contract import VARIANT_TEXT_TO_IMAGE, VARIANT_UPSCALE
from schemas.requests import TextToImageRequest
from schemas.responses import SubmitResponse
from services.gcs import input_blob_path, upload_input_image
from services.queue_limit import enforce_processing_limit
from services.redis_client import r
from services.runninghub import get_runninghub_client
from services.task_store import TaskConflictError, create_task
from services.workflow_params import (
    InvalidOption,
    build_text_to_image_nodes,
    build_upscale_nodes,
    is_truthy,
    resolve_ratio,
    resolve_seed,
    upscale_lora_strength,
)
from utils.metrics import incr
from utils.request_id import get_request_id
from utils.stage_logging import log_stage

router = APIRouter(prefix="/api")
logger = logging.getLogger("api.generate")


# User value: explains exactly which form input was wrong instead of a generic failure.
def _bad_request(message: str, *, variant: str, reason: str) -> HTTPException:
    incr("api_tasks_submit_failed_total", reason=reason, variant=variant)
    logger.warning("submit_validation_failed variant=%s reason=%s", variant, reason)
    return HTTPException(status_code=400, detail={"error_code": "INVALID_REQUEST", "error_message": message})


# User value: passes the engine's own error text back so users know why a job was refused.
def _upstream_failure(exc: Exception, *, variant: str, stage: str, task_id: str, error_code: str = "UPSTREAM_ERROR") -> HTTPException:
    incr("api_tasks_submit_failed_total", reason=stage.lower(), variant=variant)
    log_stage(
        task_id=task_id,
        stage=stage,
        event="FAILED",
        variant=variant,
        error=f"{exc.__class__.__name__}: {exc}",
        error_code=error_code,
    )
    return HTTPException(status_code=500, detail={"error_code": error_code, "error_message": str(exc)})


# User value: reads the text-to-image body so a missing or mistyped prompt is a clear 400.
def _parse_text_to_image(payload: Any, *, variant: str) -> TextToImageRequest:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise _bad_request("Request body must be a JSON object.", variant=variant, reason="invalid_body")
    try:
        return TextToImageRequest.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "body"
        if field == "prompt":
            raise _bad_request("Prompt must be text.", variant=variant, reason="invalid_prompt") from exc
        raise _bad_request(f"Invalid {field}: {first.get('msg')}", variant=variant, reason="invalid_field") from exc


# User value: starts the RunningHub workflow that actually produces the user's image.
def _start_run(*, variant: str, webapp_id: str, nodes: list[dict], submission_id: str) -> str:
    log_stage(task_id=submission_id, stage="RUNNINGHUB_RUN", event="STARTED", variant=variant, nodes=len(nodes))
    try:
        task_id = get_runninghub_client().run_workflow(
            webapp_id=webapp_id,
            node_info_list=nodes,
            webhook_url=config.RUNNINGHUB_WEBHOOK_URL or None,
        )
    except Exception as exc:
        raise _upstream_failure(exc, variant=variant, stage="RUNNINGHUB_RUN", task_id=submission_id) from exc
    log_stage(task_id=task_id, stage="RUNNINGHUB_RUN", event="COMPLETED", variant=variant, submission_id=submission_id)
    return task_id


# User value: records the accepted job so it shows up in history right away.
def _persist(*, task_id: str, variant: str, fields: dict) -> None:
    try:
        create_task(r, task_id=task_id, fields={"variant": variant, **fields})
    except TaskConflictError as exc:
        raise _upstream_failure(
            exc, variant=variant, stage="REDIS_TASK_METADATA", task_id=task_id, error_code="STATE_CONFLICT"
        ) from exc
    except Exception as exc:
        raise _upstream_failure(
            exc, variant=variant, stage="REDIS_TASK_METADATA", task_id=task_id, error_code="STORE_UNAVAILABLE"
        ) from exc
    incr("api_tasks_submitted_total", variant=variant)
    log_stage(task_id=task_id, stage="REDIS_TASK_METADATA", event="COMPLETED", variant=variant)


@router.post("/generate", response_model=SubmitResponse)
# User value: submits a text prompt for image generation and returns the task to track.
def generate(payload: Any = Body(default=None)):
    variant = VARIANT_TEXT_TO_IMAGE
    request = _parse_text_to_image(payload, variant=variant)
    prompt = (request.prompt or "").strip()
    if not prompt:
        raise _bad_request("Prompt is required.", variant=variant, reason="missing_prompt")

    try:
        seed = resolve_seed(request.seed)
    except InvalidOption as exc:
        raise _bad_request(str(exc), variant=variant, reason="invalid_seed") from exc

    request_id = get_request_id() or ""
    enforce_processing_limit(r=r, variant=variant, request_id=request_id)

    ratio, width, height = resolve_ratio(request.ratio)
    nodes = build_text_to_image_nodes(prompt=prompt, width=width, height=height, use_lora=request.useLora, seed=seed)

    task_id = _start_run(
        variant=variant,
        webapp_id=config.RUNNINGHUB_T2I_WEBAPP_ID,
        nodes=nodes,
        submission_id=f"submit-{uuid.uuid4().hex[:12]}",
    )
    _persist(
        task_id=task_id,
        variant=variant,
        fields={
            "prompt": prompt,
            "ratio": ratio,
            "width": width,
            "height": height,
            "useLora": bool(request.useLora),
            "seed": seed,
        },
    )
    return SubmitResponse(taskId=task_id)


# User value: hands the user's photo to the engine, directly or through GCS.
def _store_input(image: UploadFile, *, variant: str, submission_id: str) -> str:
    target = config.INPUT_UPLOAD_TARGET
    log_stage(
        task_id=submission_id,
        stage="INPUT_UPLOAD",
        event="STARTED",
        variant=variant,
        source=target,
        filename=image.filename,
    )
    try:
        if target == "gcs":
            stored = upload_input_image(
                file_obj=image.file,
                destination_path=input_blob_path(submission_id, image.filename),
                content_type=image.content_type,
            )
            ref = stored["url"]
        else:
            ref = get_runninghub_client().upload_image(
                file_obj=image.file,
                filename=image.filename or "input",
                content_type=image.content_type,
            )
    except Exception as exc:
        raise _upstream_failure(exc, variant=variant, stage="INPUT_UPLOAD", task_id=submission_id) from exc
    log_stage(task_id=submission_id, stage="INPUT_UPLOAD", event="COMPLETED", variant=variant, source=target)
    return ref


@router.post("/upscale", response_model=SubmitResponse)
# User value: submits an uploaded photo for upscaling and returns the task to track.
def upscale(
    image: UploadFile | None = File(default=None),
    scale: str = Form(default="x4"),
    useLora: str = Form(default="false"),
    loraStrength: str = Form(default=""),
    seed: str = Form(default="random"),
):
    variant = VARIANT_UPSCALE
    if image is None or not image.filename:
        raise _bad_request("Image file is required.", variant=variant, reason="missing_image")

    try:
        final_seed = resolve_seed(seed)
        lora_value = upscale_lora_strength(useLora, loraStrength)
    except InvalidOption as exc:
        raise _bad_request(str(exc), variant=variant, reason="invalid_option") from exc

    request_id = get_request_id() or ""
    enforce_processing_limit(r=r, variant=variant, request_id=request_id)

    submission_id = f"submit-{uuid.uuid4().hex[:12]}"
    image_ref = _store_input(image, variant=variant, submission_id=submission_id)

    nodes = build_upscale_nodes(image_ref=image_ref, scale=scale, lora_strength=lora_value, seed=final_seed)
    task_id = _start_run(
        variant=variant,
        webapp_id=config.RUNNINGHUB_WEBAPP_ID,
        nodes=nodes,
        submission_id=submission_id,
    )
    _persist(
        task_id=task_id,
        variant=variant,
        fields={
            "originalFilename": image.filename,
            "scale": scale,
            "useLora": is_truthy(useLora),
            "loraStrength": lora_value,
            "inputSource": config.INPUT_UPLOAD_TARGET,
            "seed": final_seed,
        },
    )
    return SubmitResponse(taskId=task_id)
