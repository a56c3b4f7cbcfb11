import logging
import os
from typing import List

logger = logging.getLogger("api.startup")

_BOOL_VALUES = {"1", "0", "true", "false", "yes", "no", "on", "off"}
_FLAG_KEYS = ("FEATURE_PROCESSING_LIMIT", "FEATURE_WEBHOOK_COMPLETION")
_UPLOAD_TARGETS = ("runninghub", "gcs")


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _validate_redis_url(value: str | None, key: str, errors: List[str]) -> None:
    if _is_blank(value):
        errors.append(f"{key} is required")
        return
    if not (value.startswith("redis://") or value.startswith("rediss://")):
        errors.append(f"{key} must start with redis:// or rediss://")


def _validate_http_url(value: str | None, key: str, errors: List[str], *, required: bool = True) -> None:
    if _is_blank(value):
        if required:
            errors.append(f"{key} is required")
        return
    if not (value.startswith("http://") or value.startswith("https://")):
        errors.append(f"{key} must start with http:// or https://")


def _validate_bool_flag_env(key: str, errors: List[str]) -> None:
    raw = os.getenv(key)
    if _is_blank(raw):
        return
    if str(raw).strip().lower() not in _BOOL_VALUES:
        errors.append(f"{key} must be one of {sorted(_BOOL_VALUES)}")


def _validate_int_env(key: str, errors: List[str], *, minimum: int = 0) -> None:
    raw = os.getenv(key)
    if _is_blank(raw):
        return
    try:
        value = int(str(raw).strip())
    except ValueError:
        errors.append(f"{key} must be an integer")
        return
    if value < minimum:
        errors.append(f"{key} must be >= {minimum}")


def _validate_upload_target(errors: List[str]) -> None:
    target = str(os.getenv("INPUT_UPLOAD_TARGET") or "runninghub").strip().lower()
    if target not in _UPLOAD_TARGETS:
        errors.append(f"INPUT_UPLOAD_TARGET must be one of {list(_UPLOAD_TARGETS)}")
        return
    if target == "gcs" and _is_blank(os.getenv("GCS_BUCKET_NAME")):
        errors.append("GCS_BUCKET_NAME is required when INPUT_UPLOAD_TARGET=gcs")


def _validate_cors_allow_origins(value: str | None, errors: List[str], warnings: List[str]) -> None:
    if _is_blank(value):
        warnings.append("CORS_ALLOW_ORIGINS is not set; only same-origin browser calls will work")
        return

    origins = [x.strip() for x in str(value).split(",") if x.strip()]
    for origin in origins:
        if origin == "*":
            errors.append("CORS_ALLOW_ORIGINS must not contain '*' in strict allowlist mode")
            continue
        if not (origin.startswith("http://") or origin.startswith("https://")):
            errors.append(f"CORS origin must start with http:// or https://: {origin}")


def validate_startup_env() -> None:
    errors: List[str] = []
    warnings: List[str] = []

    for key in ("RUNNINGHUB_API_KEY", "RUNNINGHUB_WEBAPP_ID"):
        if _is_blank(os.getenv(key)):
            errors.append(f"{key} is required")

    _validate_redis_url(os.getenv("REDIS_URL", "redis://localhost:6379/0"), "REDIS_URL", errors)
    for key in ("RUNNINGHUB_RUN_URL", "RUNNINGHUB_UPLOAD_URL", "RUNNINGHUB_OUTPUTS_URL"):
        _validate_http_url(os.getenv(key), key, errors, required=False)
    _validate_http_url(os.getenv("RUNNINGHUB_WEBHOOK_URL"), "RUNNINGHUB_WEBHOOK_URL", errors, required=False)
    _validate_upload_target(errors)
    _validate_cors_allow_origins(os.getenv("CORS_ALLOW_ORIGINS"), errors, warnings)
    _validate_int_env("PROCESSING_JOB_LIMIT", errors)
    for key in _FLAG_KEYS:
        _validate_bool_flag_env(key, errors)

    if _is_blank(os.getenv("RUNNINGHUB_WEBHOOK_URL")):
        warnings.append("RUNNINGHUB_WEBHOOK_URL is not set; tasks complete only through client polling")

    if errors:
        for err in errors:
            logger.error("startup_env_invalid %s", err)
        raise RuntimeError("Startup env validation failed: " + "; ".join(errors))

    for warning in warnings:
        logger.warning("startup_env_warning %s", warning)

    logger.info(
        "startup_env_validated keys=%s",
        ["RUNNINGHUB_API_KEY", "RUNNINGHUB_WEBAPP_ID", "REDIS_URL", "INPUT_UPLOAD_TARGET"],
    )
