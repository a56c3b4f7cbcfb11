import re
import uuid
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID: ContextVar[str | None] = ContextVar("request_id", default=None)
_VALID = re.compile(r"^[A-Za-z0-9._:-]{8,128}$")


def new_request_id() -> str:
    return f"rid-{uuid.uuid4().hex}"


def normalize_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    return candidate if _VALID.match(candidate) else new_request_id()


def set_request_id(value: str | None) -> None:
    _REQUEST_ID.set(value)


def get_request_id() -> str | None:
    return _REQUEST_ID.get()
