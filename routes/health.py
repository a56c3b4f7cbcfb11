# User value: This file lets operators confirm the service and its Redis store are up.
# routes/health.py
from fastapi import APIRouter

from services.redis_client import r
from utils.metrics import snapshot

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
# User value: reports Redis reachability and live counters in one call.
def health():
    r.ping()
    return {
        "status": "OK",
        "redis": "connected",
        "metrics": snapshot(),
    }
