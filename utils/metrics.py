import threading
from typing import Any, Dict, Tuple

_LOCK = threading.Lock()
_COUNTERS: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float] = {}
_TIMINGS: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], Dict[str, float]] = {}


def _key(name: str, labels: Dict[str, Any]) -> Tuple[str, Tuple[Tuple[str, str], ...]]:
    return name, tuple(sorted((k, str(v)) for k, v in labels.items()))


def incr(name: str, amount: float = 1, **labels: Any) -> None:
    key = _key(name, labels)
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0) + amount


def observe_ms(name: str, value_ms: float, **labels: Any) -> None:
    key = _key(name, labels)
    with _LOCK:
        entry = _TIMINGS.setdefault(key, {"count": 0, "sum_ms": 0.0, "max_ms": 0.0})
        entry["count"] += 1
        entry["sum_ms"] += float(value_ms)
        entry["max_ms"] = max(entry["max_ms"], float(value_ms))


def _render(key: Tuple[str, Tuple[Tuple[str, str], ...]]) -> str:
    name, labels = key
    if not labels:
        return name
    return name + "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


def snapshot() -> dict:
    with _LOCK:
        return {
            "counters": {_render(k): v for k, v in _COUNTERS.items()},
            "timings": {_render(k): dict(v) for k, v in _TIMINGS.items()},
        }


def reset() -> None:
    with _LOCK:
        _COUNTERS.clear()
        _TIMINGS.clear()
