# User value: This file lets operators switch server-side behaviors on and off without a deploy.
import os


# User value: reads a switch the same way everywhere so a typo never half-enables a behavior.
def _flag(name: str, default: bool = False) -> bool:
    raw = str(os.getenv(name, "1" if default else "0")).strip().lower()
    return raw in {"1", "true", "yes", "on"}


FEATURE_PROCESSING_LIMIT = _flag("FEATURE_PROCESSING_LIMIT", False)
FEATURE_WEBHOOK_COMPLETION = _flag("FEATURE_WEBHOOK_COMPLETION", True)


# User value: lets the API refuse new jobs at the cap the UI already applies.
def is_processing_limit_enforced() -> bool:
    return FEATURE_PROCESSING_LIMIT


# User value: lets operators rely on polling alone when the webhook is unreachable.
def is_webhook_completion_enabled() -> bool:
    return FEATURE_WEBHOOK_COMPLETION
