# Maps form-level options onto the nodeInfoList entries the RunningHub workflows expect.
import random

import config
from schemas.job_contract import (
    DEFAULT_RATIO,
    DEFAULT_SCALE_VALUE,
    MAX_RANDOM_SEED,
    RANDOM_SEED,
    RATIO_DIMENSIONS,
    SCALE_VALUES,
)


class InvalidOption(ValueError):
    pass


def node(node_id: str, field_name: str, value) -> dict:
    return {"nodeId": str(node_id), "fieldName": field_name, "fieldValue": str(value)}


def scale_value(scale: str | None) -> str:
    return SCALE_VALUES.get(str(scale or "").strip().lower(), DEFAULT_SCALE_VALUE)


def resolve_ratio(ratio: str | None) -> tuple[str, int, int]:
    key = str(ratio or "").strip()
    if key not in RATIO_DIMENSIONS:
        key = DEFAULT_RATIO
    width, height = RATIO_DIMENSIONS[key]
    return key, width, height


def resolve_seed(seed, rng: random.Random | None = None) -> str:
    text = str(seed if seed is not None else "").strip()
    if not text or text.lower() == RANDOM_SEED:
        return str((rng or random).randrange(MAX_RANDOM_SEED))
    if not text.isdigit():
        raise InvalidOption(f"Seed must be a non-negative integer or '{RANDOM_SEED}'.")
    return str(int(text))


def is_truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def upscale_lora_strength(use_lora, lora_strength: str | None) -> str:
    if not is_truthy(use_lora):
        return "0"
    value = str(lora_strength or "").strip() or "1"
    try:
        float(value)
    except ValueError:
        raise InvalidOption("LoRA strength must be a number.")
    return value


def build_upscale_nodes(*, image_ref: str, scale: str | None, lora_strength: str, seed: str) -> list[dict]:
    return [
        node(config.UPSCALE_IMAGE_NODE, "image", image_ref),
        node(config.UPSCALE_SCALE_NODE, "default_value", scale_value(scale)),
        node(config.UPSCALE_LORA_NODE, "strength_model", lora_strength),
        node(config.UPSCALE_SEED_NODE, "seed", seed),
    ]


def build_text_to_image_nodes(*, prompt: str, width: int, height: int, use_lora: bool, seed: str) -> list[dict]:
    return [
        node(config.T2I_PROMPT_NODE, "text", prompt),
        node(config.T2I_SIZE_NODE, "width", width),
        node(config.T2I_SIZE_NODE, "height", height),
        node(config.T2I_LORA_NODE, "strength_model", config.T2I_LORA_STRENGTH if use_lora else "0"),
        node(config.T2I_SEED_NODE, "seed", seed),
    ]
