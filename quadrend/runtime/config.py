"""Runtime configuration sourced from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from quadrend.api.logging import QuadrendLoggingConfig
from quadrend.api.quad import InputMode

DEFAULT_WGPU_BACKENDS: tuple[str, ...] = ("vulkan", "metal", "dx12")
DEFAULT_LAYER_MIN_BYTES = 256


def _int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return max(minimum, default)
    try:
        value = int(raw.strip())
    except ValueError:
        value = default
    return max(minimum, value)


def _csv(name: str) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return ()
    values = [part.strip().lower() for part in raw.split(",")]
    return tuple(value for value in values if value)


def _choice(name: str, default: str, allowed: tuple[str, ...]) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    return value if value in allowed else default


@dataclass(frozen=True, slots=True)
class QuadrendConfig:
    """Immutable runtime configuration."""

    logging: QuadrendLoggingConfig
    input_mode: InputMode
    wgpu_backends: tuple[str, ...]
    layer_min_bytes: int


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve log level with package-prefixed override."""
    value = os.getenv("QUADREND_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper()


def resolve_input_mode(default: InputMode = InputMode.INSTANCED_RECT) -> InputMode:
    allowed = tuple(mode.value for mode in InputMode)
    return InputMode(_choice("QUADREND_INPUT_MODE", default.value, allowed))


def load_config() -> QuadrendConfig:
    """Load immutable configuration from env vars."""
    file_path = os.getenv("QUADREND_LOG_FILE", "").strip() or None
    return QuadrendConfig(
        logging=QuadrendLoggingConfig(
            level_name=resolve_log_level_name(),
            console_format=_choice("QUADREND_LOG_FORMAT", "text", ("text", "json")),
            file_path=file_path,
            file_format=_choice("QUADREND_LOG_FILE_FORMAT", "json", ("text", "json")),
        ),
        input_mode=resolve_input_mode(),
        wgpu_backends=_csv("QUADREND_WGPU_BACKENDS") or DEFAULT_WGPU_BACKENDS,
        layer_min_bytes=_int("QUADREND_LAYER_MIN_BYTES", DEFAULT_LAYER_MIN_BYTES, minimum=16),
    )
