"""
Settings for the resize engine, loaded from environment variables.

Every field has a default, so ``ScalingSettings()`` is usable as-is.
Variables use the ``IMAGE_SCALING_`` prefix, e.g. ``IMAGE_SCALING_ARCH=cpu``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

ENV_PREFIX = "IMAGE_SCALING_"

DEFAULT_ARCH = "gpu"
DEFAULT_LOG_LEVEL = "warn"
DEFAULT_TILE_WIDTH = 16
DEFAULT_TILE_HEIGHT = 16
DEFAULT_LANCZOS_LOBES = 3

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def get_env_str(name: str, default: str) -> str:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_env_int(name: str, default: int) -> int:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from None


def get_env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class ScalingSettings:
    """
    Backend and dispatch settings.

    ``arch`` names the Taichi backend ("cpu", "gpu", "cuda", "vulkan",
    "metal" or "opengl"). With ``strict_device`` set, a silent Taichi
    fallback to the CPU is reported as DeviceUnavailable instead.
    """

    arch: str = DEFAULT_ARCH
    strict_device: bool = False
    debug: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    # Work-group granularity; affects scheduling only, never output values
    tile_width: int = DEFAULT_TILE_WIDTH
    tile_height: int = DEFAULT_TILE_HEIGHT

    lanczos_lobes: int = DEFAULT_LANCZOS_LOBES
    lanczos_separable: bool = False

    @property
    def tile_size(self) -> tuple[int, int]:
        return self.tile_width, self.tile_height

    @classmethod
    def from_environment(cls) -> ScalingSettings:
        """Create ScalingSettings by reading environment variables."""
        return cls(
            arch=get_env_str("ARCH", DEFAULT_ARCH).lower(),
            strict_device=get_env_bool("STRICT_DEVICE", False),
            debug=get_env_bool("DEBUG", False),
            log_level=get_env_str("LOG_LEVEL", DEFAULT_LOG_LEVEL).lower(),
            tile_width=get_env_int("TILE_W", DEFAULT_TILE_WIDTH),
            tile_height=get_env_int("TILE_H", DEFAULT_TILE_HEIGHT),
            lanczos_lobes=get_env_int("LANCZOS_LOBES", DEFAULT_LANCZOS_LOBES),
            lanczos_separable=get_env_bool("LANCZOS_SEPARABLE", False),
        )
