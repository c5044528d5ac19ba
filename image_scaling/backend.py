"""Taichi runtime initialization."""

from __future__ import annotations

import logging
from typing import Optional

import taichi as ti
from taichi.lang import impl

from .config import ScalingSettings
from .errors import DeviceUnavailable

logger = logging.getLogger(__name__)

ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
    "opengl": ti.opengl,
}

_active_settings: Optional[ScalingSettings] = None


def current_arch():
    return impl.current_cfg().arch


def init_backend(settings: Optional[ScalingSettings] = None) -> ScalingSettings:
    """
    Initialize Taichi for the given settings.

    Re-initializing discards previously compiled kernels, so this is normally
    called once per process; ``ensure_backend`` does that lazily.
    """
    global _active_settings

    if settings is None:
        settings = ScalingSettings.from_environment()
    if settings.arch not in ARCHES:
        raise ValueError(
            f"Unknown arch {settings.arch!r}, expected one of {sorted(ARCHES)}"
        )

    try:
        ti.init(arch=ARCHES[settings.arch],
                debug=settings.debug,
                default_fp=ti.f32,
                log_level=settings.log_level)
    except RuntimeError as e:
        _active_settings = None
        raise DeviceUnavailable(settings.arch, str(e)) from e

    arch = current_arch()
    # Taichi falls back to the host CPU when no GPU backend can be created
    if settings.strict_device and settings.arch != "cpu" and arch == ti.cpu:
        _active_settings = None
        raise DeviceUnavailable(
            settings.arch,
            f"Requested '{settings.arch}' backend but Taichi fell back to the CPU")

    logger.info("Taichi backend initialized: requested=%s actual=%s",
                settings.arch, arch)
    _active_settings = settings
    return settings


def _runtime_options(settings: ScalingSettings):
    return (settings.arch, settings.strict_device, settings.debug,
            settings.log_level)


def ensure_backend(settings: Optional[ScalingSettings] = None) -> ScalingSettings:
    """
    Initialize Taichi unless it already runs with the requested options.

    Settings that only differ in dispatch options (tile size, lobes) reuse
    the active runtime; a different arch, strict mode, debug flag or log
    level re-initializes it.
    """
    if _active_settings is None:
        return init_backend(settings)
    if settings is not None and (_runtime_options(settings)
                                 != _runtime_options(_active_settings)):
        return init_backend(settings)
    return _active_settings


def active_settings() -> Optional[ScalingSettings]:
    return _active_settings
