"""
Parallel resize over a grid of destination tiles.

Each tile is an independent unit of work: it reads the immutable source and
writes only its own destination pixels, so Taichi may schedule tiles in any
order and at any degree of parallelism without changing the result.
"""

import enum
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple

import numpy as np
import taichi as ti

from . import backend
from .config import ScalingSettings
from .errors import DeviceUnavailable, InvalidDimension, UnsupportedKernel
from .image import CHANNELS, Image
from .samplers import (bilinear, check_lobes, lanczos, lanczos_horizontal,
                       lanczos_vertical, store)

logger = logging.getLogger(__name__)

rgba_image = ti.types.ndarray(dtype=ti.f32, ndim=3)


class InterpolationKind(enum.Enum):
    BILINEAR = "bilinear"
    LANCZOS = "lanczos"

    @classmethod
    def parse(cls, value) -> "InterpolationKind":
        """Accept a member, its value or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedKernel(value)


@dataclass(frozen=True)
class ResizeJob:
    """One resize invocation; created per call and dropped after dispatch."""

    source: Image
    samples: np.ndarray
    destination: np.ndarray
    kind: InterpolationKind
    tile_size: Tuple[int, int]
    lobes: int = 3
    separable: bool = False


def destination_size(width: int, height: int, scale: float) -> Tuple[int, int]:
    """Destination dimensions, truncated toward zero."""
    return math.floor(scale * width), math.floor(scale * height)


def tile_grid(width: int, height: int,
              tile_size: Tuple[int, int]) -> Tuple[int, int]:
    """Number of tiles along x and y needed to cover width x height."""
    tile_w, tile_h = tile_size
    return -(-width // tile_w), -(-height // tile_h)


def iter_tiles(width: int, height: int,
               tile_size: Tuple[int, int]) -> Iterator[Tuple[int, int, int, int]]:
    """
    Yield ``(x0, y0, x1, y1)`` pixel ranges of every tile, end-exclusive.

    Tail tiles are clipped to the destination, mirroring the early exit the
    kernels perform for out-of-range pixels.
    """
    tile_w, tile_h = tile_size
    groups_x, groups_y = tile_grid(width, height, tile_size)
    for gy in range(groups_y):
        for gx in range(groups_x):
            x0, y0 = gx * tile_w, gy * tile_h
            yield x0, y0, min(x0 + tile_w, width), min(y0 + tile_h, height)


@ti.kernel
def resize_bilinear(src: rgba_image, dst: rgba_image, tile_w: ti.i32,
                    tile_h: ti.i32):
    dst_h, dst_w = dst.shape[0], dst.shape[1]
    groups_x = (dst_w + tile_w - 1) // tile_w
    groups_y = (dst_h + tile_h - 1) // tile_h

    for gy, gx, ty, tx in ti.ndrange(groups_y, groups_x, tile_h, tile_w):
        x, y = gx * tile_w + tx, gy * tile_h + ty
        if x < dst_w and y < dst_h:
            store(dst, x, y, bilinear(src, x, y, dst_w, dst_h))


@ti.kernel
def resize_lanczos(src: rgba_image, dst: rgba_image, tile_w: ti.i32,
                   tile_h: ti.i32, a: ti.i32):
    src_h, src_w = src.shape[0], src.shape[1]
    dst_h, dst_w = dst.shape[0], dst.shape[1]
    groups_x = (dst_w + tile_w - 1) // tile_w
    groups_y = (dst_h + tile_h - 1) // tile_h

    for gy, gx, ty, tx in ti.ndrange(groups_y, groups_x, tile_h, tile_w):
        x, y = gx * tile_w + tx, gy * tile_h + ty
        if x < dst_w and y < dst_h:
            store(dst, x, y,
                  lanczos(src, x, y, src_w, src_h, dst_w, dst_h, a))


@ti.kernel
def resize_lanczos_horizontal(src: rgba_image, tmp: rgba_image,
                              tile_w: ti.i32, tile_h: ti.i32, a: ti.i32):
    rows, dst_w = tmp.shape[0], tmp.shape[1]
    groups_x = (dst_w + tile_w - 1) // tile_w
    groups_y = (rows + tile_h - 1) // tile_h

    for gy, gx, ty, tx in ti.ndrange(groups_y, groups_x, tile_h, tile_w):
        x, y = gx * tile_w + tx, gy * tile_h + ty
        if x < dst_w and y < rows:
            store(tmp, x, y, lanczos_horizontal(src, x, y, dst_w, a))


@ti.kernel
def resize_lanczos_vertical(tmp: rgba_image, dst: rgba_image,
                            tile_w: ti.i32, tile_h: ti.i32, a: ti.i32):
    dst_h, dst_w = dst.shape[0], dst.shape[1]
    groups_x = (dst_w + tile_w - 1) // tile_w
    groups_y = (dst_h + tile_h - 1) // tile_h

    for gy, gx, ty, tx in ti.ndrange(groups_y, groups_x, tile_h, tile_w):
        x, y = gx * tile_w + tx, gy * tile_h + ty
        if x < dst_w and y < dst_h:
            store(dst, x, y, lanczos_vertical(tmp, x, y, dst_h, a))


LAUNCH_LIMIT = 2 ** 31


def launch_tile(tile_size: Tuple[int, int], width: int,
                height: int) -> Tuple[int, int]:
    """
    Tile size actually launched over a width x height grid.

    Sides larger than the grid are clamped to it, which leaves the covered
    pixels unchanged. The flat launch index is i32 inside the kernels, so
    grids whose padded size reaches 2**31 are rejected.
    """
    tile_w, tile_h = min(tile_size[0], width), min(tile_size[1], height)
    groups_x, groups_y = tile_grid(width, height, (tile_w, tile_h))
    if groups_x * groups_y * tile_w * tile_h >= LAUNCH_LIMIT:
        raise InvalidDimension(
            f"Launch grid for {width}x{height} with tiles {tile_w}x{tile_h} "
            f"exceeds {LAUNCH_LIMIT} threads", width=width, height=height)
    return tile_w, tile_h


def _dispatch_bilinear(job: ResizeJob):
    dst_h, dst_w = job.destination.shape[:2]
    tile_w, tile_h = launch_tile(job.tile_size, dst_w, dst_h)
    resize_bilinear(job.samples, job.destination, tile_w, tile_h)


def _dispatch_lanczos(job: ResizeJob):
    dst_h, dst_w = job.destination.shape[:2]
    tile_w, tile_h = launch_tile(job.tile_size, dst_w, dst_h)
    if not job.separable:
        resize_lanczos(job.samples, job.destination, tile_w, tile_h, job.lobes)
        return

    rows = job.source.height
    tmp = np.zeros((rows, dst_w, CHANNELS), dtype=np.float32)
    pass_w, pass_h = launch_tile(job.tile_size, dst_w, rows)
    resize_lanczos_horizontal(job.samples, tmp, pass_w, pass_h, job.lobes)
    resize_lanczos_vertical(tmp, job.destination, tile_w, tile_h, job.lobes)


KERNELS: Dict[InterpolationKind, Callable[[ResizeJob], None]] = {
    InterpolationKind.BILINEAR: _dispatch_bilinear,
    InterpolationKind.LANCZOS: _dispatch_lanczos,
}


def _validate_tile_size(tile_size) -> Tuple[int, int]:
    try:
        tile_w, tile_h = (int(v) for v in tile_size)
    except (TypeError, ValueError):
        raise InvalidDimension(
            f"Tile size must be a pair of integers, got {tile_size!r}") from None
    if tile_w <= 0 or tile_h <= 0:
        raise InvalidDimension(
            f"Tile size must be positive, got {tile_w}x{tile_h}",
            width=tile_w, height=tile_h)
    return tile_w, tile_h


def resize(source,
           scale: float,
           kind=InterpolationKind.LANCZOS,
           tile_size: Optional[Tuple[int, int]] = None,
           *,
           lobes: Optional[int] = None,
           separable: Optional[bool] = None,
           settings: Optional[ScalingSettings] = None) -> Image:
    """
    Upsample ``source`` by ``scale`` with the selected interpolation kernel.

    Args:
        source: An Image, or an array accepted by the Image constructor.
        scale: Positive scale factor; the destination is
            ``floor(scale * width) x floor(scale * height)``.
        kind: InterpolationKind member or its name.
        tile_size: Work-group size ``(w, h)``; defaults to the settings value.
        lobes: Lanczos window size ``a``; defaults to the settings value.
        separable: Run Lanczos as a horizontal then a vertical pass.
        settings: Backend settings; defaults to the active backend's settings
            or the environment.

    Returns:
        The destination Image, with the source's component type.

    Raises:
        InvalidDimension: Bad scale, tile size, lobes or an empty destination.
        UnsupportedKernel: No kernel is registered for ``kind``.
        DeviceUnavailable: The Taichi backend could not run the job.
    """
    if settings is None:
        settings = backend.active_settings() or ScalingSettings.from_environment()
    if not isinstance(source, Image):
        source = Image(source)

    kind = InterpolationKind.parse(kind)
    if kind not in KERNELS:
        raise UnsupportedKernel(kind)
    dispatch = KERNELS[kind]

    if isinstance(scale, bool) or not isinstance(scale, numbers.Real):
        raise InvalidDimension(f"Scale must be a number, got {scale!r}")
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidDimension(f"Scale must be positive and finite, got {scale}")

    tile_size = _validate_tile_size(
        settings.tile_size if tile_size is None else tile_size)
    lobes = check_lobes(settings.lanczos_lobes if lobes is None else lobes)
    if separable is None:
        separable = settings.lanczos_separable

    dst_w, dst_h = destination_size(source.width, source.height, scale)
    if dst_w <= 0 or dst_h <= 0:
        raise InvalidDimension(
            f"Scale {scale} maps {source.width}x{source.height} "
            f"to an empty {dst_w}x{dst_h} destination",
            width=dst_w, height=dst_h)
    launch_tile(tile_size, dst_w, dst_h)

    backend.ensure_backend(settings)

    job = ResizeJob(source=source,
                    samples=source.to_float(),
                    destination=np.zeros((dst_h, dst_w, CHANNELS),
                                         dtype=np.float32),
                    kind=kind,
                    tile_size=tile_size,
                    lobes=lobes,
                    separable=separable)
    logger.debug("Resizing %dx%d -> %dx%d (%s, tiles %s, grid %s)",
                 source.width, source.height, dst_w, dst_h, kind.value,
                 tile_size, tile_grid(dst_w, dst_h, tile_size))

    try:
        dispatch(job)
        ti.sync()
    except RuntimeError as e:
        raise DeviceUnavailable(settings.arch,
                                f"Resize dispatch failed: {e}") from e

    return Image.from_float(job.destination, source.dtype)
