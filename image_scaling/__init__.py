"""Bilinear and Lanczos image upsampling with Taichi."""

from .backend import ensure_backend, init_backend
from .config import ScalingSettings
from .dispatch import (KERNELS, InterpolationKind, ResizeJob, destination_size,
                       iter_tiles, resize, tile_grid)
from .errors import (DeviceUnavailable, ImageScalingError, InvalidDimension,
                     UnsupportedKernel)
from .image import Image
from .samplers import lanczos_axis_weights, source_coordinate

__all__ = [
    "DeviceUnavailable",
    "Image",
    "ImageScalingError",
    "InterpolationKind",
    "InvalidDimension",
    "KERNELS",
    "ResizeJob",
    "ScalingSettings",
    "UnsupportedKernel",
    "destination_size",
    "ensure_backend",
    "init_backend",
    "iter_tiles",
    "lanczos_axis_weights",
    "resize",
    "source_coordinate",
    "tile_grid",
]
