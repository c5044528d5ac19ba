"""Immutable RGBA images backed by numpy arrays."""

from __future__ import annotations

import numpy as np

from .errors import InvalidDimension

CHANNELS = 4

_SUPPORTED_DTYPES = (np.dtype(np.uint8), np.dtype(np.float32))


class Image:
    """
    A height x width x 4 RGBA raster.

    Components are either normalized float32 (0..1) or uint8. The pixel
    buffer is a private read-only copy, so an Image never changes after
    construction.
    """

    def __init__(self, pixels):
        pixels = np.asarray(pixels)
        if pixels.dtype not in _SUPPORTED_DTYPES:
            if np.issubdtype(pixels.dtype, np.floating):
                pixels = pixels.astype(np.float32)
            else:
                raise TypeError(
                    f"Image components must be uint8 or float, got {pixels.dtype}")

        if pixels.ndim == 2:
            pixels = pixels[:, :, None]
        if pixels.ndim != 3:
            raise InvalidDimension(
                f"Expected a 2D or 3D pixel array, got shape {pixels.shape}")

        h, w, c = pixels.shape
        if w * h <= 0:
            raise InvalidDimension(f"Image must not be empty, got {w}x{h}",
                                   width=w, height=h)

        opaque = 255 if pixels.dtype == np.uint8 else 1.0
        if c == 1:
            rgba = np.concatenate(
                [np.repeat(pixels, 3, axis=2),
                 np.full((h, w, 1), opaque, dtype=pixels.dtype)], axis=2)
        elif c == 3:
            rgba = np.concatenate(
                [pixels, np.full((h, w, 1), opaque, dtype=pixels.dtype)], axis=2)
        elif c == CHANNELS:
            rgba = np.array(pixels, copy=True)
        else:
            raise InvalidDimension(f"Unsupported channel count {c}")

        rgba = np.ascontiguousarray(rgba)
        rgba.setflags(write=False)
        self._pixels = rgba

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def channels(self) -> int:
        return CHANNELS

    @property
    def dtype(self) -> np.dtype:
        return self._pixels.dtype

    @property
    def stride(self) -> int:
        """Bytes per pixel."""
        return CHANNELS * self._pixels.itemsize

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def to_float(self) -> np.ndarray:
        """Return a new writable float32 copy normalized to 0..1."""
        if self.dtype == np.uint8:
            return self._pixels.astype(np.float32) / 255
        return np.array(self._pixels, dtype=np.float32, copy=True)

    @classmethod
    def from_float(cls, pixels: np.ndarray, dtype=np.float32) -> Image:
        """Wrap a float buffer, quantizing to uint8 when requested."""
        if np.dtype(dtype) == np.uint8:
            pixels = np.clip(np.round(pixels * 255), 0, 255).astype(np.uint8)
        return cls(pixels)

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented
        return (self.dtype == other.dtype
                and np.array_equal(self._pixels, other._pixels))

    __hash__ = None

    def __repr__(self):
        return f"Image({self.width}x{self.height}, {self.dtype})"
