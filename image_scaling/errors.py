"""Exceptions raised by the resize engine."""

from typing import Optional


class ImageScalingError(Exception):
    """Base exception for all image scaling errors."""

    pass


class InvalidDimension(ImageScalingError, ValueError):
    """
    Raised when a resize cannot produce a non-empty destination.

    Covers non-positive or non-finite scales, non-positive tile sizes or
    Lanczos lobes, malformed source images and destination sizes that
    truncate to zero.
    """

    def __init__(
        self,
        message: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        self.width = width
        self.height = height
        super().__init__(message)


class UnsupportedKernel(ImageScalingError, ValueError):
    """Raised when the requested interpolation kind has no registered kernel."""

    def __init__(self, kind: object, message: Optional[str] = None):
        self.kind = kind
        if message is None:
            message = f"Unsupported interpolation kind: {kind!r}"
        super().__init__(message)


class DeviceUnavailable(ImageScalingError, RuntimeError):
    """
    Raised when the Taichi backend cannot run the job.

    This happens when initialization fails, when strict device mode is on and
    Taichi fell back to the CPU, or when a dispatch fails at runtime.
    """

    def __init__(self, arch: str, message: Optional[str] = None):
        self.arch = arch
        if message is None:
            message = f"Compute backend '{arch}' is not available"
        super().__init__(message)
