"""
Decoding and encoding of image files with OpenCV.

Run as ``python -m image_scaling.image_io SRC DST [SCALE] [KIND]`` to upscale
a single file.
"""

import logging
import sys

import cv2
import numpy as np

from .config import ScalingSettings
from .dispatch import InterpolationKind, resize
from .image import Image

logger = logging.getLogger(__name__)


def load_image(path) -> Image:
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Could not read image: {path}")

    if img.dtype != np.uint8:
        # 16-bit PNGs and the like
        img = cv2.normalize(img, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    else:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return Image(img)


def save_image(image: Image, path):
    pixels = image.pixels
    if pixels.dtype != np.uint8:
        pixels = np.clip(np.round(pixels * 255), 0, 255).astype(np.uint8)
    try:
        ok = cv2.imwrite(str(path), cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA))
    except cv2.error as e:
        raise OSError(f"Could not write image: {path}") from e
    if not ok:
        raise OSError(f"Could not write image: {path}")


def upscale_file(src_path,
                 dst_path,
                 scale=2.0,
                 kind=InterpolationKind.LANCZOS,
                 settings: ScalingSettings = None) -> Image:
    src = load_image(src_path)
    dst = resize(src, scale, kind, settings=settings)
    save_image(dst, dst_path)
    logger.info("Wrote %s (%dx%d -> %dx%d)", dst_path, src.width, src.height,
                dst.width, dst.height)
    return dst


if __name__ == "__main__":
    if len(sys.argv) < 3:
        sys.exit(f"usage: {sys.argv[0]} SRC DST [SCALE] [bilinear|lanczos]")
    logging.basicConfig(level=logging.INFO)
    upscale_file(sys.argv[1], sys.argv[2],
                 float(sys.argv[3]) if len(sys.argv) > 3 else 2.0,
                 sys.argv[4] if len(sys.argv) > 4 else InterpolationKind.LANCZOS)
