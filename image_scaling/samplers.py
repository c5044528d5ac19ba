import numbers

import numpy as np
import taichi as ti
import taichi.math as tm

from .backend import ensure_backend
from .errors import InvalidDimension


@ti.func
def map_coordinate(i, src_size, dst_size):
    # Destination pixel center onto the source pixel grid
    return (i + 0.5) * src_size / dst_size - 0.5


@ti.kernel
def _source_coordinate(i: ti.i32, src_size: ti.i32, dst_size: ti.i32) -> ti.f32:
    return map_coordinate(i, src_size, dst_size)


def source_coordinate(dst_index, src_size, dst_size):
    """Fractional source position sampled for destination pixel ``dst_index``."""
    ensure_backend()
    return _source_coordinate(dst_index, src_size, dst_size)


def check_lobes(a):
    if isinstance(a, bool) or not isinstance(a, numbers.Integral):
        raise InvalidDimension(f"Lanczos lobes must be an integer, got {a!r}")
    if a < 1:
        raise InvalidDimension(f"Lanczos lobes must be >= 1, got {a}")
    return int(a)


@ti.func
def clamp_index(i, n):
    return min(max(i, 0), n - 1)


@ti.func
def fetch(src: ti.template(), x, y):
    return tm.vec4(src[y, x, 0], src[y, x, 1], src[y, x, 2], src[y, x, 3])


@ti.func
def store(dst: ti.template(), x, y, color):
    for c in ti.static(range(4)):
        dst[y, x, c] = color[c]


@ti.func
def bilinear(src: ti.template(), x, y, dst_w, dst_h):
    src_h, src_w = src.shape[0], src.shape[1]
    src_x = map_coordinate(x, src_w, dst_w)
    src_y = map_coordinate(y, src_h, dst_h)

    base_x, base_y = ti.floor(src_x, int), ti.floor(src_y, int)
    fx, fy = src_x - base_x, src_y - base_y
    x0, x1 = clamp_index(base_x, src_w), clamp_index(base_x + 1, src_w)
    y0, y1 = clamp_index(base_y, src_h), clamp_index(base_y + 1, src_h)

    p00 = fetch(src, x0, y0)
    p10 = fetch(src, x1, y0)
    p01 = fetch(src, x0, y1)
    p11 = fetch(src, x1, y1)
    return tm.mix(tm.mix(p00, p10, fx), tm.mix(p01, p11, fx), fy)


@ti.func
def sinc(x):
    s = 1.0
    if ti.abs(x) > 1e-6:
        px = tm.pi * x
        s = ti.sin(px) / px
    return s


@ti.func
def lanczos_weight(x, a):
    w = 0.0
    if ti.abs(x) < a:
        w = sinc(x) * sinc(x / a)
    return w


@ti.func
def axis_weight_sum(p, base, a):
    total = 0.0
    for i in range(base - a + 1, base + a + 1):
        total += lanczos_weight(p - i, a)
    return total


@ti.func
def lanczos(src: ti.template(), x, y, src_w, src_h, dst_w, dst_h, a):
    src_x = map_coordinate(x, src_w, dst_w)
    src_y = map_coordinate(y, src_h, dst_h)
    base_x, base_y = ti.floor(src_x, int), ti.floor(src_y, int)

    # Truncated windows near the border don't sum to one on their own
    norm_x = axis_weight_sum(src_x, base_x, a)
    norm_y = axis_weight_sum(src_y, base_y, a)

    color = tm.vec4(0.0)
    for j in range(base_y - a + 1, base_y + a + 1):
        wy = lanczos_weight(src_y - j, a) / norm_y
        sy = clamp_index(j, src_h)
        row = tm.vec4(0.0)
        for i in range(base_x - a + 1, base_x + a + 1):
            wx = lanczos_weight(src_x - i, a) / norm_x
            row += wx * fetch(src, clamp_index(i, src_w), sy)
        color += wy * row
    return color


@ti.func
def lanczos_horizontal(src: ti.template(), x, y, dst_w, a):
    # y indexes a source row; only the x axis is resampled
    src_w = src.shape[1]
    src_x = map_coordinate(x, src_w, dst_w)
    base_x = ti.floor(src_x, int)
    norm_x = axis_weight_sum(src_x, base_x, a)

    color = tm.vec4(0.0)
    for i in range(base_x - a + 1, base_x + a + 1):
        wx = lanczos_weight(src_x - i, a) / norm_x
        color += wx * fetch(src, clamp_index(i, src_w), y)
    return color


@ti.func
def lanczos_vertical(src: ti.template(), x, y, dst_h, a):
    src_h = src.shape[0]
    src_y = map_coordinate(y, src_h, dst_h)
    base_y = ti.floor(src_y, int)
    norm_y = axis_weight_sum(src_y, base_y, a)

    color = tm.vec4(0.0)
    for j in range(base_y - a + 1, base_y + a + 1):
        wy = lanczos_weight(src_y - j, a) / norm_y
        color += wy * fetch(src, x, clamp_index(j, src_h))
    return color


@ti.kernel
def _axis_weights(position: ti.f32, size: ti.i32, a: ti.i32,
                  indices: ti.types.ndarray(dtype=ti.i32, ndim=1),
                  weights: ti.types.ndarray(dtype=ti.f32, ndim=1)):
    for k in range(2 * a):
        base = ti.floor(position, int)
        i = base - a + 1 + k
        indices[k] = clamp_index(i, size)
        weights[k] = lanczos_weight(position - i, a) / axis_weight_sum(
            position, base, a)


def lanczos_axis_weights(position, size, a=3):
    """
    Taps applied along one axis at fractional source ``position``.

    Returns the clamped source indices and their normalized weights, in the
    order the Lanczos sampler visits them.
    """
    a = check_lobes(a)
    if size <= 0:
        raise InvalidDimension(f"Axis size must be > 0, got {size}")
    ensure_backend()
    indices = np.zeros(2 * a, dtype=np.int32)
    weights = np.zeros(2 * a, dtype=np.float32)
    _axis_weights(position, size, a, indices, weights)
    return indices, weights
