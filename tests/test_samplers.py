import numpy as np
import pytest

from image_scaling import (InterpolationKind, InvalidDimension,
                           lanczos_axis_weights, resize, source_coordinate)


def test_source_coordinate_maps_pixel_centers():
    assert source_coordinate(0, 4, 8) == -0.25
    assert source_coordinate(7, 4, 8) == 3.25
    assert source_coordinate(1, 2, 6) == 0.0


@pytest.mark.parametrize("scale", [3, 5])
def test_bilinear_exact_on_aligned_samples(rng, scale):
    src = rng.random((3, 4, 4), dtype=np.float32)
    dst = resize(src, scale, InterpolationKind.BILINEAR).pixels
    offset = (scale - 1) // 2
    aligned = dst[offset::scale, offset::scale]
    np.testing.assert_allclose(aligned, src, atol=1e-6)


def test_bilinear_clamps_at_borders(rng):
    src = rng.random((2, 3, 4), dtype=np.float32)
    dst = resize(src, 4, InterpolationKind.BILINEAR).pixels
    # The outermost destination pixels map outside the source and clamp
    np.testing.assert_allclose(dst[0, 0], src[0, 0], atol=1e-6)
    np.testing.assert_allclose(dst[-1, -1], src[-1, -1], atol=1e-6)


@pytest.mark.parametrize("a", [1, 2, 3, 4])
@pytest.mark.parametrize("position", [-0.5, -0.25, 0.0, 0.4, 2.5, 5.75, 6.5])
def test_lanczos_weights_sum_to_one(a, position):
    indices, weights = lanczos_axis_weights(position, 7, a)
    assert len(weights) == 2 * a
    assert abs(weights.sum() - 1.0) < 1e-5
    assert indices.min() >= 0
    assert indices.max() <= 6


def test_lanczos_weights_on_integer_position():
    indices, weights = lanczos_axis_weights(3.0, 10, 3)
    assert indices.tolist() == [1, 2, 3, 4, 5, 6]
    np.testing.assert_allclose(weights, [0, 0, 1, 0, 0, 0], atol=1e-5)


def test_lanczos_weights_are_symmetric_at_half_pixel():
    _, weights = lanczos_axis_weights(4.5, 10, 3)
    np.testing.assert_allclose(weights, weights[::-1], atol=1e-6)
    # Lobes alternate in sign
    assert weights[0] > 0 and weights[1] < 0 and weights[2] > 0


def test_lanczos_weights_clamp_indices_at_edges():
    indices, _ = lanczos_axis_weights(0.25, 4, 3)
    assert indices.tolist() == [0, 0, 0, 1, 2, 3]


def test_lanczos_weights_reject_bad_arguments():
    with pytest.raises(InvalidDimension):
        lanczos_axis_weights(0.5, 4, 0)
    with pytest.raises(InvalidDimension):
        lanczos_axis_weights(0.5, 0, 3)


@pytest.mark.parametrize("kind", list(InterpolationKind))
def test_constant_image_stays_constant(kind):
    src = np.empty((5, 6, 4), dtype=np.float32)
    src[...] = [0.2, 0.4, 0.6, 1.0]
    dst = resize(src, 2.5, kind).pixels
    np.testing.assert_allclose(dst, np.broadcast_to(src[0, 0], dst.shape),
                               atol=1e-5)


def test_lanczos_interpolates_through_source_samples(rng):
    src = rng.random((4, 4, 4), dtype=np.float32)
    dst = resize(src, 3, InterpolationKind.LANCZOS).pixels
    np.testing.assert_allclose(dst[1::3, 1::3], src, atol=1e-5)


def test_lanczos_weights_reject_non_integer_lobes():
    with pytest.raises(InvalidDimension):
        lanczos_axis_weights(0.5, 4, 2.5)


def _bilinear_reference(src, dst_w, dst_h):
    h, w = src.shape[:2]
    out = np.empty((dst_h, dst_w, 4))
    for y in range(dst_h):
        sy = (y + 0.5) * h / dst_h - 0.5
        y0 = int(np.floor(sy))
        fy = sy - y0
        ya, yb = np.clip([y0, y0 + 1], 0, h - 1)
        for x in range(dst_w):
            sx = (x + 0.5) * w / dst_w - 0.5
            x0 = int(np.floor(sx))
            fx = sx - x0
            xa, xb = np.clip([x0, x0 + 1], 0, w - 1)
            top = src[ya, xa] * (1 - fx) + src[ya, xb] * fx
            bottom = src[yb, xa] * (1 - fx) + src[yb, xb] * fx
            out[y, x] = top * (1 - fy) + bottom * fy
    return out


def _lanczos_taps(position, size, a):
    base = int(np.floor(position))
    taps = np.arange(base - a + 1, base + a + 1)
    d = position - taps
    weights = np.where(np.abs(d) < a, np.sinc(d) * np.sinc(d / a), 0.0)
    return np.clip(taps, 0, size - 1), weights / weights.sum()


def _lanczos_reference(src, dst_w, dst_h, a):
    h, w = src.shape[:2]
    out = np.empty((dst_h, dst_w, 4))
    for y in range(dst_h):
        iy, wy = _lanczos_taps((y + 0.5) * h / dst_h - 0.5, h, a)
        for x in range(dst_w):
            ix, wx = _lanczos_taps((x + 0.5) * w / dst_w - 0.5, w, a)
            out[y, x] = np.einsum("j,i,jic->c", wy, wx, src[np.ix_(iy, ix)])
    return out


@pytest.mark.parametrize("scale", [2, 2.7, 0.6])
def test_bilinear_matches_numpy_reference(rng, scale):
    src = rng.random((5, 6, 4), dtype=np.float32)
    dst = resize(src, scale, InterpolationKind.BILINEAR).pixels
    expected = _bilinear_reference(src.astype(np.float64), dst.shape[1],
                                   dst.shape[0])
    np.testing.assert_allclose(dst, expected, atol=1e-4)


@pytest.mark.parametrize("a", [2, 3])
@pytest.mark.parametrize("scale", [2, 2.7, 0.6])
def test_lanczos_matches_numpy_reference(rng, scale, a):
    src = rng.random((5, 6, 4), dtype=np.float32)
    dst = resize(src, scale, InterpolationKind.LANCZOS, lobes=a).pixels
    expected = _lanczos_reference(src.astype(np.float64), dst.shape[1],
                                  dst.shape[0], a)
    np.testing.assert_allclose(dst, expected, atol=1e-4)


def test_lanczos_weights_match_numpy_at_fractional_positions():
    for position in (0.3, 1.62, 3.49, 5.9):
        indices, weights = lanczos_axis_weights(position, 7, 3)
        expected_indices, expected_weights = _lanczos_taps(position, 7, 3)
        assert indices.tolist() == expected_indices.tolist()
        np.testing.assert_allclose(weights, expected_weights, atol=1e-5)
