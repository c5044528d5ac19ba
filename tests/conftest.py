import os

import numpy as np
import pytest

os.environ.setdefault("IMAGE_SCALING_ARCH", "cpu")

from image_scaling import ScalingSettings, init_backend  # noqa: E402

CPU_SETTINGS = ScalingSettings(arch="cpu")


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    init_backend(CPU_SETTINGS)
    yield


@pytest.fixture
def restore_backend():
    yield
    init_backend(CPU_SETTINGS)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def rgba(gray):
    """Expand a 2D float array to opaque RGBA."""
    gray = np.asarray(gray, dtype=np.float32)
    return np.dstack([gray, gray, gray, np.ones_like(gray)])
