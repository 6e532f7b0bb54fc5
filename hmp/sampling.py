# hmp/sampling.py
"""Conversion of raw accelerometer codes into physical acceleration."""
from __future__ import annotations

import numpy as np

from .constants import SensorConstants


def decode_samples(
    raw,
    max_code: int = SensorConstants.RAW_MAX_CODE,
    physical_range: float = SensorConstants.PHYSICAL_RANGE,
) -> np.ndarray:
    """Map raw codes in ``[0, max_code]`` linearly onto ``[-range, +range]``.

    Works element-wise, so a single 3-vector or an ``(N, 3)`` array of
    samples can be passed.
    """
    codes = np.asarray(raw, dtype=float)
    return -physical_range + (codes / max_code) * (2.0 * physical_range)


def encode_samples(
    physical,
    max_code: int = SensorConstants.RAW_MAX_CODE,
    physical_range: float = SensorConstants.PHYSICAL_RANGE,
) -> np.ndarray:
    """Inverse of :func:`decode_samples`, rounded and clipped to valid codes."""
    values = np.asarray(physical, dtype=float)
    codes = np.rint((values + physical_range) / (2.0 * physical_range) * max_code)
    return np.clip(codes, 0, max_code).astype(int)
