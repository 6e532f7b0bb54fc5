"""Gravity / body-acceleration separation.

The raw signal is first cleaned with a short median filter against impulsive
sensor noise. A Chebyshev type I low-pass filter then isolates the slowly
varying gravity component; the body-motion component is what remains after
subtracting gravity from the cleaned signal.

The low-pass filter runs causally, so its output lags the input by a
constant group delay. Gravity is shifted left by that delay, which means a
window of ``N`` samples yields ``N - delay`` gravity/body rows, row ``i``
belonging to input sample ``i``.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional, Tuple
import logging

import numpy as np
from scipy import signal

from .config import SeparatorConfig
from .constants import SensorConstants

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def design_lowpass(config: SeparatorConfig) -> np.ndarray:
    """Design the gravity low-pass filter as second-order sections.

    The order is the smallest one meeting the passband/stopband
    requirements, with the passband edge matched exactly.
    """
    order, edge = signal.cheb1ord(
        config.passband_hz,
        config.stopband_hz,
        config.passband_ripple_db,
        config.stopband_attenuation_db,
        fs=config.sampling_rate_hz,
    )
    sos = signal.cheby1(
        order,
        config.passband_ripple_db,
        edge,
        btype="low",
        output="sos",
        fs=config.sampling_rate_hz,
    )
    logger.debug("Designed Chebyshev I low-pass: order=%s, edge=%.4f Hz", order, edge)
    return sos


class SignalSeparator:
    """Split accelerometer samples into gravity and body-acceleration features."""

    def __init__(self, config: Optional[SeparatorConfig] = None) -> None:
        self.config = config or SeparatorConfig()
        if self.config.median_order < 1 or self.config.median_order % 2 == 0:
            raise ValueError(f"median_order must be a positive odd number, got {self.config.median_order}")
        if self.config.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.config.delay}")
        self.sos = design_lowpass(self.config)

    @property
    def delay(self) -> int:
        return self.config.delay

    def median_filter(self, samples: np.ndarray) -> np.ndarray:
        order = self.config.median_order
        if order == 1:
            return samples.copy()
        # zero-padded at both ends, one axis at a time
        return signal.medfilt(samples, kernel_size=[order, 1])

    def separate(self, samples) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(gravity, body)``, each of shape ``(N - delay, 3)``.

        Windows holding no more than ``delay`` samples produce empty arrays.
        """
        data = np.asarray(samples, dtype=float)
        if data.ndim != 2 or data.shape[1] != SensorConstants.NUM_AXES:
            raise ValueError(f"Expected an (N, 3) array of samples, got shape {data.shape}")

        n = data.shape[0]
        delay = self.config.delay
        if n <= delay:
            empty = np.empty((0, SensorConstants.NUM_AXES))
            return empty, empty.copy()

        clean = self.median_filter(data)
        filtered = signal.sosfilt(self.sos, clean, axis=0)
        gravity = filtered[delay:]
        body = clean[: n - delay] - gravity
        return gravity, body


def separate_components(samples, config: Optional[SeparatorConfig] = None) -> Tuple[np.ndarray, np.ndarray]:
    return SignalSeparator(config).separate(samples)
