"""Fixed-capacity sliding window of accelerometer samples."""
from __future__ import annotations

from collections import deque
from typing import Deque

import numpy as np

from .constants import SensorConstants, ValidationMessages


class SampleWindow:
    """FIFO of the most recent samples.

    Until ``capacity`` samples have been pushed the window grows; after that
    every push evicts the oldest sample.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Window capacity must be >= 1, got {capacity}")
        self.capacity = int(capacity)
        self._ring: Deque[np.ndarray] = deque(maxlen=self.capacity)

    def push(self, sample) -> None:
        """Append a sample, evicting the oldest one when the window is full."""
        values = np.asarray(sample, dtype=float).reshape(-1)
        if values.shape != (SensorConstants.NUM_AXES,):
            raise ValueError(ValidationMessages.BAD_SAMPLE_SHAPE.format(shape=np.shape(sample)))
        self._ring.append(values)

    def is_full(self) -> bool:
        return len(self._ring) == self.capacity

    def clear(self) -> None:
        self._ring.clear()

    def to_array(self) -> np.ndarray:
        """Return the window content oldest-first as an ``(len, 3)`` array."""
        if not self._ring:
            return np.empty((0, SensorConstants.NUM_AXES))
        return np.vstack(self._ring)

    def __len__(self) -> int:
        return len(self._ring)
