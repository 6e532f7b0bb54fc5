"""Time-indexed feature datasets built from modeling trials.

A dataset stacks every trial of one motion class into a single ``(4, N)``
matrix. Row 0 holds the time index of the sample *within its trial*
(``1..trial_length``), so it encodes the phase of the motion rather than a
global clock; rows 1-3 hold the x/y/z feature values.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .constants import ModelingConstants, SensorConstants, ValidationMessages
from .separation import SignalSeparator


@dataclass(frozen=True)
class Dataset:
    """Concatenated feature trials of one class (time, x, y, z rows)."""

    data: np.ndarray
    n_trials: int
    trial_length: int

    def __post_init__(self) -> None:
        if self.data.ndim != 2 or self.data.shape[0] != ModelingConstants.NUM_VARIABLES:
            raise ValueError(f"Dataset must be a (4, N) array, got shape {self.data.shape}")
        if self.data.shape[1] != self.n_trials * self.trial_length:
            raise ValueError("Dataset width must equal n_trials * trial_length")

    @property
    def points(self) -> np.ndarray:
        """Dataset as ``(N, 4)`` observations."""
        return self.data.T

    @property
    def time(self) -> np.ndarray:
        return self.data[0]

    @property
    def values(self) -> np.ndarray:
        return self.data[1:]

    @property
    def max_time(self) -> float:
        return float(self.data[0].max())

    @property
    def min_time(self) -> float:
        return float(self.data[0].min())

    def __len__(self) -> int:
        return self.data.shape[1]


def _validate_trials(trials: Sequence, delay: int) -> List[np.ndarray]:
    if len(trials) == 0:
        raise ValueError(ValidationMessages.NO_TRIALS)

    arrays: List[np.ndarray] = []
    for index, trial in enumerate(trials):
        arr = np.asarray(trial, dtype=float)
        if arr.ndim != 2 or arr.shape[1] != SensorConstants.NUM_AXES:
            raise ValueError(ValidationMessages.BAD_TRIAL_SHAPE.format(index=index, shape=arr.shape))
        if not np.all(np.isfinite(arr)):
            raise ValueError(ValidationMessages.NON_FINITE_TRIAL.format(index=index))
        arrays.append(arr)

    expected = arrays[0].shape[0]
    for index, arr in enumerate(arrays):
        if arr.shape[0] != expected:
            raise ValueError(
                ValidationMessages.UNEQUAL_TRIALS.format(index=index, length=arr.shape[0], expected=expected)
            )
    if expected <= delay:
        raise ValueError(ValidationMessages.SHORT_TRIAL.format(length=expected, delay=delay))
    return arrays


class DatasetBuilder:
    """Decompose modeling trials and assemble the gravity and body datasets."""

    def __init__(self, separator: Optional[SignalSeparator] = None) -> None:
        self.separator = separator or SignalSeparator()

    def build(self, trials: Sequence) -> Tuple[Dataset, Dataset]:
        arrays = _validate_trials(trials, self.separator.delay)

        components = [self.separator.separate(arr) for arr in arrays]
        short_length = min(gravity.shape[0] for gravity, _ in components)
        n_trials = len(components)

        gravity_data = np.empty((ModelingConstants.NUM_VARIABLES, n_trials * short_length))
        body_data = np.empty_like(gravity_data)
        time_index = np.arange(1, short_length + 1, dtype=float)

        for i, (gravity, body) in enumerate(components):
            cols = slice(i * short_length, (i + 1) * short_length)
            gravity_data[0, cols] = time_index
            gravity_data[1:, cols] = gravity[:short_length].T
            body_data[0, cols] = time_index
            body_data[1:, cols] = body[:short_length].T

        return (
            Dataset(gravity_data, n_trials=n_trials, trial_length=short_length),
            Dataset(body_data, n_trials=n_trials, trial_length=short_length),
        )


def build_datasets(trials: Sequence, separator: Optional[SignalSeparator] = None) -> Tuple[Dataset, Dataset]:
    return DatasetBuilder(separator).build(trials)


def align_trials(trials: Sequence) -> List[np.ndarray]:
    """Truncate recordings of different length to the shortest one."""
    arrays = [np.asarray(trial, dtype=float) for trial in trials]
    if not arrays:
        raise ValueError(ValidationMessages.NO_TRIALS)
    shortest = min(arr.shape[0] for arr in arrays)
    return [arr[:shortest] for arr in arrays]


def trials_from_axes(x_set, y_set, z_set) -> List[np.ndarray]:
    """Build trials from per-axis ``(num_samples, num_trials)`` matrices."""
    x = np.asarray(x_set, dtype=float)
    y = np.asarray(y_set, dtype=float)
    z = np.asarray(z_set, dtype=float)
    if x.ndim != 2 or x.shape != y.shape or x.shape != z.shape:
        raise ValueError(
            f"Axis matrices must share one 2-D shape, got {x.shape}, {y.shape}, {z.shape}"
        )
    return [np.column_stack((x[:, i], y[:, i], z[:, i])) for i in range(x.shape[1])]
