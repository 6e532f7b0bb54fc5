"""Sliding-window classification of accelerometer streams against class models."""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from .config import SeparatorConfig
from .gaussian import mahalanobis
from .model import ClassModel, ClassModelSet
from .sampling import decode_samples
from .separation import SignalSeparator
from .window import SampleWindow


class WindowState(str, Enum):
    FILLING = "filling"
    FULL = "full"


def possibility(distance: float, threshold: float) -> float:
    """Map a distance in ``[0, threshold]`` onto ``[1, 0]``; farther is 0."""
    return max(0.0, 1.0 - distance / threshold)


def possibilities(distances, thresholds) -> np.ndarray:
    d = np.asarray(distances, dtype=float)
    t = np.asarray(thresholds, dtype=float)
    return np.maximum(0.0, 1.0 - d / t)


def compare_with_model(gravity: np.ndarray, body: np.ndarray, model: ClassModel) -> float:
    """Mean squared Mahalanobis distance of window features to a model's curves.

    Row ``t - 1`` of the window features is compared with the curve point
    at time index ``t``, for every time index of the model.
    """
    rows = np.asarray(model.gravity.times, dtype=int) - 1
    if rows.size and rows.max() >= min(len(gravity), len(body)):
        raise ValueError(
            f"Window features ({len(gravity)} rows) are shorter than model '{model.name}' ({rows.max() + 1} points)"
        )
    gravity_distance = mahalanobis(gravity[rows] - model.gravity.values, model.gravity.covariances)
    body_distance = mahalanobis(body[rows] - model.body.values, model.body.covariances)
    return float(np.mean(np.column_stack((gravity_distance, body_distance))))


class StreamClassifier:
    """Classify one stream of samples, sample by sample.

    The classifier keeps a window of ``model_set.window_size`` samples.
    While the window is filling every class gets possibility 0; from the
    sample that fills it on, each new sample shifts the window and triggers a
    comparison with every model.
    """

    def __init__(self, model_set: ClassModelSet, separator_config: Optional[SeparatorConfig] = None) -> None:
        self.model_set = model_set
        self.separator = SignalSeparator(separator_config or SeparatorConfig(delay=model_set.filter_delay))
        if self.separator.delay != model_set.filter_delay:
            raise ValueError(
                f"Separator delay {self.separator.delay} does not match the model set ({model_set.filter_delay})"
            )
        self.window = SampleWindow(model_set.window_size)
        self.state = WindowState.FILLING

    @property
    def names(self):
        return self.model_set.names

    def reset(self) -> None:
        self.window.clear()
        self.state = WindowState.FILLING

    def distances(self, samples) -> np.ndarray:
        """Distance of a full window of samples to every model."""
        gravity, body = self.separator.separate(samples)
        return np.array([compare_with_model(gravity, body, model) for model in self.model_set])

    def classify_window(self, samples) -> np.ndarray:
        return possibilities(self.distances(samples), self.model_set.thresholds)

    def update(self, sample) -> np.ndarray:
        """Push one physical sample and return the possibility of every class."""
        self.window.push(sample)
        if self.state is WindowState.FILLING:
            if not self.window.is_full():
                return np.zeros(len(self.model_set))
            self.state = WindowState.FULL
        return self.classify_window(self.window.to_array())

    def update_raw(self, code) -> np.ndarray:
        """Like :meth:`update` for a raw ``[0, 63]`` sensor sample."""
        return self.update(decode_samples(code))

    def process(self, samples: Iterable, raw: bool = False) -> pd.DataFrame:
        """Run a whole stream; one row of possibilities per sample."""
        step = self.update_raw if raw else self.update
        rows: List[np.ndarray] = [step(sample) for sample in samples]
        data = np.vstack(rows) if rows else np.empty((0, len(self.model_set)))
        return pd.DataFrame(data, columns=list(self.names))


def classify_stream(model_set: ClassModelSet, samples: Iterable, raw: bool = False) -> pd.DataFrame:
    return StreamClassifier(model_set).process(samples, raw=raw)
