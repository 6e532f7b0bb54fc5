"""Per-class motion models and their acceptance thresholds."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Sequence, Tuple, Union
import logging

import numpy as np
from joblib import Parallel, delayed

from .config import ModelConfig
from .constants import FilterConstants, ModelingConstants
from .dataset import Dataset, DatasetBuilder
from .gaussian import mahalanobis
from .gmm import GaussianMixtureTrainer
from .gmr import ExpectedCurve, GaussianMixtureRegressor, regression_times
from .selection import ClusterCountSelector
from .separation import SignalSeparator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassModel:
    """Expected gravity and body curves of one motion class plus its threshold."""

    name: str
    gravity: ExpectedCurve
    body: ExpectedCurve
    threshold: float

    def __post_init__(self) -> None:
        if len(self.gravity) != len(self.body):
            raise ValueError(
                f"Model '{self.name}': gravity and body curves differ in length ({len(self.gravity)} vs {len(self.body)})"
            )
        if not np.isfinite(self.threshold) or self.threshold <= 0:
            raise ValueError(f"Model '{self.name}': threshold must be a positive number, got {self.threshold}")

    @property
    def curve_length(self) -> int:
        return len(self.gravity)

    @property
    def span(self) -> int:
        """Largest time index of the curves, i.e. feature rows a window must provide."""
        return int(np.max(self.gravity.times)) if self.curve_length else 0


@dataclass(frozen=True)
class ClassModelSet:
    """Ordered, read-only collection of class models."""

    models: Tuple[ClassModel, ...]
    filter_delay: int = FilterConstants.DELAY_SAMPLES

    def __post_init__(self) -> None:
        object.__setattr__(self, "models", tuple(self.models))
        if not self.models:
            raise ValueError("A model set needs at least one class model")
        names = [m.name for m in self.models]
        if len(set(names)) != len(names):
            raise ValueError(f"Class names must be unique, got {names}")

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(m.name for m in self.models)

    @property
    def thresholds(self) -> np.ndarray:
        return np.array([m.threshold for m in self.models])

    @property
    def curve_lengths(self) -> Tuple[int, ...]:
        return tuple(m.curve_length for m in self.models)

    @property
    def window_size(self) -> int:
        """Samples needed before every model can be compared.

        Curves regressed on fewer points than time indices still reach the
        largest time index, so the span decides, not the point count.
        """
        return max(m.span for m in self.models) + self.filter_delay

    def __getitem__(self, key: Union[int, str]) -> ClassModel:
        if isinstance(key, str):
            for model in self.models:
                if model.name == key:
                    return model
            raise KeyError(key)
        return self.models[key]

    def __iter__(self) -> Iterator[ClassModel]:
        return iter(self.models)

    def __len__(self) -> int:
        return len(self.models)


def compute_threshold(
    gravity: ExpectedCurve,
    body: ExpectedCurve,
    factor: float = ModelingConstants.THRESHOLD_FACTOR,
) -> float:
    """Mean distance between the expected curves and the farthest admissible trial.

    The farthest admissible trial moves every expected value away from zero
    by ``factor`` times the matching covariance diagonal entry. Its squared
    Mahalanobis distance to the curves is averaged over all time points and
    both features.
    """
    distances = []
    for curve in (gravity, body):
        spread = np.diagonal(curve.covariances, axis1=1, axis2=2)
        direction = np.where(curve.values > 0, 1.0, -1.0)
        farthest = curve.values + direction * factor * spread
        distances.append(mahalanobis(farthest - curve.values, curve.covariances))
    return float(np.mean(np.column_stack(distances)))


class ModelBuilder:
    """Turn the modeling trials of a class into a :class:`ClassModel`."""

    def __init__(self, config: Optional[ModelConfig] = None) -> None:
        self.config = config or ModelConfig()
        self.separator = SignalSeparator(self.config.separator)
        self.dataset_builder = DatasetBuilder(self.separator)
        self.selector = ClusterCountSelector(self.config.selection)
        self.trainer = GaussianMixtureTrainer(self.config.trainer)

    def expected_curve(self, dataset: Dataset, n_points: int, rng=None) -> Tuple[ExpectedCurve, int]:
        """GMM + GMR for one feature; returns the curve and the component count."""
        selection = self.selector.select(dataset, seed=rng)
        mixture = self.trainer.fit(dataset, selection.k, seed=rng)
        curve = GaussianMixtureRegressor(mixture).regress(regression_times(dataset, n_points))
        return curve, mixture.n_components

    def build(self, name: str, trials: Sequence, seed=None) -> ClassModel:
        cfg = self.config
        rng = np.random.default_rng(seed)
        gravity_set, body_set = self.dataset_builder.build(trials)

        # constant spacing: one query point per time index when regression_scale == 1
        n_points = int(np.ceil(gravity_set.max_time * cfg.regression_scale))
        gravity, k_gravity = self.expected_curve(gravity_set, n_points, rng)
        body, k_body = self.expected_curve(body_set, n_points, rng)
        threshold = compute_threshold(gravity, body, cfg.threshold_factor)

        logger.info(
            "Built model '%s' from %s trials: K_gravity=%s, K_body=%s, %s points, threshold %.4f",
            name,
            gravity_set.n_trials,
            k_gravity,
            k_body,
            n_points,
            threshold,
        )
        return ClassModel(name=name, gravity=gravity, body=body, threshold=threshold)

    def build_set(
        self,
        trials_by_class: Mapping[str, Sequence],
        seed=None,
        n_jobs: int = 1,
    ) -> ClassModelSet:
        """Build every class independently, optionally in parallel processes."""
        names = list(trials_by_class)
        seeds = np.random.SeedSequence(seed).spawn(len(names))
        models = Parallel(n_jobs=n_jobs)(
            delayed(self.build)(name, trials_by_class[name], class_seed) for name, class_seed in zip(names, seeds)
        )
        return ClassModelSet(models=tuple(models), filter_delay=self.separator.delay)


def generate_model(name: str, trials: Sequence, config: Optional[ModelConfig] = None, seed=None) -> ClassModel:
    return ModelBuilder(config).build(name, trials, seed=seed)
