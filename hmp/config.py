"""Configuration dataclasses for motion primitive modeling."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .constants import FilterConstants, ModelingConstants


@dataclass(frozen=True)
class SeparatorConfig:
    """Median + Chebyshev low-pass filter used to split gravity and body acceleration."""

    sampling_rate_hz: float = FilterConstants.SAMPLING_RATE_HZ
    passband_hz: float = FilterConstants.PASSBAND_HZ
    stopband_hz: float = FilterConstants.STOPBAND_HZ
    passband_ripple_db: float = FilterConstants.PASSBAND_RIPPLE_DB
    stopband_attenuation_db: float = FilterConstants.STOPBAND_ATTENUATION_DB

    # Samples discarded from the start of the filtered gravity signal
    delay: int = FilterConstants.DELAY_SAMPLES

    # 1 disables median filtering
    median_order: int = FilterConstants.MEDIAN_ORDER


@dataclass(frozen=True)
class SelectionConfig:
    """Silhouette elbow rule for choosing the number of Gaussian components."""

    quality_threshold: float = ModelingConstants.SILHOUETTE_THRESHOLD
    min_k: int = ModelingConstants.MIN_CLUSTERS

    # None -> half of the largest time index in the dataset
    max_k: Optional[int] = None

    n_init: int = ModelingConstants.KMEANS_RESTARTS
    max_iter: int = ModelingConstants.KMEANS_MAX_ITERATIONS


@dataclass(frozen=True)
class TrainerConfig:
    """K-means initialization and EM training of a Gaussian mixture."""

    regularization: float = ModelingConstants.COVARIANCE_REGULARIZATION
    tolerance: float = ModelingConstants.EM_TOLERANCE
    max_iterations: int = ModelingConstants.EM_MAX_ITERATIONS

    # Raise ConvergenceError instead of returning an unconverged mixture
    strict: bool = False

    kmeans_n_init: int = ModelingConstants.KMEANS_RESTARTS
    kmeans_max_iter: int = ModelingConstants.KMEANS_MAX_ITERATIONS


@dataclass(frozen=True)
class ModelConfig:
    """Everything needed to turn modeling trials into a class model."""

    separator: SeparatorConfig = field(default_factory=SeparatorConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    trainer: TrainerConfig = field(default_factory=TrainerConfig)

    threshold_factor: float = ModelingConstants.THRESHOLD_FACTOR
    regression_scale: float = ModelingConstants.REGRESSION_SCALE
