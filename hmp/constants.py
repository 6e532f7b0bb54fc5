# hmp/constants.py
"""Sensor, filtering and modeling constants for motion primitive models."""

from __future__ import annotations


class SensorConstants:
    """Tri-axial accelerometer encoding."""

    # Largest raw code emitted by the sensor (codes are 0..63)
    RAW_MAX_CODE: int = 63

    # Raw codes map linearly onto [-range, +range] (m/s^2), i.e. +/- 1.5 g
    PHYSICAL_RANGE: float = 14.709

    NUM_AXES: int = 3


class FilterConstants:
    """Gravity / body-acceleration separation filter."""

    SAMPLING_RATE_HZ: float = 32.0
    PASSBAND_HZ: float = 0.25
    STOPBAND_HZ: float = 2.0
    PASSBAND_RIPPLE_DB: float = 0.001
    STOPBAND_ATTENUATION_DB: float = 100.0

    # Group delay (samples) of the low-pass design above
    DELAY_SAMPLES: int = 64

    # Order of the median filter used against impulsive noise
    MEDIAN_ORDER: int = 3


class ModelingConstants:
    """GMM/GMR modeling defaults."""

    # Diagonal inflation added to every covariance estimate
    COVARIANCE_REGULARIZATION: float = 1e-5

    # Relative change of the mean log-likelihood that ends EM
    EM_TOLERANCE: float = 1e-10
    EM_MAX_ITERATIONS: int = 1000

    # K-means
    KMEANS_MAX_ITERATIONS: int = 100
    KMEANS_RESTARTS: int = 3

    # Cluster-count elbow rule
    SILHOUETTE_THRESHOLD: float = 0.69
    MIN_CLUSTERS: int = 2

    # Scale of the standard deviation used for the farthest admissible trial
    THRESHOLD_FACTOR: float = 1.5

    # Ratio between GMR query points and the longest time index
    REGRESSION_SCALE: float = 1.0

    # Variables of a feature dataset: time + 3 accelerations
    NUM_VARIABLES: int = 4


class ValidationMessages:
    """Standard validation and error messages."""

    NO_TRIALS = "At least one trial is required to build a dataset"
    BAD_TRIAL_SHAPE = "Trial {index} must be an (N, 3) array, got shape {shape}"
    UNEQUAL_TRIALS = "All trials must have the same length; trial {index} has {length}, expected {expected}"
    SHORT_TRIAL = "Trial length {length} does not exceed the filter delay of {delay} samples"
    NON_FINITE_TRIAL = "Trial {index} contains non-finite values"
    BAD_SAMPLE_SHAPE = "A sample must have 3 components, got shape {shape}"
