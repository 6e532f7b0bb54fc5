import numpy as np
import pytest

from hmp.gmr import ExpectedCurve
from hmp.model import ClassModel, ClassModelSet

SAMPLING_RATE_HZ = 32.0
GRAVITY_BASE = np.array([3.0, 3.0, 9.5])
PHASES = np.array([0.0, np.pi / 3.0, 2.0 * np.pi / 3.0])


def synthetic_trial(
    rng: np.random.Generator,
    length: int = 200,
    offset=None,
    offset_std: float = 1.0,
    amplitude: float = 3.0,
    frequency_hz: float = 1.0,
    noise_std: float = 2.5,
) -> np.ndarray:
    """Gravity offset + 1 Hz sinusoidal body motion + white noise, in m/s^2."""
    t = np.arange(length) / SAMPLING_RATE_HZ
    if offset is None:
        offset = rng.normal(0.0, offset_std, 3)
    motion = amplitude * np.sin(2.0 * np.pi * frequency_hz * t[:, None] + PHASES)
    return GRAVITY_BASE + offset + motion + rng.normal(0.0, noise_std, (length, 3))


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture(scope="session")
def trial_factory():
    return synthetic_trial


def constant_curve(length: int, value=(0.0, 0.0, 9.81), variances=(1.0, 2.0, 3.0)) -> ExpectedCurve:
    times = np.arange(1, length + 1)
    values = np.tile(np.asarray(value, dtype=float), (length, 1))
    covariances = np.tile(np.diag(np.asarray(variances, dtype=float)), (length, 1, 1))
    return ExpectedCurve(times=times, values=values, covariances=covariances)


@pytest.fixture
def small_model_set() -> ClassModelSet:
    """Two hand-made models with short curves (window size 6 + 64)."""
    still = ClassModel(
        name="still",
        gravity=constant_curve(6),
        body=constant_curve(6, value=(0.0, 0.0, 0.0)),
        threshold=10.0,
    )
    tilted = ClassModel(
        name="tilted",
        gravity=constant_curve(4, value=(9.81, 0.0, 0.0)),
        body=constant_curve(4, value=(0.0, 0.0, 0.0)),
        threshold=10.0,
    )
    return ClassModelSet(models=(still, tilted))


@pytest.fixture
def curve_factory():
    return constant_curve
