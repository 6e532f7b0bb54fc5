"""Gaussian Mixture Regression: expected feature curve conditioned on time."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
import logging

import numpy as np

from .dataset import Dataset
from .gmm import REALMIN, GaussianMixture

logger = logging.getLogger(__name__)

LOG_2PI = np.log(2.0 * np.pi)


@dataclass(frozen=True)
class ExpectedCurve:
    """Expected 3-D feature value and its covariance at each query time."""

    times: np.ndarray
    values: np.ndarray
    covariances: np.ndarray

    def __post_init__(self) -> None:
        m = self.times.shape[0]
        if self.values.shape != (m, 3) or self.covariances.shape != (m, 3, 3):
            raise ValueError(
                f"Inconsistent curve shapes: times {self.times.shape}, values {self.values.shape}, "
                f"covariances {self.covariances.shape}"
            )

    def __len__(self) -> int:
        return self.times.shape[0]

    @property
    def std(self) -> np.ndarray:
        """Per-axis standard deviation, ``(M, 3)``."""
        return np.sqrt(np.diagonal(self.covariances, axis1=1, axis2=2))


class GaussianMixtureRegressor:
    """Condition a trained mixture over ``(time, v1, v2, v3)`` on time.

    For each query time ``t`` the components are weighted by
    ``beta_k(t) ~ prior_k * N(t | mean_t_k, var_t_k)``. The expected value is
    the beta-weighted sum of the component conditional means. The
    covariance is the beta**2-weighted sum of the component conditional
    covariances. The spread between component means is left out, so this is
    an approximation of the full mixture variance; thresholds of stored
    models depend on it. The weights are normalized after shifting by their
    row maximum, so they always sum to one: a query far from every
    component still gets the nearest component's regression instead of a
    zero value and covariance.
    """

    def __init__(self, mixture: GaussianMixture, in_index: int = 0, out_index: Sequence[int] = (1, 2, 3)) -> None:
        self.mixture = mixture
        self.in_index = int(in_index)
        self.out_index = np.asarray(out_index, dtype=int)

    def weights(self, times) -> np.ndarray:
        """Normalized component weights ``beta``, shape ``(M, K)``."""
        mix = self.mixture
        t = np.asarray(times, dtype=float).reshape(-1)
        mu_in = mix.means[:, self.in_index]
        var_in = mix.covariances[:, self.in_index, self.in_index]

        with np.errstate(divide="ignore"):
            log_w = (
                np.log(mix.priors)[None, :]
                - 0.5 * (LOG_2PI + np.log(var_in)[None, :] + (t[:, None] - mu_in[None, :]) ** 2 / var_in[None, :])
            )
        # rescaling by the row maximum cancels in the ratio and avoids underflow
        w = np.exp(log_w - log_w.max(axis=1, keepdims=True))
        return w / np.maximum(w.sum(axis=1, keepdims=True), REALMIN)

    def regress(self, times) -> ExpectedCurve:
        mix = self.mixture
        t = np.asarray(times, dtype=float).reshape(-1)
        i, out = self.in_index, self.out_index

        beta = self.weights(t)
        mu_in = mix.means[:, i]
        mu_out = mix.means[:, out]
        var_in = mix.covariances[:, i, i]
        cov_out_in = mix.covariances[:, out, i]
        cov_in_out = mix.covariances[:, i, out]
        cov_out_out = mix.covariances[:, out][:, :, out]

        gain = cov_out_in / var_in[:, None]
        cond_means = mu_out[None, :, :] + gain[None, :, :] * (t[:, None] - mu_in[None, :])[:, :, None]
        cond_covs = cov_out_out - gain[:, :, None] * cov_in_out[:, None, :]

        values = np.einsum("mk,mkd->md", beta, cond_means)
        covariances = np.einsum("mk,kde->mde", beta**2, cond_covs)
        return ExpectedCurve(times=np.asarray(times).reshape(-1).copy(), values=values, covariances=covariances)


def regression_times(dataset: Dataset, n_points: int) -> np.ndarray:
    """Evenly spaced integer query times over the dataset's time range."""
    return np.ceil(np.linspace(dataset.min_time, dataset.max_time, n_points)).astype(int)


def retrieve_expected_curve(mixture: GaussianMixture, times) -> ExpectedCurve:
    return GaussianMixtureRegressor(mixture).regress(times)
