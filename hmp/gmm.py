"""Gaussian mixture models trained with Expectation-Maximization.

The mixture is initialized from a K-means clustering of the data and then
refined with EM until the mean log-likelihood of the data stops changing
(relative change below ``TrainerConfig.tolerance``). Every covariance
estimate is inflated on the diagonal by ``TrainerConfig.regularization``
to keep it invertible.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union
import logging

import numpy as np
from scipy.special import logsumexp

from .config import TrainerConfig
from .dataset import Dataset
from .errors import ConvergenceError
from .gaussian import log_density
from .kmeans import kmeans

logger = logging.getLogger(__name__)

# smallest positive double; floor for densities and probability masses
REALMIN = np.finfo(float).tiny


@dataclass(frozen=True)
class GaussianMixture:
    """Priors ``(K,)``, means ``(K, D)`` and covariances ``(K, D, D)``."""

    priors: np.ndarray
    means: np.ndarray
    covariances: np.ndarray
    log_likelihood: float = float("nan")
    n_iter: int = 0
    converged: bool = False
    log_likelihood_history: Tuple[float, ...] = ()

    @property
    def n_components(self) -> int:
        return self.priors.shape[0]

    @property
    def n_variables(self) -> int:
        return self.means.shape[1]

    def weighted_log_densities(self, points) -> np.ndarray:
        return _weighted_log_densities(np.asarray(points, dtype=float), self.priors, self.means, self.covariances)

    def mean_log_likelihood(self, points) -> float:
        return _mean_log_likelihood(self.weighted_log_densities(points))


def _weighted_log_densities(points, priors, means, covariances) -> np.ndarray:
    """``log(prior_k) + log N(x | mean_k, cov_k)`` as an ``(N, K)`` array."""
    with np.errstate(divide="ignore"):
        log_priors = np.log(priors)
    columns = [log_density(points, means[k], covariances[k]) for k in range(priors.shape[0])]
    return np.column_stack(columns) + log_priors[None, :]


def _mean_log_likelihood(weighted: np.ndarray) -> float:
    log_mixture = logsumexp(weighted, axis=1)
    return float(np.mean(np.maximum(log_mixture, np.log(REALMIN))))


def _as_points(data: Union[Dataset, np.ndarray]) -> np.ndarray:
    if isinstance(data, Dataset):
        return np.ascontiguousarray(data.points)
    points = np.asarray(data, dtype=float)
    if points.ndim != 2:
        raise ValueError(f"Expected an (N, D) array of points, got shape {points.shape}")
    return points


class GaussianMixtureTrainer:
    """Fit a ``K``-component Gaussian mixture to a dataset."""

    def __init__(self, config: Optional[TrainerConfig] = None) -> None:
        self.config = config or TrainerConfig()

    def initialize(self, points: np.ndarray, k: int, rng=None) -> GaussianMixture:
        """Initial mixture from K-means: population priors, centroids, cluster covariances."""
        cfg = self.config
        n, dim = points.shape
        clustering = kmeans(points, k, n_init=cfg.kmeans_n_init, max_iter=cfg.kmeans_max_iter, rng=rng)
        if clustering.n_clusters < k:
            logger.info("K-means dropped %s empty cluster(s); using %s components", k - clustering.n_clusters, clustering.n_clusters)

        k_eff = clustering.n_clusters
        counts = np.bincount(clustering.labels, minlength=k_eff)
        covariances = np.empty((k_eff, dim, dim))
        for j in range(k_eff):
            members = points[clustering.labels == j]
            if members.shape[0] > 1:
                covariances[j] = np.cov(members, rowvar=False)
            else:
                covariances[j] = np.zeros((dim, dim))
            covariances[j] += cfg.regularization * np.eye(dim)

        return GaussianMixture(
            priors=counts / float(n),
            means=clustering.centroids.copy(),
            covariances=covariances,
        )

    def fit(self, data: Union[Dataset, np.ndarray], k: int, seed=None) -> GaussianMixture:
        points = _as_points(data)
        rng = np.random.default_rng(seed)
        initial = self.initialize(points, k, rng)
        return self.train(points, initial)

    def train(self, points: np.ndarray, initial: GaussianMixture) -> GaussianMixture:
        """Run EM from ``initial`` until convergence or ``max_iterations``."""
        cfg = self.config
        n, dim = points.shape
        regularization = cfg.regularization * np.eye(dim)

        priors = initial.priors.copy()
        means = initial.means.copy()
        covariances = initial.covariances.copy()
        k = priors.shape[0]

        history: List[float] = []
        log_likelihood_old = -np.finfo(float).max
        log_likelihood = float("nan")
        converged = False
        n_iter = 0

        while n_iter < cfg.max_iterations:
            n_iter += 1

            # E-step: posterior probability of each component for each point
            weighted = _weighted_log_densities(points, priors, means, covariances)
            posteriors = np.exp(weighted - logsumexp(weighted, axis=1, keepdims=True))
            mass = posteriors.sum(axis=0)

            # M-step
            priors = mass / n
            safe_mass = np.maximum(mass, REALMIN)
            means = (posteriors.T @ points) / safe_mass[:, None]
            for j in range(k):
                centered = points - means[j]
                covariances[j] = (posteriors[:, j, None] * centered).T @ centered / safe_mass[j]
                covariances[j] += regularization

            log_likelihood = _mean_log_likelihood(_weighted_log_densities(points, priors, means, covariances))
            history.append(log_likelihood)
            logger.debug("EM iteration %s: mean log-likelihood %.10f", n_iter, log_likelihood)

            if abs(log_likelihood - log_likelihood_old) < cfg.tolerance * abs(log_likelihood_old):
                converged = True
                break
            log_likelihood_old = log_likelihood

        if converged:
            logger.info("EM converged after %s iterations (mean log-likelihood %.6f)", n_iter, log_likelihood)
        else:
            message = f"EM did not converge within {cfg.max_iterations} iterations"
            if cfg.strict:
                raise ConvergenceError(message, n_iter)
            logger.warning("%s; returning the last estimate (mean log-likelihood %.6f)", message, log_likelihood)

        return GaussianMixture(
            priors=priors,
            means=means,
            covariances=covariances,
            log_likelihood=log_likelihood,
            n_iter=n_iter,
            converged=converged,
            log_likelihood_history=tuple(history),
        )


def train_gmm(data: Union[Dataset, np.ndarray], k: int, config: Optional[TrainerConfig] = None, seed=None) -> GaussianMixture:
    return GaussianMixtureTrainer(config).fit(data, k, seed=seed)
