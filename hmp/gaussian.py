"""Multivariate normal helpers built on Cholesky factorizations."""
from __future__ import annotations

import numpy as np
from scipy import linalg

from .errors import DegenerateCovarianceError

LOG_2PI = np.log(2.0 * np.pi)


def _cholesky(covariance: np.ndarray) -> np.ndarray:
    try:
        return np.linalg.cholesky(covariance)
    except np.linalg.LinAlgError as exc:
        raise DegenerateCovarianceError(
            "Covariance matrix is not positive definite; the input data is degenerate along some axis."
        ) from exc


def log_density(points, mean, covariance) -> np.ndarray:
    """Log of the multivariate normal density at each row of ``points``.

    The log-determinant comes from the Cholesky diagonal and the quadratic
    form from a triangular solve, so no explicit inverse is formed.
    """
    x = np.atleast_2d(np.asarray(points, dtype=float))
    mu = np.asarray(mean, dtype=float).reshape(-1)
    cov = np.atleast_2d(np.asarray(covariance, dtype=float))
    dim = mu.shape[0]

    chol = _cholesky(cov)
    z = linalg.solve_triangular(chol, (x - mu).T, lower=True)
    log_det = 2.0 * np.sum(np.log(np.diag(chol)))
    return -0.5 * (dim * LOG_2PI + log_det + np.sum(z**2, axis=0))


def density(points, mean, covariance) -> np.ndarray:
    return np.exp(log_density(points, mean, covariance))


def mahalanobis(diffs, covariances) -> np.ndarray:
    """Squared Mahalanobis distance ``d' S^-1 d`` for a stack of points.

    ``diffs`` is ``(M, D)`` and ``covariances`` ``(M, D, D)``; row ``i`` of
    the result uses covariance ``i``.
    """
    d = np.asarray(diffs, dtype=float)
    covs = np.asarray(covariances, dtype=float)
    if covs.shape != d.shape + d.shape[-1:]:
        raise ValueError(f"Covariance stack {covs.shape} does not match differences {d.shape}")

    chol = _cholesky(covs)
    z = np.linalg.solve(chol, d[..., None])[..., 0]
    return np.sum(z**2, axis=-1)
