"""Exceptions raised by the modeling pipeline."""
from __future__ import annotations


class DegenerateCovarianceError(ValueError):
    """A covariance matrix is not positive definite even after regularization.

    This points at degenerate input data (e.g. an axis with no variance at
    all) and is not retried.
    """


class ConvergenceError(RuntimeError):
    """EM did not converge within the configured iteration bound."""

    def __init__(self, message: str, n_iter: int) -> None:
        super().__init__(message)
        self.n_iter = n_iter
