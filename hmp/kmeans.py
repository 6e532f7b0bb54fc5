"""Lloyd's K-means and silhouette scores with squared Euclidean distance."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .constants import ModelingConstants


@dataclass(frozen=True)
class KMeansResult:
    """Outcome of the best K-means restart.

    Clusters that became empty during the iterations are dropped, so
    ``centroids`` may hold fewer than the requested ``k`` rows; ``labels``
    always index into ``centroids``.
    """

    labels: np.ndarray
    centroids: np.ndarray
    inertia: float
    n_iter: int

    @property
    def n_clusters(self) -> int:
        return self.centroids.shape[0]


def squared_distances(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Pairwise squared Euclidean distances, ``(len(points), len(centroids))``."""
    d = (
        np.sum(points**2, axis=1)[:, None]
        - 2.0 * points @ centroids.T
        + np.sum(centroids**2, axis=1)[None, :]
    )
    return np.maximum(d, 0.0, out=d)


def _seed_centroids(points: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """k-means++ seeding."""
    n = points.shape[0]
    centroids = np.empty((k, points.shape[1]))
    centroids[0] = points[rng.integers(n)]
    closest = squared_distances(points, centroids[:1])[:, 0]
    for i in range(1, k):
        total = closest.sum()
        if total > 0:
            idx = rng.choice(n, p=closest / total)
        else:
            idx = rng.integers(n)
        centroids[i] = points[idx]
        closest = np.minimum(closest, squared_distances(points, centroids[i : i + 1])[:, 0])
    return centroids


def _lloyd(points: np.ndarray, centroids: np.ndarray, max_iter: int) -> Tuple[np.ndarray, np.ndarray, int]:
    labels: Optional[np.ndarray] = None
    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        new_labels = np.argmin(squared_distances(points, centroids), axis=1)
        counts = np.bincount(new_labels, minlength=centroids.shape[0])

        # drop empty clusters
        if np.any(counts == 0):
            keep = counts > 0
            new_labels = (np.cumsum(keep) - 1)[new_labels]
            counts = counts[keep]

        sums = np.zeros((counts.shape[0], points.shape[1]))
        np.add.at(sums, new_labels, points)
        centroids = sums / counts[:, None]

        converged = labels is not None and np.array_equal(labels, new_labels)
        labels = new_labels
        if converged:
            break
    return labels, centroids, n_iter


def kmeans(
    points,
    k: int,
    n_init: int = ModelingConstants.KMEANS_RESTARTS,
    max_iter: int = ModelingConstants.KMEANS_MAX_ITERATIONS,
    rng=None,
) -> KMeansResult:
    """Cluster ``points`` (``(N, D)``) into at most ``k`` groups.

    Runs ``n_init`` independent restarts and keeps the one with the lowest
    within-cluster sum of squared distances. ``rng`` may be a seed or a
    ``numpy.random.Generator``.
    """
    data = np.asarray(points, dtype=float)
    if data.ndim != 2:
        raise ValueError(f"points must be a 2-D array, got shape {data.shape}")
    if not 1 <= k <= data.shape[0]:
        raise ValueError(f"k must be between 1 and the number of points ({data.shape[0]}), got {k}")
    if n_init < 1:
        raise ValueError(f"n_init must be >= 1, got {n_init}")

    generator = np.random.default_rng(rng)
    best: Optional[KMeansResult] = None
    for _ in range(n_init):
        labels, centroids, n_iter = _lloyd(data, _seed_centroids(data, k, generator), max_iter)
        inertia = float(np.sum((data - centroids[labels]) ** 2))
        if best is None or inertia < best.inertia:
            best = KMeansResult(labels=labels, centroids=centroids, inertia=inertia, n_iter=n_iter)
    return best


def silhouette_samples(points, labels, chunk_size: int = 1024) -> np.ndarray:
    """Silhouette value of every point using squared Euclidean distance.

    ``s(i) = (b - a) / max(a, b)`` where ``a`` is the mean distance to the
    other members of the point's cluster and ``b`` the smallest mean
    distance to any other cluster. Points in singleton clusters score 0.
    Distances are computed in row blocks so memory stays ``O(chunk * N)``.
    """
    data = np.asarray(points, dtype=float)
    _, inverse = np.unique(np.asarray(labels), return_inverse=True)
    inverse = inverse.reshape(-1)
    n = data.shape[0]
    if inverse.shape[0] != n:
        raise ValueError("labels must have one entry per point")

    k = int(inverse.max()) + 1 if n else 0
    scores = np.zeros(n)
    if k < 2:
        return scores

    counts = np.bincount(inverse, minlength=k)
    membership = np.zeros((n, k))
    membership[np.arange(n), inverse] = 1.0

    for start in range(0, n, chunk_size):
        stop = min(start + chunk_size, n)
        rows = np.arange(stop - start)
        own = inverse[start:stop]
        own_counts = counts[own]

        cluster_sums = squared_distances(data[start:stop], data) @ membership
        a = cluster_sums[rows, own] / np.maximum(own_counts - 1, 1)
        mean_to_cluster = cluster_sums / counts[None, :]
        mean_to_cluster[rows, own] = np.inf
        b = mean_to_cluster.min(axis=1)

        denom = np.maximum(a, b)
        with np.errstate(invalid="ignore", divide="ignore"):
            block = np.where(denom > 0, (b - a) / denom, 0.0)
        block[own_counts == 1] = 0.0
        scores[start:stop] = block
    return scores


def clustering_fitness(points, labels) -> float:
    """Average of the per-cluster mean silhouette values."""
    scores = silhouette_samples(points, labels)
    _, inverse = np.unique(np.asarray(labels), return_inverse=True)
    inverse = inverse.reshape(-1)
    per_cluster = np.bincount(inverse, weights=scores) / np.bincount(inverse)
    return float(per_cluster.mean())
