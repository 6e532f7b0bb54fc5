"""Choice of the number of Gaussian components for a feature dataset."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
import logging

import numpy as np

from .config import SelectionConfig
from .dataset import Dataset
from .kmeans import clustering_fitness, kmeans

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KSelection:
    """Selected component count and the fitness of every K tried."""

    k: int
    converged: bool
    scores: Dict[int, float] = field(default_factory=dict)


class ClusterCountSelector:
    """Silhouette-based elbow rule.

    K grows from ``min_k``; the clustering fitness at ``min_k`` is the
    starting point and, from the next K on, the first K whose fitness falls
    below ``quality_threshold`` stops the search and the previous K is
    returned. K-means is randomized, so the result depends on the seed.
    """

    def __init__(self, config: Optional[SelectionConfig] = None) -> None:
        self.config = config or SelectionConfig()

    def max_k(self, dataset: Dataset) -> int:
        cfg = self.config
        cap = cfg.max_k if cfg.max_k is not None else int(np.floor(dataset.max_time / 2.0))
        return max(min(cap, len(dataset)), cfg.min_k)

    def select(self, dataset: Dataset, seed=None) -> KSelection:
        cfg = self.config
        rng = np.random.default_rng(seed)
        points = dataset.points
        max_k = self.max_k(dataset)

        scores: Dict[int, float] = {}
        for k in range(cfg.min_k, max_k + 1):
            result = kmeans(points, k, n_init=cfg.n_init, max_iter=cfg.max_iter, rng=rng)
            fitness = clustering_fitness(points, result.labels)
            scores[k] = fitness
            logger.debug("K=%s: fitness %.4f (%s non-empty clusters)", k, fitness, result.n_clusters)

            if k > cfg.min_k and fitness < cfg.quality_threshold:
                logger.info("Selected K=%s (fitness dropped to %.4f at K=%s)", k - 1, fitness, k)
                return KSelection(k=k - 1, converged=True, scores=scores)

        logger.warning("Failed to converge to the optimal K: reached max K=%s, increase max_k.", max_k)
        return KSelection(k=max_k, converged=False, scores=scores)


def tune_k(dataset: Dataset, config: Optional[SelectionConfig] = None, seed=None) -> int:
    return ClusterCountSelector(config).select(dataset, seed=seed).k
