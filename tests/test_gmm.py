import logging

import numpy as np
import pytest

from hmp.config import TrainerConfig
from hmp.dataset import build_datasets
from hmp.errors import ConvergenceError
from hmp.gmm import GaussianMixture, GaussianMixtureTrainer, train_gmm


@pytest.fixture
def two_blobs(rng):
    first = rng.multivariate_normal([0.0, 0.0], [[1.0, 0.5], [0.5, 1.0]], size=300)
    second = rng.multivariate_normal([10.0, 5.0], [[0.5, 0.0], [0.0, 2.0]], size=200)
    return np.vstack([first, second])


def sorted_by_first_mean(mixture):
    order = np.argsort(mixture.means[:, 0])
    return mixture.priors[order], mixture.means[order], mixture.covariances[order]


def test_em_recovers_two_components(two_blobs):
    mixture = train_gmm(two_blobs, 2, seed=0)
    priors, means, covariances = sorted_by_first_mean(mixture)

    assert mixture.converged
    assert priors.sum() == pytest.approx(1.0)
    np.testing.assert_allclose(priors, [0.6, 0.4], atol=1e-6)
    np.testing.assert_allclose(means, [[0.0, 0.0], [10.0, 5.0]], atol=0.3)
    np.testing.assert_allclose(covariances[0], [[1.0, 0.5], [0.5, 1.0]], atol=0.3)


def test_log_likelihood_never_decreases(two_blobs):
    mixture = GaussianMixtureTrainer().fit(two_blobs, 3, seed=1)
    history = np.asarray(mixture.log_likelihood_history)
    assert len(history) == mixture.n_iter
    # regularization keeps EM only approximately monotone
    assert np.all(np.diff(history) >= -1e-6)
    assert mixture.log_likelihood == history[-1]


def test_covariances_stay_positive_definite(two_blobs):
    mixture = train_gmm(two_blobs, 4, seed=2)
    for cov in mixture.covariances:
        np.testing.assert_allclose(cov, cov.T)
        assert np.all(np.linalg.eigvalsh(cov) > 0)


def test_initialization_uses_cluster_populations(two_blobs):
    trainer = GaussianMixtureTrainer()
    initial = trainer.initialize(two_blobs, 2, rng=0)
    assert initial.n_components == 2
    assert sorted(np.round(initial.priors, 6)) == [0.4, 0.6]
    assert initial.n_variables == 2


def test_iteration_limit_returns_unconverged_mixture(two_blobs, caplog):
    trainer = GaussianMixtureTrainer(TrainerConfig(max_iterations=1))
    with caplog.at_level(logging.WARNING, logger="hmp.gmm"):
        mixture = trainer.fit(two_blobs, 2, seed=0)

    assert not mixture.converged
    assert mixture.n_iter == 1
    assert "did not converge" in caplog.text


def test_strict_mode_raises_on_iteration_limit(two_blobs):
    trainer = GaussianMixtureTrainer(TrainerConfig(max_iterations=1, strict=True))
    with pytest.raises(ConvergenceError) as excinfo:
        trainer.fit(two_blobs, 2, seed=0)
    assert excinfo.value.n_iter == 1


def test_accepts_datasets(rng, trial_factory):
    gravity, _ = build_datasets([trial_factory(rng, length=120) for _ in range(3)])
    mixture = train_gmm(gravity, 2, seed=0)
    assert mixture.n_variables == 4
    assert mixture.priors.sum() == pytest.approx(1.0)


def test_mean_log_likelihood_of_single_gaussian():
    mixture = GaussianMixture(
        priors=np.array([1.0]),
        means=np.zeros((1, 1)),
        covariances=np.ones((1, 1, 1)),
    )
    assert mixture.mean_log_likelihood([[0.0]]) == pytest.approx(-0.5 * np.log(2.0 * np.pi))


@pytest.mark.parametrize("iterations", [1, 2, 3])
def test_priors_sum_to_one_after_every_m_step(two_blobs, iterations):
    trainer = GaussianMixtureTrainer(TrainerConfig(max_iterations=iterations))
    mixture = trainer.fit(two_blobs, 3, seed=5)
    assert mixture.n_iter == iterations
    assert mixture.priors.sum() == pytest.approx(1.0, abs=1e-12)
    assert np.all(mixture.priors >= 0.0)
