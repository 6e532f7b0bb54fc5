import numpy as np
import pytest

from hmp.dataset import Dataset, DatasetBuilder, align_trials, build_datasets, trials_from_axes
from hmp.separation import separate_components


def test_datasets_concatenate_trials_with_restarting_time(rng, trial_factory):
    trials = [trial_factory(rng, length=100) for _ in range(3)]
    gravity, body = build_datasets(trials)

    assert gravity.data.shape == (4, 3 * 36)
    assert body.data.shape == (4, 3 * 36)
    assert gravity.n_trials == 3
    assert gravity.trial_length == 36
    np.testing.assert_array_equal(gravity.time, np.tile(np.arange(1, 37), 3))
    np.testing.assert_array_equal(body.time, gravity.time)
    assert gravity.max_time == 36
    assert gravity.points.shape == (108, 4)


def test_dataset_values_match_full_trial_separation(rng, trial_factory):
    trials = [trial_factory(rng, length=90) for _ in range(2)]
    gravity, body = DatasetBuilder().build(trials)

    g_second, b_second = separate_components(trials[1])
    np.testing.assert_allclose(gravity.values[:, 26:], g_second.T)
    np.testing.assert_allclose(body.values[:, 26:], b_second.T)


def test_rejects_empty_trial_list():
    with pytest.raises(ValueError):
        build_datasets([])


def test_rejects_unequal_trials(rng, trial_factory):
    with pytest.raises(ValueError, match="same length"):
        build_datasets([trial_factory(rng, length=100), trial_factory(rng, length=101)])


def test_rejects_trials_without_three_axes():
    with pytest.raises(ValueError):
        build_datasets([np.zeros((100, 2))])


def test_rejects_trials_shorter_than_filter_delay():
    with pytest.raises(ValueError, match="filter delay"):
        build_datasets([np.zeros((64, 3))])


def test_rejects_non_finite_values():
    trial = np.zeros((100, 3))
    trial[5, 1] = np.nan
    with pytest.raises(ValueError, match="non-finite"):
        build_datasets([trial])


def test_align_trials_cuts_to_shortest():
    aligned = align_trials([np.zeros((10, 3)), np.ones((7, 3)), np.ones((12, 3))])
    assert [len(t) for t in aligned] == [7, 7, 7]


def test_trials_from_axes_builds_one_trial_per_column():
    x = np.arange(12.0).reshape(6, 2)
    trials = trials_from_axes(x, x + 100, x + 200)
    assert len(trials) == 2
    np.testing.assert_array_equal(trials[1][:, 0], x[:, 1])
    np.testing.assert_array_equal(trials[1][:, 2], x[:, 1] + 200)


def test_trials_from_axes_rejects_mismatched_axes():
    with pytest.raises(ValueError):
        trials_from_axes(np.zeros((6, 2)), np.zeros((5, 2)), np.zeros((6, 2)))


def test_dataset_checks_its_shape():
    with pytest.raises(ValueError):
        Dataset(np.zeros((3, 10)), n_trials=1, trial_length=10)
    with pytest.raises(ValueError):
        Dataset(np.zeros((4, 10)), n_trials=2, trial_length=10)
