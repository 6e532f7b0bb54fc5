import numpy as np
import pytest
from scipy import signal

from hmp.config import SeparatorConfig
from hmp.separation import SignalSeparator, design_lowpass, separate_components


def test_lowpass_meets_passband_and_stopband():
    cfg = SeparatorConfig()
    sos = design_lowpass(cfg)
    _, response = signal.sosfreqz(sos, worN=np.array([0.0, cfg.stopband_hz]), fs=cfg.sampling_rate_hz)
    gain = np.abs(response)

    assert gain[0] == pytest.approx(1.0, abs=1e-3)
    assert gain[1] <= 10 ** (-cfg.stopband_attenuation_db / 20.0) * 1.01


def test_output_is_shorter_by_the_delay():
    samples = np.random.default_rng(0).normal(size=(150, 3))
    gravity, body = SignalSeparator().separate(samples)
    assert gravity.shape == (150 - 64, 3)
    assert body.shape == (150 - 64, 3)


@pytest.mark.parametrize("length", [0, 10, 64])
def test_under_filled_window_yields_empty_features(length):
    gravity, body = separate_components(np.ones((length, 3)))
    assert gravity.shape == (0, 3)
    assert body.shape == (0, 3)


def test_constant_signal_is_all_gravity():
    value = np.array([0.5, -2.0, 9.81])
    samples = np.tile(value, (1000, 1))
    gravity, body = SignalSeparator().separate(samples)

    # after the start-up transient of the low-pass filter
    np.testing.assert_allclose(gravity[-300:], np.tile(value, (300, 1)), atol=1e-2)
    np.testing.assert_allclose(body[-300:], 0.0, atol=1e-2)


def test_body_is_median_filtered_signal_minus_gravity():
    samples = np.random.default_rng(1).normal(size=(120, 3))
    separator = SignalSeparator()
    gravity, body = separator.separate(samples)
    clean = separator.median_filter(samples)
    np.testing.assert_allclose(body + gravity, clean[: len(body)])


def test_median_filter_removes_isolated_spikes():
    clean = np.tile([1.0, 2.0, 3.0], (200, 1))
    spiked = clean.copy()
    spiked[100] = [40.0, -40.0, 40.0]

    g_clean, b_clean = separate_components(clean)
    g_spiked, b_spiked = separate_components(spiked)
    np.testing.assert_allclose(g_spiked, g_clean)
    np.testing.assert_allclose(b_spiked, b_clean)


def test_median_filter_can_be_disabled():
    spiked = np.tile([1.0, 2.0, 3.0], (200, 1))
    spiked[100] = [40.0, -40.0, 40.0]
    separator = SignalSeparator(SeparatorConfig(median_order=1))
    np.testing.assert_array_equal(separator.median_filter(spiked), spiked)


def test_rejects_even_median_order():
    with pytest.raises(ValueError):
        SignalSeparator(SeparatorConfig(median_order=4))


def test_rejects_wrong_sample_shape():
    with pytest.raises(ValueError):
        SignalSeparator().separate(np.ones((100, 2)))


def test_separation_is_pure():
    samples = np.random.default_rng(2).normal(size=(100, 3))
    before = samples.copy()
    first = separate_components(samples)
    second = separate_components(samples)
    np.testing.assert_array_equal(samples, before)
    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1], second[1])


def test_cached_filter_design_is_shared_and_usable():
    first, second = SignalSeparator(), SignalSeparator()
    assert first.sos is second.sos

    samples = np.random.default_rng(3).normal(size=(150, 3))
    g_first, _ = first.separate(samples)
    g_second, _ = second.separate(samples)
    np.testing.assert_array_equal(g_first, g_second)
