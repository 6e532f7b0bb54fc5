import numpy as np
import pytest

from hmp.sampling import decode_samples, encode_samples
from hmp.window import SampleWindow


def test_decode_maps_code_range_onto_physical_range():
    decoded = decode_samples([0, 63, 31.5])
    assert decoded[0] == pytest.approx(-14.709)
    assert decoded[1] == pytest.approx(14.709)
    assert decoded[2] == pytest.approx(0.0, abs=1e-12)


def test_decode_works_on_sample_matrices():
    raw = np.array([[0, 63, 21], [42, 0, 63]])
    decoded = decode_samples(raw)
    assert decoded.shape == (2, 3)
    assert encode_samples(decoded).tolist() == raw.tolist()


def test_encode_clips_out_of_range_values():
    assert encode_samples([-100.0, 100.0]).tolist() == [0, 63]


def test_window_grows_until_capacity():
    window = SampleWindow(3)
    window.push([1.0, 2.0, 3.0])
    window.push([4.0, 5.0, 6.0])
    assert len(window) == 2
    assert not window.is_full()


def test_window_evicts_oldest_sample_when_full():
    capacity = 5
    samples = [np.full(3, float(i)) for i in range(1, capacity + 2)]
    window = SampleWindow(capacity)
    for sample in samples:
        window.push(sample)

    assert len(window) == capacity
    assert window.is_full()
    np.testing.assert_array_equal(window.to_array(), np.vstack(samples[1:]))


def test_window_rejects_malformed_samples():
    window = SampleWindow(2)
    with pytest.raises(ValueError):
        window.push([1.0, 2.0])


def test_window_requires_positive_capacity():
    with pytest.raises(ValueError):
        SampleWindow(0)


def test_empty_window_has_no_rows():
    assert SampleWindow(4).to_array().shape == (0, 3)
