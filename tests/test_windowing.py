import numpy as np
import pytest

from auxsig.signal import Signal
from auxsig.windowing import blackman, hamming, hann, ramp, sam


def _ones(n=101, fs=1000):
    return Signal(np.ones(n), fs=fs)


def test_hamming_is_symmetric_with_unit_peak():
    out = hamming(_ones(5))
    assert np.allclose(out.buf, out.buf[::-1])
    assert out.buf[2] == pytest.approx(1.0)
    assert out.buf[0] == pytest.approx(0.08)


def test_hann_equals_blackman_with_zero_alpha():
    sig = Signal(np.linspace(-1.0, 1.0, 64), fs=8000)
    assert np.allclose(hann(sig).buf, blackman(sig, 0.0).buf)


def test_hann_endpoints_vanish():
    out = hann(_ones(33))
    assert out.buf[0] == pytest.approx(0.0, abs=1e-12)
    assert out.buf[-1] == pytest.approx(0.0, abs=1e-12)
    assert np.allclose(out.buf, out.buf[::-1])


def test_blackman_default_alpha():
    sig = _ones(50)
    assert np.allclose(blackman(sig).buf, blackman(sig, 0.16).buf)


def test_ramp_shapes_edges_only():
    out = ramp(_ones(1000, fs=1000), 10.0)
    assert out.buf[0] == 0.0
    assert np.all(out.buf[10:990] == 1.0)
    assert np.allclose(out.buf, out.buf[::-1])
    assert np.all(np.diff(out.buf[:11]) >= 0)


def test_ramp_requires_positive_duration():
    with pytest.raises(ValueError):
        ramp(_ones(), 0.0)


def test_sam_zero_depth_leaves_signal():
    sig = Signal(np.linspace(0.0, 1.0, 200), fs=1000)
    assert np.array_equal(sam(sig, 4.0, 0.0).buf, sig.buf)


def test_sam_full_depth_envelope_bounds():
    out = sam(_ones(1000), 5.0)
    assert out.buf[0] == pytest.approx(0.0, abs=1e-12)
    assert np.all(out.buf >= -1e-12)
    assert np.all(out.buf <= 1.0 + 1e-12)


def test_window_requires_audio():
    with pytest.raises(ValueError):
        hamming(Signal([1.0, 2.0, 3.0]))


def test_stereo_both_channels_and_input_untouched():
    sig = Signal(np.ones(20), fs=1000, next=Signal(np.full(20, 2.0), fs=1000))
    out = hann(sig)
    assert np.allclose(out.next.buf, 2.0 * out.buf)
    assert np.all(sig.buf == 1.0)
    assert np.all(sig.next.buf == 2.0)


def test_groups_windowed_independently():
    sig = Signal(np.ones(20), fs=1000, n_groups=2)
    out = hamming(sig)
    assert np.allclose(out.buf[:10], out.buf[10:])
    assert len(out.buf) == 20