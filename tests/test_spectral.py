import numpy as np
import pytest

from auxsig.signal import Signal
from auxsig.spectral import envelope, fft, hilbert, ifft, movespec


def _audio(buf, fs=1000):
    return Signal(np.asarray(buf, dtype=np.float64), fs=fs)


def _cosine(n=64, cycles=4, fs=1000):
    k = np.arange(n)
    return _audio(np.cos(2 * np.pi * cycles * k / n), fs=fs)


def test_fft_of_delta_is_flat():
    out = fft(Signal([1.0, 0.0, 0.0, 0.0]))
    assert np.allclose(out.buf, np.ones(4))
    assert np.iscomplexobj(out.buf)


def test_fft_is_conjugate_symmetric_for_real_input():
    x = np.random.default_rng(1).normal(size=17)
    spec = fft(_audio(x)).buf
    n = len(spec)
    for k in range(1, n):
        assert np.isclose(spec[k], np.conj(spec[n - k]))


def test_fft_parseval():
    x = np.random.default_rng(2).normal(size=32)
    spec = fft(_audio(x)).buf
    assert np.isclose(np.sum(np.abs(spec) ** 2) / len(x), np.sum(x ** 2))


def test_fft_size_truncates_and_caps():
    x = np.arange(1.0, 9.0)
    short = fft(_audio(x), 4)
    assert len(short.buf) == 4
    assert np.allclose(short.buf, fft(_audio(x[:4])).buf)
    capped = fft(_audio(x), 100)
    assert len(capped.buf) == len(x)


def test_fft_keeps_sampling_rate():
    assert fft(_audio(np.ones(8), fs=8000)).fs == 8000


def test_fft_rejects_bad_size():
    with pytest.raises(ValueError):
        fft(_audio(np.ones(8)), 2.5)
    with pytest.raises(ValueError):
        fft(_audio(np.ones(8)), -1)


def test_fft_rejects_scalar_and_string():
    with pytest.raises(ValueError):
        fft(Signal(3.0))
    with pytest.raises(ValueError):
        fft(Signal(text="abc"))


def test_fft_per_group():
    sig = Signal(np.array([1.0, 0.0, 0.0, 0.0, 2.0, 0.0, 0.0, 0.0]), fs=1000, n_groups=2)
    out = fft(sig)
    assert out.n_groups == 2
    assert np.allclose(out.buf[:4], fft(_audio([1.0, 0, 0, 0])).buf)
    assert np.allclose(out.buf[4:], fft(_audio([2.0, 0, 0, 0])).buf)


def test_ifft_round_trip_is_real():
    x = np.random.default_rng(3).normal(size=20)
    back = ifft(fft(_audio(x)))
    assert not np.iscomplexobj(back.buf)
    assert np.allclose(back.buf, x)


def test_ifft_round_trip_odd_length():
    x = np.random.default_rng(4).normal(size=15)
    back = ifft(fft(_audio(x)))
    assert np.allclose(back.buf, x)


def test_ifft_of_non_hermitian_is_complex():
    spec = Signal(np.array([1 + 0j, 1j, 0j, 0j]))
    out = ifft(spec)
    assert np.iscomplexobj(out.buf)
    assert np.allclose(fft(Signal(out.buf.real)).buf.real.sum() + 0, out.buf.real.sum() * 4)


def test_ifft_of_real_input_is_complex():
    out = ifft(Signal([4.0, 0.0, 0.0, 0.0]))
    assert np.iscomplexobj(out.buf)
    assert np.allclose(out.buf, np.ones(4))


def test_ifft_rejects_bad_size():
    with pytest.raises(ValueError):
        ifft(Signal([1.0, 2.0]), -3)


def test_hilbert_of_cosine_is_sine():
    n, cycles = 64, 4
    k = np.arange(n)
    out = hilbert(_cosine(n, cycles))
    assert np.allclose(out.buf, np.sin(2 * np.pi * cycles * k / n), atol=1e-9)


def test_hilbert_keeps_length_odd():
    out = hilbert(_audio(np.random.default_rng(5).normal(size=11)))
    assert len(out.buf) == 11


def test_envelope_of_cosine_is_flat():
    out = envelope(_cosine(128, 8))
    assert np.allclose(out.buf, 1.0, atol=1e-9)


def test_envelope_bounds_signal():
    x = np.random.default_rng(6).normal(size=50)
    env = envelope(_audio(x)).buf
    assert len(env) == 50
    assert float(np.min(env - np.abs(x))) >= -1e-9


def test_hilbert_rejects_string():
    with pytest.raises(ValueError):
        hilbert(Signal(text="x"))


def test_movespec_zero_shift_is_identity():
    x = np.random.default_rng(7).normal(size=30)
    out = movespec(_audio(x), 0.0)
    assert np.allclose(out.buf, x)


def test_movespec_keeps_length_and_does_not_mutate():
    x = np.random.default_rng(8).normal(size=30)
    sig = _audio(x)
    out = movespec(sig, 50.0)
    assert len(out.buf) == 30
    assert np.array_equal(sig.buf, x)
    assert np.all(np.abs(out.buf) <= np.sqrt(2) * np.abs(x) + 1e-12)


def test_movespec_requires_audio():
    with pytest.raises(ValueError):
        movespec(Signal([1.0, 2.0, 3.0]), 10.0)


def test_stereo_channels_are_transformed():
    left = _audio([1.0, 0.0, 0.0, 0.0])
    left.next = _audio([2.0, 0.0, 0.0, 0.0])
    out = fft(left)
    assert np.allclose(out.buf, np.ones(4))
    assert np.allclose(out.next.buf, 2 * np.ones(4))