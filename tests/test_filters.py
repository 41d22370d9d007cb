import numpy as np
import pytest

from auxsig.filters import conv, filt, filtfilt
from auxsig.signal import Signal


def test_identity_filter_keeps_signal():
    x = Signal([0.5, -1.0, 2.0, 3.0], fs=8000)
    y, state = filt(x, [1.0])
    assert np.allclose(y.buf, x.buf)
    assert y.fs == 8000
    assert len(state.buf) == 0


def test_fir_matches_truncated_convolution():
    x = Signal([1.0, 2.0, 3.0, -1.0, 0.25])
    num = [0.5, 1.0, -0.25]
    y, state = filt(x, num)
    full = conv(x, num)
    assert np.allclose(y.buf, full.buf[: len(x.buf)])
    assert len(state.buf) == 2


def test_fir_final_state_is_tail_of_convolution():
    x = Signal([1.0, 2.0, 3.0])
    y, state = filt(x, [1.0, 1.0])
    assert np.allclose(state.buf, conv(x, [1.0, 1.0]).buf[len(x.buf):])


def test_one_pole_impulse_response():
    x = Signal(np.r_[1.0, np.zeros(9)])
    y, _ = filt(x, [1.0], [1.0, -0.5])
    assert np.allclose(y.buf, 0.5 ** np.arange(10))


def test_state_continues_between_calls():
    rng = np.random.default_rng(1)
    data = rng.standard_normal(40)
    num, den = [0.2, 0.3, 0.1], [1.0, -0.4, 0.1]
    whole, whole_state = filt(Signal(data), num, den)
    first, mid_state = filt(Signal(data[:17]), num, den)
    second, end_state = filt(Signal(data[17:]), num, den, mid_state)
    assert np.allclose(np.concatenate([first.buf, second.buf]), whole.buf)
    assert np.allclose(end_state.buf, whole_state.buf)


def test_state_carries_across_groups():
    rng = np.random.default_rng(2)
    data = rng.standard_normal(20)
    num, den = [1.0, 0.5], [1.0, -0.3]
    flat, _ = filt(Signal(data), num, den)
    grouped, _ = filt(Signal(data, n_groups=2), num, den)
    assert grouped.n_groups == 2
    assert np.allclose(grouped.buf, flat.buf)


def test_state_too_long_is_rejected():
    with pytest.raises(ValueError):
        filt(Signal([1.0, 2.0]), [1.0, 1.0], [1.0], [0.0, 0.0])


def test_filtfilt_identity():
    x = Signal([1.0, -2.0, 3.0, 4.0], fs=1000)
    y, _ = filtfilt(x, [1.0], [1.0])
    assert np.allclose(y.buf, x.buf)
    assert y.fs == 1000


def test_filtfilt_keeps_length_and_rejects_bad_state():
    x = Signal(np.sin(np.arange(50) / 3.0), fs=1000)
    y, state = filtfilt(x, [0.25, 0.5, 0.25], [1.0])
    assert len(y.buf) == len(x.buf)
    assert len(state.buf) == 2
    with pytest.raises(ValueError):
        filtfilt(x, [1.0, 1.0], [1.0], [0.0, 0.0, 0.0])


def test_conv_length_and_commutativity():
    a = [1.0, 2.0, 3.0]
    b = [0.5, -1.0]
    ab = conv(a, b)
    ba = conv(b, a)
    assert len(ab.buf) == len(a) + len(b) - 1
    assert np.allclose(ab.buf, ba.buf)


def test_conv_with_unit_and_shift():
    a = Signal([1.0, 2.0, 3.0])
    assert np.allclose(conv(a, [1.0]).buf, a.buf)
    assert np.allclose(conv(a, [0.0, 1.0]).buf, [0.0, 1.0, 2.0, 3.0])


def test_conv_rejects_text():
    with pytest.raises(ValueError):
        conv(Signal(text="abc"), [1.0])