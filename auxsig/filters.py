"""Linear filtering of signals: direct-form filters, zero-phase filtering and convolution."""

from __future__ import annotations

import copy
from typing import Any, Iterator

import numpy as np

from auxsig.signal import Signal


def _channels(sig: Signal) -> Iterator[Signal]:
    chan: Signal | None = sig
    while chan is not None:
        yield chan
        chan = chan.next


def _rows(seg: Signal) -> np.ndarray:
    cols = len(seg.buf) // seg.n_groups
    return seg.buf[: cols * seg.n_groups].reshape(seg.n_groups, cols)


def _as_array(value: Any) -> np.ndarray:
    if value is None:
        return np.zeros(0)
    if isinstance(value, Signal):
        if value.text is not None:
            raise ValueError("a numeric array is required.")
        arr = value.buf
    else:
        arr = np.atleast_1d(np.asarray(value))
    if np.iscomplexobj(arr):
        raise ValueError("real values are required.")
    return arr.astype(np.float64)


def _require_numeric(sig: Signal) -> None:
    if sig.text is not None:
        raise ValueError("a numeric object is required.")
    if np.iscomplexobj(sig.buf):
        raise ValueError("real values are required.")


def _prepare(num: Any, den: Any, initial: Any) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    b = _as_array(num)
    a = _as_array(den)
    init = _as_array(initial)
    if b.size == 0 or a.size == 0:
        raise ValueError("coefficient arrays must not be empty.")
    if init.size >= max(b.size, a.size):
        raise ValueError(
            "the size of state array must be less than the coefficient array"
        )
    return b, a, init


def _lfilter(
    x: np.ndarray, num: np.ndarray, den: np.ndarray, state: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Transposed direct-form II filter; ``den[0]`` is taken to be 1."""
    order = max(len(num), len(den)) - 1
    b = np.zeros(order + 1)
    b[: len(num)] = num
    a = np.zeros(order + 1)
    a[: len(den)] = den
    st = np.zeros(order)
    st[: len(state)] = state[:order]
    y = np.empty(len(x))
    for m, xm in enumerate(x):
        ym = b[0] * xm + (st[0] if order else 0.0)
        if order:
            shifted = np.append(st[1:], 0.0)
            st = b[1:] * xm - a[1:] * ym + shifted
        y[m] = ym
    return y, st


def filt(
    sig: Signal, num: Any, den: Any = 1.0, initial: Any = None
) -> tuple[Signal, Signal]:
    """Filter with numerator ``num`` and denominator ``den``.

    The state carries from one group to the next. Returns the filtered
    signal and the final state.
    """
    _require_numeric(sig)
    b, a, init = _prepare(num, den, initial)
    out = copy.deepcopy(sig)
    final = init
    for chan in _channels(out):
        for seg in chan.chains():
            state = init
            rows = []
            for row in _rows(seg):
                y, state = _lfilter(row.astype(np.float64), b, a, state)
                rows.append(y)
            seg.buf = np.concatenate(rows) if rows else np.zeros(0)
            final = state
    return out, Signal(np.asarray(final, dtype=np.float64))


def filtfilt(
    sig: Signal, num: Any, den: Any = 1.0, initial: Any = None
) -> tuple[Signal, Signal]:
    """Filter forward and then backward for zero phase.

    Returns the filtered signal and the final state of the backward pass.
    """
    _require_numeric(sig)
    b, a, init = _prepare(num, den, initial)
    nfact = 3 * (max(b.size, a.size) - 1)
    out = copy.deepcopy(sig)
    final = init
    for chan in _channels(out):
        for seg in chan.chains():
            x = seg.buf.astype(np.float64)
            padded = np.concatenate([np.zeros(nfact), x])
            padded = np.concatenate([padded, padded])
            y, state = _lfilter(padded, b, a, init)
            y, state = y[::-1], state[::-1]
            y, state = _lfilter(y, b, a, state)
            y, state = y[::-1], state[::-1]
            seg.buf = y[nfact : nfact + len(x)].copy()
            final = state
    return out, Signal(np.asarray(final, dtype=np.float64))


def conv(a: Any, b: Any) -> Signal:
    """Full convolution of each group of ``a`` with ``b``."""
    base = a if isinstance(a, Signal) else Signal(_as_array(a))
    _require_numeric(base)
    kernel = _as_array(b)
    if kernel.size == 0:
        raise ValueError("arguments must not be empty.")
    out = copy.deepcopy(base)
    for chan in _channels(out):
        for seg in chan.chains():
            rows = []
            for row in _rows(seg):
                if row.size == 0:
                    raise ValueError("arguments must not be empty.")
                rows.append(np.convolve(row.astype(np.float64), kernel))
            seg.buf = np.concatenate(rows)
    return out