"""Spectral transforms of signals: FFT, inverse FFT, Hilbert transform, envelope and spectral shift."""

from __future__ import annotations

import copy
import math
from typing import Any, Callable, Iterator

import numpy as np

from auxsig.signal import Signal

RowFunc = Callable[[np.ndarray, int], np.ndarray]


def _channels(sig: Signal) -> Iterator[Signal]:
    chan: Signal | None = sig
    while chan is not None:
        yield chan
        chan = chan.next


def _rows(seg: Signal) -> np.ndarray:
    cols = len(seg.buf) // seg.n_groups
    return seg.buf[: cols * seg.n_groups].reshape(seg.n_groups, cols)


def _map_rows(sig: Signal, func: RowFunc) -> Signal:
    """Apply ``func`` to every group of every chain segment and channel of a copy."""
    out = copy.deepcopy(sig)
    for chan in _channels(out):
        for seg in chan.chains():
            rows = [func(row, seg.fs) for row in _rows(seg)]
            seg.buf = np.concatenate(rows) if rows else seg.buf
    return out


def _as_float(row: np.ndarray) -> np.ndarray:
    return row.astype(np.float64) if row.dtype == bool else row


def _fft_size(size: Any) -> int:
    value = float(size.buf[0]) if isinstance(size, Signal) else float(size)
    if not math.isfinite(value) or value != int(value):
        raise ValueError("argument must be an integer.")
    if value < 0:
        raise ValueError(
            "argument must be positive or zero (for the entire array length)."
        )
    return int(value)


def _effective_size(requested: int, length: int) -> int:
    n = length if requested == 0 else requested
    return min(n, length)


def fft(sig: Signal, size: Any = 0) -> Signal:
    """Complex spectrum of each group; ``size`` 0 means the whole group.

    A ``size`` larger than the group is capped at the group length.
    """
    if sig.text is not None or not (sig.is_audio() or sig.is_vector()):
        raise ValueError("fft() requires a vector or an audio object.")
    requested = _fft_size(size)

    def func(row: np.ndarray, fs: int) -> np.ndarray:
        row = _as_float(row)
        n = _effective_size(requested, len(row))
        if n == 0:
            return np.zeros(0, dtype=np.complex128)
        return np.fft.fft(row[:n]).astype(np.complex128)

    return _map_rows(sig, func)


def _is_hermitian(spec: np.ndarray) -> bool:
    n = len(spec)
    for k in range(1, (n + 1) // 2):
        if spec[k] != np.conj(spec[n - k]):
            return False
    return True


def ifft(sig: Signal, size: Any = 0) -> Signal:
    """Inverse FFT of each group.

    A complex, conjugate-symmetric spectrum gives a real result; any other
    input gives a complex one.
    """
    if sig.text is not None:
        raise ValueError("ifft() requires a numeric object.")
    requested = _fft_size(size)
    base_complex = np.iscomplexobj(sig.buf)

    def func(row: np.ndarray, fs: int) -> np.ndarray:
        row = _as_float(row)
        n = _effective_size(requested, len(row))
        if n == 0:
            return np.zeros(0, dtype=np.complex128)
        spec = row[:n]
        if base_complex and _is_hermitian(spec):
            return np.fft.irfft(spec[: n // 2 + 1], n).astype(np.float64)
        return np.fft.ifft(spec.astype(np.complex128))

    return _map_rows(sig, func)


def _hilbert_row(row: np.ndarray) -> np.ndarray:
    row = _as_float(row).real.astype(np.float64)
    n = len(row)
    if n == 0:
        return row
    spec = np.fft.fft(row)
    weights = np.zeros(n)
    weights[0] = 1.0
    half = n // 2 + n % 2
    weights[1:half] = 2.0
    analytic = spec * weights
    if n % 2 == 0:
        analytic[half] = spec[half].real
    return np.fft.ifft(analytic).imag


def _require_signal(sig: Signal, name: str) -> None:
    if sig.text is not None or not (sig.is_audio() or sig.is_vector()):
        raise ValueError(f"{name}() requires a vector or an audio object.")


def hilbert(sig: Signal) -> Signal:
    """Imaginary part of the analytic signal of each group."""
    _require_signal(sig, "hilbert")
    return _map_rows(sig, lambda row, fs: _hilbert_row(row))


def envelope(sig: Signal) -> Signal:
    """Magnitude of the analytic signal of each group."""
    _require_signal(sig, "envelope")

    def func(row: np.ndarray, fs: int) -> np.ndarray:
        real = _as_float(row).real.astype(np.float64)
        return np.abs(real + 1j * _hilbert_row(real))

    return _map_rows(sig, func)


def movespec(sig: Signal, shift: Any) -> Signal:
    """Modulate each group by a complex exponential of ``shift`` Hz and keep the real part."""
    if not sig.is_audio():
        raise ValueError("movespec() requires an audio object.")
    hz = float(shift.buf[0]) if isinstance(shift, Signal) else float(shift)

    def func(row: np.ndarray, fs: int) -> np.ndarray:
        x = _as_float(row).real.astype(np.float64)
        t = np.arange(len(x)) / fs
        datum = (x + 1j * x) * np.exp(1j * hz * 2.0 * np.pi * t)
        return datum.real

    return _map_rows(sig, func)