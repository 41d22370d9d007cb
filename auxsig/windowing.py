"""Window functions and amplitude envelopes applied to audio signals."""

from __future__ import annotations

import copy
from typing import Callable

import numpy as np

from auxsig.signal import Signal

RowFunc = Callable[[np.ndarray, int], np.ndarray]


def _apply(sig: Signal, func: RowFunc) -> None:
    for seg in sig.chains():
        cols = len(seg.buf) // seg.n_groups
        rows = seg.buf[: cols * seg.n_groups].reshape(seg.n_groups, cols)
        seg.buf = np.concatenate([func(row.astype(np.float64), seg.fs) for row in rows])
    if sig.next is not None:
        _apply(sig.next, func)


def _modify(sig: Signal, func: RowFunc) -> Signal:
    if not sig.is_audio():
        raise ValueError("an audio object is required.")
    out = copy.deepcopy(sig)
    _apply(out, func)
    return out


def ramp(sig: Signal, dur_ms: float) -> Signal:
    """Apply squared-sine onset and offset ramps of ``dur_ms`` milliseconds."""
    if dur_ms <= 0:
        raise ValueError("ramp duration must be positive.")

    def func(row: np.ndarray, fs: int) -> np.ndarray:
        ramp_fs = 1.0e3 / (4.0 * dur_ms)
        n = min(len(row), int(np.floor(dur_ms / 1000.0 * fs + 0.5)))
        x2 = np.sin(2 * np.pi * ramp_fs * np.arange(n) / fs) ** 2
        w = np.ones(len(row))
        w[:n] *= x2
        w[len(row) - n:] *= x2[::-1]
        return row * w

    return _modify(sig, func)


def _cosine_window(length: int, alpha: float) -> np.ndarray:
    k = np.arange(length)
    with np.errstate(divide="ignore", invalid="ignore"):
        return (
            (1 - alpha) / 2
            - 0.5 * np.cos(2.0 * np.pi * k / (length - 1.0))
            + alpha / 2 * np.cos(4.0 * np.pi * k / (length - 1.0))
        )


def hamming(sig: Signal) -> Signal:
    """Multiply by a Hamming window."""

    def func(row: np.ndarray, fs: int) -> np.ndarray:
        k = np.arange(len(row))
        with np.errstate(divide="ignore", invalid="ignore"):
            return row * (0.54 - 0.46 * np.cos(2.0 * np.pi * k / (len(row) - 1.0)))

    return _modify(sig, func)


def blackman(sig: Signal, alpha: float = 0.16) -> Signal:
    """Multiply by a Blackman window with parameter ``alpha``."""
    return _modify(sig, lambda row, fs: row * _cosine_window(len(row), alpha))


def hann(sig: Signal) -> Signal:
    """Multiply by a Hann window."""
    return blackman(sig, 0.0)


def sam(sig: Signal, rate: float, depth: float = 1.0, phase: float = 0.0) -> Signal:
    """Sinusoidal amplitude modulation at ``rate`` Hz; ``phase`` is in cycles."""

    def func(row: np.ndarray, fs: int) -> np.ndarray:
        k = np.arange(len(row))
        env = (1.0 + depth * np.sin(2 * np.pi * (k * rate / fs + phase - 0.25))) / (1.0 + depth)
        return row * env

    return _modify(sig, func)