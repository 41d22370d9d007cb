"""Generators of tones, noise, constant signals and random arrays."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from auxsig.signal import Signal


def _round(x: float) -> int:
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def _nsamples(dur_ms: float, fs: int) -> int:
    return _round(dur_ms / 1000.0 * fs)


def _rng(rng: np.random.Generator | None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def tone(freq: float | Sequence[float], dur_ms: float, fs: int, phase: float = 0.0) -> Signal:
    """A sine tone; a two-element ``freq`` makes a glide between the two.

    ``phase`` is in cycles and is ignored for a glide.
    """
    freqs = np.atleast_1d(np.asarray(freq, dtype=np.float64))
    if freqs.size not in (1, 2):
        raise ValueError("Frequency must be a scalar or a two-element array.")
    if freqs.max() >= fs / 2:
        raise ValueError("Frequency exceeds Nyquist frequency.")
    if dur_ms <= 0:
        raise ValueError("duration must be positive.")
    n = _nsamples(dur_ms, fs)
    if freqs.size == 1:
        k = np.arange(n)
        buf = np.sin(2 * np.pi * freqs[0] / fs * k + phase * 2 * np.pi)
    else:
        f1, f2 = freqs
        duration = n / fs
        glide = (f2 - f1) / 2.0 / duration
        t = np.arange(1, n + 1) / fs
        buf = np.sin(2 * np.pi * t * (f1 + glide * t))
    return Signal(buf, fs=fs)


def _check_dur(dur_ms: float) -> None:
    if dur_ms < 0:
        raise ValueError("duration must be non-negative.")


def noise(dur_ms: float, fs: int, rng: np.random.Generator | None = None) -> Signal:
    """Uniform white noise between -1 and 1."""
    _check_dur(dur_ms)
    n = _nsamples(dur_ms, fs)
    return Signal(_rng(rng).uniform(-1.0, 1.0, n), fs=fs)


def gnoise(dur_ms: float, fs: int, rng: np.random.Generator | None = None) -> Signal:
    """Gaussian noise, with samples outside (-1, 1) rejected."""
    _check_dur(dur_ms)
    n = _nsamples(dur_ms, fs)
    gen = _rng(rng)
    out = np.zeros(0)
    while out.size < n:
        m = max(2 * (n - out.size), 16)
        v1 = gen.uniform(-1.0, 1.0, m)
        v2 = gen.uniform(-1.0, 1.0, m)
        r = v1 * v1 + v2 * v2
        ok = (r < 1.0) & (r > 0.0)
        vals = v2[ok] * np.sqrt(-2.0 * np.log(r[ok]) / r[ok])
        out = np.concatenate([out, vals[np.abs(vals) < 1.0]])
    return Signal(out[:n], fs=fs)


def silence(dur_ms: float, fs: int) -> Signal:
    """All-zero audio."""
    _check_dur(dur_ms)
    return Signal(np.zeros(_nsamples(dur_ms, fs)), fs=fs)


def dc(dur_ms: float, fs: int) -> Signal:
    """Audio whose every sample is 1."""
    _check_dur(dur_ms)
    return Signal(np.ones(_nsamples(dur_ms, fs)), fs=fs)


def _check_positive(n: float) -> None:
    if n < 0:
        raise ValueError("argument must be positive")


def rand(n: float, rng: np.random.Generator | None = None) -> Signal:
    """A vector of ``round(n)`` uniform values between 0 and 1."""
    _check_positive(n)
    return Signal(_rng(rng).random(_round(n)))


def irand(n: float, rng: np.random.Generator | None = None) -> Signal:
    """A random integer from 1 to ``ceil(n)``."""
    _check_positive(n)
    return Signal(float(math.ceil(_rng(rng).random() * n)))


def randperm(n: float, rng: np.random.Generator | None = None) -> Signal:
    """A random ordering of the integers 1 to ``round(n)``."""
    count = _round(n)
    if count < 1:
        raise ValueError("argument must be positive")
    return Signal(_rng(rng).permutation(np.arange(1, count + 1)).astype(np.float64))