"""Array shaping, elementwise arithmetic, logic and ordering on signals."""

from __future__ import annotations

import copy
import math
from typing import Any, Callable, Iterator

import numpy as np

from auxsig.signal import Signal

RowFunc = Callable[[np.ndarray], np.ndarray]


def _require_int(value: float, what: str) -> int:
    value = float(value)
    if not math.isfinite(value) or value != int(value):
        raise ValueError(f"{what} must be an integer.")
    return int(value)


def _round(x: float) -> int:
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def _numeric(sig: Signal) -> None:
    if sig.text is not None:
        raise ValueError("a numeric object is required.")


def _as_signal(value: Any) -> Signal:
    return value if isinstance(value, Signal) else Signal(np.asarray(value))


def _operand(value: Any) -> np.ndarray:
    if isinstance(value, Signal):
        _numeric(value)
        arr = value.buf
    else:
        arr = np.atleast_1d(np.asarray(value))
    if arr.dtype == bool:
        arr = arr.astype(np.float64)
    return arr


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
    _numeric(sig)
    out = copy.deepcopy(sig)
    for chan in _channels(out):
        for seg in chan.chains():
            seg.buf = np.concatenate([func(row) for row in _rows(seg)])
    return out


def _check_lengths(x: np.ndarray, y: np.ndarray) -> None:
    if x.size == 0 or y.size == 0:
        raise ValueError("arguments must not be empty.")
    if x.size != y.size and x.size != 1 and y.size != 1:
        raise ValueError("arguments must be a scalar or arrays of the same length.")


def group(sig: Signal, n: float, overlap: float = 0) -> Signal:
    """Arrange the samples into ``n`` rows.

    An array must divide evenly; audio is padded with zeros to a multiple of ``n``.
    """
    rows = _require_int(n, "number of groups")
    _require_int(overlap, "overlap")
    if rows < 1:
        raise ValueError("number of groups must be positive.")
    _numeric(sig)
    out = copy.deepcopy(sig)
    if sig.is_audio():
        for chan in _channels(out):
            for seg in chan.chains():
                rem = len(seg.buf) % rows
                if rem:
                    pad = np.zeros(rows - rem, dtype=seg.buf.dtype)
                    seg.buf = np.concatenate([seg.buf, pad])
                seg.n_groups = rows
    else:
        if len(out.buf) % rows:
            raise ValueError(
                "The length of array must be divisible by the requested the row count."
            )
        out.n_groups = rows
    return out


def ungroup(sig: Signal, overlap: float = 0) -> Signal:
    """Join the rows end to end, overlap-adding ``overlap`` samples between rows."""
    ov = _require_int(overlap, "overlap")
    _numeric(sig)
    cols = sig.columns()
    if ov > cols:
        raise ValueError("Overlap cannot exceed the size on the row/group.")
    rows = _rows(sig)
    hop = cols - ov
    total = cols * sig.n_groups - ov * (sig.n_groups - 1)
    dtype = np.complex128 if np.iscomplexobj(sig.buf) else np.float64
    out = np.zeros(max(total, 0), dtype=dtype)
    for k, row in enumerate(rows):
        start = k * hop
        out[start : start + cols] += row
    return Signal(out, fs=sig.fs)


def ones(n: float) -> Signal:
    """A vector of ``round(n)`` ones; empty when that is not positive."""
    count = _round(float(n))
    return Signal(np.ones(max(count, 0)))


def zeros(n: float) -> Signal:
    """A vector of ``round(n)`` zeros; empty when that is not positive."""
    count = _round(float(n))
    return Signal(np.zeros(max(count, 0)))


def _as_float(row: np.ndarray) -> np.ndarray:
    return row.astype(np.float64) if row.dtype == bool else row


def diff(sig: Signal, order: float = 1) -> Signal:
    """Differences between samples ``order`` apart, within each group."""
    lag = int(order)
    if lag < 1:
        raise ValueError("argument must be positive")

    def func(row: np.ndarray) -> np.ndarray:
        row = _as_float(row)
        if len(row) <= lag:
            return row[:0]
        return row[lag:] - row[: len(row) - lag]

    return _map_rows(sig, func)


def cumsum(sig: Signal) -> Signal:
    """Running sum within each group."""
    return _map_rows(sig, lambda row: np.cumsum(_as_float(row)))


def all_true(sig: Signal) -> Signal:
    """Logical true if no element is zero."""
    _numeric(sig)
    return Signal(np.array([bool(np.all(sig.buf != 0))]))


def any_true(sig: Signal) -> Signal:
    """Logical true if any element is nonzero."""
    _numeric(sig)
    return Signal(np.array([bool(np.any(sig.buf != 0))]))


def _logical_pair(a: Signal, b: Signal) -> tuple[np.ndarray, np.ndarray]:
    for pos, item in enumerate((a, b), start=1):
        _numeric(item)
        if len(item.buf) and item.buf.dtype != bool:
            raise ValueError(f"argument {pos} must be a logical array.")
    n = min(len(a.buf), len(b.buf))
    return a.buf[:n].astype(bool), b.buf[:n].astype(bool)


def logical_and(a: Signal, b: Signal) -> Signal:
    """Elementwise AND over the length of the shorter argument."""
    x, y = _logical_pair(a, b)
    return Signal(np.logical_and(x, y))


def logical_or(a: Signal, b: Signal) -> Signal:
    """Elementwise OR over the length of the shorter argument."""
    x, y = _logical_pair(a, b)
    return Signal(np.logical_or(x, y))


def sort(sig: Signal) -> Signal:
    """Sort each group in ascending order."""
    _numeric(sig)
    if np.iscomplexobj(sig.buf):
        raise ValueError("complex values cannot be sorted.")
    return _map_rows(sig, np.sort)


def _clip(sig: Signal, limit: Any, func: Callable[[np.ndarray, np.ndarray], np.ndarray]) -> Signal:
    _numeric(sig)
    lim = _operand(limit)
    if np.iscomplexobj(sig.buf) or np.iscomplexobj(lim):
        raise ValueError("real values are required.")
    if lim.size != 1 and lim.size != len(sig.buf):
        raise ValueError("must be a scalar or array with the same length of arg1")
    out = copy.deepcopy(sig)
    out.buf = func(sig.buf.astype(np.float64), lim.astype(np.float64))
    return out


def atmost(sig: Signal, limit: Any) -> Signal:
    """Cap every element at ``limit`` (a scalar or an array of equal length)."""
    return _clip(sig, limit, np.minimum)


def atleast(sig: Signal, limit: Any) -> Signal:
    """Raise every element to at least ``limit`` (a scalar or an array of equal length)."""
    return _clip(sig, limit, np.maximum)


def _resized(out: Signal, result: np.ndarray, original_size: int) -> None:
    out.buf = result
    if result.size != original_size:
        out.n_groups = 1


def power(base: Any, exponent: Any) -> Signal:
    """Raise ``base`` to ``exponent`` elementwise.

    A non-audio base with a negative element is computed in complex
    arithmetic; audio stays real, giving NaN where the power is undefined.
    """
    b = _as_signal(base)
    _numeric(b)
    e = _operand(exponent)
    out = copy.deepcopy(b)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if b.is_audio():
            for chan in _channels(out):
                for seg in chan.chains():
                    x = _as_float(seg.buf)
                    _check_lengths(x, e)
                    _resized(seg, np.power(x, e), x.size)
            return out
        x = _as_float(b.buf)
        _check_lengths(x, e)
        if not np.iscomplexobj(x) and x.min() < 0:
            x = x.astype(np.complex128)
        _resized(out, np.power(x, e), x.size)
    return out


def mod(a: Any, b: Any) -> Signal:
    """Remainder of ``a / b`` with the sign of ``a``, elementwise."""
    x = _operand(a)
    y = _operand(b)
    if np.iscomplexobj(x) or np.iscomplexobj(y):
        raise ValueError("real values are required.")
    _check_lengths(x, y)
    with np.errstate(divide="ignore", invalid="ignore"):
        return Signal(np.fmod(x, y))