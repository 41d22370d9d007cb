"""Reductions over signals: extremes, sums, means, deviations, lengths, level and timing."""

from __future__ import annotations

import math
from typing import Callable, Sequence

import numpy as np

from auxsig.signal import Signal

Reducer = Callable[[np.ndarray], Sequence[float]]


def _rows(seg: Signal) -> np.ndarray:
    cols = len(seg.buf) // seg.n_groups
    return seg.buf[: cols * seg.n_groups].reshape(seg.n_groups, cols)


def _link(segments: list[Signal]) -> Signal:
    for first, second in zip(segments, segments[1:]):
        first.chain = second
    return segments[0]


def _reduce(sig: Signal, reducer: Reducer, keep_fs: bool) -> list[Signal]:
    """Apply ``reducer`` to every group of every chain segment and channel.

    The reducer returns one value per output; one signal comes back per
    output, keeping the chain, grouping and channel layout of ``sig``.
    """
    if sig.text is not None:
        raise ValueError("a numeric object is required.")
    per_output: list[list[Signal]] = []
    for seg in sig.chains():
        results = [tuple(reducer(row)) for row in _rows(seg)]
        columns = list(zip(*results))
        if not per_output:
            per_output = [[] for _ in columns]
        for store, col in zip(per_output, columns):
            store.append(
                Signal(
                    np.array(col),
                    fs=seg.fs if keep_fs else 1,
                    n_groups=seg.n_groups,
                    tmark=seg.tmark,
                    temporal=seg.temporal,
                )
            )
    heads = [_link(store) for store in per_output]
    if sig.next is not None:
        for head, right in zip(heads, _reduce(sig.next, reducer, keep_fs)):
            head.next = right
    return heads


def _require_items(row: np.ndarray) -> None:
    if row.size == 0:
        raise ValueError("cannot take the extreme of an empty array.")


def _max_row(row: np.ndarray) -> tuple[float, float]:
    _require_items(row)
    idx = int(np.argmax(row))
    return row[idx], float(idx + 1)


def _min_row(row: np.ndarray) -> tuple[float, float]:
    _require_items(row)
    idx = int(np.argmin(row))
    return row[idx], float(idx + 1)


def _nanmax_row(row: np.ndarray) -> tuple[float, float]:
    finite = np.isfinite(row)
    if not finite.any():
        return -math.inf, 0.0
    idx = int(np.argmax(np.where(finite, row, -np.inf)))
    return row[idx], float(idx + 1)


def _nanmin_row(row: np.ndarray) -> tuple[float, float]:
    finite = np.isfinite(row)
    if not finite.any():
        return math.inf, 0.0
    idx = int(np.argmin(np.where(finite, row, np.inf)))
    return row[idx], float(idx + 1)


def maximum(sig: Signal) -> tuple[Signal, Signal]:
    """Largest value of each group, with its one-based index."""
    values, indices = _reduce(sig, _max_row, keep_fs=True)
    return values, indices


def minimum(sig: Signal) -> tuple[Signal, Signal]:
    """Smallest value of each group, with its one-based index."""
    values, indices = _reduce(sig, _min_row, keep_fs=True)
    return values, indices


def nanmax(sig: Signal) -> tuple[Signal, Signal]:
    """Largest finite value of each group, with its one-based index (0 if none)."""
    values, indices = _reduce(sig, _nanmax_row, keep_fs=True)
    return values, indices


def nanmin(sig: Signal) -> tuple[Signal, Signal]:
    """Smallest finite value of each group, with its one-based index (0 if none)."""
    values, indices = _reduce(sig, _nanmin_row, keep_fs=True)
    return values, indices


def _quiet(func: Callable[[np.ndarray], float]) -> Reducer:
    def reducer(row: np.ndarray) -> tuple[float]:
        with np.errstate(divide="ignore", invalid="ignore"):
            return (func(row.astype(np.float64) if row.dtype == bool else row),)

    return reducer


def _sum(row: np.ndarray) -> float:
    return np.sum(row)


def _mean(row: np.ndarray) -> float:
    return np.sum(row) / np.float64(len(row))


def _stdev(row: np.ndarray) -> float:
    m = _mean(row)
    return np.sqrt(np.sum((row - m) ** 2) / np.float64(len(row) - 1))


def _nansum(row: np.ndarray) -> float:
    return np.sum(row[np.isfinite(row)])


def _nanmean(row: np.ndarray) -> float:
    kept = row[np.isfinite(row)]
    return np.sum(kept) / kept.size if kept.size else math.nan


def _nanstdev(row: np.ndarray) -> float:
    kept = row[np.isfinite(row)]
    if not kept.size:
        return math.nan
    m = np.sum(kept) / kept.size
    return np.sqrt(np.sum((kept - m) ** 2) / kept.size)


def total(sig: Signal) -> Signal:
    """Sum of each group."""
    return _reduce(sig, _quiet(_sum), keep_fs=False)[0]


def mean(sig: Signal) -> Signal:
    """Mean of each group (NaN for an empty group)."""
    return _reduce(sig, _quiet(_mean), keep_fs=False)[0]


def stdev(sig: Signal) -> Signal:
    """Sample standard deviation (divided by n - 1) of each group."""
    return _reduce(sig, _quiet(_stdev), keep_fs=False)[0]


def nansum(sig: Signal) -> Signal:
    """Sum of the finite values of each group."""
    return _reduce(sig, _quiet(_nansum), keep_fs=False)[0]


def nanmean(sig: Signal) -> Signal:
    """Mean of the finite values of each group, NaN if there are none."""
    return _reduce(sig, _quiet(_nanmean), keep_fs=False)[0]


def nanstdev(sig: Signal) -> Signal:
    """Population standard deviation of the finite values of each group."""
    return _reduce(sig, _quiet(_nanstdev), keep_fs=False)[0]


def length(sig: Signal) -> Signal:
    """Number of items: cell entries, string characters, or samples per group."""
    if sig.cell:
        return Signal(float(len(sig.cell)))
    if sig.text is not None:
        return Signal(float(len(sig.text)))
    return _reduce(sig, lambda row: (float(len(row)),), keep_fs=False)[0]


def size(sig: Signal) -> Signal:
    """Row count and column count as a two-element vector."""
    return Signal([float(sig.n_groups), float(sig.columns())])


def _rms_row(row: np.ndarray) -> tuple[float]:
    if len(row) == 0:
        return (math.inf,)
    with np.errstate(divide="ignore"):
        # 3.0103 dB makes a full-scale sinusoid read 0 dB.
        return (20 * np.log10(np.sqrt(np.sum(row * row) / len(row))) + 3.0103,)


def rms(sig: Signal) -> Signal:
    """RMS level in dB of each group, referenced to a full-scale sinusoid."""
    return _reduce(sig, _rms_row, keep_fs=True)[0]


def _per_segment(sig: Signal, func: Callable[[Signal], float]) -> Signal:
    if sig.text is not None:
        raise ValueError("a numeric object is required.")
    out = Signal([func(seg) for seg in sig.chains()])
    if sig.next is not None:
        out.next = _per_segment(sig.next, func)
    return out


def _seg_dur(seg: Signal) -> float:
    return seg.columns() * 1000.0 / (seg.fs or 1)


def begint(sig: Signal) -> Signal:
    """Start time in ms of each chain segment."""
    return _per_segment(sig, lambda seg: seg.tmark)


def endt(sig: Signal) -> Signal:
    """End time in ms of each chain segment."""
    return _per_segment(sig, lambda seg: seg.tmark + _seg_dur(seg))


def dur(sig: Signal) -> Signal:
    """Duration in ms of each chain segment."""
    return _per_segment(sig, _seg_dur)