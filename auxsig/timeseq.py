"""Time sequences: reading and setting their values and times, and time stretching of audio."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

import numpy as np

from auxsig.signal import Signal


def _require_tseq(sig: Signal) -> None:
    if not sig.is_tseq():
        raise ValueError("a time sequence is required.")


def _segment_value(seg: Signal) -> float:
    if len(seg.buf) == 0:
        raise ValueError("time sequence items must not be empty.")
    return float(np.real(seg.buf[0]))


def _channels(sig: Signal) -> Iterator[Signal]:
    chan: Signal | None = sig
    while chan is not None:
        yield chan
        chan = chan.next


def tsq_getvalues(sig: Signal) -> Signal:
    """The values of every item of a time sequence, joined into one array."""
    _require_tseq(sig)
    return Signal(np.concatenate([seg.buf for seg in sig.chains()]))


def tsq_gettimes(sig: Signal) -> Signal:
    """The time marks (ms, or relative) of every item of a time sequence."""
    _require_tseq(sig)
    return Signal(np.array([seg.tmark for seg in sig.chains()], dtype=np.float64))


def tsq_isrel(sig: Signal) -> Signal:
    """Logical true if the time sequence uses relative times."""
    _require_tseq(sig)
    return Signal(np.array([sig.fs == 0]))


def _as_signal(value: Any) -> Signal:
    return value if isinstance(value, Signal) else Signal(np.asarray(value))


def tsq_setvalues(sig: Signal, values: Any) -> Signal:
    """A copy of ``sig`` whose items take the rows of ``values``, one row per item."""
    _require_tseq(sig)
    vals = _as_signal(values)
    count = sig.count_chains()
    if vals.text is not None:
        raise ValueError("values must be numeric.")
    if vals.n_groups != count:
        raise ValueError(
            "Argument vector must have the same number of groups as the TSEQ length."
        )
    if vals.is_vector():
        raise ValueError("Argument must be a matrix (Use colon).")
    cols = vals.columns()
    rows = vals.buf[: cols * count].reshape(count, cols)
    out = copy.deepcopy(sig)
    for seg, row in zip(out.chains(), rows):
        seg.buf = row.copy()
    return out


def tsq_settimes(sig: Signal, times: Any) -> Signal:
    """A copy of ``sig`` with new time marks; times with ``fs`` 0 make it relative."""
    _require_tseq(sig)
    tms = _as_signal(times)
    if tms.text is not None:
        raise ValueError("times must be numeric.")
    if len(tms.buf) != sig.count_chains():
        raise ValueError(
            "Argument vector must have the same number of elements as the TSEQ."
        )
    out = copy.deepcopy(sig)
    for seg, tmark in zip(out.chains(), tms.buf):
        seg.tmark = float(np.real(tmark))
        if tms.fs == 0:
            seg.fs = 0
    return out


def time_argument(ratio: Signal, audio_dur: float, fs: int) -> Signal:
    """Prepare a time-sequence argument for an audio block of ``audio_dur`` ms.

    Relative times are scaled to the block, and items are added at 0 and at
    the end of the block (allowing 10 ms of margin) where missing. Anything
    that is not a time sequence comes back unchanged.
    """
    out = copy.deepcopy(ratio)
    if not out.is_tseq():
        return out
    if out.fs == 0:
        for seg in out.chains():
            seg.tmark *= audio_dur
            seg.fs = fs
    if out.tmark != 0.0:
        head = Signal(out.buf[:1].copy(), fs=fs, tmark=0.0, temporal=True, chain=out)
        head.strut, out.strut = out.strut, {}
        out = head
    last = list(out.chains())[-1]
    if abs(last.tmark - audio_dur) > 10.0:
        last.chain = Signal(last.buf[:1].copy(), fs=fs, tmark=audio_dur, temporal=True)
    for seg in out.chains():
        if seg.tmark < 0 or seg.tmark > audio_dur:
            raise ValueError("Time arguments set out of range of the audio block.")
    return out


def _cround(x: float) -> int:
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def _cdiv(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _harmonic_mean(x1: float, x2: float) -> float:
    return 2 * x1 * x2 / (x1 + x2)


def _harmonic_series(length: int, r1: float, r2: float) -> float:
    if length == 1:
        return 1.0 / r1 + 1.0 / r2
    inc = (r2 - r1) / (length - 1)
    if inc == 0.0:
        return length / r1
    r = r1 - inc
    total = 0.0
    for _ in range(length):
        r += inc
        total += 1.0 / r
    return total


def _adjust_hop(length: int, ratio: float, hop: int) -> tuple[int, int]:
    """The adjusted hop and the count of blocks that take one extra sample."""
    l0 = int(_cround(length * ratio) / hop)
    r0 = int(length * ratio) - l0 * hop
    a = _cdiv(r0, l0)
    return hop + a, r0 - a * l0


def _spread(
    ingrid: list[int],
    outgrid: list[int],
    n_samples: int,
    n_blocks: int,
    first_in: int,
    r1: float,
    r2: float,
    syn_hop: int,
) -> int:
    hmean = _harmonic_mean(r1, r2)
    if n_blocks <= 1:
        end = n_samples + first_in
        outgrid.append(int((end - ingrid[-1]) * hmean))
        ingrid.append(end)
        return 1
    hop: float = n_samples / _harmonic_series(n_blocks, r1, r2)
    if r1 != r2:
        _, leftover = _adjust_hop(n_samples, hmean, syn_hop)
        inc = (r2 - r1) / (n_blocks - 1)
        ratio = r1 - inc
    else:
        inc = 0.0
        ratio = r1
        hop, leftover = _adjust_hop(n_samples, ratio, syn_hop)
    cum_out = 0.0
    cum_in = float(first_in)
    for k in range(n_blocks):
        cum_out += hop
        ratio += inc
        cum_in += hop / ratio
        if leftover > 0 and k < leftover:
            cum_out += 1
            if r1 == r2:
                cum_in += 1 / hmean
        outgrid.append(int(cum_out))
        ingrid.append(_cround(cum_in))
    return n_blocks


def _set_time_grids(
    ingrid: list[int],
    outgrid: list[int],
    id1: int,
    id2: int,
    r1: float,
    r2: float,
    syn_hop: int,
    offset: int,
) -> int:
    n_blocks = int((id2 - id1) * _harmonic_mean(r1, r2) / syn_hop)
    start = len(outgrid)
    count = _spread(ingrid, outgrid, id2 - id1, n_blocks, id1, r1, r2, syn_hop)
    if offset > 0:
        for k in range(start, start + count):
            outgrid[k] += offset
    return count


def _window(data: np.ndarray, start: int, n: int) -> np.ndarray:
    """``n`` samples of ``data`` from ``start``, zero where outside the array."""
    out = np.zeros(max(n, 0))
    lo = max(start, 0)
    hi = min(start + n, len(data))
    if hi > lo:
        out[lo - start : hi - start] = data[lo:hi]
    return out


def _hann(n: int) -> np.ndarray:
    k = np.arange(n)
    with np.errstate(divide="ignore", invalid="ignore"):
        return 0.5 * (1 - np.cos(2.0 * np.pi * k / (n - 1.0)))


def _maxcc(data: np.ndarray, i1: int, len1: int, i2: int, len2: int) -> int:
    """Lag of the largest cross-correlation between two stretches of ``data``."""
    if len1 < 1 or len2 < 1:
        return 0
    corr = np.convolve(_window(data, i1, len1)[::-1], _window(data, i2, len2))
    count = len1 - len2
    if count <= 0:
        return 0
    return int(np.argmax(corr[len2 : len2 + count]))


@dataclass
class _Accumulator:
    """Overlap-add output with the running sum of the windows applied."""

    data: np.ndarray = field(default_factory=lambda: np.zeros(0))
    weight: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def add(self, start: int, samples: np.ndarray, window: np.ndarray) -> None:
        end = start + len(samples)
        if end > len(self.data):
            grow = end - len(self.data)
            self.data = np.concatenate([self.data, np.zeros(grow)])
            self.weight = np.concatenate([self.weight, np.zeros(grow)])
        self.data[start:end] += samples * window
        self.weight[start:end] += window


def _stretch(
    acc: _Accumulator,
    source: np.ndarray,
    ingr: list[int],
    outgr: list[int],
    syn_hop: int,
    begin: int,
    end: int,
    gridsize: int,
    nostretch: bool,
    delay: int,
) -> tuple[int, int, int]:
    """Overlap-add the blocks ``begin`` to ``end``; returns target size, last output index, delay."""
    win_len = 2 * (outgr[begin + 1] - outgr[begin])
    wind = _hann(win_len)
    tol = ingr[0]
    last_in = ingr[end] + syn_hop
    next_out = 0
    len1 = win_len + 2 * tol
    n_source = len(source)
    if nostretch:
        half = win_len // 2
        shifted = np.roll(wind, -half)
        for m in range(begin, end - 1):
            xid0 = ingr[m] + delay
            yid0 = outgr[m]
            seg = _window(source, xid0, win_len)
            acc.add(yid0, seg, shifted)
            acc.add(yid0, seg, wind)
            next_out = yid0 + win_len
            if m == end - 2:
                acc.add(yid0 + win_len, _window(source, xid0 + win_len, half), shifted[:half])
                hop = outgr[m + 1] - outgr[m]
                maxid = _maxcc(source, ingr[m + 1] - tol, len1, ingr[m] + hop + delay, win_len)
                delay = tol - maxid + 1
    else:
        m = begin
        while True:
            xid0 = ingr[m] + delay
            yid0 = outgr[m]
            count = win_len
            stop = last_in - 1 - xid0
            if end == gridsize and 0 <= stop < win_len:
                count = stop + 1
                next_out = yid0 + stop
            else:
                next_out = yid0 + win_len
            acc.add(yid0, _window(source, xid0, count), wind[:count])
            if m == end:
                break
            hop = outgr[m + 1] - outgr[m]
            corr1 = ingr[m + 1] - tol
            corr2 = ingr[m] + hop + delay
            len2 = win_len
            if m >= gridsize - 1:
                if len1 > n_source - corr1 + 1:
                    len1 = n_source - corr1
                if len1 < 1:
                    break
                if len2 > n_source - corr2 + 1:
                    len2 = n_source - corr2
                if len2 < 1:
                    break
            maxid = _maxcc(source, corr1, len1, corr2, win_len)
            delay = tol - maxid + 1
            if m == gridsize - 1 and (delay > 0 or outgr[m + 1] > next_out):
                break
            m += 1
    target = outgr[end] - outgr[begin]
    if end == gridsize and next_out < target + outgr[begin]:
        next_out = target + outgr[begin] - 1
    return target, next_out, delay


def _window_length(ratio: Signal, n: int) -> int:
    win_len = min(n // 5, 512)
    if ratio.strut:
        if "windowsize" in ratio.strut:
            size = ratio.strut["windowsize"]
            win_len = int(_segment_value(size) if isinstance(size, Signal) else size)
        if win_len < 50 or win_len > 4096 * 2:
            raise ValueError("windowsize must be >= 50 or <= 8192")
    return win_len


def _tsbase(buf: np.ndarray, ratio: Signal, fs: int) -> np.ndarray:
    n = len(buf)
    win_len = _window_length(ratio, n)
    syn_hop = win_len // 2
    if syn_hop < 1:
        raise ValueError("the audio is too short to be time-stretched.")
    tol = syn_hop
    ingrid = [tol]
    outgrid = [0]
    chain_idx = [0]
    if ratio.is_tseq():
        segments = list(ratio.chains())
        anchors = [math.ceil(seg.tmark * fs / 1000) + tol for seg in segments]
        values = {a: _segment_value(seg) for a, seg in zip(anchors, segments)}
        for a, b in zip(anchors, anchors[1:]):
            count = _set_time_grids(
                ingrid, outgrid, a, b, values[a], values[b], syn_hop, outgrid[chain_idx[-1]]
            )
            chain_idx.append(chain_idx[-1] + count)
    else:
        segments = [ratio]
        r = _segment_value(ratio)
        chain_idx.append(_set_time_grids(ingrid, outgrid, tol, n + tol, r, r, syn_hop, 0))
    gridsize = chain_idx[-1]
    max_step = max((b - a for a, b in zip(outgrid, outgrid[1:])), default=0)
    size = max(max(outgrid), 0) + 4 * max(max_step, 0) + 3 * win_len + 16
    acc = _Accumulator(np.zeros(size), np.zeros(size))
    source = np.concatenate([np.zeros(syn_hop + tol), buf, np.zeros(2 * tol)])
    target_total = 0
    last_out = 0
    delay = 0
    for i, (begin, end) in enumerate(zip(chain_idx, chain_idx[1:])):
        following = segments[i + 1] if i + 1 < len(segments) else None
        nostretch = (
            following is not None
            and _segment_value(segments[i]) == 1.0
            and _segment_value(following) == 1.0
        )
        target, last_out, delay = _stretch(
            acc, source, ingrid, outgrid, syn_hop, begin, end, gridsize, nostretch, delay
        )
        target_total += target
    if target_total <= 0:
        return np.zeros(0)
    head = acc.data[:target_total]
    weight = acc.weight[:target_total]
    mask = weight > 0.001
    head[mask] /= weight[mask]
    return _window(acc.data, last_out - target_total + 1, target_total)


def _audio_dur(sig: Signal) -> float:
    last = list(sig.chains())[-1]
    return last.tmark + last.columns() * 1000.0 / last.fs


def timestretch(sig: Signal, ratio: Any) -> Signal:
    """Change the duration of audio by ``ratio`` without changing its pitch.

    ``ratio`` is a number or a time sequence of ratios; a ratio of 2 makes
    the audio twice as long.
    """
    if not sig.is_audio():
        raise ValueError("timestretch() requires an audio object.")
    factor = copy.deepcopy(ratio) if isinstance(ratio, Signal) else Signal(float(ratio))
    if factor.text is not None:
        raise ValueError("ratio must be numeric.")
    if factor.is_tseq():
        factor = time_argument(factor, _audio_dur(sig), sig.fs)
    for seg in factor.chains():
        if not _segment_value(seg) > 0:
            raise ValueError("ratio must be positive.")
    out = copy.deepcopy(sig)
    for chan in _channels(out):
        for seg in chan.chains():
            data = np.real(seg.buf).astype(np.float64)
            seg.buf = _tsbase(data, factor, seg.fs)
            seg.n_groups = 1
    return out