"""The signal object and the checks and conversions that act on its type."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterator

import numpy as np


@dataclass(eq=False)
class Signal:
    """A buffer of samples with sampling rate, grouping, time chains and a second channel.

    ``fs`` greater than 1 marks audio, ``temporal`` marks a time sequence,
    ``text`` holds a string object, ``chain`` links the next time segment and
    ``next`` the right channel of a stereo signal.
    """

    buf: Any = field(default_factory=lambda: np.zeros(0))
    fs: int = 1
    n_groups: int = 1
    tmark: float = 0.0
    temporal: bool = False
    chain: Signal | None = None
    next: Signal | None = None
    text: str | None = None
    strut: dict = field(default_factory=dict)
    cell: list = field(default_factory=list)

    def __post_init__(self) -> None:
        arr = np.atleast_1d(np.array(self.buf))
        if arr.ndim != 1:
            raise ValueError("buffer must be one-dimensional")
        if arr.dtype == bool:
            pass
        elif np.iscomplexobj(arr):
            arr = arr.astype(np.complex128)
        else:
            arr = arr.astype(np.float64)
        self.buf = arr
        if self.n_groups < 1:
            raise ValueError("n_groups must be at least 1")

    def columns(self) -> int:
        """Number of samples in one group (row)."""
        if self.text is not None:
            return len(self.text)
        return len(self.buf) // self.n_groups

    def is_empty(self) -> bool:
        return (
            not self.text
            and len(self.buf) == 0
            and self.chain is None
            and self.next is None
            and not self.cell
            and not self.strut
        )

    def is_audio(self) -> bool:
        return not self.temporal and self.text is None and self.fs > 1

    def is_vector(self) -> bool:
        return (
            self.text is None
            and not self.is_audio()
            and not self.temporal
            and self.n_groups == 1
            and len(self.buf) > 1
        )

    def is_scalar(self) -> bool:
        return (
            self.text is None
            and not self.is_audio()
            and not self.temporal
            and len(self.buf) == 1
        )

    def is_string(self) -> bool:
        return self.text is not None

    def is_stereo(self) -> bool:
        return self.is_audio() and self.next is not None

    def is_bool(self) -> bool:
        return self.text is None and self.buf.dtype == bool

    def is_tseq(self) -> bool:
        return self.temporal

    def count_chains(self) -> int:
        return sum(1 for _ in self.chains())

    def chains(self) -> Iterator[Signal]:
        """Yield this segment and every segment chained after it."""
        seg: Signal | None = self
        while seg is not None:
            yield seg
            seg = seg.chain


def _size_class(sig: Signal) -> int:
    n = len(sig.buf)
    if n == 0:
        return 0
    if n == 1:
        return 1
    return 3 if sig.n_groups > 1 else 2


def _kind(sig: Signal) -> tuple:
    return (
        sig.text is not None,
        sig.is_audio(),
        sig.is_tseq(),
        sig.next is not None,
        sig.chain is not None,
        sig.buf.dtype == bool,
        _size_class(sig),
        bool(sig.cell),
        bool(sig.strut),
    )


def veq(a: Signal, b: Signal) -> bool:
    """True if both objects have the same type and identical contents.

    A complex object whose imaginary parts are all zero counts as equal to
    the real object with the same values.
    """
    if _kind(a) != _kind(b):
        return False
    if a.text is not None:
        return a.text == b.text
    x, y = a.buf, b.buf
    cx, cy = np.iscomplexobj(x), np.iscomplexobj(y)
    if cx != cy:
        if cx:
            if np.any(x.imag != 0):
                return False
            x = x.real
        else:
            if np.any(y.imag != 0):
                return False
            y = y.real
    if len(x) != len(y):
        return False
    return bool(np.array_equal(x, y))


def to_audio(sig: Signal, fs: int) -> Signal:
    """Turn a vector into mono audio, or a two-row matrix into stereo audio."""
    if sig.text is not None or sig.is_audio() or sig.is_tseq():
        raise ValueError("audio() requires a vector or matrix.")
    out = copy.deepcopy(sig)
    if out.n_groups == 1:
        out.fs = fs
        return out
    if out.n_groups == 2:
        half = len(out.buf) // 2
        right = Signal(out.buf[half:], fs=fs)
        return Signal(out.buf[:half], fs=fs, next=right)
    raise ValueError("Cannot apply to a matrix with rows > 2.")


def _vector_mono(sig: Signal) -> Signal:
    out = copy.deepcopy(sig)
    out.next = None
    if out.chain is not None:
        segments = list(out.chains())
        if not all(len(seg.buf) == 1 for seg in segments):
            raise ValueError("Only chains of scalar items can become a vector.")
        out.buf = np.concatenate([seg.buf for seg in segments])
        out.chain = None
    out.fs = 1
    out.tmark = 0.0
    out.temporal = False
    return out


def to_vector(sig: Signal) -> Signal:
    """Strip timing from a signal; a stereo signal becomes a two-row matrix."""
    if sig.text is not None:
        raise ValueError("vector() requires an audio object or an array.")
    out = _vector_mono(sig)
    if sig.next is not None:
        second = _vector_mono(sig.next)
        n = len(out.buf)
        if len(second.buf) != n:
            raise ValueError("Both channels must have the same length.")
        out.buf = np.concatenate([out.buf, second.buf])
        out.n_groups = 2
    return out


def left(sig: Signal) -> Signal:
    """The left channel of a stereo signal."""
    if not sig.is_stereo():
        raise ValueError("left() requires a stereo signal.")
    out = copy.deepcopy(sig)
    out.next = None
    return out


def right(sig: Signal) -> Signal:
    """The right channel of a stereo signal."""
    if not sig.is_stereo():
        raise ValueError("right() requires a stereo signal.")
    return copy.deepcopy(sig.next)


def set_next_chan(sig: Signal, other: Signal) -> Signal:
    """Make a stereo signal with ``sig`` on the left and ``other`` on the right."""
    for pos, item in enumerate((sig, other), start=1):
        if not (item.is_audio() or item.is_tseq()):
            raise ValueError(f"argument {pos} must be a time signal.")
        if item.next is not None:
            raise ValueError(f"argument {pos} must be mono.")
    out = copy.deepcopy(sig)
    out.next = copy.deepcopy(other)
    return out