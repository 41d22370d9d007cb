"""Formatted text output and reading JSON files into signal objects."""

from __future__ import annotations

import json
import re
import sys
from typing import Any, TextIO

import numpy as np

from auxsig.signal import Signal

_SPEC = re.compile(r"%([-+ #0]+)?[0-9]?(\.[0-9])?[hlL]?[cuoxXideEgGfs]")
_ESCAPE = re.compile(r"\\(.?)", re.DOTALL)
_INT_CONVERSIONS = set("diuoxXc")


def process_escapes(text: str) -> str:
    """Turn ``\\n`` and ``\\t`` into newline and tab; drop any other backslash."""

    def repl(match: re.Match) -> str:
        ch = match.group(1)
        return {"n": "\n", "t": "\t"}.get(ch, ch)

    return _ESCAPE.sub(repl, text)


def _value_of(arg: Any) -> str | float:
    if isinstance(arg, Signal):
        if arg.text is not None:
            return arg.text
        if arg.is_scalar():
            return float(np.real(arg.buf[0]))
        raise ValueError("a string or a scalar is required for each format.")
    if isinstance(arg, str):
        return arg
    if isinstance(arg, (bool, int, float, np.number)):
        return float(arg)
    raise ValueError("a string or a scalar is required for each format.")


def _format_one(spec: str, arg: Any) -> str:
    conversion = spec[-1]
    pyspec = spec[:-1].rstrip("hlL") + conversion
    value = _value_of(arg)
    if isinstance(value, str):
        if conversion != "s":
            raise ValueError("a numeric format requires a scalar.")
        return pyspec % value
    if conversion == "s":
        raise ValueError("--String requires string object")
    if conversion in _INT_CONVERSIONS:
        return pyspec % int(value)
    return pyspec % value


def _text_of(fmt: Any) -> str:
    if isinstance(fmt, Signal):
        if fmt.text is None:
            raise ValueError("format must be a string.")
        return fmt.text
    if not isinstance(fmt, str):
        raise ValueError("format must be a string.")
    return fmt


def sprintf(fmt: Any, *args: Any) -> str:
    """Format ``args`` with C-style conversions in ``fmt``; extra arguments are ignored."""
    rest = process_escapes(_text_of(fmt))
    remaining = iter(args)
    parts: list[str] = []
    while (match := _SPEC.search(rest)) is not None:
        try:
            arg = next(remaining)
        except StopIteration:
            raise ValueError("--Insufficient argument") from None
        parts.append(rest[: match.start()])
        parts.append(_format_one(match.group(0), arg))
        rest = rest[match.end():]
    parts.append(rest)
    return "".join(parts)


def printf(fmt: Any, *args: Any) -> None:
    """Write the formatted text to standard output."""
    sys.stdout.write(sprintf(fmt, *args))


def fprintf(stream: TextIO, fmt: Any, *args: Any) -> int:
    """Write the formatted text to ``stream`` and return its length."""
    output = sprintf(fmt, *args)
    try:
        stream.write(output)
    except (OSError, ValueError, AttributeError) as exc:
        raise ValueError("-- Invalid file identifier") from exc
    return len(output)


def _number(value: float) -> float:
    return float(np.float32(value))


def _scalar(value: Any) -> Signal:
    if value is None:
        return Signal()
    if isinstance(value, bool):
        return Signal(np.array([value]))
    if isinstance(value, str):
        return Signal(text=value)
    if isinstance(value, (int, float)):
        return Signal(_number(value))
    raise ValueError("Error reading file")


def _element(value: Any) -> Signal:
    if isinstance(value, dict):
        return _object(value)
    if isinstance(value, list):
        return Signal(cell=[_element(item) for item in value])
    return _scalar(value)


def _object(data: dict) -> Signal:
    out = Signal()
    for key, value in data.items():
        out.strut[key] = _element(value)
    return out


def load_json(path: Any) -> Signal:
    """Read a JSON object file into a struct signal.

    Objects become structs, arrays become cells, strings become text,
    numbers single-precision scalars, booleans logical scalars and null
    an empty object.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            content = fh.read()
    except OSError as exc:
        raise ValueError(f"Error reading file: {path}") from exc
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Error reading file: {path}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Error reading file: {path}")
    return _object(data)