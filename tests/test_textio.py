import io
import json

import numpy as np
import pytest

from auxsig.signal import Signal
from auxsig.textio import fprintf, load_json, printf, process_escapes, sprintf


def test_process_escapes():
    assert process_escapes("a\\nb") == "a\nb"
    assert process_escapes("a\\tb") == "a\tb"
    assert process_escapes("a\\qb") == "aqb"
    assert process_escapes("a\\\\b") == "a\\b"
    assert process_escapes("plain") == "plain"


def test_sprintf_integer_and_string():
    assert sprintf("%d items", 3) == "3 items"
    assert sprintf("%s-%s", "a", "b") == "a-b"
    assert sprintf("%x", 255.0) == "%x" % 255


def test_sprintf_float_matches_printf_style():
    assert sprintf("v=%5.2f", 3.14159) == "v=" + "%5.2f" % 3.14159
    assert sprintf("%e", 2.5) == "%e" % 2.5


def test_sprintf_with_signals_and_escapes():
    out = sprintf(Signal(text="%s:\\t%d"), Signal(text="n"), Signal(7.0))
    assert out == "n:\t7"


def test_sprintf_without_format_returns_text():
    assert sprintf("hello", 1, 2) == "hello"


def test_sprintf_errors():
    with pytest.raises(ValueError):
        sprintf("%d and %d", 1)
    with pytest.raises(ValueError):
        sprintf("%s", 3.0)
    with pytest.raises(ValueError):
        sprintf("%d", Signal([1.0, 2.0]))


def test_printf_writes_stdout(capsys):
    printf("%d-%s", 4, "x")
    assert capsys.readouterr().out == "4-x"


def test_fprintf_writes_and_counts():
    stream = io.StringIO()
    count = fprintf(stream, "%s=%d\\n", "k", 2)
    assert stream.getvalue() == "k=2\n"
    assert count == len(stream.getvalue())


def test_fprintf_closed_stream():
    stream = io.StringIO()
    stream.close()
    with pytest.raises(ValueError):
        fprintf(stream, "x")


def test_load_json(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps(
            {
                "a": 1.5,
                "b": "hi",
                "c": True,
                "d": None,
                "e": [1, "x"],
                "f": {"g": 2},
            }
        ),
        encoding="utf-8",
    )
    obj = load_json(path)
    assert obj.strut["a"].buf[0] == 1.5
    assert obj.strut["b"].text == "hi"
    assert obj.strut["c"].is_bool() and bool(obj.strut["c"].buf[0])
    assert obj.strut["d"].is_empty()
    items = obj.strut["e"].cell
    assert len(items) == 2
    assert items[0].buf[0] == 1.0
    assert items[1].text == "x"
    assert np.array_equal(obj.strut["f"].strut["g"].buf, [2.0])


def test_load_json_errors(tmp_path):
    with pytest.raises(ValueError):
        load_json(tmp_path / "missing.json")
    bad = tmp_path / "list.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_json(bad)
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ValueError):
        load_json(broken)