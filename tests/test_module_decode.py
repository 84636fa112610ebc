from __future__ import annotations

import io
from pathlib import Path

import pytest

from modules.decode import DecodeError, ModuleDecoder, parse_modules
from modules.filter import filter_vendor_modules
from modules.models import Module

MODULES_STREAM = Path(__file__).parent / "fixtures" / "modules.json.stream"


def test_parse_modules_decodes_fixture_stream() -> None:
    modules = parse_modules(io.BytesIO(MODULES_STREAM.read_bytes()))

    assert modules == [
        Module(path="a", dir="/tmp/a", main=True),
        Module(path="example.org/b", dir="/tmp/example.org/b", version="v1.0.0"),
        Module(path="example.org/d", version="v0.3.1"),
    ]


def test_records_split_across_reads() -> None:
    # One byte per read forces every record to span many chunks.
    decoder = ModuleDecoder(io.BytesIO(MODULES_STREAM.read_bytes()), chunk_size=1)

    paths = [module.path for module in decoder]

    assert paths == ["a", "example.org/b", "example.org/d"]


def test_compact_back_to_back_records() -> None:
    data = b'{"Path":"x","Dir":"/x"}{"Path":"y","Dir":"/y","Main":true}\n'

    modules = parse_modules(io.BytesIO(data))

    assert modules == [
        Module(path="x", dir="/x"),
        Module(path="y", dir="/y", main=True),
    ]


def test_empty_stream_yields_no_modules() -> None:
    assert parse_modules(io.BytesIO(b"")) == []
    assert parse_modules(io.BytesIO(b" \n\t\n")) == []


def test_read_returns_batches_then_empty_list() -> None:
    decoder = ModuleDecoder(io.BytesIO(MODULES_STREAM.read_bytes()))

    first = decoder.read(2)
    second = decoder.read(2)

    assert [module.path for module in first] == ["a", "example.org/b"]
    assert [module.path for module in second] == ["example.org/d"]
    assert decoder.read(2) == []


def test_nested_values_and_escapes_do_not_end_record() -> None:
    data = (
        b'{"Path":"z","Dir":"/z","Replace":{"Path":"w","Dir":"/w"},'
        b'"Note":"a \\"}\\" b","Retracted":["x]"]}'
    )

    modules = parse_modules(io.BytesIO(data))

    assert modules == [Module(path="z", dir="/z")]


def test_malformed_record_reports_previous_modules() -> None:
    data = b'{"Path":"ok","Dir":"/ok"}\n{"Path": nope}\n{"Path":"later"}'

    with pytest.raises(DecodeError) as exc_info:
        parse_modules(io.BytesIO(data))

    assert exc_info.value.decoded == [Module(path="ok", dir="/ok")]
    assert exc_info.value.offset == data.index(b'{"Path": nope}')
    assert exc_info.value.__cause__ is not None


def test_wrong_field_type_is_decode_error() -> None:
    data = b'{"Path":"ok","Main":{"nested":true}}'

    with pytest.raises(DecodeError, match="invalid module record"):
        parse_modules(io.BytesIO(data))


def test_non_object_record_is_decode_error() -> None:
    with pytest.raises(DecodeError, match="expected '\\{'") as exc_info:
        parse_modules(io.BytesIO(b'{"Path":"a"}\ngo: not a module\n'))

    assert exc_info.value.decoded == [Module(path="a")]


def test_truncated_stream_is_decode_error() -> None:
    data = b'{"Path":"a","Dir":"/a"}\n{"Path":"b","Dir":'

    with pytest.raises(DecodeError, match="unexpected end of stream") as exc_info:
        parse_modules(io.BytesIO(data))

    assert exc_info.value.decoded == [Module(path="a", dir="/a")]


def test_decoder_is_not_restartable() -> None:
    decoder = ModuleDecoder(io.BytesIO(b'{"Path":"a"}'))

    assert len(list(decoder)) == 1
    assert list(decoder) == []


@pytest.mark.parametrize("chunk_size", [1, 4096])
def test_null_record_decodes_as_empty_module(chunk_size: int) -> None:
    decoder = ModuleDecoder(
        io.BytesIO(b'{"Path":"a"}\nnull\n{"Path":"b"}null'), chunk_size=chunk_size
    )

    assert list(decoder) == [Module(path="a"), Module(), Module(path="b"), Module()]


def test_null_record_is_dropped_by_filter() -> None:
    modules = parse_modules(io.BytesIO(b'{"Path":"a","Dir":"/a","Version":"v1"}\nnull\n'))

    assert filter_vendor_modules(modules) == [Module(path="a", dir="/a", version="v1")]


def test_truncated_null_record_is_decode_error() -> None:
    with pytest.raises(DecodeError, match="unexpected end of stream") as exc_info:
        parse_modules(io.BytesIO(b'{"Path":"a"}\nnu'))

    assert exc_info.value.offset == 13
    assert exc_info.value.decoded == [Module(path="a")]
