"""Decoding of module listings.

``go list -m -json`` writes one JSON object per module, back to back and
without any separator other than whitespace. The decoder splits the byte
stream into records and turns each into a :class:`modules.models.Module`.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from errors import VgopathError
from modules.models import Module
from modules.reader import (
    CLOSE_TIMEOUT,
    READ_CHUNK_SIZE,
    ProducerExitError,
    ShutdownTimeoutError,
    open_go_list,
)

if TYPE_CHECKING:
    import os
    from collections.abc import Iterator, Sequence

    from modules.reader import ModuleSource

logger = logging.getLogger(__name__)

_WHITESPACE = frozenset(b" \t\r\n")
_OPEN = frozenset(b"{[")
_CLOSE = frozenset(b"}]")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_OBJECT_START = ord("{")
_NULL = b"null"
_NULL_START = _NULL[0]


class DecodeError(VgopathError):
    """Raised when the module stream contains a malformed record.

    ``decoded`` holds the records successfully decoded before the failure.
    """

    def __init__(
        self, message: str, offset: int, decoded: Sequence[Module] = ()
    ) -> None:
        self.offset = offset
        self.decoded = list(decoded)
        super().__init__(f"{message} (at byte {offset})")


class _RecordFramer:
    """Find the boundaries of back-to-back JSON objects in a byte stream."""

    def __init__(self) -> None:
        self._buf = bytearray()
        self._offset = 0  # stream offset of _buf[0]
        self._pos = 0  # next byte of _buf to scan
        self._start: int | None = None  # start of the record being scanned
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self.error: DecodeError | None = None

    @property
    def record_offset(self) -> int:
        """Stream offset of the record currently being framed."""
        if self._start is None:
            return self._offset + self._pos
        return self._offset + self._start

    def feed(self, chunk: bytes) -> list[tuple[int, bytes]]:
        """Consume ``chunk``; return ``(offset, record)`` for each completed record.

        Scanning stops at the first byte that cannot start a record; the
        failure is kept in ``error`` and the records framed before it are
        still returned.
        """
        if self.error is not None:
            return []
        self._buf += chunk
        records: list[tuple[int, bytes]] = []
        buf = self._buf
        i = self._pos
        while i < len(buf):
            c = buf[i]
            if self._start is None:
                if c in _WHITESPACE:
                    i += 1
                    continue
                if c == _NULL_START:
                    # A bare null decodes as an empty module record.
                    literal = bytes(buf[i : i + len(_NULL)])
                    if literal == _NULL:
                        records.append((self._offset + i, literal))
                        i += len(_NULL)
                        continue
                    if _NULL.startswith(literal):
                        break
                if c != _OBJECT_START:
                    msg = f"expected '{{' at start of module record, got {chr(c)!r}"
                    self.error = DecodeError(msg, self._offset + i)
                    break
                self._start = i
                self._depth = 1
            elif self._in_string:
                if self._escaped:
                    self._escaped = False
                elif c == _BACKSLASH:
                    self._escaped = True
                elif c == _QUOTE:
                    self._in_string = False
            elif c == _QUOTE:
                self._in_string = True
            elif c in _OPEN:
                self._depth += 1
            elif c in _CLOSE:
                self._depth -= 1
                if self._depth == 0:
                    record = bytes(buf[self._start : i + 1])
                    records.append((self._offset + self._start, record))
                    self._start = None
            i += 1

        consumed = i if self._start is None else self._start
        del buf[:consumed]
        self._offset += consumed
        self._pos = i - consumed
        if self._start is not None:
            self._start = 0
        return records

    def finish(self) -> None:
        """Check that the stream did not end inside a record."""
        if self.error is not None:
            return
        if self._start is not None or self._buf[self._pos :].strip():
            msg = "unexpected end of stream inside module record"
            self.error = DecodeError(msg, self.record_offset)


def _decode_record(offset: int, record: bytes) -> Module:
    try:
        value = orjson.loads(record)
        if value is None:
            return Module()
        return Module.model_validate(value)
    except orjson.JSONDecodeError as exc:
        msg = f"invalid module record: {exc}"
        raise DecodeError(msg, offset) from exc
    except ValidationError as exc:
        msg = f"invalid module record: {exc.error_count()} validation error(s)"
        raise DecodeError(msg, offset) from exc


class ModuleDecoder:
    """Lazily decode modules from a :class:`ModuleSource`.

    Each record read advances the underlying source; the decoder cannot be
    restarted. Iteration stops at a clean end of stream.
    """

    def __init__(
        self, source: ModuleSource, *, chunk_size: int = READ_CHUNK_SIZE
    ) -> None:
        self._source = source
        self._chunk_size = chunk_size
        self._framer = _RecordFramer()
        self._pending: deque[tuple[int, bytes]] = deque()
        self._eof = False
        self._decoded: list[Module] = []

    def __iter__(self) -> Iterator[Module]:
        return self

    def __next__(self) -> Module:
        while not self._pending:
            if self._framer.error is not None:
                self._framer.error.decoded = list(self._decoded)
                raise self._framer.error
            if self._eof:
                raise StopIteration
            self._fill()
        offset, record = self._pending.popleft()
        try:
            module = _decode_record(offset, record)
        except DecodeError as exc:
            exc.decoded = list(self._decoded)
            raise
        self._decoded.append(module)
        return module

    def read(self, n: int) -> list[Module]:
        """Return up to ``n`` modules; an empty list signals end of stream."""
        modules: list[Module] = []
        for module in self:
            modules.append(module)
            if len(modules) >= n:
                break
        return modules

    def _fill(self) -> None:
        chunk = self._source.read(self._chunk_size)
        if not chunk:
            self._eof = True
            self._framer.finish()
            return
        self._pending.extend(self._framer.feed(chunk))


def parse_modules(source: ModuleSource) -> list[Module]:
    """Decode every module of ``source`` until end of stream."""
    return list(ModuleDecoder(source))


def read_modules(
    *,
    dir: str | os.PathLike[str] | None = None,
    command: Sequence[str] | None = None,
    close_timeout: float = CLOSE_TIMEOUT,
) -> list[Module]:
    """Run the module-listing command and return the modules it reports.

    The command is always closed. A failed exit status or a command that does
    not exit in time after its output was read is only logged; the modules
    already decoded are still returned.
    """
    reader = open_go_list(dir=dir, command=command, close_timeout=close_timeout)
    try:
        modules = parse_modules(reader)
    finally:
        try:
            reader.close()
        except (ProducerExitError, ShutdownTimeoutError) as exc:
            logger.warning("%s", exc)

    logger.debug("read %d modules", len(modules))
    return modules


__all__ = [
    "DecodeError",
    "ModuleDecoder",
    "parse_modules",
    "read_modules",
]
