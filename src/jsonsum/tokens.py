"""
tokens.py — Streaming JSON token source for jsonsum

Wraps ``ijson.basic_parse`` so the engine sees a lazy, forward-only sequence
of ``(event, value)`` pairs and never a materialized document. Numbers arrive
as exact ``int`` or ``decimal.Decimal`` values, never floats.

Events:
    null, boolean, number, string, map_key,
    start_map, end_map, start_array, end_array
"""

from __future__ import annotations
import io
import logging
import sys
import threading
from contextlib import contextmanager
from typing import Any, BinaryIO, Iterator, Optional, Tuple, Union

import ijson

from .errors import ParseError

logger = logging.getLogger(__name__)

JsonSource = Union[str, bytes, bytearray, BinaryIO]
Token = Tuple[str, Any]


def _as_stream(source: JsonSource) -> BinaryIO:
    if isinstance(source, str):
        try:
            return io.BytesIO(source.encode("utf-8"))
        except UnicodeEncodeError as exc:
            raise ParseError(f"text is not encodable as UTF-8: {exc}") from exc
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    return source


# Python 3.11+ refuses int() on literals longer than the interpreter's digit
# limit. The limit is process-wide, so it stays lifted while any token stream
# is open and is put back when the last one closes.
_limit_lock = threading.Lock()
_open_streams = 0
_saved_limit: Optional[int] = None


@contextmanager
def _unbounded_int_digits() -> Iterator[None]:
    global _open_streams, _saved_limit
    if not hasattr(sys, "set_int_max_str_digits"):
        yield
        return
    with _limit_lock:
        if _open_streams == 0:
            _saved_limit = sys.get_int_max_str_digits()
            sys.set_int_max_str_digits(0)
        _open_streams += 1
    try:
        yield
    finally:
        with _limit_lock:
            _open_streams -= 1
            if _open_streams == 0 and _saved_limit is not None:
                sys.set_int_max_str_digits(_saved_limit)
                _saved_limit = None


def iter_tokens(source: JsonSource) -> Iterator[Token]:
    """Yield parse events for a JSON document.

    Integer literals of any length are accepted; the interpreter's
    integer-string conversion limit is lifted until the stream is exhausted
    or closed.

    Args:
        source: JSON text, UTF-8 bytes, or a binary file object.

    Yields:
        Token: ``(event, value)`` pairs in document order.

    Raises:
        ParseError: If the input is truncated, syntactically invalid, or not
            decodable as UTF-8. The underlying parser error is chained.
    """
    events = ijson.basic_parse(_as_stream(source), use_float=False)
    with _unbounded_int_digits():
        try:
            for event, value in events:
                yield event, value
        except (ijson.JSONError, ValueError) as exc:
            logger.debug("Token stream failed: %s", exc)
            raise ParseError(str(exc) or type(exc).__name__) from exc
