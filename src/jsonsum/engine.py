"""
engine.py — Streaming structural checksum of JSON documents

jsonsum checksums a JSON value's content and structure in a single pass over
its parse events. It ignores the order of keys by XOR-folding the digests of
an object's key/value pairs, and it ignores the spelling of numbers by
hashing a canonical decimal encoding. Because equal pair digests would cancel
under XOR, a key may appear at most once per object.

Encoding (one tag byte per value kind, fed into the current running hash):

    null      n
    true      t
    false     f
    number    i  + canonical_number(value)
    string    s  + digest(utf-8 bytes)
    object    o  + XOR of digest(key, value) over all pairs
    array     [  + elements in order + ]

Nesting is tracked on an explicit frame stack, so document depth never turns
into Python recursion depth.
"""

from __future__ import annotations
import logging
from contextlib import closing
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Set, Union

from .digest import Digest
from .errors import (
    DuplicateKeyError,
    InvalidPrimitiveStateError,
    ParseError,
    UnexpectedTokenError,
)
from .hashers import Hasher, HasherFactory, Sha256Hasher
from .tokens import JsonSource, Token, iter_tokens

__all__ = [
    "TYPE_NULL",
    "TYPE_TRUE",
    "TYPE_FALSE",
    "TYPE_NUMBER",
    "TYPE_STRING",
    "TYPE_OBJECT",
    "TYPE_ARRAY_START",
    "TYPE_ARRAY_END",
    "canonical_number",
    "DigestEngine",
    "jsonsum",
]

logger = logging.getLogger(__name__)

TYPE_NULL = b"n"
TYPE_TRUE = b"t"
TYPE_FALSE = b"f"
TYPE_NUMBER = b"i"
TYPE_STRING = b"s"
TYPE_OBJECT = b"o"
TYPE_ARRAY_START = b"["
TYPE_ARRAY_END = b"]"

_NUMBER_EVENTS = frozenset({"number", "integer", "double"})
_CANONICAL_ZERO = b"0e0"


def canonical_number(value: Union[int, Decimal]) -> bytes:
    """Encode a JSON number as ``<unscaled>e<exponent>`` ASCII bytes.

    Trailing zeros of the coefficient move into the exponent, so ``2``,
    ``2.0``, ``2e0`` and ``20e-1`` all encode as ``2e0`` and ``20`` encodes as
    ``2e1``. Every zero encodes as ``0e0``. No decimal context is involved, so
    arbitrarily long coefficients are kept exactly.

    Raises:
        ParseError: If the value is NaN or infinite.
    """
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise TypeError(f"expected int or Decimal, got {type(value).__name__}")
    dec = value if isinstance(value, Decimal) else Decimal(value)
    if not dec.is_finite():
        raise ParseError(f"non-finite number {value!r}")
    if dec.is_zero():
        return _CANONICAL_ZERO

    sign, digits, exponent = dec.as_tuple()
    end = len(digits)
    while digits[end - 1] == 0:
        end -= 1
    exponent += len(digits) - end
    unscaled = "".join(str(d) for d in digits[:end])
    if sign:
        unscaled = "-" + unscaled
    return f"{unscaled}e{exponent}".encode("ascii")


@dataclass
class _Frame:
    """Folding state of one open object."""
    enclosing: Hasher
    pair: Hasher
    fold: bytearray
    seen_keys: Set[str] = field(default_factory=set)
    pair_pending: bool = False
    expect_value: bool = False


class DigestEngine:
    """Consumes JSON parse events one at a time and produces one Digest.

    An engine serves exactly one document. Every logical accumulator (the
    top-level sum, each open object's pair hasher, the string scratch) is a
    separate instance from ``hasher_factory``.

    Example:
        engine = DigestEngine(Sha256Hasher)
        digest = engine.consume(iter_tokens('{"a": [1, 2.0]}'))
    """

    def __init__(self, hasher_factory: HasherFactory = Sha256Hasher):
        self._factory = hasher_factory
        self._sum: Hasher = hasher_factory()
        self._scratch: Hasher = hasher_factory()
        self._digest_size = self._sum.digest_size
        if self._scratch.digest_size != self._digest_size:
            raise InvalidPrimitiveStateError(
                f"factory produced digest sizes {self._digest_size} and {self._scratch.digest_size}"
            )
        self._frames: List[_Frame] = []
        self._nesting: List[str] = []
        self._root_values = 0
        self._events = 0
        self._finished = False

    @property
    def events_consumed(self) -> int:
        return self._events

    def consume(self, tokens: Iterable[Token]) -> Digest:
        """Feed every token and return the final digest."""
        for event, value in tokens:
            self.feed(event, value)
        return self.finish()

    def feed(self, event: str, value: Any = None) -> None:
        """Apply one parse event to the running state.

        Raises:
            DuplicateKeyError: On a repeated key within one object.
            UnexpectedTokenError: On an event the grammar does not allow here.
            InvalidPrimitiveStateError: If a hash primitive misbehaves.
        """
        if self._finished:
            raise UnexpectedTokenError(event, value)
        self._events += 1

        if event == "map_key":
            self._field_name(value)
        elif event == "end_map":
            self._end_object()
        elif event == "end_array":
            self._end_array()
        elif event == "null":
            self._begin_value(event, value)
            self._sum.update(TYPE_NULL)
        elif event == "boolean":
            self._begin_value(event, value)
            self._sum.update(TYPE_TRUE if value else TYPE_FALSE)
        elif event in _NUMBER_EVENTS:
            self._begin_value(event, value)
            self._sum.update(TYPE_NUMBER)
            self._sum.update(canonical_number(value))
        elif event == "string":
            self._begin_value(event, value)
            self._hash_string(value)
        elif event == "start_map":
            self._begin_value(event, value)
            self._start_object()
        elif event == "start_array":
            self._begin_value(event, value)
            self._nesting.append("array")
            self._sum.update(TYPE_ARRAY_START)
        else:
            raise UnexpectedTokenError(event, value)

    def finish(self) -> Digest:
        """Finalize the top-level sum once the document is complete.

        Raises:
            UnexpectedTokenError: If containers are still open or no value
                was seen.
        """
        if self._finished:
            raise UnexpectedTokenError("end_of_stream")
        if self._nesting or self._root_values != 1:
            raise UnexpectedTokenError(
                "end_of_stream",
                f"{len(self._nesting)} open containers, {self._root_values} top-level values",
            )
        self._finished = True
        return self._sum.finalize()

    # -- value bookkeeping -------------------------------------------------

    def _begin_value(self, event: str, value: Any) -> None:
        if not self._nesting:
            if self._root_values:
                raise UnexpectedTokenError(event, value)
            self._root_values += 1
        elif self._nesting[-1] == "object":
            frame = self._frames[-1]
            if not frame.expect_value:
                raise UnexpectedTokenError(event, value)
            frame.expect_value = False

    def _hash_string(self, text: str) -> None:
        self._scratch.reset()
        self._scratch.update(text.encode("utf-8", "surrogatepass"))
        self._sum.update(TYPE_STRING)
        self._sum.update(self._scratch.finalize().raw)

    # -- objects -----------------------------------------------------------

    def _start_object(self) -> None:
        self._sum.update(TYPE_OBJECT)
        pair = self._factory()
        if pair.digest_size != self._digest_size:
            raise InvalidPrimitiveStateError(
                f"factory produced digest sizes {self._digest_size} and {pair.digest_size}"
            )
        self._frames.append(_Frame(enclosing=self._sum, pair=pair, fold=bytearray(self._digest_size)))
        self._nesting.append("object")
        self._sum = pair

    def _field_name(self, key: Any) -> None:
        if not self._nesting or self._nesting[-1] != "object":
            raise UnexpectedTokenError("map_key", key)
        frame = self._frames[-1]
        if frame.expect_value:
            raise UnexpectedTokenError("map_key", key)
        if frame.pair_pending:
            self._fold_pair(frame)
        if key in frame.seen_keys:
            raise DuplicateKeyError(key)
        frame.seen_keys.add(key)
        self._hash_string(key)
        frame.pair_pending = True
        frame.expect_value = True

    def _fold_pair(self, frame: _Frame) -> None:
        raw = frame.pair.finalize().raw
        if len(raw) != len(frame.fold):
            raise InvalidPrimitiveStateError(
                f"pair digest has {len(raw)} bytes, fold buffer has {len(frame.fold)}"
            )
        for i, b in enumerate(raw):
            frame.fold[i] ^= b
        frame.pair.reset()
        frame.pair_pending = False

    def _end_object(self) -> None:
        if not self._nesting or self._nesting[-1] != "object":
            raise UnexpectedTokenError("end_map")
        frame = self._frames[-1]
        if frame.expect_value:
            raise UnexpectedTokenError("end_map")
        if frame.pair_pending:
            self._fold_pair(frame)
        self._frames.pop()
        self._nesting.pop()
        self._sum = frame.enclosing
        self._sum.update(bytes(frame.fold))

    # -- arrays ------------------------------------------------------------

    def _end_array(self) -> None:
        if not self._nesting or self._nesting[-1] != "array":
            raise UnexpectedTokenError("end_array")
        self._nesting.pop()
        self._sum.update(TYPE_ARRAY_END)


def jsonsum(source: JsonSource, hasher_factory: Optional[HasherFactory] = None) -> Digest:
    """Checksum a JSON document's content and structure.

    Key order and number spelling do not affect the result; nesting, array
    order, and every value do.

    Args:
        source: JSON text, UTF-8 bytes, or a binary file object.
        hasher_factory: Zero-argument callable returning fresh hash
            primitives. Defaults to SHA-256.

    Returns:
        Digest: The checksum, ``digest_size`` bytes long.

    Raises:
        ParseError: If the input is not well-formed JSON.
        DuplicateKeyError: If an object repeats a key.
        InvalidPrimitiveStateError: If a hash primitive is misused.
        UnexpectedTokenError: If the token source breaks the grammar.

    Example:
        assert jsonsum('{"hi":1,"ho":2}') == jsonsum('{"ho":2.0,"hi":1}')
    """
    engine = DigestEngine(hasher_factory or Sha256Hasher)
    with closing(iter_tokens(source)) as tokens:
        digest = engine.consume(tokens)
    logger.debug(
        "Digested %d events into %d-byte digest %s",
        engine.events_consumed, len(digest), digest.hex(),
    )
    return digest
