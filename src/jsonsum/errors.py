"""
errors.py — jsonsum Error Taxonomy

Every failure of a ``jsonsum`` call surfaces as exactly one of these typed
errors. None of them are recovered inside the library: a checksum has no
meaningful partial result.
"""

from typing import Any, Optional

__all__ = [
    "JsonsumError",
    "ParseError",
    "DuplicateKeyError",
    "InvalidPrimitiveStateError",
    "UnexpectedTokenError",
]


class JsonsumError(Exception):
    """Base class for all jsonsum errors."""
    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.context = context

        full_msg = f"[{code}] {message}"
        if context:
            full_msg += f" Context: {context}"

        super().__init__(full_msg)


# Input Errors (E0xx)
class ParseError(JsonsumError, ValueError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("JSONSUM_E001", "The input is not well-formed JSON.", context)


class DuplicateKeyError(JsonsumError, ValueError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(
            "JSONSUM_E002",
            "An object contains the same key more than once.",
            f"duplicate field {key!r}",
        )


# Internal Errors (E1xx)
class InvalidPrimitiveStateError(JsonsumError, RuntimeError):
    def __init__(self, context: Optional[str] = None):
        super().__init__(
            "JSONSUM_E100",
            "A hash primitive was used after it was read out and must be reset.",
            context,
        )


class UnexpectedTokenError(JsonsumError, RuntimeError):
    def __init__(self, event: str, value: Any = None):
        self.event = event
        self.value = value
        context = f"event {event!r}"
        if value is not None:
            context += f" with value {value!r}"
        super().__init__(
            "JSONSUM_E101",
            "The token stream yielded an event outside the JSON grammar.",
            context,
        )
