"""
digest.py — Immutable checksum value returned by jsonsum.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Digest:
    """Fixed-length output of a hash primitive.

    Two digests are equal iff their byte sequences are equal. The value is
    never mutated; XOR folding works on a separate ``bytearray``.
    """
    raw: bytes

    def __post_init__(self) -> None:
        # Accept bytearray/memoryview from primitives but store immutable bytes.
        object.__setattr__(self, "raw", bytes(self.raw))

    def __bytes__(self) -> bytes:
        return self.raw

    def __len__(self) -> int:
        return len(self.raw)

    def __repr__(self) -> str:
        return f"Digest({self.hex()})"

    def hex(self) -> str:
        """Return the lowercase hex encoding of the raw bytes."""
        return self.raw.hex()

    def as_uint32(self) -> int:
        """Interpret a 4-byte digest as a big-endian unsigned 32-bit integer.

        Raises:
            TypeError: If the digest is not exactly 4 bytes long.
        """
        if len(self.raw) != 4:
            raise TypeError(
                f"as_uint32() needs a 4-byte digest, this one has {len(self.raw)} bytes"
            )
        return int.from_bytes(self.raw, "big", signed=False)

    @classmethod
    def from_hex(cls, text: str) -> "Digest":
        """Parse a hex string (either case) into a Digest.

        Raises:
            ValueError: If ``text`` is not valid hex.
        """
        return cls(bytes.fromhex(text.strip()))
