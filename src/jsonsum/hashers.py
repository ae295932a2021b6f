"""
hashers.py — Pluggable hash primitives for jsonsum

The digest engine never depends on a concrete hash. It asks a zero-argument
factory for fresh ``Hasher`` instances, one per logical accumulator, so any
primitive satisfying the protocol below can be plugged in.

Usage:
    from jsonsum import jsonsum
    from jsonsum.hashers import Crc32Hasher, get_hasher_factory

    jsonsum('{"a": 1}', Crc32Hasher).as_uint32()
    jsonsum('{"a": 1}', get_hasher_factory("blake2b")).hex()
"""

from __future__ import annotations
import zlib
from typing import Callable, Dict, Protocol

from cryptography.exceptions import AlreadyFinalized
from cryptography.hazmat.primitives import hashes

from .digest import Digest
from .errors import InvalidPrimitiveStateError

__all__ = [
    "Hasher",
    "HasherFactory",
    "CryptographyHasher",
    "Sha256Hasher",
    "Sha512Hasher",
    "Sha3_256Hasher",
    "Blake2bHasher",
    "Crc32Hasher",
    "HASHERS",
    "get_hasher_factory",
]


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------

class Hasher(Protocol):
    """Hash primitive consumed by the digest engine.

    Attributes:
        digest_size: Length in bytes of every Digest this instance produces.
    """
    digest_size: int

    def reset(self) -> None:
        """Discard all input and make the instance reusable."""
        ...

    def update(self, data: bytes) -> None:
        """Feed bytes. May be called any number of times before finalize.

        Raises:
            InvalidPrimitiveStateError: If called after finalize without reset.
        """
        ...

    def finalize(self) -> Digest:
        """Return the digest of everything fed since the last reset.

        Raises:
            InvalidPrimitiveStateError: If the primitive is one-shot and was
                already finalized without an intervening reset.
        """
        ...


HasherFactory = Callable[[], Hasher]


# ---------------------------------------------------------------------------
# Concrete Primitives
# ---------------------------------------------------------------------------

class CryptographyHasher:
    """Message digest backed by ``cryptography``'s ``hashes.Hash``.

    ``finalize`` is a one-shot, destructive read: the context must be reset
    before it accepts more input.
    """

    def __init__(self, algorithm: hashes.HashAlgorithm):
        self._algorithm = algorithm
        self._ctx = hashes.Hash(algorithm)

    @property
    def digest_size(self) -> int:
        return self._algorithm.digest_size

    @property
    def name(self) -> str:
        return self._algorithm.name

    def reset(self) -> None:
        self._ctx = hashes.Hash(self._algorithm)

    def update(self, data: bytes) -> None:
        try:
            self._ctx.update(data)
        except AlreadyFinalized as exc:
            raise InvalidPrimitiveStateError(
                f"{self.name} context was read out and must be reset before update"
            ) from exc

    def finalize(self) -> Digest:
        try:
            return Digest(self._ctx.finalize())
        except AlreadyFinalized as exc:
            raise InvalidPrimitiveStateError(
                f"{self.name} context was read out and must be reset before finalize"
            ) from exc


class Sha256Hasher(CryptographyHasher):
    def __init__(self) -> None:
        super().__init__(hashes.SHA256())


class Sha512Hasher(CryptographyHasher):
    def __init__(self) -> None:
        super().__init__(hashes.SHA512())


class Sha3_256Hasher(CryptographyHasher):
    def __init__(self) -> None:
        super().__init__(hashes.SHA3_256())


class Blake2bHasher(CryptographyHasher):
    def __init__(self) -> None:
        super().__init__(hashes.BLAKE2b(64))


class Crc32Hasher:
    """Running CRC-32 checksum with a 4-byte big-endian digest.

    Unlike the message digests above, ``finalize`` is idempotent: it reads the
    running value without consuming it, so further updates keep extending it.
    """

    digest_size = 4
    name = "crc32"

    def __init__(self) -> None:
        self._crc = 0

    def reset(self) -> None:
        self._crc = 0

    def update(self, data: bytes) -> None:
        self._crc = zlib.crc32(data, self._crc)

    def finalize(self) -> Digest:
        return Digest((self._crc & 0xFFFFFFFF).to_bytes(4, "big"))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

HASHERS: Dict[str, HasherFactory] = {
    "sha256": Sha256Hasher,
    "sha512": Sha512Hasher,
    "sha3-256": Sha3_256Hasher,
    "blake2b": Blake2bHasher,
    "crc32": Crc32Hasher,
}


def get_hasher_factory(name: str) -> HasherFactory:
    """Resolve an algorithm name to a hasher factory.

    Args:
        name: Registry name, case-insensitive (e.g. ``"sha256"``, ``"crc32"``).

    Returns:
        HasherFactory: Zero-argument callable producing fresh instances.

    Raises:
        ValueError: If the name is not registered.
    """
    try:
        return HASHERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown hash algorithm '{name}'. Known: {sorted(HASHERS)}"
        ) from None
