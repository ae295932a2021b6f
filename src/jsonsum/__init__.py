"""jsonsum Python API.

Structural checksums of JSON documents that ignore key order and number
spelling but reject duplicate keys.

Example:
    from jsonsum import jsonsum, Crc32Hasher

    assert jsonsum('{"hi":1,"ho":2}') == jsonsum('{"ho":2,"hi":1.0}')
    print(jsonsum("[1, 2, 3]").hex())
    print(jsonsum("[1, 2, 3]", Crc32Hasher).as_uint32())
"""

from .digest import Digest
from .engine import DigestEngine, canonical_number, jsonsum
from .errors import (
    JsonsumError,
    ParseError,
    DuplicateKeyError,
    InvalidPrimitiveStateError,
    UnexpectedTokenError,
)
from .hashers import (
    Hasher,
    HasherFactory,
    CryptographyHasher,
    Sha256Hasher,
    Sha512Hasher,
    Sha3_256Hasher,
    Blake2bHasher,
    Crc32Hasher,
    HASHERS,
    get_hasher_factory,
)
from .tokens import iter_tokens

__version__ = "1.0.0"
__all__ = [
    "jsonsum",
    "DigestEngine",
    "canonical_number",
    "iter_tokens",
    "Digest",
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
    "JsonsumError",
    "ParseError",
    "DuplicateKeyError",
    "InvalidPrimitiveStateError",
    "UnexpectedTokenError",
]
