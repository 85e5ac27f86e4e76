# hashing.py
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Type, Union

from cryptography.hazmat.primitives import hashes

from pss_errors import UnsupportedHashError

HASH_ALGORITHMS: Dict[str, Type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha512_224": hashes.SHA512_224,
    "sha512_256": hashes.SHA512_256,
    "sha3_224": hashes.SHA3_224,
    "sha3_256": hashes.SHA3_256,
    "sha3_384": hashes.SHA3_384,
    "sha3_512": hashes.SHA3_512,
}

_CHUNK_SIZE = 64 * 1024


class HashAdapter:
    """
    Resettable digest accumulator on top of cryptography's hashes.Hash.

    hashes.Hash can be finalized only once and has no reset, so digest()
    finalizes a copy and reset() starts a fresh context.
    """

    def __init__(self, algorithm: hashes.HashAlgorithm) -> None:
        self.algorithm = algorithm
        self._ctx = hashes.Hash(algorithm)

    @property
    def name(self) -> str:
        return self.algorithm.name

    @property
    def digest_size(self) -> int:
        return self.algorithm.digest_size

    def update(self, data: bytes) -> None:
        self._ctx.update(bytes(data))

    def digest(self) -> bytes:
        return self._ctx.copy().finalize()

    def reset(self) -> None:
        self._ctx = hashes.Hash(self.algorithm)

    def __repr__(self) -> str:
        return f"HashAdapter({self.name})"


HashLike = Union[str, hashes.HashAlgorithm, HashAdapter]


def get_hash_algorithm(name: str) -> hashes.HashAlgorithm:
    """Look up a hash by name: "sha256", "SHA-256", "sha3-256", "sha512/224"..."""
    key = name.strip().lower().replace("/", "_")
    for candidate in (key, key.replace("-", "_"), key.replace("-", "")):
        if candidate in HASH_ALGORITHMS:
            return HASH_ALGORITHMS[candidate]()
    raise UnsupportedHashError(
        f"unsupported hash algorithm {name!r}; choose one of: {', '.join(HASH_ALGORITHMS)}"
    )


def new_hash(algorithm: HashLike) -> HashAdapter:
    """
    Build a fresh HashAdapter from a name, a cryptography HashAlgorithm,
    or another adapter (the new one shares only the algorithm).
    """
    if isinstance(algorithm, HashAdapter):
        return HashAdapter(algorithm.algorithm)
    if isinstance(algorithm, str):
        return HashAdapter(get_hash_algorithm(algorithm))
    if isinstance(algorithm, hashes.HashAlgorithm):
        return HashAdapter(algorithm)
    raise TypeError("algorithm має бути str, HashAlgorithm або HashAdapter")


@contextmanager
def hash_session(h: HashAdapter) -> Iterator[HashAdapter]:
    """Lend h to a block and reset it on the way out, errors included."""
    try:
        yield h
    finally:
        h.reset()


def hash_bytes(data: bytes, algorithm: HashLike = "sha256") -> bytes:
    h = new_hash(algorithm)
    h.update(data)
    return h.digest()


def hash_file(path: Union[str, Path], algorithm: HashLike = "sha256") -> bytes:
    h = new_hash(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.digest()
