# rsa_sign.py
from __future__ import annotations

import base64
import logging
import secrets
from pathlib import Path
from typing import Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from pss_errors import EncodingError, VerificationError
from emsa_pss import emsa_pss_encode, emsa_pss_verify
from hashing import HashLike, hash_bytes, new_hash
from rsa_core import (
    PrecomputedValues,
    PrivateKey,
    PublicKey,
    RandomSource,
    decrypt,
    encrypt,
)

logger = logging.getLogger(__name__)

DEFAULT_HASH = "sha256"

AnyKey = Union[PublicKey, PrivateKey]


def _left_pad(data: bytes, size: int) -> bytes:
    return data.rjust(size, b"\x00")


def _int_to_bytes(value: int) -> bytes:
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def sign_pss(
    random: Optional[RandomSource],
    priv: PrivateKey,
    hash_algorithm: HashLike,
    digest: bytes,
    salt: bytes,
) -> bytes:
    """
    RSASSA-PSS-SIGN (RFC 3447, 8.1.1) over an already computed digest.

    digest must be the hash of the message under hash_algorithm. The salt
    length has to be passed to verify_pss later. random enables blinding
    of the private operation; None disables it.
    """
    em_bits = priv.n.bit_length() - 1
    em = emsa_pss_encode(digest, em_bits, salt, new_hash(hash_algorithm))
    s = decrypt(random, priv, int.from_bytes(em, "big"))
    return _left_pad(_int_to_bytes(s), priv.size)


def verify_pss(
    pub: PublicKey,
    hash_algorithm: HashLike,
    digest: bytes,
    signature: bytes,
    salt_length: int,
) -> None:
    """
    RSASSA-PSS-VERIFY (RFC 3447, 8.1.2). Returns None for a valid signature,
    raises VerificationError otherwise.
    """
    s = int.from_bytes(signature, "big")
    if s >= pub.n:
        raise VerificationError()

    m = encrypt(pub, s)
    em_bits = pub.n.bit_length() - 1
    em_len = (em_bits + 7) // 8
    m_bytes = _int_to_bytes(m)
    if len(m_bytes) > em_len:
        raise VerificationError()

    emsa_pss_verify(digest, _left_pad(m_bytes, em_len), em_bits, salt_length, new_hash(hash_algorithm))


def max_salt_length(key: AnyKey, hash_algorithm: HashLike = DEFAULT_HASH) -> int:
    em_len = (key.n.bit_length() - 1 + 7) // 8
    return em_len - new_hash(hash_algorithm).digest_size - 2


def sign_message(
    message: bytes,
    priv: PrivateKey,
    hash_algorithm: HashLike = DEFAULT_HASH,
    salt_length: Optional[int] = None,
    random: Optional[RandomSource] = secrets.randbelow,
) -> bytes:
    """
    Hash message and sign it with a fresh random salt.

    salt_length=None uses a salt as long as the digest.
    """
    digest = hash_bytes(message, hash_algorithm)
    if salt_length is None:
        salt_length = len(digest)
    if salt_length < 0:
        raise EncodingError("salt length must be non-negative")
    salt = secrets.token_bytes(salt_length)
    signature = sign_pss(random, priv, hash_algorithm, digest, salt)
    logger.debug("signed %d-byte message, %d-byte signature", len(message), len(signature))
    return signature


def verify_message(
    message: bytes,
    signature: bytes,
    pub: PublicKey,
    hash_algorithm: HashLike = DEFAULT_HASH,
    salt_length: Optional[int] = None,
) -> bool:
    digest = hash_bytes(message, hash_algorithm)
    if salt_length is None:
        salt_length = len(digest)
    try:
        verify_pss(pub, hash_algorithm, digest, signature, salt_length)
        return True
    except VerificationError:
        logger.debug("signature rejected")
        return False


# Key material comes from the cryptography package

def public_key_from_cryptography(key: rsa.RSAPublicKey) -> PublicKey:
    numbers = key.public_numbers()
    return PublicKey(n=numbers.n, e=numbers.e)


def private_key_from_cryptography(key: rsa.RSAPrivateKey) -> PrivateKey:
    numbers = key.private_numbers()
    pub = numbers.public_numbers
    return PrivateKey(
        n=pub.n,
        e=pub.e,
        d=numbers.d,
        primes=(numbers.p, numbers.q),
        precomputed=PrecomputedValues(dp=numbers.dmp1, dq=numbers.dmq1, qinv=numbers.iqmp),
    )


def generate_rsa_keypair(
    private_pem_path: str,
    public_pem_path: str,
    key_size: int = 2048,
) -> None:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    public_key = private_key.public_key()

    priv_bytes = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    pub_bytes = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    Path(private_pem_path).write_bytes(priv_bytes)
    Path(public_pem_path).write_bytes(pub_bytes)
    logger.debug("generated %d-bit key pair: %s, %s", key_size, private_pem_path, public_pem_path)


def load_private_key(private_pem_path: str) -> PrivateKey:
    data = Path(private_pem_path).read_bytes()
    key = serialization.load_pem_private_key(data, password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise TypeError(f"{private_pem_path}: not an RSA private key")
    return private_key_from_cryptography(key)


def load_public_key(public_pem_path: str) -> PublicKey:
    data = Path(public_pem_path).read_bytes()
    key = serialization.load_pem_public_key(data)
    if not isinstance(key, rsa.RSAPublicKey):
        raise TypeError(f"{public_pem_path}: not an RSA public key")
    return public_key_from_cryptography(key)


def signature_to_b64(signature: bytes) -> str:
    return base64.b64encode(signature).decode("ascii")


def signature_from_b64(signature_b64: str) -> bytes:
    return base64.b64decode(signature_b64.encode("ascii"))
