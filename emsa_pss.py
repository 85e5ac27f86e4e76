# emsa_pss.py
from __future__ import annotations

import hmac

from pss_errors import EncodingError, VerificationError
from hashing import HashAdapter, hash_session
from mgf1 import mgf1_xor

_PREFIX = b"\x00" * 8
_TRAILER = 0xBC


def _em_len(em_bits: int) -> int:
    return (em_bits + 7) // 8


def _top_bits_mask(em_len: int, em_bits: int) -> int:
    # Маска для старшого байта: обнуляє 8*emLen - emBits лівих бітів
    return 0xFF >> (8 * em_len - em_bits)


def _salted_hash(h: HashAdapter, m_hash: bytes, salt: bytes) -> bytes:
    # H = Hash(0x00*8 || mHash || salt)
    with hash_session(h):
        h.update(_PREFIX)
        h.update(m_hash)
        h.update(salt)
        return h.digest()


def emsa_pss_encode(m_hash: bytes, em_bits: int, salt: bytes, h: HashAdapter) -> bytes:
    """
    EMSA-PSS-ENCODE (RFC 3447, 9.1.1) of an already hashed message.

    Returns EM = maskedDB || H || 0xbc, ceil(em_bits / 8) bytes long.
    """
    h_len = h.digest_size
    s_len = len(salt)
    em_len = _em_len(em_bits)

    if len(m_hash) != h_len:
        raise EncodingError("input must be hashed message")
    if em_len < h_len + s_len + 2:
        raise EncodingError("encoding error: modulus too small for salt/hash combination")

    digest = _salted_hash(h, m_hash, salt)

    # DB = PS || 0x01 || salt, PS складається з нульових байтів
    db = bytearray(em_len - s_len - h_len - 2)
    db.append(0x01)
    db.extend(salt)

    # maskedDB = DB xor MGF1(H, emLen - hLen - 1)
    mgf1_xor(db, h, digest)
    db[0] &= _top_bits_mask(em_len, em_bits)

    return bytes(db) + digest + bytes([_TRAILER])


def emsa_pss_verify(m_hash: bytes, em: bytes, em_bits: int, s_len: int, h: HashAdapter) -> None:
    """
    EMSA-PSS-VERIFY (RFC 3447, 9.1.2). Returns None when EM is consistent
    with m_hash, raises VerificationError otherwise.
    """
    h_len = h.digest_size
    em_len = _em_len(em_bits)

    if len(m_hash) != h_len:
        raise VerificationError()
    if s_len < 0 or em_len < h_len + s_len + 2:
        raise VerificationError()
    if len(em) != em_len:
        raise VerificationError()
    if em[-1] != _TRAILER:
        raise VerificationError()

    mask = _top_bits_mask(em_len, em_bits)
    db = bytearray(em[: em_len - h_len - 1])
    digest = bytes(em[em_len - h_len - 1 : em_len - 1])

    if db[0] & ~mask & 0xFF:
        raise VerificationError()

    mgf1_xor(db, h, digest)
    db[0] &= mask

    ps_len = em_len - h_len - s_len - 2
    if any(db[:ps_len]) or db[ps_len] != 0x01:
        raise VerificationError()

    salt = bytes(db[len(db) - s_len :])
    expected = _salted_hash(h, m_hash, salt)
    if not hmac.compare_digest(expected, digest):
        raise VerificationError()
