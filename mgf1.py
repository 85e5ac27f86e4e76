# mgf1.py
from __future__ import annotations

from hashing import HashAdapter, hash_session


def _inc_counter(counter: bytearray) -> None:
    # 4-байтовий big-endian лічильник, перенос по байтах
    for i in range(3, -1, -1):
        counter[i] = (counter[i] + 1) & 0xFF
        if counter[i] != 0:
            return


def mgf1_xor(out: bytearray, h: HashAdapter, seed: bytes) -> None:
    """
    XOR into out the MGF1 mask (PKCS#1 v2.1, B.2.1) of len(out) bytes
    derived from seed.

    h is reset after every round, so the caller may keep using it.
    """
    counter = bytearray(4)
    done = 0
    while done < len(out):
        with hash_session(h):
            h.update(seed)
            h.update(counter)
            digest = h.digest()

        for b in digest:
            if done >= len(out):
                break
            out[done] ^= b
            done += 1
        _inc_counter(counter)


def mgf1(seed: bytes, length: int, h: HashAdapter) -> bytes:
    if length < 0:
        raise ValueError("length must be non-negative")
    mask = bytearray(length)
    mgf1_xor(mask, h, seed)
    return bytes(mask)
