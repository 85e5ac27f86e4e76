# rsa_core.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from math import gcd
from typing import Callable, Optional, Tuple

from pss_errors import BlindingError, DecryptionError

logger = logging.getLogger(__name__)

# random(n) must return a uniformly distributed int in [0, n), e.g. secrets.randbelow
RandomSource = Callable[[int], int]

MAX_BLINDING_ATTEMPTS = 256


@dataclass(frozen=True)
class PublicKey:
    n: int
    e: int

    @property
    def size(self) -> int:
        """Modulus length in bytes."""
        return (self.n.bit_length() + 7) // 8


@dataclass(frozen=True)
class CRTValue:
    exp: int  # d mod (prime - 1)
    coeff: int  # r^-1 mod prime
    r: int  # product of the primes before this one


@dataclass(frozen=True)
class PrecomputedValues:
    dp: int
    dq: int
    qinv: int
    crt_values: Tuple[CRTValue, ...] = ()


@dataclass(frozen=True)
class PrivateKey:
    n: int
    e: int
    d: int
    primes: Tuple[int, ...]
    precomputed: Optional[PrecomputedValues] = None

    @property
    def public_key(self) -> PublicKey:
        return PublicKey(n=self.n, e=self.e)

    @property
    def size(self) -> int:
        return (self.n.bit_length() + 7) // 8

    def __repr__(self) -> str:
        # d and the primes stay out of tracebacks and logs
        return f"PrivateKey(bits={self.n.bit_length()}, primes={len(self.primes)}, crt={self.precomputed is not None})"


def mod_inverse(a: int, n: int) -> Optional[int]:
    """
    Inverse of a modulo n, or None when gcd(a, n) != 1.

    n is an RSA modulus, not a prime, so a non-invertible a is possible
    (it shares a factor with n).
    """
    if gcd(a, n) != 1:
        return None
    return pow(a, -1, n)


def precompute(priv: PrivateKey) -> PrivateKey:
    """Return priv with CRT values derived from d and its primes."""
    if priv.precomputed is not None:
        return priv
    if len(priv.primes) < 2:
        raise ValueError("CRT precomputation needs at least two primes")

    p, q = priv.primes[0], priv.primes[1]
    dp = priv.d % (p - 1)
    dq = priv.d % (q - 1)
    qinv = pow(q, -1, p)

    crt_values = []
    r = p * q
    for prime in priv.primes[2:]:
        crt_values.append(CRTValue(exp=priv.d % (prime - 1), coeff=pow(r, -1, prime), r=r))
        r *= prime

    return replace(priv, precomputed=PrecomputedValues(dp=dp, dq=dq, qinv=qinv, crt_values=tuple(crt_values)))


def encrypt(pub: PublicKey, m: int) -> int:
    return pow(m, pub.e, pub.n)


def _blinding_factor(random: RandomSource, n: int) -> Tuple[int, int]:
    for attempt in range(1, MAX_BLINDING_ATTEMPTS + 1):
        r = random(n)
        if r == 0:
            r = 1
        ir = mod_inverse(r, n)
        if ir is not None:
            return r, ir
        logger.debug("blinding factor not invertible, retrying (attempt %d)", attempt)
    raise BlindingError(f"no invertible blinding factor after {MAX_BLINDING_ATTEMPTS} attempts")


def _crt_exp(priv: PrivateKey, c: int) -> int:
    pre = priv.precomputed
    p, q = priv.primes[0], priv.primes[1]

    m1 = pow(c, pre.dp, p)
    m2 = pow(c, pre.dq, q)
    h = ((m1 - m2) * pre.qinv) % p
    m = m2 + h * q

    for prime, values in zip(priv.primes[2:], pre.crt_values):
        mi = pow(c, values.exp, prime)
        t = ((mi - m) * values.coeff) % prime
        m += t * values.r

    return m


def decrypt(random: Optional[RandomSource], priv: PrivateKey, c: int) -> int:
    """
    RSA private operation m = c^d mod n.

    With a random source the ciphertext is blinded by r^e before the
    exponentiation and the result is multiplied by r^-1 afterwards.
    Passing random=None turns blinding off.
    """
    if c < 0 or c >= priv.n:
        raise DecryptionError("ciphertext out of range")

    ir = None
    if random is not None:
        r, ir = _blinding_factor(random, priv.n)
        c = (c * pow(r, priv.e, priv.n)) % priv.n

    if priv.precomputed is None:
        m = pow(c, priv.d, priv.n)
    else:
        m = _crt_exp(priv, c)

    if ir is not None:
        m = (m * ir) % priv.n

    return m
