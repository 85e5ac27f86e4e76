import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from fixed_keys import M89, M521, M607, make_private_key
from rsa_core import PrivateKey, precompute


@pytest.fixture(scope="session")
def plain_key() -> PrivateKey:
    """2-prime key (1128-bit modulus) without CRT values."""
    return make_private_key(M521, M607)


@pytest.fixture(scope="session")
def crt_key(plain_key) -> PrivateKey:
    return precompute(plain_key)


@pytest.fixture(scope="session")
def multi_prime_key() -> PrivateKey:
    """3-prime key, 1217-bit modulus: emLen is one byte shorter than the signature."""
    return precompute(make_private_key(M521, M607, M89))


@pytest.fixture(scope="session")
def openssl_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)
