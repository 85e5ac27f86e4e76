import hashlib
import random as pyrandom

import pytest

from emsa_pss import emsa_pss_encode, emsa_pss_verify
from hashing import new_hash
from pss_vectors import first, load_pss_vectors, private_key, read_sections
from rsa_core import PrivateKey
from rsa_sign import sign_pss, verify_pss

VECTORS = load_pss_vectors()


def test_all_examples_were_read():
    # 10 key pairs x 6 signatures
    assert len(VECTORS) >= 10
    assert all(len(v["salt"]) == 20 for v in VECTORS)


@pytest.mark.parametrize("vector", VECTORS, ids=lambda v: v["name"])
def test_sign_matches_published_signature(vector):
    key = private_key(vector)
    digest = hashlib.sha1(vector["message"]).digest()

    assert sign_pss(None, key, "sha1", digest, vector["salt"]) == vector["signature"]
    assert sign_pss(pyrandom.Random(5).randrange, key, "sha1", digest, vector["salt"]) == vector["signature"]
    assert sign_pss(None, private_key(vector, crt=False), "sha1", digest, vector["salt"]) == vector["signature"]


@pytest.mark.parametrize("vector", VECTORS, ids=lambda v: v["name"])
def test_verify_accepts_published_signature(vector):
    pub = private_key(vector).public_key
    digest = hashlib.sha1(vector["message"]).digest()
    assert verify_pss(pub, "sha1", digest, vector["signature"], len(vector["salt"])) is None


# step-by-step intermediate values

def test_intermediate_encoded_message():
    sections = read_sections("pss-int.txt")
    n = int.from_bytes(first(sections, lambda label, v: "modulus" in label), "big")
    em_bits = n.bit_length() - 1
    em_len = (em_bits + 7) // 8

    m_hash = first(sections, lambda label, v: "mhash" in label and len(v) == 20)
    salt = first(sections, lambda label, v: label.startswith("salt"))
    em = first(
        sections,
        lambda label, v: ("encoded message" in label or label.startswith("em")) and len(v) == em_len,
    )

    assert emsa_pss_encode(m_hash, em_bits, salt, new_hash("sha1")) == em
    emsa_pss_verify(m_hash, em, em_bits, len(salt), new_hash("sha1"))


def test_intermediate_signature():
    sections = read_sections("pss-int.txt")
    n = int.from_bytes(first(sections, lambda label, v: "modulus" in label), "big")
    e = int.from_bytes(first(sections, lambda label, v: "public exponent" in label), "big")
    d = int.from_bytes(first(sections, lambda label, v: "private exponent" in label), "big")
    p = int.from_bytes(first(sections, lambda label, v: label.startswith("prime p")), "big")
    q = int.from_bytes(first(sections, lambda label, v: label.startswith("prime q")), "big")
    key = PrivateKey(n=n, e=e, d=d, primes=(p, q))

    message = first(sections, lambda label, v: label.startswith("message"))
    salt = first(sections, lambda label, v: label.startswith("salt"))
    signature = first(sections, lambda label, v: label.startswith("signature"))
    digest = hashlib.sha1(message).digest()

    assert sign_pss(None, key, "sha1", digest, salt) == signature
    verify_pss(key.public_key, "sha1", digest, signature, len(salt))
