# pss_errors.py
from __future__ import annotations


class PSSError(Exception):
    """Base class for errors raised by the signing modules."""


class EncodingError(PSSError):
    """EMSA-PSS encoding failed: wrong digest length or modulus too small."""


class VerificationError(PSSError):
    """
    A signature did not verify.

    Always raised with the same message, whatever check failed.
    """

    def __init__(self) -> None:
        super().__init__("verification error")


class DecryptionError(PSSError):
    """Ciphertext integer is not in [0, n)."""


class BlindingError(PSSError):
    """No invertible blinding factor was found."""


class UnsupportedHashError(PSSError, ValueError):
    pass
