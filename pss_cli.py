# pss_cli.py
from __future__ import annotations

import argparse
import logging
import secrets
import sys
from pathlib import Path
from typing import Optional

from pss_errors import EncodingError, PSSError, VerificationError
from hashing import HASH_ALGORITHMS, hash_bytes, hash_file
from rsa_sign import (
    DEFAULT_HASH,
    generate_rsa_keypair,
    load_private_key,
    load_public_key,
    sign_pss,
    verify_pss,
    signature_to_b64,
    signature_from_b64,
)

logger = logging.getLogger(__name__)


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError("salt length must be non-negative")
    return value


def _salt_len(args, digest: bytes) -> int:
    if args.salt_len is None:
        return len(digest)
    if args.salt_len < 0:
        raise EncodingError("salt length must be non-negative")
    return args.salt_len


def _sign_digest(args, digest: bytes) -> int:
    priv = load_private_key(args.priv)
    salt = secrets.token_bytes(_salt_len(args, digest))
    random = None if args.no_blinding else secrets.randbelow
    if random is None:
        logger.warning("blinding disabled for this signature")

    sig = sign_pss(random, priv, args.hash, digest, salt)
    sig_b64 = signature_to_b64(sig)

    print(f"Digest ({args.hash}): {digest.hex()}")
    if args.out:
        Path(args.out).write_text(sig_b64, encoding="utf-8")
        print(f"Signature (base64) saved to: {args.out}")
    else:
        print(f"Signature (base64): {sig_b64}")

    return 0


def _verify_digest(args, digest: bytes) -> int:
    pub = load_public_key(args.pub)

    if args.sigfile:
        sig_b64 = Path(args.sigfile).read_text(encoding="utf-8").strip()
    else:
        sig_b64 = args.sig.strip()

    sig = signature_from_b64(sig_b64)
    try:
        verify_pss(pub, args.hash, digest, sig, _salt_len(args, digest))
        ok = True
    except VerificationError:
        ok = False

    print(f"Digest ({args.hash}): {digest.hex()}")
    print("Verify:", "OK" if ok else "FAILED")
    return 0 if ok else 2


def cmd_genkeys(args) -> int:
    generate_rsa_keypair(args.priv, args.pub, key_size=args.size)
    print(f"OK: generated keys\n  private: {args.priv}\n  public : {args.pub}")
    return 0


def cmd_sign(args) -> int:
    return _sign_digest(args, hash_file(args.file, args.hash))


def cmd_verify(args) -> int:
    return _verify_digest(args, hash_file(args.file, args.hash))


def cmd_sign_text(args) -> int:
    return _sign_digest(args, hash_bytes(args.text.encode("utf-8"), args.hash))


def cmd_verify_text(args) -> int:
    return _verify_digest(args, hash_bytes(args.text.encode("utf-8"), args.hash))


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--hash", choices=sorted(HASH_ALGORITHMS), default=DEFAULT_HASH, help="Hash algorithm (default sha256)")
    p.add_argument("--salt-len", type=_non_negative_int, default=None, help="Salt length in bytes (default: digest length)")


def _add_signature_source(p: argparse.ArgumentParser) -> None:
    sig_group = p.add_mutually_exclusive_group(required=True)
    sig_group.add_argument("--sig", help="Signature in base64 (inline)")
    sig_group.add_argument("--sigfile", help="Path to signature .b64 file")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="RSASSA-PSS signatures (RFC 3447) over SHA digests.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("genkeys", help="Generate RSA keypair (PEM).")
    g.add_argument("--priv", default="private.pem", help="Private key PEM path")
    g.add_argument("--pub", default="public.pem", help="Public key PEM path")
    g.add_argument("--size", type=int, default=2048, help="RSA key size (default 2048)")
    g.set_defaults(func=cmd_genkeys)

    s = sub.add_parser("sign", help="Sign digest of a file.")
    s.add_argument("file", help="Input file path")
    _add_common(s)
    s.add_argument("--priv", default="private.pem", help="Private key PEM path")
    s.add_argument("--out", default=None, help="Save signature (base64) to file")
    s.add_argument("--no-blinding", action="store_true", help="Do not blind the private-key operation")
    s.set_defaults(func=cmd_sign)

    v = sub.add_parser("verify", help="Verify signature for digest of a file.")
    v.add_argument("file", help="Input file path")
    _add_common(v)
    v.add_argument("--pub", default="public.pem", help="Public key PEM path")
    _add_signature_source(v)
    v.set_defaults(func=cmd_verify)

    st = sub.add_parser("sign-text", help="Sign digest of a UTF-8 text string.")
    st.add_argument("text", help="Text to hash+sign (UTF-8)")
    _add_common(st)
    st.add_argument("--priv", default="private.pem", help="Private key PEM path")
    st.add_argument("--out", default=None, help="Save signature (base64) to file")
    st.add_argument("--no-blinding", action="store_true", help="Do not blind the private-key operation")
    st.set_defaults(func=cmd_sign_text)

    vt = sub.add_parser("verify-text", help="Verify signature for digest of a UTF-8 text string.")
    vt.add_argument("text", help="Text to hash+verify (UTF-8)")
    _add_common(vt)
    vt.add_argument("--pub", default="public.pem", help="Public key PEM path")
    _add_signature_source(vt)
    vt.set_defaults(func=cmd_verify_text)

    return p


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except PSSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
