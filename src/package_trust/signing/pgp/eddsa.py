"""
Ed25519 signing and verification of OpenPGP detached signatures, using the
cryptography library for the curve arithmetic.

The signed message is the OpenPGP digest of the data plus the signature's
hashed trailer. Which digest is used is chosen by the signature itself, among
the adapters in :mod:`package_trust.digest`.
"""

import logging
import time

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from package_trust.digest import Sha256, UnsupportedHashAlgorithm, digest_for
from package_trust.signing.base import SignatureError

from .packets import (
    PUBKEY_ALGO_EDDSA,
    SIG_TYPE_BINARY,
    SUBPACKET_CREATION_TIME,
    SUBPACKET_ISSUER_FINGERPRINT,
    PublicKey,
    Signature,
    write_subpacket,
)

__license__ = "MIT"

logger = logging.getLogger(__name__)


class SecretKey:
    """An Ed25519 secret key together with the creation time of its public half."""

    def __init__(self, private_key, created):
        self._private_key = private_key
        self.created = created

    @classmethod
    def generate(cls, created=None):
        if created is None:
            created = int(time.time())
        return cls(Ed25519PrivateKey.generate(), created)

    @classmethod
    def from_seed(cls, seed, created):
        return cls(Ed25519PrivateKey.from_private_bytes(seed), created)

    def public_key(self) -> PublicKey:
        raw = self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return PublicKey(self.created, raw)

    def sign_digest(self, value):
        return self._private_key.sign(value)


def _digest(signature, data):
    try:
        digest_cls = digest_for(signature.hash_algorithm)
    except UnsupportedHashAlgorithm as e:
        raise SignatureError(str(e)) from e
    digest = digest_cls()
    digest.update(data)
    digest.update(signature.hash_trailer())
    return digest.finish()


def sign(secret_key, data, hash_algorithm=Sha256, created=None) -> Signature:
    """
    Produce a detached binary signature over ``data``.

    The signer's fingerprint goes in the unhashed area as the issuer hint.
    """
    if created is None:
        created = int(time.time())
    public_key = secret_key.public_key()

    unsigned = Signature(
        SIG_TYPE_BINARY,
        PUBKEY_ALGO_EDDSA,
        hash_algorithm.hash_algorithm,
        write_subpacket(SUBPACKET_CREATION_TIME, created.to_bytes(4, "big")),
        write_subpacket(SUBPACKET_ISSUER_FINGERPRINT, b"\x04" + public_key.fingerprint),
        b"",
        (),
    )
    value = _digest(unsigned, data)
    raw = secret_key.sign_digest(value)
    logger.debug(
        "Signed %d bytes with %s (%s)",
        len(data),
        public_key.hex_fingerprint,
        hash_algorithm.name,
    )
    return Signature(
        unsigned.sig_type,
        unsigned.public_key_algorithm,
        unsigned.hash_algorithm,
        unsigned.hashed_area,
        unsigned.unhashed_area,
        value[:2],
        (raw[:32], raw[32:]),
    )


def verify_signature(key, signature, data) -> bool:
    """
    Check ``signature`` over ``data`` against a single public key.

    Returns False when the signature was checked and does not verify. Raises
    SignatureError when it cannot be checked at all.
    """
    if signature.public_key_algorithm != PUBKEY_ALGO_EDDSA:
        raise SignatureError(
            f"Unsupported signature algorithm: {signature.public_key_algorithm}"
        )
    if len(signature.mpis) != 2 or any(len(m) > 32 for m in signature.mpis):
        raise SignatureError("Malformed EdDSA signature values")
    if len(signature.left16) != 2:
        raise SignatureError("Malformed signature hash prefix")

    try:
        public = Ed25519PublicKey.from_public_bytes(key.key_bytes)
    except ValueError as e:
        raise SignatureError(f"Invalid Ed25519 public key: {e}") from e

    value = _digest(signature, data)
    if value[:2] != signature.left16:
        return False

    r, s = signature.mpis
    try:
        public.verify(r.rjust(32, b"\x00") + s.rjust(32, b"\x00"), value)
    except InvalidSignature:
        return False
    return True
