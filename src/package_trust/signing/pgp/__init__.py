"""
This package handles OpenPGP (Ed25519) signing and validation.
"""

from .eddsa import SecretKey, sign, verify_signature  # noqa
from .packets import PacketError, PublicKey, Signature  # noqa
from .signer import PGPSigner  # noqa
from .verifier import PGPVerifier  # noqa
