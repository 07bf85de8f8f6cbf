"""
This package handles signing and verifying content with trusted keys.

Verification methods contain two modules:

1) A verifier subclass of SignatureVerifier, which makes no assumptions about
   the verification strategy used. All it demands is the implementation of a
   'verify' method.

2) A signer subclass of SignatureSigner, which similarly makes no assumptions
   leaving it to each subclass to implement sign() as it sees fit.
"""

from .base import SignatureError  # noqa: F401
from .gpg import entries_from_keyring  # noqa: F401
from .pgp import PGPSigner  # noqa: F401
from .pgp import PGPVerifier  # noqa: F401

__all__ = [
    "entries_from_keyring",
    "PGPSigner",
    "PGPVerifier",
    "SignatureError",
]
