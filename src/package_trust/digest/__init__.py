"""
This package adapts streaming hash implementations to the fixed-output digest
interface used when verifying signatures.
"""

from .base import Digest, DigestFinalizedError, UnsupportedHashAlgorithm  # noqa
from .sha import Sha256, Sha512, digest_for  # noqa
