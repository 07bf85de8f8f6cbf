from .base import Digest, UnsupportedHashAlgorithm

__license__ = "MIT"


class Sha256(Digest):
    name = "sha256"
    hash_algorithm = 8
    block_size = 64
    digest_size = 32


class Sha512(Digest):
    name = "sha512"
    hash_algorithm = 10
    block_size = 128
    digest_size = 64


# Only these two are accepted in signatures. Anything else (notably SHA-1 and
# MD5) is refused rather than looked up dynamically in hashlib.
_BY_HASH_ALGORITHM = {
    Sha256.hash_algorithm: Sha256,
    Sha512.hash_algorithm: Sha512,
}


def digest_for(hash_algorithm):
    """Return the Digest class for an OpenPGP hash algorithm id."""
    try:
        return _BY_HASH_ALGORITHM[hash_algorithm]
    except KeyError:
        raise UnsupportedHashAlgorithm(
            f"Unsupported hash algorithm: {hash_algorithm}"
        ) from None
