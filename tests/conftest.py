import pytest

from package_trust.signing.pgp import SecretKey

__license__ = "MIT"

# 2022-04-15, fixed so fingerprints are stable between runs.
KEY_CREATED = 1650000000
SIGNATURE_CREATED = 1650000600


def _secret_key(seed_byte):
    return SecretKey.from_seed(bytes([seed_byte]) * 32, KEY_CREATED)


@pytest.fixture
def secret_key_a():
    return _secret_key(0x0A)


@pytest.fixture
def secret_key_b():
    return _secret_key(0x0B)


@pytest.fixture
def secret_key_c():
    return _secret_key(0x0C)


@pytest.fixture
def entry():
    """Build a key set entry for a secret key's public half."""

    def _entry(secret_key, **grants):
        out = {"key": secret_key.public_key().to_armor()}
        for name, value in grants.items():
            out[name.replace("_", "-")] = value
        return out

    return _entry
