import os
import pytest

from package_trust.digest import Sha512
from package_trust.signing import SignatureError
from package_trust.signing.pgp import Signature, sign
from package_trust.trust import (
    InvalidKeyEncoding,
    LoadError,
    Privilege,
    TrustedKey,
    TrustedKeySet,
)
import package_trust.trust.keyset as keyset_module

__license__ = "MIT"


DATA = b"rotate: add key 0C"


@pytest.fixture
def counted_verify(monkeypatch):
    """Wrap the signature primitive and record which keys it was called with."""
    calls = []
    real = keyset_module.verify_signature

    def _verify(key, signature, data):
        calls.append(key)
        return real(key, signature, data)

    monkeypatch.setattr(keyset_module, "verify_signature", _verify)
    return calls


def test_load_defaults_to_no_privileges(secret_key_a, entry):
    keyset = TrustedKeySet.load([entry(secret_key_a)])
    [record] = keyset.keys
    assert record.privileges == frozenset()
    assert record.can_commit is False
    assert record.can_rotate is False
    assert record.key.fingerprint == secret_key_a.public_key().fingerprint


@pytest.mark.parametrize(
    "grants, expected",
    [
        ({}, set()),
        ({"can_commit": True}, {Privilege.COMMIT}),
        ({"can_rotate": True}, {Privilege.ROTATE}),
        ({"can_commit": True, "can_rotate": True}, {Privilege.COMMIT, Privilege.ROTATE}),
        ({"can_commit": False, "can_rotate": False}, set()),
    ],
)
def test_load_privileges(secret_key_a, entry, grants, expected):
    keyset = TrustedKeySet.load([entry(secret_key_a, **grants)])
    assert keyset.keys[0].privileges == expected


def test_load_invalid_entry_aborts(secret_key_a, secret_key_b, entry):
    entries = [
        entry(secret_key_a, can_commit=True),
        {"key": "-----BEGIN PGP PUBLIC KEY BLOCK-----\n\nAAAA\n-----END PGP PUBLIC KEY BLOCK-----"},
        entry(secret_key_b, can_rotate=True),
    ]
    with pytest.raises(InvalidKeyEncoding) as ex:
        TrustedKeySet.load(entries)
    assert ex.value.entry_index == 2
    assert isinstance(ex.value, LoadError)
    assert "entry 2" in str(ex.value)


@pytest.mark.parametrize(
    "bad_entry, reason",
    [
        ({}, "missing 'key'"),
        ({"key": 42}, "missing 'key'"),
        ("not a table", "entry is not a table"),
    ],
)
def test_load_malformed_entry(bad_entry, reason):
    with pytest.raises(InvalidKeyEncoding) as ex:
        TrustedKeySet.load([bad_entry])
    assert ex.value.entry_index == 1
    assert reason in str(ex.value)


@pytest.mark.parametrize("value", ["true", 1, None, "yes"])
def test_load_rejects_non_boolean_grant(secret_key_a, entry, value):
    bad = entry(secret_key_a)
    bad["can-rotate"] = value
    with pytest.raises(InvalidKeyEncoding) as ex:
        TrustedKeySet.load([bad])
    assert "'can-rotate' must be true or false" in str(ex.value)


def test_from_config(secret_key_a, secret_key_b, entry):
    config = {
        "key": [
            entry(secret_key_a, can_commit=True),
            entry(secret_key_b, can_rotate=True),
        ]
    }
    keyset = TrustedKeySet.from_config(config)
    assert len(keyset) == 2
    assert [k.key for k in keyset] == [
        secret_key_a.public_key(),
        secret_key_b.public_key(),
    ]


def test_from_config_without_keys():
    keyset = TrustedKeySet.from_config({})
    assert len(keyset) == 0
    assert keyset == TrustedKeySet()


def test_structural_equality(secret_key_a, entry):
    first = TrustedKeySet.load([entry(secret_key_a, can_commit=True)])
    second = TrustedKeySet.load([entry(secret_key_a, can_commit=True)])
    rotated = TrustedKeySet.load([entry(secret_key_a, can_rotate=True)])

    assert first == second
    assert first.keys[0] == second.keys[0]
    assert first != rotated
    assert first.keys[0] == TrustedKey(secret_key_a.public_key(), can_commit=True)


def test_empty_keyset_fails_closed(secret_key_a, counted_verify):
    signature = sign(secret_key_a, DATA)
    assert TrustedKeySet().verify(DATA, signature, Privilege.COMMIT) is False
    assert counted_verify == []


def test_no_privileged_key_skips_verification(
    secret_key_a, secret_key_b, entry, counted_verify
):
    keyset = TrustedKeySet.load([entry(secret_key_a), entry(secret_key_b, can_commit=True)])
    signature = sign(secret_key_a, DATA)
    assert keyset.verify(DATA, signature, Privilege.ROTATE) is False
    assert counted_verify == []


def test_fast_path(secret_key_a, entry, counted_verify):
    keyset = TrustedKeySet.load([entry(secret_key_a, can_commit=True, can_rotate=True)])
    signature = sign(secret_key_a, DATA)
    assert keyset.verify(DATA, signature, Privilege.COMMIT) is True
    assert counted_verify == [secret_key_a.public_key()]


def test_fast_path_is_tried_first(secret_key_a, secret_key_b, entry, counted_verify):
    keyset = TrustedKeySet.load(
        [entry(secret_key_a, can_commit=True), entry(secret_key_b, can_commit=True)]
    )
    signature = sign(secret_key_b, DATA)
    assert keyset.verify(DATA, signature, Privilege.COMMIT) is True
    assert counted_verify == [secret_key_b.public_key()]


def test_privilege_scenario(secret_key_a, secret_key_b, entry):
    keyset = TrustedKeySet.load(
        [entry(secret_key_a, can_commit=True), entry(secret_key_b, can_rotate=True)]
    )
    signature = sign(secret_key_b, DATA).with_fingerprint(
        secret_key_a.public_key().fingerprint
    )

    assert keyset.verify(DATA, signature, Privilege.COMMIT) is False
    assert keyset.verify(DATA, signature, Privilege.ROTATE) is True


def test_fallback_after_failed_match(
    secret_key_a, secret_key_b, secret_key_c, entry, counted_verify
):
    keyset = TrustedKeySet.load(
        [
            entry(secret_key_a, can_commit=True),
            entry(secret_key_b, can_rotate=True),
            entry(secret_key_c, can_commit=True),
        ]
    )
    signature = sign(secret_key_c, DATA).with_fingerprint(
        secret_key_a.public_key().fingerprint
    )
    assert keyset.verify(DATA, signature, Privilege.COMMIT) is True
    # Claimed key first, then the rest of the privileged keys in load order,
    # never the unprivileged one.
    assert counted_verify == [secret_key_a.public_key(), secret_key_c.public_key()]


@pytest.mark.parametrize("hint", ["a", "b", "c", "random", "none"])
@pytest.mark.parametrize("privilege", [Privilege.COMMIT, Privilege.ROTATE])
def test_hint_does_not_change_outcome(
    secret_key_a, secret_key_b, secret_key_c, entry, hint, privilege
):
    keyset = TrustedKeySet.load(
        [
            entry(secret_key_a, can_commit=True),
            entry(secret_key_b, can_commit=True, can_rotate=True),
        ]
    )
    hints = {
        "a": secret_key_a.public_key().fingerprint,
        "b": secret_key_b.public_key().fingerprint,
        "c": secret_key_c.public_key().fingerprint,
        "random": os.urandom(20),
        "none": None,
    }
    for signer in (secret_key_a, secret_key_b, secret_key_c):
        signature = sign(signer, DATA)
        expected = keyset.verify(DATA, signature, privilege)
        rehinted = signature.with_fingerprint(hints[hint])
        assert keyset.verify(DATA, rehinted, privilege) is expected


def test_hint_alone_never_accepts(secret_key_a, entry):
    keyset = TrustedKeySet.load([entry(secret_key_a, can_commit=True, can_rotate=True)])
    genuine = sign(secret_key_a, DATA)
    forged = Signature(
        genuine.sig_type,
        genuine.public_key_algorithm,
        genuine.hash_algorithm,
        genuine.hashed_area,
        genuine.unhashed_area,
        genuine.left16,
        (b"\x11" * 32, b"\x22" * 32),
    )
    assert forged.fingerprint() == secret_key_a.public_key().fingerprint
    assert keyset.verify(DATA, forged, Privilege.COMMIT) is False
    assert keyset.verify(b"other data", genuine, Privilege.COMMIT) is False


def test_unsigned_by_any_trusted_key(secret_key_a, secret_key_b, secret_key_c, entry):
    keyset = TrustedKeySet.load(
        [entry(secret_key_a, can_commit=True), entry(secret_key_b, can_commit=True)]
    )
    signature = sign(secret_key_c, DATA, hash_algorithm=Sha512)
    assert keyset.verify(DATA, signature, Privilege.COMMIT) is False


def test_signature_error_propagates(secret_key_a, entry):
    keyset = TrustedKeySet.load([entry(secret_key_a, can_commit=True)])
    genuine = sign(secret_key_a, DATA)
    broken = Signature(
        genuine.sig_type,
        genuine.public_key_algorithm,
        3,  # RIPEMD-160
        genuine.hashed_area,
        genuine.unhashed_area,
        genuine.left16,
        genuine.mpis,
    )
    with pytest.raises(SignatureError):
        keyset.verify(DATA, broken, Privilege.COMMIT)


def test_fallback_skips_duplicate_of_claimed_key(
    secret_key_a, secret_key_b, entry, counted_verify
):
    keyset = TrustedKeySet.load(
        [entry(secret_key_a, can_commit=True), entry(secret_key_a, can_commit=True)]
    )
    signature = sign(secret_key_b, DATA).with_fingerprint(
        secret_key_a.public_key().fingerprint
    )
    assert keyset.verify(DATA, signature, Privilege.COMMIT) is False
    assert counted_verify == [secret_key_a.public_key()]
