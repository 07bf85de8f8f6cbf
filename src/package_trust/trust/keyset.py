import enum
import logging
from collections.abc import Mapping

from package_trust.signing.pgp.eddsa import verify_signature
from package_trust.signing.pgp.packets import PacketError, PublicKey

__license__ = "MIT"

logger = logging.getLogger(__name__)


class LoadError(Exception):
    pass


class InvalidKeyEncoding(LoadError):
    def __init__(self, entry_index, reason):
        self.entry_index = entry_index
        self.reason = reason
        super().__init__(f"Invalid trusted key, entry {entry_index}: {reason}")


class Privilege(enum.Enum):
    COMMIT = "can-commit"
    ROTATE = "can-rotate"


class TrustedKey:
    """
    One trusted key and the privileges granted to it. Two records are equal
    when they carry the same key material and the same grants.
    """

    __slots__ = ("_key", "_can_commit", "_can_rotate")

    def __init__(self, key, can_commit=False, can_rotate=False):
        self._key = key
        self._can_commit = can_commit
        self._can_rotate = can_rotate

    @property
    def key(self):
        return self._key

    @property
    def can_commit(self):
        return self._can_commit

    @property
    def can_rotate(self):
        return self._can_rotate

    @property
    def privileges(self):
        out = set()
        if self._can_commit:
            out.add(Privilege.COMMIT)
        if self._can_rotate:
            out.add(Privilege.ROTATE)
        return frozenset(out)

    def privileged(self, privilege):
        if privilege is Privilege.COMMIT:
            return self._can_commit
        if privilege is Privilege.ROTATE:
            return self._can_rotate
        raise ValueError(f"Unknown privilege: {privilege!r}")

    def _astuple(self):
        return (self._key, self._can_commit, self._can_rotate)

    def __eq__(self, other):
        if not isinstance(other, TrustedKey):
            return NotImplemented
        return self._astuple() == other._astuple()

    def __hash__(self):
        return hash(self._astuple())

    def __repr__(self):
        grants = ", ".join(sorted(p.value for p in self.privileges)) or "none"
        return f"<TrustedKey {self._key.hex_fingerprint} ({grants})>"


def _grant(entry, index, privilege):
    value = entry.get(privilege.value, False)
    # Anything but a real boolean would need guessing, so refuse it.
    if not isinstance(value, bool):
        raise InvalidKeyEncoding(
            index, f"'{privilege.value}' must be true or false, got {value!r}"
        )
    return value


class TrustedKeySet:
    """
    The keys trusted to authorize privileged actions, in load order.

    A key set never changes once loaded. Rotating keys means loading a new
    TrustedKeySet, so a single instance can be shared freely between threads.
    """

    def __init__(self, keys=()):
        self._keys = tuple(keys)

    @classmethod
    def load(cls, entries):
        """
        Build a key set from a sequence of entries, each a mapping with a
        ``key`` (armored public key) and optional ``can-commit`` and
        ``can-rotate`` booleans. Missing grants are False.

        Any bad entry raises InvalidKeyEncoding (entries are numbered from 1)
        and nothing is returned.
        """
        keys = []
        for index, entry in enumerate(entries, start=1):
            if not isinstance(entry, Mapping):
                raise InvalidKeyEncoding(index, "entry is not a table")
            text = entry.get("key")
            if not isinstance(text, str):
                raise InvalidKeyEncoding(index, "missing 'key'")
            try:
                key = PublicKey.from_armor(text)
            except PacketError as e:
                raise InvalidKeyEncoding(index, str(e)) from e

            record = TrustedKey(
                key,
                can_commit=_grant(entry, index, Privilege.COMMIT),
                can_rotate=_grant(entry, index, Privilege.ROTATE),
            )
            logger.debug("Loaded trusted key %s", record)
            keys.append(record)
        return cls(keys)

    @classmethod
    def from_config(cls, config):
        """
        Build a key set from the deserialized configuration table, where the
        entries live in a ``key`` array (``[[key]]`` in TOML).
        """
        return cls.load(config.get("key", ()))

    @property
    def keys(self):
        return self._keys

    def __len__(self):
        return len(self._keys)

    def __iter__(self):
        return iter(self._keys)

    def __eq__(self, other):
        if not isinstance(other, TrustedKeySet):
            return NotImplemented
        return self._keys == other._keys

    def __hash__(self):
        return hash(self._keys)

    def verify(self, data, signature, privilege) -> bool:
        """
        Return True if ``signature`` over ``data`` was made by some key that
        holds ``privilege``.

        The signature's issuer fingerprint is only used to pick which key to
        try first. If that key does not verify (or no key matches the claimed
        fingerprint) every other privileged key is tried in turn, so a wrong
        fingerprint can never hide a valid signature, and a right fingerprint
        alone never accepts one.

        SignatureError from the signature scheme propagates. It means the
        signature could not be checked, which is not the same as False.
        """
        privileged = [key for key in self._keys if key.privileged(privilege)]
        if not privileged:
            logger.debug("No trusted key holds %s", privilege.value)
            return False

        fingerprint = signature.fingerprint()

        matched = None
        if fingerprint is not None:
            for key in privileged:
                if key.key.fingerprint == fingerprint:
                    matched = key
                    break

        if matched is not None:
            if verify_signature(matched.key, signature, data):
                logger.debug("Signature verified by claimed issuer %s", matched)
                return True
            logger.debug("Claimed issuer %s did not verify, trying other keys", matched)

        for key in privileged:
            if key == matched:
                continue
            if verify_signature(key.key, signature, data):
                logger.debug("Signature verified by %s", key)
                return True

        logger.debug("No key holding %s verified the signature", privilege.value)
        return False
