"""
This module exports public keys from a GnuPG home directory so they can be
loaded into a TrustedKeySet. It makes use of python-gnupg (which ultimately
shells out to GPG).
"""

import logging

import gnupg

__license__ = "MIT"

logger = logging.getLogger(__name__)

GRANT_FIELDS = ("can-commit", "can-rotate")


class KeyNotFoundError(Exception):
    pass


def entries_from_keyring(grants, gpg_home=None, keyring=None):
    """
    Given a mapping of key fingerprint to grants (a mapping with optional
    ``can-commit`` / ``can-rotate``), export each key from GnuPG and return a
    list of entries suitable for TrustedKeySet.load().

    The fingerprints here only select what to export. The fingerprint the key
    set uses is recomputed from the exported key material at load time.
    """
    gpg = gnupg.GPG(gnupghome=gpg_home, keyring=keyring)

    entries = []
    for fingerprint, grant in grants.items():
        armored = gpg.export_keys(fingerprint)
        if not armored:
            raise KeyNotFoundError(f"Key not found in GnuPG keyring: {fingerprint}")
        logger.debug("Exported %s from GnuPG", fingerprint)

        entry = {"key": armored}
        for field in GRANT_FIELDS:
            if field in grant:
                entry[field] = grant[field]
        entries.append(entry)
    return entries
