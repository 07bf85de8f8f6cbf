"""
This package reads trusted public keys out of a GnuPG keyring.
"""

from .keyring import KeyNotFoundError, entries_from_keyring  # noqa
