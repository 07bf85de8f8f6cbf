"""
This package holds the set of keys trusted to sign privileged actions and the
decision procedure that checks a signature against them.
"""

from .keyset import (  # noqa
    InvalidKeyEncoding,
    LoadError,
    Privilege,
    TrustedKey,
    TrustedKeySet,
)
