class SignatureError(Exception):
    """
    The signature scheme could not run at all: malformed key material,
    malformed signature structure, or an unsupported algorithm.

    This is not the same as a signature that was checked and rejected. Callers
    making an access-control decision must treat it as "not verified".
    """


class _Result:
    def __init__(self, success, summary, extra_information=None):
        self.success = success
        self.summary = summary
        self.extra_information = extra_information or {}

    def __bool__(self):
        return self.success

    def __repr__(self):
        return f"<{type(self).__name__} success={self.success} {self.summary!r}>"


class SignatureVerificationResult(_Result):
    """
    Outcome of checking a signed file against a key set. ``success`` is only
    True when a key holding the requested privilege verified the signature;
    unreadable or uncheckable signatures come back as failures, with the reason
    under ``extra_information["error"]``.
    """


class SignatureSigningResult(_Result):
    """Outcome of writing a detached signature, with the signer's fingerprint."""


class SignatureVerifier:
    """Checks one signed file. Subclasses bind the file, key set and privilege."""

    def verify(self) -> SignatureVerificationResult:
        raise NotImplementedError("verify")


class SignatureSigner:
    """Writes a detached signature for one file."""

    def sign(self) -> SignatureSigningResult:
        raise NotImplementedError("sign")
