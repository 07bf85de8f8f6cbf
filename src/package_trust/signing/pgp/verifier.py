"""
This module verifies a detached OpenPGP signature (armored or binary) over a
file against a TrustedKeySet.
"""

import os

from package_trust.signing.base import (
    SignatureError,
    SignatureVerificationResult,
    SignatureVerifier,
)

from .packets import PacketError, Signature

__license__ = "MIT"


class PGPVerifier(SignatureVerifier):
    def __init__(self, manifest_path, detached_signature_path, keyset, privilege):
        super(PGPVerifier, self).__init__()

        if manifest_path is None:
            raise RuntimeError("manifest_path must not be None")
        self.manifest_path = manifest_path

        if detached_signature_path is None:
            raise RuntimeError("detached_signature_path must not be None")
        self.detached_signature_path = detached_signature_path

        if keyset is None:
            raise RuntimeError("keyset must not be None")
        self.keyset = keyset
        self.privilege = privilege

    def verify(self) -> SignatureVerificationResult:
        if not os.path.exists(self.detached_signature_path):
            return SignatureVerificationResult(
                success=False,
                summary="The specified detached signature path does not exist.",
            )

        if not os.path.exists(self.manifest_path):
            return SignatureVerificationResult(
                success=False,
                summary="The specified manifest path does not exist.",
            )

        extra = {"privilege": self.privilege.value}

        with open(self.detached_signature_path, "rb") as f:
            raw = f.read()

        try:
            signature = Signature.from_bytes(raw)
        except PacketError as e:
            extra["error"] = str(e)
            return SignatureVerificationResult(
                success=False,
                summary="The detached signature could not be parsed.",
                extra_information=extra,
            )

        fingerprint = signature.fingerprint()
        if fingerprint is not None:
            extra["fingerprint"] = fingerprint.hex().upper()
        extra["creation_date"] = signature.created()

        with open(self.manifest_path, "rb") as f:
            data = f.read()

        try:
            verified = self.keyset.verify(data, signature, self.privilege)
        except SignatureError as e:
            extra["error"] = str(e)
            return SignatureVerificationResult(
                success=False,
                summary="The signature could not be checked.",
                extra_information=extra,
            )

        if not verified:
            return SignatureVerificationResult(
                success=False,
                summary="PGP signature verification failed.",
                extra_information=extra,
            )

        return SignatureVerificationResult(
            success=True,
            summary="PGP signature verification succeeded.",
            extra_information=extra,
        )
