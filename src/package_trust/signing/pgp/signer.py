"""
This module writes a detached, armored OpenPGP signature for a file.
"""

import logging
import os

from package_trust.digest import Sha256
from package_trust.signing.base import SignatureSigner, SignatureSigningResult

from .eddsa import sign

__license__ = "MIT"

logger = logging.getLogger(__name__)


class PGPSigner(SignatureSigner):
    def __init__(
        self,
        manifest_path,
        output_path,
        secret_key,
        hash_algorithm=Sha256,
    ):
        super(PGPSigner, self).__init__()

        if manifest_path is None:
            raise RuntimeError("manifest_path must not be None")
        self.manifest_path = manifest_path

        if output_path is None:
            raise RuntimeError("output_path must not be None")
        self.output_path = output_path

        if secret_key is None:
            raise RuntimeError("secret_key must not be None")
        self.secret_key = secret_key
        self.hash_algorithm = hash_algorithm

    def sign(self) -> SignatureSigningResult:
        with open(self.manifest_path, "rb") as f:
            data = f.read()

        signature = sign(self.secret_key, data, hash_algorithm=self.hash_algorithm)

        outdir = os.path.dirname(self.output_path)
        if len(outdir) > 0 and not os.path.isdir(outdir):
            logger.info("Creating output directory: %s", outdir)
            os.makedirs(outdir)

        with open(self.output_path, "w") as f:
            f.write(signature.to_armor())
            logger.info("Wrote to file: %s", self.output_path)

        return SignatureSigningResult(
            success=True,
            summary="PGP signing succeeded.",
            extra_information={
                "fingerprint": self.secret_key.public_key().hex_fingerprint,
                "hash_algo": self.hash_algorithm.name,
                "timestamp": signature.created(),
            },
        )
