import hashlib

__license__ = "MIT"


class DigestFinalizedError(Exception):
    pass


class UnsupportedHashAlgorithm(Exception):
    pass


class Digest:
    """
    Wrap a hashlib algorithm behind a fixed-output, block-oriented interface.

    Subclasses declare everything a caller needs to know about the output as
    class attributes, so generic code can size buffers (or reject a digest)
    without instantiating anything:

    - ``name``: the hashlib algorithm name
    - ``hash_algorithm``: the OpenPGP hash algorithm id
    - ``block_size``: internal block size in bytes
    - ``digest_size``: length of the value returned by finish()

    An instance is single use. Once finish() has been called the state is
    consumed and any further update() or finish() raises DigestFinalizedError.
    """

    name = None
    hash_algorithm = None
    block_size = None
    digest_size = None

    def __init__(self):
        if self.name is None:
            raise NotImplementedError("Digest subclasses must set name")
        self._hasher = hashlib.new(self.name)
        self._finished = False

    def update(self, data):
        if self._finished:
            raise DigestFinalizedError(f"{self.name} digest already finished")
        self._hasher.update(data)

    def finish(self) -> bytes:
        if self._finished:
            raise DigestFinalizedError(f"{self.name} digest already finished")
        self._finished = True
        out = self._hasher.digest()
        self._hasher = None
        return out

    def __repr__(self):
        state = "finished" if self._finished else "open"
        return f"<{type(self).__name__} {state}>"
