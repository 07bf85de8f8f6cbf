"""
The small subset of OpenPGP (RFC 4880) packets needed to carry Ed25519 public
keys and detached signatures: v4 public-key packets and v4 signature packets.
Anything else found in a key block (user IDs, certifications, subkeys) is
skipped.
"""

import hashlib

from .armor import PUBLIC_KEY_BLOCK, SIGNATURE, ArmorError, armor, dearmor

__license__ = "MIT"

TAG_SIGNATURE = 2
TAG_PUBLIC_KEY = 6

PUBKEY_ALGO_EDDSA = 22
ED25519_OID = bytes.fromhex("2b06010401da470f01")

SIG_TYPE_BINARY = 0x00

SUBPACKET_CREATION_TIME = 2
SUBPACKET_ISSUER_FINGERPRINT = 33


class PacketError(ValueError):
    pass


def _read_length(data, pos):
    if pos >= len(data):
        raise PacketError("Truncated length")
    first = data[pos]
    if first < 192:
        return first, pos + 1
    if first < 224:
        if pos + 2 > len(data):
            raise PacketError("Truncated length")
        return ((first - 192) << 8) + data[pos + 1] + 192, pos + 2
    if first == 255:
        if pos + 5 > len(data):
            raise PacketError("Truncated length")
        return int.from_bytes(data[pos + 1:pos + 5], "big"), pos + 5
    raise PacketError("Partial body lengths are not supported")


def _encode_length(length):
    if length < 192:
        return bytes([length])
    if length < 8384:
        length -= 192
        return bytes([(length >> 8) + 192, length & 0xFF])
    return b"\xff" + length.to_bytes(4, "big")


def read_packets(data):
    """
    Iterate over (tag, body) for each packet in ``data``. Both old and new
    format headers are understood.
    """
    pos = 0
    while pos < len(data):
        header = data[pos]
        pos += 1
        if not header & 0x80:
            raise PacketError(f"Invalid packet header: {header:#04x}")

        if header & 0x40:
            tag = header & 0x3F
            length, pos = _read_length(data, pos)
        else:
            tag = (header >> 2) & 0x0F
            length_type = header & 0x03
            if length_type == 3:
                raise PacketError("Indeterminate length packets are not supported")
            size = (1, 2, 4)[length_type]
            if pos + size > len(data):
                raise PacketError("Truncated packet header")
            length = int.from_bytes(data[pos:pos + size], "big")
            pos += size

        if pos + length > len(data):
            raise PacketError(f"Truncated packet (tag {tag})")
        yield tag, data[pos:pos + length]
        pos += length


def write_packet(tag, body):
    return bytes([0xC0 | tag]) + _encode_length(len(body)) + body


def read_subpackets(area):
    pos = 0
    while pos < len(area):
        length, pos = _read_length(area, pos)
        if length == 0 or pos + length > len(area):
            raise PacketError("Invalid signature subpacket length")
        # The high bit only flags the subpacket as critical.
        yield area[pos] & 0x7F, area[pos + 1:pos + length]
        pos += length


def write_subpacket(kind, body):
    return _encode_length(len(body) + 1) + bytes([kind]) + body


def _read_mpi(data, pos):
    if pos + 2 > len(data):
        raise PacketError("Truncated MPI")
    bits = int.from_bytes(data[pos:pos + 2], "big")
    size = (bits + 7) // 8
    pos += 2
    if pos + size > len(data):
        raise PacketError("Truncated MPI")
    return data[pos:pos + size], pos + size


def _write_mpi(value):
    value = value.lstrip(b"\x00")
    bits = int.from_bytes(value, "big").bit_length()
    return bits.to_bytes(2, "big") + value


class PublicKey:
    """
    An Ed25519 public key as carried in an OpenPGP v4 public-key packet.

    The fingerprint is always computed here from the packet contents. It is
    only ever used as a lookup hint.
    """

    __slots__ = ("_created", "_key_bytes", "_body", "_fingerprint")

    def __init__(self, created, key_bytes):
        self._created = created
        self._key_bytes = bytes(key_bytes)
        self._body = (
            bytes([4])
            + created.to_bytes(4, "big")
            + bytes([PUBKEY_ALGO_EDDSA, len(ED25519_OID)])
            + ED25519_OID
            + _write_mpi(b"\x40" + self._key_bytes)
        )
        self._fingerprint = hashlib.sha1(
            b"\x99" + len(self._body).to_bytes(2, "big") + self._body
        ).digest()

    @property
    def created(self):
        return self._created

    @property
    def key_bytes(self):
        return self._key_bytes

    @property
    def fingerprint(self):
        return self._fingerprint

    @property
    def hex_fingerprint(self):
        return self._fingerprint.hex().upper()

    @classmethod
    def from_packet(cls, body):
        if len(body) < 7 or body[0] != 4:
            raise PacketError("Only v4 public key packets are supported")
        created = int.from_bytes(body[1:5], "big")
        if body[5] != PUBKEY_ALGO_EDDSA:
            raise PacketError(f"Unsupported public key algorithm: {body[5]}")
        oid_end = 7 + body[6]
        if body[7:oid_end] != ED25519_OID:
            raise PacketError("Unsupported curve, only Ed25519 keys are accepted")
        point, pos = _read_mpi(body, oid_end)
        if pos != len(body):
            raise PacketError("Trailing data in public key packet")
        # Native point encoding: 0x40 prefix followed by the 32 byte key.
        if len(point) != 33 or point[0] != 0x40:
            raise PacketError("Invalid Ed25519 point encoding")
        return cls(created, point[1:])

    @classmethod
    def from_armor(cls, text):
        """Parse the first public key packet out of an armored key block."""
        try:
            data = dearmor(text, PUBLIC_KEY_BLOCK)
        except ArmorError as e:
            raise PacketError(str(e)) from e
        for tag, body in read_packets(data):
            if tag == TAG_PUBLIC_KEY:
                return cls.from_packet(body)
        raise PacketError("No public key packet found")

    def to_packet(self):
        return write_packet(TAG_PUBLIC_KEY, self._body)

    def to_armor(self):
        return armor(self.to_packet(), PUBLIC_KEY_BLOCK)

    def __eq__(self, other):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self._body == other._body

    def __hash__(self):
        return hash(self._body)

    def __repr__(self):
        return f"<PublicKey {self.hex_fingerprint}>"


class Signature:
    """
    A v4 detached signature packet.

    The issuer fingerprint it carries is whatever the producer claimed and
    nothing more. :meth:`fingerprint` returns it for use as a lookup hint.
    """

    def __init__(
        self,
        sig_type,
        public_key_algorithm,
        hash_algorithm,
        hashed_area,
        unhashed_area,
        left16,
        mpis,
    ):
        self.sig_type = sig_type
        self.public_key_algorithm = public_key_algorithm
        self.hash_algorithm = hash_algorithm
        self.hashed_area = bytes(hashed_area)
        self.unhashed_area = bytes(unhashed_area)
        self.left16 = bytes(left16)
        self.mpis = tuple(bytes(m) for m in mpis)

    def _subpackets(self):
        yield from read_subpackets(self.hashed_area)
        yield from read_subpackets(self.unhashed_area)

    def fingerprint(self):
        """The claimed issuer fingerprint, or None if the signature has none."""
        for kind, body in self._subpackets():
            if kind == SUBPACKET_ISSUER_FINGERPRINT and len(body) == 21 and body[0] == 4:
                return body[1:]
        return None

    def created(self):
        for kind, body in read_subpackets(self.hashed_area):
            if kind == SUBPACKET_CREATION_TIME and len(body) == 4:
                return int.from_bytes(body, "big")
        return None

    def with_fingerprint(self, fingerprint):
        """
        Return a copy claiming a different issuer. Only the unhashed area is
        rewritten, so the cryptographic content is unchanged.
        """
        unhashed = b"".join(
            write_subpacket(kind, body)
            for kind, body in read_subpackets(self.unhashed_area)
            if kind != SUBPACKET_ISSUER_FINGERPRINT
        )
        if fingerprint is not None:
            unhashed += write_subpacket(
                SUBPACKET_ISSUER_FINGERPRINT, b"\x04" + bytes(fingerprint)
            )
        if any(
            kind == SUBPACKET_ISSUER_FINGERPRINT
            for kind, _ in read_subpackets(self.hashed_area)
        ):
            raise PacketError(
                "Issuer fingerprint is in the hashed area and cannot be replaced"
            )
        return Signature(
            self.sig_type,
            self.public_key_algorithm,
            self.hash_algorithm,
            self.hashed_area,
            unhashed,
            self.left16,
            self.mpis,
        )

    def hashed_header(self):
        return (
            bytes([4, self.sig_type, self.public_key_algorithm, self.hash_algorithm])
            + len(self.hashed_area).to_bytes(2, "big")
            + self.hashed_area
        )

    def hash_trailer(self):
        """Everything hashed after the signed data itself."""
        header = self.hashed_header()
        return header + b"\x04\xff" + len(header).to_bytes(4, "big")

    @classmethod
    def from_packet(cls, body):
        if len(body) < 6 or body[0] != 4:
            raise PacketError("Only v4 signature packets are supported")
        sig_type, pk_algo, hash_algo = body[1], body[2], body[3]

        pos = 4
        hashed_len = int.from_bytes(body[pos:pos + 2], "big")
        pos += 2
        hashed = body[pos:pos + hashed_len]
        pos += hashed_len

        if pos + 2 > len(body):
            raise PacketError("Truncated signature packet")
        unhashed_len = int.from_bytes(body[pos:pos + 2], "big")
        pos += 2
        unhashed = body[pos:pos + unhashed_len]
        pos += unhashed_len

        if pos + 2 > len(body):
            raise PacketError("Truncated signature packet")
        left16 = body[pos:pos + 2]
        pos += 2

        mpis = []
        while pos < len(body):
            mpi, pos = _read_mpi(body, pos)
            mpis.append(mpi)

        # Fail early on garbage subpacket areas.
        list(read_subpackets(hashed))
        list(read_subpackets(unhashed))

        return cls(sig_type, pk_algo, hash_algo, hashed, unhashed, left16, mpis)

    @classmethod
    def from_armor(cls, text):
        try:
            data = dearmor(text, SIGNATURE)
        except ArmorError as e:
            raise PacketError(str(e)) from e
        return cls.from_packets(data)

    @classmethod
    def from_packets(cls, data):
        for tag, body in read_packets(data):
            if tag == TAG_SIGNATURE:
                return cls.from_packet(body)
        raise PacketError("No signature packet found")

    @classmethod
    def from_bytes(cls, data):
        """
        Parse a detached signature file as written by gpg, either armored
        (``--armor``) or as raw packets.
        """
        if data.lstrip().startswith(b"-----BEGIN "):
            try:
                text = data.decode("ascii")
            except UnicodeDecodeError as e:
                raise PacketError(f"Armored signature is not ASCII: {e}") from e
            return cls.from_armor(text)
        return cls.from_packets(data)

    def to_packet(self):
        body = (
            self.hashed_header()
            + len(self.unhashed_area).to_bytes(2, "big")
            + self.unhashed_area
            + self.left16
            + b"".join(_write_mpi(m) for m in self.mpis)
        )
        return write_packet(TAG_SIGNATURE, body)

    def to_armor(self):
        return armor(self.to_packet(), SIGNATURE)

    def __eq__(self, other):
        if not isinstance(other, Signature):
            return NotImplemented
        return self.to_packet() == other.to_packet()

    def __hash__(self):
        return hash(self.to_packet())

    def __repr__(self):
        fpr = self.fingerprint()
        claimed = fpr.hex().upper() if fpr else "no issuer"
        return f"<Signature {claimed}>"
