"""
ASCII armor (RFC 4880, section 6) for OpenPGP keys and signatures.
"""

import base64
import binascii

__license__ = "MIT"

PUBLIC_KEY_BLOCK = "PGP PUBLIC KEY BLOCK"
SIGNATURE = "PGP SIGNATURE"

CRC24_INIT = 0xB704CE
CRC24_POLY = 0x1864CFB


class ArmorError(ValueError):
    pass


def crc24(data):
    crc = CRC24_INIT
    for byte in data:
        crc ^= byte << 16
        for _ in range(8):
            crc <<= 1
            if crc & 0x1000000:
                crc ^= CRC24_POLY
    return crc & 0xFFFFFF


def dearmor(text, label):
    """
    Given armored text, return the binary payload between the BEGIN and END
    lines for ``label``. Armor headers are skipped. If a checksum line is
    present it must match.
    """
    begin = f"-----BEGIN {label}-----"
    end = f"-----END {label}-----"

    lines = [line.strip() for line in text.strip().splitlines()]
    try:
        start = lines.index(begin)
        stop = lines.index(end, start + 1)
    except ValueError:
        raise ArmorError(f"Missing {label} armor lines") from None

    body = lines[start + 1:stop]

    # Armor headers ("Version: ...", "Comment: ...") run up to the first
    # blank line. Without any headers the blank line is optional.
    if "" in body:
        body = body[body.index("") + 1:]

    checksum = None
    if body and body[-1].startswith("="):
        checksum = body.pop()[1:]

    try:
        data = base64.b64decode("".join(body), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ArmorError(f"Invalid base64 in {label}: {e}") from None

    if not data:
        raise ArmorError(f"Empty {label}")

    if checksum is not None:
        try:
            expected = int.from_bytes(base64.b64decode(checksum, validate=True), "big")
        except (binascii.Error, ValueError):
            raise ArmorError(f"Invalid armor checksum line: ={checksum}") from None
        if crc24(data) != expected:
            raise ArmorError(f"Armor checksum mismatch in {label}")

    return data


def armor(data, label):
    lines = [f"-----BEGIN {label}-----", ""]
    encoded = base64.b64encode(data).decode("ascii")
    for i in range(0, len(encoded), 64):
        lines.append(encoded[i:i + 64])
    checksum = base64.b64encode(crc24(data).to_bytes(3, "big")).decode("ascii")
    lines.append(f"={checksum}")
    lines.append(f"-----END {label}-----")
    return "\n".join(lines) + "\n"
