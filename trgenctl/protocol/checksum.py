"""CRC-32/ISO-HDLC checksum appended to every outgoing frame."""

from __future__ import annotations

from binascii import crc32 as _crc32


def crc32(data: bytes) -> int:
    """Reflected 0xEDB88320 polynomial, init and final XOR 0xFFFFFFFF.

    >>> hex(crc32(b"123456789"))
    '0xcbf43926'
    """
    return _crc32(bytes(data), 0) & 0xFFFFFFFF
