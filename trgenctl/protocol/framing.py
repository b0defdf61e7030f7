"""Frame builder and acknowledgment parser for the TrGEN TCP protocol.

Frame layout (all words little-endian)::

    +------------+----------------------+------------+
    | Command id | Payload words        | CRC32      |
    | 4 bytes    | 4 bytes * N          | 4 bytes    |
    +------------+----------------------+------------+

- CRC32 covers the command word and every payload word.
- The device answers with ASCII ``ACK<command id>.<value>``.
"""

from __future__ import annotations

import re
import struct
from collections.abc import Iterable
from enum import IntEnum

from trgenctl.core.errors import InstructionRangeError, ProtocolError
from trgenctl.core.model import Acknowledgment, Frame
from trgenctl.protocol.checksum import crc32

WORD_SIZE = 4
_DECIMAL_RE = re.compile(r"-?[0-9]+")
_PADDING = "\x00\r\n\t "


class Command(IntEnum):
    """Opcodes carried in the low byte of the command word."""

    PROGRAM = 0x01
    START = 0x02
    SET_GPIO = 0x03
    QUERY_CAPABILITIES = 0x04
    QUERY_STATUS = 0x05
    SET_LEVEL = 0x06
    QUERY_GPIO = 0x07
    QUERY_LEVEL = 0x08
    STOP = 0x09


def program_command_id(pin_id: int) -> int:
    """Command word that writes a trigger memory; the pin id sits in bits 24-31."""
    if not 0 <= pin_id <= 0xFF:
        raise InstructionRangeError(f"Pin id must be 0-255, got {pin_id}")
    return int(Command.PROGRAM) | (pin_id << 24)


def _pack_words(words: Iterable[int]) -> bytes:
    out = bytearray()
    for word in words:
        if not 0 <= word <= 0xFFFFFFFF:
            raise InstructionRangeError(f"Frame word must be a uint32, got {word}")
        out += struct.pack("<I", word)
    return bytes(out)


def build_frame(command_id: int, payload: Iterable[int] = ()) -> bytes:
    """Build the bytes sent for one command.

    Args:
        command_id: Full 32-bit command word (opcode plus pin id for PROGRAM).
        payload: Optional uint32 words, e.g. a trigger memory or a mask.
    """
    body = _pack_words([command_id]) + _pack_words(payload)
    return body + struct.pack("<I", crc32(body))


def parse_frame(data: bytes) -> Frame:
    """Parse a frame built by :func:`build_frame`.

    Raises:
        ProtocolError: if the length is not a whole number of words or the CRC does not match.
    """
    if len(data) < 2 * WORD_SIZE or len(data) % WORD_SIZE:
        raise ProtocolError(f"Frame length {len(data)} is not a whole number of words (min 8)")
    body, trailer = data[:-WORD_SIZE], data[-WORD_SIZE:]
    (checksum,) = struct.unpack("<I", trailer)
    expected = crc32(body)
    if checksum != expected:
        raise ProtocolError(f"Frame CRC mismatch: got 0x{checksum:08X}, expected 0x{expected:08X}")
    words = struct.unpack(f"<{len(body) // WORD_SIZE}I", body)
    return Frame(command_id=words[0], payload=tuple(words[1:]), checksum=checksum)


def parse_acknowledgment(text: str, expected_command_id: int) -> Acknowledgment:
    """Parse an ``ACK<id>.<value>`` reply, checking it echoes the expected command."""
    expected_command_id = int(expected_command_id)
    cleaned = text.strip(_PADDING)
    prefix = f"ACK{expected_command_id}"
    if not cleaned.startswith(prefix):
        raise ProtocolError(f"Unexpected ACK for command {expected_command_id}: {text!r}")
    parts = cleaned.split(".")
    if len(parts) != 2 or parts[0] != prefix or not _DECIMAL_RE.fullmatch(parts[1]):
        raise ProtocolError(f"Malformed ACK: {text!r}")
    return Acknowledgment(command_id=expected_command_id, value=int(parts[1]), raw=cleaned)


def parse_ack(text: str, expected_command_id: int) -> int:
    return parse_acknowledgment(text, expected_command_id).value
