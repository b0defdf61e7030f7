"""Encoding of the 32-bit instruction words executed by each trigger.

Word layout::

    +-------------------------------+--------+
    |  duration in microseconds     | opcode |
    |  bits 3..31 (29 bits)         | 0..2   |
    +-------------------------------+--------+

The opcode values are fixed by the device firmware.
"""

from __future__ import annotations

from enum import IntEnum

from trgenctl.core.errors import InstructionRangeError

OPCODE_BITS = 3
OPCODE_MASK = (1 << OPCODE_BITS) - 1
MAX_DURATION_US = (1 << (32 - OPCODE_BITS)) - 1


class Opcode(IntEnum):
    INACTIVE = 0b000
    ACTIVE = 0b001
    NOT_ADMISSIBLE = 0b101
    END = 0b111


def _timed(opcode: Opcode, us: int) -> int:
    if isinstance(us, bool) or not isinstance(us, int):
        raise InstructionRangeError(f"Duration must be an integer number of microseconds, got {us!r}")
    if not 0 <= us <= MAX_DURATION_US:
        raise InstructionRangeError(f"Duration must be 0-{MAX_DURATION_US} us, got {us}")
    return (us << OPCODE_BITS) | opcode


def end() -> int:
    """Stop executing the program."""
    return int(Opcode.END)


def not_admissible() -> int:
    """Filler for unused slots; the device never executes past END into these."""
    return int(Opcode.NOT_ADMISSIBLE)


def active_for_us(us: int) -> int:
    """Drive the pin high for ``us`` microseconds."""
    return _timed(Opcode.ACTIVE, us)


def inactive_for_us(us: int) -> int:
    """Drive the pin low for ``us`` microseconds."""
    return _timed(Opcode.INACTIVE, us)


def decode(word: int) -> tuple[Opcode, int]:
    """Split an instruction word into ``(opcode, duration_us)``.

    Raises:
        InstructionRangeError: if the word is not a uint32 or carries an unknown opcode.
    """
    if not 0 <= word <= 0xFFFFFFFF:
        raise InstructionRangeError(f"Instruction word must be a uint32, got {word}")
    try:
        opcode = Opcode(word & OPCODE_MASK)
    except ValueError as exc:
        raise InstructionRangeError(f"Unknown opcode in instruction 0x{word:08X}") from exc
    return opcode, word >> OPCODE_BITS
