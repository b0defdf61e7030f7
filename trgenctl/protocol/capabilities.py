"""Decoder for the packed capability word returned by QUERY_CAPABILITIES.

Bit layout (LSB first)::

    [0:5)   NeuroScan pin count
    [5:10)  SynAmps pin count
    [10:13) sync output count
    [13:16) sync input count
    [16:21) GPIO pin count
    [26:32) memory length exponent
"""

from __future__ import annotations

from collections.abc import Callable

from trgenctl.core.errors import InstructionRangeError
from trgenctl.core.model import DeviceCapabilities

MemoryLengthRule = Callable[[int], int]

# Largest trigger memory a frame may carry (256 KiB of instruction words).
MAX_MEMORY_LENGTH = 1 << 16

# (field name, bit offset, bit width)
_FIELDS: tuple[tuple[str, int, int], ...] = (
    ("ns_pin_count", 0, 5),
    ("sa_pin_count", 5, 5),
    ("tms_out_count", 10, 3),
    ("tms_in_count", 13, 3),
    ("gpio_pin_count", 16, 5),
    ("memory_length_exponent", 26, 6),
)


def default_memory_length(exponent: int) -> int:
    """Number of instruction slots per trigger for a given exponent field."""
    return 1 << exponent


def decode_capabilities(
    packed: int,
    *,
    memory_length_rule: MemoryLengthRule = default_memory_length,
) -> DeviceCapabilities:
    """Split a capability word into its fields and derive the memory length.

    Raises:
        InstructionRangeError: if the rule's length is outside 1..MAX_MEMORY_LENGTH.
    """
    packed &= 0xFFFFFFFF
    fields = {name: (packed >> offset) & ((1 << width) - 1) for name, offset, width in _FIELDS}
    exponent = fields["memory_length_exponent"]
    length = memory_length_rule(exponent)
    if not 1 <= length <= MAX_MEMORY_LENGTH:
        raise InstructionRangeError(
            f"Memory length must be 1-{MAX_MEMORY_LENGTH}, rule produced {length} for exponent {exponent}"
        )
    return DeviceCapabilities(program_memory_length=length, **fields)


def encode_capabilities(
    *,
    ns_pin_count: int = 0,
    sa_pin_count: int = 0,
    tms_out_count: int = 0,
    tms_in_count: int = 0,
    gpio_pin_count: int = 0,
    memory_length_exponent: int = 0,
) -> int:
    """Pack capability fields into a word, as the device reports them."""
    values = {
        "ns_pin_count": ns_pin_count,
        "sa_pin_count": sa_pin_count,
        "tms_out_count": tms_out_count,
        "tms_in_count": tms_in_count,
        "gpio_pin_count": gpio_pin_count,
        "memory_length_exponent": memory_length_exponent,
    }
    packed = 0
    for name, offset, width in _FIELDS:
        value = values[name]
        if not 0 <= value < (1 << width):
            raise InstructionRangeError(f"{name} must fit in {width} bits, got {value}")
        packed |= value << offset
    return packed
