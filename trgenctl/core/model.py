"""Core data models used across protocol, session, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    READY = "ready"


class BitOrder(str, Enum):
    """How the 8 bits of a marker mask map onto pin indices 0..7."""

    LSB_FIRST = "lsb"
    MSB_FIRST = "msb"


@dataclass(frozen=True)
class DeviceCapabilities:
    ns_pin_count: int
    sa_pin_count: int
    tms_out_count: int
    tms_in_count: int
    gpio_pin_count: int
    memory_length_exponent: int
    program_memory_length: int


@dataclass(frozen=True)
class Frame:
    command_id: int
    payload: tuple[int, ...]
    checksum: int

    def __repr__(self) -> str:
        words = " ".join(f"0x{w:08X}" for w in self.payload) if self.payload else "(empty)"
        return f"Frame(command=0x{self.command_id:08X}, payload={words}, crc=0x{self.checksum:08X})"


@dataclass(frozen=True)
class Acknowledgment:
    command_id: int
    value: int
    raw: str


@dataclass(frozen=True)
class DeviceConfig:
    host: str = "192.168.123.1"
    port: int = 4242
    timeout_s: float = 2.0
    pulse_width_us: int = 20
    bit_order: BitOrder = BitOrder.LSB_FIRST
