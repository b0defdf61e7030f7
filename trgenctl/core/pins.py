"""Pin identifier table shared with the device firmware."""

from __future__ import annotations

import re
from enum import Enum

from trgenctl.core.errors import InstructionRangeError, PinResolutionError
from trgenctl.core.model import BitOrder

MASK_WIDTH = 8
_PIN_NAME_RE = re.compile(r"^(ns|sa|gpio)([0-7])$|^(tmso|tmsi)$", re.IGNORECASE)


class PinClass(str, Enum):
    NEUROSCAN = "ns"
    SYNAMPS = "sa"
    GPIO = "gpio"
    TMSO = "tmso"
    TMSI = "tmsi"


class TriggerPin:
    NS0, NS1, NS2, NS3, NS4, NS5, NS6, NS7 = range(0, 8)
    SA0, SA1, SA2, SA3, SA4, SA5, SA6, SA7 = range(8, 16)
    TMSO = 16
    TMSI = 17
    GPIO0, GPIO1, GPIO2, GPIO3, GPIO4, GPIO5, GPIO6, GPIO7 = range(18, 26)

    ALL_NS: tuple[int, ...] = tuple(range(0, 8))
    ALL_SA: tuple[int, ...] = tuple(range(8, 16))
    ALL_GPIO: tuple[int, ...] = tuple(range(18, 26))


PINS_BY_CLASS: dict[PinClass, tuple[int, ...]] = {
    PinClass.NEUROSCAN: TriggerPin.ALL_NS,
    PinClass.SYNAMPS: TriggerPin.ALL_SA,
    PinClass.GPIO: TriggerPin.ALL_GPIO,
    PinClass.TMSO: (TriggerPin.TMSO,),
    PinClass.TMSI: (TriggerPin.TMSI,),
}

_NAME_BY_ID: dict[int, str] = {}
for _cls, _ids in PINS_BY_CLASS.items():
    for _index, _pin_id in enumerate(_ids):
        _NAME_BY_ID[_pin_id] = _cls.value.upper() if len(_ids) == 1 else f"{_cls.value.upper()}{_index}"


def pin_name(pin_id: int) -> str:
    try:
        return _NAME_BY_ID[pin_id]
    except KeyError as exc:
        raise PinResolutionError(f"Unknown pin id {pin_id}") from exc


def parse_pin(value: str | int) -> int:
    """Resolve ``"ns3"``, ``"GPIO7"``, ``"tmso"`` or a numeric id to a pin id."""
    if isinstance(value, int):
        pin_name(value)
        return value
    text = value.strip()
    if text.isdigit():
        return parse_pin(int(text))
    match = _PIN_NAME_RE.match(text)
    if not match:
        raise PinResolutionError(f"Unknown pin '{value}'. Expected NS0-7, SA0-7, GPIO0-7, TMSO, TMSI or an id")
    if match.group(3):
        return PINS_BY_CLASS[PinClass(match.group(3).lower())][0]
    return PINS_BY_CLASS[PinClass(match.group(1).lower())][int(match.group(2))]


def mask_indices(mask: int, bit_order: BitOrder = BitOrder.LSB_FIRST) -> list[int]:
    """Pin indices (0-7) selected by an 8-bit marker mask.

    With ``LSB_FIRST`` bit ``i`` selects index ``i``. With ``MSB_FIRST`` the
    mask is read from its most significant bit, so bit 7 selects index 0.
    """
    if not 0 <= mask < (1 << MASK_WIDTH):
        raise InstructionRangeError(f"Marker mask must be 0-255, got {mask}")
    selected = [i for i in range(MASK_WIDTH) if mask >> i & 1]
    if bit_order is BitOrder.MSB_FIRST:
        return sorted(MASK_WIDTH - 1 - i for i in selected)
    return selected


def mask_pins(mask: int, pin_class: PinClass, bit_order: BitOrder = BitOrder.LSB_FIRST) -> list[int]:
    pins = PINS_BY_CLASS[pin_class]
    return [pins[i] for i in mask_indices(mask, bit_order)]
