"""In-memory trigger program: one instruction buffer for one pin."""

from __future__ import annotations

from trgenctl.core.errors import InstructionRangeError
from trgenctl.protocol import instructions

SETTLE_US = 3
PULSE_SLOTS = 3


class TriggerProgram:
    """Fixed-length instruction memory addressed to ``pin_id``.

    Every slot starts as ``NOT_ADMISSIBLE``. Callers write ``END`` after the
    last meaningful instruction so the device never runs into stale slots.
    """

    def __init__(self, pin_id: int, length: int) -> None:
        if length < 1:
            raise InstructionRangeError(f"Program length must be >= 1, got {length}")
        self.pin_id = pin_id
        self._memory = [instructions.not_admissible()] * length

    def __len__(self) -> int:
        return len(self._memory)

    def __repr__(self) -> str:
        return f"TriggerProgram(pin_id={self.pin_id}, length={len(self)})"

    @property
    def slots(self) -> tuple[int, ...]:
        return tuple(self._memory)

    def set(self, index: int, instruction: int) -> None:
        if not 0 <= index < len(self._memory):
            raise InstructionRangeError(
                f"Instruction index {index} out of range for memory length {len(self._memory)}"
            )
        if not 0 <= instruction <= 0xFFFFFFFF:
            raise InstructionRangeError(f"Instruction must be a uint32, got {instruction}")
        self._memory[index] = instruction

    @classmethod
    def reset(cls, pin_id: int, length: int) -> TriggerProgram:
        """Program that does nothing: END in slot 0."""
        program = cls(pin_id, length)
        program.set(0, instructions.end())
        return program

    @classmethod
    def pulse(cls, pin_id: int, length: int, active_us: int, settle_us: int = SETTLE_US) -> TriggerProgram:
        """One-shot marker pulse: high for ``active_us``, low for ``settle_us``, END."""
        if length < PULSE_SLOTS:
            raise InstructionRangeError(
                f"A pulse needs at least {PULSE_SLOTS} instruction slots, device has {length}"
            )
        program = cls(pin_id, length)
        program.set(0, instructions.active_for_us(active_us))
        program.set(1, instructions.inactive_for_us(settle_us))
        program.set(2, instructions.end())
        return program
