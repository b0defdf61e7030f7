from __future__ import annotations

import pytest

from trgenctl.core.errors import InstructionRangeError
from trgenctl.core.program import TriggerProgram
from trgenctl.protocol import instructions


def test_new_program_is_all_not_admissible() -> None:
    program = TriggerProgram(pin_id=4, length=8)
    assert len(program) == 8
    assert program.slots == (instructions.not_admissible(),) * 8


def test_zero_length_rejected() -> None:
    with pytest.raises(InstructionRangeError):
        TriggerProgram(pin_id=0, length=0)


@pytest.mark.parametrize("index", [-1, 16, 100])
def test_set_out_of_range(index: int) -> None:
    program = TriggerProgram(pin_id=0, length=16)
    with pytest.raises(InstructionRangeError):
        program.set(index, instructions.end())


def test_set_last_slot() -> None:
    program = TriggerProgram(pin_id=0, length=16)
    program.set(15, instructions.end())
    assert program.slots[15] == instructions.end()


def test_slots_is_read_only_view() -> None:
    program = TriggerProgram(pin_id=0, length=4)
    slots = program.slots
    program.set(0, instructions.end())
    assert slots[0] == instructions.not_admissible()


def test_reset_program_layout() -> None:
    program = TriggerProgram.reset(pin_id=9, length=32)
    assert program.pin_id == 9
    assert program.slots[0] == instructions.end()
    assert all(w == instructions.not_admissible() for w in program.slots[1:])


def test_reset_program_single_slot() -> None:
    assert TriggerProgram.reset(pin_id=0, length=1).slots == (instructions.end(),)


def test_pulse_program_layout() -> None:
    program = TriggerProgram.pulse(pin_id=18, length=32, active_us=20)
    assert program.slots[:3] == (
        instructions.active_for_us(20),
        instructions.inactive_for_us(3),
        instructions.end(),
    )
    assert all(w == instructions.not_admissible() for w in program.slots[3:])


def test_pulse_needs_three_slots() -> None:
    with pytest.raises(InstructionRangeError):
        TriggerProgram.pulse(pin_id=0, length=2, active_us=20)
