#    Copyright 2026 Two Sigma Open Source, LLC
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.

"""Tests for the behavioral single-cycle core."""

import asyncio

import pytest

from rv32i_lockstep.config import HardwareSignalPaths
from rv32i_lockstep.encoders.instruction_encode import enc_ecall
from rv32i_lockstep.encoders.op_tables import I_ALU, LOADS, R_ALU, STORES
from rv32i_lockstep.exceptions import SignalPathError
from rv32i_lockstep.hardware.interface import HardwareView
from rv32i_lockstep.hardware.single_cycle_core import SingleCycleCore

ADDI = I_ALU["addi"][0]


def clock(core: SingleCycleCore, cycles: int = 1) -> None:
    async def _clock():
        for _ in range(cycles):
            core.poke("clk", 1)
            await core.settle()
            core.poke("clk", 0)
            await core.settle()

    asyncio.run(_clock())


def load(core: SingleCycleCore, words) -> None:
    for index, word in enumerate(words):
        core.poke("imem.mem", word, index)


def test_state_changes_only_on_rising_edge(core):
    load(core, [ADDI(1, 0, 5)])
    asyncio.run(core.settle())
    core.poke("clk", 0)
    asyncio.run(core.settle())
    assert core.pc == 0
    assert core.cycles == 0

    clock(core)
    assert core.pc == 4
    assert core.registers[1] == 5
    assert core.cycles == 1


def test_reset_clears_pc_and_halted_only(core):
    load(core, [enc_ecall()])
    clock(core)
    assert core.halted
    core.poke("regfile.registers", 0xAA, 4)
    core.poke("dmem.mem", 0xBB, 2)

    core.poke("rst", 1)
    clock(core)
    core.poke("rst", 0)

    assert core.pc == 0
    assert not core.halted
    assert core.peek("regfile.registers", 4) == 0xAA
    assert core.peek("dmem.mem", 2) == 0xBB


def test_halt_advances_pc_once_then_freezes(core):
    load(core, [ADDI(1, 0, 1), 0x02208033, ADDI(1, 0, 2)])
    clock(core, 4)
    assert core.halted
    assert core.pc == 8
    assert core.registers[1] == 1


def test_x0_stays_zero(core):
    load(core, [ADDI(0, 0, 7), R_ALU["add"][0](1, 0, 0)])
    clock(core, 2)
    assert core.registers[0] == 0
    assert core.registers[1] == 0


def test_data_memory_is_word_addressed(core):
    load(
        core,
        [
            ADDI(1, 0, -1),
            ADDI(2, 0, 8),
            STORES["sh"](1, 2, 2),
            LOADS["lw"][0](3, 2, 0),
        ],
    )
    clock(core, 4)
    assert core.data_memory[2] == 0xFFFF0000
    assert core.registers[3] == 0xFFFF0000


def test_out_of_range_data_access(core):
    load(
        core,
        [
            ADDI(5, 0, 9),
            I_ALU["slli"][0](2, 5, 9),
            STORES["sw"](5, 2, 0),
            LOADS["lw"][0](5, 2, 0),
        ],
    )
    clock(core, 4)
    assert core.registers[2] == 9 << 9
    assert core.registers[5] == 0
    assert not core.halted


def test_poke_masks_to_width(core):
    core.poke("clk", 3)
    assert core.peek("clk") == 1
    core.poke("regfile.registers", 0x1_2345_6789, 1)
    assert core.peek("regfile.registers", 1) == 0x23456789


@pytest.mark.parametrize(
    "path, index",
    [("nope", None), ("regfile.registers", 32), ("regfile.registers", -1), ("nope", 0)],
)
def test_unknown_paths_raise(core, path, index):
    with pytest.raises(SignalPathError):
        core.peek(path, index)
    with pytest.raises(SignalPathError):
        core.poke(path, 0, index)


def test_snapshot_reports_halt_flag(core, config):
    load(core, [ADDI(1, 0, 1), enc_ecall()])
    view = HardwareView(core, config.signal_paths)
    clock(core)
    assert not view.snapshot().halted
    clock(core)
    assert view.snapshot().halted


@pytest.mark.parametrize("halted_path", [None, "no.such.flag"])
def test_snapshot_without_halt_flag_reports_running(core, halted_path):
    load(core, [enc_ecall()])
    clock(core)
    assert core.halted
    view = HardwareView(core, HardwareSignalPaths(halted=halted_path))
    assert view.halted() is False
    assert view.snapshot().halted is False


def test_core_keeps_halt_flag_under_configured_path():
    core = SingleCycleCore(HardwareSignalPaths(halted="cpu.halt"))
    load(core, [enc_ecall()])
    clock(core)
    assert core.peek("cpu.halt") == 1
    with pytest.raises(SignalPathError):
        core.peek("halted")
