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

"""Tests for the lockstep driver's reset protocol and round sequencing."""

import asyncio

import pytest

from rv32i_lockstep.config import HarnessConfig
from rv32i_lockstep.encoders.program_encoder import (
    ByteAddressedTarget,
    WordAddressedTarget,
    encode,
)
from rv32i_lockstep.exceptions import LockstepStateError
from rv32i_lockstep.hardware.single_cycle_core import SingleCycleCore
from rv32i_lockstep.lockstep.driver import DriverState, LockstepDriver
from rv32i_lockstep.lockstep.suite import SIMPLE_ADD
from rv32i_lockstep.models.memory_model import ReferenceMemory
from rv32i_lockstep.models.reference_cpu import ReferenceCPU


def load_both(driver: LockstepDriver, words) -> None:
    paths = driver.config.signal_paths
    encode(words, WordAddressedTarget(driver.hardware, paths.instruction_memory, 64))
    encode(words, ByteAddressedTarget(driver.reference.memory))


def test_reset_clears_unreset_storage(driver, core, cpu):
    core.registers[5] = 0xDEAD
    core.data_memory[100] = 0xBEEF
    cpu.set_register(5, 0xDEAD)
    core.pc = 0x40

    asyncio.run(driver.reset())

    assert driver.state is DriverState.RUNNING
    assert core.registers == [0] * 32
    assert not any(core.data_memory)
    assert core.pc == 0
    assert cpu.get_register(5) == 0
    assert cpu.get_program_counter() == 0
    assert driver.last_hardware == driver.last_reference


def test_step_before_reset_is_rejected(driver):
    with pytest.raises(LockstepStateError):
        asyncio.run(driver.step_and_compare())


def test_step_after_finish_is_rejected(driver):
    async def scenario():
        await driver.reset()
        await driver.step_and_compare()
        driver.finish()
        await driver.step_and_compare()

    with pytest.raises(LockstepStateError):
        asyncio.run(scenario())
    assert driver.state is DriverState.TEST_IDLE


def test_rounds_match_on_a_correct_core(driver, config):
    load_both(driver, SIMPLE_ADD.words)

    async def scenario():
        await driver.reset()
        return [await driver.step_and_compare(cycle) for cycle in range(4)]

    verdicts = asyncio.run(scenario())
    assert all(verdict.matched for verdict in verdicts)
    assert driver.last_hardware.registers[3] == 8
    assert driver.hardware_cycles == config.reset_cycles + 4
    assert driver._half_cycles == 2 * driver.hardware_cycles


def test_longer_reset_is_honored():
    config = HarnessConfig(reset_cycles=9)
    core = SingleCycleCore(config.signal_paths)
    driver = LockstepDriver(core, ReferenceCPU(ReferenceMemory(4096)), config)
    asyncio.run(driver.reset())
    assert core.cycles == 9
    assert driver.hardware_cycles == 9


def test_memory_window_clears_reference_words():
    config = HarnessConfig(memory_compare_window=(0x100, 4))
    memory = ReferenceMemory(4096)
    memory.write_word(0x400, 0x12345678)
    memory.write_word(0x410, 0x9ABCDEF0)
    driver = LockstepDriver(SingleCycleCore(config.signal_paths), ReferenceCPU(memory), config)

    asyncio.run(driver.reset())

    assert memory.read_word(0x400) == 0
    assert memory.read_word(0x410) == 0x9ABCDEF0
    assert driver.last_reference.memory_words == {0x100: 0, 0x101: 0, 0x102: 0, 0x103: 0}
    assert driver.last_hardware.memory_words == driver.last_reference.memory_words
