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

"""Lockstep differential tests of an RTL core against the reference model.

Lockstep Tests
==============

Each test wraps the DUT in a CocotbHardware model and hands it to the same
RunContext/LockstepHarness the command-line tool uses, so a program behaves
identically under the behavioral core and under RTL simulation.

Tests:
    test_lockstep_default_suite
        Every program in DEFAULT_SUITE; fails with MismatchError naming the
        first divergent test

    test_lockstep_hex_program
        A single ``$readmemh`` program from LOCKSTEP_PROGRAM, run for
        LOCKSTEP_CYCLES rounds (skipped when LOCKSTEP_PROGRAM is unset)

    test_reset_clears_unreset_storage
        Dirties the register file and data memory, resets, and checks the
        driver cleared them

Usage:
    make SIM=verilator TOPLEVEL=cpu_top COCOTB_TEST_MODULES=cocotb_tests.test_lockstep
    make ... LOCKSTEP_TRACE=lockstep.vcd LOCKSTEP_MEMORY_WINDOW=0x100:16
"""

import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import cocotb

from rv32i_lockstep.config import DEFAULT_CYCLE_BUDGET, NUM_REGISTERS, HarnessConfig
from rv32i_lockstep.encoders.program_encoder import load_hex_program
from rv32i_lockstep.exceptions import MismatchError
from rv32i_lockstep.hardware.cocotb_dut import CocotbHardware
from rv32i_lockstep.lockstep.harness import LockstepHarness, RunContext, RunCounters
from rv32i_lockstep.lockstep.suite import DEFAULT_SUITE, LockstepProgram
from rv32i_lockstep.utils.diagnostics import LockstepLogger


async def run_lockstep_programs(
    dut: Any,
    programs: Iterable[LockstepProgram],
    config: HarnessConfig | None = None,
) -> RunCounters:
    """Run programs against the DUT in lockstep and return the counters.

    Args:
        dut: Device under test (cocotb SimHandle for cpu_top)
        programs: Programs to run back to back
        config: Harness configuration. If None, read from LOCKSTEP_* variables.
    """
    if config is None:
        config = HarnessConfig.from_environment()

    with RunContext.open(lambda: CocotbHardware(dut), config) as context:
        harness = LockstepHarness(context)
        LockstepLogger.log_run_header()
        await harness.run_suite(programs)
        harness.report()
        return context.counters


def raise_on_failure(counters: RunCounters) -> None:
    """Turn a failed run into a MismatchError for cocotb's result reporting."""
    failed = [result for result in counters.results if not result.passed]
    if not failed:
        return
    first = failed[0]
    raise MismatchError(
        f"{len(failed)} of {len(counters.results)} lockstep tests failed; "
        f"first: {first.name} at cycle {first.mismatch_cycle}",
        verdict=first.verdict,
        cycle=first.mismatch_cycle,
    )


@cocotb.test()
async def test_lockstep_default_suite(dut: Any) -> None:
    """Run the built-in programs against the RTL."""
    raise_on_failure(await run_lockstep_programs(dut, DEFAULT_SUITE))


@cocotb.test()
async def test_lockstep_hex_program(dut: Any) -> None:
    """Run the program named by LOCKSTEP_PROGRAM against the RTL."""
    program_path = os.environ.get("LOCKSTEP_PROGRAM")
    if not program_path:
        cocotb.log.info("LOCKSTEP_PROGRAM not set, nothing to run")
        return
    cycles = int(os.environ.get("LOCKSTEP_CYCLES", DEFAULT_CYCLE_BUDGET))
    program = LockstepProgram(
        Path(program_path).stem,
        tuple(load_hex_program(program_path)),
        cycle_budget=cycles,
    )
    raise_on_failure(await run_lockstep_programs(dut, [program]))


@cocotb.test()
async def test_reset_clears_unreset_storage(dut: Any) -> None:
    """The reset protocol zeroes the register file and data memory."""
    config = HarnessConfig.from_environment()
    paths = config.signal_paths
    with RunContext.open(lambda: CocotbHardware(dut), config) as context:
        hardware = context.hardware
        for index in range(1, NUM_REGISTERS):
            hardware.poke(paths.register_file, 0xDEAD0000 | index, index)
        for word_index in range(0, paths.data_memory_words, 64):
            hardware.poke(paths.data_memory, 0xFFFFFFFF, word_index)

        await context.driver.reset()

        dirty_registers = [
            index
            for index in range(1, NUM_REGISTERS)
            if hardware.peek(paths.register_file, index)
        ]
        dirty_words = [
            word_index
            for word_index in range(0, paths.data_memory_words, 64)
            if hardware.peek(paths.data_memory, word_index)
        ]
        assert not dirty_registers, f"registers not cleared: {dirty_registers}"
        assert not dirty_words, f"data memory words not cleared: {dirty_words}"
        assert hardware.peek(paths.program_counter) == 0
