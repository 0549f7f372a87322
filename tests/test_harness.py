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

"""End-to-end tests of the harness against the behavioral core."""

import asyncio
import logging

import pytest

from rv32i_lockstep.config import HarnessConfig, HardwareSignalPaths
from rv32i_lockstep.exceptions import HarnessSetupError, ProgramCapacityError
from rv32i_lockstep.hardware.single_cycle_core import SingleCycleCore
from rv32i_lockstep.lockstep.harness import LockstepHarness, RunContext
from rv32i_lockstep.lockstep.suite import (
    DEFAULT_SUITE,
    HALT_ON_ECALL,
    MEMORY_ROUND_TRIP,
    SIMPLE_ADD,
    SUBTRACTION,
)
from rv32i_lockstep.models.alu_model import sub


class FaultySubtractCore(SingleCycleCore):
    """Core whose subtractor is off by one."""

    def _alu(self, funct3, alternate, operand_a, operand_b):
        if alternate and funct3 == 0:
            return sub(operand_a, operand_b) + 1
        return super()._alu(funct3, alternate, operand_a, operand_b)


def run_programs(programs, config=None, core_class=SingleCycleCore):
    config = config or HarnessConfig()
    cores = []

    def factory():
        cores.append(core_class(config.signal_paths))
        return cores[-1]

    async def scenario():
        with RunContext.open(factory, config) as context:
            harness = LockstepHarness(context)
            await harness.run_suite(programs)
            return context.counters, harness.report()

    counters, status = asyncio.run(scenario())
    return counters, status, cores[0]


def test_default_suite_passes(caplog):
    counters, status, core = run_programs(DEFAULT_SUITE)

    assert status == 0
    assert counters.tests_passed == len(DEFAULT_SUITE)
    assert counters.tests_failed == 0
    reset_cycles = HarnessConfig().reset_cycles
    assert counters.total_cycles == sum(
        reset_cycles + program.cycle_budget for program in DEFAULT_SUITE
    )
    assert "PASS: Simple Add" in caplog.text
    assert "*** ALL TESTS PASSED ***" in caplog.text
    assert core.closed


def test_faulty_core_fails_fast_and_next_test_still_runs(caplog):
    counters, status, _ = run_programs(
        [SUBTRACTION, SIMPLE_ADD], core_class=FaultySubtractCore
    )

    assert status == 1
    failed, passed = counters.results
    assert not failed.passed
    assert failed.mismatch_cycle == 2
    assert failed.cycles == 3
    assert failed.verdict.fields == {"x3"}
    assert passed.passed
    assert counters.total_cycles == (5 + 3) + (5 + 4)

    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert "Mismatch at cycle 2" in errors
    assert "[Cycle     2] REG x3 MISMATCH: HW=8 REF=7" in errors
    assert "FAIL: Subtraction (first mismatch at cycle 2)" in caplog.text
    assert "MISMATCH!" in caplog.text
    assert "*** SOME TESTS FAILED ***" in caplog.text
    # Failing test dumps at the mismatch and at the end; passing test once
    assert caplog.text.count("=== CPU State ===") == 3


def test_memory_window_compares_data_memory():
    config = HarnessConfig(memory_compare_window=(0x100, 4))
    counters, status, core = run_programs([MEMORY_ROUND_TRIP], config)

    assert status == 0
    assert core.data_memory[0x100] == 0x12345678
    assert core.data_memory[0x101] == 0xFFFF


def test_trace_file_is_written(tmp_path):
    trace = tmp_path / "run.vcd"
    run_programs([SIMPLE_ADD], HarnessConfig(trace_path=str(trace)))

    text = trace.read_text()
    assert "cpu_top" in text
    assert "reference" in text
    assert "$enddefinitions" in text


def test_unwritable_trace_aborts_setup(tmp_path):
    config = HarnessConfig(trace_path=str(tmp_path / "missing" / "run.vcd"))
    core = SingleCycleCore()

    with pytest.raises(HarnessSetupError):
        with RunContext.open(lambda: core, config):
            pass
    assert core.closed


def test_factory_failure_is_a_setup_error():
    def factory():
        raise RuntimeError("simulator not found")

    with pytest.raises(HarnessSetupError, match="simulator not found"):
        with RunContext.open(factory, HarnessConfig()):
            pass


def test_strict_capacity_overflow_propagates():
    paths = HardwareSignalPaths(instruction_memory_words=2)
    config = HarnessConfig(strict_capacity=True, signal_paths=paths)

    with pytest.raises(ProgramCapacityError):
        run_programs([SIMPLE_ADD], config)


def test_truncated_program_still_runs(caplog):
    paths = HardwareSignalPaths(instruction_memory_words=3)
    counters, _, core = run_programs([SIMPLE_ADD], HarnessConfig(signal_paths=paths))

    assert "dropping the last 1 words" in caplog.text
    assert core.instruction_memory == list(SIMPLE_ADD.words[:3])
    assert counters.results[0].passed


def test_halt_is_reported_for_both_models(caplog):
    counters, status, core = run_programs([HALT_ON_ECALL])

    assert status == 0
    assert core.halted
    assert counters.results[0].instructions_retired == 2
    assert "Halted: HW=True REF=True" in caplog.text
    assert "Reference halt reason: ecall at 0x00000004" in caplog.text
    assert "Reference model halted: ecall at 0x00000004" in caplog.text
    assert "Instructions retired (REF): 2" in caplog.text


def test_instructions_retired_is_recorded_per_test(caplog):
    counters, _, _ = run_programs([SIMPLE_ADD, HALT_ON_ECALL])

    assert [r.instructions_retired for r in counters.results] == [4, 2]
    assert "Instructions retired (REF): 4" in caplog.text


def test_strict_capacity_checks_every_store_before_writing():
    config = HarnessConfig(strict_capacity=True, reference_memory_bytes=8)
    core = SingleCycleCore(config.signal_paths)

    with RunContext.open(lambda: core, config) as context:
        with pytest.raises(ProgramCapacityError) as excinfo:
            LockstepHarness(context).load_program(SIMPLE_ADD.words)
        assert context.memory.read_word(0) == 0

    assert excinfo.value.target == "reference memory"
    assert core.instruction_memory[:4] == [0, 0, 0, 0]
