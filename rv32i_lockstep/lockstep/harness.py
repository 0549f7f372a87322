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

"""Sequencing of named lockstep tests and run-level reporting.

Test Harness
============

A RunContext owns everything one harness execution needs: the hardware
model, the reference memory and interpreter, the lockstep driver, the
optional waveform writer and the run counters. It is acquired with
``RunContext.open()`` and releases the trace file and hardware model on
every exit path, including an exception in the middle of a test.

Per test (``LockstepHarness.run_test``):
    1. Log the banner
    2. Encode the program into the hardware instruction store and the
       reference memory (every slot refilled, NOP-padded)
    3. Reset both models through the driver
    4. Run up to ``cycle_budget`` lockstep rounds; the first mismatch logs
       its fields and a state dump, then aborts the test
    5. Log PASS/FAIL and an unconditional state dump

Counters accumulate across the whole run; ``exit_status`` is 1 iff any
test failed.

Example::

    async def main():
        with RunContext.open(SingleCycleCore, HarnessConfig()) as context:
            harness = LockstepHarness(context)
            await harness.run_suite(DEFAULT_SUITE)
            harness.report()
            return context.counters.exit_status
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from rv32i_lockstep.config import HarnessConfig
from rv32i_lockstep.encoders.program_encoder import (
    ByteAddressedTarget,
    EncodeReport,
    WordAddressedTarget,
    check_capacity,
    encode,
)
from rv32i_lockstep.exceptions import HarnessSetupError
from rv32i_lockstep.hardware.interface import HardwareModel
from rv32i_lockstep.lockstep.comparator import ComparisonVerdict
from rv32i_lockstep.lockstep.driver import LockstepDriver
from rv32i_lockstep.lockstep.suite import LockstepProgram
from rv32i_lockstep.models.memory_model import ReferenceMemory
from rv32i_lockstep.models.reference_cpu import ReferenceCPU
from rv32i_lockstep.utils.diagnostics import LockstepLogger
from rv32i_lockstep.utils.trace import VcdTraceWriter

logger = logging.getLogger(__name__)

HardwareFactory = Callable[[], HardwareModel]


@dataclass
class ProgramResult:
    """Outcome of one named test."""

    name: str
    passed: bool
    cycles: int
    mismatch_cycle: int | None = None
    verdict: ComparisonVerdict | None = None
    instructions_retired: int = 0


@dataclass
class RunCounters:
    """Run-level tallies; never reset during a harness execution."""

    tests_passed: int = 0
    tests_failed: int = 0
    total_cycles: int = 0
    results: list[ProgramResult] = field(default_factory=list)

    def record(self, result: ProgramResult) -> None:
        self.results.append(result)
        if result.passed:
            self.tests_passed += 1
        else:
            self.tests_failed += 1

    @property
    def exit_status(self) -> int:
        """Process exit code: 0 if every test passed, 1 otherwise."""
        return 0 if self.tests_failed == 0 else 1


@dataclass
class RunContext:
    """Resources of one harness execution, passed explicitly to every test."""

    config: HarnessConfig
    hardware: HardwareModel
    memory: ReferenceMemory
    reference: ReferenceCPU
    driver: LockstepDriver
    tracer: VcdTraceWriter | None = None
    counters: RunCounters = field(default_factory=RunCounters)

    @classmethod
    @contextmanager
    def open(
        cls, hardware_factory: HardwareFactory, config: HarnessConfig
    ) -> Iterator["RunContext"]:
        """Acquire the models and trace file; release them on exit.

        Raises:
            HarnessSetupError: If the hardware model or trace file cannot be
                created (the one condition that aborts the whole run)
        """
        try:
            hardware = hardware_factory()
        except Exception as e:
            raise HarnessSetupError(f"could not create hardware model: {e}") from e

        tracer = None
        try:
            if config.trace_path:
                try:
                    tracer = VcdTraceWriter(config.trace_path)
                except OSError as e:
                    raise HarnessSetupError(
                        f"could not open trace file {config.trace_path}: {e}"
                    ) from e
            memory = ReferenceMemory(config.reference_memory_bytes)
            reference = ReferenceCPU(memory)
            driver = LockstepDriver(hardware, reference, config, tracer)
            yield cls(config, hardware, memory, reference, driver, tracer)
        finally:
            if tracer is not None:
                tracer.close()
            hardware.close()


class LockstepHarness:
    """Runs LockstepPrograms against a RunContext with fail-fast-per-test semantics."""

    def __init__(self, context: RunContext) -> None:
        self.context = context

    @property
    def counters(self) -> RunCounters:
        return self.context.counters

    def load_program(self, words: Iterable[int]) -> list[EncodeReport]:
        """Encode a program into both models' instruction stores.

        With ``strict_capacity`` every store is checked before any is
        written, so an oversized program leaves both stores untouched.
        """
        context = self.context
        paths = context.config.signal_paths
        strict = context.config.strict_capacity
        program = list(words)
        targets = [
            WordAddressedTarget(
                context.hardware,
                paths.instruction_memory,
                paths.instruction_memory_words,
            ),
            ByteAddressedTarget(context.memory),
        ]
        if strict:
            check_capacity(len(program), targets)
        return [encode(program, target, strict=strict) for target in targets]

    async def run_test(
        self, name: str, program: Iterable[int], cycle_budget: int
    ) -> ProgramResult:
        """Load, reset and run one program in lockstep.

        Args:
            name: Test name for banners and results
            program: Program words
            cycle_budget: Maximum lockstep rounds

        Returns:
            ProgramResult; also recorded in the run counters
        """
        driver = self.context.driver
        LockstepLogger.log_test_banner(name)

        self.load_program(program)
        start_cycles = driver.hardware_cycles
        await driver.reset()

        result = ProgramResult(name=name, passed=True, cycles=0)
        try:
            for cycle in range(cycle_budget):
                verdict = await driver.step_and_compare(cycle)
                result.cycles += 1
                if not verdict.matched:
                    logger.error(f"Mismatch at cycle {cycle}")
                    for mismatch in verdict.mismatches:
                        LockstepLogger.log_mismatch(cycle, mismatch)
                    self._log_state(verdict.fields)
                    result.passed = False
                    result.mismatch_cycle = cycle
                    result.verdict = verdict
                    break
        finally:
            driver.finish()
            self.counters.total_cycles += driver.hardware_cycles - start_cycles

        result.instructions_retired = self.context.reference.instructions_retired
        self.counters.record(result)
        LockstepLogger.log_test_result(result)
        self._log_state(result.verdict.fields if result.verdict else frozenset())
        return result

    def _log_state(self, mismatched_fields: frozenset[str]) -> None:
        driver = self.context.driver
        reference = self.context.reference
        LockstepLogger.log_state_dump(
            driver.last_hardware,
            driver.last_reference,
            mismatched_fields,
            halt_reason=reference.halt_reason,
            instructions_retired=reference.instructions_retired,
        )

    async def run_program(self, program: LockstepProgram) -> ProgramResult:
        return await self.run_test(program.name, program.words, program.cycle_budget)

    async def run_suite(self, programs: Iterable[LockstepProgram]) -> list[ProgramResult]:
        """Run programs back to back; a failure never stops the next test."""
        return [await self.run_program(program) for program in programs]

    def report(self) -> int:
        """Log the run summary and return the exit status."""
        LockstepLogger.log_run_summary(self.counters)
        return self.counters.exit_status
