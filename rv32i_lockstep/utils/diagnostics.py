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

"""Structured logging for lockstep runs.

Lockstep Logger
===============

Every human-readable line the harness produces goes through this module so
the format stays consistent between the CLI and the cocotb entry point:
test banners, per-cycle traces, mismatch lines, state dumps and the final
run summary. Output uses the ``rv32i_lockstep.utils.diagnostics`` logger;
the CLI routes it to stdout and under cocotb the simulator's handler
picks it up.
"""

import logging
from typing import TYPE_CHECKING

from rv32i_lockstep.config import NUM_REGISTERS
from rv32i_lockstep.verification_types import StateSnapshot

if TYPE_CHECKING:
    from rv32i_lockstep.lockstep.comparator import FieldMismatch
    from rv32i_lockstep.lockstep.harness import ProgramResult, RunCounters

logger = logging.getLogger(__name__)

BANNER_WIDTH = 60


class LockstepLogger:
    """Formatted log output for lockstep verification runs."""

    @staticmethod
    def log_run_header() -> None:
        logger.info("=" * BANNER_WIDTH)
        logger.info("RV32I Lockstep Verification")
        logger.info("Hardware vs Reference Model Comparison")
        logger.info("=" * BANNER_WIDTH)

    @staticmethod
    def log_test_banner(name: str) -> None:
        """Announce the start of a test."""
        logger.info(f"===== Running Test: {name} =====")

    @staticmethod
    def log_cycle(cycle: int, pc: int, instruction: str) -> None:
        """Trace one lockstep round at DEBUG level.

        Args:
            cycle: Round index within the current test
            pc: Reference PC before the instruction executed
            instruction: Disassembly of the executed instruction
        """
        logger.debug(f"[Cycle {cycle:5d}] PC: 0x{pc:08x}  {instruction}")

    @staticmethod
    def log_mismatch(cycle: int, mismatch: "FieldMismatch") -> None:
        """Log one divergent field."""
        logger.error(f"[Cycle {cycle:5d}] {mismatch.describe()}")

    @staticmethod
    def log_state_dump(
        hardware: StateSnapshot,
        reference: StateSnapshot,
        mismatched_fields: frozenset[str] = frozenset(),
        halt_reason: str | None = None,
        instructions_retired: int | None = None,
    ) -> None:
        """Dump PC, non-zero registers and any compared memory of both sides.

        A register is listed when either side holds a non-zero value;
        differing entries carry a ``MISMATCH!`` marker.

        Args:
            hardware: Hardware snapshot
            reference: Reference snapshot
            mismatched_fields: Field names to mark as mismatching
            halt_reason: Why the reference halted, if it did
            instructions_retired: Instructions the reference executed since reset
        """
        logger.info("=== CPU State ===")
        logger.info(
            f"PC: HW=0x{hardware.program_counter:08x} "
            f"REF=0x{reference.program_counter:08x}"
        )
        if reference.halted or hardware.halted:
            logger.info(f"Halted: HW={hardware.halted} REF={reference.halted}")
        if halt_reason:
            logger.info(f"Reference halt reason: {halt_reason}")
        if instructions_retired is not None:
            logger.info(f"Instructions retired (REF): {instructions_retired}")

        logger.info("Registers (non-zero):")
        for index in range(1, NUM_REGISTERS):
            hw_value = hardware.registers[index]
            ref_value = reference.registers[index]
            if hw_value == 0 and ref_value == 0:
                continue
            marker = " MISMATCH!" if f"x{index}" in mismatched_fields else ""
            logger.info(f"  x{index:<2d}: HW={hw_value:>10d} REF={ref_value:>10d}{marker}")

        if hardware.memory_words is not None and reference.memory_words is not None:
            logger.info("Data memory (compared window, non-zero):")
            for word_index in sorted(reference.memory_words):
                hw_word = hardware.memory_words.get(word_index, 0)
                ref_word = reference.memory_words[word_index]
                if hw_word == 0 and ref_word == 0:
                    continue
                marker = " MISMATCH!" if hw_word != ref_word else ""
                logger.info(
                    f"  [0x{word_index:04x}]: HW=0x{hw_word:08x} REF=0x{ref_word:08x}{marker}"
                )

    @staticmethod
    def log_test_result(result: "ProgramResult") -> None:
        """Log the PASS/FAIL line of a finished test."""
        if result.passed:
            logger.info(f"PASS: {result.name}")
        else:
            logger.info(
                f"FAIL: {result.name} (first mismatch at cycle {result.mismatch_cycle})"
            )

    @staticmethod
    def log_run_summary(counters: "RunCounters") -> None:
        """Log the aggregate counters of the run."""
        logger.info("=" * BANNER_WIDTH)
        logger.info("Test Summary")
        logger.info("=" * BANNER_WIDTH)
        logger.info(f"Tests Passed: {counters.tests_passed}")
        logger.info(f"Tests Failed: {counters.tests_failed}")
        logger.info(f"Total Cycles: {counters.total_cycles}")
        if counters.tests_failed == 0:
            logger.info("*** ALL TESTS PASSED ***")
        else:
            logger.info("*** SOME TESTS FAILED ***")
