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

"""Cycle/instruction lockstep between a hardware model and the reference.

Lockstep Driver
===============

Advances the hardware by one clock cycle and the reference interpreter by
one instruction per round, then compares their architectural state.

State Machine:
    IDLE -> RESETTING -> RUNNING -> TEST_IDLE -> RESETTING -> ...

    reset()             IDLE/RUNNING/TEST_IDLE -> RESETTING -> RUNNING
    step_and_compare()  only legal in RUNNING
    finish()            RUNNING -> TEST_IDLE

Reset Protocol:
    1. Assert reset and clock it for ``reset_cycles`` (at least 5) cycles
    2. De-assert reset and settle
    3. Zero every register-file and data-memory word by path; the hardware
       reset network does not reach them
    4. Re-initialize the reference interpreter (PC=0, registers 0)

Round Ordering:
    Both hardware half-cycles complete before the reference step, and the
    comparison runs after both. The one-cycle-per-instruction mapping holds
    only for a single-cycle hardware model; a pipelined core would need the
    driver to follow retirement instead of cycles.

The coroutines are meant to be awaited one at a time from a single task.
They are async only so a simulator-backed model can yield to its
simulator inside ``settle()``.
"""

import enum
import logging

from rv32i_lockstep.config import MEMORY_WORD_SIZE_BYTES, HarnessConfig
from rv32i_lockstep.exceptions import LockstepStateError
from rv32i_lockstep.hardware.interface import HardwareModel, HardwareView
from rv32i_lockstep.lockstep.comparator import ComparisonVerdict, compare
from rv32i_lockstep.models.reference_cpu import ReferenceCPU
from rv32i_lockstep.utils.diagnostics import LockstepLogger
from rv32i_lockstep.utils.trace import HARDWARE_SCOPE, REFERENCE_SCOPE, VcdTraceWriter
from rv32i_lockstep.verification_types import StateSnapshot

logger = logging.getLogger(__name__)


class DriverState(enum.Enum):
    IDLE = "idle"
    RESETTING = "resetting"
    RUNNING = "running"
    TEST_IDLE = "test idle"


class LockstepDriver:
    """Owns the reset protocol and the per-round lockstep step.

    Attributes:
        hardware: Cycle-level model under test
        reference: Golden instruction-level interpreter
        config: Harness configuration (reset length, compare window, paths)
        tracer: Optional waveform sink sampled after every half-cycle
        state: Current DriverState
        hardware_cycles: Clock cycles driven since construction, reset included
        last_hardware: Hardware snapshot from the most recent round
        last_reference: Reference snapshot from the most recent round
    """

    def __init__(
        self,
        hardware: HardwareModel,
        reference: ReferenceCPU,
        config: HarnessConfig,
        tracer: VcdTraceWriter | None = None,
    ) -> None:
        self.hardware = hardware
        self.reference = reference
        self.config = config
        self.tracer = tracer
        self.view = HardwareView(hardware, config.signal_paths)
        self.state = DriverState.IDLE
        self.hardware_cycles = 0
        self._half_cycles = 0
        self.last_hardware: StateSnapshot | None = None
        self.last_reference: StateSnapshot | None = None

    async def tick(self) -> None:
        """Drive one clock cycle: clk high, settle, clk low, settle."""
        paths = self.config.signal_paths
        self.hardware.poke(paths.clock, 1)
        await self.hardware.settle()
        self._sample()
        self.hardware.poke(paths.clock, 0)
        await self.hardware.settle()
        self._sample()
        self.hardware_cycles += 1

    async def reset(self) -> None:
        """Reset both models (see module docstring for the protocol)."""
        self.state = DriverState.RESETTING
        paths = self.config.signal_paths

        self.hardware.poke(paths.reset, 1)
        for _ in range(self.config.reset_cycles):
            await self.tick()
        self.hardware.poke(paths.reset, 0)
        await self.hardware.settle()

        self.view.clear_register_file()
        self.view.clear_data_memory()
        self.reference.initialize()
        self._clear_reference_window()

        self.last_hardware = self.view.snapshot(self.config.memory_compare_window)
        self.last_reference = self.reference.snapshot(self.config.memory_compare_window)
        self.state = DriverState.RUNNING
        logger.debug(
            f"Reset complete after {self.config.reset_cycles} cycles "
            f"(hardware PC=0x{self.last_hardware.program_counter:08x})"
        )

    async def step_and_compare(self, cycle: int = 0) -> ComparisonVerdict:
        """Run one lockstep round and compare.

        Args:
            cycle: Round index, used only for the DEBUG trace line

        Raises:
            LockstepStateError: If the driver is not RUNNING
        """
        if self.state is not DriverState.RUNNING:
            raise LockstepStateError(
                f"step_and_compare() requires {DriverState.RUNNING.name}, "
                f"driver is {self.state.name}"
            )

        pc = self.reference.get_program_counter()
        instruction = self.reference.current_instruction()
        await self.tick()
        self.reference.step()
        if logger.isEnabledFor(logging.DEBUG):
            LockstepLogger.log_cycle(
                cycle, pc, str(instruction) if instruction else "<illegal>"
            )

        window = self.config.memory_compare_window
        self.last_hardware = self.view.snapshot(window)
        self.last_reference = self.reference.snapshot(window)
        return compare(self.last_hardware, self.last_reference)

    def finish(self) -> None:
        """End the current test; a new reset() is needed before stepping again."""
        self.state = DriverState.TEST_IDLE

    def _clear_reference_window(self) -> None:
        # Mirror the hardware data-memory clear for the compared words only;
        # the rest of the unified reference memory holds the program image
        window = self.config.memory_compare_window
        if window is None:
            return
        first_word, word_count = window
        for index in range(first_word, first_word + word_count):
            self.reference.memory.write_word(index * MEMORY_WORD_SIZE_BYTES, 0)

    def _sample(self) -> None:
        self._half_cycles += 1
        if self.tracer is None:
            return
        paths = self.config.signal_paths
        values = {
            (HARDWARE_SCOPE, "clk"): self.hardware.peek(paths.clock),
            (HARDWARE_SCOPE, "rst"): self.hardware.peek(paths.reset),
            (HARDWARE_SCOPE, "pc"): self.view.program_counter(),
            (REFERENCE_SCOPE, "pc"): self.reference.get_program_counter(),
            (REFERENCE_SCOPE, "halted"): int(self.reference.is_halted()),
        }
        for index, value in enumerate(self.view.registers()):
            if index:
                values[(HARDWARE_SCOPE, f"x{index}")] = value
        self.tracer.sample(self._half_cycles, values)
