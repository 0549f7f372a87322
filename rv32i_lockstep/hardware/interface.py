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

"""Whitebox boundary between the testbench and a hardware model.

Hardware Interface
==================

The driver and comparator never touch a particular simulator or netlist.
They go through a HardwareModel, which offers named-signal introspection:

    peek(path, index=None) -> int    read a signal or one array element
    poke(path, value, index=None)    force a signal or one array element
    await settle()                   re-evaluate combinational logic
    close()                          release the model

Paths are the dot-separated strings of HardwareSignalPaths. HardwareView
layers the architectural reading of those paths (PC, register file, data
memory) on top, producing StateSnapshots for the comparator.
"""

from typing import Protocol

from rv32i_lockstep.config import NUM_REGISTERS, HardwareSignalPaths
from rv32i_lockstep.exceptions import SignalPathError
from rv32i_lockstep.verification_types import RegisterIndex, StateSnapshot, WordIndex


class HardwareModel(Protocol):
    """Clock/reset-driven hardware with named, peekable storage."""

    def peek(self, path: str, index: int | None = None) -> int:
        """Return the current value of a signal (or element ``index`` of an array).

        Raises:
            SignalPathError: If the path or index does not exist
        """
        ...

    def poke(self, path: str, value: int, index: int | None = None) -> None:
        """Force a signal (or array element) to a value.

        Raises:
            SignalPathError: If the path or index does not exist
        """
        ...

    async def settle(self) -> None:
        """Propagate the last pokes through the combinational network."""
        ...

    def close(self) -> None:
        """Release simulator resources; further calls are undefined."""
        ...


class HardwareView:
    """Architectural view of a HardwareModel through configured paths."""

    def __init__(self, hardware: HardwareModel, paths: HardwareSignalPaths) -> None:
        self.hardware = hardware
        self.paths = paths

    def program_counter(self) -> int:
        return self.hardware.peek(self.paths.program_counter)

    def register(self, index: RegisterIndex) -> int:
        """Read register ``index``; x0 reads as zero regardless of storage."""
        if index == 0:
            return 0
        return self.hardware.peek(self.paths.register_file, index)

    def registers(self) -> tuple[int, ...]:
        return tuple(self.register(index) for index in range(NUM_REGISTERS))

    def halted(self) -> bool:
        """Read the halt flag; a model without one never reports halted."""
        if self.paths.halted is None:
            return False
        try:
            return bool(self.hardware.peek(self.paths.halted))
        except SignalPathError:
            return False

    def data_word(self, word_index: WordIndex) -> int:
        return self.hardware.peek(self.paths.data_memory, word_index)

    def clear_register_file(self) -> None:
        """Zero every register-file entry (not covered by the reset network)."""
        for index in range(NUM_REGISTERS):
            self.hardware.poke(self.paths.register_file, 0, index)

    def clear_data_memory(self) -> None:
        """Zero every data-memory word (not covered by the reset network)."""
        for word_index in range(self.paths.data_memory_words):
            self.hardware.poke(self.paths.data_memory, 0, word_index)

    def snapshot(self, memory_window: tuple[int, int] | None = None) -> StateSnapshot:
        """Capture PC, registers and optionally a window of data memory."""
        memory_words = None
        if memory_window is not None:
            first_word, word_count = memory_window
            memory_words = {
                index: self.data_word(index)
                for index in range(first_word, first_word + word_count)
            }
        return StateSnapshot(
            program_counter=self.program_counter(),
            registers=self.registers(),
            memory_words=memory_words,
            halted=self.halted(),
        )
