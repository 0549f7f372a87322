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

"""Type aliases and custom types for the testbench.

Types
=====

This module defines NewTypes for better type safety and code clarity
throughout the testbench, plus the StateSnapshot record exchanged between
the models and the comparator.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import NewType

# Memory-related types
Address = NewType("Address", int)
"""32-bit byte address (0 to 2^32-1)."""

WordIndex = NewType("WordIndex", int)
"""Index into a word-addressed store (instruction store, data memory)."""

# Register-related types
RegisterIndex = NewType("RegisterIndex", int)
"""RISC-V register index (0-31, where 0 is hardwired to zero)."""

# Instruction-related types
Instruction = NewType("Instruction", int)
"""32-bit encoded RISC-V instruction."""


# ============================================================================
# Architectural snapshots
# ============================================================================


@dataclass(frozen=True)
class StateSnapshot:
    """Immutable view of one model's architectural state after a round.

    Both the reference interpreter and the hardware view produce these so
    the comparator never touches either model directly.

    Attributes:
        program_counter: PC value
        registers: 32 register values, registers[0] always 0
        memory_words: Optional word index -> value window of data memory
        halted: Whether the model has stopped (informational, not compared)
    """

    program_counter: int
    registers: tuple[int, ...]
    memory_words: Mapping[int, int] | None = None
    halted: bool = False
