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

"""Architectural state comparison between hardware and reference.

State Comparator
================

After every lockstep round the driver captures a StateSnapshot from each
side and calls ``compare()``. The verdict lists one FieldMismatch per
differing field:

    - "pc"            program counter
    - "x1" .. "x31"   general registers (x0 is hardwired, never compared)
    - "mem[0x...]"    data memory words, only when both snapshots carry a
                      memory window

Verdicts are plain values, produced fresh each round and never stored by
the comparator; a divergence is not an exception.
"""

from dataclasses import dataclass

from rv32i_lockstep.config import MASK32, NUM_REGISTERS
from rv32i_lockstep.verification_types import StateSnapshot

PC_FIELD = "pc"


def register_field(index: int) -> str:
    return f"x{index}"


def memory_field(word_index: int) -> str:
    return f"mem[0x{word_index:08x}]"


@dataclass(frozen=True)
class FieldMismatch:
    """One differing architectural field.

    Attributes:
        field: Field identifier ("pc", "x5", "mem[0x00000100]")
        hardware_value: Value observed in the hardware model
        reference_value: Value held by the reference interpreter
    """

    field: str
    hardware_value: int
    reference_value: int

    @property
    def is_register(self) -> bool:
        return self.field.startswith("x")

    def describe(self) -> str:
        """Render for diagnostics: registers in decimal, PC and memory in hex."""
        if self.is_register:
            return (
                f"REG {self.field} MISMATCH: HW={self.hardware_value} "
                f"REF={self.reference_value}"
            )
        label = "PC" if self.field == PC_FIELD else self.field.upper()
        return (
            f"{label} MISMATCH: HW=0x{self.hardware_value:08x} "
            f"REF=0x{self.reference_value:08x}"
        )


@dataclass(frozen=True)
class ComparisonVerdict:
    """Outcome of one comparison round."""

    mismatches: tuple[FieldMismatch, ...] = ()

    @property
    def matched(self) -> bool:
        """True iff no field differs."""
        return not self.mismatches

    @property
    def fields(self) -> frozenset[str]:
        return frozenset(m.field for m in self.mismatches)

    def __bool__(self) -> bool:
        return self.matched


def compare(hardware: StateSnapshot, reference: StateSnapshot) -> ComparisonVerdict:
    """Compare two snapshots field by field.

    Args:
        hardware: Snapshot taken from the hardware view
        reference: Snapshot taken from the reference interpreter

    Returns:
        ComparisonVerdict with one record per unequal field, PC first, then
        registers in index order, then memory words in index order
    """
    mismatches = []

    hw_pc = hardware.program_counter & MASK32
    ref_pc = reference.program_counter & MASK32
    if hw_pc != ref_pc:
        mismatches.append(FieldMismatch(PC_FIELD, hw_pc, ref_pc))

    for index in range(1, NUM_REGISTERS):
        hw_value = hardware.registers[index] & MASK32
        ref_value = reference.registers[index] & MASK32
        if hw_value != ref_value:
            mismatches.append(FieldMismatch(register_field(index), hw_value, ref_value))

    if hardware.memory_words is not None and reference.memory_words is not None:
        for word_index in sorted(hardware.memory_words.keys() & reference.memory_words.keys()):
            hw_word = hardware.memory_words[word_index] & MASK32
            ref_word = reference.memory_words[word_index] & MASK32
            if hw_word != ref_word:
                mismatches.append(FieldMismatch(memory_field(word_index), hw_word, ref_word))

    return ComparisonVerdict(tuple(mismatches))
