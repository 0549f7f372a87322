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

"""Directed test programs for the lockstep harness.

Test Suite
==========

Each LockstepProgram is a short straight-line (or looping) RV32I program with a
cycle budget equal to the number of instructions it retires. The expected
register values are not used by the lockstep comparison itself (the
reference model is the oracle); they document intent and let the unit
tests check the reference model end to end.

Programs are assembled with the op-table encoders, so every field is
range-checked when this module is imported.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from rv32i_lockstep.encoders.instruction_encode import enc_ecall, enc_nop
from rv32i_lockstep.encoders.op_tables import (
    BRANCHES,
    I_ALU,
    JUMPS,
    LOADS,
    R_ALU,
    STORES,
    UPPER,
)


@dataclass(frozen=True)
class LockstepProgram:
    """A named program and how long to run it.

    Attributes:
        name: Human-readable test name used in banners
        words: Program words, executed from address 0
        cycle_budget: Lockstep rounds to run
        expected_registers: Register index -> value after the budget
        expected_pc: PC after the budget, if checked
    """

    name: str
    words: tuple[int, ...]
    cycle_budget: int
    expected_registers: Mapping[int, int] = field(default_factory=dict)
    expected_pc: int | None = None


def r_type(name: str, rd: int, rs1: int, rs2: int) -> int:
    return R_ALU[name][0](rd, rs1, rs2)


def i_type(name: str, rd: int, rs1: int, imm: int) -> int:
    return I_ALU[name][0](rd, rs1, imm)


def load(name: str, rd: int, rs1: int, imm: int) -> int:
    return LOADS[name][0](rd, rs1, imm)


def store(name: str, rs2: int, rs1: int, imm: int) -> int:
    return STORES[name](rs2, rs1, imm)


def branch(name: str, rs1: int, rs2: int, offset: int) -> int:
    return BRANCHES[name](rs1, rs2, offset)


def upper(name: str, rd: int, imm20: int) -> int:
    return UPPER[name][0](rd, imm20)


NOP = enc_nop()

SIMPLE_ADD = LockstepProgram(
    "Simple Add",
    (i_type("addi", 1, 0, 5), i_type("addi", 2, 0, 3), r_type("add", 3, 1, 2), NOP),
    cycle_budget=4,
    expected_registers={1: 5, 2: 3, 3: 8},
    expected_pc=16,
)

SUBTRACTION = LockstepProgram(
    "Subtraction",
    (i_type("addi", 1, 0, 10), i_type("addi", 2, 0, 3), r_type("sub", 3, 1, 2), NOP),
    cycle_budget=4,
    expected_registers={1: 10, 2: 3, 3: 7},
    expected_pc=16,
)

LOGICAL_OPS = LockstepProgram(
    "Logical Ops",
    (
        i_type("addi", 1, 0, 255),
        i_type("addi", 2, 0, 240),
        r_type("and", 3, 1, 2),
        r_type("or", 4, 1, 2),
        r_type("xor", 5, 1, 2),
        NOP,
    ),
    cycle_budget=6,
    expected_registers={3: 240, 4: 255, 5: 15},
    expected_pc=24,
)

IMMEDIATE_OPS = LockstepProgram(
    "Immediate Ops",
    (
        i_type("addi", 1, 0, 20),
        i_type("andi", 2, 1, 10),
        i_type("ori", 3, 1, 15),
        NOP,
    ),
    cycle_budget=4,
    expected_registers={1: 20, 2: 0, 3: 31},
    expected_pc=16,
)

SHIFTS = LockstepProgram(
    "Shifts",
    (i_type("addi", 1, 0, 8), i_type("slli", 2, 1, 2), i_type("srli", 3, 1, 2), NOP),
    cycle_budget=4,
    expected_registers={1: 8, 2: 32, 3: 2},
    expected_pc=16,
)

DATA_DEPENDENCIES = LockstepProgram(
    "Data Dependencies",
    (
        i_type("addi", 1, 0, 5),
        i_type("addi", 2, 1, 3),
        r_type("add", 3, 1, 2),
        r_type("add", 4, 3, 1),
        NOP,
    ),
    cycle_budget=5,
    expected_registers={1: 5, 2: 8, 3: 13, 4: 18},
    expected_pc=20,
)

INDEPENDENT_OPS = LockstepProgram(
    "Independent Ops",
    (
        i_type("addi", 1, 0, 5),
        i_type("addi", 2, 0, 3),
        r_type("add", 3, 1, 2),
        i_type("addi", 4, 0, 10),
        r_type("add", 5, 3, 4),
        NOP,
    ),
    cycle_budget=6,
    expected_registers={3: 8, 4: 10, 5: 18},
    expected_pc=24,
)

# Counts x1 down from 3; the loop body retires twice per iteration
BRANCH_LOOP = LockstepProgram(
    "Branch Loop",
    (
        i_type("addi", 1, 0, 3),
        i_type("addi", 1, 1, -1),
        branch("bne", 1, 0, -4),
        i_type("addi", 2, 0, 42),
        NOP,
    ),
    cycle_budget=9,
    expected_registers={1: 0, 2: 42},
    expected_pc=20,
)

MEMORY_ROUND_TRIP = LockstepProgram(
    "Memory Round Trip",
    (
        upper("lui", 1, 0x12345),
        i_type("addi", 1, 1, 0x678),
        i_type("addi", 2, 0, 0x400),
        store("sw", 1, 2, 0),
        load("lw", 3, 2, 0),
        load("lb", 4, 2, 0),
        load("lbu", 5, 2, 3),
        load("lh", 6, 2, 2),
        i_type("addi", 7, 0, -1),
        store("sh", 7, 2, 4),
        load("lh", 8, 2, 4),
        load("lhu", 9, 2, 4),
        NOP,
    ),
    cycle_budget=13,
    expected_registers={
        1: 0x12345678,
        3: 0x12345678,
        4: 0x78,
        5: 0x12,
        6: 0x1234,
        7: 0xFFFFFFFF,
        8: 0xFFFFFFFF,
        9: 0xFFFF,
    },
    expected_pc=52,
)

JUMP_AND_LINK = LockstepProgram(
    "Jump And Link",
    (
        JUMPS["jal"](1, 12),
        i_type("addi", 5, 0, 7),
        JUMPS["jal"](0, 12),
        JUMPS["jalr"](2, 1, 0),
        i_type("addi", 6, 0, 1),
        NOP,
    ),
    cycle_budget=5,
    expected_registers={1: 4, 2: 16, 5: 7, 6: 0},
    expected_pc=24,
)

UPPER_IMMEDIATES = LockstepProgram(
    "Upper Immediates And Compares",
    (
        upper("lui", 1, 0xABCDE),
        upper("auipc", 2, 1),
        i_type("addi", 3, 0, -16),
        i_type("srai", 4, 3, 2),
        i_type("srli", 5, 3, 28),
        r_type("slt", 6, 3, 0),
        r_type("sltu", 7, 3, 0),
        i_type("sltiu", 8, 0, 1),
        NOP,
    ),
    cycle_budget=9,
    expected_registers={
        1: 0xABCDE000,
        2: 0x1004,
        3: 0xFFFFFFF0,
        4: 0xFFFFFFFC,
        5: 0xF,
        6: 1,
        7: 0,
        8: 1,
    },
    expected_pc=36,
)

HALT_ON_ECALL = LockstepProgram(
    "Halt On Ecall",
    (i_type("addi", 1, 0, 1), enc_ecall(), i_type("addi", 1, 0, 2), NOP),
    cycle_budget=4,
    expected_registers={1: 1},
    expected_pc=8,
)

DEFAULT_SUITE: tuple[LockstepProgram, ...] = (
    SIMPLE_ADD,
    SUBTRACTION,
    LOGICAL_OPS,
    IMMEDIATE_OPS,
    SHIFTS,
    DATA_DEPENDENCIES,
    INDEPENDENT_OPS,
    BRANCH_LOOP,
    MEMORY_ROUND_TRIP,
    JUMP_AND_LINK,
    UPPER_IMMEDIATES,
    HALT_ON_ECALL,
)
"""Every built-in program, in run order."""
