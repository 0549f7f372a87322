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

"""Tests for the ALU, branch and memory models."""

import pytest

from rv32i_lockstep.exceptions import MemoryAccessError
from rv32i_lockstep.models.alu_model import (
    add,
    auipc,
    lb,
    lbu,
    lh,
    lhu,
    lw,
    sll,
    slt,
    sltu,
    sra,
    srl,
    sub,
)
from rv32i_lockstep.models.branch_model import branch_taken_decision
from rv32i_lockstep.models.memory_model import ReferenceMemory
from rv32i_lockstep.utils.validation import ValidationError


@pytest.mark.parametrize(
    "operation, a, b, expected",
    [
        (add, 0xFFFFFFFF, 1, 0),
        (add, 5, -3, 2),
        (sub, 0, 1, 0xFFFFFFFF),
        (sll, 1, 33, 2),
        (srl, 0x80000000, 31, 1),
        (sra, 0x80000000, 31, 0xFFFFFFFF),
        (slt, 0xFFFFFFFF, 0, 1),
        (sltu, 0xFFFFFFFF, 0, 0),
        (sltu, 0, -1, 1),
    ],
)
def test_alu_wraps_to_32_bits(operation, a, b, expected):
    assert operation(a, b) == expected


def test_auipc_adds_pc():
    assert auipc(0x1000, 0xFFFFF000) == 0x0
    assert auipc(4, 0x1000) == 0x1004


@pytest.mark.parametrize(
    "operation, a, b, taken",
    [
        ("beq", 3, 3, True),
        ("bne", 3, 3, False),
        ("blt", 0xFFFFFFFF, 0, True),
        ("bltu", 0xFFFFFFFF, 0, False),
        ("bge", 0, 0xFFFFFFFF, True),
        ("bgeu", 0, 0xFFFFFFFF, False),
    ],
)
def test_branch_decisions(operation, a, b, taken):
    assert branch_taken_decision(operation, a, b) is taken


def test_unknown_branch_rejected():
    with pytest.raises(ValidationError):
        branch_taken_decision("bgt", 1, 0)


def test_memory_is_little_endian():
    memory = ReferenceMemory(16)
    memory.write_word(4, 0x12345678)
    assert memory.read_byte(4) == 0x78
    assert memory.read_byte(7) == 0x12
    assert memory.read(6, 2) == 0x1234


def test_load_evaluators_extend_correctly():
    memory = ReferenceMemory(16)
    memory.write_word(0, 0x8000FF80)
    assert lb(memory, 0) == 0xFFFFFF80
    assert lbu(memory, 0) == 0x80
    assert lh(memory, 2) == 0xFFFF8000
    assert lhu(memory, 2) == 0x8000
    assert lw(memory, 0) == 0x8000FF80


def test_misaligned_access_is_bytewise():
    memory = ReferenceMemory(16)
    memory.write(1, 0xAABBCCDD, 4)
    assert memory.read_word(0) == 0xBBCCDD00
    assert memory.read_byte(4) == 0xAA


@pytest.mark.parametrize("address, width", [(16, 1), (14, 4), (13, 4), (-1, 1)])
def test_out_of_range_access_raises_before_touching_memory(address, width):
    memory = ReferenceMemory(16)
    with pytest.raises(MemoryAccessError) as excinfo:
        memory.write(address, 0xFFFFFFFF, width)
    assert excinfo.value.capacity == 16
    assert memory.read(12, 4) == 0


def test_word_at_last_slot_is_in_range():
    memory = ReferenceMemory(16)
    memory.write_word(12, 1)
    assert memory.read_word(12) == 1


def test_load_bytes_truncates_at_capacity():
    memory = ReferenceMemory(8)
    assert memory.load_bytes(bytes(range(1, 13))) == 8
    assert memory.read_byte(7) == 8
    memory.clear()
    assert memory.read_word(4) == 0
