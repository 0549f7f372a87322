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

"""Reference implementations of the RV32I ALU and load operations.

ALU Model
=========

Every evaluator takes two operands as Python ints and returns the 32-bit
result. Operands may arrive unmasked (e.g. a sign-extended negative
immediate); two decorators keep the individual functions simple:

    @masked       - wraps the result to 32 bits (two's-complement modular)
    @limit_shift  - reduces the second operand to its low 5 bits

The same evaluators serve register-register and register-immediate forms:
``addi`` is ``add`` with a sign-extended immediate as operand_b, and
``sltiu`` is ``sltu`` with the sign-extended immediate reinterpreted as
unsigned, exactly as the ISA defines them.

Load evaluators read through any object implementing MemoryReader.
"""

from collections.abc import Callable
from functools import wraps
from typing import Protocol

from rv32i_lockstep.config import MASK32, SHIFT_AMOUNT_MASK
from rv32i_lockstep.utils.riscv_utils import sign_extend, to_signed32, to_unsigned32

AluOperation = Callable[[int, int], int]


class MemoryReader(Protocol):
    """Anything that can return the byte at an address."""

    def read_byte(self, address: int) -> int:
        """Return the 8-bit value at a byte address."""
        ...


def masked(func: AluOperation) -> AluOperation:
    """Wrap an ALU result to 32 bits."""

    @wraps(func)
    def wrapper(operand_a: int, operand_b: int) -> int:
        return func(operand_a, operand_b) & MASK32

    return wrapper


def limit_shift(func: AluOperation) -> AluOperation:
    """Use only the low 5 bits of the shift amount (operand_b)."""

    @wraps(func)
    def wrapper(operand_a: int, operand_b: int) -> int:
        return func(operand_a, operand_b & SHIFT_AMOUNT_MASK)

    return wrapper


# ============================================================================
# Arithmetic and logic
# ============================================================================


@masked
def add(operand_a: int, operand_b: int) -> int:
    return operand_a + operand_b


@masked
def sub(operand_a: int, operand_b: int) -> int:
    return operand_a - operand_b


@masked
def and_rv(operand_a: int, operand_b: int) -> int:
    return operand_a & operand_b


@masked
def or_rv(operand_a: int, operand_b: int) -> int:
    return operand_a | operand_b


@masked
def xor(operand_a: int, operand_b: int) -> int:
    return operand_a ^ operand_b


# ============================================================================
# Shifts
# ============================================================================


@masked
@limit_shift
def sll(operand_a: int, operand_b: int) -> int:
    return to_unsigned32(operand_a) << operand_b


@masked
@limit_shift
def srl(operand_a: int, operand_b: int) -> int:
    return to_unsigned32(operand_a) >> operand_b


@masked
@limit_shift
def sra(operand_a: int, operand_b: int) -> int:
    # Python's >> on a negative int is arithmetic
    return to_signed32(operand_a) >> operand_b


# ============================================================================
# Comparisons
# ============================================================================


def slt(operand_a: int, operand_b: int) -> int:
    """Set if less than, signed."""
    return int(to_signed32(operand_a) < to_signed32(operand_b))


def sltu(operand_a: int, operand_b: int) -> int:
    """Set if less than, unsigned."""
    return int(to_unsigned32(operand_a) < to_unsigned32(operand_b))


# ============================================================================
# Upper immediates
# ============================================================================


@masked
def lui(_program_counter: int, upper_immediate: int) -> int:
    return upper_immediate


@masked
def auipc(program_counter: int, upper_immediate: int) -> int:
    return program_counter + upper_immediate


# ============================================================================
# Loads (little-endian)
# ============================================================================


def _read_le(memory: MemoryReader, address: int, width: int) -> int:
    value = 0
    for offset in range(width):
        value |= memory.read_byte((address + offset) & MASK32) << (8 * offset)
    return value


def lb(memory: MemoryReader, address: int) -> int:
    return sign_extend(_read_le(memory, address, 1), 8) & MASK32


def lh(memory: MemoryReader, address: int) -> int:
    return sign_extend(_read_le(memory, address, 2), 16) & MASK32


def lw(memory: MemoryReader, address: int) -> int:
    return _read_le(memory, address, 4)


def lbu(memory: MemoryReader, address: int) -> int:
    return _read_le(memory, address, 1)


def lhu(memory: MemoryReader, address: int) -> int:
    return _read_le(memory, address, 2)
