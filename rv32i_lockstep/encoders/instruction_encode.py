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

"""RV32I base instruction encoders.

Instruction Encoding
====================

This module implements encoders for the six RV32I instruction formats. Every
encoder validates its fields before packing them, so an out-of-range
immediate in a test program fails at authoring time instead of silently
producing a different instruction.

Format Layouts (bit 31 on the left)::

    R  | funct7 | rs2 | rs1 | funct3 |    rd    | opcode |
    I  |    imm[11:0]  | rs1 | funct3 |    rd    | opcode |
    S  | imm[11:5] | rs2 | rs1 | funct3 | imm[4:0] | opcode |
    B  | imm[12|10:5] | rs2 | rs1 | funct3 | imm[4:1|11] | opcode |
    U  |        imm[31:12]           |    rd    | opcode |
    J  | imm[20|10:1|11|19:12]       |    rd    | opcode |

The opcode constants are shared with the decoders of both the reference
interpreter and the behavioral hardware model.

Example Usage:
    >>> hex(enc_i(0x0, rd=1, rs1=0, imm=5))  # addi x1, x0, 5
    '0x500093'
"""

from typing import Final

from rv32i_lockstep.config import IMM_12BIT_MASK, NOP_INSTRUCTION
from rv32i_lockstep.utils.validation import HardwareAssertions

# ============================================================================
# Major opcodes (bits [6:0])
# ============================================================================

OPCODE_LOAD: Final[int] = 0b0000011
OPCODE_MISC_MEM: Final[int] = 0b0001111
OPCODE_OP_IMM: Final[int] = 0b0010011
OPCODE_AUIPC: Final[int] = 0b0010111
OPCODE_STORE: Final[int] = 0b0100011
OPCODE_OP: Final[int] = 0b0110011
OPCODE_LUI: Final[int] = 0b0110111
OPCODE_BRANCH: Final[int] = 0b1100011
OPCODE_JALR: Final[int] = 0b1100111
OPCODE_JAL: Final[int] = 0b1101111
OPCODE_SYSTEM: Final[int] = 0b1110011

FUNCT7_ALT: Final[int] = 0b0100000
"""funct7 selecting sub / sra / srai."""

ECALL_INSTRUCTION: Final[int] = 0x00000073
EBREAK_INSTRUCTION: Final[int] = 0x00100073
FENCE_INSTRUCTION: Final[int] = 0x0FF0000F

__all__ = [
    "enc_r",
    "enc_i",
    "enc_i_shift",
    "enc_s",
    "enc_b",
    "enc_u",
    "enc_j",
    "enc_nop",
    "enc_ecall",
    "enc_ebreak",
    "enc_fence",
    "NOP_INSTRUCTION",
]


def _check_registers(*registers: int) -> None:
    for reg in registers:
        HardwareAssertions.assert_register_valid(reg)


def enc_r(
    funct7: int, funct3: int, rd: int, rs1: int, rs2: int, opcode: int = OPCODE_OP
) -> int:
    """Encode an R-type (register-register) instruction."""
    _check_registers(rd, rs1, rs2)
    return (
        (funct7 & 0x7F) << 25
        | rs2 << 20
        | rs1 << 15
        | (funct3 & 0x7) << 12
        | rd << 7
        | opcode
    )


def enc_i(
    funct3: int, rd: int, rs1: int, imm: int, opcode: int = OPCODE_OP_IMM
) -> int:
    """Encode an I-type instruction with a signed 12-bit immediate.

    Used for immediate ALU ops, loads (opcode=OPCODE_LOAD) and jalr
    (opcode=OPCODE_JALR).
    """
    _check_registers(rd, rs1)
    HardwareAssertions.assert_immediate_12bit(imm)
    return (
        (imm & IMM_12BIT_MASK) << 20 | rs1 << 15 | (funct3 & 0x7) << 12 | rd << 7 | opcode
    )


def enc_i_shift(funct7: int, funct3: int, rd: int, rs1: int, shamt: int) -> int:
    """Encode slli/srli/srai: the immediate is a zero-extended 5-bit shamt."""
    _check_registers(rd, rs1)
    HardwareAssertions.assert_shift_amount(shamt)
    return (
        (funct7 & 0x7F) << 25
        | shamt << 20
        | rs1 << 15
        | (funct3 & 0x7) << 12
        | rd << 7
        | OPCODE_OP_IMM
    )


def enc_s(funct3: int, rs2: int, rs1: int, imm: int) -> int:
    """Encode an S-type store: mem[rs1 + imm] <- rs2."""
    _check_registers(rs1, rs2)
    HardwareAssertions.assert_immediate_12bit(imm)
    imm &= IMM_12BIT_MASK
    return (
        (imm >> 5) << 25
        | rs2 << 20
        | rs1 << 15
        | (funct3 & 0x7) << 12
        | (imm & 0x1F) << 7
        | OPCODE_STORE
    )


def enc_b(funct3: int, rs1: int, rs2: int, offset: int) -> int:
    """Encode a B-type conditional branch with a PC-relative byte offset."""
    _check_registers(rs1, rs2)
    HardwareAssertions.assert_branch_offset(offset)
    imm = offset & 0x1FFF
    return (
        ((imm >> 12) & 0x1) << 31
        | ((imm >> 5) & 0x3F) << 25
        | rs2 << 20
        | rs1 << 15
        | (funct3 & 0x7) << 12
        | ((imm >> 1) & 0xF) << 8
        | ((imm >> 11) & 0x1) << 7
        | OPCODE_BRANCH
    )


def enc_u(opcode: int, rd: int, imm20: int) -> int:
    """Encode a U-type instruction; imm20 lands in bits [31:12]."""
    _check_registers(rd)
    HardwareAssertions.assert_immediate_20bit_upper(imm20)
    return imm20 << 12 | rd << 7 | opcode


def enc_j(rd: int, offset: int) -> int:
    """Encode jal rd, offset."""
    _check_registers(rd)
    HardwareAssertions.assert_jump_offset(offset)
    imm = offset & 0x1FFFFF
    return (
        ((imm >> 20) & 0x1) << 31
        | ((imm >> 1) & 0x3FF) << 21
        | ((imm >> 11) & 0x1) << 20
        | ((imm >> 12) & 0xFF) << 12
        | rd << 7
        | OPCODE_JAL
    )


def enc_nop() -> int:
    """Encode the canonical NOP (addi x0, x0, 0)."""
    return NOP_INSTRUCTION


def enc_ecall() -> int:
    """Encode ecall (halts the reference model)."""
    return ECALL_INSTRUCTION


def enc_ebreak() -> int:
    """Encode ebreak (halts the reference model)."""
    return EBREAK_INSTRUCTION


def enc_fence() -> int:
    """Encode fence iorw, iorw."""
    return FENCE_INSTRUCTION
