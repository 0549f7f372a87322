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

"""Operation tables mapping RV32I mnemonics to encoders and evaluators.

Op Tables
=========

This module is the central registry connecting instruction mnemonics (like
"add", "lw", "beq") to:

    1. Their function fields (funct3 / funct7), the single source of truth
       for both encoding and decoding
    2. An encoder function: instruction operands -> 32-bit word
    3. An evaluator function: computes the result in software

Table Structure:
    - R_ALU:    mnemonic -> (encoder(rd, rs1, rs2), evaluator(a, b))
    - I_ALU:    mnemonic -> (encoder(rd, rs1, imm), evaluator(a, imm))
    - LOADS:    mnemonic -> (encoder(rd, rs1, imm), evaluator(memory, address))
    - STORES:   mnemonic -> encoder(rs2, rs1, imm)
    - BRANCHES: mnemonic -> encoder(rs1, rs2, offset)
    - JUMPS:    "jal" -> encoder(rd, offset), "jalr" -> encoder(rd, rs1, imm)
    - UPPER:    mnemonic -> (encoder(rd, imm20), evaluator(pc, imm20 << 12))

Decode Maps:
    R_ALU_DECODE, I_ALU_DECODE, SHIFT_IMM_DECODE, LOAD_DECODE, STORE_DECODE
    and BRANCH_DECODE invert the field tables so decoders look mnemonics up
    by (funct3[, funct7]).

Example Usage:
    >>> encoder, evaluator = R_ALU["add"]
    >>> hex(encoder(3, 1, 2))  # add x3, x1, x2
    '0x2081b3'
    >>> evaluator(5, 3)
    8

Adding New Instructions:
    1. Implement the evaluator in models/alu_model.py (if needed)
    2. Add its fields to the appropriate table here
"""

from collections.abc import Callable

from rv32i_lockstep.encoders.instruction_encode import (
    FUNCT7_ALT,
    OPCODE_AUIPC,
    OPCODE_JALR,
    OPCODE_LOAD,
    OPCODE_LUI,
    enc_b,
    enc_i,
    enc_i_shift,
    enc_j,
    enc_r,
    enc_s,
    enc_u,
)
from rv32i_lockstep.models.alu_model import (
    add,
    and_rv,
    auipc,
    lb,
    lbu,
    lh,
    lhu,
    lui,
    lw,
    or_rv,
    sll,
    slt,
    sltu,
    sra,
    srl,
    sub,
    xor,
)

# ============================================================================
# Function fields
# ============================================================================

R_ALU_FIELDS: dict[str, tuple[int, int, Callable[[int, int], int]]] = {
    # mnemonic: (funct3, funct7, evaluator)
    "add": (0b000, 0b0000000, add),
    "sub": (0b000, FUNCT7_ALT, sub),
    "sll": (0b001, 0b0000000, sll),
    "slt": (0b010, 0b0000000, slt),
    "sltu": (0b011, 0b0000000, sltu),
    "xor": (0b100, 0b0000000, xor),
    "srl": (0b101, 0b0000000, srl),
    "sra": (0b101, FUNCT7_ALT, sra),
    "or": (0b110, 0b0000000, or_rv),
    "and": (0b111, 0b0000000, and_rv),
}

I_ALU_FIELDS: dict[str, tuple[int, Callable[[int, int], int]]] = {
    # mnemonic: (funct3, evaluator); immediate is sign-extended
    "addi": (0b000, add),
    "slti": (0b010, slt),
    "sltiu": (0b011, sltu),
    "xori": (0b100, xor),
    "ori": (0b110, or_rv),
    "andi": (0b111, and_rv),
}

SHIFT_IMM_FIELDS: dict[str, tuple[int, int, Callable[[int, int], int]]] = {
    # mnemonic: (funct3, funct7, evaluator); immediate is a zero-extended shamt
    "slli": (0b001, 0b0000000, sll),
    "srli": (0b101, 0b0000000, srl),
    "srai": (0b101, FUNCT7_ALT, sra),
}

LOAD_FIELDS: dict[str, tuple[int, Callable]] = {
    "lb": (0b000, lb),
    "lh": (0b001, lh),
    "lw": (0b010, lw),
    "lbu": (0b100, lbu),
    "lhu": (0b101, lhu),
}

STORE_FIELDS: dict[str, tuple[int, int]] = {
    # mnemonic: (funct3, width in bytes)
    "sb": (0b000, 1),
    "sh": (0b001, 2),
    "sw": (0b010, 4),
}

BRANCH_FIELDS: dict[str, int] = {
    "beq": 0b000,
    "bne": 0b001,
    "blt": 0b100,
    "bge": 0b101,
    "bltu": 0b110,
    "bgeu": 0b111,
}

# ============================================================================
# Encoder / evaluator tables
# ============================================================================


def _r_encoder(funct3: int, funct7: int) -> Callable[[int, int, int], int]:
    def encode(rd: int, rs1: int, rs2: int) -> int:
        return enc_r(funct7, funct3, rd, rs1, rs2)

    return encode


def _i_encoder(funct3: int, opcode: int | None = None) -> Callable[[int, int, int], int]:
    def encode(rd: int, rs1: int, imm: int) -> int:
        if opcode is None:
            return enc_i(funct3, rd, rs1, imm)
        return enc_i(funct3, rd, rs1, imm, opcode=opcode)

    return encode


def _shift_encoder(funct3: int, funct7: int) -> Callable[[int, int, int], int]:
    def encode(rd: int, rs1: int, shamt: int) -> int:
        return enc_i_shift(funct7, funct3, rd, rs1, shamt)

    return encode


def _s_encoder(funct3: int) -> Callable[[int, int, int], int]:
    def encode(rs2: int, rs1: int, imm: int) -> int:
        return enc_s(funct3, rs2, rs1, imm)

    return encode


def _b_encoder(funct3: int) -> Callable[[int, int, int], int]:
    def encode(rs1: int, rs2: int, offset: int) -> int:
        return enc_b(funct3, rs1, rs2, offset)

    return encode


def _u_encoder(opcode: int) -> Callable[[int, int], int]:
    def encode(rd: int, imm20: int) -> int:
        return enc_u(opcode, rd, imm20)

    return encode


R_ALU = {
    name: (_r_encoder(funct3, funct7), evaluator)
    for name, (funct3, funct7, evaluator) in R_ALU_FIELDS.items()
}

I_ALU = {
    name: (_i_encoder(funct3), evaluator)
    for name, (funct3, evaluator) in I_ALU_FIELDS.items()
} | {
    name: (_shift_encoder(funct3, funct7), evaluator)
    for name, (funct3, funct7, evaluator) in SHIFT_IMM_FIELDS.items()
}

LOADS = {
    name: (_i_encoder(funct3, OPCODE_LOAD), evaluator)
    for name, (funct3, evaluator) in LOAD_FIELDS.items()
}

STORES = {name: _s_encoder(funct3) for name, (funct3, _) in STORE_FIELDS.items()}

BRANCHES = {name: _b_encoder(funct3) for name, funct3 in BRANCH_FIELDS.items()}

JUMPS: dict[str, Callable[..., int]] = {
    "jal": enc_j,
    "jalr": _i_encoder(0b000, OPCODE_JALR),
}

UPPER = {
    "lui": (_u_encoder(OPCODE_LUI), lui),
    "auipc": (_u_encoder(OPCODE_AUIPC), auipc),
}

# ============================================================================
# Decode maps
# ============================================================================

R_ALU_DECODE = {
    (funct3, funct7): name for name, (funct3, funct7, _) in R_ALU_FIELDS.items()
}
I_ALU_DECODE = {funct3: name for name, (funct3, _) in I_ALU_FIELDS.items()}
SHIFT_IMM_DECODE = {
    (funct3, funct7): name for name, (funct3, funct7, _) in SHIFT_IMM_FIELDS.items()
}
LOAD_DECODE = {funct3: name for name, (funct3, _) in LOAD_FIELDS.items()}
STORE_DECODE = {funct3: name for name, (funct3, _) in STORE_FIELDS.items()}
BRANCH_DECODE = {funct3: name for name, funct3 in BRANCH_FIELDS.items()}

ALU_EVALUATORS: dict[str, Callable[[int, int], int]] = {
    name: evaluator for name, (_, evaluator) in (R_ALU | I_ALU).items()
}
"""Every register-register and register-immediate mnemonic -> evaluator."""

LOAD_EVALUATORS = {name: evaluator for name, (_, evaluator) in LOADS.items()}
STORE_WIDTHS = {name: width for name, (_, width) in STORE_FIELDS.items()}
