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

"""Instruction-level RV32I golden reference interpreter.

Reference CPU
=============

This module is the golden model of the lockstep testbench. It executes one
RV32I instruction per ``step()`` against an architectural state made of the
program counter, 32 general registers and a bound flat byte memory.

Execution Flow (one step):
    1. Fetch the little-endian word at PC (an out-of-range fetch reads 0)
    2. Decode it into a DecodedInstruction (None if not a legal RV32I word)
    3. Execute its semantics using the op-table evaluators
    4. Write rd unless rd is x0
    5. Advance PC by 4, or to the redirect target for taken branches/jumps

Halting:
    ecall, ebreak and every illegal or unrecognized encoding set
    ``halted``. The halting instruction still advances PC by 4; after that
    every ``step()`` is a no-op. This is a defined outcome, not an exception,
    so the comparison with the hardware stays meaningful.

Memory:
    Loads and stores are bounds-checked against the memory's capacity. An
    out-of-range load returns 0 and an out-of-range store is dropped; both
    are logged at DEBUG level. Misaligned accesses are performed bytewise.

Usage::

    memory = ReferenceMemory(4096)
    cpu = ReferenceCPU(memory)
    cpu.load_program(image_bytes)
    cpu.step()
    assert cpu.get_program_counter() == 4
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from rv32i_lockstep.config import (
    MASK32,
    MEMORY_WORD_SIZE_BYTES,
    NOP_INSTRUCTION,
    NUM_REGISTERS,
)
from rv32i_lockstep.encoders.instruction_encode import (
    EBREAK_INSTRUCTION,
    ECALL_INSTRUCTION,
    OPCODE_AUIPC,
    OPCODE_BRANCH,
    OPCODE_JAL,
    OPCODE_JALR,
    OPCODE_LOAD,
    OPCODE_LUI,
    OPCODE_MISC_MEM,
    OPCODE_OP,
    OPCODE_OP_IMM,
    OPCODE_STORE,
    OPCODE_SYSTEM,
)
from rv32i_lockstep.encoders.op_tables import (
    ALU_EVALUATORS,
    BRANCH_DECODE,
    I_ALU_DECODE,
    LOAD_DECODE,
    LOAD_EVALUATORS,
    R_ALU_DECODE,
    SHIFT_IMM_DECODE,
    STORE_DECODE,
    STORE_WIDTHS,
    UPPER,
)
from rv32i_lockstep.exceptions import MemoryAccessError, RegisterAccessError
from rv32i_lockstep.models.branch_model import branch_taken_decision
from rv32i_lockstep.models.memory_model import ReferenceMemory
from rv32i_lockstep.utils.riscv_utils import bit_field, sign_extend
from rv32i_lockstep.verification_types import Instruction, RegisterIndex, StateSnapshot

logger = logging.getLogger(__name__)


class InstructionFormat(Enum):
    """Decoded instruction families, one executor each."""

    REGISTER = "register-register"
    IMMEDIATE = "register-immediate"
    SHIFT_IMMEDIATE = "shift-immediate"
    LOAD = "load"
    STORE = "store"
    BRANCH = "branch"
    UPPER_IMMEDIATE = "upper-immediate"
    JUMP = "jump"
    JUMP_REGISTER = "jump-register"
    FENCE = "fence"
    SYSTEM = "system"


@dataclass(frozen=True)
class DecodedInstruction:
    """Transient decoded view of one instruction word.

    ``imm`` is already extended: sign-extended for I/S/B/J immediates,
    zero-extended for shift amounts, and shifted into place (low 12 bits
    zero) for lui/auipc.
    """

    word: int
    mnemonic: str
    format: InstructionFormat
    rd: int = 0
    rs1: int = 0
    rs2: int = 0
    imm: int = 0

    def __str__(self) -> str:
        """Render as assembly text."""
        fmt = self.format
        if self.word == NOP_INSTRUCTION:
            return "nop"
        if fmt is InstructionFormat.REGISTER:
            return f"{self.mnemonic} x{self.rd}, x{self.rs1}, x{self.rs2}"
        if fmt in (InstructionFormat.IMMEDIATE, InstructionFormat.SHIFT_IMMEDIATE):
            return f"{self.mnemonic} x{self.rd}, x{self.rs1}, {self.imm}"
        if fmt in (InstructionFormat.LOAD, InstructionFormat.JUMP_REGISTER):
            return f"{self.mnemonic} x{self.rd}, {self.imm}(x{self.rs1})"
        if fmt is InstructionFormat.STORE:
            return f"{self.mnemonic} x{self.rs2}, {self.imm}(x{self.rs1})"
        if fmt is InstructionFormat.BRANCH:
            return f"{self.mnemonic} x{self.rs1}, x{self.rs2}, {self.imm}"
        if fmt is InstructionFormat.UPPER_IMMEDIATE:
            return f"{self.mnemonic} x{self.rd}, 0x{(self.imm & MASK32) >> 12:x}"
        if fmt is InstructionFormat.JUMP:
            return f"{self.mnemonic} x{self.rd}, {self.imm}"
        return self.mnemonic


# ============================================================================
# Decoder
# ============================================================================


def _imm_i(word: int) -> int:
    return sign_extend(bit_field(word, 31, 20), 12)


def _imm_s(word: int) -> int:
    return sign_extend(bit_field(word, 31, 25) << 5 | bit_field(word, 11, 7), 12)


def _imm_b(word: int) -> int:
    imm = (
        bit_field(word, 31, 31) << 12
        | bit_field(word, 7, 7) << 11
        | bit_field(word, 30, 25) << 5
        | bit_field(word, 11, 8) << 1
    )
    return sign_extend(imm, 13)


def _imm_j(word: int) -> int:
    imm = (
        bit_field(word, 31, 31) << 20
        | bit_field(word, 19, 12) << 12
        | bit_field(word, 20, 20) << 11
        | bit_field(word, 30, 21) << 1
    )
    return sign_extend(imm, 21)


def decode(word: Instruction) -> DecodedInstruction | None:
    """Decode a 32-bit word.

    Args:
        word: Raw instruction word

    Returns:
        DecodedInstruction, or None if the word is not a legal RV32I
        instruction (unknown opcode, or an unassigned funct3/funct7 pattern)
    """
    word &= MASK32
    opcode = bit_field(word, 6, 0)
    rd = bit_field(word, 11, 7)
    funct3 = bit_field(word, 14, 12)
    rs1 = bit_field(word, 19, 15)
    rs2 = bit_field(word, 24, 20)
    funct7 = bit_field(word, 31, 25)

    if opcode == OPCODE_OP:
        name = R_ALU_DECODE.get((funct3, funct7))
        if name is None:
            return None
        return DecodedInstruction(word, name, InstructionFormat.REGISTER, rd, rs1, rs2)

    if opcode == OPCODE_OP_IMM:
        if (funct3, 0) in SHIFT_IMM_DECODE:
            name = SHIFT_IMM_DECODE.get((funct3, funct7))
            if name is None:
                return None
            return DecodedInstruction(
                word, name, InstructionFormat.SHIFT_IMMEDIATE, rd, rs1, imm=rs2
            )
        return DecodedInstruction(
            word, I_ALU_DECODE[funct3], InstructionFormat.IMMEDIATE, rd, rs1,
            imm=_imm_i(word),
        )

    if opcode == OPCODE_LOAD:
        name = LOAD_DECODE.get(funct3)
        if name is None:
            return None
        return DecodedInstruction(
            word, name, InstructionFormat.LOAD, rd, rs1, imm=_imm_i(word)
        )

    if opcode == OPCODE_STORE:
        name = STORE_DECODE.get(funct3)
        if name is None:
            return None
        return DecodedInstruction(
            word, name, InstructionFormat.STORE, rs1=rs1, rs2=rs2, imm=_imm_s(word)
        )

    if opcode == OPCODE_BRANCH:
        name = BRANCH_DECODE.get(funct3)
        if name is None:
            return None
        return DecodedInstruction(
            word, name, InstructionFormat.BRANCH, rs1=rs1, rs2=rs2, imm=_imm_b(word)
        )

    if opcode in (OPCODE_LUI, OPCODE_AUIPC):
        name = "lui" if opcode == OPCODE_LUI else "auipc"
        return DecodedInstruction(
            word, name, InstructionFormat.UPPER_IMMEDIATE, rd, imm=word & 0xFFFFF000
        )

    if opcode == OPCODE_JAL:
        return DecodedInstruction(word, "jal", InstructionFormat.JUMP, rd, imm=_imm_j(word))

    if opcode == OPCODE_JALR and funct3 == 0:
        return DecodedInstruction(
            word, "jalr", InstructionFormat.JUMP_REGISTER, rd, rs1, imm=_imm_i(word)
        )

    if opcode == OPCODE_MISC_MEM and funct3 == 0:
        return DecodedInstruction(word, "fence", InstructionFormat.FENCE)

    if opcode == OPCODE_SYSTEM:
        # Only the two exact environment-call encodings; CSR ops are privileged
        if word == ECALL_INSTRUCTION:
            return DecodedInstruction(word, "ecall", InstructionFormat.SYSTEM)
        if word == EBREAK_INSTRUCTION:
            return DecodedInstruction(word, "ebreak", InstructionFormat.SYSTEM)

    return None


# ============================================================================
# Architectural state and interpreter
# ============================================================================


@dataclass
class ArchitecturalState:
    """PC, register file and halt flag of the reference model.

    registers[0] is never written, so it always reads as zero.
    """

    program_counter: int = 0
    registers: list[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    halted: bool = False
    halt_reason: str | None = None

    def reset(self) -> None:
        """Return to the all-zero state."""
        self.program_counter = 0
        self.registers = [0] * NUM_REGISTERS
        self.halted = False
        self.halt_reason = None


class ReferenceCPU:
    """RV32I interpreter bound to a ReferenceMemory.

    Attributes:
        state: Architectural state mutated only by step()
        memory: Bound memory (program and data)
        instructions_retired: Steps that executed an instruction since reset
    """

    def __init__(self, memory: ReferenceMemory) -> None:
        self.state = ArchitecturalState()
        self.memory = memory
        self.instructions_retired = 0
        self.initialize(memory)

    # ------------------------------------------------------------------
    # Model interface
    # ------------------------------------------------------------------

    def initialize(self, memory: ReferenceMemory | None = None) -> None:
        """Reset to PC=0, registers=0, not halted; optionally rebind memory.

        Memory contents are left untouched.
        """
        if memory is not None:
            self.memory = memory
        self.state.reset()
        self.instructions_retired = 0

    def step(self) -> None:
        """Execute exactly one instruction (no-op once halted)."""
        if self.state.halted:
            return

        pc = self.state.program_counter
        word = self._fetch(pc)
        decoded = decode(word)

        next_pc = None
        if decoded is None:
            self._halt(f"illegal instruction 0x{word:08x} at 0x{pc:08x}")
        else:
            next_pc = self._EXECUTORS[decoded.format](self, decoded, pc)
            self.instructions_retired += 1
            logger.debug(f"ref 0x{pc:08x}: {decoded}")

        self.state.program_counter = (pc + 4 if next_pc is None else next_pc) & MASK32

    def get_program_counter(self) -> int:
        return self.state.program_counter

    def get_register(self, index: RegisterIndex) -> int:
        """Read a register; x0 always reads zero."""
        self._check_register(index)
        return 0 if index == 0 else self.state.registers[index]

    def set_register(self, index: RegisterIndex, value: int) -> None:
        """Write a register; writes to x0 are discarded."""
        self._check_register(index)
        if index != 0:
            self.state.registers[index] = value & MASK32

    def load_program(self, program_bytes: bytes) -> int:
        """Copy an encoded program image to address 0.

        Returns:
            Number of bytes copied (truncated at the memory capacity)
        """
        return self.memory.load_bytes(program_bytes)

    def is_halted(self) -> bool:
        return self.state.halted

    @property
    def halt_reason(self) -> str | None:
        """Why the model halted, or None while running."""
        return self.state.halt_reason

    def current_instruction(self) -> DecodedInstruction | None:
        """Decode the instruction at PC without executing it."""
        return decode(self._fetch(self.state.program_counter))

    def snapshot(self, memory_window: tuple[int, int] | None = None) -> StateSnapshot:
        """Capture PC, registers and optionally a window of memory words.

        Args:
            memory_window: (first_word, word_count) to include, or None
        """
        memory_words = None
        if memory_window is not None:
            first_word, word_count = memory_window
            memory_words = {
                index: self.memory.read_word(index * MEMORY_WORD_SIZE_BYTES)
                for index in range(first_word, first_word + word_count)
            }
        return StateSnapshot(
            program_counter=self.state.program_counter,
            registers=(0, *self.state.registers[1:]),
            memory_words=memory_words,
            halted=self.state.halted,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _check_register(index: int) -> None:
        if not 0 <= index < NUM_REGISTERS:
            raise RegisterAccessError(f"register index {index} outside x0-x31")

    def _read(self, index: int) -> int:
        return 0 if index == 0 else self.state.registers[index]

    def _write(self, index: int, value: int) -> None:
        if index != 0:
            self.state.registers[index] = value & MASK32

    def _fetch(self, pc: int) -> int:
        try:
            return self.memory.read_word(pc)
        except MemoryAccessError:
            return 0

    def _halt(self, reason: str) -> None:
        self.state.halted = True
        self.state.halt_reason = reason
        logger.info(f"Reference model halted: {reason}")

    def _execute_alu(self, instr: DecodedInstruction, pc: int) -> None:
        operand_b = (
            self._read(instr.rs2)
            if instr.format is InstructionFormat.REGISTER
            else instr.imm
        )
        self._write(instr.rd, ALU_EVALUATORS[instr.mnemonic](self._read(instr.rs1), operand_b))

    def _execute_load(self, instr: DecodedInstruction, pc: int) -> None:
        address = (self._read(instr.rs1) + instr.imm) & MASK32
        try:
            value = LOAD_EVALUATORS[instr.mnemonic](self.memory, address)
        except MemoryAccessError as e:
            logger.debug(f"{instr.mnemonic} at 0x{pc:08x} out of range, reads 0: {e}")
            value = 0
        self._write(instr.rd, value)

    def _execute_store(self, instr: DecodedInstruction, pc: int) -> None:
        address = (self._read(instr.rs1) + instr.imm) & MASK32
        try:
            self.memory.write(
                address, self._read(instr.rs2), STORE_WIDTHS[instr.mnemonic]
            )
        except MemoryAccessError as e:
            logger.debug(f"{instr.mnemonic} at 0x{pc:08x} out of range, dropped: {e}")

    def _execute_branch(self, instr: DecodedInstruction, pc: int) -> int | None:
        if branch_taken_decision(
            instr.mnemonic, self._read(instr.rs1), self._read(instr.rs2)
        ):
            return pc + instr.imm
        return None

    def _execute_upper(self, instr: DecodedInstruction, pc: int) -> None:
        _, evaluator = UPPER[instr.mnemonic]
        self._write(instr.rd, evaluator(pc, instr.imm))

    def _execute_jal(self, instr: DecodedInstruction, pc: int) -> int:
        self._write(instr.rd, pc + 4)
        return pc + instr.imm

    def _execute_jalr(self, instr: DecodedInstruction, pc: int) -> int:
        # Target uses rs1 before rd is overwritten (rd may equal rs1)
        target = (self._read(instr.rs1) + instr.imm) & ~1
        self._write(instr.rd, pc + 4)
        return target

    def _execute_fence(self, instr: DecodedInstruction, pc: int) -> None:
        pass

    def _execute_system(self, instr: DecodedInstruction, pc: int) -> None:
        self._halt(f"{instr.mnemonic} at 0x{pc:08x}")

    _EXECUTORS: dict[InstructionFormat, Callable] = {
        InstructionFormat.REGISTER: _execute_alu,
        InstructionFormat.IMMEDIATE: _execute_alu,
        InstructionFormat.SHIFT_IMMEDIATE: _execute_alu,
        InstructionFormat.LOAD: _execute_load,
        InstructionFormat.STORE: _execute_store,
        InstructionFormat.BRANCH: _execute_branch,
        InstructionFormat.UPPER_IMMEDIATE: _execute_upper,
        InstructionFormat.JUMP: _execute_jal,
        InstructionFormat.JUMP_REGISTER: _execute_jalr,
        InstructionFormat.FENCE: _execute_fence,
        InstructionFormat.SYSTEM: _execute_system,
    }
