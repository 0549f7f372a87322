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

"""Behavioral single-cycle RV32I core with whitebox-accessible storage.

Single-Cycle Core
=================

A cycle-level stand-in for the ``cpu_top`` RTL, organized the way the RTL
is: a main decoder producing control signals, an immediate generator, an ALU
selected by funct3/funct7, a word-addressed instruction memory and a
word-addressed data memory. It retires exactly one instruction per rising
clock edge, which is what makes one-cycle-per-instruction lockstep valid.

Storage (named by HardwareSignalPaths):
    clk, rst                 1-bit inputs, driven by the lockstep driver
    pc                       program counter (on the reset network)
    halted                   halt flag (on the reset network)
    regfile.registers[32]    register file (NOT on the reset network)
    imem.mem[N]              instruction memory
    dmem.mem[N]              data memory (NOT on the reset network)

Like the RTL, reset only clears pc and halted; the register file and data
memory keep whatever they held, so the driver must clear them explicitly.

Illegal encodings, ecall and ebreak set ``halted``, advance pc by 4 once and
then freeze the core, matching the reference interpreter. Data accesses
outside the data memory read 0 and drop writes.

Subclasses may override ``_alu`` (or any stage) to inject faults.
"""

import logging
from dataclasses import dataclass

from rv32i_lockstep.config import (
    MASK32,
    MEMORY_WORD_SIZE_BYTES,
    NUM_REGISTERS,
    HardwareSignalPaths,
)
from rv32i_lockstep.encoders.instruction_encode import (
    EBREAK_INSTRUCTION,
    ECALL_INSTRUCTION,
    FUNCT7_ALT,
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
from rv32i_lockstep.exceptions import SignalPathError
from rv32i_lockstep.models.alu_model import (
    add,
    and_rv,
    lb,
    lbu,
    lh,
    lhu,
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
from rv32i_lockstep.models.branch_model import branch_taken_decision
from rv32i_lockstep.utils.riscv_utils import bit_field, sign_extend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControlSignals:
    """Main-decoder outputs for one opcode."""

    reg_write: bool = False
    alu_src_imm: bool = False
    mem_read: bool = False
    mem_write: bool = False
    branch: bool = False
    jump: bool = False
    jump_register: bool = False
    upper: bool = False
    system: bool = False


MAIN_DECODER: dict[int, ControlSignals] = {
    OPCODE_OP: ControlSignals(reg_write=True),
    OPCODE_OP_IMM: ControlSignals(reg_write=True, alu_src_imm=True),
    OPCODE_LOAD: ControlSignals(reg_write=True, alu_src_imm=True, mem_read=True),
    OPCODE_STORE: ControlSignals(alu_src_imm=True, mem_write=True),
    OPCODE_BRANCH: ControlSignals(branch=True),
    OPCODE_JAL: ControlSignals(reg_write=True, jump=True),
    OPCODE_JALR: ControlSignals(reg_write=True, alu_src_imm=True, jump_register=True),
    OPCODE_LUI: ControlSignals(reg_write=True, upper=True),
    OPCODE_AUIPC: ControlSignals(reg_write=True, upper=True),
    OPCODE_MISC_MEM: ControlSignals(),
    OPCODE_SYSTEM: ControlSignals(system=True),
}

ALU_FUNCT3 = {0: add, 1: sll, 2: slt, 3: sltu, 4: xor, 5: srl, 6: or_rv, 7: and_rv}
ALU_FUNCT3_ALT = {0: sub, 5: sra}

LOAD_UNITS = {0: (lb, 1), 1: (lh, 2), 2: (lw, 4), 4: (lbu, 1), 5: (lhu, 2)}
STORE_BYTES = {0: 1, 1: 2, 2: 4}
BRANCH_CONDITIONS = {0: "beq", 1: "bne", 4: "blt", 5: "bge", 6: "bltu", 7: "bgeu"}


def immediate_generator(word: int, opcode: int) -> int:
    """Assemble the sign-extended immediate for an opcode's format."""
    if opcode == OPCODE_STORE:
        return sign_extend(bit_field(word, 31, 25) << 5 | bit_field(word, 11, 7), 12)
    if opcode == OPCODE_BRANCH:
        return sign_extend(
            bit_field(word, 31, 31) << 12
            | bit_field(word, 7, 7) << 11
            | bit_field(word, 30, 25) << 5
            | bit_field(word, 11, 8) << 1,
            13,
        )
    if opcode in (OPCODE_LUI, OPCODE_AUIPC):
        return word & 0xFFFFF000
    if opcode == OPCODE_JAL:
        return sign_extend(
            bit_field(word, 31, 31) << 20
            | bit_field(word, 19, 12) << 12
            | bit_field(word, 20, 20) << 11
            | bit_field(word, 30, 21) << 1,
            21,
        )
    return sign_extend(bit_field(word, 31, 20), 12)


def is_legal(word: int) -> bool:
    """Check the funct fields of a word whose opcode the main decoder knows."""
    opcode = bit_field(word, 6, 0)
    funct3 = bit_field(word, 14, 12)
    funct7 = bit_field(word, 31, 25)
    if opcode == OPCODE_OP:
        return funct7 == 0 or (funct7 == FUNCT7_ALT and funct3 in ALU_FUNCT3_ALT)
    if opcode == OPCODE_OP_IMM:
        if funct3 == 1:
            return funct7 == 0
        if funct3 == 5:
            return funct7 in (0, FUNCT7_ALT)
        return True
    if opcode == OPCODE_LOAD:
        return funct3 in LOAD_UNITS
    if opcode == OPCODE_STORE:
        return funct3 in STORE_BYTES
    if opcode == OPCODE_BRANCH:
        return funct3 in BRANCH_CONDITIONS
    if opcode in (OPCODE_JALR, OPCODE_MISC_MEM):
        return funct3 == 0
    if opcode == OPCODE_SYSTEM:
        return False
    return opcode in MAIN_DECODER


class _DataPort:
    """Byte view over the word-addressed data memory array."""

    def __init__(self, words: list[int]) -> None:
        self.words = words
        self.capacity_bytes = len(words) * MEMORY_WORD_SIZE_BYTES

    def contains(self, address: int, width: int) -> bool:
        return address + width <= self.capacity_bytes

    def read_byte(self, address: int) -> int:
        word = self.words[address // MEMORY_WORD_SIZE_BYTES]
        return (word >> (8 * (address % MEMORY_WORD_SIZE_BYTES))) & 0xFF

    def write_byte(self, address: int, value: int) -> None:
        index = address // MEMORY_WORD_SIZE_BYTES
        shift = 8 * (address % MEMORY_WORD_SIZE_BYTES)
        word = self.words[index] & ~(0xFF << shift) | (value & 0xFF) << shift
        self.words[index] = word & MASK32


class SingleCycleCore:
    """Clock/reset-driven single-cycle RV32I core implementing HardwareModel.

    State only changes in ``settle()`` on a rising clock edge, i.e. when clk
    was poked from 0 to 1 since the previous settle.
    """

    def __init__(self, paths: HardwareSignalPaths | None = None) -> None:
        self.paths = paths or HardwareSignalPaths()
        # The core always keeps a halt flag, exposed under the configured path
        self._halted_path = self.paths.halted or "halted"
        self._scalars = {
            self.paths.clock: 0,
            self.paths.reset: 0,
            self.paths.program_counter: 0,
            self._halted_path: 0,
        }
        self._widths = {self.paths.clock: 1, self.paths.reset: 1, self._halted_path: 1}
        self._arrays = {
            self.paths.register_file: [0] * NUM_REGISTERS,
            self.paths.instruction_memory: [0] * self.paths.instruction_memory_words,
            self.paths.data_memory: [0] * self.paths.data_memory_words,
        }
        self._last_clock = 0
        self.cycles = 0
        self.closed = False

    # ------------------------------------------------------------------
    # HardwareModel interface
    # ------------------------------------------------------------------

    def peek(self, path: str, index: int | None = None) -> int:
        if index is None:
            return self._scalar(path)
        return self._array(path, index)[index]

    def poke(self, path: str, value: int, index: int | None = None) -> None:
        if index is None:
            self._scalar(path)
            self._scalars[path] = value & ((1 << self._widths.get(path, 32)) - 1)
        else:
            self._array(path, index)[index] = value & MASK32

    async def settle(self) -> None:
        clock = self._scalars[self.paths.clock]
        rising = clock == 1 and self._last_clock == 0
        self._last_clock = clock
        if rising:
            self.cycles += 1
            self._on_rising_edge()

    def close(self) -> None:
        self.closed = True

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def pc(self) -> int:
        return self._scalars[self.paths.program_counter]

    @pc.setter
    def pc(self, value: int) -> None:
        self._scalars[self.paths.program_counter] = value & MASK32

    @property
    def halted(self) -> bool:
        return bool(self._scalars[self._halted_path])

    @property
    def registers(self) -> list[int]:
        return self._arrays[self.paths.register_file]

    @property
    def instruction_memory(self) -> list[int]:
        return self._arrays[self.paths.instruction_memory]

    @property
    def data_memory(self) -> list[int]:
        return self._arrays[self.paths.data_memory]

    # ------------------------------------------------------------------
    # Datapath
    # ------------------------------------------------------------------

    def _scalar(self, path: str) -> int:
        try:
            return self._scalars[path]
        except KeyError:
            raise SignalPathError(f"no signal named {path!r}") from None

    def _array(self, path: str, index: int) -> list[int]:
        try:
            storage = self._arrays[path]
        except KeyError:
            raise SignalPathError(f"no array named {path!r}") from None
        if not 0 <= index < len(storage):
            raise SignalPathError(f"{path}[{index}] outside 0..{len(storage) - 1}")
        return storage

    def _on_rising_edge(self) -> None:
        if self._scalars[self.paths.reset]:
            self.pc = 0
            self._scalars[self._halted_path] = 0
            return
        if self.halted:
            return
        self.pc = self._execute(self.pc)

    def _fetch(self, pc: int) -> int:
        index = pc // MEMORY_WORD_SIZE_BYTES
        if index >= len(self.instruction_memory):
            return 0
        return self.instruction_memory[index]

    def _read_register(self, index: int) -> int:
        return 0 if index == 0 else self.registers[index]

    def _alu(self, funct3: int, alternate: bool, operand_a: int, operand_b: int) -> int:
        operation = ALU_FUNCT3_ALT[funct3] if alternate else ALU_FUNCT3[funct3]
        return operation(operand_a, operand_b)

    def _load(self, funct3: int, address: int) -> int:
        unit, width = LOAD_UNITS[funct3]
        port = _DataPort(self.data_memory)
        if not port.contains(address, width):
            return 0
        return unit(port, address)

    def _store(self, funct3: int, address: int, value: int) -> None:
        width = STORE_BYTES[funct3]
        port = _DataPort(self.data_memory)
        if not port.contains(address, width):
            return
        for offset in range(width):
            port.write_byte(address + offset, value >> (8 * offset))

    def _execute(self, pc: int) -> int:
        """Run one instruction through the datapath and return the next pc."""
        word = self._fetch(pc)
        opcode = bit_field(word, 6, 0)
        control = MAIN_DECODER.get(opcode)

        if control is None or control.system or not is_legal(word):
            if word not in (ECALL_INSTRUCTION, EBREAK_INSTRUCTION):
                logger.info(f"Core halted on illegal instruction 0x{word:08x} at 0x{pc:08x}")
            self._scalars[self._halted_path] = 1
            return pc + 4

        rd = bit_field(word, 11, 7)
        funct3 = bit_field(word, 14, 12)
        rs1_value = self._read_register(bit_field(word, 19, 15))
        rs2_value = self._read_register(bit_field(word, 24, 20))
        imm = immediate_generator(word, opcode)
        operand_b = imm if control.alu_src_imm else rs2_value

        next_pc = pc + 4
        result = 0
        if control.upper:
            result = imm if opcode == OPCODE_LUI else add(pc, imm)
        elif control.jump:
            result, next_pc = pc + 4, pc + imm
        elif control.jump_register:
            result, next_pc = pc + 4, add(rs1_value, imm) & ~1
        elif control.branch:
            if branch_taken_decision(BRANCH_CONDITIONS[funct3], rs1_value, rs2_value):
                next_pc = pc + imm
        elif control.mem_read:
            result = self._load(funct3, add(rs1_value, imm))
        elif control.mem_write:
            self._store(funct3, add(rs1_value, imm), rs2_value)
        elif control.reg_write:
            alternate = bit_field(word, 31, 25) == FUNCT7_ALT and (
                opcode == OPCODE_OP or funct3 == 5
            )
            if opcode == OPCODE_OP_IMM and funct3 in (1, 5):
                operand_b = bit_field(word, 24, 20)
            result = self._alu(funct3, alternate, rs1_value, operand_b)

        if control.reg_write and rd != 0:
            self.registers[rd] = result & MASK32
        return next_pc & MASK32
