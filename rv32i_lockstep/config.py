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

"""Central configuration for the lockstep testbench.

Configuration
=============

This module contains the configuration constants used throughout the
testbench, plus the two dataclasses that describe a particular run:

    - HardwareSignalPaths: where the hardware model keeps its named storage
    - HarnessConfig: per-run knobs (reset length, trace file, capacity policy)

Organization:
    - Memory Configuration (capacities of both models' stores)
    - Register File Configuration
    - RISC-V Data Type Masks
    - Immediate Field Constraints
    - Reset / Run Defaults
    - Hardware Signal Path Configuration
    - Harness Configuration

Usage:
    >>> from rv32i_lockstep.config import MASK32, NOP_INSTRUCTION
    >>> result = (value + immediate) & MASK32

    To point the testbench at a differently named hierarchy:

    >>> paths = HardwareSignalPaths(register_file="core.rf.mem")
    >>> config = HarnessConfig(signal_paths=paths)

Environment:
    HarnessConfig.from_environment() reads LOCKSTEP_RESET_CYCLES,
    LOCKSTEP_TRACE, LOCKSTEP_STRICT_CAPACITY and LOCKSTEP_MEMORY_WINDOW so the
    cocotb entry point can be parameterized from the simulator's make line.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from rv32i_lockstep.exceptions import ConfigurationError

# ============================================================================
# Memory Configuration
# ============================================================================

MEMORY_WORD_SIZE_BYTES: Final[int] = 4
"""Size of a memory word in bytes (32-bit words)."""

REFERENCE_MEMORY_SIZE_BYTES: Final[int] = 4 * 1024
"""Capacity of the reference model's unified, byte-addressed memory (4KB)."""

INSTRUCTION_MEMORY_SIZE_WORDS: Final[int] = 1024
"""Capacity of the hardware instruction store in words."""

DATA_MEMORY_SIZE_WORDS: Final[int] = 1024
"""Capacity of the hardware data memory in words."""

# ============================================================================
# Register File Configuration
# ============================================================================

NUM_REGISTERS: Final[int] = 32
"""Number of general-purpose registers in RISC-V (x0-x31)."""

LAST_REGISTER: Final[int] = 31
"""Last register index."""

# ============================================================================
# RISC-V Data Type Masks
# ============================================================================

XLEN: Final[int] = 32
"""RISC-V XLEN parameter (32 for RV32)."""

MASK32: Final[int] = (1 << 32) - 1
"""32-bit mask (0xFFFF_FFFF)."""

NOP_INSTRUCTION: Final[int] = 0x00000013
"""Canonical NOP encoding (addi x0, x0, 0), used to pad program images."""

# ============================================================================
# Immediate Field Constraints
# ============================================================================

IMM_12BIT_MIN: Final[int] = -2048
"""Minimum value for 12-bit signed immediate (-2^11)."""

IMM_12BIT_MAX: Final[int] = 2047
"""Maximum value for 12-bit signed immediate (2^11 - 1)."""

IMM_12BIT_MASK: Final[int] = 0xFFF
"""Mask for 12-bit immediate values."""

SHIFT_AMOUNT_MASK: Final[int] = 0x1F
"""Mask for shift amount (5 bits)."""

BRANCH_OFFSET_MIN: Final[int] = -4096
"""Minimum branch offset in bytes (-2^12)."""

BRANCH_OFFSET_MAX: Final[int] = 4094
"""Maximum branch offset in bytes (2^12 - 2, must be even)."""

JAL_OFFSET_MIN: Final[int] = -1048576
"""Minimum JAL offset in bytes (-2^20)."""

JAL_OFFSET_MAX: Final[int] = 1048574
"""Maximum JAL offset in bytes (2^20 - 2, must be even)."""

# ============================================================================
# Reset / Run Defaults
# ============================================================================

MIN_RESET_CYCLES: Final[int] = 5
"""Fewest clock cycles reset may be held for the hardware state to settle."""

DEFAULT_RESET_CYCLES: Final[int] = 5
"""Default number of clock cycles to hold reset."""

DEFAULT_CYCLE_BUDGET: Final[int] = 16
"""Default number of lockstep rounds for a program loaded from a file."""

# ============================================================================
# Hardware Signal Path Configuration
# ============================================================================


@dataclass(frozen=True)
class HardwareSignalPaths:
    """Named storage of the hardware model, addressed by hierarchical path.

    Paths are dot-separated strings relative to the top-level model, e.g.
    ``"regfile.registers"`` means ``top.regfile.registers``. Arrays are indexed
    separately by the caller, so only the array itself is named here.

    Default Paths:
        These match a single-cycle ``cpu_top`` with a register file instance
        ``regfile``, instruction memory ``imem`` and data memory ``dmem``.
        Override for a different hierarchy:

        >>> HardwareSignalPaths(program_counter="core.pc_reg.q")
    """

    clock: str = "clk"
    """Clock input."""

    reset: str = "rst"
    """Active-high reset input."""

    program_counter: str = "pc"
    """Architectural program counter register."""

    register_file: str = "regfile.registers"
    """Register file array (32 words, no reset)."""

    instruction_memory: str = "imem.mem"
    """Word-addressed instruction store."""

    data_memory: str = "dmem.mem"
    """Word-addressed data memory (no reset)."""

    halted: str | None = "halted"
    """Halt flag, or None if the model has none (snapshots then report False)."""

    instruction_memory_words: int = INSTRUCTION_MEMORY_SIZE_WORDS
    """Capacity of the instruction store in words."""

    data_memory_words: int = DATA_MEMORY_SIZE_WORDS
    """Capacity of the data memory in words."""


# ============================================================================
# Harness Configuration
# ============================================================================


@dataclass
class HarnessConfig:
    """Configuration for one harness run.

    Attributes:
        reset_cycles: Clock cycles reset is held (at least MIN_RESET_CYCLES)
        trace_path: VCD file to record, or None for no waveform
        strict_capacity: Raise instead of warn when a program exceeds a store
        memory_compare_window: (first_word, word_count) of data memory to
            compare every cycle, or None to compare PC and registers only
        reference_memory_bytes: Capacity of the reference model's memory
        signal_paths: Hardware storage locations
    """

    reset_cycles: int = DEFAULT_RESET_CYCLES
    trace_path: str | None = None
    strict_capacity: bool = False
    memory_compare_window: tuple[int, int] | None = None
    reference_memory_bytes: int = REFERENCE_MEMORY_SIZE_BYTES
    signal_paths: HardwareSignalPaths = field(default_factory=HardwareSignalPaths)

    def __post_init__(self) -> None:
        """Reject configurations the driver cannot honor."""
        if self.reset_cycles < MIN_RESET_CYCLES:
            raise ConfigurationError(
                f"reset must be held for at least {MIN_RESET_CYCLES} cycles, "
                f"got {self.reset_cycles}"
            )
        if (
            self.reference_memory_bytes <= 0
            or self.reference_memory_bytes % MEMORY_WORD_SIZE_BYTES
        ):
            raise ConfigurationError(
                "reference memory size must be a positive multiple of "
                f"{MEMORY_WORD_SIZE_BYTES}, got {self.reference_memory_bytes}"
            )
        if self.memory_compare_window is not None:
            first_word, word_count = self.memory_compare_window
            reference_words = self.reference_memory_bytes // MEMORY_WORD_SIZE_BYTES
            limit = min(self.signal_paths.data_memory_words, reference_words)
            if first_word < 0 or word_count <= 0 or first_word + word_count > limit:
                raise ConfigurationError(
                    f"memory compare window {self.memory_compare_window} "
                    f"does not fit in {limit} words"
                )

    @classmethod
    def from_environment(
        cls, environ: Mapping[str, str] | None = None
    ) -> "HarnessConfig":
        """Build a configuration from LOCKSTEP_* environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            HarnessConfig with unset variables left at their defaults

        Raises:
            ConfigurationError: If a variable cannot be parsed
        """
        if environ is None:
            environ = os.environ

        kwargs: dict = {}
        try:
            if "LOCKSTEP_RESET_CYCLES" in environ:
                kwargs["reset_cycles"] = int(environ["LOCKSTEP_RESET_CYCLES"])
            if "LOCKSTEP_MEMORY_WINDOW" in environ:
                kwargs["memory_compare_window"] = parse_memory_window(
                    environ["LOCKSTEP_MEMORY_WINDOW"]
                )
        except ValueError as e:
            raise ConfigurationError(f"invalid LOCKSTEP_* setting: {e}") from e

        if environ.get("LOCKSTEP_TRACE"):
            kwargs["trace_path"] = environ["LOCKSTEP_TRACE"]
        strict = environ.get("LOCKSTEP_STRICT_CAPACITY", "")
        kwargs["strict_capacity"] = strict.lower() in ("1", "true", "yes")
        return cls(**kwargs)


def parse_memory_window(text: str) -> tuple[int, int]:
    """Parse a ``FIRST:COUNT`` word window (either part may be hex with 0x).

    Examples:
        >>> parse_memory_window("0x100:16")
        (256, 16)
    """
    first, sep, count = text.partition(":")
    if not sep:
        raise ValueError(f"expected FIRST:COUNT, got {text!r}")
    return int(first, 0), int(count, 0)
