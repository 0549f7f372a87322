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

"""RV32I lockstep conformance testbench.

This package drives a cycle-level RV32I hardware model and an
instruction-level golden reference interpreter with the same programs,
advances them in lockstep (one clock cycle per instruction) and reports the
first architectural divergence.

Package Structure
-----------------

Subpackages:
    encoders
        RV32I instruction encoders, mnemonic tables and the program encoder
        that fills instruction stores (NOP-padded)

    models
        The golden reference interpreter and its ALU, branch and memory models

    hardware
        The whitebox HardwareModel boundary, a behavioral single-cycle core and
        the cocotb binding for RTL simulation

    lockstep
        Lockstep driver, state comparator, test harness and built-in programs

    utils
        Bit utilities, validation, diagnostics formatting and VCD tracing

Modules:
    config
        Central configuration constants, signal paths and harness settings

    verification_types
        Type aliases and the StateSnapshot record

    exceptions
        Custom exception hierarchy rooted at VerificationError

Quick Start
-----------
Run the built-in suite against the behavioral core::

    python -m rv32i_lockstep

Run against RTL under cocotb (see cocotb_tests)::

    make SIM=verilator TOPLEVEL=cpu_top COCOTB_TEST_MODULES=cocotb_tests.test_lockstep
"""

# Re-export commonly used types for convenience
from rv32i_lockstep.config import MASK32, NOP_INSTRUCTION, HarnessConfig
from rv32i_lockstep.exceptions import VerificationError
from rv32i_lockstep.verification_types import (
    Address,
    Instruction,
    RegisterIndex,
    StateSnapshot,
)

__all__ = [
    "Address",
    "RegisterIndex",
    "Instruction",
    "StateSnapshot",
    "MASK32",
    "NOP_INSTRUCTION",
    "HarnessConfig",
    "VerificationError",
]
