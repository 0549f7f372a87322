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

"""Software reference models.

Modules
-------
alu_model
    32-bit ALU evaluators (add, sub, shifts, comparisons, upper immediates)
    and little-endian load evaluators. Uses decorators for automatic result
    masking and shift limiting.

branch_model
    Branch decision logic for BEQ, BNE, BLT, BGE, BLTU, BGEU

memory_model
    Fixed-capacity, byte-addressable little-endian memory

reference_cpu
    The golden instruction-level interpreter (import it directly; it is not
    re-exported here because it depends on the encoders package)

Usage
-----
::

    from rv32i_lockstep.models.alu_model import add
    from rv32i_lockstep.models.branch_model import branch_taken_decision

    result = add(10, 20)  # Returns 30
    taken = branch_taken_decision("beq", 5, 5)  # Returns True
"""

from rv32i_lockstep.models.alu_model import add, and_rv, or_rv, sub, xor
from rv32i_lockstep.models.branch_model import branch_taken_decision
from rv32i_lockstep.models.memory_model import ReferenceMemory

__all__ = [
    "add",
    "sub",
    "and_rv",
    "or_rv",
    "xor",
    "branch_taken_decision",
    "ReferenceMemory",
]
