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

"""Software model for RISC-V branch decisions.

Branch Model
============

Determines whether a conditional branch is taken from its two register
operands. The predicates are keyed by mnemonic; both the reference
interpreter and the behavioral hardware model resolve funct3 to a mnemonic
first and then ask this table.
"""

from collections.abc import Callable

from rv32i_lockstep.config import MASK32
from rv32i_lockstep.utils.riscv_utils import to_signed32
from rv32i_lockstep.utils.validation import ValidationError

BRANCH_PREDICATES: dict[str, Callable[[int, int], bool]] = {
    "beq": lambda a, b: (a & MASK32) == (b & MASK32),
    "bne": lambda a, b: (a & MASK32) != (b & MASK32),
    "blt": lambda a, b: to_signed32(a) < to_signed32(b),
    "bge": lambda a, b: to_signed32(a) >= to_signed32(b),
    "bltu": lambda a, b: (a & MASK32) < (b & MASK32),
    "bgeu": lambda a, b: (a & MASK32) >= (b & MASK32),
}
"""Branch mnemonic -> predicate over (rs1 value, rs2 value)."""


def branch_taken_decision(operation: str, operand_a: int, operand_b: int) -> bool:
    """Determine if a branch is taken.

    Args:
        operation: Branch mnemonic ("beq", "bne", "blt", "bge", "bltu", "bgeu")
        operand_a: Value from source register 1 (rs1)
        operand_b: Value from source register 2 (rs2)

    Returns:
        True if the branch condition holds

    Raises:
        ValidationError: If the mnemonic is not a branch
    """
    try:
        predicate = BRANCH_PREDICATES[operation]
    except KeyError:
        raise ValidationError(
            "Invalid branch operation",
            op=operation,
            valid_ops=sorted(BRANCH_PREDICATES),
        ) from None
    return predicate(operand_a, operand_b)
