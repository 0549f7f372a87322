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

"""Validation utilities and improved assertions.

Validation Utilities
====================

This module provides assertion and validation functions with rich error
reporting. Unlike bare Python assertions, these carry the offending values
as context so an encoding mistake in a test program is obvious at a glance.

Provided Utilities:

    ValidationError: AssertionError with a context dict
        - Stores context as attributes
        - Formats context in the error message

    Assertion Functions:
        - assert_in_range(): Check value bounds
        - assert_aligned(): Verify alignment

    HardwareAssertions: RISC-V-specific checks used by the instruction encoders
        - assert_register_valid(): Register index in [0, 31]
        - assert_immediate_12bit(): Immediate in [-2048, 2047]
        - assert_shift_amount(): Shift amount in [0, 31]
        - assert_branch_offset(): Even, 13-bit signed offset
        - assert_jump_offset(): Even, 21-bit signed offset

Example:
    >>> try:
    ...     HardwareAssertions.assert_register_valid(32)
    ... except ValidationError as e:
    ...     print(e.context["max"])
    31
"""

from typing import Any

from rv32i_lockstep.config import (
    BRANCH_OFFSET_MAX,
    BRANCH_OFFSET_MIN,
    IMM_12BIT_MAX,
    IMM_12BIT_MIN,
    JAL_OFFSET_MAX,
    JAL_OFFSET_MIN,
    LAST_REGISTER,
    SHIFT_AMOUNT_MASK,
)


class ValidationError(AssertionError):
    """Enhanced assertion error with context."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize with message and context."""
        self.context = context
        context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
        super().__init__(f"{message}\nContext:\n{context_str}" if context else message)


def assert_in_range(
    value: int, min_val: int, max_val: int, name: str = "value"
) -> None:
    """Assert value is within range."""
    if not min_val <= value <= max_val:
        raise ValidationError(
            f"{name} out of range",
            value=value,
            min=min_val,
            max=max_val,
        )


def assert_aligned(value: int, alignment: int, name: str = "value") -> None:
    """Assert value is properly aligned."""
    if value % alignment != 0:
        raise ValidationError(
            f"{name} not aligned to {alignment}-byte boundary",
            value=hex(value),
            alignment=alignment,
            misalignment=value % alignment,
        )


class HardwareAssertions:
    """Hardware-specific assertion helpers."""

    @staticmethod
    def assert_register_valid(reg: int) -> None:
        """Assert register number is valid."""
        assert_in_range(reg, 0, LAST_REGISTER, "register")

    @staticmethod
    def assert_immediate_12bit(imm: int) -> None:
        """Assert immediate fits in 12 bits (signed)."""
        assert_in_range(imm, IMM_12BIT_MIN, IMM_12BIT_MAX, "12-bit immediate")

    @staticmethod
    def assert_immediate_20bit_upper(imm: int) -> None:
        """Assert an upper immediate fits in 20 bits (unsigned field value)."""
        assert_in_range(imm, 0, (1 << 20) - 1, "20-bit upper immediate")

    @staticmethod
    def assert_shift_amount(shamt: int) -> None:
        """Assert shift amount fits the 5-bit shamt field."""
        assert_in_range(shamt, 0, SHIFT_AMOUNT_MASK, "shift amount")

    @staticmethod
    def assert_branch_offset(offset: int) -> None:
        """Assert branch offset is valid."""
        assert_aligned(offset, 2, "branch offset")
        assert_in_range(offset, BRANCH_OFFSET_MIN, BRANCH_OFFSET_MAX, "branch offset")

    @staticmethod
    def assert_jump_offset(offset: int) -> None:
        """Assert jump offset is valid."""
        assert_aligned(offset, 2, "jump offset")
        assert_in_range(offset, JAL_OFFSET_MIN, JAL_OFFSET_MAX, "jump offset")
