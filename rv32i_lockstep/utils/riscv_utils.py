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

"""RISC-V type conversion and bit-field utilities.

RISC-V UTILS
============

This module provides utility functions for RISC-V data type conversions:
- Sign extension for arbitrary bit widths
- Signed/unsigned 32-bit integer conversions
- Bit-field extraction from instruction words

Constants like MASK32 should be imported from config.
"""

from rv32i_lockstep.config import MASK32

__all__ = ["sign_extend", "to_signed32", "to_unsigned32", "bit_field"]


def sign_extend(val: int, bits: int) -> int:
    """Sign extend a value to a specified length in bits.

    Args:
        val: Value to sign-extend
        bits: Number of bits in the original value

    Returns:
        Sign-extended value as a Python int (unbounded)

    Example:
        >>> sign_extend(0xFF, 8)  # Extend 8-bit -1 to full width
        -1
        >>> sign_extend(0x7F, 8)  # Extend 8-bit +127 to full width
        127
    """
    sign = 1 << (bits - 1)
    return (val & (sign - 1)) - (val & sign)


def to_signed32(val: int) -> int:
    """Cast to signed 32-bit integer.

    Args:
        val: Value to convert (any int)

    Returns:
        Signed 32-bit integer representation
    """
    return sign_extend(val & MASK32, 32)


def to_unsigned32(val: int) -> int:
    """Cast to unsigned 32-bit integer.

    Args:
        val: Value to convert (any int)

    Returns:
        Unsigned 32-bit integer (0 to 2^32-1)
    """
    return val & MASK32


def bit_field(word: int, high: int, low: int) -> int:
    """Extract bits [high:low] (inclusive) of a word.

    Example:
        >>> bit_field(0x002081B3, 6, 0)  # opcode of add x3, x1, x2
        51
    """
    return (word >> low) & ((1 << (high - low + 1)) - 1)
