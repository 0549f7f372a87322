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

"""Custom exceptions for testbench errors.

Exceptions
==========

This module defines a hierarchy of exception types for the failure scenarios
of the testbench. Divergence between the two models is reported through
comparison verdicts, not exceptions; the types here cover misuse, bad
configuration and setup failures. MismatchError exists for callers (such as
the cocotb entry point) that want a divergence to fail loudly.
"""

from typing import Any


class VerificationError(Exception):
    """Base exception for all testbench failures.

    All testbench-specific exceptions inherit from this base class,
    allowing callers to catch all of them with a single handler.
    """

    pass


class RegisterAccessError(VerificationError):
    """Invalid register access attempt.

    Raised when a register index falls outside x0-x31.
    """

    pass


class MemoryAccessError(VerificationError):
    """Memory access outside the bound buffer.

    Raised by the reference memory when an access would run past its fixed
    capacity. The interpreter handles it by defining the access (loads read
    zero, stores are dropped) so it never escapes a step.
    """

    def __init__(self, message: str, address: int, width: int, capacity: int):
        """Initialize memory access error with context.

        Args:
            message: Error description
            address: First byte address of the access
            width: Access width in bytes (1, 2 or 4)
            capacity: Capacity of the memory in bytes
        """
        super().__init__(message)
        self.address = address
        self.width = width
        self.capacity = capacity


class ConfigurationError(VerificationError):
    """Harness configuration that cannot be honored (e.g. reset too short)."""

    pass


class ProgramCapacityError(VerificationError):
    """Program does not fit in a target store.

    Raised only under the strict capacity policy; otherwise truncation is
    logged as a warning and reported in the encode result.
    """

    def __init__(self, message: str, target: str, program_words: int, capacity: int):
        """Initialize capacity error with context.

        Args:
            message: Error description
            target: Name of the store that overflowed
            program_words: Length of the program in words
            capacity: Capacity of the target in words
        """
        super().__init__(message)
        self.target = target
        self.program_words = program_words
        self.capacity = capacity


class ProgramFormatError(VerificationError):
    """Malformed program image file."""

    def __init__(self, message: str, line_number: int | None = None):
        """Initialize format error.

        Args:
            message: Error description
            line_number: 1-based line of the offending text, if known
        """
        super().__init__(message)
        self.line_number = line_number


class SignalPathError(VerificationError):
    """Unknown hardware signal path or out-of-range array index."""

    pass


class LockstepStateError(VerificationError):
    """Driver operation invoked in the wrong driver state."""

    pass


class HarnessSetupError(VerificationError):
    """Model instances could not be created; the run cannot proceed."""

    pass


class MismatchError(VerificationError):
    """Hardware and reference model diverged.

    Raised when a caller chooses to turn a failing verdict into an
    exception, e.g. to fail a cocotb test.
    """

    def __init__(self, message: str, verdict: Any = None, cycle: int | None = None):
        """Initialize mismatch error with comparison context.

        Args:
            message: Error description
            verdict: The failing ComparisonVerdict
            cycle: Lockstep round in which the mismatch occurred
        """
        super().__init__(message)
        self.verdict = verdict
        self.cycle = cycle
