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

"""Lockstep execution, comparison and test sequencing.

Modules
-------
comparator
    StateSnapshot comparison producing ComparisonVerdicts

driver
    LockstepDriver: reset protocol, clock ticks and per-round compare

harness
    RunContext, LockstepHarness and run counters

suite
    LockstepProgram and the built-in DEFAULT_SUITE
"""

from rv32i_lockstep.lockstep.comparator import ComparisonVerdict, FieldMismatch, compare
from rv32i_lockstep.lockstep.driver import DriverState, LockstepDriver
from rv32i_lockstep.lockstep.harness import (
    LockstepHarness,
    ProgramResult,
    RunContext,
    RunCounters,
)
from rv32i_lockstep.lockstep.suite import DEFAULT_SUITE, LockstepProgram

__all__ = [
    "ComparisonVerdict",
    "FieldMismatch",
    "compare",
    "DriverState",
    "LockstepDriver",
    "RunContext",
    "RunCounters",
    "LockstepHarness",
    "ProgramResult",
    "DEFAULT_SUITE",
    "LockstepProgram",
]
