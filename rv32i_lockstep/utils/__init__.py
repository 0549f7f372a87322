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

"""Utility functions for the lockstep testbench.

Modules
-------
riscv_utils
    Sign extension, signed/unsigned 32-bit casts and bit-field extraction

validation
    ValidationError and HardwareAssertions used by the instruction encoders

diagnostics
    LockstepLogger: banners, mismatch lines, state dumps and run summary

trace
    VcdTraceWriter: half-cycle waveform recording with pyvcd
"""

from rv32i_lockstep.utils.riscv_utils import sign_extend, to_signed32, to_unsigned32
from rv32i_lockstep.utils.validation import HardwareAssertions, ValidationError

__all__ = [
    "sign_extend",
    "to_signed32",
    "to_unsigned32",
    "HardwareAssertions",
    "ValidationError",
]
