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

"""Hardware models the lockstep driver can run against.

Modules
-------
interface
    HardwareModel protocol (peek/poke/settle/close) and HardwareView

single_cycle_core
    Behavioral single-cycle RV32I core with cpu_top-style named storage

cocotb_dut
    HardwareModel over a cocotb DUT handle; import it only from inside a
    running simulation
"""

from rv32i_lockstep.hardware.interface import HardwareModel, HardwareView
from rv32i_lockstep.hardware.single_cycle_core import SingleCycleCore

__all__ = [
    "HardwareModel",
    "HardwareView",
    "SingleCycleCore",
]
