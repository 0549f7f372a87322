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

"""HardwareModel binding for an RTL design running under cocotb.

Cocotb DUT
==========

Resolves the dot-separated paths of HardwareSignalPaths against the DUT
handle hierarchy (``"regfile.registers"`` -> ``dut.regfile.registers``) and
reads/writes values through cocotb handles. ``settle()`` waits a short
simulation delay so the simulator re-evaluates combinational logic after
the driver pokes the clock.

Only usable inside a running simulation; import it from cocotb tests.
"""

from cocotb.triggers import Timer

from rv32i_lockstep.config import MASK32
from rv32i_lockstep.exceptions import SignalPathError


class CocotbHardware:
    """HardwareModel over a cocotb DUT handle.

    Attributes:
        dut: Top-level cocotb handle (e.g. ``cpu_top``)
        settle_time_ns: Simulation time to wait in each settle()
    """

    def __init__(self, dut, settle_time_ns: int = 1) -> None:
        self.dut = dut
        self.settle_time_ns = settle_time_ns
        self._handles: dict = {}

    def _resolve(self, path: str, index: int | None):
        handle = self._handles.get(path)
        if handle is None:
            handle = self.dut
            for part in path.split("."):
                try:
                    handle = getattr(handle, part)
                except AttributeError:
                    raise SignalPathError(
                        f"{self.dut._name} has no signal {path!r} (missing {part!r})"
                    ) from None
            self._handles[path] = handle
        if index is None:
            return handle
        try:
            return handle[index]
        except IndexError:
            raise SignalPathError(f"{path}[{index}] is out of range") from None

    def peek(self, path: str, index: int | None = None) -> int:
        return int(self._resolve(path, index).value)

    def poke(self, path: str, value: int, index: int | None = None) -> None:
        self._resolve(path, index).value = value & MASK32

    async def settle(self) -> None:
        await Timer(self.settle_time_ns, unit="ns")

    def close(self) -> None:
        self._handles.clear()
