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

"""VCD waveform recording of lockstep runs.

Trace Writer
============

Records the observable hardware state after every half-cycle, one VCD time
unit per half-cycle, so a divergence reported at cycle N can be found at
time 2N in a waveform viewer. Variables live in two scopes:

    cpu_top:    clk, rst, pc, x1 .. x31
    reference:  pc, halted

Values are only emitted when they change.
"""

import logging
from collections.abc import Mapping
from typing import TextIO

from vcd import VCDWriter

from rv32i_lockstep.config import NUM_REGISTERS, XLEN

logger = logging.getLogger(__name__)

HARDWARE_SCOPE = "cpu_top"
REFERENCE_SCOPE = "reference"


def trace_signal_widths() -> dict[tuple[str, str], int]:
    """(scope, name) -> bit width of every traced variable."""
    widths = {
        (HARDWARE_SCOPE, "clk"): 1,
        (HARDWARE_SCOPE, "rst"): 1,
        (HARDWARE_SCOPE, "pc"): XLEN,
    }
    for index in range(1, NUM_REGISTERS):
        widths[(HARDWARE_SCOPE, f"x{index}")] = XLEN
    widths[(REFERENCE_SCOPE, "pc")] = XLEN
    widths[(REFERENCE_SCOPE, "halted")] = 1
    return widths


class VcdTraceWriter:
    """Half-cycle waveform sink backed by pyvcd.

    Usage::

        with VcdTraceWriter("run.vcd") as tracer:
            tracer.sample(0, {(HARDWARE_SCOPE, "clk"): 1})
    """

    def __init__(self, path: str, timescale: str = "1 ns") -> None:
        self.path = path
        self._stream: TextIO = open(path, "w")
        self._writer = VCDWriter(self._stream, timescale=timescale, date="today")
        self._variables = {
            key: self._writer.register_var(
                key[0], key[1], "wire" if width == 1 else "reg", size=width, init=0
            )
            for key, width in trace_signal_widths().items()
        }
        self._closed = False
        logger.info(f"Recording waveform to {path}")

    def sample(self, timestamp: int, values: Mapping[tuple[str, str], int]) -> None:
        """Record values at a timestamp (must not go backwards).

        Keys that are not traced variables are ignored.
        """
        if self._closed:
            return
        for key, value in values.items():
            variable = self._variables.get(key)
            if variable is not None:
                self._writer.change(variable, timestamp, value)

    def close(self) -> None:
        """Flush and close the VCD file (idempotent)."""
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        self._stream.close()

    def __enter__(self) -> "VcdTraceWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
