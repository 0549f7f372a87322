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

"""Simulator entry points for lockstep verification of RTL.

These cocotb tests run the lockstep harness against a real ``cpu_top``
design instead of the behavioral core. The RTL must expose the storage
named by HardwareSignalPaths (``pc``, ``regfile.registers``, ``imem.mem``,
``dmem.mem``) and leave ``clk`` and ``rst`` undriven so the lockstep driver
owns them.

Test Modules
------------
test_lockstep
    Built-in suite, optional hex program from the environment, and a
    reset-protocol check

Running Tests
-------------
With a cocotb makefile for the design::

    make SIM=verilator TOPLEVEL=cpu_top COCOTB_TEST_MODULES=cocotb_tests.test_lockstep

Harness settings come from LOCKSTEP_* environment variables
(see HarnessConfig.from_environment).
"""
