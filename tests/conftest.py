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

"""Shared fixtures for the lockstep unit tests."""

import logging

import pytest

from rv32i_lockstep.config import REFERENCE_MEMORY_SIZE_BYTES, HarnessConfig
from rv32i_lockstep.encoders.program_encoder import program_to_bytes
from rv32i_lockstep.hardware.single_cycle_core import SingleCycleCore
from rv32i_lockstep.lockstep.driver import LockstepDriver
from rv32i_lockstep.models.memory_model import ReferenceMemory
from rv32i_lockstep.models.reference_cpu import ReferenceCPU


@pytest.fixture
def memory() -> ReferenceMemory:
    return ReferenceMemory(REFERENCE_MEMORY_SIZE_BYTES)


@pytest.fixture
def cpu(memory: ReferenceMemory) -> ReferenceCPU:
    return ReferenceCPU(memory)


@pytest.fixture
def execute(cpu: ReferenceCPU):
    """Load words at address 0 and step the reference model ``steps`` times."""

    def _execute(words, steps: int | None = None) -> ReferenceCPU:
        cpu.load_program(program_to_bytes(words))
        cpu.initialize()
        for _ in range(len(words) if steps is None else steps):
            cpu.step()
        return cpu

    return _execute


@pytest.fixture
def config() -> HarnessConfig:
    return HarnessConfig()


@pytest.fixture
def core(config: HarnessConfig) -> SingleCycleCore:
    return SingleCycleCore(config.signal_paths)


@pytest.fixture
def driver(core: SingleCycleCore, cpu: ReferenceCPU, config: HarnessConfig):
    return LockstepDriver(core, cpu, config)


@pytest.fixture(autouse=True)
def _capture_info_logs(caplog):
    caplog.set_level(logging.INFO)
