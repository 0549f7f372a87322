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

"""Tests for the command-line entry point."""

import pytest

from rv32i_lockstep.cli import main
from rv32i_lockstep.lockstep.suite import SIMPLE_ADD


@pytest.fixture
def hex_program(tmp_path):
    path = tmp_path / "simple_add.hex"
    path.write_text("".join(f"{word:08x}\n" for word in SIMPLE_ADD.words))
    return path


def test_builtin_suite_exits_zero(caplog):
    assert main([]) == 0
    assert "*** ALL TESTS PASSED ***" in caplog.text


def test_hex_program(hex_program, caplog):
    assert main(["--program", str(hex_program), "--cycles", "4"]) == 0
    assert "===== Running Test: simple_add =====" in caplog.text
    assert "Tests Passed: 1" in caplog.text


def test_trace_option_writes_vcd(hex_program, tmp_path):
    trace = tmp_path / "out.vcd"
    assert main(["--program", str(hex_program), "--trace", str(trace)]) == 0
    assert trace.exists()


@pytest.mark.parametrize(
    "args",
    [
        ["--reset-cycles", "2"],
        ["--cycles", "0", "--program", "unused.hex"],
        ["--program", "does-not-exist.hex"],
    ],
)
def test_errors_exit_one(args):
    assert main(args) == 1


def test_strict_capacity_rejects_oversized_program(tmp_path):
    path = tmp_path / "big.hex"
    path.write_text("00000013\n" * 1025)
    assert main(["--program", str(path), "--strict-capacity"]) == 1
    assert main(["--program", str(path), "--cycles", "2"]) == 0


def test_bad_memory_window_is_a_usage_error():
    with pytest.raises(SystemExit):
        main(["--memory-window", "nonsense"])
