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

"""Command-line entry point: run lockstep tests against the behavioral core.

Runs the built-in suite by default, or a single ``$readmemh`` program:

    python -m rv32i_lockstep
    python -m rv32i_lockstep --program loop.hex --cycles 40 --trace loop.vcd

Exit status is 0 when every test passed and 1 otherwise (including setup
and configuration errors).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rv32i_lockstep.config import (
    DEFAULT_CYCLE_BUDGET,
    DEFAULT_RESET_CYCLES,
    HarnessConfig,
    parse_memory_window,
)
from rv32i_lockstep.encoders.program_encoder import load_hex_program
from rv32i_lockstep.exceptions import VerificationError
from rv32i_lockstep.hardware.single_cycle_core import SingleCycleCore
from rv32i_lockstep.lockstep.harness import LockstepHarness, RunContext
from rv32i_lockstep.lockstep.suite import DEFAULT_SUITE, LockstepProgram
from rv32i_lockstep.utils.diagnostics import LockstepLogger

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rv32i-lockstep",
        description="Lockstep RV32I conformance testbench (hardware vs reference model)",
    )
    parser.add_argument(
        "--program",
        type=Path,
        help="Run this $readmemh hex program instead of the built-in suite",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=DEFAULT_CYCLE_BUDGET,
        help=f"Cycle budget for --program (default: {DEFAULT_CYCLE_BUDGET})",
    )
    parser.add_argument("--trace", help="Write a VCD waveform to this file")
    parser.add_argument(
        "--reset-cycles",
        type=int,
        default=DEFAULT_RESET_CYCLES,
        help=f"Cycles to hold reset (minimum 5, default: {DEFAULT_RESET_CYCLES})",
    )
    parser.add_argument(
        "--strict-capacity",
        action="store_true",
        help="Fail instead of truncating programs that exceed a store",
    )
    parser.add_argument(
        "--memory-window",
        type=parse_memory_window,
        metavar="FIRST:COUNT",
        help="Also compare this window of data-memory words every cycle",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log every lockstep round"
    )
    return parser


async def run(config: HarnessConfig, programs: list[LockstepProgram]) -> int:
    """Run programs in one harness execution and return the exit status."""
    with RunContext.open(lambda: SingleCycleCore(config.signal_paths), config) as context:
        harness = LockstepHarness(context)
        LockstepLogger.log_run_header()
        await harness.run_suite(programs)
        return harness.report()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stdout,
    )

    try:
        config = HarnessConfig(
            reset_cycles=args.reset_cycles,
            trace_path=args.trace,
            strict_capacity=args.strict_capacity,
            memory_compare_window=args.memory_window,
        )
        if args.program is not None:
            if args.cycles <= 0:
                logger.error("--cycles must be positive")
                return 1
            programs = [
                LockstepProgram(
                    args.program.stem,
                    tuple(load_hex_program(args.program)),
                    cycle_budget=args.cycles,
                )
            ]
        else:
            programs = list(DEFAULT_SUITE)
        return asyncio.run(run(config, programs))
    except (VerificationError, OSError) as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
