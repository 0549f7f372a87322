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

"""Serialize programs into the instruction stores of both models.

Program Encoder
===============

A program is an ordered sequence of 32-bit words. ``encode()`` writes it into
one target store and fills every remaining slot up to the target's capacity
with the canonical NOP (0x00000013), so nothing from a previous test survives
in that store. The same call is made once per model:

    - WordAddressedTarget: hardware instruction store, one word per index,
      written by poking ``path[index]``
    - ByteAddressedTarget: the reference model's unified byte memory, word
      ``i`` stored little-endian at byte address ``4 * i``

The two stores are configured independently; their capacities need not
match.

Capacity Overflow:
    A program longer than a target is truncated at the boundary. This is
    logged as a WARNING and reported in EncodeReport.truncated_words; with
    ``strict=True`` ProgramCapacityError is raised before any slot is written.

Hex Images:
    ``load_hex_program()`` reads ``$readmemh``-style files, one hex word per
    line, with ``//`` and ``#`` comments.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from rv32i_lockstep.config import MASK32, MEMORY_WORD_SIZE_BYTES, NOP_INSTRUCTION
from rv32i_lockstep.exceptions import ProgramCapacityError, ProgramFormatError
from rv32i_lockstep.hardware.interface import HardwareModel
from rv32i_lockstep.models.memory_model import ReferenceMemory

logger = logging.getLogger(__name__)


class ProgramTarget(Protocol):
    """A word-granular store a program can be encoded into."""

    name: str

    @property
    def capacity_words(self) -> int: ...

    def store_word(self, index: int, word: int) -> None: ...


class WordAddressedTarget:
    """Hardware instruction store addressed by word index."""

    def __init__(self, hardware: HardwareModel, path: str, capacity_words: int) -> None:
        self.hardware = hardware
        self.path = path
        self.name = f"hardware {path}"
        self._capacity_words = capacity_words

    @property
    def capacity_words(self) -> int:
        return self._capacity_words

    def store_word(self, index: int, word: int) -> None:
        self.hardware.poke(self.path, word, index)


class ByteAddressedTarget:
    """Reference memory addressed by byte, filled one little-endian word at a time."""

    def __init__(self, memory: ReferenceMemory, name: str = "reference memory") -> None:
        self.memory = memory
        self.name = name

    @property
    def capacity_words(self) -> int:
        return self.memory.capacity_bytes // MEMORY_WORD_SIZE_BYTES

    def store_word(self, index: int, word: int) -> None:
        self.memory.write_word(index * MEMORY_WORD_SIZE_BYTES, word)


@dataclass(frozen=True)
class EncodeReport:
    """What encode() wrote into one target."""

    target: str
    capacity_words: int
    program_words: int
    padding_words: int
    truncated_words: int

    @property
    def truncated(self) -> bool:
        return self.truncated_words > 0


def _overflow_message(program_words: int, target: ProgramTarget) -> str:
    return (
        f"program of {program_words} words exceeds {target.name} capacity of "
        f"{target.capacity_words} words"
    )


def check_capacity(program_words: int, targets: Iterable[ProgramTarget]) -> None:
    """Raise if a program of ``program_words`` words overflows any target.

    Used to validate every store before the first one is written.

    Raises:
        ProgramCapacityError: Naming the first target that is too small
    """
    for target in targets:
        if program_words > target.capacity_words:
            raise ProgramCapacityError(
                _overflow_message(program_words, target),
                target=target.name,
                program_words=program_words,
                capacity=target.capacity_words,
            )


def encode(
    words: Iterable[int], target: ProgramTarget, *, strict: bool = False
) -> EncodeReport:
    """Write a program into every slot of a target, NOP-padding the tail.

    Args:
        words: Program words in execution order
        target: Store to fill
        strict: Raise instead of truncating an over-capacity program

    Returns:
        EncodeReport describing the write

    Raises:
        ProgramCapacityError: If strict and the program exceeds the capacity
    """
    program = [word & MASK32 for word in words]
    capacity = target.capacity_words
    truncated = max(0, len(program) - capacity)

    if truncated:
        if strict:
            check_capacity(len(program), [target])
        logger.warning(
            f"{_overflow_message(len(program), target)}; "
            f"dropping the last {truncated} words"
        )

    stored = program[:capacity]
    for index, word in enumerate(stored):
        target.store_word(index, word)
    for index in range(len(stored), capacity):
        target.store_word(index, NOP_INSTRUCTION)

    return EncodeReport(
        target=target.name,
        capacity_words=capacity,
        program_words=len(stored),
        padding_words=capacity - len(stored),
        truncated_words=truncated,
    )


def program_to_bytes(words: Iterable[int]) -> bytes:
    """Serialize words little-endian, as the reference memory stores them."""
    return b"".join(
        (word & MASK32).to_bytes(MEMORY_WORD_SIZE_BYTES, "little") for word in words
    )


def load_hex_program(path: str | Path) -> list[int]:
    """Read a ``$readmemh`` image: one hex word per line.

    Blank lines are skipped; ``//`` and ``#`` start comments. An optional
    ``0x`` prefix and ``_`` digit separators are accepted.

    Raises:
        ProgramFormatError: On a line that is not a single 32-bit hex word
    """
    words = []
    with open(path) as f:
        for line_number, line in enumerate(f, start=1):
            text = line.split("//", 1)[0].split("#", 1)[0].strip()
            if not text:
                continue
            if text.startswith("@"):
                raise ProgramFormatError(
                    f"{path}:{line_number}: address directives are not supported",
                    line_number=line_number,
                )
            try:
                word = int(text.replace("_", ""), 16)
            except ValueError:
                raise ProgramFormatError(
                    f"{path}:{line_number}: not a hex word: {text!r}",
                    line_number=line_number,
                ) from None
            if not 0 <= word <= MASK32:
                raise ProgramFormatError(
                    f"{path}:{line_number}: {text!r} does not fit in 32 bits",
                    line_number=line_number,
                )
            words.append(word)
    logger.debug(f"Loaded {len(words)} words from {path}")
    return words
