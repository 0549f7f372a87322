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

"""Flat byte memory bound to the reference interpreter.

Memory Model
============

The reference model sees one unified, byte-addressable memory holding both
the program and its data. It has a fixed capacity chosen at construction and
never grows: every access is bounds-checked and an access that would run
past the end raises MemoryAccessError before touching any byte.

Key Features:
    - Fixed-capacity bytearray storage
    - Little-endian ordering for halfword and word accesses
    - Misaligned accesses permitted (byte granularity)
    - Implements the MemoryReader protocol used by the load evaluators

Note the asymmetry with the hardware side, which keeps a word-addressed
instruction store and a separate word-addressed data memory. A program that
stores into its own instruction region changes what the reference model
fetches but not what the hardware fetches.
"""

from rv32i_lockstep.config import MASK32, MEMORY_WORD_SIZE_BYTES
from rv32i_lockstep.exceptions import MemoryAccessError
from rv32i_lockstep.verification_types import Address


class ReferenceMemory:
    """Byte-addressable memory of fixed capacity.

    Attributes:
        capacity_bytes: Number of addressable bytes
    """

    def __init__(self, capacity_bytes: int) -> None:
        """Allocate zero-filled memory.

        Args:
            capacity_bytes: Size of the buffer in bytes
        """
        self.capacity_bytes = capacity_bytes
        self._bytes = bytearray(capacity_bytes)

    @property
    def capacity_words(self) -> int:
        """Capacity in whole 32-bit words."""
        return self.capacity_bytes // MEMORY_WORD_SIZE_BYTES

    def contains(self, address: int, width: int = 1) -> bool:
        """Return True if [address, address + width) lies inside the buffer."""
        return 0 <= address and address + width <= self.capacity_bytes

    def _check(self, address: int, width: int) -> None:
        if not self.contains(address, width):
            raise MemoryAccessError(
                f"{width}-byte access at 0x{address:08x} exceeds "
                f"{self.capacity_bytes}-byte memory",
                address=address,
                width=width,
                capacity=self.capacity_bytes,
            )

    def read_byte(self, address: Address) -> int:
        """Read a single byte."""
        self._check(address, 1)
        return self._bytes[address]

    def read(self, address: int, width: int) -> int:
        """Read a little-endian value of 1, 2 or 4 bytes."""
        self._check(address, width)
        return int.from_bytes(self._bytes[address : address + width], "little")

    def write(self, address: int, value: int, width: int) -> None:
        """Write the low ``width`` bytes of value, little-endian."""
        self._check(address, width)
        mask = (1 << (8 * width)) - 1
        self._bytes[address : address + width] = (value & mask).to_bytes(
            width, "little"
        )

    def read_word(self, address: Address) -> int:
        """Read a 32-bit little-endian word."""
        return self.read(address, MEMORY_WORD_SIZE_BYTES)

    def write_word(self, address: Address, value: int) -> None:
        """Write a 32-bit little-endian word."""
        self.write(address, value & MASK32, MEMORY_WORD_SIZE_BYTES)

    def load_bytes(self, data: bytes, address: int = 0) -> int:
        """Copy raw bytes into memory, stopping at the capacity boundary.

        Returns:
            Number of bytes actually copied
        """
        count = max(0, min(len(data), self.capacity_bytes - address))
        self._bytes[address : address + count] = data[:count]
        return count

    def clear(self) -> None:
        """Zero every byte."""
        self._bytes[:] = bytes(self.capacity_bytes)
