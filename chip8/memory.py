"""Memory model for the CHIP-8 virtual machine."""

from typing import Iterable

from .errors import MemoryAccessError

MEMORY_SIZE = 4096
PROGRAM_START = 0x200


class Memory:
    """Linear byte-addressed memory, 4096 bytes by default."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)

    def _check_bounds(self, addr: int, length: int = 1) -> None:
        """Check that [addr, addr + length) lies within memory."""
        if addr < 0 or addr + length > self.size:
            if length == 1:
                raise MemoryAccessError(f"Memory address out of range: {addr:#05x}")
            raise MemoryAccessError(
                f"Memory range out of bounds: {addr:#05x}..{addr + length - 1:#05x}"
            )

    def read(self, addr: int) -> int:
        """Read a byte."""
        self._check_bounds(addr)
        return self._data[addr]

    def write(self, addr: int, value: int) -> None:
        """Write a byte, truncated to 8 bits."""
        self._check_bounds(addr)
        self._data[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word from addr, addr + 1."""
        self._check_bounds(addr, 2)
        return (self._data[addr] << 8) | self._data[addr + 1]

    def read_block(self, addr: int, length: int) -> bytes:
        self._check_bounds(addr, length)
        return bytes(self._data[addr:addr + length])

    def write_block(self, addr: int, values: Iterable[int]) -> None:
        """Write a run of bytes; nothing is written if the run does not fit."""
        data = bytes(v & 0xFF for v in values)
        self._check_bounds(addr, len(data))
        self._data[addr:addr + len(data)] = data

    def clear(self) -> None:
        self._data = bytearray(self.size)

    def snapshot(self) -> list[int]:
        """Return a copy of the entire memory."""
        return list(self._data)
