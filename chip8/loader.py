"""Program loader: font glyphs and ROM image."""

import logging
from pathlib import Path
from typing import Union

from .errors import LoadError
from .machine import Machine
from .memory import MEMORY_SIZE, PROGRAM_START

logger = logging.getLogger(__name__)

FONT_START = 0x000
GLYPH_SIZE = 5
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START

# Hex digits 0-F, 5 rows each, 4 pixels wide in the high nibble
FONT = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def glyph_address(digit: int) -> int:
    """Address of the 5-byte glyph for a hex digit."""
    return FONT_START + digit * GLYPH_SIZE


def read_rom(path: Union[str, Path]) -> bytes:
    """Read a ROM image from disk."""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise LoadError(f"Cannot read ROM {path}: {e}") from e


def load_rom(machine: Machine, rom: bytes) -> None:
    """Install the font table and copy the ROM to 0x200.

    The size check happens before any write, so a rejected ROM leaves
    memory untouched.
    """
    if len(rom) > MAX_ROM_SIZE:
        raise LoadError(
            f"ROM is {len(rom)} bytes, program memory holds {MAX_ROM_SIZE}"
        )
    machine.memory.write_block(FONT_START, FONT)
    machine.memory.write_block(PROGRAM_START, rom)
    logger.debug("Fonts loaded to %#05x", FONT_START)
    logger.debug("Loaded %d byte ROM at %#05x", len(rom), PROGRAM_START)


def load_rom_file(machine: Machine, path: Union[str, Path]) -> None:
    load_rom(machine, read_rom(path))
