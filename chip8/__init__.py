"""CHIP-8 virtual machine core package."""

from .vm import VM
from .machine import Machine, Quirks
from .runner import run_rom, RunOptions, RunResult
from .errors import (
    Chip8Error,
    LoadError,
    Chip8RuntimeError,
    MemoryAccessError,
    StackOverflow,
    StackUnderflow,
)

__all__ = [
    "VM",
    "Machine",
    "Quirks",
    "run_rom",
    "RunOptions",
    "RunResult",
    "Chip8Error",
    "LoadError",
    "Chip8RuntimeError",
    "MemoryAccessError",
    "StackOverflow",
    "StackUnderflow",
]
