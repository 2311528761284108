"""Custom exceptions for the CHIP-8 virtual machine."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    pc: int
    opcode: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "pc": self.pc,
            "opcode": self.opcode,
        }


class Chip8Error(Exception):
    """Base exception for all CHIP-8 errors."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        pc: int = 0,
        opcode: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.pc = pc
        self.opcode = opcode

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            pc=self.pc,
            opcode=self.opcode,
        )


class LoadError(Chip8Error):
    """ROM could not be read or does not fit in program memory."""
    pass


class Chip8RuntimeError(Chip8Error):
    """Error during program execution."""
    pass


class MemoryAccessError(Chip8RuntimeError):
    """Memory address out of bounds."""
    pass


class StackOverflow(Chip8RuntimeError):
    """CALL executed with all 16 stack slots in use."""
    pass


class StackUnderflow(Chip8RuntimeError):
    """RET executed with an empty call stack."""
    pass
