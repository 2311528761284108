"""CPU state model for the CHIP-8 virtual machine."""

from enum import Enum
from typing import Optional

from .errors import StackOverflow, StackUnderflow
from .memory import PROGRAM_START

REGISTER_COUNT = 16
STACK_DEPTH = 16


class Mode(Enum):
    """Execution mode of the interpreter."""
    RUNNING = "running"
    AWAITING_KEY = "awaiting_key"


class CPU:
    """CPU state with registers, call stack and execution mode."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.start_address = start_address
        self.v: list[int] = [0] * REGISTER_COUNT
        self.i: int = 0
        self.pc: int = start_address
        self.stack: list[int] = [0] * STACK_DEPTH
        self.sp: int = 0
        self.mode: Mode = Mode.RUNNING
        self.wait_register: Optional[int] = None

    def set_v(self, index: int, value: int) -> None:
        """Set Vx, wrapped to 8 bits."""
        self.v[index] = value & 0xFF

    def set_i(self, value: int) -> None:
        """Set I, wrapped to 16 bits."""
        self.i = value & 0xFFFF

    def push(self, addr: int) -> None:
        """Push a return address."""
        if self.sp >= STACK_DEPTH:
            raise StackOverflow(f"Call stack overflow (depth {STACK_DEPTH})")
        self.stack[self.sp] = addr
        self.sp += 1

    def pop(self) -> int:
        """Pop a return address."""
        if self.sp == 0:
            raise StackUnderflow("Return with empty call stack")
        self.sp -= 1
        return self.stack[self.sp]

    def await_key(self, register: int) -> None:
        self.mode = Mode.AWAITING_KEY
        self.wait_register = register

    def resume(self) -> None:
        self.mode = Mode.RUNNING
        self.wait_register = None

    @property
    def awaiting_key(self) -> bool:
        return self.mode is Mode.AWAITING_KEY

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "v": list(self.v),
            "i": self.i,
            "pc": self.pc,
            "sp": self.sp,
            "stack": self.stack[:self.sp],
            "mode": self.mode.value,
        }

    def reset(self) -> None:
        """Reset CPU to initial state."""
        self.v = [0] * REGISTER_COUNT
        self.i = 0
        self.pc = self.start_address
        self.stack = [0] * STACK_DEPTH
        self.sp = 0
        self.resume()
