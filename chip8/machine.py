"""Machine state aggregate for the CHIP-8 virtual machine."""

import random
from dataclasses import dataclass
from typing import Optional

from .cpu import CPU
from .display import Display
from .keypad import Keypad
from .memory import Memory
from .timers import TimerClock


@dataclass
class Quirks:
    """Behavioral switches for ROMs written against other interpreters."""
    shift_uses_vy: bool = False
    load_store_increments_i: bool = False
    jump_uses_vx: bool = False
    logic_resets_vf: bool = False


class Machine:
    """Memory, registers, display, keypad and timers of one machine."""

    def __init__(self, quirks: Optional[Quirks] = None, seed: Optional[int] = None):
        self.quirks = quirks or Quirks()
        self.rng = random.Random(seed)
        self.memory = Memory()
        self.cpu = CPU()
        self.display = Display()
        self.keypad = Keypad()
        self.timers = TimerClock()

    def reset(self) -> None:
        """Return to the power-on state: everything zero, PC at 0x200."""
        self.memory.clear()
        self.cpu.reset()
        self.display.clear()
        self.keypad.release_all()
        self.timers.reset()

    def get_state(self) -> dict:
        state = self.cpu.get_state()
        state.update(self.timers.get_state())
        return state
