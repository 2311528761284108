"""Interpreter core: fetch, decode and execute against one machine."""

import logging
from pathlib import Path
from typing import Optional, Union

from .errors import Chip8Error
from .instructions import Instruction, decode, execute_instruction
from .loader import load_rom, read_rom
from .machine import Machine, Quirks

logger = logging.getLogger(__name__)

# Distinct unknown-opcode sites kept in diagnostics
MAX_DIAGNOSTICS = 64


class VM:
    """Owns a Machine and exposes step(), tick_timers() and set_key()."""

    def __init__(self, quirks: Optional[Quirks] = None, seed: Optional[int] = None):
        self.machine = Machine(quirks=quirks, seed=seed)
        self.steps: int = 0
        self.diagnostics: list[str] = []
        self.unknown_opcodes: int = 0
        self._reported: set[tuple[int, int]] = set()

    def load(self, rom: bytes) -> None:
        load_rom(self.machine, rom)

    def load_file(self, path: Union[str, Path]) -> None:
        self.load(read_rom(path))

    def reset(self) -> None:
        self.machine.reset()
        self.steps = 0
        self.diagnostics = []
        self.unknown_opcodes = 0
        self._reported = set()

    def step(self) -> Optional[Instruction]:
        """Run one cycle; returns the executed instruction.

        While awaiting a key no instruction is fetched and None is returned
        until a key is down. Completing the wait is not counted as a
        second step.
        """
        cpu = self.machine.cpu
        if cpu.awaiting_key:
            self._poll_key()
            return None

        try:
            instr = decode(self.machine.memory.read_word(cpu.pc), cpu.pc)
            if not instr.known:
                self._report_unknown(instr)
                new_pc = None
            else:
                new_pc = execute_instruction(instr, self.machine)
        except Chip8Error as e:
            e.step = self.steps + 1
            e.pc = cpu.pc
            e.opcode = e.opcode if e.opcode is not None else self._word_at(cpu.pc)
            raise

        cpu.pc = new_pc if new_pc is not None else cpu.pc + 2
        self.steps += 1
        return instr

    def _poll_key(self) -> None:
        cpu = self.machine.cpu
        key = self.machine.keypad.first_pressed()
        if key is None:
            return
        cpu.set_v(cpu.wait_register, key)
        cpu.resume()
        cpu.pc += 2

    def _report_unknown(self, instr: Instruction) -> None:
        """Count every unknown fetch; log each (addr, word) site once."""
        self.unknown_opcodes += 1
        site = (instr.addr, instr.word)
        if site in self._reported or len(self._reported) >= MAX_DIAGNOSTICS:
            return
        self._reported.add(site)
        message = f"Unknown opcode {instr.word:04X} at {instr.addr:#05x}"
        logger.warning(message)
        self.diagnostics.append(message)

    def _word_at(self, addr: int) -> Optional[int]:
        try:
            return self.machine.memory.read_word(addr)
        except Chip8Error:
            return None

    def tick_timers(self) -> None:
        """Apply one 1/60 s timer tick."""
        self.machine.timers.tick()

    def advance_time(self, seconds: float) -> int:
        """Apply as many timer ticks as the elapsed wall-clock time allows."""
        return self.machine.timers.advance(seconds)

    def set_key(self, index: int, pressed: bool) -> None:
        self.machine.keypad.set_key(index, pressed)

    def display_snapshot(self) -> list[list[int]]:
        return self.machine.display.snapshot()

    @property
    def tone_active(self) -> bool:
        return self.machine.timers.tone_active

    @property
    def awaiting_key(self) -> bool:
        return self.machine.cpu.awaiting_key

    def get_state(self) -> dict:
        return self.machine.get_state()
