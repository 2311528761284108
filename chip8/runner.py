"""Headless ROM runner for the CHIP-8 virtual machine."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import Chip8Error, ErrorInfo
from .machine import Quirks
from .vm import VM

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for headless execution."""
    max_steps: int = 10000
    cycles_per_frame: int = 10
    keys: list[int] = field(default_factory=list)
    quirks: Quirks = field(default_factory=Quirks)
    seed: Optional[int] = None


@dataclass
class RunResult:
    """Result of a headless run."""
    status: str  # "ok" | "error"
    steps_executed: int
    frames: int
    final_state: dict
    display: list[list[int]]
    display_text: str
    tone_active: bool
    awaiting_key: bool
    diagnostics: list[str]
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "steps_executed": self.steps_executed,
            "frames": self.frames,
            "final_state": self.final_state,
            "display": self.display,
            "display_text": self.display_text,
            "tone_active": self.tone_active,
            "awaiting_key": self.awaiting_key,
            "diagnostics": self.diagnostics,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def run_rom(rom: bytes, options: Optional[RunOptions] = None) -> RunResult:
    """Run a ROM image for a fixed number of cycles.

    Timers advance on simulated time: one tick after every
    `cycles_per_frame` cycles, so the outcome does not depend on how
    fast the host is.

    Args:
        rom: Raw ROM bytes, loaded at 0x200
        options: Execution options

    Returns:
        RunResult with final state, framebuffer and error, if any
    """
    if options is None:
        options = RunOptions()
    if options.cycles_per_frame < 1:
        raise ValueError("cycles_per_frame must be at least 1")

    vm = VM(quirks=options.quirks, seed=options.seed)
    error_info: Optional[ErrorInfo] = None
    cycles = 0
    frames = 0

    try:
        vm.load(rom)
    except Chip8Error as e:
        logger.error("ROM rejected: %s", e.message)
        return _result(vm, 0, e.to_error_info())

    for key in options.keys:
        vm.set_key(key, True)

    try:
        while cycles < options.max_steps:
            vm.step()
            cycles += 1
            if cycles % options.cycles_per_frame == 0:
                vm.tick_timers()
                frames += 1
    except Chip8Error as e:
        logger.error("Execution halted at %#05x: %s", e.pc, e.message)
        error_info = e.to_error_info()

    return _result(vm, frames, error_info)


def _result(vm: VM, frames: int, error: Optional[ErrorInfo]) -> RunResult:
    return RunResult(
        status="ok" if error is None else "error",
        steps_executed=vm.steps,
        frames=frames,
        final_state=vm.get_state(),
        display=vm.display_snapshot(),
        display_text=vm.machine.display.to_text(),
        tone_active=vm.tone_active,
        awaiting_key=vm.awaiting_key,
        diagnostics=list(vm.diagnostics),
        error=error,
    )
