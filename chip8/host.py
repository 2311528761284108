"""Host-side sequencing: input, cycles, timers and tone per frame."""

from typing import Iterable, Optional, Protocol

from .keypad import KEY_COUNT
from .vm import VM


class ToneSink(Protocol):
    """Audio capability owned by the host, driven by the sound timer."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


class NullTone:
    """ToneSink that plays nothing."""

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass


class HostLoop:
    """Runs one host frame: pump input, step the CPU, tick timers, report.

    The caller owns rendering and supplies the wall-clock time of each
    frame; timers follow that clock, not the number of cycles run.
    """

    def __init__(self, vm: VM, tone: Optional[ToneSink] = None, cycles_per_frame: int = 10):
        self.vm = vm
        self.tone = tone or NullTone()
        self.cycles_per_frame = cycles_per_frame
        self._last_time: Optional[float] = None
        self._tone_on = False

    def apply_keys(self, pressed: Iterable[int]) -> None:
        down = set(pressed)
        for index in range(KEY_COUNT):
            self.vm.set_key(index, index in down)

    def frame(self, pressed: Iterable[int], now: float) -> list[list[int]]:
        """Advance the machine by one host frame and return the framebuffer."""
        self.apply_keys(pressed)
        for _ in range(self.cycles_per_frame):
            self.vm.step()
        if self._last_time is not None:
            self.vm.advance_time(max(0.0, now - self._last_time))
        self._last_time = now
        self._sync_tone()
        return self.vm.display_snapshot()

    def _sync_tone(self) -> None:
        active = self.vm.tone_active
        if active and not self._tone_on:
            self.tone.start()
        elif not active and self._tone_on:
            self.tone.stop()
        self._tone_on = active

    def close(self) -> None:
        if self._tone_on:
            self.tone.stop()
            self._tone_on = False
