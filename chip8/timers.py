"""Delay and sound timers, decremented at 60 Hz of wall-clock time."""

TIMER_HZ = 60
TICK_SECONDS = 1.0 / TIMER_HZ


class TimerClock:
    """Holds the delay and sound timers and converts elapsed time into ticks.

    Instruction throughput never touches the timers; only `tick()` and
    `advance()` decrement them.
    """

    def __init__(self, hz: int = TIMER_HZ):
        self.hz = hz
        self.delay_timer: int = 0
        self.sound_timer: int = 0
        self._pending: float = 0.0

    def set_delay(self, value: int) -> None:
        self.delay_timer = value & 0xFF

    def set_sound(self, value: int) -> None:
        self.sound_timer = value & 0xFF

    def tick(self) -> None:
        """Decrement each non-zero timer by one."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def advance(self, seconds: float) -> int:
        """Account for elapsed wall-clock time; returns the ticks applied."""
        if seconds < 0:
            raise ValueError("Elapsed time cannot be negative")
        self._pending += seconds * self.hz
        ticks = int(self._pending)
        self._pending -= ticks
        for _ in range(ticks):
            self.tick()
        return ticks

    @property
    def tone_active(self) -> bool:
        return self.sound_timer > 0

    def get_state(self) -> dict:
        return {"delay_timer": self.delay_timer, "sound_timer": self.sound_timer}

    def reset(self) -> None:
        self.delay_timer = 0
        self.sound_timer = 0
        self._pending = 0.0
