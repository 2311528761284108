"""pygame desktop host for the CHIP-8 virtual machine."""

import argparse
import logging
import os
import sys
from array import array

import pygame as pg

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chip8 import VM, Chip8Error, Quirks
from chip8.display import HEIGHT, WIDTH
from chip8.host import HostLoop, NullTone, ToneSink

logger = logging.getLogger(__name__)

SCALE = 10
FPS = 60
ON_COLOR = (255, 255, 255)
OFF_COLOR = (0, 0, 0)
TONE_HZ = 440
SAMPLE_RATE = 44100

# QWERTY block mapped onto the 4x4 hex keypad
KEYMAP = {
    pg.K_1: 0x1, pg.K_2: 0x2, pg.K_3: 0x3, pg.K_4: 0xC,
    pg.K_q: 0x4, pg.K_w: 0x5, pg.K_e: 0x6, pg.K_r: 0xD,
    pg.K_a: 0x7, pg.K_s: 0x8, pg.K_d: 0x9, pg.K_f: 0xE,
    pg.K_z: 0xA, pg.K_x: 0x0, pg.K_c: 0xB, pg.K_v: 0xF,
}


class SquareTone:
    """ToneSink looping a square wave through pygame.mixer."""

    def __init__(self, frequency: int = TONE_HZ, volume: float = 0.25):
        period = SAMPLE_RATE // frequency
        amplitude = int(32767 * volume)
        samples = array("h", [amplitude if n < period // 2 else -amplitude for n in range(period)])
        self._sound = pg.mixer.Sound(buffer=samples.tobytes())
        self._channel = None

    def start(self) -> None:
        self._channel = self._sound.play(loops=-1)

    def stop(self) -> None:
        if self._channel is not None:
            self._channel.stop()
            self._channel = None


def make_tone() -> ToneSink:
    """Square-wave tone, or silence when no audio device is available."""
    if not pg.mixer.get_init():
        logger.warning("Audio unavailable, running without sound")
        return NullTone()
    try:
        return SquareTone()
    except pg.error as e:
        logger.warning("Audio unavailable, running without sound: %s", e)
        return NullTone()


def render(surface: pg.Surface, frame: list[list[int]]) -> None:
    surface.fill(OFF_COLOR)
    for y, row in enumerate(frame):
        for x, pixel in enumerate(row):
            if pixel:
                surface.fill(ON_COLOR, (x * SCALE, y * SCALE, SCALE, SCALE))


def run(vm: VM, cycles_per_frame: int) -> None:
    pg.mixer.pre_init(frequency=SAMPLE_RATE, size=-16, channels=1)
    pg.init()
    screen = pg.display.set_mode((WIDTH * SCALE, HEIGHT * SCALE))
    pg.display.set_caption("CHIP-8")
    clock = pg.time.Clock()
    loop = HostLoop(vm, tone=make_tone(), cycles_per_frame=cycles_per_frame)
    pressed: set[int] = set()

    try:
        while True:
            for event in pg.event.get():
                if event.type == pg.QUIT:
                    return
                if event.type == pg.KEYDOWN:
                    if event.key == pg.K_ESCAPE:
                        return
                    if event.key in KEYMAP:
                        pressed.add(KEYMAP[event.key])
                elif event.type == pg.KEYUP and event.key in KEYMAP:
                    pressed.discard(KEYMAP[event.key])

            render(screen, loop.frame(pressed, pg.time.get_ticks() / 1000.0))
            pg.display.flip()
            clock.tick(FPS)
    finally:
        loop.close()
        pg.quit()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run a CHIP-8 ROM")
    parser.add_argument("rom", help="path to the ROM file")
    parser.add_argument("--cycles-per-frame", type=int, default=10,
                        help="instructions executed per 1/60 s frame")
    parser.add_argument("--shift-uses-vy", action="store_true")
    parser.add_argument("--load-store-increments-i", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    vm = VM(quirks=Quirks(
        shift_uses_vy=args.shift_uses_vy,
        load_store_increments_i=args.load_store_increments_i,
    ))
    try:
        vm.load_file(args.rom)
    except Chip8Error as e:
        logger.error("%s", e.message)
        return 1

    logger.info("Loaded %s", args.rom)
    try:
        run(vm, args.cycles_per_frame)
    except Chip8Error as e:
        logger.error("Emulation halted at %#05x: %s", e.pc, e.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
