"""Monochrome 64x32 framebuffer."""

from typing import Iterable

WIDTH = 64
HEIGHT = 32


class Display:
    """Row-major grid of 1-bit pixels, mutated only by clear and XOR blit."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        self.width = width
        self.height = height
        self._pixels: list[int] = [0] * (width * height)

    def clear(self) -> None:
        self._pixels = [0] * (self.width * self.height)

    def get(self, x: int, y: int) -> int:
        return self._pixels[y * self.width + x]

    def draw_sprite(self, x: int, y: int, rows: Iterable[int]) -> bool:
        """XOR an 8-pixel-wide sprite onto the screen.

        The origin is wrapped once; individual pixels then wrap around both
        edges independently. Returns True if any lit pixel was turned off.
        """
        x %= self.width
        y %= self.height
        collision = False
        for row, bits in enumerate(rows):
            py = (y + row) % self.height
            for col in range(8):
                if not (bits >> (7 - col)) & 1:
                    continue
                px = (x + col) % self.width
                index = py * self.width + px
                if self._pixels[index]:
                    collision = True
                self._pixels[index] ^= 1
        return collision

    def snapshot(self) -> list[list[int]]:
        """Return a copy of the framebuffer as a list of rows."""
        w = self.width
        return [self._pixels[r * w:(r + 1) * w] for r in range(self.height)]

    def to_text(self, on: str = "#", off: str = ".") -> str:
        return "\n".join(
            "".join(on if p else off for p in row) for row in self.snapshot()
        )
