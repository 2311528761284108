"""16-key hexadecimal keypad."""

from typing import Optional

KEY_COUNT = 16


class Keypad:
    """Key states written by the host, read by the interpreter."""

    def __init__(self):
        self._keys: list[bool] = [False] * KEY_COUNT

    def set_key(self, index: int, pressed: bool) -> None:
        if not 0 <= index < KEY_COUNT:
            raise ValueError(f"Key index out of range: {index}")
        self._keys[index] = bool(pressed)

    def is_pressed(self, index: int) -> bool:
        # Only the low nibble of a register selects a key
        return self._keys[index & 0xF]

    def first_pressed(self) -> Optional[int]:
        """Lowest-numbered pressed key, or None."""
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None

    def release_all(self) -> None:
        self._keys = [False] * KEY_COUNT

    def snapshot(self) -> list[bool]:
        return list(self._keys)
