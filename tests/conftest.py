"""Shared fixtures for building small ROMs."""

import pytest

from chip8 import VM


def _assemble(*words: int) -> bytes:
    return b"".join(word.to_bytes(2, "big") for word in words)


@pytest.fixture
def assemble():
    """Pack 16-bit instruction words into big-endian ROM bytes."""
    return _assemble


@pytest.fixture
def make_vm():
    """Build a VM with the given instruction words loaded at 0x200."""

    def _make(*words, quirks=None):
        vm = VM(quirks=quirks, seed=1234)
        vm.load(_assemble(*words))
        return vm

    return _make
