"""Joypad register (0xFF00) reading a shared key-state mapping."""

from __future__ import annotations

import enum
from collections.abc import MutableMapping

from dmgcore.mmu import MemHandler, MemWrite

_JOYP = 0xFF00


class Key(enum.Enum):
    A = "a"
    B = "b"
    SELECT = "select"
    START = "start"
    RIGHT = "right"
    LEFT = "left"
    UP = "up"
    DOWN = "down"


_ACTION_BITS = {Key.A: 0x01, Key.B: 0x02, Key.SELECT: 0x04, Key.START: 0x08}
_DIRECTION_BITS = {Key.RIGHT: 0x01, Key.LEFT: 0x02, Key.UP: 0x04, Key.DOWN: 0x08}


class Joypad(MemHandler):
    """Bit 5 low selects action buttons, bit 4 low selects directions.

    The low nibble reads active-low: a cleared bit means the key is pressed.
    """

    def __init__(self, keys: MutableMapping[Key, bool] | None = None) -> None:
        self.keys: MutableMapping[Key, bool] = {} if keys is None else keys
        self._select = 0x30
        self._prev_keys = 0x0F

    def _read_keys(self) -> int:
        nibble = 0x0F
        groups = []
        if not self._select & 0x20:
            groups.append(_ACTION_BITS)
        if not self._select & 0x10:
            groups.append(_DIRECTION_BITS)
        for bits in groups:
            for key, bit in bits.items():
                if self.keys.get(key, False):
                    nibble &= ~bit
        return nibble

    def poll_interrupt(self) -> bool:
        """Return True when a selected key went from released to pressed."""
        current = self._read_keys()
        newly_pressed = self._prev_keys & ~current & 0x0F
        self._prev_keys = current
        return newly_pressed != 0

    def on_read(self, addr: int) -> int | None:
        if addr == _JOYP:
            return (self._select & 0x30) | self._read_keys() | 0xC0
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        if addr == _JOYP:
            self._select = value & 0x30
            return MemWrite.BLOCK
        return MemWrite.PASS_THROUGH