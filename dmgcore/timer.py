"""Divider and timer registers (0xFF04-0xFF07)."""

from __future__ import annotations

from dmgcore.interrupt import INT_TIMER
from dmgcore.mmu import MemHandler, MemWrite

_DIV, _TIMA, _TMA, _TAC = 0xFF04, 0xFF05, 0xFF06, 0xFF07

_TIMA_PERIODS = (1024, 16, 64, 256)


class Timer(MemHandler):
    """DIV is the upper byte of a 16-bit cycle counter; TIMA runs at the TAC rate."""

    def __init__(self) -> None:
        self._counter = 0
        self._tima = 0
        self._tma = 0
        self._tac = 0
        self._tima_cycles = 0

    def update(self, cycles: int) -> int:
        """Advance by ``cycles``; return ``INT_TIMER`` if TIMA overflowed, else 0."""
        interrupt = 0
        self._counter = (self._counter + cycles) & 0xFFFF

        if self._tac & 0x04:
            self._tima_cycles += cycles
            period = _TIMA_PERIODS[self._tac & 0x03]
            while self._tima_cycles >= period:
                self._tima_cycles -= period
                if self._tima == 0xFF:
                    self._tima = self._tma
                    interrupt = INT_TIMER
                else:
                    self._tima += 1

        return interrupt

    def on_read(self, addr: int) -> int | None:
        if addr == _DIV:
            return self._counter >> 8
        if addr == _TIMA:
            return self._tima
        if addr == _TMA:
            return self._tma
        if addr == _TAC:
            return self._tac | 0xF8
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        if addr == _DIV:
            self._counter = 0
            self._tima_cycles = 0
        elif addr == _TIMA:
            self._tima = value & 0xFF
        elif addr == _TMA:
            self._tma = value & 0xFF
        elif addr == _TAC:
            self._tac = value & 0x07
        else:
            return MemWrite.PASS_THROUGH
        return MemWrite.BLOCK