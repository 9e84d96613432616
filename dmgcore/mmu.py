"""Memory bus with per-address handlers that can intercept reads and writes."""

from __future__ import annotations

import enum
from collections import defaultdict


class MemWrite(enum.Enum):
    """Outcome of a write seen by a handler.

    A handler may also return a plain ``int``. That value is then written
    instead of the one the CPU sent.
    """

    PASS_THROUGH = enum.auto()
    BLOCK = enum.auto()


class MemHandler:
    """Base class for components mapped into the address space.

    ``on_read`` returns the byte to hand back to the CPU, or ``None`` so the
    read goes on to the next handler and then to RAM. ``on_write`` returns a
    :class:`MemWrite` or an ``int`` that replaces the value being written.
    """

    def on_read(self, addr: int) -> int | None:
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        return MemWrite.PASS_THROUGH


def _is_echo_ram(addr: int) -> bool:
    return 0xE000 <= addr <= 0xFDFF


class Mmu:
    """64 KiB address space backed by RAM, with handlers layered on top."""

    def __init__(self) -> None:
        self._ram = bytearray(0x10000)
        self._handlers: defaultdict[int, list[MemHandler]] = defaultdict(list)

    def add_handler(self, start: int, end: int, handler: MemHandler) -> None:
        """Map ``handler`` onto every address from ``start`` to ``end`` inclusive."""
        for addr in range(start, end + 1):
            self._handlers[addr].append(handler)

    def _ram_index(self, addr: int) -> int:
        # Echo RAM mirrors the C000-DDFF region.
        return addr - 0x2000 if _is_echo_ram(addr) else addr

    def get8(self, addr: int) -> int:
        addr &= 0xFFFF
        for handler in self._handlers.get(addr, ()):
            value = handler.on_read(addr)
            if value is not None:
                return value & 0xFF
        return self._ram[self._ram_index(addr)]

    def set8(self, addr: int, value: int) -> None:
        addr &= 0xFFFF
        value &= 0xFF
        for handler in self._handlers.get(addr, ()):
            outcome = handler.on_write(addr, value)
            if outcome is MemWrite.BLOCK:
                return
            if not isinstance(outcome, MemWrite):
                value = outcome & 0xFF
        self._ram[self._ram_index(addr)] = value

    def get16(self, addr: int) -> int:
        low = self.get8(addr)
        high = self.get8((addr + 1) & 0xFFFF)
        return (high << 8) | low

    def set16(self, addr: int, value: int) -> None:
        self.set8(addr, value & 0xFF)
        self.set8((addr + 1) & 0xFFFF, (value >> 8) & 0xFF)