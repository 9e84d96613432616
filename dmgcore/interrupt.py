"""Interrupt controller: the IF (0xFF0F) and IE (0xFFFF) registers."""

from __future__ import annotations

from typing import Protocol

from dmgcore.mmu import MemHandler, MemWrite, Mmu

INT_VBLANK = 0x01
INT_LCD_STAT = 0x02
INT_TIMER = 0x04
INT_SERIAL = 0x08
INT_JOYPAD = 0x10

_VECTORS = {
    INT_VBLANK: 0x0040,
    INT_LCD_STAT: 0x0048,
    INT_TIMER: 0x0050,
    INT_SERIAL: 0x0058,
    INT_JOYPAD: 0x0060,
}

_IF_ADDR = 0xFF0F
_IE_ADDR = 0xFFFF
_DISPATCH_CYCLES = 20


class _Cpu(Protocol):
    pc: int
    ime: bool
    halted: bool

    def push(self, mmu: Mmu, value: int) -> None: ...


class Interrupt(MemHandler):
    """Holds pending and enabled interrupts and services them on the CPU."""

    def __init__(self) -> None:
        self.if_reg = 0x00
        self.ie_reg = 0x00

    def request(self, mask: int) -> None:
        self.if_reg |= mask

    def dispatch(self, cpu: _Cpu, mmu: Mmu) -> int:
        """Service the highest-priority pending interrupt.

        Returns the extra cycles spent: 20 when an interrupt fired, else 0.
        """
        pending = self.if_reg & self.ie_reg & 0x1F
        if not pending:
            return 0

        # A pending interrupt wakes the CPU from halt regardless of IME.
        cpu.halted = False

        if not cpu.ime:
            return 0

        mask = pending & -pending
        self.if_reg &= ~mask & 0xFF
        cpu.ime = False
        cpu.push(mmu, cpu.pc)
        cpu.pc = _VECTORS[mask]
        return _DISPATCH_CYCLES

    def on_read(self, addr: int) -> int | None:
        if addr == _IF_ADDR:
            return self.if_reg | 0xE0
        if addr == _IE_ADDR:
            return self.ie_reg
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        if addr == _IF_ADDR:
            self.if_reg = value & 0x1F
            return MemWrite.BLOCK
        if addr == _IE_ADDR:
            self.ie_reg = value & 0xFF
            return MemWrite.BLOCK
        return MemWrite.PASS_THROUGH