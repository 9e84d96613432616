"""Game Boy hardware: memory bus, boot ROM, interrupts, timer, joypad, cartridges and PPU."""

__version__ = "0.1.0"
__all__ = [
    "boot",
    "cartridge",
    "interrupt",
    "joypad",
    "mbc",
    "mmu",
    "ppu",
    "timer",
]