"""Cartridge header parsing and memory mapping through its controller."""

from __future__ import annotations

import enum
import logging

from dmgcore.mbc import Mbc, create_mbc
from dmgcore.mmu import MemHandler, MemWrite

_log = logging.getLogger(__name__)

_HEADER_END = 0x14A

_ROM_SIZES = {
    0x00: "32KByte (no ROM banking)",
    0x01: "64KByte (4 banks)",
    0x02: "128KByte (8 banks)",
    0x03: "256KByte (16 banks)",
    0x04: "512KByte (32 banks)",
    0x05: "1MByte (64 banks)  - only 63 banks used by Mbc1",
    0x06: "2MByte (128 banks) - only 125 banks used by Mbc1",
    0x07: "4MByte (256 banks)",
    0x52: "1.1MByte (72 banks)",
    0x53: "1.2MByte (80 banks)",
    0x54: "1.5MByte (96 banks)",
}

_RAM_SIZES = {
    0x00: "None",
    0x01: "2 KBytes",
    0x02: "8 Kbytes",
    0x03: "32 KBytes (4 banks of 8KBytes each)",
}


class CgbSupport(enum.Enum):
    CGB = "Cgb"
    CGB_ONLY = "CgbOnly"
    UNKNOWN = "Unknown"

    @classmethod
    def from_flag(cls, flag: int) -> CgbSupport:
        if flag == 0x80:
            return cls.CGB
        if flag == 0xC0:
            return cls.CGB_ONLY
        return cls.UNKNOWN


class Cartridge(MemHandler):
    """A ROM image with its header fields and memory bank controller."""

    def __init__(self, rom: bytes) -> None:
        if len(rom) < _HEADER_END:
            raise ValueError(f"ROM too small for a cartridge header: {len(rom)} bytes")
        self.title = bytes(rom[0x134:0x144]).decode("utf-8", errors="replace")
        self.cgb = CgbSupport.from_flag(rom[0x143])
        self.sgb = rom[0x146] == 0x03
        self.mbc: Mbc = create_mbc(rom[0x147], rom)
        self.rom_size = rom[0x148]
        self.ram_size = rom[0x149]

    def show_info(self) -> str:
        """Describe the cartridge header, log it and return the description."""
        info = str(self)
        _log.info("%s", info)
        return info

    def on_read(self, addr: int) -> int | None:
        return self.mbc.on_read(addr)

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        return self.mbc.on_write(addr, value)

    def __str__(self) -> str:
        rom_size = _ROM_SIZES.get(self.rom_size, "Unknown")
        ram_size = _RAM_SIZES.get(self.ram_size, "Unknown")
        return (
            f"\n ROM Title: {self.title} \n CGB: {self.cgb.value} "
            f"\n SGB: {str(self.sgb).lower()} \n Cartridge type: {self.mbc} "
            f"\n ROM size: {rom_size} \n RAM size: {ram_size}"
        )