"""Memory bank controllers selected by the cartridge type byte."""

from __future__ import annotations

from dmgcore.mmu import MemWrite

_ROM_BANK_SIZE = 0x4000
_RAM_BANK_SIZE = 0x2000


class UnsupportedCartridgeError(ValueError):
    """The cartridge type byte names a controller that is not available."""


class Mbc:
    """Base controller: owns the ROM image and answers cartridge accesses."""

    name = "MBC"

    def __init__(self, rom: bytes) -> None:
        self.rom = bytes(rom)

    def _rom_read(self, offset: int) -> int:
        return self.rom[offset] if offset < len(self.rom) else 0xFF

    def on_read(self, addr: int) -> int | None:
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        return MemWrite.BLOCK

    def __str__(self) -> str:
        return self.name


def _ram_get(ram: bytearray, offset: int) -> int:
    return ram[offset] if offset < len(ram) else 0xFF


def _ram_enable(value: int) -> bool:
    return value & 0x0F == 0x0A


class RomOnly(Mbc):
    """32 KiB ROM with no banking; writes are ignored."""

    name = "ROM Only"

    def on_read(self, addr: int) -> int | None:
        if addr <= 0x7FFF:
            return self.rom[addr]
        return None


class Mbc1(Mbc):
    """Up to 2 MiB ROM and 32 KiB RAM, with ROM/RAM banking modes."""

    name = "MBC1"

    def __init__(self, rom: bytes) -> None:
        super().__init__(rom)
        self.ram = bytearray(0x8000)
        self._rom_bank_lo = 1
        self._bank_hi = 0
        self._ram_enabled = False
        self._ram_mode = False

    def _rom_bank(self) -> int:
        if self._ram_mode:
            bank = self._rom_bank_lo
        else:
            bank = (self._bank_hi << 5) | self._rom_bank_lo
        # Banks 0x00, 0x20, 0x40 and 0x60 map to the following bank.
        return bank + 1 if bank in (0x00, 0x20, 0x40, 0x60) else bank

    def _ram_bank(self) -> int:
        return self._bank_hi if self._ram_mode else 0

    def _ram_offset(self, addr: int) -> int:
        return self._ram_bank() * _RAM_BANK_SIZE + (addr - 0xA000)

    def on_read(self, addr: int) -> int | None:
        if addr <= 0x3FFF:
            return self._rom_read(addr)
        if addr <= 0x7FFF:
            return self._rom_read(self._rom_bank() * _ROM_BANK_SIZE + (addr - 0x4000))
        if 0xA000 <= addr <= 0xBFFF:
            if self._ram_enabled:
                return _ram_get(self.ram, self._ram_offset(addr))
            return 0xFF
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        if addr <= 0x1FFF:
            self._ram_enabled = _ram_enable(value)
        elif addr <= 0x3FFF:
            self._rom_bank_lo = (value & 0x1F) or 1
        elif addr <= 0x5FFF:
            self._bank_hi = value & 0x03
        elif addr <= 0x7FFF:
            self._ram_mode = bool(value & 0x01)
        elif 0xA000 <= addr <= 0xBFFF and self._ram_enabled:
            offset = self._ram_offset(addr)
            if offset < len(self.ram):
                self.ram[offset] = value & 0xFF
        return MemWrite.BLOCK


class Mbc3(Mbc):
    """Up to 2 MiB ROM and 32 KiB RAM; the real-time clock reads as zero."""

    name = "MBC3"

    def __init__(self, rom: bytes) -> None:
        super().__init__(rom)
        self.ram = bytearray(0x8000)
        self._rom_bank = 1
        self._ram_bank = 0
        self._ram_enabled = False

    def _ram_offset(self, addr: int) -> int:
        return self._ram_bank * _RAM_BANK_SIZE + (addr - 0xA000)

    def on_read(self, addr: int) -> int | None:
        if addr <= 0x3FFF:
            return self._rom_read(addr)
        if addr <= 0x7FFF:
            return self._rom_read(self._rom_bank * _ROM_BANK_SIZE + (addr - 0x4000))
        if 0xA000 <= addr <= 0xBFFF:
            if not self._ram_enabled:
                return 0xFF
            if self._ram_bank <= 0x03:
                return _ram_get(self.ram, self._ram_offset(addr))
            return 0x00
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        if addr <= 0x1FFF:
            self._ram_enabled = _ram_enable(value)
        elif addr <= 0x3FFF:
            self._rom_bank = (value & 0x7F) or 1
        elif addr <= 0x5FFF:
            self._ram_bank = value & 0xFF
        elif addr <= 0x7FFF:
            pass  # clock latch is not emulated
        elif 0xA000 <= addr <= 0xBFFF and self._ram_enabled and self._ram_bank <= 0x03:
            offset = self._ram_offset(addr)
            if offset < len(self.ram):
                self.ram[offset] = value & 0xFF
        return MemWrite.BLOCK


class Mbc5(Mbc):
    """Up to 8 MiB ROM (9-bit bank number) and 128 KiB RAM."""

    name = "MBC5"

    def __init__(self, rom: bytes) -> None:
        super().__init__(rom)
        self.ram = bytearray(0x20000)
        self._rom_bank = 1
        self._ram_bank = 0
        self._ram_enabled = False

    def _ram_offset(self, addr: int) -> int:
        return self._ram_bank * _RAM_BANK_SIZE + (addr - 0xA000)

    def on_read(self, addr: int) -> int | None:
        if addr <= 0x3FFF:
            return self._rom_read(addr)
        if addr <= 0x7FFF:
            return self._rom_read(self._rom_bank * _ROM_BANK_SIZE + (addr - 0x4000))
        if 0xA000 <= addr <= 0xBFFF:
            if self._ram_enabled:
                return _ram_get(self.ram, self._ram_offset(addr))
            return 0xFF
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        if addr <= 0x1FFF:
            self._ram_enabled = _ram_enable(value)
        elif addr <= 0x2FFF:
            self._rom_bank = (self._rom_bank & 0x100) | (value & 0xFF)
        elif addr <= 0x3FFF:
            self._rom_bank = (self._rom_bank & 0x0FF) | ((value & 0x01) << 8)
        elif addr <= 0x5FFF:
            self._ram_bank = value & 0x0F
        elif 0xA000 <= addr <= 0xBFFF and self._ram_enabled:
            offset = self._ram_offset(addr)
            if offset < len(self.ram):
                self.ram[offset] = value & 0xFF
        return MemWrite.BLOCK


_CONTROLLERS: dict[int, type[Mbc]] = {
    0x00: RomOnly,
    **dict.fromkeys((0x01, 0x02, 0x03), Mbc1),
    **dict.fromkeys((0x0F, 0x10, 0x11, 0x12, 0x13), Mbc3),
    **dict.fromkeys((0x19, 0x1A, 0x1B, 0x1C, 0x1D, 0x1E), Mbc5),
}

_UNSUPPORTED: dict[int, str] = {
    **dict.fromkeys((0x05, 0x06), "MBC2"),
    **dict.fromkeys((0x08, 0x09), "ROM+RAM"),
    **dict.fromkeys((0x0B, 0x0C, 0x0D), "MMM01"),
    0xFC: "POCKET CAMERA",
    0xFD: "BANDAI TAMA5",
    0xFE: "HuC3",
    0xFF: "HuC1",
}


def create_mbc(code: int, rom: bytes) -> Mbc:
    """Build the controller for cartridge type ``code``."""
    controller = _CONTROLLERS.get(code)
    if controller is not None:
        return controller(rom)
    if code in _UNSUPPORTED:
        raise UnsupportedCartridgeError(f"{_UNSUPPORTED[code]}: {code:02x}")
    raise UnsupportedCartridgeError(f"Invalid cartridge type: {code:02x}")