"""The DMG boot ROM, mapped over the start of the cartridge until disabled."""

from __future__ import annotations

from dmgcore.mmu import MemHandler, MemWrite

_DMG_BOOT_ROM = bytes.fromhex(
    "31 FE FF AF 21 FF 9F 32 CB 7C 20 FB 21 26"
    " FF 0E 11 3E 80 32 E2 0C 3E F3 E2 32 3E 77"
    " 77 3E FC E0 47 11 04 01 21 10 80 1A CD 95"
    " 00 CD 96 00 13 7B FE 34 20 F3 11 D8 00 06"
    " 08 1A 13 22 23 05 20 F9 3E 19 EA 10 99 21"
    " 2F 99 0E 0C 3D 28 08 32 0D 20 F9 2E 0F 18"
    " F3 67 3E 64 57 E0 42 3E 91 E0 40 04 1E 02"
    " 0E 0C F0 44 FE 90 20 FA 0D 20 F7 1D 20 F2"
    " 0E 13 24 7C 1E 83 FE 62 28 06 1E C1 FE 64"
    " 20 06 7B E2 0C 3E 87 E2 F0 42 90 E0 42 15"
    " 20 D2 05 20 4F 16 20 18 CB 4F 06 04 C5 CB"
    " 11 17 C1 CB 11 17 05 20 F5 22 23 22 23 C9"
    " CE ED 66 66 CC 0D 00 0B 03 73 00 83 00 0C"
    " 00 0D 00 08 11 1F 88 89 00 0E DC CC 6E E6"
    " DD DD D9 99 BB BB 67 63 6E 0E EC CC DD DC"
    " 99 9F BB B9 33 3E 3C 42 B9 A5 B9 A5 42 3C"
    " 21 04 01 11 A8 00 1A 13 BE 20 FE 23 7D FE"
    " 34 20 F5 06 19 78 86 23 05 20 FB 86 20 FE"
    " 3E 01 E0 50"
)

_DISABLE_REGISTER = 0xFF50


class BootRom(MemHandler):
    """Serves 0x0000-0x00FF from the boot ROM until 0xFF50 is written."""

    def __init__(self) -> None:
        self.rom = _DMG_BOOT_ROM
        self._active = True

    def disable(self) -> None:
        self._active = False

    def is_active(self) -> bool:
        return self._active

    def on_read(self, addr: int) -> int | None:
        if self._active and addr < 0x0100:
            return self.rom[addr]
        if addr == _DISABLE_REGISTER and self._active:
            return 0x00
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        if addr == _DISABLE_REGISTER and value != 0:
            self.disable()
            return MemWrite.BLOCK
        return MemWrite.PASS_THROUGH