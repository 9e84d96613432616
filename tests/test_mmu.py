import pytest

from dmgcore.boot import BootRom
from dmgcore.mmu import MemHandler, MemWrite, Mmu


class _Fixed(MemHandler):
    def __init__(self, value):
        self.value = value
        self.writes = []

    def on_read(self, addr):
        return self.value

    def on_write(self, addr, value):
        self.writes.append((addr, value))
        return MemWrite.BLOCK


class _Replacer(MemHandler):
    def __init__(self, replacement):
        self.replacement = replacement

    def on_write(self, addr, value):
        return self.replacement


def test_fresh_memory_reads_zero():
    mmu = Mmu()
    assert mmu.get8(0xC000) == 0
    assert mmu.get16(0x1234) == 0


def test_set_and_get_byte_round_trip():
    mmu = Mmu()
    mmu.set8(0xC123, 0xAB)
    assert mmu.get8(0xC123) == 0xAB


def test_word_is_little_endian():
    mmu = Mmu()
    mmu.set16(0xC000, 0xD003)
    assert mmu.get8(0xC000) == 0x03
    assert mmu.get8(0xC001) == 0xD0
    assert mmu.get16(0xC000) == 0xD003


def test_word_wraps_around_address_space():
    mmu = Mmu()
    mmu.set16(0xFFFF, 0xBEEF)
    assert mmu.get8(0xFFFF) == 0xEF
    assert mmu.get8(0x0000) == 0xBE
    assert mmu.get16(0xFFFF) == 0xBEEF


@pytest.mark.parametrize("offset", [0x0000, 0x0100, 0x1DFF])
def test_echo_ram_mirrors_work_ram(offset):
    mmu = Mmu()
    mmu.set8(0xC000 + offset, 0x5A)
    assert mmu.get8(0xE000 + offset) == 0x5A
    mmu.set8(0xE000 + offset, 0x77)
    assert mmu.get8(0xC000 + offset) == 0x77


def test_address_above_echo_ram_is_not_mirrored():
    mmu = Mmu()
    mmu.set8(0xFE00, 0x11)
    assert mmu.get8(0xDE00) == 0


def test_handler_replaces_read_and_blocks_write():
    mmu = Mmu()
    handler = _Fixed(0x42)
    mmu.add_handler(0xFF00, 0xFF01, handler)
    mmu.set8(0xFF01, 0x99)
    assert mmu.get8(0xFF00) == 0x42
    assert mmu.get8(0xFF01) == 0x42
    assert handler.writes == [(0xFF01, 0x99)]
    assert mmu.get8(0xFF02) == 0


def test_first_handler_wins_on_read():
    mmu = Mmu()
    mmu.add_handler(0xA000, 0xA000, _Fixed(1))
    mmu.add_handler(0xA000, 0xA000, _Fixed(2))
    assert mmu.get8(0xA000) == 1


def test_base_handler_passes_through():
    mmu = Mmu()
    mmu.add_handler(0xC000, 0xC000, MemHandler())
    mmu.set8(0xC000, 0x33)
    assert mmu.get8(0xC000) == 0x33


def test_write_replacement_is_stored():
    mmu = Mmu()
    mmu.add_handler(0xC010, 0xC010, _Replacer(0x0F))
    mmu.set8(0xC010, 0xFF)
    assert mmu.get8(0xC010) == 0x0F


def test_boot_rom_shadowed_by_cartridge_after_disable():
    mmu = Mmu()
    boot = BootRom()
    mmu.add_handler(0x0000, 0x00FF, boot)
    mmu.add_handler(0xFF50, 0xFF50, boot)
    assert mmu.get8(0x0000) == 0x31
    mmu.set8(0xFF50, 0x01)
    assert not boot.is_active()
    assert mmu.get8(0x0000) == 0x00