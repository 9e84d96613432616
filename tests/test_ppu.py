import pytest

from dmgcore.interrupt import INT_LCD_STAT, INT_VBLANK
from dmgcore.mmu import MemWrite, Mmu
from dmgcore.ppu import (
    COLOR_BLACK,
    COLOR_LIGHT_GREEN,
    COLOR_WHITE,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    Ppu,
)


def _headless_ppu():
    fb = [0] * (SCREEN_WIDTH * SCREEN_HEIGHT)
    return Ppu(fb), fb


def _fill_tile(ppu, tile, low, high):
    base = 0x8000 + tile * 16
    for row in range(8):
        ppu.set_vram(base + row * 2, low)
        ppu.set_vram(base + row * 2 + 1, high)


def _render_line(ppu):
    ppu.update(80)
    return ppu.update(172)


def test_ppu_vblank_interrupt_fires_at_scanline_144():
    ppu, _fb = _headless_ppu()
    total_cycles = 144 * 456
    cycles_run = 0
    irq = 0
    while not irq & INT_VBLANK and cycles_run < total_cycles + 456:
        irq = ppu.update(4)
        cycles_run += 4
    assert irq & INT_VBLANK == INT_VBLANK
    assert cycles_run <= total_cycles + 20
    assert ppu.on_read(0xFF44) == 144
    assert ppu.on_read(0xFF41) & 0x03 == 0x01


def test_ppu_renders_solid_tile_to_framebuffer():
    ppu, fb = _headless_ppu()
    for i in range(16):
        ppu.set_vram(0x8000 + i, 0x00)
    for i in range(16):
        ppu.set_vram(0x8010 + i, 0xFF)
    ppu.set_vram(0x1800, 0x01)
    ppu.set_vram(0x0000, 0)

    ppu.update(80)
    ppu.update(172)

    assert fb[0] == 0xFF0F380F


def test_ppu_oam_dma_copies_to_oam():
    ppu, _fb = _headless_ppu()
    data = bytearray(0xA0)
    data[0:4] = bytes([0x10, 0x08, 0x42, 0x00])
    ppu.execute_dma(data)
    assert ppu.get_oam(0xFE00) == 0x10
    assert ppu.get_oam(0xFE01) == 0x08
    assert ppu.get_oam(0xFE02) == 0x42


def test_dma_source_longer_than_oam_is_truncated():
    ppu, _fb = _headless_ppu()
    data = bytes(range(200))
    ppu.execute_dma(data)
    assert ppu.get_oam(0xFE9F) == 159


def test_background_tile_boundary_and_white_default():
    ppu, fb = _headless_ppu()
    _fill_tile(ppu, 1, 0xFF, 0xFF)
    ppu.set_vram(0x9800, 0x01)
    _render_line(ppu)
    assert fb[0:8] == [COLOR_BLACK] * 8
    assert fb[8] == COLOR_WHITE


def test_scroll_x_shifts_background():
    ppu, fb = _headless_ppu()
    _fill_tile(ppu, 1, 0xFF, 0xFF)
    ppu.set_vram(0x9800, 0x01)
    ppu.on_write(0xFF43, 4)
    _render_line(ppu)
    assert fb[3] == COLOR_BLACK
    assert fb[4] == COLOR_WHITE


def test_signed_tile_addressing_uses_0x9000():
    ppu, fb = _headless_ppu()
    ppu.on_write(0xFF40, 0x81)
    for i in range(16):
        ppu.set_vram(0x9000 + i, 0xFF)
    _render_line(ppu)
    assert fb[0] == COLOR_BLACK


def test_window_drawn_from_wx():
    ppu, fb = _headless_ppu()
    _fill_tile(ppu, 1, 0xFF, 0xFF)
    ppu.set_vram(0x9800, 0x01)
    ppu.on_write(0xFF40, 0xB1)
    ppu.on_write(0xFF4A, 0)
    ppu.on_write(0xFF4B, 7 + 80)
    _render_line(ppu)
    assert fb[8] == COLOR_WHITE
    assert fb[79] == COLOR_WHITE
    assert fb[80] == COLOR_BLACK
    assert fb[87] == COLOR_BLACK
    assert fb[88] == COLOR_WHITE


def test_sprite_drawn_with_object_palette():
    ppu, fb = _headless_ppu()
    _fill_tile(ppu, 1, 0xFF, 0xFF)
    ppu.on_write(0xFF40, 0x93)
    ppu.on_write(0xFF48, 0x40)
    ppu.execute_dma(bytes([16, 8, 1, 0x00]))
    _render_line(ppu)
    assert fb[0:8] == [COLOR_LIGHT_GREEN] * 8
    assert fb[8] == COLOR_WHITE


@pytest.mark.parametrize("attrs, expected", [(0x00, COLOR_LIGHT_GREEN), (0x80, COLOR_BLACK)])
def test_sprite_priority_behind_opaque_background(attrs, expected):
    ppu, fb = _headless_ppu()
    _fill_tile(ppu, 1, 0xFF, 0xFF)
    _fill_tile(ppu, 2, 0xFF, 0x00)
    ppu.set_vram(0x9800, 0x02)
    ppu.on_write(0xFF40, 0x93)
    ppu.on_write(0xFF48, 0x40)
    ppu.execute_dma(bytes([16, 8, 1, attrs]))
    _render_line(ppu)
    assert fb[0] == expected


def test_lyc_match_raises_stat_interrupt():
    ppu, _fb = _headless_ppu()
    ppu.on_write(0xFF45, 1)
    ppu.on_write(0xFF41, 0x40)
    assert ppu.update(80) == 0
    assert ppu.update(172) == 0
    assert ppu.update(204) == INT_LCD_STAT
    assert ppu.on_read(0xFF44) == 1
    assert ppu.on_read(0xFF41) == 0x46


def test_display_off_resets_ly():
    ppu, _fb = _headless_ppu()
    ppu.update(80)
    ppu.update(172)
    ppu.update(204)
    assert ppu.on_read(0xFF44) == 1
    ppu.on_write(0xFF40, 0x00)
    assert ppu.update(100) == 0
    assert ppu.on_read(0xFF44) == 0


def test_stat_write_keeps_low_bits():
    ppu, _fb = _headless_ppu()
    ppu.on_write(0xFF41, 0xFF)
    assert ppu.on_read(0xFF41) == 0xF8


def test_ly_is_read_only():
    ppu, _fb = _headless_ppu()
    assert ppu.on_write(0xFF44, 5) is MemWrite.BLOCK
    assert ppu.on_read(0xFF44) == 0


def test_dma_register_sets_pending_and_reads_ff():
    ppu, _fb = _headless_ppu()
    assert ppu.pending_dma is None
    ppu.on_write(0xFF46, 0xC0)
    assert ppu.pending_dma == 0xC0
    assert ppu.on_read(0xFF46) == 0xFF


def test_default_register_values():
    ppu, _fb = _headless_ppu()
    assert ppu.on_read(0xFF40) == 0x91
    assert ppu.on_read(0xFF47) == 0xFC
    assert ppu.on_read(0xFF48) == 0xFF
    assert ppu.on_read(0xFF49) == 0xFF


def test_unmapped_address_passes_through():
    ppu, _fb = _headless_ppu()
    assert ppu.on_read(0xFF4C) is None
    assert ppu.on_write(0xFF4C, 1) is MemWrite.PASS_THROUGH


def test_vram_and_oam_through_mmu():
    ppu, _fb = _headless_ppu()
    mmu = Mmu()
    mmu.add_handler(0x8000, 0x9FFF, ppu)
    mmu.add_handler(0xFE00, 0xFE9F, ppu)
    mmu.set8(0x8123, 0x55)
    mmu.set8(0xFE05, 0x77)
    assert ppu.get_vram(0x8123) == 0x55
    assert ppu.get_oam(0xFE05) == 0x77
    assert mmu.get8(0x8123) == 0x55
    assert mmu.get8(0xFE05) == 0x77