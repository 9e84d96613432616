"""Picture processing unit: LCD timing, registers and scanline rendering."""

from __future__ import annotations

import threading

from dmgcore.interrupt import INT_LCD_STAT, INT_VBLANK
from dmgcore.mmu import MemHandler, MemWrite

# LCD control register bits (0xFF40)
_LCDC_BG_ENABLE = 0x01
_LCDC_OBJ_ENABLE = 0x02
_LCDC_OBJ_SIZE = 0x04
_LCDC_BG_MAP = 0x08
_LCDC_TILE_DATA = 0x10
_LCDC_WINDOW_ENABLE = 0x20
_LCDC_WINDOW_MAP = 0x40
_LCDC_DISPLAY_ENABLE = 0x80

# LCD status register bits (0xFF41)
_STAT_LYC_EQUAL = 0x04
_STAT_HBLANK_INT = 0x08
_STAT_VBLANK_INT = 0x10
_STAT_OAM_INT = 0x20
_STAT_LYC_INT = 0x40

MODE_HBLANK = 0x00
MODE_VBLANK = 0x01
MODE_OAM = 0x02
MODE_TRANSFER = 0x03

SCREEN_WIDTH = 160
SCREEN_HEIGHT = 144

COLOR_WHITE = 0xFFFFFFFF
COLOR_LIGHT_GREEN = 0xFFADD794
COLOR_DARK_GREEN = 0xFF306230
COLOR_BLACK = 0xFF0F380F

_DMG_COLORS = (COLOR_WHITE, COLOR_LIGHT_GREEN, COLOR_DARK_GREEN, COLOR_BLACK)

_OAM_CYCLES = 80
_TRANSFER_CYCLES = 172
_HBLANK_CYCLES = 204
_LINE_CYCLES = 456

_OAM_SIZE = 0xA0
_VRAM_SIZE = 0x2000

_REGISTERS = {
    0xFF40: "lcdc",
    0xFF41: "stat",
    0xFF42: "scy",
    0xFF43: "scx",
    0xFF44: "ly",
    0xFF45: "lyc",
    0xFF47: "bgp",
    0xFF48: "obp0",
    0xFF49: "obp1",
    0xFF4A: "wy",
    0xFF4B: "wx",
}

_DMA_REGISTER = 0xFF46


def _apply_palette(palette: int, color_id: int) -> int:
    return (palette >> (color_id * 2)) & 0x03


class Ppu(MemHandler):
    """Renders the background, window and sprites into a shared frame buffer.

    ``frame_buffer`` is a list of 160*144 ARGB pixels; it is written under
    ``frame_lock`` one scanline at a time.
    """

    def __init__(
        self,
        frame_buffer: list[int] | None = None,
        frame_lock: threading.Lock | None = None,
    ) -> None:
        self.frame_buffer = (
            [0] * (SCREEN_WIDTH * SCREEN_HEIGHT) if frame_buffer is None else frame_buffer
        )
        self.frame_lock = threading.Lock() if frame_lock is None else frame_lock
        self._vram = bytearray(_VRAM_SIZE)
        self._oam = bytearray(_OAM_SIZE)
        self.lcdc = 0x91
        self.stat = 0
        self.scy = 0
        self.scx = 0
        self.ly = 0
        self.lyc = 0
        self.wy = 0
        self.wx = 0
        self.bgp = 0xFC
        self.obp0 = 0xFF
        self.obp1 = 0xFF
        self.mode = MODE_OAM
        self._mode_cycles = 0
        self._window_line = 0
        self.pending_dma: int | None = None

    def _set_mode(self, mode: int) -> None:
        self.mode = mode
        self.stat = (self.stat & 0xFC) | mode

    def update(self, cycles: int) -> int:
        """Advance by ``cycles``; return a mask of INT_VBLANK / INT_LCD_STAT."""
        interrupts = 0

        if not self.lcdc & _LCDC_DISPLAY_ENABLE:
            self.mode = MODE_HBLANK
            self.ly = 0
            self._mode_cycles = 0
            self._window_line = 0
            return 0

        self._mode_cycles += cycles

        if self.mode == MODE_OAM:
            if self._mode_cycles >= _OAM_CYCLES:
                self._mode_cycles -= _OAM_CYCLES
                self._set_mode(MODE_TRANSFER)
        elif self.mode == MODE_TRANSFER:
            if self._mode_cycles >= _TRANSFER_CYCLES:
                self._mode_cycles -= _TRANSFER_CYCLES
                self._set_mode(MODE_HBLANK)
                self._render_scanline()
                if self.stat & _STAT_HBLANK_INT:
                    interrupts |= INT_LCD_STAT
        elif self.mode == MODE_HBLANK:
            if self._mode_cycles >= _HBLANK_CYCLES:
                self._mode_cycles -= _HBLANK_CYCLES
                self.ly += 1
                if self.ly == SCREEN_HEIGHT:
                    self._set_mode(MODE_VBLANK)
                    interrupts |= INT_VBLANK
                    if self.stat & _STAT_VBLANK_INT:
                        interrupts |= INT_LCD_STAT
                else:
                    self._set_mode(MODE_OAM)
                    if self.stat & _STAT_OAM_INT:
                        interrupts |= INT_LCD_STAT
        else:
            if self._mode_cycles >= _LINE_CYCLES:
                self._mode_cycles -= _LINE_CYCLES
                self.ly += 1
                if self.ly > 153:
                    self.ly = 0
                    self._window_line = 0
                    self._set_mode(MODE_OAM)
                    if self.stat & _STAT_OAM_INT:
                        interrupts |= INT_LCD_STAT

        if self.ly == self.lyc:
            if not self.stat & _STAT_LYC_EQUAL:
                self.stat |= _STAT_LYC_EQUAL
                if self.stat & _STAT_LYC_INT:
                    interrupts |= INT_LCD_STAT
        else:
            self.stat &= ~_STAT_LYC_EQUAL & 0xFF

        return interrupts

    def _render_scanline(self) -> None:
        if self.ly >= SCREEN_HEIGHT:
            return

        color_index = [0] * SCREEN_WIDTH
        bg_opaque = [False] * SCREEN_WIDTH

        if self.lcdc & _LCDC_BG_ENABLE:
            self._render_background(color_index, bg_opaque)

        window_drawn = False
        if self.lcdc & _LCDC_WINDOW_ENABLE and self.wy <= self.ly:
            window_drawn = self._render_window(color_index, bg_opaque)

        if self.lcdc & _LCDC_OBJ_ENABLE:
            self._render_sprites(color_index, bg_opaque)

        if window_drawn:
            self._window_line = (self._window_line + 1) & 0xFF

        base = self.ly * SCREEN_WIDTH
        with self.frame_lock:
            self.frame_buffer[base:base + SCREEN_WIDTH] = [
                _DMG_COLORS[color] for color in color_index
            ]

    def _tile_color(self, tile_index: int, sub_x: int, sub_y: int, signed: bool) -> int:
        """Raw 2-bit color of one tile pixel, before the palette is applied."""
        if signed:
            offset = tile_index - 0x100 if tile_index >= 0x80 else tile_index
            tile_addr = 0x1000 + offset * 16
        else:
            tile_addr = tile_index * 16
        low = self._vram[tile_addr + sub_y * 2]
        high = self._vram[tile_addr + sub_y * 2 + 1]
        bit = 7 - sub_x
        return (((high >> bit) & 1) << 1) | ((low >> bit) & 1)

    def _render_background(self, color_index: list[int], bg_opaque: list[bool]) -> None:
        map_base = 0x1C00 if self.lcdc & _LCDC_BG_MAP else 0x1800
        signed = not self.lcdc & _LCDC_TILE_DATA
        py = (self.ly + self.scy) & 0xFF
        tile_row, sub_y = divmod(py, 8)

        for x in range(SCREEN_WIDTH):
            px = (x + self.scx) & 0xFF
            tile_col, sub_x = divmod(px, 8)
            tile_idx = self._vram[map_base + tile_row * 32 + tile_col]
            raw = self._tile_color(tile_idx, sub_x, sub_y, signed)
            color_index[x] = _apply_palette(self.bgp, raw)
            bg_opaque[x] = raw != 0

    def _render_window(self, color_index: list[int], bg_opaque: list[bool]) -> bool:
        left = self.wx - 7
        map_base = 0x1C00 if self.lcdc & _LCDC_WINDOW_MAP else 0x1800
        signed = not self.lcdc & _LCDC_TILE_DATA
        tile_row, sub_y = divmod(self._window_line, 8)

        drawn = False
        for x in range(max(left, 0), SCREEN_WIDTH):
            tile_col, sub_x = divmod(x - left, 8)
            tile_idx = self._vram[map_base + tile_row * 32 + tile_col]
            raw = self._tile_color(tile_idx, sub_x, sub_y, signed)
            color_index[x] = _apply_palette(self.bgp, raw)
            bg_opaque[x] = raw != 0
            drawn = True
        return drawn

    def _visible_sprites(self, tall: bool, height: int) -> list[tuple[int, int, int, int]]:
        visible = []
        for base in range(0, _OAM_SIZE, 4):
            sy = self._oam[base] - 16
            sx = self._oam[base + 1] - 8
            tile = self._oam[base + 2] & 0xFE if tall else self._oam[base + 2]
            attrs = self._oam[base + 3]
            if sy <= self.ly < sy + height:
                visible.append((sx, sy, tile, attrs))
                if len(visible) == 10:
                    break
        return visible

    def _render_sprites(self, color_index: list[int], bg_opaque: list[bool]) -> None:
        tall = bool(self.lcdc & _LCDC_OBJ_SIZE)
        height = 16 if tall else 8

        # Lower OAM index has priority, so it is drawn last.
        for sx, sy, tile, attrs in reversed(self._visible_sprites(tall, height)):
            behind_bg = bool(attrs & 0x80)
            y_flip = bool(attrs & 0x40)
            x_flip = bool(attrs & 0x20)
            palette = self.obp1 if attrs & 0x10 else self.obp0

            row = self.ly - sy
            if y_flip:
                row = height - 1 - row
            tile_idx = tile + 1 if tall and row >= 8 else tile
            tile_row = row % 8

            for col in range(8):
                x = sx + col
                if not 0 <= x < SCREEN_WIDTH:
                    continue
                tile_col = 7 - col if x_flip else col
                raw = self._tile_color(tile_idx, tile_col, tile_row, False)
                if raw == 0:
                    continue
                if behind_bg and bg_opaque[x]:
                    continue
                color_index[x] = _apply_palette(palette, raw)

    def execute_dma(self, src: bytes) -> None:
        """Copy up to 160 bytes of ``src`` into OAM."""
        data = bytes(src[:_OAM_SIZE])
        self._oam[: len(data)] = data

    def get_vram(self, addr: int) -> int:
        return self._vram[addr & 0x1FFF]

    def set_vram(self, addr: int, value: int) -> None:
        self._vram[addr & 0x1FFF] = value & 0xFF

    def get_oam(self, addr: int) -> int:
        return self._oam[addr & 0xFF]

    def set_oam(self, addr: int, value: int) -> None:
        self._oam[addr & 0xFF] = value & 0xFF

    def on_read(self, addr: int) -> int | None:
        if 0x8000 <= addr <= 0x9FFF:
            return self.get_vram(addr)
        if 0xFE00 <= addr <= 0xFE9F:
            return self.get_oam(addr)
        name = _REGISTERS.get(addr)
        if name is not None:
            return getattr(self, name)
        if addr == _DMA_REGISTER:
            return 0xFF
        return None

    def on_write(self, addr: int, value: int) -> MemWrite | int:
        value &= 0xFF
        if 0x8000 <= addr <= 0x9FFF:
            self.set_vram(addr, value)
        elif 0xFE00 <= addr <= 0xFE9F:
            self.set_oam(addr, value)
        elif addr == 0xFF41:
            self.stat = (self.stat & 0x07) | (value & 0xF8)
        elif addr == 0xFF44:
            pass  # LY is read-only
        elif addr == _DMA_REGISTER:
            # The copy itself needs the bus and is done by whoever owns it.
            self.pending_dma = value
        elif addr in _REGISTERS:
            setattr(self, _REGISTERS[addr], value)
        else:
            return MemWrite.PASS_THROUGH
        return MemWrite.BLOCK