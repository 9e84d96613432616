# dmgcore

Building blocks for an original Game Boy (DMG) emulator, written in plain
Python with no third-party dependencies.

## What is inside

- `dmgcore.mmu`: the 64 KiB memory bus (`Mmu`), the `MemHandler` base
  class and the `MemWrite` outcomes. You attach handlers to address ranges
  with `Mmu.add_handler(start, end, handler)`. A handler's `on_read` returns
  a byte, or `None` to let the read go on to the next handler and then to
  RAM. `on_write` returns `MemWrite.BLOCK`, `MemWrite.PASS_THROUGH`, or an
  `int` that replaces the value being written. Echo RAM (0xE000–0xFDFF)
  mirrors 0xC000–0xDDFF. `get16` and `set16` are little-endian.
- `dmgcore.boot`: `BootRom`, the 256-byte boot program mapped at
  0x0000–0x00FF. Writing a non-zero value to 0xFF50 disables it.
- `dmgcore.interrupt`: `Interrupt`, the IF (0xFF0F) and IE (0xFFFF)
  registers, with the `INT_VBLANK`, `INT_LCD_STAT`, `INT_TIMER`,
  `INT_SERIAL` and `INT_JOYPAD` masks.
  - `request(mask)` sets a bit in IF.
  - `dispatch(cpu, mmu)` services the lowest pending bit and returns 20 cycles, or 0 when nothing was serviced. The `cpu` object must provide the attributes `pc`, `ime` and `halted`, and a method `push(mmu, value)`. A pending interrupt clears `halted` even when `ime` is false.
- `dmgcore.timer`: `Timer`, the DIV/TIMA/TMA/TAC registers (0xFF04–0xFF07).
  `update(cycles)` returns `INT_TIMER` when TIMA overflows, and 0 otherwise.
- `dmgcore.joypad`: `Joypad` and the `Key` enum for the 0xFF00 register.
  - The joypad reads a mutable mapping of `Key` to `bool`. You may pass the mapping to the constructor, or use the `keys` attribute.
  - `poll_interrupt()` reports a newly pressed key in the selected group.
- `dmgcore.mbc`: `create_mbc(code, rom)` and the bank controllers `RomOnly`,
  `Mbc1`, `Mbc3` and `Mbc5`.
  - `Mbc3` implements RAM banks 0–3. When another bank is selected, RAM reads return 0 and writes are ignored; there is no real-time clock.
  - Any other cartridge type raises `UnsupportedCartridgeError`. This includes MBC2, MMM01 and HuC1.
- `dmgcore.cartridge`: `Cartridge`, which reads the ROM header and forwards
  memory accesses to the bank controller. The header fields are the title, `CgbSupport`, the SGB flag and the ROM and RAM size codes. `show_info()` logs a description of the header and returns it.
- `dmgcore.ppu`: `Ppu`, the picture processing unit.
  - It handles the LCD mode timing and the registers 0xFF40–0xFF4B, plus VRAM and OAM.
  - It renders the background, the window and sprites into a 160×144 list of ARGB pixels (`frame_buffer`). Each scanline is written while holding `frame_lock`.
  - A write to 0xFF46 only records the page in `pending_dma`. The caller performs the copy with `execute_dma(data)`.

## Installing

```
pip install .
```

## Example

```python
from dmgcore.mmu import Mmu
from dmgcore.boot import BootRom

mmu = Mmu()
boot = BootRom()
mmu.add_handler(0x0000, 0x00FF, boot)
mmu.add_handler(0xFF50, 0xFF50, boot)

assert mmu.get8(0x0000) == 0x31   # first boot ROM byte
mmu.set8(0xFF50, 0x01)            # unmap the boot ROM
assert not boot.is_active()
assert mmu.get8(0x0000) == 0x00
```

You drive the hardware components by feeding them elapsed CPU cycles:

```python
from dmgcore.interrupt import INT_TIMER
from dmgcore.timer import Timer

timer = Timer()
timer.on_write(0xFF07, 0x04)   # enable TIMA at 1024 cycles per tick
timer.on_write(0xFF05, 0xFF)
assert timer.update(1024) == INT_TIMER
```

```python
from dmgcore.interrupt import INT_VBLANK
from dmgcore.ppu import Ppu

ppu = Ppu()
irq = 0
while not irq & INT_VBLANK:
    irq = ppu.update(4)
# ppu.frame_buffer now holds a full frame
```

## What it does not do

- It has no CPU instruction core. `Interrupt.dispatch` expects you to supply a CPU object.
- It has no sound generation.
- It does not open a window or read the keyboard. The frame buffer and the key mapping are plain Python objects for your own front end to use.
- It provides no command-line program for loading and running a ROM.

## Running the tests

```
pip install .[test]
pytest
```