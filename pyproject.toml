[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dmgcore"
version = "0.1.0"
description = "Core hardware components of the original Game Boy: memory bus, boot ROM, interrupts, timer, joypad, cartridges and picture processing."
requires-python = ">=3.10"
dependencies = []
keywords = ["game boy", "dmg", "emulator", "ppu", "mbc", "mmu"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dmgcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
