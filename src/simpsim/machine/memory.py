"""
Memory and Register File
========================

Both stores are flat arrays of unsigned bytes that wrap their index:

    Memory        256 cells, addressed $00-$FF
    RegisterFile  16 cells, R0-RF

Values are masked to 8 bits on write, so neither class can raise for an
out-of-range index or value. Each store has an on_write hook that is
called after a cell has been updated; the Machine uses it to publish
change notifications.
"""

from typing import Callable, Iterable, Optional

from simpsim.cpu.isa import MEMORY_SIZE, REGISTER_COUNT, Instruction


class _ByteStore:
    """Fixed-size byte array with wrapping indices and a write hook."""

    SIZE = 0

    def __init__(self):
        self._data = bytearray(self.SIZE)

        # on_write(index, value): called after every committed write
        self.on_write: Optional[Callable[[int, int], None]] = None

    def read(self, index: int) -> int:
        return self._data[index % self.SIZE]

    def write(self, index: int, value: int) -> None:
        index %= self.SIZE
        self._data[index] = value & 0xFF
        if self.on_write:
            self.on_write(index, self._data[index])

    def __getitem__(self, index: int) -> int:
        return self.read(index)

    def __setitem__(self, index: int, value: int) -> None:
        self.write(index, value)

    def __len__(self) -> int:
        return self.SIZE

    def __iter__(self):
        return iter(bytes(self._data))

    def clear(self) -> None:
        """Set every cell to 0x00."""
        for index in range(self.SIZE):
            self.write(index, 0x00)

    def to_bytes(self) -> bytes:
        return bytes(self._data)


class Memory(_ByteStore):
    """
    256 bytes of main memory.

    Example:
        >>> memory = Memory()
        >>> memory[0x100] = 0x1FF   # wraps to address $00, value $FF
        >>> memory[0]
        255
    """

    SIZE = MEMORY_SIZE

    def load(self, data: Iterable[int], address: int = 0) -> None:
        """Copy bytes into memory starting at address (wrapping)."""
        for offset, value in enumerate(data):
            self.write(address + offset, value)

    def load_instructions(self, instructions: Iterable[Instruction], address: int = 0) -> None:
        """Write instructions two bytes each, in sequence order."""
        for instruction in instructions:
            self.write(address, instruction.byte1)
            self.write(address + 1, instruction.byte2)
            address += 2

    def read_instruction(self, address: int) -> Instruction:
        return Instruction(self.read(address), self.read(address + 1))


class RegisterFile(_ByteStore):
    """Sixteen 8-bit general purpose registers R0-RF."""

    SIZE = REGISTER_COUNT

    def __repr__(self) -> str:
        values = " ".join(f"R{i:X}={v:02X}" for i, v in enumerate(self._data))
        return f"RegisterFile({values})"
