"""
Instruction Byte Buffer and Symbol Table
========================================

The assembler works in two phases:

1. **Collect**: each encoder appends InstructionByte values to the buffer at
   the current origin. A byte is either a concrete value or a pending label
   reference; labels are entered into the SymbolTable as they are defined.

2. **Resolve**: after the last line, the buffer is read out from address 0
   to its high-water mark. Pending references are looked up in the complete
   symbol table, which makes forward references work anywhere in the source.

Buffer Layout
-------------
The buffer mirrors the machine's 256-byte memory. The origin is the next
write address; ORG moves it freely. The high-water mark is the highest
address written or moved to, so

    org 0x10
    halt

produces eight zero instructions followed by the HALT at 0x10.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from simpsim.cpu.isa import MEMORY_SIZE, Instruction
from simpsim.errors import SourceLocation, UndefinedSymbolError
from simpsim.assembler.syntax import AddressSyntax

logger = logging.getLogger(__name__)


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Maps label names to the byte offsets they denote.

    Names are case-sensitive. Defining a label twice is allowed; the later
    definition wins.
    """

    def __init__(self):
        self._symbols: dict[str, int] = {}

    def define(self, name: str, offset: int) -> None:
        if name in self._symbols and self._symbols[name] != offset:
            logger.debug(
                f"Label '{name}' redefined: ${self._symbols[name]:02X} -> ${offset:02X}"
            )
        self._symbols[name] = offset & 0xFF

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __getitem__(self, name: str) -> int:
        return self._symbols[name]

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def get(self, name: str, default: Optional[int] = None) -> Optional[int]:
        return self._symbols.get(name, default)

    def clear(self) -> None:
        self._symbols.clear()

    def to_dict(self) -> dict[str, int]:
        return dict(self._symbols)

    def find_similar(self, name: str) -> list[str]:
        """
        Find symbols with similar names for error hints.

        Uses simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []

        for sym in self._symbols:
            sym_lower = sym.lower()
            if (
                sym_lower == name_lower or
                abs(len(sym) - len(name)) <= 1 and
                _edit_distance(name_lower, sym_lower) <= 2
            ):
                similar.append(sym)

        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current = [i + 1]
        for j, c2 in enumerate(s2):
            current.append(min(
                previous[j + 1] + 1,
                current[j] + 1,
                previous[j] + (c1 != c2),
            ))
        previous = current

    return previous[-1]


# =============================================================================
# Instruction Bytes
# =============================================================================

@dataclass(frozen=True)
class InstructionByte:
    """
    One byte in the buffer: a concrete value or a pending label.

    Attributes:
        value: The byte value (ignored while label is set)
        label: Pending label name, resolved at finalization
        location: Where the pending label was referenced, for error reports
        source_line: Source text of the referencing line
    """
    value: int = 0
    label: Optional[str] = None
    location: Optional[SourceLocation] = None
    source_line: Optional[str] = None

    @classmethod
    def literal(cls, value: int) -> "InstructionByte":
        return cls(value & 0xFF)

    @classmethod
    def from_address(
        cls,
        address: AddressSyntax,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> "InstructionByte":
        if address.is_pending:
            return cls(label=address.label, location=location, source_line=source_line)
        return cls(address.value & 0xFF)

    @property
    def is_pending(self) -> bool:
        return self.label is not None

    def resolve(self, symbols: SymbolTable) -> int:
        """
        Return the final byte value.

        Raises:
            UndefinedSymbolError: If the pending label was never defined
        """
        if self.label is None:
            return self.value
        if self.label not in symbols:
            raise UndefinedSymbolError(
                self.label,
                location=self.location,
                source_line=self.source_line,
                similar_symbols=symbols.find_similar(self.label),
            )
        return symbols[self.label]


# =============================================================================
# Buffer
# =============================================================================

class InstructionByteBuffer:
    """
    Fixed 256-byte staging area with a movable write cursor.

    Attributes:
        origin: Address the next byte is written to
        count: High-water mark (one past the highest address reached)
    """

    def __init__(self):
        self._bytes: list[Optional[InstructionByte]] = [None] * MEMORY_SIZE
        self._origin = 0
        self._count = 0

    @property
    def origin(self) -> int:
        return self._origin

    @origin.setter
    def origin(self, value: int) -> None:
        self._origin = value & 0xFF
        if self._origin > self._count:
            self._count = self._origin

    @property
    def count(self) -> int:
        return self._count

    def add(self, instruction_byte: InstructionByte) -> None:
        """Write a byte at the origin and advance it (wrapping at 256)."""
        self._bytes[self._origin] = instruction_byte
        self._count = max(self._count, self._origin + 1)
        self._origin = (self._origin + 1) & 0xFF

    def add_value(self, value: int) -> None:
        self.add(InstructionByte.literal(value))

    def reset(self) -> None:
        self._bytes = [None] * MEMORY_SIZE
        self._origin = 0
        self._count = 0

    def pending_labels(self) -> list[str]:
        return [b.label for b in self._bytes if b is not None and b.is_pending]

    def read_byte(self, address: int, symbols: SymbolTable) -> int:
        instruction_byte = self._bytes[address] if address < MEMORY_SIZE else None
        return instruction_byte.resolve(symbols) if instruction_byte else 0x00

    def to_bytes(self, symbols: SymbolTable) -> bytes:
        """
        Resolve every byte up to the high-water mark.

        An odd high-water mark is padded with a 0x00 byte so the result
        always splits evenly into instructions.

        Raises:
            UndefinedSymbolError: At the first unresolvable label
        """
        length = self._count + (self._count % 2)
        return bytes(self.read_byte(address, symbols) for address in range(length))

    def get_instructions(self, symbols: SymbolTable) -> list[Instruction]:
        data = self.to_bytes(symbols)
        return [Instruction(data[i], data[i + 1]) for i in range(0, len(data), 2)]
