"""
Simple Simulator Instruction Set
================================

Every instruction is exactly two bytes. The high nibble of the first byte
is the opcode; the remaining three nibbles carry the operands:

    byte1        byte2
    +----+----+  +----+----+
    | op |  R |  |  X |  Y |
    +----+----+  +----+----+

Depending on the opcode, X and Y are read as two register numbers (S, T)
or together as a single address / immediate byte (XY).

| Op | Name                 | Assembly           | Effect                     |
|----|----------------------|--------------------|----------------------------|
| 1  | DIRECT_LOAD          | load R,[XY]        | R := mem[XY]               |
| 2  | IMMEDIATE_LOAD       | load R,XY          | R := XY                    |
| 3  | DIRECT_STORE         | store R,[XY]       | mem[XY] := R               |
| 4  | MOVE                 | move S,T           | S := T                     |
| 5  | INTEGER_ADD          | addi R,S,T         | R := S + T                 |
| 6  | FLOATING_POINT_ADD   | addf R,S,T         | R := S + T (8-bit float)   |
| 7  | OR                   | or R,S,T           | R := S | T                 |
| 8  | AND                  | and R,S,T          | R := S & T                 |
| 9  | XOR                  | xor R,S,T          | R := S ^ T                 |
| A  | ROR                  | ror R,Y            | rotate R right Y bits      |
| B  | JUMP_EQUAL           | jmpeq R,XY         | if R == R0: pc := XY       |
| C  | HALT                 | halt               | stop                       |
| D  | INDIRECT_LOAD        | load S,[T]         | S := mem[T]                |
| E  | INDIRECT_STORE       | store S,[T]        | mem[T] := S                |
| F  | JUMP_LESS_EQUAL      | jmple R,XY         | if R <= R0: pc := XY       |

Opcode 0 has no mnemonic and executes as a no-op.
"""

from dataclasses import dataclass
from enum import IntEnum


# =============================================================================
# Machine Constants
# =============================================================================

MEMORY_SIZE = 0x100
REGISTER_COUNT = 0x10
INSTRUCTION_SIZE = 2

# Writes to this address are echoed to the output window.
OUTPUT_PORT = 0xFF


class Opcode(IntEnum):
    """The sixteen values of an instruction's opcode nibble."""
    NOP = 0x0
    DIRECT_LOAD = 0x1
    IMMEDIATE_LOAD = 0x2
    DIRECT_STORE = 0x3
    MOVE = 0x4
    INTEGER_ADD = 0x5
    FLOATING_POINT_ADD = 0x6
    OR = 0x7
    AND = 0x8
    XOR = 0x9
    ROR = 0xA
    JUMP_EQUAL = 0xB
    HALT = 0xC
    INDIRECT_LOAD = 0xD
    INDIRECT_STORE = 0xE
    JUMP_LESS_EQUAL = 0xF


# Opcodes whose second byte is an address or immediate value (XY).
ADDRESS_OPCODES = frozenset({
    Opcode.DIRECT_LOAD,
    Opcode.IMMEDIATE_LOAD,
    Opcode.DIRECT_STORE,
    Opcode.JUMP_EQUAL,
    Opcode.JUMP_LESS_EQUAL,
})


# =============================================================================
# Nibble Helpers
# =============================================================================

def byte_from_nibbles(high: int, low: int) -> int:
    """Pack two 4-bit values into one byte."""
    return ((high & 0x0F) << 4) | (low & 0x0F)


def high_nibble(value: int) -> int:
    return (value >> 4) & 0x0F


def low_nibble(value: int) -> int:
    return value & 0x0F


def to_signed(value: int) -> int:
    """Interpret a byte as a two's-complement value (-128..127)."""
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


# =============================================================================
# Instruction
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    One encoded two-byte instruction.

    Attributes:
        byte1: Opcode nibble and first operand nibble
        byte2: Second and third operand nibbles (or an address byte)
    """
    byte1: int
    byte2: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "byte1", self.byte1 & 0xFF)
        object.__setattr__(self, "byte2", self.byte2 & 0xFF)

    @classmethod
    def from_nibbles(cls, opcode: int, r: int, x: int, y: int) -> "Instruction":
        return cls(byte_from_nibbles(opcode, r), byte_from_nibbles(x, y))

    @property
    def opcode(self) -> Opcode:
        return Opcode(high_nibble(self.byte1))

    @property
    def r(self) -> int:
        """First operand nibble (low nibble of byte1)."""
        return low_nibble(self.byte1)

    @property
    def x(self) -> int:
        """Second operand nibble (high nibble of byte2)."""
        return high_nibble(self.byte2)

    @property
    def y(self) -> int:
        """Third operand nibble (low nibble of byte2)."""
        return low_nibble(self.byte2)

    @property
    def address(self) -> int:
        """Second byte read as an address or immediate value."""
        return self.byte2

    @property
    def nibbles(self) -> tuple[int, int, int, int]:
        return (self.opcode.value, self.r, self.x, self.y)

    def to_bytes(self) -> bytes:
        return bytes((self.byte1, self.byte2))

    def __str__(self) -> str:
        return f"{self.byte1:02X}{self.byte2:02X}"


def instructions_to_bytes(instructions) -> bytes:
    """Flatten a sequence of instructions into raw bytes."""
    return b"".join(instruction.to_bytes() for instruction in instructions)


def instructions_from_bytes(data: bytes) -> list[Instruction]:
    """
    Split raw bytes into instructions.

    An odd trailing byte is paired with 0x00.
    """
    if len(data) % 2:
        data = bytes(data) + b"\x00"
    return [Instruction(data[i], data[i + 1]) for i in range(0, len(data), 2)]
