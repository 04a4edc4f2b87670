"""
Simple Simulator Disassembler
=============================

Turns instruction bytes back into assembler source. This is the inverse of
the assembler's encoders: every line produced here assembles to exactly the
bytes it was made from.

Encodings that no mnemonic produces (opcode 0, or operand nibbles that the
assembler always leaves zero) are rendered as ``db`` so they survive a round
trip unchanged. A JUMP_EQUAL against R0 is shown as ``jmp``.

Usage:
    disasm = SimpleDisassembler(symbol_table={0x04: "loop"})
    for instr in disasm.disassemble(machine.memory.to_bytes(), count=8):
        print(instr)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from simpsim.cpu.isa import (
    ADDRESS_OPCODES,
    INSTRUCTION_SIZE,
    Instruction,
    Opcode,
    instructions_from_bytes,
)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    One disassembled instruction.

    Attributes:
        address: Memory address of the first byte
        instruction: The decoded instruction
        text: Assembler source for the instruction
        comment: Optional annotation (e.g. the label of a jump target)
    """
    address: int
    instruction: Instruction
    text: str
    comment: str = ""

    def __str__(self) -> str:
        hex_bytes = f"{self.instruction.byte1:02X} {self.instruction.byte2:02X}"
        if self.comment:
            return f"${self.address:02X}: {hex_bytes}  {self.text:<20} ; {self.comment}"
        return f"${self.address:02X}: {hex_bytes}  {self.text}"

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "bytes": [self.instruction.byte1, self.instruction.byte2],
            "text": self.text,
            "comment": self.comment,
        }


def _register(index: int) -> str:
    return f"R{index:X}"


def _hex(value: int) -> str:
    return f"0x{value:02X}"


def disassemble_instruction(instruction: Instruction) -> str:
    """Render a single instruction as assembler source."""
    opcode, r, x, y = instruction.nibbles
    address = _hex(instruction.address)

    match Opcode(opcode):
        case Opcode.DIRECT_LOAD:
            return f"load {_register(r)},[{address}]"
        case Opcode.IMMEDIATE_LOAD:
            return f"load {_register(r)},{address}"
        case Opcode.DIRECT_STORE:
            return f"store {_register(r)},[{address}]"
        case Opcode.MOVE if r == 0:
            return f"move {_register(x)},{_register(y)}"
        case Opcode.INTEGER_ADD:
            return f"addi {_register(r)},{_register(x)},{_register(y)}"
        case Opcode.FLOATING_POINT_ADD:
            return f"addf {_register(r)},{_register(x)},{_register(y)}"
        case Opcode.OR:
            return f"or {_register(r)},{_register(x)},{_register(y)}"
        case Opcode.AND:
            return f"and {_register(r)},{_register(x)},{_register(y)}"
        case Opcode.XOR:
            return f"xor {_register(r)},{_register(x)},{_register(y)}"
        case Opcode.ROR if x == 0:
            return f"ror {_register(r)},{y}"
        case Opcode.JUMP_EQUAL if r == 0:
            return f"jmp {address}"
        case Opcode.JUMP_EQUAL:
            return f"jmpeq {_register(r)},{address}"
        case Opcode.HALT if r == 0 and instruction.byte2 == 0:
            return "halt"
        case Opcode.INDIRECT_LOAD if r == 0:
            return f"load {_register(x)},[{_register(y)}]"
        case Opcode.INDIRECT_STORE if r == 0:
            return f"store {_register(x)},[{_register(y)}]"
        case Opcode.JUMP_LESS_EQUAL:
            return f"jmple {_register(r)},{address}"
        case _:
            return f"db {_hex(instruction.byte1)},{address}"


# =============================================================================
# Disassembler
# =============================================================================

class SimpleDisassembler:
    """
    Disassembler for Simple Simulator machine code.

    Attributes:
        _symbol_table: Address to label name, used to annotate jump
            and memory targets
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        self._symbol_table = symbol_table or {}

    def disassemble_one(self, instruction: Instruction, address: int = 0) -> DisassembledInstruction:
        comment = ""
        if instruction.opcode in ADDRESS_OPCODES:
            comment = self._symbol_table.get(instruction.address, "")
        return DisassembledInstruction(
            address=address & 0xFF,
            instruction=instruction,
            text=disassemble_instruction(instruction),
            comment=comment,
        )

    def disassemble(
        self,
        data: bytes,
        start_address: int = 0,
        count: Optional[int] = None
    ) -> List[DisassembledInstruction]:
        """
        Disassemble consecutive instructions.

        Args:
            data: Machine code (an odd trailing byte is paired with 0x00)
            start_address: Memory address of the first byte
            count: Maximum number of instructions (None = all)
        """
        instructions = instructions_from_bytes(data)
        if count is not None:
            instructions = instructions[:count]
        return [
            self.disassemble_one(instruction, start_address + index * INSTRUCTION_SIZE)
            for index, instruction in enumerate(instructions)
        ]

    def disassemble_to_text(self, data: bytes, start_address: int = 0,
                            count: Optional[int] = None) -> str:
        return "\n".join(str(i) for i in self.disassemble(data, start_address, count))

    def to_source(self, data: bytes) -> str:
        """
        Produce assembler source that rebuilds data exactly.

        Labels from the symbol table are emitted at their addresses.
        """
        lines = []
        for instr in self.disassemble(data):
            label = self._symbol_table.get(instr.address)
            prefix = f"{label}: " if label else ""
            lines.append(f"{prefix}{instr.text}")
        return "\n".join(lines) + "\n"

    def add_symbol(self, address: int, name: str) -> None:
        self._symbol_table[address & 0xFF] = name

    def add_symbols(self, symbols: Dict[int, str]) -> None:
        for address, name in symbols.items():
            self.add_symbol(address, name)


def disassemble(data: bytes, start: int = 0) -> List[DisassembledInstruction]:
    """Disassemble data with no symbol annotations (convenience function)."""
    return SimpleDisassembler().disassemble(data, start)
