"""
SimpSim CPU Package
===================

Instruction set definitions shared by the assembler, the disassembler and
the machine. Keeping the encoding in one place guarantees that what the
assembler writes is exactly what the machine decodes.

Modules:
    isa: Opcodes, the two-byte Instruction type and nibble helpers.
    floating: The 8-bit floating point format used by FLOATING_POINT_ADD.

Usage:
    from simpsim.cpu import Opcode, Instruction
"""

from simpsim.cpu.isa import (
    # Core types
    Opcode,
    Instruction,
    # Machine constants
    MEMORY_SIZE,
    REGISTER_COUNT,
    INSTRUCTION_SIZE,
    OUTPUT_PORT,
    # Opcode group
    ADDRESS_OPCODES,
    # Helpers
    byte_from_nibbles,
    high_nibble,
    low_nibble,
    to_signed,
    instructions_to_bytes,
    instructions_from_bytes,
)
from simpsim.cpu.floating import decode_float, encode_float, float_add

__all__ = [
    "Opcode",
    "Instruction",
    "MEMORY_SIZE",
    "REGISTER_COUNT",
    "INSTRUCTION_SIZE",
    "OUTPUT_PORT",
    "ADDRESS_OPCODES",
    "byte_from_nibbles",
    "high_nibble",
    "low_nibble",
    "to_signed",
    "instructions_to_bytes",
    "instructions_from_bytes",
    "decode_float",
    "encode_float",
    "float_add",
]
