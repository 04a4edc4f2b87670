"""
Simple Simulator Assembler
==========================

Converts assembly source text into the two-byte instructions executed by
the Machine.

Main Components
---------------
- **Assembler**: Drives parsing, encoding and label resolution
- **syntax**: Splits lines and parses registers, numbers, strings and addresses
- **SymbolTable**: Label name to byte offset
- **InstructionByteBuffer**: 256-byte staging area with a movable origin

Example Usage
-------------
>>> from simpsim.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble("load R1,0x41\\nstore R1,[0xFF]\\nhalt")
[Instruction(byte1=33, byte2=65), Instruction(byte1=49, byte2=255), Instruction(byte1=192, byte2=0)]
"""

from simpsim.assembler.assembler import (
    Assembler,
    AssemblyContext,
    ListingEntry,
    assemble,
    assemble_file,
)
from simpsim.assembler.buffer import InstructionByte, InstructionByteBuffer, SymbolTable
from simpsim.assembler.syntax import (
    AddressSyntax,
    BracketExpectation,
    InstructionSyntax,
    parse_address,
    parse_line,
    parse_number,
    parse_register,
    parse_string_literal,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyContext",
    "ListingEntry",
    "assemble",
    "assemble_file",
    # Buffer and symbols
    "InstructionByte",
    "InstructionByteBuffer",
    "SymbolTable",
    # Syntax
    "AddressSyntax",
    "BracketExpectation",
    "InstructionSyntax",
    "parse_address",
    "parse_line",
    "parse_number",
    "parse_register",
    "parse_string_literal",
]
