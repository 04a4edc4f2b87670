"""
Simple Simulator Disassembler Module
====================================

Converts machine code back into assembler source, for tracing execution
and for inspecting memory images.

Usage:
    from simpsim.disassembler import SimpleDisassembler

    disasm = SimpleDisassembler()
    for instr in disasm.disassemble(memory_bytes, count=10):
        print(instr)
"""

from .simple import (
    DisassembledInstruction,
    SimpleDisassembler,
    disassemble,
    disassemble_instruction,
)

__all__ = [
    "SimpleDisassembler",
    "DisassembledInstruction",
    "disassemble",
    "disassemble_instruction",
]
