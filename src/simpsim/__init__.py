"""
SimpSim - Simple Simulator for a Teaching Instruction Set
=========================================================

This package provides an assembler and a simulated 8-bit machine for the
small instruction set used in introductory computer-architecture courses:
sixteen 8-bit registers, 256 bytes of memory and fixed two-byte
instructions.

Main Components
---------------
- **assembler**: Source text to two-byte instructions (simasm)
- **machine**: Fetch/decode/execute engine with change notifications
- **cpu**: Opcodes, instruction encoding and the 8-bit float format
- **disassembler**: Machine code back to assembler source
- **simulator**: Assembler and Machine wired together (simrun)

Quick Start
-----------
    >>> from simpsim import Simulator
    >>> sim = Simulator()
    >>> _ = sim.assemble_and_load("load R1,5\\nload R2,7\\naddi R3,R1,R2\\nhalt")
    >>> sim.run().reason
    <BreakReason.HALT: 1>
    >>> sim.machine.read_register(3)
    12

Or use the command-line tools:
    $ simasm count.asm -o count.bin -l count.lst
    $ simrun hello.asm
"""

__version__ = "1.0.0"
__author__ = "SimpSim Contributors"

from simpsim.assembler import Assembler, assemble
from simpsim.cpu import Instruction, Opcode
from simpsim.errors import (
    AssemblerError,
    AssemblySyntaxError,
    LabelSyntaxError,
    OperandRangeError,
    SimpSimError,
    UndefinedSymbolError,
    UnrecognizedMnemonicError,
)
from simpsim.machine import BreakEvent, BreakReason, Machine, MachineEvent, MachineState
from simpsim.simulator import Simulator, SimulatorConfig

__all__ = [
    # Version info
    "__version__",
    # Core
    "Assembler",
    "assemble",
    "Instruction",
    "Opcode",
    "Machine",
    "MachineEvent",
    "MachineState",
    "BreakEvent",
    "BreakReason",
    "Simulator",
    "SimulatorConfig",
    # Exceptions
    "SimpSimError",
    "AssemblerError",
    "AssemblySyntaxError",
    "OperandRangeError",
    "LabelSyntaxError",
    "UnrecognizedMnemonicError",
    "UndefinedSymbolError",
]
