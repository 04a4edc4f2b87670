"""
Simple Simulator Machine
========================

The processor that executes assembled programs.

- **Machine**: Fetch/decode/execute engine with change notifications
- **Memory / RegisterFile**: Wrapping 8-bit stores
- **BreakpointManager**: PC breakpoints, write watchpoints and stop requests

Quick Start
-----------

    >>> from simpsim.assembler import assemble
    >>> from simpsim.machine import Machine, MachineEvent
    >>> machine = Machine()
    >>> machine.subscribe(MachineEvent.OUTPUT, lambda ch: print(ch, end=""))
    >>> machine.load_instructions(assemble("load R1,0x41\\nstore R1,[0xFF]\\nhalt"))
    >>> event = machine.run()
    A
"""

from simpsim.machine.breakpoints import BreakEvent, BreakpointManager, BreakReason
from simpsim.machine.machine import Machine, MachineEvent, MachineSnapshot, MachineState
from simpsim.machine.memory import Memory, RegisterFile

__all__ = [
    "Machine",
    "MachineEvent",
    "MachineSnapshot",
    "MachineState",
    "Memory",
    "RegisterFile",
    "BreakEvent",
    "BreakReason",
    "BreakpointManager",
]
