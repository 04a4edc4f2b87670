"""
Simple Simulator
================

High-level façade that pairs one Assembler with one Machine, the way the
desktop simulator does: edit source, assemble, load, then step or run.

Example usage:

    >>> from simpsim import Simulator
    >>> sim = Simulator()
    >>> _ = sim.assemble_and_load('''
    ...         load  R1,0x48
    ...         store R1,[0xFF]
    ...         load  R1,0x69
    ...         store R1,[0xFF]
    ...         halt
    ... ''')
    >>> sim.run().reason
    <BreakReason.HALT: 1>
    >>> sim.output
    'Hi'
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from simpsim.assembler import Assembler
from simpsim.cpu.isa import OUTPUT_PORT, Instruction, Opcode
from simpsim.machine import BreakEvent, BreakReason, Machine, MachineEvent

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """
    Configuration for a Simulator.

    Attributes:
        max_steps: Step budget for run() when none is given
        clear_memory_on_load: Zero all memory before loading a new program
        output_port: Address whose stores are echoed as characters
    """
    max_steps: int = 10_000
    clear_memory_on_load: bool = True
    output_port: int = OUTPUT_PORT

    @classmethod
    def from_env(cls) -> "SimulatorConfig":
        """
        Create SimulatorConfig from environment variables.

        Environment variables (all optional):
            SIMPSIM_MAX_STEPS: Step budget (integer)
            SIMPSIM_CLEAR_MEMORY: "0"/"false"/"no" to keep memory between loads
        """
        config = cls()

        if max_steps := os.environ.get("SIMPSIM_MAX_STEPS"):
            try:
                config.max_steps = int(max_steps)
            except ValueError:
                pass  # Ignore invalid values

        if clear_memory := os.environ.get("SIMPSIM_CLEAR_MEMORY"):
            match clear_memory.strip().lower():
                case "1" | "true" | "yes" | "on":
                    config.clear_memory_on_load = True
                case "0" | "false" | "no" | "off":
                    config.clear_memory_on_load = False

        return config


class Simulator:
    """
    Assembler and Machine wired together.

    Characters written to the output port are collected in ``output``.

    Attributes:
        config: Simulator configuration
        assembler: Assembler used by assemble_and_load()
        machine: The machine programs run on
    """

    def __init__(self, config: Optional[SimulatorConfig] = None):
        self.config = config or SimulatorConfig()
        self.assembler = Assembler()
        self.machine = Machine(output_port=self.config.output_port)
        self._output: list[str] = []

        self.machine.subscribe(MachineEvent.OUTPUT, self._output.append)

    @property
    def output(self) -> str:
        """Everything written to the output port since the last clear."""
        return "".join(self._output)

    def clear_output(self) -> None:
        self._output.clear()

    # =========================================================================
    # Program Loading
    # =========================================================================

    def assemble_and_load(self, source: str, filename: str = "<input>") -> list[Instruction]:
        """
        Assemble source and load it at address 0.

        The machine is left untouched when assembly fails. On success the
        program counter is reset to 0.

        Raises:
            AssemblerError: If the source does not assemble
        """
        instructions = self.assembler.assemble(source, filename)

        if self.config.clear_memory_on_load:
            self.machine.clear_memory()
        self.machine.load_instructions(instructions)
        self.machine.reset_program_counter()

        logger.info(f"Loaded {filename}: {len(instructions)} instructions")
        return instructions

    def load_file(self, filepath: str | Path) -> list[Instruction]:
        """Assemble and load a source file."""
        filepath = Path(filepath)
        return self.assemble_and_load(filepath.read_text(), str(filepath))

    def reset(self) -> None:
        """Clear memory, registers and output, and reset the program counter."""
        self.machine.clear_memory()
        self.machine.clear_registers()
        self.machine.reset_program_counter()
        self.clear_output()

    # =========================================================================
    # Execution
    # =========================================================================

    def step(self) -> BreakEvent:
        """
        Execute a single instruction.

        Returns:
            BreakEvent with reason=STEP and the new PC, or reason=HALT and
            the address of the HALT instruction
        """
        instruction = self.machine.step()
        pc = self.machine.program_counter
        if instruction.opcode == Opcode.HALT:
            return BreakEvent(BreakReason.HALT, address=(pc - 2) & 0xFF, steps=1)
        return BreakEvent(BreakReason.STEP, address=pc, steps=1, message=f"Step at ${pc:02X}")

    def run(self, max_steps: Optional[int] = None) -> BreakEvent:
        """
        Run until HALT, a stop request, a breakpoint or the step budget.

        Args:
            max_steps: Step budget (defaults to config.max_steps)
        """
        if max_steps is None:
            max_steps = self.config.max_steps
        event = self.machine.run(max_steps)
        if event.reason == BreakReason.MAX_STEPS:
            logger.warning(f"Program did not halt within {max_steps} steps")
        return event
