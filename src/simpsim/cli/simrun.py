"""
simrun - Simulator Command-Line Interface
=========================================

Assembles a source file, loads it at address 00 and runs it until HALT or
the step budget runs out. Characters stored to the output port are echoed
as they are written; the final register contents are printed afterwards.

Usage Examples
--------------
    $ simrun hello.asm
    $ simrun --trace count.asm
    $ simrun --max-steps 500 loop.asm

The default step budget can also be set with SIMPSIM_MAX_STEPS.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from simpsim import __version__
from simpsim.cli.errors import handle_cli_exception
from simpsim.cpu.isa import Instruction
from simpsim.disassembler import disassemble_instruction
from simpsim.machine import BreakReason, MachineEvent
from simpsim.simulator import Simulator, SimulatorConfig


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def format_registers(registers: bytes) -> str:
    """Format R0-RF as two rows of eight."""
    cells = [f"R{index:X}={value:02X}" for index, value in enumerate(registers)]
    return "\n".join(" ".join(cells[row:row + 8]) for row in range(0, len(cells), 8))


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--max-steps",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum instructions to execute (default: 10000)",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Print every instruction as it is fetched",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="simrun")
def main(
    input_file: Path,
    max_steps: Optional[int],
    trace: bool,
    verbose: bool,
) -> None:
    """
    Assemble and run a Simple Simulator program.

    INPUT_FILE is the assembly source file (.asm) to run.

    \b
    Examples:
        simrun hello.asm               # Run, echo output
        simrun --trace count.asm       # Show each instruction
    """
    setup_logging(verbose)

    config = SimulatorConfig.from_env()
    if max_steps is not None:
        config.max_steps = max_steps

    sim = Simulator(config)
    machine = sim.machine

    machine.subscribe(MachineEvent.OUTPUT, lambda ch: click.echo(ch, nl=False))

    if trace:
        def trace_instruction(instruction: Instruction) -> None:
            click.echo(
                f"${machine.program_counter:02X}: {instruction}  "
                f"{disassemble_instruction(instruction)}",
                err=True,
            )

        machine.subscribe(MachineEvent.INSTRUCTION_REGISTER_CHANGED, trace_instruction)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...", err=True)

        instructions = sim.load_file(input_file)
        if verbose:
            click.echo(f"Loaded {len(instructions)} instructions", err=True)

        event = sim.run()

        if sim.output and not sim.output.endswith("\n"):
            click.echo()

        if event.reason != BreakReason.HALT:
            click.echo(f"Stopped: {event}", err=True)

        click.echo(format_registers(machine.registers.to_bytes()))
        click.echo(f"PC={machine.program_counter:02X} steps={event.steps}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
