"""
simasm - Assembler Command-Line Interface
=========================================

This module implements the command-line interface for the Simple Simulator
assembler.

Usage Examples
--------------
Print the assembled instructions as hex:
    $ simasm count.asm

With output file:
    $ simasm count.asm -o count.bin

Generate all output files:
    $ simasm count.asm -o count.bin -l count.lst -s count.sym

Verbose mode:
    $ simasm -v count.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from simpsim import __version__
from simpsim.assembler import Assembler
from simpsim.cli.errors import handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def format_hex_dump(code: bytes) -> str:
    """Format code as 'AA: B1B2 B1B2 ...' rows of eight instructions."""
    lines = []
    for offset in range(0, len(code), 16):
        row = code[offset:offset + 16]
        words = " ".join(row[i:i + 2].hex().upper() for i in range(0, len(row), 2))
        lines.append(f"{offset:02X}: {words}")
    return "\n".join(lines)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output binary file (default: print hex dump)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="simasm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble Simple Simulator source code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The output is the raw machine code, two bytes per instruction,
    starting at address 00.

    \b
    Examples:
        simasm count.asm                 # Print hex dump
        simasm count.asm -o count.bin    # Write raw bytes
        simasm count.asm -l count.lst    # Also write a listing
    """
    setup_logging(verbose)
    asm = Assembler()

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)
        code = asm.get_code()

        if output:
            asm.write_binary(output)
            if verbose:
                click.echo(f"Wrote {len(code)} bytes to {output}")
        else:
            click.echo(format_hex_dump(code))

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Assembly complete: {len(code) // 2} instructions ({len(code)} bytes)")
            click.echo(f"Defined {len(asm.get_symbols())} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
