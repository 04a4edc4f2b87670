"""
SimpSim Command-Line Interface
==============================

This package provides command-line tools for the simulator:

- **simasm**: Assembler
- **simrun**: Assemble and run a program

Each tool is implemented as a Click-based CLI application with
help text and consistent exit codes (see errors.ExitCode).
"""

__all__ = ["simasm", "simrun"]
