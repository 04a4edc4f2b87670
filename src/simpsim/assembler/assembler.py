"""
Simple Simulator Assembler - Main Interface
===========================================

This module provides the Assembler class, which translates assembly source
into a list of two-byte Instructions ready to be loaded into the Machine.

Assembly Process
----------------
1. Each line is split into label, mnemonic and operands (syntax module).
2. A label is entered into the symbol table at the current origin.
3. The mnemonic is dispatched to its encoder, which validates the operands
   and appends bytes (or pending label references) to the byte buffer.
4. After the last line, the buffer is resolved against the complete symbol
   table and split into instructions.

Each call to assemble() works on a fresh AssemblyContext, so no labels or
bytes leak from one program into the next.

Example Usage
-------------
>>> from simpsim.assembler import Assembler
>>> asm = Assembler()
>>> instructions = asm.assemble('''
...         load  R1,1
... loop:   addi  R2,R2,R1
...         jmp   loop
... ''')
>>> [str(i) for i in instructions]
['2101', '5221', 'B002']
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from simpsim.assembler.buffer import InstructionByte, InstructionByteBuffer, SymbolTable
from simpsim.assembler.syntax import (
    BracketExpectation,
    InstructionSyntax,
    parse_address,
    parse_line,
    parse_number,
    parse_register,
    parse_string_literal,
)
from simpsim.cpu.isa import Instruction, Opcode, byte_from_nibbles, instructions_to_bytes
from simpsim.errors import (
    AssemblerError,
    AssemblySyntaxError,
    OperandRangeError,
    SourceLocation,
    UnrecognizedMnemonicError,
)

logger = logging.getLogger(__name__)

PRESENT = BracketExpectation.PRESENT

# The rotate count lives in a single nibble.
MAX_ROTATE = 0x0F


@dataclass
class ListingEntry:
    """One assembled source line, for listing output."""
    line: int
    address: int
    size: int
    source: str


@dataclass
class AssemblyContext:
    """
    All state of a single assembly run.

    Attributes:
        symbols: Labels defined so far
        buffer: Bytes emitted so far
        listing: One entry per non-blank source line
        location: Location of the line being assembled
        source_line: Text of the line being assembled
    """
    symbols: SymbolTable = field(default_factory=SymbolTable)
    buffer: InstructionByteBuffer = field(default_factory=InstructionByteBuffer)
    listing: list[ListingEntry] = field(default_factory=list)
    location: Optional[SourceLocation] = None
    source_line: Optional[str] = None


class Assembler:
    """
    Assembler for the Simple Simulator instruction set.

    Supported mnemonics: load, store, move, addi, addf, and, or, xor, ror,
    jmp, jmpeq, jmple, halt, plus the directives db and org. Mnemonics are
    case-insensitive; labels are case-sensitive.

    An Assembler instance may be reused; every call to assemble() starts
    from an empty symbol table and buffer. The results of the last
    successful run remain available through get_symbols(), get_code() and
    get_listing().
    """

    def __init__(self):
        self._context: Optional[AssemblyContext] = None
        self._instructions: list[Instruction] = []

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>") -> list[Instruction]:
        """
        Assemble source code into instructions.

        Args:
            source: Assembly source, one statement per line
            filename: Name used in error messages

        Returns:
            Instructions covering addresses 0 up to the highest address written

        Raises:
            AssemblerError: At the first error; nothing is produced
        """
        self._context = None
        self._instructions = []

        context = AssemblyContext()

        for line_number, line in enumerate(source.splitlines(), start=1):
            if not line.strip():
                continue

            column = len(line) - len(line.lstrip()) + 1
            context.location = SourceLocation(filename, line_number, column)
            context.source_line = line.rstrip()

            try:
                self._assemble_line(context, line)
            except AssemblerError as e:
                raise e.with_location(context.location, context.source_line)

        instructions = context.buffer.get_instructions(context.symbols)

        logger.debug(
            f"Assembled {len(instructions)} instructions "
            f"({context.buffer.count} bytes, {len(context.symbols)} labels)"
        )

        self._context = context
        self._instructions = instructions
        return instructions

    def assemble_file(self, filepath: str | Path) -> list[Instruction]:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.debug(f"Assembling {filepath}")
        return self.assemble(filepath.read_text(), str(filepath))

    def _assemble_line(self, context: AssemblyContext, line: str) -> None:
        syntax = parse_line(line)
        start = context.buffer.origin

        if syntax.label:
            context.symbols.define(syntax.label, start)
            logger.debug(f"Label '{syntax.label}' = ${start:02X}")

        if syntax.mnemonic:
            self._dispatch(context, syntax)

        if syntax.label or syntax.mnemonic:
            size = (context.buffer.origin - start) & 0xFF
            if syntax.mnemonic.lower() == "org":
                start, size = context.buffer.origin, 0
            context.listing.append(
                ListingEntry(context.location.line, start, size, context.source_line)
            )

    def _dispatch(self, context: AssemblyContext, syntax: InstructionSyntax) -> None:
        operands = syntax.operands

        match syntax.mnemonic.lower():
            case "load":
                self._load(context, operands)
            case "store":
                self._store(context, operands)
            case "move":
                self._move(context, operands)
            case "addi":
                self._three_registers(context, Opcode.INTEGER_ADD, operands)
            case "addf":
                self._three_registers(context, Opcode.FLOATING_POINT_ADD, operands)
            case "and":
                self._three_registers(context, Opcode.AND, operands)
            case "or":
                self._three_registers(context, Opcode.OR, operands)
            case "xor":
                self._three_registers(context, Opcode.XOR, operands)
            case "ror":
                self._ror(context, operands)
            case "jmp":
                self._jmp(context, operands)
            case "jmpeq":
                self._conditional_jump(context, Opcode.JUMP_EQUAL, "=", operands)
            case "jmple":
                self._conditional_jump(context, Opcode.JUMP_LESS_EQUAL, "<=", operands)
            case "db":
                self._data_bytes(context, operands)
            case "org":
                self._org(context, operands)
            case "halt":
                self._halt(context, operands)
            case _:
                raise UnrecognizedMnemonicError(syntax.mnemonic)

    # =========================================================================
    # Emission
    # =========================================================================

    def _emit(self, context: AssemblyContext, opcode: Opcode, r: int,
              second: InstructionByte) -> None:
        context.buffer.add_value(byte_from_nibbles(opcode, r))
        context.buffer.add(second)

    def _emit_registers(self, context: AssemblyContext, opcode: Opcode, r: int,
                        x: int, y: int) -> None:
        self._emit(context, opcode, r, InstructionByte.literal(byte_from_nibbles(x, y)))

    def _emit_address(self, context: AssemblyContext, opcode: Opcode, r: int,
                      address) -> None:
        second = InstructionByte.from_address(address, context.location, context.source_line)
        self._emit(context, opcode, r, second)

    # =========================================================================
    # Encoders
    # =========================================================================

    def _load(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        if len(operands) == 2 and (register := parse_register(operands[0])) is not None:
            if (address := parse_address(operands[1], context.symbols)) is not None:
                self._emit_address(context, Opcode.IMMEDIATE_LOAD, register, address)
                return
            if (address := parse_address(operands[1], context.symbols, PRESENT)) is not None:
                self._emit_address(context, Opcode.DIRECT_LOAD, register, address)
                return
            if (source := parse_register(operands[1], PRESENT)) is not None:
                self._emit_registers(context, Opcode.INDIRECT_LOAD, 0, register, source)
                return

        raise AssemblySyntaxError(
            "Expected a register followed by a value, [address] or [register]."
        )

    def _store(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        if len(operands) == 2 and (register := parse_register(operands[0])) is not None:
            if (address := parse_address(operands[1], context.symbols, PRESENT)) is not None:
                self._emit_address(context, Opcode.DIRECT_STORE, register, address)
                return
            if (target := parse_register(operands[1], PRESENT)) is not None:
                self._emit_registers(context, Opcode.INDIRECT_STORE, 0, register, target)
                return

        raise AssemblySyntaxError("Expected a register followed by [address] or [register].")

    def _move(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        registers = self._parse_registers(operands, 2)
        if registers is None:
            raise AssemblySyntaxError("Expected two registers.")
        self._emit_registers(context, Opcode.MOVE, 0, *registers)

    def _three_registers(self, context: AssemblyContext, opcode: Opcode,
                         operands: tuple[str, ...]) -> None:
        registers = self._parse_registers(operands, 3)
        if registers is None:
            raise AssemblySyntaxError("Expected three registers.")
        self._emit_registers(context, opcode, *registers)

    def _ror(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        register = parse_register(operands[0]) if len(operands) == 2 else None
        count = parse_number(operands[1]) if len(operands) == 2 else None

        if register is None or count is None:
            raise AssemblySyntaxError("Expected a register and a number.")
        if count > MAX_ROTATE:
            raise OperandRangeError(count, MAX_ROTATE)

        self._emit_registers(context, Opcode.ROR, register, 0, count)

    def _jmp(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        address = parse_address(operands[0], context.symbols) if len(operands) == 1 else None
        if address is None:
            raise AssemblySyntaxError("Expected a single address.")

        # R0 always equals itself, so this jump is unconditional.
        self._emit_address(context, Opcode.JUMP_EQUAL, 0, address)

    def _conditional_jump(self, context: AssemblyContext, opcode: Opcode,
                          operator: str, operands: tuple[str, ...]) -> None:
        register = address = None
        if len(operands) == 2:
            register = _parse_comparison(operands[0], operator)
            address = parse_address(operands[1], context.symbols)

        if register is None or address is None:
            raise AssemblySyntaxError(
                f"Expected a register (optionally 'R{operator}R0') and an address."
            )

        self._emit_address(context, opcode, register, address)

    def _data_bytes(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        if not operands:
            raise AssemblySyntaxError("Expected a number or string literal.")

        data = bytearray()
        for operand in operands:
            if (number := parse_number(operand)) is not None:
                data.append(number)
            elif (text := parse_string_literal(operand)) is not None:
                data.extend(ord(c) & 0xFF for c in text)
            else:
                raise AssemblySyntaxError("Expected a number or string literal.")

        for value in data:
            context.buffer.add_value(value)

    def _org(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        origin = parse_number(operands[0]) if len(operands) == 1 else None
        if origin is None:
            raise AssemblySyntaxError("Expected a single number.")

        logger.debug(f"Origin ${context.buffer.origin:02X} -> ${origin:02X}")
        context.buffer.origin = origin

    def _halt(self, context: AssemblyContext, operands: tuple[str, ...]) -> None:
        if operands:
            raise AssemblySyntaxError("Expected no operands.")
        self._emit_registers(context, Opcode.HALT, 0, 0, 0)

    @staticmethod
    def _parse_registers(operands: tuple[str, ...], count: int) -> Optional[list[int]]:
        if len(operands) != count:
            return None
        registers = [parse_register(operand) for operand in operands]
        return None if None in registers else registers

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_instructions(self) -> list[Instruction]:
        return list(self._instructions)

    def get_code(self) -> bytes:
        """Get the instructions of the last run as raw bytes."""
        return instructions_to_bytes(self._instructions)

    def get_symbols(self) -> dict[str, int]:
        """Get the symbol table of the last successful run."""
        return self._context.symbols.to_dict() if self._context else {}

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Each line shows the address, the bytes generated and the source.
        """
        if self._context is None:
            return ""

        code = self.get_code()
        lines = []
        for entry in self._context.listing:
            data = bytes(code[(entry.address + i) & 0xFF] for i in range(entry.size))
            hex_bytes = " ".join(f"{b:02X}" for b in data[:4])
            if entry.size > 4:
                hex_bytes += " .."
            lines.append(f"{entry.line:4d}  {entry.address:02X}  {hex_bytes:<14}  {entry.source}")

        if len(self._context.symbols):
            lines.append("")
            lines.append("Symbols:")
            lines.extend(self._symbol_lines())

        return "\n".join(lines) + "\n"

    def _symbol_lines(self) -> list[str]:
        symbols = self.get_symbols()
        return [f"{name:<20} ${value:02X}" for name, value in sorted(symbols.items())]

    def write_binary(self, filepath: str | Path) -> None:
        """Write the raw instruction bytes."""
        Path(filepath).write_bytes(self.get_code())
        logger.debug(f"Wrote {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        Path(filepath).write_text(self.get_listing())
        logger.debug(f"Wrote {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        Path(filepath).write_text("\n".join(self._symbol_lines()) + "\n")
        logger.debug(f"Wrote {filepath}")


def _parse_comparison(text: str, operator: str) -> Optional[int]:
    """
    Parse the register operand of a conditional jump.

    Accepts a plain register ("R1") or the comparison spelled out against
    R0 ("R1=R0" for jmpeq, "R1<=R0" for jmple).
    """
    left, found, right = text.partition(operator)
    if found and right.strip() != "R0":
        return None
    return parse_register(left.strip())


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> list[Instruction]:
    """
    Assemble source code to instructions (convenience function).

    Args:
        source: Assembly source code
        filename: Virtual filename for error messages

    Returns:
        Assembled instructions
    """
    return Assembler().assemble(source, filename)


def assemble_file(filepath: str | Path) -> list[Instruction]:
    """Assemble a source file to instructions (convenience function)."""
    return Assembler().assemble_file(filepath)
