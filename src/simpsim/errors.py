"""
SimpSim Error Hierarchy
=======================

This module defines the exception hierarchy for the whole simulator.
All exceptions inherit from SimpSimError, allowing callers to catch every
simulator-related error with a single except clause if desired.

Exception Hierarchy
-------------------
SimpSimError (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - operand syntax, arity or literal errors
    │   └── OperandRangeError - immediate operand outside its field width
    ├── LabelSyntaxError - malformed label before ':'
    ├── UnrecognizedMnemonicError - mnemonic matches no instruction
    └── UndefinedSymbolError - label referenced but never defined

The Machine never raises: register and memory indices wrap, arithmetic
wraps, and HALT is a normal state transition. Every error therefore comes
from the assembler and carries the source location where it occurred.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SimpSimError(Exception):
    """
    Base exception for all simulator errors.

        try:
            assembler.assemble(source)
        except SimpSimError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SimpSimError):
    """
    Base exception for all assembler-related errors.

    Errors are usually raised deep inside the syntax helpers where the
    source position is unknown; the assembler attaches the location and
    source text on the way out through with_location().

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def with_location(
        self, location: SourceLocation, source_line: Optional[str] = None
    ) -> "AssemblerError":
        """
        Attach a source location to an error that was raised without one.

        An error that already knows its location is left untouched.

        Returns:
            self, so the call can be used in a raise statement
        """
        if self.location is None:
            self.location = location
            self.source_line = source_line
            self.args = (self._format_message(),)
        return self

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.asm:3:5: error: undefined symbol 'lop'
                jmp lop
                ^
            hint: did you mean 'loop'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class AssemblySyntaxError(AssemblerError):
    """
    Operand syntax error for a given mnemonic.

    Raised when an encoder receives the wrong number of operands, the
    wrong addressing-mode bracketing, or a literal it cannot parse. The
    message states what was expected, e.g. "Expected a single number."
    """
    pass


class OperandRangeError(AssemblySyntaxError):
    """
    Immediate operand does not fit its instruction field.

    The rotate count of ROR is encoded in a single nibble, so only the
    values 0-15 can be represented.
    """

    def __init__(
        self,
        value: int,
        maximum: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        self.maximum = maximum
        super().__init__(
            f"Number cannot be larger than {maximum}.",
            location=location,
            hint=f"got {value}",
            source_line=source_line,
        )


class LabelSyntaxError(AssemblerError):
    """
    Malformed label definition.

    A label may only contain letters, digits, '#', '_' and '~', must not
    start with a digit and must be terminated by a single ':'.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        super().__init__(
            f"invalid label '{label}'",
            location=location,
            hint="labels use letters, digits, '#', '_' or '~' and cannot start with a digit",
            source_line=source_line,
        )


class UnrecognizedMnemonicError(AssemblerError):
    """Mnemonic does not name any instruction or directive."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"unrecognized mnemonic '{mnemonic}'",
            location=location,
            source_line=source_line,
        )


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a label that is never defined.

    Raised when the byte buffer is finalized and a deferred label
    reference cannot be resolved against the completed symbol table.

    The assembler suggests similarly-named symbols when possible, which
    catches most typos (labels are case-sensitive).
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )
