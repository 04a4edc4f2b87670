"""
Assembly Language Syntax
========================

This module turns raw source lines and operand tokens into structured
values. It knows nothing about instruction encoding; the assembler asks it
questions such as "is this token a register without brackets?" and picks
the addressing mode from the answers.

Line Structure
--------------
    [label:] [mnemonic [operand {, operand}]] [; comment]

- Everything from the first ';' is a comment.
- Text up to and including the first ':' is a label.
- The first whitespace-delimited token after the label is the mnemonic.
- The rest of the line is split on ',' into operand tokens.

Number Formats
--------------
Tried in this order; the first that parses wins:

| Format      | Syntax            | Example        | Value |
|-------------|-------------------|----------------|-------|
| Decimal     | digits, opt. 'd'  | 65, 65d, -1    | 65,255|
| Binary      | digits + 'b'      | 1010b          | 10    |
| Hexadecimal | 0x, $ or 'h'      | 0x41, $41, 41h | 65    |

Negative decimals produce their two's-complement byte. The 'h' suffix form
must not start with a letter ("ah" is an identifier, "0ah" is 10).

Operand Brackets
----------------
Square brackets select memory addressing:

    R1        register            [R1]      memory at register R1
    0x10      immediate value     [0x10]    memory at address 0x10
    loop      address of label    [data]    memory at label data
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from simpsim.errors import LabelSyntaxError


COMMENT_DELIMITER = ";"
LABEL_DELIMITER = ":"

LABEL_CHARACTERS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789#_~"
)

_REGISTER_PATTERN = re.compile(r"R([0-9A-F])")
_DECIMAL_PATTERN = re.compile(r"([+-]?[0-9]+)d?")
_BINARY_PATTERN = re.compile(r"([01]+)b?")
_HEX_PATTERNS = (
    re.compile(r"0x([0-9A-Fa-f]+)"),
    re.compile(r"\$([0-9A-Fa-f]+)"),
    re.compile(r"([0-9A-Fa-f]+)h"),
)


class BracketExpectation(Enum):
    """Whether an operand must or must not be wrapped in [...]."""
    PRESENT = auto()
    ABSENT = auto()


# =============================================================================
# Parsed Line
# =============================================================================

@dataclass(frozen=True)
class InstructionSyntax:
    """
    One source line split into its parts.

    Attributes:
        label: Label name without the trailing ':' ("" when absent)
        mnemonic: Mnemonic as written ("" when absent)
        operands: Operand tokens, each stripped of surrounding whitespace
        comment: Comment text after ';' ("" when absent)
    """
    label: str = ""
    mnemonic: str = ""
    operands: tuple[str, ...] = ()
    comment: str = ""

    def __str__(self) -> str:
        return f"{self.mnemonic} {','.join(self.operands)}".strip()


def parse_line(line: str) -> InstructionSyntax:
    """
    Split one source line into label, mnemonic, operands and comment.

    Raises:
        LabelSyntaxError: If the text before ':' is not a valid label
    """
    line, comment = _split_comment(line)
    label, line = _split_label(line)

    parts = line.strip().split(None, 1)
    mnemonic = parts[0] if parts else ""
    if len(parts) == 2:
        operands = tuple(operand.strip() for operand in parts[1].split(","))
    else:
        operands = ()

    return InstructionSyntax(label, mnemonic, operands, comment)


def _split_comment(line: str) -> tuple[str, str]:
    code, delimiter, comment = line.partition(COMMENT_DELIMITER)
    return code, comment.strip() if delimiter else ""


def _split_label(line: str) -> tuple[str, str]:
    index = line.find(LABEL_DELIMITER)
    if index < 0:
        return "", line

    label = line[:index + 1].strip()
    if not is_valid_label(label):
        raise LabelSyntaxError(label)

    return label[:-1], line[index + 1:]


def is_valid_label(text: str) -> bool:
    """
    Check a label definition including its trailing ':'.

    Rules: more than just ':', ends with ':', only label characters before
    it, and the first character is not a digit.
    """
    if not text or text == LABEL_DELIMITER:
        return False
    if not text.endswith(LABEL_DELIMITER):
        return False
    return is_label_name(text[:-1])


def is_label_name(name: str) -> bool:
    """Check a bare label name as used in an operand."""
    if not name or name[0].isdigit():
        return False
    return all(c in LABEL_CHARACTERS for c in name)


# =============================================================================
# Literals
# =============================================================================

def parse_number(text: str) -> Optional[int]:
    """
    Parse a numeric literal into a byte value.

    Returns:
        The value 0-255, or None if the text is not a number that fits
        in a byte
    """
    for parse in (_parse_decimal, _parse_binary, _parse_hex):
        value = parse(text)
        if value is not None:
            return value
    return None


def _parse_decimal(text: str) -> Optional[int]:
    match = _DECIMAL_PATTERN.fullmatch(text)
    if not match:
        return None
    value = int(match.group(1))
    if -0x80 <= value < 0:
        return value & 0xFF
    if 0 <= value <= 0xFF:
        return value
    return None


def _parse_binary(text: str) -> Optional[int]:
    match = _BINARY_PATTERN.fullmatch(text)
    if not match:
        return None
    value = int(match.group(1), 2)
    return value if value <= 0xFF else None


def _parse_hex(text: str) -> Optional[int]:
    for pattern in _HEX_PATTERNS:
        match = pattern.fullmatch(text)
        if not match:
            continue
        if text.endswith("h") and text[0].isalpha():
            continue
        value = int(match.group(1), 16)
        if value <= 0xFF:
            return value
    return None


def parse_string_literal(text: str) -> Optional[str]:
    """
    Parse a quoted string literal.

    Both "double" and 'single' quotes are accepted. The characters between
    the quotes are taken verbatim; there are no escape sequences.
    """
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return None


# =============================================================================
# Registers and Addresses
# =============================================================================

def has_brackets(text: str) -> bool:
    return text.startswith("[") and text.endswith("]")


def _strip_brackets(text: str) -> str:
    return text[1:-1].strip() if has_brackets(text) else text


def _brackets_match(text: str, brackets: BracketExpectation) -> bool:
    if brackets is BracketExpectation.PRESENT:
        return has_brackets(text)
    return not text.startswith("[") and not text.endswith("]")


def parse_register(
    text: str, brackets: BracketExpectation = BracketExpectation.ABSENT
) -> Optional[int]:
    """
    Parse a register token R0..RF.

    Args:
        text: The operand token, e.g. "R3" or "[RA]"
        brackets: Whether the token must be wrapped in [...]

    Returns:
        Register index 0-15, or None on mismatch
    """
    if not _brackets_match(text, brackets):
        return None
    match = _REGISTER_PATTERN.fullmatch(_strip_brackets(text))
    if not match:
        return None
    return int(match.group(1), 16)


def is_register(text: str) -> bool:
    return _REGISTER_PATTERN.fullmatch(text) is not None


@dataclass(frozen=True)
class AddressSyntax:
    """
    A parsed address operand.

    Either a concrete value, or the name of a label that was not yet defined
    when the operand was parsed. Pending labels are resolved when the byte
    buffer is finalized.

    Attributes:
        value: Address byte (0 while the label is pending)
        label: Name of the pending label, or None when value is final
    """
    value: int = 0
    label: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.label is not None


def parse_address(
    text: str,
    symbols=None,
    brackets: BracketExpectation = BracketExpectation.ABSENT,
) -> Optional[AddressSyntax]:
    """
    Parse an address operand: a number or a label.

    A label already present in the symbol table resolves immediately; any
    other label becomes a pending reference. Register tokens are rejected so
    that "[R1]" falls through to register-indirect parsing.

    Args:
        text: The operand token
        symbols: Mapping of label name to offset (a SymbolTable or dict)
        brackets: Whether the token must be wrapped in [...]
    """
    if not _brackets_match(text, brackets):
        return None

    inner = _strip_brackets(text)

    number = parse_number(inner)
    if number is not None:
        return AddressSyntax(number)

    if is_register(inner) or not is_label_name(inner):
        return None

    if symbols is not None and inner in symbols:
        return AddressSyntax(symbols[inner])
    return AddressSyntax(label=inner)
