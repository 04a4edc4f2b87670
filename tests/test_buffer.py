# =============================================================================
# test_buffer.py - Symbol Table and Instruction Byte Buffer Tests
# =============================================================================
# Tests for the two-phase (collect, then resolve) byte buffer and the
# symbol table it resolves against.
# =============================================================================

import pytest

from simpsim.assembler.buffer import InstructionByte, InstructionByteBuffer, SymbolTable
from simpsim.assembler.syntax import AddressSyntax
from simpsim.cpu.isa import Instruction
from simpsim.errors import SourceLocation, UndefinedSymbolError


# =============================================================================
# Symbol Table
# =============================================================================

class TestSymbolTable:

    def test_define_and_lookup(self):
        symbols = SymbolTable()
        symbols.define("loop", 0x04)
        assert "loop" in symbols
        assert symbols["loop"] == 0x04
        assert symbols.get("loop") == 0x04
        assert len(symbols) == 1

    def test_names_are_case_sensitive(self):
        symbols = SymbolTable()
        symbols.define("Loop", 0x04)
        assert "loop" not in symbols

    def test_redefinition_overwrites(self):
        symbols = SymbolTable()
        symbols.define("a", 0x00)
        symbols.define("a", 0x10)
        assert symbols["a"] == 0x10

    def test_clear(self):
        symbols = SymbolTable()
        symbols.define("a", 1)
        symbols.clear()
        assert len(symbols) == 0

    def test_to_dict_is_a_copy(self):
        symbols = SymbolTable()
        symbols.define("a", 1)
        data = symbols.to_dict()
        data["b"] = 2
        assert "b" not in symbols

    def test_find_similar(self):
        symbols = SymbolTable()
        symbols.define("loop", 0)
        symbols.define("Done", 2)
        symbols.define("unrelated", 4)
        assert symbols.find_similar("lop") == ["loop"]
        assert symbols.find_similar("done") == ["Done"]


# =============================================================================
# Instruction Bytes
# =============================================================================

class TestInstructionByte:

    def test_literal_is_masked(self):
        assert InstructionByte.literal(0x1FF).value == 0xFF

    def test_from_resolved_address(self):
        byte = InstructionByte.from_address(AddressSyntax(0x20))
        assert not byte.is_pending
        assert byte.resolve(SymbolTable()) == 0x20

    def test_pending_resolves_against_symbols(self):
        byte = InstructionByte.from_address(AddressSyntax(label="end"))
        symbols = SymbolTable()
        symbols.define("end", 0x0A)
        assert byte.is_pending
        assert byte.resolve(symbols) == 0x0A

    def test_undefined_label_raises_with_location(self):
        location = SourceLocation("prog.asm", 3, 5)
        byte = InstructionByte.from_address(
            AddressSyntax(label="lop"), location, "    jmp lop"
        )
        symbols = SymbolTable()
        symbols.define("loop", 0)

        with pytest.raises(UndefinedSymbolError) as exc_info:
            byte.resolve(symbols)

        error = exc_info.value
        assert error.symbol == "lop"
        assert error.location == location
        assert "did you mean 'loop'?" in str(error)
        assert str(error).startswith("prog.asm:3:5: error: undefined symbol 'lop'")


# =============================================================================
# Buffer
# =============================================================================

class TestInstructionByteBuffer:

    def test_add_advances_origin_and_count(self):
        buffer = InstructionByteBuffer()
        buffer.add_value(0x01)
        buffer.add_value(0x02)
        assert buffer.origin == 2
        assert buffer.count == 2

    def test_odd_count_is_padded(self):
        buffer = InstructionByteBuffer()
        for value in (1, 2, 3):
            buffer.add_value(value)
        assert buffer.count == 3
        assert buffer.to_bytes(SymbolTable()) == bytes([1, 2, 3, 0])
        assert buffer.get_instructions(SymbolTable()) == [
            Instruction(0x01, 0x02),
            Instruction(0x03, 0x00),
        ]

    def test_origin_beyond_count_extends(self):
        buffer = InstructionByteBuffer()
        buffer.origin = 0x04
        assert buffer.count == 4
        buffer.add_value(0xC0)
        assert buffer.to_bytes(SymbolTable()) == bytes([0, 0, 0, 0, 0xC0, 0])

    def test_origin_backwards_keeps_count(self):
        buffer = InstructionByteBuffer()
        for value in (1, 2, 3, 4):
            buffer.add_value(value)
        buffer.origin = 0
        buffer.add_value(9)
        assert buffer.count == 4
        assert buffer.to_bytes(SymbolTable()) == bytes([9, 2, 3, 4])

    def test_origin_wraps(self):
        buffer = InstructionByteBuffer()
        buffer.origin = 0xFF
        buffer.add_value(0xAA)
        assert buffer.origin == 0x00
        assert buffer.count == 0x100
        assert len(buffer.to_bytes(SymbolTable())) == 0x100

    def test_pending_labels(self):
        buffer = InstructionByteBuffer()
        buffer.add_value(0xB0)
        buffer.add(InstructionByte(label="end"))
        assert buffer.pending_labels() == ["end"]

        symbols = SymbolTable()
        symbols.define("end", 0x02)
        assert buffer.to_bytes(symbols) == bytes([0xB0, 0x02])

    def test_unresolved_label_raises(self):
        buffer = InstructionByteBuffer()
        buffer.add_value(0xB0)
        buffer.add(InstructionByte(label="nowhere"))
        with pytest.raises(UndefinedSymbolError):
            buffer.to_bytes(SymbolTable())

    def test_reset(self):
        buffer = InstructionByteBuffer()
        buffer.add_value(1)
        buffer.reset()
        assert buffer.origin == 0
        assert buffer.count == 0
        assert buffer.to_bytes(SymbolTable()) == b""
