# =============================================================================
# test_assembler.py - Assembler Integration Tests
# =============================================================================
# End-to-end tests from source text to encoded instructions.
#
# Test coverage includes:
#   - Encoding of every mnemonic and addressing mode
#   - Labels, forward references and org
#   - db directive with numbers and strings
#   - Error reporting with line numbers
#   - Output files (binary, listing, symbols)
# =============================================================================

import pytest

from simpsim.assembler import Assembler, assemble
from simpsim.cpu.isa import Instruction
from simpsim.errors import (
    AssemblerError,
    AssemblySyntaxError,
    LabelSyntaxError,
    OperandRangeError,
    UndefinedSymbolError,
    UnrecognizedMnemonicError,
)


def code_of(source: str) -> bytes:
    asm = Assembler()
    asm.assemble(source)
    return asm.get_code()


# =============================================================================
# Instruction Encoding
# =============================================================================

class TestEncoding:
    """Test the two bytes produced for each mnemonic."""

    @pytest.mark.parametrize("source,expected", [
        ("load R1,0x41", "2141"),
        ("load R1,[0x41]", "1141"),
        ("load R1,[R2]", "D012"),
        ("store R1,[0xFF]", "31FF"),
        ("store R1,[R2]", "E012"),
        ("move R1,R2", "4012"),
        ("addi R1,R2,R3", "5123"),
        ("addf R1,R2,R3", "6123"),
        ("or R1,R2,R3", "7123"),
        ("and R1,R2,R3", "8123"),
        ("xor R1,R2,R3", "9123"),
        ("ror R1,3", "A103"),
        ("jmpeq R1,0x10", "B110"),
        ("jmp 0x10", "B010"),
        ("halt", "C000"),
        ("jmple R1,0x10", "F110"),
    ])
    def test_encoding(self, source, expected):
        assert [str(i) for i in assemble(source)] == [expected]

    def test_halt_is_deterministic(self):
        asm = Assembler()
        first = asm.assemble("halt")
        second = asm.assemble("halt")
        assert first == second == [Instruction(0xC0, 0x00)]

    def test_mnemonics_are_case_insensitive(self):
        assert assemble("HALT") == assemble("halt")
        assert assemble("Load R1,1") == assemble("load R1,1")

    def test_negative_immediate(self):
        assert assemble("load R1,-1") == [Instruction(0x21, 0xFF)]

    def test_jmpeq_with_comparison(self):
        assert assemble("jmpeq R1=R0,0x10") == [Instruction(0xB1, 0x10)]

    def test_jmple_with_comparison(self):
        assert assemble("jmple R1<=R0,0x10") == [Instruction(0xF1, 0x10)]

    def test_comparison_must_be_against_r0(self):
        with pytest.raises(AssemblySyntaxError):
            assemble("jmpeq R1=R2,0x10")

    def test_jmpeq_r0_matches_jmp(self):
        assert assemble("jmpeq R0,0x05") == assemble("jmp 0x05")

    def test_ror_maximum(self):
        assert assemble("ror R1,15") == [Instruction(0xA1, 0x0F)]

    def test_ror_out_of_range(self):
        with pytest.raises(OperandRangeError) as exc_info:
            assemble("ror R1,16")
        assert "Number cannot be larger than 15." in str(exc_info.value)

    def test_comments_and_blank_lines(self):
        source = """
        ; program header

                halt    ; stop here
        """
        assert assemble(source) == [Instruction(0xC0, 0x00)]


# =============================================================================
# Labels and Origin
# =============================================================================

class TestLabels:
    """Test label definition and resolution."""

    def test_forward_reference(self):
        asm = Assembler()
        instructions = asm.assemble("jmp L\nhalt\nL: halt")
        assert instructions == [
            Instruction(0xB0, 0x04),
            Instruction(0xC0, 0x00),
            Instruction(0xC0, 0x00),
        ]
        assert asm.get_symbols() == {"L": 4}

    def test_backward_reference(self):
        assert assemble("loop: halt\njmp loop")[1] == Instruction(0xB0, 0x00)

    def test_label_as_immediate_value(self):
        source = "load R1,data\nhalt\ndata: db 5"
        assert code_of(source) == bytes([0x21, 0x04, 0xC0, 0x00, 0x05, 0x00])

    def test_label_in_brackets(self):
        source = "store R1,[out]\nhalt\nout: db 0"
        assert assemble(source)[0] == Instruction(0x31, 0x04)

    def test_label_on_its_own_line(self):
        source = "halt\nend:\nhalt\njmp end"
        assert assemble(source)[2] == Instruction(0xB0, 0x02)

    def test_redefinition_uses_last_offset(self):
        source = "a: halt\na: halt\njmp a"
        assert assemble(source)[2] == Instruction(0xB0, 0x02)

    def test_labels_are_case_sensitive(self):
        with pytest.raises(UndefinedSymbolError) as exc_info:
            assemble("Loop: halt\njmp loop")
        assert "did you mean 'Loop'?" in str(exc_info.value)

    def test_undefined_symbol_reports_line(self):
        with pytest.raises(UndefinedSymbolError) as exc_info:
            assemble("halt\njmp nowhere", "prog.asm")
        error = exc_info.value
        assert error.symbol == "nowhere"
        assert error.location.filename == "prog.asm"
        assert error.location.line == 2

    def test_label_after_org(self):
        source = "jmp start\norg 0x20\nstart: halt"
        asm = Assembler()
        instructions = asm.assemble(source)
        assert instructions[0] == Instruction(0xB0, 0x20)
        assert asm.get_symbols()["start"] == 0x20

    def test_no_labels_leak_between_runs(self):
        asm = Assembler()
        asm.assemble("a: halt")
        with pytest.raises(UndefinedSymbolError):
            asm.assemble("jmp a")


class TestOrg:

    def test_org_pads_with_zero_instructions(self):
        instructions = assemble("org 0x10\nhalt")
        assert len(instructions) == 9
        assert instructions[:8] == [Instruction(0, 0)] * 8
        assert instructions[8] == Instruction(0xC0, 0x00)

    def test_org_backwards_overwrites(self):
        assert assemble("halt\norg 0\nload R1,1") == [Instruction(0x21, 0x01)]

    def test_org_requires_number(self):
        with pytest.raises(AssemblySyntaxError, match="Expected a single number."):
            assemble("org start")


# =============================================================================
# Data Bytes
# =============================================================================

class TestDataBytes:

    def test_numbers(self):
        asm = Assembler()
        asm.assemble("db 1,2,3")
        assert asm.get_code()[:3] == bytes([0x01, 0x02, 0x03])
        assert asm.get_instructions() == [Instruction(0x01, 0x02), Instruction(0x03, 0x00)]

    def test_string(self):
        assert code_of('db "Hi"') == b"Hi"

    def test_mixed(self):
        assert code_of('db "A",10,0') == bytes([0x41, 0x0A, 0x00, 0x00])

    def test_requires_operand(self):
        with pytest.raises(AssemblySyntaxError, match="Expected a number or string literal."):
            assemble("db")

    def test_rejects_label(self):
        with pytest.raises(AssemblySyntaxError):
            assemble("db loop")


# =============================================================================
# Error Reporting
# =============================================================================

class TestErrors:
    """Test error detection and message formatting."""

    def test_unrecognized_mnemonic(self):
        asm = Assembler()
        with pytest.raises(UnrecognizedMnemonicError) as exc_info:
            asm.assemble("frobnicate R1")
        assert exc_info.value.mnemonic == "frobnicate"
        assert asm.get_instructions() == []
        assert asm.get_code() == b""

    def test_failure_discards_previous_result(self):
        asm = Assembler()
        asm.assemble("halt")
        with pytest.raises(AssemblerError):
            asm.assemble("halt\nfrobnicate")
        assert asm.get_instructions() == []
        assert asm.get_symbols() == {}

    def test_error_location_and_format(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            assemble("halt\n    load R1", "prog.asm")
        error = exc_info.value
        assert error.location.line == 2
        assert error.location.column == 5
        message = str(error)
        assert message.startswith(
            "prog.asm:2:5: error: Expected a register followed by a value, "
            "[address] or [register]."
        )
        assert "    load R1" in message

    def test_invalid_label(self):
        with pytest.raises(LabelSyntaxError) as exc_info:
            assemble("halt\n9bad: halt")
        assert exc_info.value.location.line == 2

    @pytest.mark.parametrize("source", [
        "halt R1",
        "move R1",
        "move R1,0x10",
        "addi R1,R2",
        "and R1,R2,0x3",
        "ror R1",
        "ror R1,R2",
        "jmp",
        "jmp R1",
        "jmpeq 0x10",
        "store R1,0x10",
        "load [R1],R2",
        "load R1,[R2",
    ])
    def test_operand_errors(self, source):
        with pytest.raises(AssemblySyntaxError):
            assemble(source)

    def test_first_error_stops_assembly(self):
        with pytest.raises(UnrecognizedMnemonicError) as exc_info:
            assemble("bogus\nalso_bogus R1")
        assert exc_info.value.location.line == 1


# =============================================================================
# Output Files
# =============================================================================

class TestOutput:

    SOURCE = "start: load R1,1\nloop: addi R2,R2,R1\n jmp loop\n"

    def test_docstring_example(self):
        assert [str(i) for i in assemble(self.SOURCE)] == ["2101", "5221", "B002"]

    def test_listing(self):
        asm = Assembler()
        asm.assemble(self.SOURCE)
        listing = asm.get_listing()
        assert "21 01" in listing
        assert "B0 02" in listing
        assert "Symbols:" in listing
        assert "loop" in listing

    def test_write_files(self, tmp_path):
        asm = Assembler()
        asm.assemble(self.SOURCE)

        binary = tmp_path / "prog.bin"
        listing = tmp_path / "prog.lst"
        symbols = tmp_path / "prog.sym"
        asm.write_binary(binary)
        asm.write_listing(listing)
        asm.write_symbols(symbols)

        assert binary.read_bytes() == bytes([0x21, 0x01, 0x52, 0x21, 0xB0, 0x02])
        assert "addi R2,R2,R1" in listing.read_text()
        assert "loop" in symbols.read_text()
        assert "$02" in symbols.read_text()

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "prog.asm"
        source.write_text("halt\n")
        assert Assembler().assemble_file(source) == [Instruction(0xC0, 0x00)]
