"""
Unit tests for the parser module.

These tests cover:
- Labels, instructions, directives and comments
- Keyword disambiguation (``IN`` versus ``INDIRECT``)
- Operand classification and arity checks
- Layout facts recorded for the formatter
- Syntax errors and their locations
"""

import pytest

from lc3_toolchain.core.ast import (
    Comment, CommentPlacement, Directive, DirectiveKind, Immediate, Instruction, Label,
    LabelReference, Mnemonic, Program, Radix, Register, StringLiteral,
)
from lc3_toolchain.core.errors import AsmSyntaxError
from lc3_toolchain.core.parser import ParseResult, parse, parse_source


class TestItems:
    """Test how source lines become items."""

    def test_label_instruction_and_comment(self):
        """Test a labelled instruction with a trailing comment."""
        program = parse("LOOP ADD R1, R1, #1 ; inc\n")

        assert len(program) == 3
        label, instruction, comment = program.items
        assert label == Label("LOOP")
        assert instruction == Instruction(
            Mnemonic.ADD, "ADD",
            (Register(1, "R1"), Register(1, "R1"), Immediate(1, Radix.DECIMAL, "#1", has_hash=True)),
        )
        assert comment.text == "; inc"
        assert comment.placement is CommentPlacement.TRAILING

    def test_label_with_colon(self):
        """Test that the colon is recorded but not part of the name."""
        label = parse("Loop:").items[0]

        assert label.name == "Loop"
        assert label.has_colon

    def test_several_items_on_one_line(self):
        """Test that directives may share a line."""
        program = parse(".ORIG x3000 .END")

        assert [item.kind for item in program.items] == [DirectiveKind.ORIG, DirectiveKind.END]

    def test_empty_source(self):
        """Test that empty input parses to an empty program."""
        program = parse("")

        assert program == Program()
        assert not program

    def test_blank_and_comment_only_source(self):
        """Test a source holding only comments and blank lines."""
        program = parse("\n; one\n\n;two\n")

        assert [c.text for c in program.comments] == ["; one", ";two"]
        assert all(c.placement is CommentPlacement.OWN_LINE for c in program.comments)

    def test_comment_trailing_whitespace_is_dropped(self):
        """Test that comment text is right-stripped."""
        comment = parse(";  keep inner  spaces \t ").items[0]

        assert comment.text == ";  keep inner  spaces"

    def test_program_views(self):
        """Test the labels, statements and comments helpers."""
        program = parse("A .FILL #1 ; c\nHALT")

        assert program.labels == (Label("A"),)
        assert len(program.statements) == 2
        assert len(program.comments) == 1
        assert list(program) == list(program.items)


class TestKeywordResolution:
    """Test which words are treated as mnemonics."""

    @pytest.mark.parametrize("word,mnemonic", [
        ("IN", Mnemonic.IN),
        ("in", Mnemonic.IN),
        ("Halt", Mnemonic.HALT),
        ("puts", Mnemonic.PUTS),
        ("RET", Mnemonic.RET),
        ("NOP", Mnemonic.NOP),
    ])
    def test_whole_keyword_is_mnemonic(self, word, mnemonic):
        """Test that a keyword in any case is an instruction."""
        instruction = parse(word).items[0]

        assert isinstance(instruction, Instruction)
        assert instruction.mnemonic is mnemonic
        assert instruction.keyword == word

    @pytest.mark.parametrize("word", ["INDIRECT", "in_asd", "br_", "brnzp_", "HALTED", "ADDR", "OUTPUT"])
    def test_keyword_prefix_is_label(self, word):
        """Test that words merely starting with a keyword are labels."""
        item = parse(word).items[0]

        assert item == Label(word)

    @pytest.mark.parametrize("word,condition", [
        ("BR", ""),
        ("BRnzp", "nzp"),
        ("brZ", "z"),
        ("BRnp", "np"),
        ("BRNZ", "nz"),
    ])
    def test_branch_conditions(self, word, condition):
        """Test that branch flags are read from the keyword."""
        instruction = parse(f"{word} LOOP").items[0]

        assert instruction.mnemonic is Mnemonic.BR
        assert instruction.condition == condition
        assert instruction.operands == (LabelReference("LOOP"),)

    def test_flags_out_of_order_are_a_label(self):
        """Test that BRpz is not a branch keyword."""
        program = parse("BRpz DONE")

        assert program.items == (Label("BRpz"), Label("DONE"))

    def test_keyword_as_label_is_rejected(self):
        """Test that a keyword with a colon cannot define a label."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("ADD: HALT")

        assert "reserved keyword 'ADD'" in exc_info.value.reason

    def test_register_cannot_start_statement(self):
        """Test that a register at the start of an item is an error."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("R1 ADD R1, R1, R1")

        assert "register 'R1'" in exc_info.value.reason

    def test_register_name_as_label_is_rejected(self):
        """Test that a register name with a colon is not a label."""
        with pytest.raises(AsmSyntaxError):
            parse("r3:")


class TestOperands:
    """Test operand parsing."""

    def test_register_operands_keep_spelling(self):
        """Test that register text is kept while equality uses the number."""
        instruction = parse("NOT r2, R3").items[0]

        assert instruction.operands[0].text == "r2"
        assert instruction.operands == (Register(2, "R2"), Register(3, "R3"))

    def test_register_or_immediate(self):
        """Test both forms of the third ADD/AND operand."""
        with_register = parse("AND R0, R0, R5").items[0]
        with_immediate = parse("AND R0, R0, #0").items[0]

        assert with_register.operands[2] == Register(5, "R5")
        assert isinstance(with_immediate.operands[2], Immediate)

    def test_negative_immediate(self):
        """Test signed decimal immediates."""
        immediate = parse("ADD R1, R1, #-1").items[0].operands[2]

        assert immediate.value == -1
        assert immediate.sign == "-"
        assert immediate.has_hash

    def test_decimal_without_hash(self):
        """Test that the hash prefix is optional."""
        immediate = parse(".BLKW 10").items[0].argument

        assert immediate == Immediate(10, Radix.DECIMAL, "10")

    def test_hex_immediate(self):
        """Test hex literals as directive arguments."""
        immediate = parse(".FILL xFF").items[0].argument

        assert immediate.value == 255
        assert immediate.radix is Radix.HEX
        assert immediate.text == "xFF"

    def test_offset_operands(self):
        """Test base plus offset forms."""
        instruction = parse("LDR R1, R6, #-3").items[0]

        assert instruction.mnemonic is Mnemonic.LDR
        assert instruction.operands[2].value == -3

    def test_single_register_forms(self):
        """Test JMP and JSRR."""
        assert parse("JMP R7").items[0].operands == (Register(7, "R7"),)
        assert parse("JSRR R3").items[0].operands == (Register(3, "R3"),)

    def test_trap_vector(self):
        """Test TRAP with a hex address."""
        instruction = parse("TRAP x25").items[0]

        assert instruction.operands[0].value == 0x25

    def test_orig_address(self):
        """Test the .ORIG hex address."""
        directive = parse(".orig x3000").items[0]

        assert directive.kind is DirectiveKind.ORIG
        assert directive.keyword == ".orig"
        assert directive.argument.value == 0x3000
        assert directive.is_boundary

    def test_stringz(self):
        """Test that strings keep their quotes and contents."""
        directive = parse('.STRINGZ "Hello, World!"').items[0]

        assert directive.argument == StringLiteral('"Hello, World!"')
        assert directive.argument.value == "Hello, World!"
        assert not directive.is_boundary

    def test_comma_after_mnemonic(self):
        """Test that a comma directly after the mnemonic is accepted."""
        instruction = parse("LD, R2, NUM2").items[0]

        assert instruction.operands == (Register(2, "R2"), LabelReference("NUM2"))

    def test_label_reference_span(self):
        """Test that operand spans point at their source text."""
        reference = parse("LEA R0, MSG").items[0].operands[1]

        assert reference.span.start == 8
        assert reference.span.end == 11
        assert reference.span.column == 9


class TestSyntaxErrors:
    """Test rejection of malformed statements."""

    def test_missing_operand(self):
        """Test that too few operands name what was expected."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("ADD R1, R2")

        error = exc_info.value
        assert error.expected == ("register or immediate",)
        assert "takes 3 operand(s)" in error.reason
        assert "found 2" in error.reason

    def test_operand_on_next_line(self):
        """Test that operands may not continue on the following line."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("LD R0\nVALUE")

        assert exc_info.value.span.line == 1

    def test_operand_before_comment(self):
        """Test that a comment ends the operand list."""
        with pytest.raises(AsmSyntaxError):
            parse("LEA R0 ; MSG")

    def test_too_many_operands(self):
        """Test a surplus register operand."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("NOT R1, R2, R3")

        assert "too many operands" in exc_info.value.reason
        assert exc_info.value.found == "R3"

    def test_surplus_number(self):
        """Test a surplus literal after a complete directive."""
        with pytest.raises(AsmSyntaxError):
            parse(".FILL #1 #2")

    def test_unknown_directive(self):
        """Test that unknown directives list the valid ones."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse(".FOO 1")

        assert ".ORIG" in exc_info.value.expected
        assert "unknown directive '.FOO'" in exc_info.value.reason

    def test_orig_requires_hex(self):
        """Test that .ORIG rejects a decimal address."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse(".ORIG 3000")

        assert exc_info.value.expected == ("hex address",)

    def test_address_too_long(self):
        """Test the four digit limit on addresses."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("TRAP x12345")

        assert "more than 4 digits" in exc_info.value.reason

    def test_malformed_hex(self):
        """Test a hex-shaped word with a bad digit."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("ADD R1, R2, x1G")

        assert "malformed hex literal" in exc_info.value.reason

    def test_register_where_label_expected(self):
        """Test that a register is not a label reference."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("BR R1")

        assert exc_info.value.expected == ("label",)

    def test_label_where_register_expected(self):
        """Test that a label is not a register."""
        with pytest.raises(AsmSyntaxError):
            parse("ADD R1, R2, LOOP")

    def test_error_location_in_message(self):
        """Test the rendered error message."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("HALT\n  .FOO")

        assert str(exc_info.value).startswith("Syntax error at L2:3:")

    def test_expected_alternatives_are_listed(self):
        """Test the description of several alternatives."""
        with pytest.raises(AsmSyntaxError) as exc_info:
            parse("ADD R1, R2, MSG")

        assert "expected one of {register, immediate}" in exc_info.value.describe()


class TestLayout:
    """Test layout facts recorded on items."""

    def test_statement_on_same_line(self):
        """Test whether a label shares its line with a statement."""
        same = parse("LOOP ADD R1, R1, #1").items[0]
        separate = parse("LOOP\nADD R1, R1, #1").items[0]

        assert same.statement_on_same_line
        assert not separate.statement_on_same_line

    def test_blank_lines_before(self):
        """Test counting of blank lines before a line's first item."""
        program = parse("\n\nHALT\n\n\nRET ; done")

        assert program.items[0].blank_lines_before == 2
        assert program.items[1].blank_lines_before == 2
        assert program.items[2].blank_lines_before == 0

    def test_comment_placement(self):
        """Test own-line versus trailing comments."""
        program = parse("; head\nHALT ; tail")

        assert program.items[0].placement is CommentPlacement.OWN_LINE
        assert program.items[2].placement is CommentPlacement.TRAILING

    def test_label_span(self):
        """Test the span of a label with a colon."""
        label = parse("Loop:").items[0]

        assert (label.span.start, label.span.end, label.span.line, label.span.column) == (0, 5, 1, 1)

    def test_keyword_span(self):
        """Test that instructions record the span of their mnemonic."""
        instruction = parse("  add R1, R1, R2").items[0]

        assert instruction.keyword_span.start == 2
        assert instruction.keyword_span.end == 5
        assert instruction.span.end == 16

    def test_equality_ignores_layout(self):
        """Test that two layouts of the same program compare equal."""
        compact = parse("LOOP: ADD R1,R1,#1 ;c\n\n\nBRnzp LOOP")
        spread = parse("LOOP\n    ADD r1, R1, #1\n;c\nBRnzp LOOP\n")

        assert compact == spread

    def test_equality_sees_content(self):
        """Test that different content does not compare equal."""
        assert parse("ADD R1, R1, #1") != parse("ADD R1, R1, #2")
        assert parse("BRz LOOP") != parse("BRn LOOP")


class TestParseSource:
    """Test the non-raising entry point."""

    def test_success(self):
        """Test a successful parse result."""
        result = parse_source("HALT")

        assert isinstance(result, ParseResult)
        assert result.success
        assert result.program == Program((Instruction(Mnemonic.HALT, "HALT"),))
        assert "items=1" in repr(result)

    def test_failure(self):
        """Test that errors are returned rather than raised."""
        result = parse_source("ADD R1")

        assert not result.success
        assert result.program is None
        assert isinstance(result.error, AsmSyntaxError)
        assert "error=" in repr(result)

    def test_directive_case_is_preserved(self):
        """Test that directive keywords keep their spelling."""
        program = parse_source(".Fill #3").program

        assert program.items[0] == Directive(DirectiveKind.FILL, ".Fill", Immediate(3, Radix.DECIMAL, "#3", True))

    def test_comment_is_not_an_operand(self):
        """Test that a comment after a complete statement is kept as an item."""
        program = parse_source("RET;back").program

        assert program.items[1] == Comment(";back")
