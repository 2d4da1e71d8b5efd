import pytest
from src.aqa_asm.diagnostics import (
    error, AsmError, InternalError, LexError, ParseError, VMError,
    DuplicateLabelDefinition, ExpectedToken, InvalidInstructionSignature, OutOfBoundsRead,
)
from src.aqa_asm.isa import OperandKind, RuntimeOpcode, SourceOpcode
from src.aqa_asm.tokens import Token, TokenKind

def test_error_str():
    d = error("valor demasiado grande", line=12, col=8, file="prog.aqasm", hint="máximo 255")
    s = str(d)
    assert "prog.aqasm:12:8:" in s
    assert "ERROR: valor demasiado grande" in s
    assert "(pista: máximo 255)" in s

def test_error_without_location():
    assert str(error("sin sitio")) == "ERROR: sin sitio"

def test_asm_error_to_diagnostic():
    e = DuplicateLabelDefinition("loop", line=3, col=1, previous_line=1)
    assert isinstance(e, LexError) and isinstance(e, AsmError)
    d = e.to_diagnostic(file="a.aqasm")
    assert d.severity == "error"
    assert str(d).startswith("a.aqasm:3:1: ERROR:")
    assert "loop" in d.message
    assert "línea 1" in d.hint

def test_taxonomies_are_separate():
    assert not issubclass(ParseError, LexError)
    assert not issubclass(VMError, ParseError)
    # un fallo interno no es un error del programa
    assert not issubclass(InternalError, AsmError)

def test_vm_error_has_no_position():
    e = OutOfBoundsRead(253)
    assert e.offset == 253
    assert e.line is None and e.col is None
    assert "253" in str(e)

def test_expected_token_at_end_of_input():
    e = ExpectedToken([TokenKind.SEMICOLON, TokenKind.NEWLINE], None)
    assert e.candidates == [TokenKind.SEMICOLON, TokenKind.NEWLINE]
    assert "fin de fichero" in e.message

def test_invalid_signature_lists_every_form():
    tok = Token(TokenKind.OPCODE, "MOV", 2, 5, opcode=SourceOpcode.MOV)
    valid = [
        (RuntimeOpcode.MOV_REGISTER, (OperandKind.REGISTER, OperandKind.REGISTER)),
        (RuntimeOpcode.MOV_LITERAL, (OperandKind.REGISTER, OperandKind.LITERAL)),
    ]
    e = InvalidInstructionSignature(tok, SourceOpcode.MOV, [OperandKind.LITERAL], valid)
    assert (e.line, e.col) == (2, 5)
    assert e.received == (OperandKind.LITERAL,)
    lines = [l for l in e.message.splitlines() if l.startswith("\t•")]
    assert lines == ["\t• MOV registro, registro", "\t• MOV registro, literal"]

def test_asm_error_is_raisable():
    with pytest.raises(AsmError, match="posición de memoria 7"):
        raise OutOfBoundsRead(7)
