# src/aqa_asm/parser.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .isa import OperandKind, SourceOpcode
from .tokens import Token, TokenKind
from .diagnostics import ExpectedOpcode, ExpectedOperand, ExpectedToken

@dataclass(frozen=True)
class Statement:
    """Instrucción ya separada: token del mnemónico y tokens de sus operandos."""
    opcode_token: Token
    operands: Tuple[Token, ...]

    @property
    def mnemonic(self) -> SourceOpcode:
        return self.opcode_token.opcode

    @property
    def kinds(self) -> Tuple[OperandKind, ...]:
        return tuple(t.operand.kind for t in self.operands)

    @property
    def size(self) -> int:
        # opcode + un byte por operando
        return 1 + len(self.operands)

# Tokens que se ignoran donde se espera el inicio de una sentencia
_SKIPPABLE = (TokenKind.NEWLINE, TokenKind.SEMICOLON, TokenKind.LABEL_DEFINITION)


class _Cursor:
    def __init__(self, tokens: Sequence[Token]):
        self.tokens = tokens
        self.i = 0

    def peek(self) -> Optional[Token]:
        if self.i < len(self.tokens):
            return self.tokens[self.i]
        return None

    def next(self) -> Optional[Token]:
        tok = self.peek()
        if tok is not None:
            self.i += 1
        return tok

    def peek_kind(self) -> Optional[TokenKind]:
        tok = self.peek()
        return tok.kind if tok is not None else None


def _parse_instruction(cur: _Cursor, opcode_token: Token) -> Statement:
    operands: List[Token] = []

    # primer operando, sin coma delante
    if cur.peek_kind() is TokenKind.OPERAND:
        operands.append(cur.next())
    elif cur.peek_kind() is TokenKind.COMMA:
        raise ExpectedOperand(cur.peek())

    # resto de operandos separados por comas
    while cur.peek_kind() is TokenKind.COMMA:
        cur.next()
        if cur.peek_kind() is not TokenKind.OPERAND:
            raise ExpectedOperand(cur.peek())
        operands.append(cur.next())

    # delimitador de línea (el fin de fichero también cierra la sentencia)
    end = cur.peek()
    if end is None:
        raise ExpectedToken([TokenKind.SEMICOLON, TokenKind.NEWLINE], None)
    if end.kind is TokenKind.END_OF_INPUT:
        pass
    elif end.is_line_delimiter:
        cur.next()
    elif end.kind is TokenKind.OPERAND:
        # dos operandos seguidos: falta la coma
        raise ExpectedToken([TokenKind.COMMA], end)
    else:
        raise ExpectedToken([TokenKind.SEMICOLON, TokenKind.NEWLINE], end)

    return Statement(opcode_token=opcode_token, operands=tuple(operands))


def parse(tokens: Sequence[Token]) -> List[Statement]:
    """
    Agrupa el flujo de tokens en sentencias.

    Reglas:
      - Saltos de línea, ';' y definiciones de etiqueta sueltos se ignoran.
      - Una sentencia empieza por un mnemónico; cualquier otro token es un error.
      - Operandos: el primero sin coma, los siguientes precedidos de ','.
      - Tras los operandos debe venir ';', salto de línea o el fin de fichero.

    Solo valida la forma; la elección de opcode según los tipos de operando
    se hace al codificar (encoding.encode).
    """
    cur = _Cursor(tokens)
    out: List[Statement] = []
    while True:
        tok = cur.next()
        if tok is None or tok.kind is TokenKind.END_OF_INPUT:
            break
        if tok.kind in _SKIPPABLE:
            continue
        if tok.kind is not TokenKind.OPCODE:
            raise ExpectedOpcode(tok)
        out.append(_parse_instruction(cur, tok))
    return out
