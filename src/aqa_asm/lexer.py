'''
lexer: texto fuente -> tokens, tabla de etiquetas y tamaño del programa (pasada 1)
'''

from __future__ import annotations
import logging
from dataclasses import dataclass
from string import ascii_letters
from typing import Callable, Dict, List, Optional

from .isa import MEMORY_SIZE, REGISTER_COUNT, SourceOpcode, OperandKind, source_opcode
from .regs import check_reg_index
from .tokens import LabelDefinition, Operand, Token, TokenKind
from .utils import fits_u8
from .diagnostics import (
    DuplicateLabelDefinition,
    InvalidCommentDenoter,
    InvalidLabelDefinitionLocation,
    InvalidRegisterNumber,
    LiteralValueTooLarge,
    MissingNumberAfterLiteralDenoter,
    MissingNumberAfterRegisterDenoter,
    ProgramTooLarge,
    UnexpectedCharacter,
    UnterminatedBlockComment,
)

logger = logging.getLogger(__name__)

DEFAULT_TAB_WIDTH = 4
DIGITS = "0123456789"

def _is_ident_char(ch: str) -> bool:
    return ch in ascii_letters or ch == "_"

@dataclass(frozen=True)
class LexResult:
    tokens: List[Token]
    labels: Dict[str, LabelDefinition]
    program_bytes: int


class _Scanner:
    """Recorre el fuente carácter a carácter llevando (línea, columna)."""

    def __init__(self, source: str, tab_width: int):
        self.src = source
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tab_width = tab_width
        self.tokens: List[Token] = []
        self.labels: Dict[str, LabelDefinition] = {}
        self.program_bytes = 0

    # ---- movimiento ----

    def peek(self) -> Optional[str]:
        if self.pos < len(self.src):
            return self.src[self.pos]
        return None

    def advance(self) -> Optional[str]:
        ch = self.peek()
        if ch is None:
            return None
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        elif ch == "\t":
            self.col += self.tab_width
        else:
            self.col += 1
        return ch

    def consume_while(self, cond: Callable[[str], bool]) -> str:
        start = self.pos
        while self.peek() is not None and cond(self.peek()):
            self.advance()
        return self.src[start:self.pos]

    # ---- emisión ----

    def last_token(self, *, skip: TokenKind | None = None) -> Optional[Token]:
        for tok in reversed(self.tokens):
            if tok.kind is not skip:
                return tok
        return None

    def add(self, kind: TokenKind, lexeme: str, line: int, col: int, *,
            opcode: SourceOpcode | None = None, operand: Operand | None = None) -> None:
        self.tokens.append(Token(kind, lexeme, line, col, opcode=opcode, operand=operand))
        if kind in (TokenKind.OPCODE, TokenKind.OPERAND):
            self.count_byte()

    def count_byte(self) -> None:
        # cada opcode u operando ocupa exactamente un byte
        if self.program_bytes == MEMORY_SIZE:
            last = self.tokens[-1]
            raise ProgramTooLarge(line=last.line, col=last.col)
        self.program_bytes += 1

    # ---- reglas ----

    def number(self) -> Optional[tuple[int, str]]:
        """Consume una secuencia de dígitos y la convierte a u8 (None si no hay dígitos)."""
        line, col = self.line, self.col
        digits = self.consume_while(lambda c: c in DIGITS)
        if not digits:
            return None
        value = int(digits)
        if not fits_u8(value):
            raise LiteralValueTooLarge(digits, line=line, col=col)
        return value, digits

    def memory_ref(self) -> None:
        line, col = self.line, self.col
        value, digits = self.number()
        self.add(TokenKind.OPERAND, digits, line, col, operand=Operand(OperandKind.MEMORY_REF, value))

    def literal(self) -> None:
        line, col = self.line, self.col
        self.advance()  # '#'
        got = self.number()
        if got is None:
            raise MissingNumberAfterLiteralDenoter(line=line, col=col)
        value, digits = got
        self.add(TokenKind.OPERAND, "#" + digits, line, col, operand=Operand(OperandKind.LITERAL, value))

    def identifier(self) -> None:
        """Registro, mnemónico, definición de etiqueta u operando etiqueta."""
        line, col = self.line, self.col
        ident = self.consume_while(_is_ident_char)

        if ident == "R":
            got = self.number()
            if got is None:
                raise MissingNumberAfterRegisterDenoter(line=line, col=col)
            value, digits = got
            try:
                check_reg_index(value)
            except ValueError:
                raise InvalidRegisterNumber(value, line=line, col=col,
                                            register_count=REGISTER_COUNT) from None
            self.add(TokenKind.OPERAND, "R" + digits, line, col,
                     operand=Operand(OperandKind.REGISTER, value))
            return

        try:
            opcode = source_opcode(ident)
        except ValueError:
            opcode = None
        if opcode is not None:
            self.add(TokenKind.OPCODE, ident, line, col, opcode=opcode)
            return

        if self.peek() == ":":
            self.advance()
            self.define_label(ident, line, col)
            return

        self.add(TokenKind.OPERAND, ident, line, col, operand=Operand(OperandKind.LABEL))

    def define_label(self, name: str, line: int, col: int) -> None:
        if name in self.labels:
            raise DuplicateLabelDefinition(name, line=line, col=col,
                                           previous_line=self.labels[name].line)
        # una instrucción por línea lógica: la etiqueta va tras un delimitador
        # (otras definiciones de etiqueta no cuentan como token previo)
        prev = self.last_token(skip=TokenKind.LABEL_DEFINITION)
        if prev is not None and not prev.is_line_delimiter:
            raise InvalidLabelDefinitionLocation(name, line=line, col=col)
        self.labels[name] = LabelDefinition(byte=self.program_bytes, line=line, col=col)
        self.tokens.append(Token(TokenKind.LABEL_DEFINITION, name + ":", line, col))

    def comment(self) -> None:
        line, col = self.line, self.col
        self.advance()  # '/'
        nxt = self.peek()
        if nxt == "/":
            self.consume_while(lambda c: c != "\n")
            return
        if nxt != "*":
            raise InvalidCommentDenoter(line=line, col=col)
        self.advance()  # '*'
        while True:
            ch = self.advance()
            if ch is None:
                raise UnterminatedBlockComment(line=line, col=col)
            if ch == "*" and self.peek() == "/":
                self.advance()
                return

    def run(self) -> None:
        while self.peek() is not None:
            ch = self.peek()
            if ch != "\n" and ch.isspace():
                self.advance()
                continue
            line, col = self.line, self.col
            if ch == "\n":
                self.advance()
                self.add(TokenKind.NEWLINE, "\n", line, col)
            elif ch == ";":
                self.advance()
                self.add(TokenKind.SEMICOLON, ch, line, col)
            elif ch == ",":
                self.advance()
                self.add(TokenKind.COMMA, ch, line, col)
            elif ch == "/":
                self.comment()
            elif ch in DIGITS:
                self.memory_ref()
            elif ch == "#":
                self.literal()
            elif _is_ident_char(ch):
                self.identifier()
            else:
                raise UnexpectedCharacter(ch, line=line, col=col)
        self.tokens.append(Token(TokenKind.END_OF_INPUT, "", self.line, self.col))


def tokenize(source: str, tab_width: int = DEFAULT_TAB_WIDTH) -> LexResult:
    """Convierte el fuente en tokens calculando a la vez las etiquetas y el tamaño.

    Tipos de token:
      - salto de línea / ';' (delimitadores de sentencia), ','
      - referencia a memoria: número sin prefijo (p.ej. 12)
      - literal: '#' seguido de número (p.ej. #12)
      - registro: 'R' seguido de número en [0, REGISTER_COUNT)
      - mnemónico: identificador que coincide con un SourceOpcode
      - definición de etiqueta: identificador seguido de ':'
      - operando etiqueta: cualquier otro identificador

    Cada mnemónico u operando suma un byte; la dirección de una etiqueta es el
    número de bytes acumulado al definirla. Las etiquetas usadas como operando
    se resuelven después, al codificar. Lanza LexError ante el primer error.
    """
    if tab_width < 0:
        raise ValueError("tab_width no puede ser negativo")
    sc = _Scanner(source, tab_width)
    sc.run()
    logger.debug("tokenize: %d tokens, %d etiquetas, %d bytes",
                 len(sc.tokens), len(sc.labels), sc.program_bytes)
    return LexResult(tokens=sc.tokens, labels=sc.labels, program_bytes=sc.program_bytes)
