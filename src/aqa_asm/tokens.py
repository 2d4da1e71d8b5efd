'''
dataclases de tokens (Token, Operand, LabelDefinition)
'''

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .isa import OperandKind, SourceOpcode

# ---- Tipos de token ----

class TokenKind(Enum):
    OPCODE = "opcode"
    OPERAND = "operando"
    COMMA = "coma"
    SEMICOLON = "punto y coma"
    NEWLINE = "salto de línea"
    LABEL_DEFINITION = "definición de etiqueta"
    END_OF_INPUT = "fin de fichero"

    def __str__(self) -> str:
        return self.value

# Tokens que cierran una sentencia
LINE_DELIMITERS = (TokenKind.NEWLINE, TokenKind.SEMICOLON)

# ---- Operandos ----

@dataclass(frozen=True)
class Operand:
    """Operando con tipo y valor separados.

    El tipo decide la firma; el valor solo interviene al codificar. Las
    etiquetas llevan value=None hasta que se resuelven con la tabla de etiquetas.
    """
    kind: OperandKind
    value: Optional[int] = None

    def __str__(self) -> str:
        if self.kind is OperandKind.LITERAL:
            return f"#{self.value} ({self.kind})"
        if self.kind is OperandKind.REGISTER:
            return f"R{self.value} ({self.kind})"
        if self.kind is OperandKind.MEMORY_REF:
            return f"{self.value} ({self.kind})"
        return str(self.kind)

# ---- Token ----

@dataclass(frozen=True)
class Token:
    """Token con su posición (línea y columna desde 1) en el fuente.

    Las definiciones de etiqueta quedan en el flujo como LABEL_DEFINITION pero
    no ocupan bytes; su dirección se guarda en la tabla de etiquetas.
    """
    kind: TokenKind
    lexeme: str
    line: int
    col: int
    opcode: Optional[SourceOpcode] = None    # solo para OPCODE
    operand: Optional[Operand] = None        # solo para OPERAND

    def debug_repr(self) -> str:
        """Representación para mensajes de error."""
        if self.kind is TokenKind.NEWLINE:
            return "'salto de línea'"
        if self.kind is TokenKind.END_OF_INPUT:
            return "'fin de fichero'"
        return f"'{self.lexeme}'"

    @property
    def is_line_delimiter(self) -> bool:
        return self.kind in LINE_DELIMITERS

@dataclass(frozen=True)
class LabelDefinition:
    """Etiqueta definida en el fuente: byte al que apunta y dónde se definió."""
    byte: int
    line: int
    col: int
