'''
clase Diagnostic y helpers (línea/columna, tipos de error)
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .isa import OperandKind, RuntimeOpcode, SourceOpcode
    from .tokens import Token, TokenKind

# Severidad de los diagnósticos (en español)
Severity = Literal["error", "advertencia", "nota"]

_SEV_TO_LABEL = {
    "error": "ERROR",
    "advertencia": "ADVERTENCIA",
    "nota": "NOTA",
}

@dataclass(frozen=True)
class Diagnostic:
    """Estructura de un diagnóstico para reportar problemas.

    Abarca errores, advertencias y notas, con ubicación opcional (archivo, línea y columna)
    y un mensaje de ayuda (pista) para orientar la corrección.
    """
    severity: Severity
    message: str
    line: Optional[int] = None
    col: Optional[int] = None
    hint: Optional[str] = None
    file: Optional[str] = None

    def __str__(self) -> str:
        loc = ""
        if self.file is not None:
            loc += f"{self.file}:"
        if self.line is not None:
            loc += f"{self.line}"
            if self.col is not None:
                loc += f":{self.col}"
        if loc:
            loc += ": "
        sev = _SEV_TO_LABEL.get(self.severity, str(self.severity).upper())
        core = f"{sev}: {self.message}"
        if self.hint:
            core += f"  (pista: {self.hint})"
        return loc + core

def error(message: str, *, line: int | None = None, col: int | None = None,
          file: str | None = None, hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo error."""
    return Diagnostic("error", message, line, col, hint, file)

# ---------------------------------------------------------------------------
# Excepciones. Cada etapa (lexer, parser, intérprete) tiene su propia familia;
# todas se convierten en Diagnostic para mostrarlas.
# ---------------------------------------------------------------------------

class AsmError(Exception):
    """Error del usuario (programa fuente o ejecución) con ubicación opcional."""

    def __init__(self, message: str, *, line: int | None = None, col: int | None = None,
                 hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col
        self.hint = hint

    def to_diagnostic(self, *, file: str | None = None) -> Diagnostic:
        return error(self.message, line=self.line, col=self.col, file=file, hint=self.hint)

    def __str__(self) -> str:
        return str(self.to_diagnostic())


class InternalError(RuntimeError):
    """Invariante interna rota: indica un fallo del ensamblador, no del programa."""


def _where(token: Optional["Token"]) -> Tuple[Optional[int], Optional[int]]:
    if token is None:
        return None, None
    return token.line, token.col

def _found(token: Optional["Token"]) -> str:
    return token.debug_repr() if token is not None else "'fin de fichero'"

# ---- Lexer ----

class LexError(AsmError):
    pass

class ProgramTooLarge(LexError):
    def __init__(self, *, line: int, col: int):
        super().__init__("El programa excede el límite de memoria (256 bytes)", line=line, col=col)

class LiteralValueTooLarge(LexError):
    def __init__(self, value_string: str, *, line: int, col: int):
        self.value_string = value_string
        super().__init__(f"Valor '{value_string}' demasiado grande (máximo 255)", line=line, col=col)

class MissingNumberAfterRegisterDenoter(LexError):
    def __init__(self, *, line: int, col: int):
        super().__init__("Falta el número tras el indicador de registro 'R'", line=line, col=col)

class MissingNumberAfterLiteralDenoter(LexError):
    def __init__(self, *, line: int, col: int):
        super().__init__("Falta el número tras el indicador de literal '#'", line=line, col=col)

class InvalidRegisterNumber(LexError):
    def __init__(self, value: int, *, line: int, col: int, register_count: int):
        self.value = value
        super().__init__(
            f"Registro inválido 'R{value}' (debe estar en el rango 0-{register_count - 1})",
            line=line, col=col,
        )

class InvalidLabelDefinitionLocation(LexError):
    def __init__(self, label_name: str, *, line: int, col: int):
        self.label_name = label_name
        super().__init__(
            f"Definición de la etiqueta '{label_name}' en posición inválida",
            line=line, col=col,
            hint="las etiquetas solo pueden aparecer tras un delimitador de línea (salto de línea o ';')",
        )

class DuplicateLabelDefinition(LexError):
    def __init__(self, label_name: str, *, line: int, col: int, previous_line: int | None = None):
        self.label_name = label_name
        hint = f"definida antes en la línea {previous_line}" if previous_line is not None else None
        super().__init__(f"La etiqueta '{label_name}' ya está definida", line=line, col=col, hint=hint)

class UnterminatedBlockComment(LexError):
    def __init__(self, *, line: int, col: int):
        super().__init__("Comentario de bloque sin cerrar", line=line, col=col, hint="falta '*/'")

class InvalidCommentDenoter(LexError):
    def __init__(self, *, line: int, col: int):
        super().__init__("Se esperaba '//' o '/*' para un comentario, no '/'", line=line, col=col)

class UnexpectedCharacter(LexError):
    def __init__(self, char: str, *, line: int, col: int):
        self.char = char
        super().__init__(f"Carácter inesperado: '{char}'", line=line, col=col)

# ---- Parser ----

class ParseError(AsmError):
    pass

class ExpectedOpcode(ParseError):
    def __init__(self, got: Optional["Token"]):
        self.got = got
        line, col = _where(got)
        super().__init__(f"Se esperaba un mnemónico, se encontró {_found(got)}", line=line, col=col)

class ExpectedOperand(ParseError):
    def __init__(self, got: Optional["Token"]):
        self.got = got
        line, col = _where(got)
        super().__init__(f"Se esperaba un operando, se encontró {_found(got)}", line=line, col=col)

class ExpectedToken(ParseError):
    def __init__(self, candidates: Sequence["TokenKind"], got: Optional["Token"]):
        self.candidates = list(candidates)
        self.got = got
        line, col = _where(got)
        names = " o ".join(str(c) for c in self.candidates)
        super().__init__(f"Se esperaba {names}, se encontró {_found(got)}", line=line, col=col)

class InvalidLabel(ParseError):
    def __init__(self, token: "Token"):
        self.token = token
        super().__init__(f"No existe ninguna etiqueta con nombre {token.debug_repr()}",
                         line=token.line, col=token.col)

Combination = Tuple["RuntimeOpcode", Tuple["OperandKind", ...]]

def _fmt_signature(kinds: Sequence["OperandKind"]) -> str:
    return ", ".join(str(k) for k in kinds) if kinds else "(sin operandos)"

class InvalidInstructionSignature(ParseError):
    def __init__(self, token: "Token", mnemonic: "SourceOpcode",
                 received: Sequence["OperandKind"], valid: List[Combination]):
        self.mnemonic = mnemonic
        self.received = tuple(received)
        self.valid = list(valid)
        options = "\n".join(f"\t• {mnemonic} {_fmt_signature(kinds)}" for _, kinds in self.valid)
        super().__init__(
            f"Operandos inválidos para {mnemonic}: se recibió {_fmt_signature(self.received)}; "
            f"formas válidas:\n{options}",
            line=token.line, col=token.col,
        )

# ---- Intérprete ----

class VMError(AsmError):
    pass

class ReadPastMemory(VMError):
    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(
            f"El programa leyó más allá de la memoria disponible (pc={pc})",
            hint="¿falta la instrucción 'HALT'?",
        )

class OutOfBoundsRead(VMError):
    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f"Intento de leer la posición de memoria {offset}")

class OutOfBoundsWrite(VMError):
    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f"Intento de escribir en la posición de memoria {offset}")

class InvalidOpcode(VMError):
    def __init__(self, byte: int, pc: int):
        self.byte = byte
        self.pc = pc
        super().__init__(f"Opcode inválido {byte} en la dirección {pc}")

class InvalidRegister(VMError):
    def __init__(self, index: int, pc: int):
        self.index = index
        self.pc = pc
        super().__init__(f"Registro inválido R{index} en la instrucción de la dirección {pc}")

class InputExhausted(VMError):
    def __init__(self):
        super().__init__("La entrada terminó antes de leer un valor válido (0-255)")
