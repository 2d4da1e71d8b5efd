# src/aqa_asm/encoding.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List

from .isa import MEMORY_SIZE, OperandKind, encode_opcode
from .parser import Statement
from .signatures import SignatureTree
from .tokens import LabelDefinition, Token
from .diagnostics import InternalError, InvalidInstructionSignature, InvalidLabel

logger = logging.getLogger(__name__)

# ---------------- Resultado de codificación ----------------

@dataclass(frozen=True)
class Image:
    """Imagen de memoria ensamblada.

    memory[0:program_bytes] contiene el código; el resto es la zona de datos.
    """
    memory: bytearray
    program_bytes: int

    @property
    def code(self) -> bytes:
        return bytes(self.memory[:self.program_bytes])

    @property
    def free_bytes(self) -> int:
        return MEMORY_SIZE - self.program_bytes

# ---------------- Escritura secuencial ----------------

class MemoryImage:
    """Escritor de solo avance sobre los MEMORY_SIZE bytes de la imagen."""

    def __init__(self):
        self.memory = bytearray(MEMORY_SIZE)
        self.cursor = 0

    def write(self, value: int) -> None:
        if self.cursor >= MEMORY_SIZE:
            # el lexer ya limita el tamaño; llegar aquí es un fallo del ensamblador
            raise InternalError(
                "El programa no cabe en memoria; esto debió detectarse al tokenizar"
            )
        self.memory[self.cursor] = value & 0xFF
        self.cursor += 1

# ---------------- Codificador principal ----------------

def _operand_byte(tok: Token, labels: Dict[str, LabelDefinition]) -> int:
    operand = tok.operand
    if operand.kind is OperandKind.LABEL:
        target = labels.get(tok.lexeme)
        if target is None:
            raise InvalidLabel(tok)
        return target.byte
    return operand.value

def encode(
    statements: List[Statement],
    labels: Dict[str, LabelDefinition],
    signatures: SignatureTree,
) -> Image:
    """Elige el opcode de cada sentencia según su firma y escribe los bytes.

    Cada instrucción se codifica como [opcode, operando...]; las etiquetas se
    sustituyen por su dirección absoluta.
    """
    img = MemoryImage()
    for st in statements:
        opcode = signatures.matches_signature(st.mnemonic, st.kinds)
        if opcode is None:
            raise InvalidInstructionSignature(
                st.opcode_token, st.mnemonic, st.kinds, signatures.all_combinations(st.mnemonic)
            )
        try:
            byte = encode_opcode(opcode)
        except KeyError:
            raise InternalError(f"El opcode {opcode} no tiene codificación") from None
        operand_bytes = [_operand_byte(tok, labels) for tok in st.operands]
        img.write(byte)
        for value in operand_bytes:
            img.write(value)
    logger.debug("encode: %d sentencias, %d bytes", len(statements), img.cursor)
    return Image(memory=img.memory, program_bytes=img.cursor)
