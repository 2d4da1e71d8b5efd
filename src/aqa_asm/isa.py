'''
tabla formal del lenguaje AQA (mnemónicos, opcodes de ejecución, codificación)
'''

from __future__ import annotations
from enum import Enum
from typing import Dict

# Tamaño del espacio de direcciones compartido por código y datos
MEMORY_SIZE = 256
# Banco de registros de propósito general (R0..R12)
REGISTER_COUNT = 13


class SourceOpcode(Enum):
    """Mnemónicos tal y como aparecen en el código fuente."""
    NOP = "NOP"
    LDR = "LDR"
    STR = "STR"
    ADD = "ADD"
    SUB = "SUB"
    MOV = "MOV"
    CMP = "CMP"
    B = "B"
    BEQ = "BEQ"
    BNE = "BNE"
    BGT = "BGT"
    BLT = "BLT"
    AND = "AND"
    ORR = "ORR"
    EOR = "EOR"
    MVN = "MVN"
    LSL = "LSL"
    LSR = "LSR"
    PRINT = "PRINT"
    INPUT = "INPUT"
    HALT = "HALT"

    def __str__(self) -> str:
        return self.value


class RuntimeOpcode(Enum):
    """Opcodes que ejecuta el intérprete.

    Cada mnemónico puede dar lugar a varios opcodes de ejecución según la
    combinación de operandos:
      MOV R5, R5  =>  MOV_REGISTER 5 5
      MOV R5, #5  =>  MOV_LITERAL 5 5
    """
    NOP = "NOP"
    LDR = "LDR"
    STR = "STR"
    ADD_REGISTER = "ADD_REGISTER"
    ADD_LITERAL = "ADD_LITERAL"
    SUB_REGISTER = "SUB_REGISTER"
    SUB_LITERAL = "SUB_LITERAL"
    MOV_REGISTER = "MOV_REGISTER"
    MOV_LITERAL = "MOV_LITERAL"
    CMP_REGISTER = "CMP_REGISTER"
    CMP_LITERAL = "CMP_LITERAL"
    B = "B"
    BEQ = "BEQ"
    BNE = "BNE"
    BGT = "BGT"
    BLT = "BLT"
    AND_REGISTER = "AND_REGISTER"
    AND_LITERAL = "AND_LITERAL"
    ORR_REGISTER = "ORR_REGISTER"
    ORR_LITERAL = "ORR_LITERAL"
    EOR_REGISTER = "EOR_REGISTER"
    EOR_LITERAL = "EOR_LITERAL"
    MVN_REGISTER = "MVN_REGISTER"
    MVN_LITERAL = "MVN_LITERAL"
    LSL_REGISTER = "LSL_REGISTER"
    LSL_LITERAL = "LSL_LITERAL"
    LSR_REGISTER = "LSR_REGISTER"
    LSR_LITERAL = "LSR_LITERAL"
    PRINT_REGISTER = "PRINT_REGISTER"
    PRINT_MEMORY = "PRINT_MEMORY"
    INPUT_REGISTER = "INPUT_REGISTER"
    INPUT_MEMORY = "INPUT_MEMORY"
    HALT = "HALT"

    def __str__(self) -> str:
        return self.value


class OperandKind(Enum):
    """Tipo de operando; es lo único que interviene en la selección de firma."""
    REGISTER = "registro"
    MEMORY_REF = "referencia a memoria"
    LABEL = "etiqueta"
    LITERAL = "literal"

    def __str__(self) -> str:
        return self.value

# Orden estable para listados de diagnóstico
_KIND_ORDER = {
    OperandKind.REGISTER: 0,
    OperandKind.MEMORY_REF: 1,
    OperandKind.LABEL: 2,
    OperandKind.LITERAL: 3,
}

def kind_order(kind: OperandKind) -> int:
    return _KIND_ORDER[kind]

# Formato binario: un byte por opcode. La tabla es explícita y no depende del
# orden de declaración de RuntimeOpcode.
ENCODING: Dict[RuntimeOpcode, int] = {}
DECODING: Dict[int, RuntimeOpcode] = {}

def _add(opcode: RuntimeOpcode, byte: int):
    if byte in DECODING:
        raise ValueError(f"Byte {byte} asignado dos veces ({DECODING[byte]} y {opcode})")
    ENCODING[opcode] = byte
    DECODING[byte] = opcode

_add(RuntimeOpcode.NOP,            0x00)
_add(RuntimeOpcode.LDR,            0x01)
_add(RuntimeOpcode.STR,            0x02)
_add(RuntimeOpcode.ADD_REGISTER,   0x03)
_add(RuntimeOpcode.ADD_LITERAL,    0x04)
_add(RuntimeOpcode.SUB_REGISTER,   0x05)
_add(RuntimeOpcode.SUB_LITERAL,    0x06)
_add(RuntimeOpcode.MOV_REGISTER,   0x07)
_add(RuntimeOpcode.MOV_LITERAL,    0x08)
_add(RuntimeOpcode.CMP_REGISTER,   0x09)
_add(RuntimeOpcode.CMP_LITERAL,    0x0A)
_add(RuntimeOpcode.B,              0x0B)
_add(RuntimeOpcode.BEQ,            0x0C)
_add(RuntimeOpcode.BNE,            0x0D)
_add(RuntimeOpcode.BGT,            0x0E)
_add(RuntimeOpcode.BLT,            0x0F)
_add(RuntimeOpcode.AND_REGISTER,   0x10)
_add(RuntimeOpcode.AND_LITERAL,    0x11)
_add(RuntimeOpcode.ORR_REGISTER,   0x12)
_add(RuntimeOpcode.ORR_LITERAL,    0x13)
_add(RuntimeOpcode.EOR_REGISTER,   0x14)
_add(RuntimeOpcode.EOR_LITERAL,    0x15)
_add(RuntimeOpcode.MVN_REGISTER,   0x16)
_add(RuntimeOpcode.MVN_LITERAL,    0x17)
_add(RuntimeOpcode.LSL_REGISTER,   0x18)
_add(RuntimeOpcode.LSL_LITERAL,    0x19)
_add(RuntimeOpcode.LSR_REGISTER,   0x1A)
_add(RuntimeOpcode.LSR_LITERAL,    0x1B)
_add(RuntimeOpcode.PRINT_REGISTER, 0x1C)
_add(RuntimeOpcode.PRINT_MEMORY,   0x1D)
_add(RuntimeOpcode.INPUT_REGISTER, 0x1E)
_add(RuntimeOpcode.INPUT_MEMORY,   0x1F)
_add(RuntimeOpcode.HALT,           0x20)

# Los bytes válidos como opcode forman el rango denso [0, OPCODE_LIMIT)
OPCODE_LIMIT = len(ENCODING)

def source_opcode(name: str) -> SourceOpcode:
    """Devuelve el mnemónico para un identificador (sensible a mayúsculas)."""
    try:
        return SourceOpcode(name)
    except ValueError:
        raise ValueError(f"Mnemónico desconocido: {name}") from None

def encode_opcode(opcode: RuntimeOpcode) -> int:
    """Byte de codificación de un opcode de ejecución."""
    return ENCODING[opcode]

def decode_opcode(byte: int) -> RuntimeOpcode:
    """Opcode de ejecución para un byte, o ValueError si no corresponde a ninguno."""
    if byte not in DECODING:
        raise ValueError(f"Byte {byte} no corresponde a ningún opcode")
    return DECODING[byte]
