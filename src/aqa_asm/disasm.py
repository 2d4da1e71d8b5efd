'''
desensamblador: bytes de código -> listado de instrucciones
'''

from __future__ import annotations
from dataclasses import dataclass
from string import ascii_lowercase
from typing import Dict, List, Optional, Sequence, Tuple

from .isa import OperandKind, RuntimeOpcode, decode_opcode
from .signatures import SignatureTree, build_signature_tree
from .utils import to_hex8

@dataclass(frozen=True)
class DisasmEntry:
    addr: int
    opcode: Optional[RuntimeOpcode]       # None para bytes que no forman instrucción
    operands: Tuple[Tuple[OperandKind, int], ...]
    text: str
    raw: bytes = b""

    @property
    def size(self) -> int:
        return len(self.raw)


def label_name(addr: int) -> str:
    """Nombre sintético para un destino de salto (solo letras y '_')."""
    letters = ""
    n = addr
    while True:
        letters = ascii_lowercase[n % 26] + letters
        n //= 26
        if n == 0:
            break
    return "L_" + letters

def _fmt_operand(kind: OperandKind, value: int) -> str:
    if kind is OperandKind.REGISTER:
        return f"R{value}"
    if kind is OperandKind.LITERAL:
        return f"#{value}"
    if kind is OperandKind.LABEL:
        return label_name(value)
    return str(value)

def disassemble(memory: Sequence[int], program_bytes: int,
                signatures: SignatureTree | None = None) -> List[DisasmEntry]:
    """Recorre memory[0:program_bytes] instrucción a instrucción.

    Un byte que no es un opcode válido, o una instrucción cortada por el
    final del programa, se lista como '.byte 0xNN' y se continúa en el
    siguiente byte.
    """
    tree = signatures if signatures is not None else build_signature_tree()
    out: List[DisasmEntry] = []
    pc = 0
    while pc < program_bytes:
        byte = memory[pc]
        try:
            opcode = decode_opcode(byte)
        except ValueError:
            opcode = None
        if opcode is not None:
            kinds = tree.signature_of(opcode)
            if pc + len(kinds) < program_bytes:
                values = [memory[pc + 1 + i] for i in range(len(kinds))]
                operands = tuple(zip(kinds, values))
                mnemonic = tree.mnemonic_of(opcode)
                text = str(mnemonic)
                if operands:
                    text += " " + ", ".join(_fmt_operand(k, v) for k, v in operands)
                out.append(DisasmEntry(pc, opcode, operands, text, bytes(memory[pc:pc + 1 + len(kinds)])))
                pc += 1 + len(kinds)
                continue
        out.append(DisasmEntry(pc, None, (), f".byte {to_hex8(byte)}", bytes([byte])))
        pc += 1
    return out

def branch_targets(entries: Sequence[DisasmEntry]) -> Dict[int, str]:
    return {
        value: label_name(value)
        for e in entries
        for kind, value in e.operands
        if kind is OperandKind.LABEL
    }

def format_listing(entries: Sequence[DisasmEntry]) -> List[str]:
    """Listado con dirección, bytes y texto; los destinos de salto llevan etiqueta."""
    targets = branch_targets(entries)
    lines: List[str] = []
    for e in entries:
        if e.addr in targets:
            lines.append(f"{targets[e.addr]}:")
        raw = " ".join(to_hex8(v, prefix=False) for v in e.raw)
        lines.append(f"  {e.addr:3d}: {raw:<12} {e.text}")
    return lines

