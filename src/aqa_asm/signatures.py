'''
árbol de firmas: (mnemónico, tipos de operando) -> opcode de ejecución
'''

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .isa import OperandKind, RuntimeOpcode, SourceOpcode, encode_opcode, kind_order

REG = OperandKind.REGISTER
MEM = OperandKind.MEMORY_REF
LBL = OperandKind.LABEL
LIT = OperandKind.LITERAL

Signature = Tuple[OperandKind, ...]
Combination = Tuple[RuntimeOpcode, Signature]

@dataclass
class SignatureNode:
    runtime_opcode: Optional[RuntimeOpcode] = None
    children: Mapping[OperandKind, "SignatureNode"] = field(default_factory=dict)


class SignatureTree:
    """Trie indexado por mnemónico y, después, por cada tipo de operando.

    El opcode de ejecución vive en el nodo terminal de su firma. Tras freeze()
    el árbol es de solo lectura y puede compartirse entre ensamblados.
    """

    def __init__(self):
        self._root: Dict[SourceOpcode, SignatureNode] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_signature(self, mnemonic: SourceOpcode, kinds: Sequence[OperandKind],
                      runtime_opcode: RuntimeOpcode) -> None:
        if self._frozen:
            raise RuntimeError("El árbol de firmas es de solo lectura")
        node = self._root.setdefault(mnemonic, SignatureNode())
        for kind in kinds:
            node = node.children.setdefault(kind, SignatureNode())
        if node.runtime_opcode is not None:
            raise ValueError(f"Firma duplicada para {mnemonic}: {list(kinds)}")
        node.runtime_opcode = runtime_opcode

    def freeze(self) -> "SignatureTree":
        def _freeze(node: SignatureNode) -> None:
            for child in node.children.values():
                _freeze(child)
            node.children = MappingProxyType(dict(node.children))
        for node in self._root.values():
            _freeze(node)
        self._frozen = True
        return self

    def matches_signature(self, mnemonic: SourceOpcode,
                          kinds: Sequence[OperandKind]) -> Optional[RuntimeOpcode]:
        """Opcode para la secuencia exacta de tipos, o None (sin coincidencias parciales)."""
        node = self._root.get(mnemonic)
        if node is None:
            return None
        for kind in kinds:
            node = node.children.get(kind)
            if node is None:
                return None
        return node.runtime_opcode

    def all_combinations(self, mnemonic: SourceOpcode) -> List[Combination]:
        """Todas las formas válidas de un mnemónico (recorrido en profundidad, ordenado)."""
        out: List[Combination] = []

        def dfs(node: SignatureNode, path: List[OperandKind]) -> None:
            if node.runtime_opcode is not None:
                out.append((node.runtime_opcode, tuple(path)))
            for kind, child in node.children.items():
                path.append(kind)
                dfs(child, path)
                path.pop()

        root = self._root.get(mnemonic)
        if root is not None:
            dfs(root, [])
        out.sort(key=lambda c: (encode_opcode(c[0]), [kind_order(k) for k in c[1]]))
        return out

    def mnemonics(self) -> List[SourceOpcode]:
        return list(self._root)

    def signature_of(self, runtime_opcode: RuntimeOpcode) -> Signature:
        """Firma registrada para un opcode de ejecución (KeyError si no existe)."""
        for mnemonic in self._root:
            for opcode, kinds in self.all_combinations(mnemonic):
                if opcode is runtime_opcode:
                    return kinds
        raise KeyError(runtime_opcode)

    def mnemonic_of(self, runtime_opcode: RuntimeOpcode) -> SourceOpcode:
        for mnemonic in self._root:
            if any(opcode is runtime_opcode for opcode, _ in self.all_combinations(mnemonic)):
                return mnemonic
        raise KeyError(runtime_opcode)


# Tabla única de formas válidas del lenguaje
_SIGNATURES: Tuple[Tuple[SourceOpcode, Signature, RuntimeOpcode], ...] = (
    (SourceOpcode.NOP,   (),              RuntimeOpcode.NOP),
    (SourceOpcode.LDR,   (REG, MEM),      RuntimeOpcode.LDR),
    (SourceOpcode.STR,   (REG, MEM),      RuntimeOpcode.STR),
    (SourceOpcode.ADD,   (REG, REG, REG), RuntimeOpcode.ADD_REGISTER),
    (SourceOpcode.ADD,   (REG, REG, LIT), RuntimeOpcode.ADD_LITERAL),
    (SourceOpcode.SUB,   (REG, REG, REG), RuntimeOpcode.SUB_REGISTER),
    (SourceOpcode.SUB,   (REG, REG, LIT), RuntimeOpcode.SUB_LITERAL),
    (SourceOpcode.MOV,   (REG, REG),      RuntimeOpcode.MOV_REGISTER),
    (SourceOpcode.MOV,   (REG, LIT),      RuntimeOpcode.MOV_LITERAL),
    (SourceOpcode.CMP,   (REG, REG),      RuntimeOpcode.CMP_REGISTER),
    (SourceOpcode.CMP,   (REG, LIT),      RuntimeOpcode.CMP_LITERAL),
    (SourceOpcode.B,     (LBL,),          RuntimeOpcode.B),
    (SourceOpcode.BEQ,   (LBL,),          RuntimeOpcode.BEQ),
    (SourceOpcode.BNE,   (LBL,),          RuntimeOpcode.BNE),
    (SourceOpcode.BGT,   (LBL,),          RuntimeOpcode.BGT),
    (SourceOpcode.BLT,   (LBL,),          RuntimeOpcode.BLT),
    (SourceOpcode.AND,   (REG, REG, REG), RuntimeOpcode.AND_REGISTER),
    (SourceOpcode.AND,   (REG, REG, LIT), RuntimeOpcode.AND_LITERAL),
    (SourceOpcode.ORR,   (REG, REG, REG), RuntimeOpcode.ORR_REGISTER),
    (SourceOpcode.ORR,   (REG, REG, LIT), RuntimeOpcode.ORR_LITERAL),
    (SourceOpcode.EOR,   (REG, REG, REG), RuntimeOpcode.EOR_REGISTER),
    (SourceOpcode.EOR,   (REG, REG, LIT), RuntimeOpcode.EOR_LITERAL),
    (SourceOpcode.MVN,   (REG, REG),      RuntimeOpcode.MVN_REGISTER),
    (SourceOpcode.MVN,   (REG, LIT),      RuntimeOpcode.MVN_LITERAL),
    (SourceOpcode.LSL,   (REG, REG, REG), RuntimeOpcode.LSL_REGISTER),
    (SourceOpcode.LSL,   (REG, REG, LIT), RuntimeOpcode.LSL_LITERAL),
    (SourceOpcode.LSR,   (REG, REG, REG), RuntimeOpcode.LSR_REGISTER),
    (SourceOpcode.LSR,   (REG, REG, LIT), RuntimeOpcode.LSR_LITERAL),
    (SourceOpcode.PRINT, (REG,),          RuntimeOpcode.PRINT_REGISTER),
    (SourceOpcode.PRINT, (MEM,),          RuntimeOpcode.PRINT_MEMORY),
    (SourceOpcode.INPUT, (REG,),          RuntimeOpcode.INPUT_REGISTER),
    (SourceOpcode.INPUT, (MEM,),          RuntimeOpcode.INPUT_MEMORY),
    (SourceOpcode.HALT,  (),              RuntimeOpcode.HALT),
)

def build_signature_tree() -> SignatureTree:
    """Construye (y congela) el árbol con todas las formas del lenguaje."""
    tree = SignatureTree()
    for mnemonic, kinds, opcode in _SIGNATURES:
        tree.add_signature(mnemonic, kinds, opcode)
    return tree.freeze()
