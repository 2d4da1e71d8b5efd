'''
intérprete: ciclo fetch-decode-execute sobre la memoria compartida de 256 bytes
'''

from __future__ import annotations
import logging
import re
from typing import Callable, Dict, List, MutableSequence, Optional

from .isa import MEMORY_SIZE, REGISTER_COUNT, RuntimeOpcode, decode_opcode
from .hostio import ConsoleIO, LineIO
from .utils import not8, shl8, shr8, u8, wrapping_add, wrapping_sub
from .diagnostics import (
    InputExhausted,
    InvalidOpcode,
    InvalidRegister,
    OutOfBoundsRead,
    OutOfBoundsWrite,
    ReadPastMemory,
)

logger = logging.getLogger(__name__)

U8_INPUT_RE = re.compile(r"^\+?[0-9]+$")

def parse_u8(text: str) -> Optional[int]:
    """Convierte una línea de entrada a u8, o None si no es un entero 0..255."""
    s = text.strip()
    if not U8_INPUT_RE.match(s):
        return None
    value = int(s)
    return value if value <= 0xFF else None


class Interpreter:
    """Estado de una ejecución: registros, pc y banderas de comparación.

    - comparison_result: diferencia (mod 256) del último CMP
    - underflow: True si en el último CMP el segundo operando era mayor
    """

    def __init__(self, memory: MutableSequence[int], registers: MutableSequence[int],
                 program_bytes: int, io: LineIO):
        if len(memory) != MEMORY_SIZE:
            raise ValueError(f"La memoria debe tener {MEMORY_SIZE} bytes")
        if len(registers) != REGISTER_COUNT:
            raise ValueError(f"Se esperaban {REGISTER_COUNT} registros")
        if not 0 <= program_bytes <= MEMORY_SIZE:
            raise ValueError("program_bytes fuera de rango")
        self.memory = memory
        self.registers = registers
        self.program_bytes = program_bytes
        self.io = io
        self.pc = 0
        self.comparison_result = 0
        self.underflow = False
        self.halted = False
        self.steps = 0
        self._insn_pc = 0
        self._handlers: Dict[RuntimeOpcode, Callable[[], None]] = {
            RuntimeOpcode.NOP: self._nop,
            RuntimeOpcode.LDR: self._ldr,
            RuntimeOpcode.STR: self._str,
            RuntimeOpcode.ADD_REGISTER: self._alu_register(wrapping_add),
            RuntimeOpcode.ADD_LITERAL: self._alu_literal(wrapping_add),
            RuntimeOpcode.SUB_REGISTER: self._alu_register(wrapping_sub),
            RuntimeOpcode.SUB_LITERAL: self._alu_literal(wrapping_sub),
            RuntimeOpcode.MOV_REGISTER: self._mov_register,
            RuntimeOpcode.MOV_LITERAL: self._mov_literal,
            RuntimeOpcode.CMP_REGISTER: self._cmp_register,
            RuntimeOpcode.CMP_LITERAL: self._cmp_literal,
            RuntimeOpcode.B: self._branch(lambda: True),
            RuntimeOpcode.BEQ: self._branch(lambda: self.comparison_result == 0),
            RuntimeOpcode.BNE: self._branch(lambda: self.comparison_result != 0),
            RuntimeOpcode.BGT: self._branch(lambda: self.comparison_result != 0 and not self.underflow),
            RuntimeOpcode.BLT: self._branch(lambda: self.underflow),
            RuntimeOpcode.AND_REGISTER: self._alu_register(lambda a, b: a & b),
            RuntimeOpcode.AND_LITERAL: self._alu_literal(lambda a, b: a & b),
            RuntimeOpcode.ORR_REGISTER: self._alu_register(lambda a, b: a | b),
            RuntimeOpcode.ORR_LITERAL: self._alu_literal(lambda a, b: a | b),
            RuntimeOpcode.EOR_REGISTER: self._alu_register(lambda a, b: a ^ b),
            RuntimeOpcode.EOR_LITERAL: self._alu_literal(lambda a, b: a ^ b),
            RuntimeOpcode.MVN_REGISTER: self._mvn_register,
            RuntimeOpcode.MVN_LITERAL: self._mvn_literal,
            RuntimeOpcode.LSL_REGISTER: self._alu_register(shl8),
            RuntimeOpcode.LSL_LITERAL: self._alu_literal(shl8),
            RuntimeOpcode.LSR_REGISTER: self._alu_register(shr8),
            RuntimeOpcode.LSR_LITERAL: self._alu_literal(shr8),
            RuntimeOpcode.PRINT_REGISTER: self._print_register,
            RuntimeOpcode.PRINT_MEMORY: self._print_memory,
            RuntimeOpcode.INPUT_REGISTER: self._input_register,
            RuntimeOpcode.INPUT_MEMORY: self._input_memory,
            RuntimeOpcode.HALT: self._halt,
        }

    # ---------------- Ciclo principal ----------------

    def run(self) -> "Interpreter":
        while not self.halted:
            self.step()
        return self

    def step(self) -> RuntimeOpcode:
        """Ejecuta una instrucción y devuelve su opcode."""
        self._insn_pc = self.pc
        byte = self._fetch()
        try:
            opcode = decode_opcode(byte)
        except ValueError:
            raise InvalidOpcode(byte, self._insn_pc) from None
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("pc=%d %s", self._insn_pc, opcode)
        self._handlers[opcode]()
        self.steps += 1
        return opcode

    # ---------------- Acceso a memoria ----------------

    def _fetch(self) -> int:
        """Lee el siguiente byte del programa y avanza el pc."""
        if self.pc >= self.program_bytes:
            raise ReadPastMemory(self.pc)
        value = self.memory[self.pc]
        self.pc += 1
        return value

    def _fetch_reg(self) -> int:
        idx = self._fetch()
        if idx >= REGISTER_COUNT:
            raise InvalidRegister(idx, self._insn_pc)
        return idx

    def read_data(self, offset: int) -> int:
        addr = self.program_bytes + offset
        if addr >= MEMORY_SIZE:
            raise OutOfBoundsRead(offset)
        return self.memory[addr]

    def write_data(self, offset: int, value: int) -> None:
        addr = self.program_bytes + offset
        if addr >= MEMORY_SIZE:
            raise OutOfBoundsWrite(offset)
        self.memory[addr] = u8(value)

    def _read_u8_input(self) -> int:
        # reintenta en silencio hasta recibir un valor válido
        while True:
            line = self.io.read_line()
            if line is None:
                raise InputExhausted()
            value = parse_u8(line)
            if value is not None:
                return value

    # ---------------- Instrucciones ----------------

    def _nop(self) -> None:
        pass

    def _halt(self) -> None:
        self.halted = True

    def _ldr(self) -> None:
        rd = self._fetch_reg()
        offset = self._fetch()
        self.registers[rd] = self.read_data(offset)

    def _str(self) -> None:
        rs = self._fetch_reg()
        offset = self._fetch()
        self.write_data(offset, self.registers[rs])

    def _alu_register(self, op: Callable[[int, int], int]) -> Callable[[], None]:
        def handler() -> None:
            rd = self._fetch_reg()
            a = self.registers[self._fetch_reg()]
            b = self.registers[self._fetch_reg()]
            self.registers[rd] = u8(op(a, b))
        return handler

    def _alu_literal(self, op: Callable[[int, int], int]) -> Callable[[], None]:
        def handler() -> None:
            rd = self._fetch_reg()
            a = self.registers[self._fetch_reg()]
            b = self._fetch()
            self.registers[rd] = u8(op(a, b))
        return handler

    def _mov_register(self) -> None:
        rd = self._fetch_reg()
        rs = self._fetch_reg()
        self.registers[rd] = self.registers[rs]

    def _mov_literal(self) -> None:
        rd = self._fetch_reg()
        self.registers[rd] = self._fetch()

    def _mvn_register(self) -> None:
        rd = self._fetch_reg()
        rs = self._fetch_reg()
        self.registers[rd] = not8(self.registers[rs])

    def _mvn_literal(self) -> None:
        rd = self._fetch_reg()
        self.registers[rd] = not8(self._fetch())

    def _compare(self, lhs: int, rhs: int) -> None:
        self.underflow = rhs > lhs
        self.comparison_result = wrapping_sub(lhs, rhs)

    def _cmp_register(self) -> None:
        a = self.registers[self._fetch_reg()]
        b = self.registers[self._fetch_reg()]
        self._compare(a, b)

    def _cmp_literal(self) -> None:
        a = self.registers[self._fetch_reg()]
        b = self._fetch()
        self._compare(a, b)

    def _branch(self, taken: Callable[[], bool]) -> Callable[[], None]:
        def handler() -> None:
            if taken():
                # destino absoluto en bytes
                self.pc = self._fetch()
            else:
                self.pc += 1
        return handler

    def _print_register(self) -> None:
        rs = self._fetch_reg()
        self.io.write_line(str(self.registers[rs]))

    def _print_memory(self) -> None:
        offset = self._fetch()
        self.io.write_line(str(self.read_data(offset)))

    def _input_register(self) -> None:
        rd = self._fetch_reg()
        self.registers[rd] = self._read_u8_input()

    def _input_memory(self) -> None:
        offset = self._fetch()
        self.write_data(offset, self._read_u8_input())


def new_registers() -> List[int]:
    return [0] * REGISTER_COUNT

def run(memory: MutableSequence[int], registers: MutableSequence[int], program_bytes: int,
        io: Optional[LineIO] = None) -> Interpreter:
    """Ejecuta la imagen hasta HALT; memoria y registros se modifican en sitio.

    Devuelve el intérprete para inspeccionar el estado final (pc, banderas).
    Lanza VMError ante el primer error de ejecución.
    """
    vm = Interpreter(memory, registers, program_bytes, io if io is not None else ConsoleIO())
    vm.run()
    logger.debug("run: HALT tras %d instrucciones", vm.steps)
    return vm
