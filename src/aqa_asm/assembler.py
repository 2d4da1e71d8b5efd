from __future__ import annotations
import argparse, logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .isa import MEMORY_SIZE
from .lexer import DEFAULT_TAB_WIDTH, tokenize
from .parser import Statement, parse
from .encoding import Image, encode
from .signatures import SignatureTree, build_signature_tree
from .tokens import LabelDefinition, Token
from .hostio import LineIO
from .vm import Interpreter, new_registers, run
from .disasm import disassemble, format_listing
from .writers import write_hex, write_bin, write_image
from .diagnostics import AsmError, InternalError, VMError

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AssemblyResult:
    image: Image
    labels: Dict[str, LabelDefinition]
    statements: List[Statement]

    @property
    def program_bytes(self) -> int:
        return self.image.program_bytes

def assemble(tokens: Sequence[Token], labels: Dict[str, LabelDefinition],
             signatures: SignatureTree) -> Image:
    """PASADA 2: sentencias -> bytes con etiquetas resueltas."""
    return encode(parse(tokens), labels, signatures)

def assemble_text(text: str, *, tab_width: int = DEFAULT_TAB_WIDTH,
                  signatures: SignatureTree | None = None) -> AssemblyResult:
    """Tokeniza (PASADA 1) y codifica (PASADA 2). Lanza AsmError ante el primer error."""
    tree = signatures if signatures is not None else build_signature_tree()
    lexed = tokenize(text, tab_width)
    statements = parse(lexed.tokens)
    image = encode(statements, lexed.labels, tree)
    if image.program_bytes != lexed.program_bytes:
        # ambas pasadas deben contar los mismos bytes
        raise InternalError(
            f"Tamaño inconsistente: lexer {lexed.program_bytes}, codificador {image.program_bytes}"
        )
    logger.debug("assemble_text: %d bytes, %d etiquetas", image.program_bytes, len(lexed.labels))
    return AssemblyResult(image=image, labels=lexed.labels, statements=statements)

def run_text(text: str, *, io: Optional[LineIO] = None, tab_width: int = DEFAULT_TAB_WIDTH,
             signatures: SignatureTree | None = None) -> Interpreter:
    """Ensambla y ejecuta; devuelve el intérprete con el estado final."""
    result = assemble_text(text, tab_width=tab_width, signatures=signatures)
    return run(result.image.memory, new_registers(), result.program_bytes, io)

def _tabsize(value: str) -> int:
    n = int(value)
    if not 1 <= n <= 255:
        raise argparse.ArgumentTypeError("el tamaño de tabulador debe estar entre 1 y 255")
    return n

def _dump(console: Console, vm: Interpreter) -> None:
    for i, value in enumerate(vm.registers):
        console.print(f"R{i:<2} = {value:3d}", highlight=False)
    console.print(f"pc = {vm.pc}  cmp = {vm.comparison_result}  underflow = {vm.underflow}",
                  highlight=False)

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="AQA assembler and 8-bit interpreter")
    ap.add_argument("source", help="archivo .aqasm de entrada")
    ap.add_argument("-t", "--tabsize", type=_tabsize, default=DEFAULT_TAB_WIDTH,
                    help="ancho del tabulador para las columnas de los errores (1-255)")
    ap.add_argument("--emit-hex", metavar="PATH", help="escribe el código en hexadecimal (un byte por línea)")
    ap.add_argument("--emit-bin", metavar="PATH", help="escribe el código en binario ASCII (un byte por línea)")
    ap.add_argument("--emit-image", metavar="PATH", help="escribe la memoria completa (256 bytes) en crudo")
    ap.add_argument("--disasm", action="store_true", help="muestra el desensamblado y no ejecuta")
    ap.add_argument("--dump", action="store_true", help="muestra los registros al terminar")
    ap.add_argument("--log-level", default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    args = ap.parse_args(argv)

    console = Console()
    err_console = Console(stderr=True)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
    )

    def fail(text: str) -> None:
        err_console.print(text, style="bold red", markup=False, highlight=False, soft_wrap=True)

    try:
        with open(args.source, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as ex:
        fail(f"ERROR: no pude leer {args.source}: {ex}")
        return 2

    try:
        result = assemble_text(text, tab_width=args.tabsize)
    except AsmError as ex:
        fail(str(ex.to_diagnostic(file=args.source)))
        return 1

    emitted = False
    try:
        if args.emit_hex:
            write_hex(result.image, args.emit_hex)
            emitted = True
        if args.emit_bin:
            write_bin(result.image, args.emit_bin)
            emitted = True
        if args.emit_image:
            write_image(result.image, args.emit_image)
            emitted = True
    except OSError as ex:
        fail(f"ERROR al escribir salidas: {ex}")
        return 3

    if args.disasm:
        for line in format_listing(disassemble(result.image.memory, result.program_bytes)):
            console.print(line, markup=False, highlight=False)
    if emitted or args.disasm:
        return 0

    console.print(
        f"Running program '{args.source}' ({result.program_bytes}/{MEMORY_SIZE} bytes in use, "
        f"{result.image.free_bytes} bytes free)",
        style="bold green", markup=False, highlight=False, soft_wrap=True,
    )
    try:
        vm = run(result.image.memory, new_registers(), result.program_bytes)
    except VMError as ex:
        fail(str(ex.to_diagnostic(file=args.source)))
        return 1
    console.print("Program exited successfully", style="bold green", highlight=False)
    if args.dump:
        _dump(console, vm)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
