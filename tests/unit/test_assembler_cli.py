import io
import pytest
from src.aqa_asm.assembler import assemble, assemble_text, run_text, main
from src.aqa_asm.lexer import tokenize
from src.aqa_asm.signatures import build_signature_tree
from src.aqa_asm.hostio import StreamIO
from src.aqa_asm.diagnostics import InvalidLabel

HELLO = """
// suma dos números leídos por teclado
    INPUT R0
    INPUT R1
    ADD R2, R0, R1
    PRINT R2
    HALT
"""

def test_e2e_hello():
    out = io.StringIO()
    vm = run_text(HELLO, io=StreamIO(io.StringIO("40\n2\n"), out))
    assert out.getvalue() == "42\n"
    assert vm.registers[:3] == [40, 2, 42]
    assert vm.halted

def test_assemble_composes_parse_and_encode():
    res = tokenize("B end; NOP; end: HALT")
    img = assemble(res.tokens, res.labels, build_signature_tree())
    assert img.code == bytes([0x0B, 3, 0x00, 0x20])

def test_assemble_text_result():
    res = assemble_text("x: NOP\nHALT")
    assert res.program_bytes == 2
    assert res.labels["x"].byte == 0
    assert len(res.statements) == 2

def test_assemble_text_propagates_first_error():
    with pytest.raises(InvalidLabel):
        assemble_text("B a\nB b")

def test_signature_tree_can_be_shared():
    tree = build_signature_tree()
    a = assemble_text("HALT", signatures=tree)
    b = assemble_text("NOP\nHALT", signatures=tree)
    assert (a.program_bytes, b.program_bytes) == (1, 2)

# --- CLI ---
def write(tmp_path, text, name="prog.aqasm"):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return str(p)

def test_cli_runs_program(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("1\n2\n"))
    path = write(tmp_path, HELLO)
    assert main([path]) == 0
    out = capsys.readouterr().out
    assert f"Running program '{path}' (11/256 bytes in use, 245 bytes free)" in out
    assert "3\n" in out
    assert "Program exited successfully" in out

def test_cli_dump(tmp_path, capsys):
    path = write(tmp_path, "MOV R4, #9\nHALT")
    assert main([path, "--dump"]) == 0
    out = capsys.readouterr().out
    assert "R4  =   9" in out

def test_cli_unreadable_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.aqasm")]) == 2
    assert "no pude leer" in capsys.readouterr().err

def test_cli_assembly_error(tmp_path, capsys):
    path = write(tmp_path, "NOP\nMOV R0, #300")
    assert main([path]) == 1
    err = capsys.readouterr().err
    assert f"{path}:2:10: ERROR:" in err

def test_cli_tabsize_affects_columns(tmp_path, capsys):
    path = write(tmp_path, "\t$")
    assert main([path, "-t", "8"]) == 1
    assert f"{path}:1:9: ERROR:" in capsys.readouterr().err

def test_cli_runtime_error(tmp_path, capsys):
    path = write(tmp_path, "NOP")
    assert main([path]) == 1
    captured = capsys.readouterr()
    assert "Running program" in captured.out
    assert "HALT" in captured.err
    assert "Program exited successfully" not in captured.out

def test_cli_emit_does_not_run(tmp_path, capsys):
    path = write(tmp_path, "B end; NOP; end: HALT")
    hx = tmp_path / "o.hex"
    bn = tmp_path / "o.bin"
    assert main([path, "--emit-hex", str(hx), "--emit-bin", str(bn)]) == 0
    assert hx.read_text(encoding="utf-8").split() == ["0x0b", "0x03", "0x00", "0x20"]
    assert len(bn.read_text(encoding="utf-8").split()) == 4
    assert "Running program" not in capsys.readouterr().out

def test_cli_write_failure(tmp_path, capsys):
    path = write(tmp_path, "HALT")
    assert main([path, "--emit-hex", str(tmp_path)]) == 3
    assert "ERROR al escribir" in capsys.readouterr().err

def test_cli_disasm(tmp_path, capsys):
    path = write(tmp_path, "loop: NOP\nB loop")
    assert main([path, "--disasm"]) == 0
    out = capsys.readouterr().out
    assert "L_a:" in out
    assert "B L_a" in out

@pytest.mark.parametrize("value", ["0", "256", "x"])
def test_cli_rejects_bad_tabsize(tmp_path, value):
    path = write(tmp_path, "HALT")
    with pytest.raises(SystemExit):
        main([path, "--tabsize", value])
