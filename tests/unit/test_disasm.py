from src.aqa_asm.assembler import assemble_text
from src.aqa_asm.disasm import disassemble, format_listing, label_name, branch_targets
from src.aqa_asm.isa import MEMORY_SIZE, OperandKind, RuntimeOpcode

SRC = """
start: MOV R0, #1
loop:  ADD R0, R0, #1
       CMP R0, #3
       BNE loop
       STR R0, 7
       HALT
"""

def test_disassemble_program():
    res = assemble_text(SRC)
    entries = disassemble(res.image.memory, res.program_bytes)
    assert [e.addr for e in entries] == [0, 3, 7, 10, 12, 15]
    assert [e.text for e in entries] == [
        "MOV R0, #1", "ADD R0, R0, #1", "CMP R0, #3", "BNE L_d", "STR R0, 7", "HALT",
    ]
    assert entries[3].opcode is RuntimeOpcode.BNE
    assert entries[3].operands == ((OperandKind.LABEL, 3),)
    assert sum(e.size for e in entries) == res.program_bytes

def test_listing_marks_branch_targets():
    res = assemble_text(SRC)
    lines = format_listing(disassemble(res.image.memory, res.program_bytes))
    i = lines.index("L_d:")
    assert lines[i + 1].split() == ["3:", "04", "00", "00", "01", "ADD", "R0,", "R0,", "#1"]

def test_listing_reassembles_to_same_code():
    res = assemble_text(SRC)
    entries = disassemble(res.image.memory, res.program_bytes)
    targets = branch_targets(entries)
    src = "\n".join(
        (targets[e.addr] + ": " if e.addr in targets else "") + e.text for e in entries
    )
    assert assemble_text(src).image.code == res.image.code

def test_label_names_use_letters_only():
    assert label_name(0) == "L_a"
    assert label_name(25) == "L_z"
    assert label_name(26) == "L_ba"
    assert all(c.isalpha() or c == "_" for c in label_name(255))

def test_invalid_and_truncated_bytes():
    mem = bytearray(MEMORY_SIZE)
    mem[:4] = bytes([0x21, 0x20, 0x08, 0x01])
    entries = disassemble(mem, 4)
    assert [e.text for e in entries] == [".byte 0x21", "HALT", ".byte 0x08", ".byte 0x01"]
    assert entries[0].opcode is None and entries[0].size == 1
