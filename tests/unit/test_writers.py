from src.aqa_asm.assembler import assemble_text
from src.aqa_asm.isa import MEMORY_SIZE
from src.aqa_asm.writers import to_hex_lines, to_bin_lines, write_hex, write_bin, write_image

def test_line_formats():
    assert to_hex_lines([0x0B, 3, 0x20]) == ["0x0b", "0x03", "0x20"]
    assert to_bin_lines([0x0B, 255]) == ["00001011", "11111111"]

def test_write_files(tmp_path):
    res = assemble_text("B end; NOP; end: HALT")
    hx = tmp_path / "out.hex"
    bn = tmp_path / "out.bin"
    img = tmp_path / "out.img"
    write_hex(res.image, str(hx))
    write_bin(res.image, str(bn))
    write_image(res.image, str(img))
    assert hx.read_text(encoding="utf-8").splitlines() == ["0x0b", "0x03", "0x00", "0x20"]
    assert bn.read_text(encoding="utf-8").splitlines()[0] == "00001011"
    raw = img.read_bytes()
    assert len(raw) == MEMORY_SIZE
    assert raw[:4] == bytes([0x0B, 3, 0x00, 0x20])
