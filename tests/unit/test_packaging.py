import re
from pathlib import Path
from src.aqa_asm import assembler

ROOT = Path(__file__).resolve().parents[2]
PYPROJECT = (ROOT / "pyproject.toml").read_text(encoding="utf-8")

def test_console_script_points_at_main():
    m = re.search(r'^aqa-asm = "aqa_asm\.assembler:(\w+)"$', PYPROJECT, re.M)
    assert m and callable(getattr(assembler, m.group(1)))

def test_no_long_description_from_design_documents():
    assert not re.search(r"^readme\s*=", PYPROJECT, re.M)
