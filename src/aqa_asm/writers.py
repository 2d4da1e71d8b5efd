from __future__ import annotations
from typing import Iterable, List
from .utils import to_hex8, to_bin8
from .encoding import Image

def to_hex_lines(code: Iterable[int]) -> List[str]:
    return [to_hex8(b) for b in code]

def to_bin_lines(code: Iterable[int]) -> List[str]:
    return [to_bin8(b) for b in code]

def write_hex(image: Image, path: str) -> None:
    lines = to_hex_lines(image.code)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")

def write_bin(image: Image, path: str) -> None:
    lines = to_bin_lines(image.code)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")

def write_image(image: Image, path: str) -> None:
    """Vuelca los 256 bytes de la memoria tal cual (formato binario crudo)."""
    with open(path, "wb") as f:
        f.write(bytes(image.memory))
