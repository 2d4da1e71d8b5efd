'''
 aritmética de 8 bits sin signo (u8, wrapping, desplazamientos, formatos)
'''

from __future__ import annotations

# Máscara para 8 bits sin signo
U8_MASK = 0xFF
U8_BITS = 8

def u8(x: int) -> int:
    """Fuerza el valor al rango de 8 bits sin signo (módulo 256)."""
    return x & U8_MASK

def fits_u8(x: int) -> bool:
    """Devuelve True si x está en [0, 255]."""
    return 0 <= x <= U8_MASK

def wrapping_add(a: int, b: int) -> int:
    """Suma con desbordamiento silencioso módulo 256."""
    return u8(a + b)

def wrapping_sub(a: int, b: int) -> int:
    """Resta con desbordamiento silencioso módulo 256."""
    return u8(a - b)

def shl8(x: int, amount: int) -> int:
    """Desplazamiento lógico a la izquierda; la cantidad se toma módulo 8."""
    return u8(x << (amount % U8_BITS))

def shr8(x: int, amount: int) -> int:
    """Desplazamiento lógico a la derecha; la cantidad se toma módulo 8."""
    return u8(x) >> (amount % U8_BITS)

def not8(x: int) -> int:
    """Complemento bit a bit en 8 bits."""
    return u8(~x)

def to_bin8(x: int) -> str:
    """Representación binaria de 8 bits (cadena)."""
    return format(u8(x), "08b")

def to_hex8(x: int, *, prefix: bool = True) -> str:
    """Representación hexadecimal de 8 bits (cadena), con o sin prefijo 0x."""
    s = format(u8(x), "02x")
    return ("0x" + s) if prefix else s
