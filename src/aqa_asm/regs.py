'''
validación de registros (R0..R12)
'''

from __future__ import annotations

from .isa import REGISTER_COUNT

def check_reg_index(n: int) -> int:
    """Valida un índice de registro ya convertido a entero."""
    if not 0 <= n < REGISTER_COUNT:
        raise ValueError(f"Registro inválido: R{n} (debe estar en el rango 0-{REGISTER_COUNT - 1})")
    return n
