'''
colaboradores de E/S del intérprete (leer una línea, escribir una línea)
'''

from __future__ import annotations
import sys
from typing import Optional, Protocol, TextIO


class LineIO(Protocol):
    def read_line(self) -> Optional[str]:
        """Lee una línea sin el salto final; None al agotarse la entrada."""
        ...

    def write_line(self, text: str) -> None:
        ...


class StreamIO:
    """E/S sobre un par de flujos de texto cualesquiera (ficheros, StringIO...)."""

    def __init__(self, reader: TextIO, writer: TextIO):
        self.reader = reader
        self.writer = writer

    def read_line(self) -> Optional[str]:
        line = self.reader.readline()
        if line == "":
            return None
        return line.rstrip("\r\n")

    def write_line(self, text: str) -> None:
        self.writer.write(text + "\n")
        self.writer.flush()


class ConsoleIO(StreamIO):
    """E/S bloqueante por la consola (stdin/stdout)."""

    def __init__(self):
        super().__init__(sys.stdin, sys.stdout)
