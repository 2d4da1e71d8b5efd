import io
import sys
from src.aqa_asm.hostio import ConsoleIO, StreamIO

def test_stream_io_reads_lines_without_newline():
    sio = StreamIO(io.StringIO("12\r\nabc\n"), io.StringIO())
    assert sio.read_line() == "12"
    assert sio.read_line() == "abc"
    assert sio.read_line() is None

def test_stream_io_writes_one_line_per_call():
    out = io.StringIO()
    sio = StreamIO(io.StringIO(), out)
    sio.write_line("7")
    sio.write_line("255")
    assert out.getvalue() == "7\n255\n"

def test_console_io_uses_std_streams(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("3\n"))
    cio = ConsoleIO()
    assert cio.reader is sys.stdin
    assert cio.read_line() == "3"
