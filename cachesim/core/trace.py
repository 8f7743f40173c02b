"""Trace line parsing.

One record per line:

    0 <hexAddress>             read
    1 <hexAddress> <hexData>   write

Blank lines and lines starting with '#' carry no record.
"""
from typing import Iterable, Iterator, NamedTuple, Optional, Tuple

from .errors import MalformedRecordError

READ = 0
WRITE = 1


class TraceRecord(NamedTuple):
    op: int
    address: int
    data: Optional[int] = None

    @property
    def is_write(self) -> bool:
        return self.op == WRITE


def _hex(token: str, what: str, line_no: int, line: str) -> int:
    s = token.strip()
    if s.lower().startswith('0x'):
        s = s[2:]
    try:
        value = int(s, 16)
    except ValueError:
        raise MalformedRecordError(f"bad hex {what} {token!r}", line_no, line) from None
    if value < 0:
        raise MalformedRecordError(f"negative {what}", line_no, line)
    return value


def is_blank(line: str) -> bool:
    s = line.strip()
    return not s or s.startswith('#')


def parse_record(line: str, line_no: int = 0) -> TraceRecord:
    """Parse one trace line, raising MalformedRecordError on any bad shape."""
    tokens = line.split()
    if not tokens:
        raise MalformedRecordError("empty record", line_no, line)
    if tokens[0] not in ('0', '1'):
        raise MalformedRecordError(f"unknown operation {tokens[0]!r}", line_no, line)
    op = int(tokens[0])
    if op == READ:
        if len(tokens) != 2:
            raise MalformedRecordError("read takes exactly one address", line_no, line)
        return TraceRecord(READ, _hex(tokens[1], 'address', line_no, line))
    if len(tokens) != 3:
        raise MalformedRecordError("write takes an address and a data word", line_no, line)
    data = _hex(tokens[2], 'data', line_no, line)
    if data > 0xFFFFFFFF:
        raise MalformedRecordError("data word wider than 32 bits", line_no, line)
    return TraceRecord(WRITE, _hex(tokens[1], 'address', line_no, line), data)


def numbered_lines(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """(line_no, line) pairs for the lines that may carry a record."""
    for line_no, line in enumerate(lines, start=1):
        line = line.rstrip('\r\n')
        if not is_blank(line):
            yield line_no, line
