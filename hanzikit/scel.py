"""Reader for .scel word lists and a command that prints them as text."""

from __future__ import annotations

import getopt
import itertools
import struct
import sys
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Sequence

HEADER = bytes([0x40, 0x15, 0x00, 0x00, 0x44, 0x43, 0x53, 0x01, 0x01, 0x00, 0x00, 0x00])
PINYIN_MARKER = bytes([0x9D, 0x01, 0x00, 0x00])
DELETE_TABLE_MARKER = bytes([0x4C, 0x00, 0x54, 0x00, 0x42, 0x00, 0x4C, 0x00])

DESC_START = 0x130
DESC_LENGTH = 0x338 - 0x130
LDESC_LENGTH = 0x540 - 0x338
NEXT_LENGTH = 0x1540 - 0x540
MAX_SYMBOL_COUNT = 128
LAST_PINYIN = "zuo"


class ScelError(Exception):
    """The file is not a valid .scel file.

    ``dictionary`` holds whatever was read before the failure, if anything.
    """

    def __init__(self, message: str, dictionary: Optional["ScelDictionary"] = None):
        super().__init__(message)
        self.dictionary = dictionary


@dataclass(frozen=True)
class ScelEntry:
    text: str
    pinyin: tuple[str, ...]


@dataclass
class ScelDictionary:
    description: Optional[str] = None
    long_description: Optional[str] = None
    examples: Optional[str] = None
    pinyins: list[str] = field(default_factory=list)
    entries: list[ScelEntry] = field(default_factory=list)
    has_deleted_table: bool = False
    deleted: list[str] = field(default_factory=list)
    deleted_error: Optional[str] = None
    error_offset: Optional[int] = None


def decode_utf16(data: bytes) -> str:
    """Decode little-endian UTF-16, stopping at the first zero code unit."""
    if len(data) % 2:
        raise ScelError("Invalid size of string")
    units = list(itertools.takewhile(bool, (u for (u,) in struct.iter_unpack("<H", data))))
    raw = struct.pack(f"<{len(units)}H", *units)
    try:
        return raw.decode("utf-16-le")
    except UnicodeDecodeError as exc:
        raise ScelError("Invalid UTF-16 string") from exc


class _EndOfData(Exception):
    """Input ended at a point where stopping quietly is allowed."""


class _Reader:
    def __init__(self, stream: BinaryIO, dictionary: ScelDictionary) -> None:
        self.stream = stream
        self.dictionary = dictionary
        self.position = 0

    def fail(self, message: str) -> ScelError:
        return ScelError(message, self.dictionary)

    def read(self, size: int, error: Optional[str]) -> bytes:
        data = self.stream.read(size) if size else b""
        self.position += len(data)
        if len(data) != size:
            if error is None:
                raise _EndOfData
            raise self.fail(error)
        return data

    def u16(self, error: Optional[str]) -> int:
        return struct.unpack("<H", self.read(2, error))[0]

    def text(self, data: bytes) -> str:
        try:
            return decode_utf16(data)
        except ScelError as exc:
            raise self.fail(str(exc)) from exc

    def skip_to(self, offset: int) -> None:
        if self.stream.seekable():
            self.stream.seek(offset)
        else:
            self.stream.read(max(0, offset - self.position))
        self.position = offset


def read_scel(stream: BinaryIO) -> ScelDictionary:
    """Read a .scel file from a binary stream."""
    dictionary = ScelDictionary()
    reader = _Reader(stream, dictionary)
    try:
        _read_body(reader, dictionary)
    except _EndOfData:
        pass
    return dictionary


def _read_body(reader: _Reader, dictionary: ScelDictionary) -> None:
    if reader.read(len(HEADER), "Failed to read header") != HEADER:
        raise reader.fail("format error.")
    reader.skip_to(DESC_START)

    dictionary.description = reader.text(
        reader.read(DESC_LENGTH, "Failed to read description"))
    dictionary.long_description = reader.text(
        reader.read(LDESC_LENGTH, "Failed to read long description"))
    dictionary.examples = reader.text(
        reader.read(NEXT_LENGTH, "Failed to read next description"))

    if reader.read(len(PINYIN_MARKER), "Failed to read py") != PINYIN_MARKER:
        raise reader.fail("Pinyin table marker mismatch")

    while True:
        reader.u16("failed to read index")
        count = reader.u16("failed to read pinyin count")
        py = reader.text(reader.read(count, "Failed to read py"))
        if py in ("lue", "nue"):
            py = py[0] + "ve"
        dictionary.pinyins.append(py)
        if py == LAST_PINYIN:
            break

    if not _read_words(reader, dictionary):
        return

    marker = reader.stream.read(len(DELETE_TABLE_MARKER))
    reader.position += len(marker)
    if marker != DELETE_TABLE_MARKER:
        return
    dictionary.has_deleted_table = True
    _read_deleted(reader, dictionary)


def _read_words(reader: _Reader, dictionary: ScelDictionary) -> bool:
    """Read word groups; return True if a deletion table may follow."""
    while True:
        symcount = reader.u16(None)
        if symcount > MAX_SYMBOL_COUNT:
            dictionary.error_offset = reader.position
            return False
        count = reader.u16("Failed to read count")
        if symcount == 0x44 and count == 0x45:
            return True

        indices = []
        for _ in range(count // 2):
            index = reader.u16("Failed to read pyindex")
            if index >= len(dictionary.pinyins):
                raise reader.fail("Invalid pinyin index")
            indices.append(index)
        pinyin = tuple(dictionary.pinyins[i] for i in indices)

        for _ in range(symcount):
            length = reader.u16("Failed to read count")
            text = reader.text(reader.read(length, "Failed to read text"))
            dictionary.entries.append(ScelEntry(text, pinyin))
            extra = reader.u16("failed to read count")
            reader.read(extra, "failed to read buf")


def _read_deleted(reader: _Reader, dictionary: ScelDictionary) -> None:
    total = reader.u16(None)
    for _ in range(total):
        length = (reader.u16(None) * 2) & 0xFFFF
        try:
            dictionary.deleted.append(reader.text(reader.read(length, "Failed to read text")))
        except ScelError as exc:
            dictionary.deleted_error = str(exc)
            return


def format_entry(entry: ScelEntry) -> str:
    """Format an entry as a tab separated line (without newline)."""
    return f"{entry.text}\t{chr(39).join(entry.pinyin)}\t0"


_USAGE = """\
scel2org - Convert a .scel file to a plain text word list (SEE NOTES BELOW)

  usage: scel2org [OPTION] [scel file]

  -o <file>  write the output to file instead of stdout.
  -d         print the deleted words table to stderr.
  -h         display this help.

NOTES:
   Always check the produced output for errors.
"""


def _usage() -> int:
    print(_USAGE)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        opts, rest = getopt.gnu_getopt(args, "o:hd")
    except getopt.GetoptError as exc:
        print(exc, file=sys.stderr)
        return _usage()

    output_file = None
    print_deleted = False
    for opt, value in opts:
        if opt == "-o":
            output_file = value
        elif opt == "-d":
            print_deleted = True
        else:
            return _usage()

    with ExitStack() as stack:
        if output_file and output_file != "-":
            out = stack.enter_context(open(output_file, "w", encoding="utf-8", newline="\n"))
        else:
            out = sys.stdout

        if not rest:
            return _usage()

        try:
            source = stack.enter_context(open(rest[0], "rb"))
        except OSError:
            print(f"Cannot open file: {rest[0]}", file=sys.stderr)
            return 1

        error: Optional[ScelError] = None
        try:
            dictionary = read_scel(source)
        except ScelError as exc:
            error = exc
            dictionary = exc.dictionary or ScelDictionary()

        for label, value in (("DESC", dictionary.description),
                             ("LDESC", dictionary.long_description),
                             ("NEXT", dictionary.examples)):
            if value is not None:
                print(f"{label}:{value}", file=sys.stderr)

        for entry in dictionary.entries:
            out.write(format_entry(entry) + "\n")
        out.flush()

        if error is not None:
            print(error, file=sys.stderr)
            return 1
        if dictionary.error_offset is not None:
            print(f"Error at offset: {dictionary.error_offset}", file=sys.stderr)
            return 0

        if print_deleted and dictionary.has_deleted_table:
            for word in dictionary.deleted:
                print(f"DEL:{word}", file=sys.stderr)
            if dictionary.deleted_error is not None:
                print(dictionary.deleted_error, file=sys.stderr)
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())