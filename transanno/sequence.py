"""Indexed FASTA access and nucleotide helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union


class LiftOverError(Exception):
    """Base error for lift-over operations."""


class ChromosomeNotFoundError(LiftOverError):
    """A chromosome named in a chain is absent from a sequence file."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Chromosome is not found: {name}")
        self.name = name


class ChromosomeLengthMismatchError(LiftOverError):
    """A chromosome length in a chain differs from the sequence file."""

    def __init__(self, name: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Chromosome length of {name} is not match: chain {expected}, sequence {actual}"
        )
        self.name = name
        self.expected = expected
        self.actual = actual


@dataclass(frozen=True)
class _FaiEntry:
    length: int
    offset: int
    line_bases: int
    line_width: int

    def file_offset(self, position: int) -> int:
        return (
            self.offset
            + (position // self.line_bases) * self.line_width
            + position % self.line_bases
        )


def _read_fai(path: Path) -> dict[str, _FaiEntry]:
    entries: dict[str, _FaiEntry] = {}
    with open(path, encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, 1):
            line = line.rstrip("\r\n")
            if not line:
                continue
            fields = line.split("\t")
            if len(fields) < 5:
                raise LiftOverError(f"Invalid FASTA index at line {lineno}: {path}")
            try:
                length, offset, line_bases, line_width = (int(x) for x in fields[1:5])
            except ValueError as exc:
                raise LiftOverError(f"Invalid FASTA index at line {lineno}: {path}") from exc
            if line_bases <= 0 and length > 0:
                raise LiftOverError(f"Invalid FASTA index at line {lineno}: {path}")
            entries[fields[0]] = _FaiEntry(length, offset, max(line_bases, 1), line_width)
    return entries


class IndexedFasta:
    """Random access to a FASTA file through its ``.fai`` index."""

    def __init__(self, path: Union[str, os.PathLike]) -> None:
        self.path = Path(path)
        self._index = _read_fai(Path(f"{os.fspath(path)}.fai"))
        self._handle = open(self.path, "rb")

    def get_sequence(self, name: str, start: int, end: int) -> bytes:
        """Return the bases of *name* in the zero-based half-open range [start, end)."""
        entry = self._index.get(name)
        if entry is None:
            raise ChromosomeNotFoundError(name)
        if start < 0 or start > end or end > entry.length:
            raise LiftOverError(
                f"Sequence range out of bounds: {name}:{start}-{end} (length {entry.length})"
            )
        if start == end:
            return b""
        first = entry.file_offset(start)
        last = entry.file_offset(end - 1) + 1
        self._handle.seek(first)
        raw = self._handle.read(last - first)
        return raw.replace(b"\n", b"").replace(b"\r", b"")

    def contig_list(self) -> list[tuple[str, int]]:
        """Return (name, length) pairs in index order."""
        return [(name, entry.length) for name, entry in self._index.items()]

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "IndexedFasta":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


_COMPLEMENT = bytes.maketrans(b"ACGTacgt", b"TGCAtgca")
_UPPER_ACGT = bytes.maketrans(b"acgt", b"ACGT")


def reverse_acid(acid: int) -> int:
    """Return the complementary base of a single base byte, keeping its case."""
    return bytes([acid]).translate(_COMPLEMENT)[0]


def reverse_complement(seq: bytes) -> bytes:
    """Return the reverse complement of *seq*."""
    return bytes(seq).translate(_COMPLEMENT)[::-1]


def same_acid(acid1: int, acid2: int) -> bool:
    """Compare two base bytes, ignoring case for A, C, G and T only."""
    return bytes([acid1]).translate(_UPPER_ACGT) == bytes([acid2]).translate(_UPPER_ACGT)