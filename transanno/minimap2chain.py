"""Conversion of minimap2 PAF alignments (with ``cg:Z:`` tags) to chain format."""

from __future__ import annotations

import os
import re
from typing import Iterable, Iterator, Union

from .fileio import create_output, open_input

_CIGAR_OP = re.compile(r"(\d+)([IMD])")
_CHAIN_SCORE = 4900


class PafFormatError(ValueError):
    """A PAF record cannot be converted to a chain."""


def _parse_int(text: str, column: int, lineno: int) -> int:
    try:
        return int(text)
    except ValueError as exc:
        raise PafFormatError(f"Cannot parse column {column}: line {lineno}") from exc


def _parse_cigar(cigar: str, lineno: int) -> list[tuple[int, str]]:
    operations: list[tuple[int, str]] = []
    position = 0
    while position < len(cigar):
        match = _CIGAR_OP.search(cigar, position)
        if match is None:
            raise PafFormatError(f"Cannot parse cigar: line {lineno}")
        if match.start() != position:
            raise PafFormatError(f"Cannot parse: line {lineno}")
        operations.append((int(match.group(1)), match.group(2)))
        position = match.end()
    return operations


def _header(elements: list[str], lineno: int) -> str:
    strand = elements[4]
    if strand == "+":
        new_start, new_end = elements[7], elements[8]
    elif strand == "-":
        seqlen = _parse_int(elements[6], 7, lineno)
        end = _parse_int(elements[8], 9, lineno)
        start = _parse_int(elements[7], 8, lineno)
        if end > seqlen or start > seqlen:
            raise PafFormatError(f"Target position exceeds target length: line {lineno}")
        new_start, new_end = str(seqlen - end), str(seqlen - start)
    else:
        raise PafFormatError(f"invalid strand: line {lineno}")
    columns = [
        "chain",
        str(_CHAIN_SCORE),
        elements[0],
        elements[1],
        "+",
        elements[2],
        elements[3],
        elements[5],
        elements[6],
        strand,
        new_start,
        new_end,
        str(lineno),
    ]
    return "\t".join(columns)


def _total(group: Iterable[tuple[int, str]], kind: str) -> int:
    return sum(length for length, op in group if op == kind)


def paf_to_chain_lines(lines: Iterable[Union[str, bytes]]) -> Iterator[str]:
    """Yield chain file lines (without newlines) for each PAF record in *lines*."""
    for lineno, raw in enumerate(lines, 1):
        line = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        elements = line.strip().split("\t")
        if len(elements) < 9:
            raise PafFormatError(f"invalid format: line {lineno}")

        yield _header(elements, lineno)

        tag = next((x for x in elements if x.startswith("cg:Z:")), None)
        if tag is None:
            raise PafFormatError(f"Cannot find cigar: line {lineno}")
        operations = _parse_cigar(tag[5:], lineno)
        if elements[4] == "-":
            operations.reverse()

        groups: list[list[tuple[int, str]]] = []
        current: list[tuple[int, str]] = []
        for operation in operations:
            if operation[1] == "M" and current:
                groups.append(current)
                current = []
            current.append(operation)

        for group in groups:
            yield f"{_total(group, 'M')}\t{_total(group, 'I')}\t{_total(group, 'D')}"
        yield str(_total(current, "M"))
        yield ""


def minimap2_to_chain(
    paf_path: Union[str, os.PathLike], chain_path: Union[str, os.PathLike]
) -> None:
    """Read the PAF file at *paf_path* and write the chain file at *chain_path*."""
    with open_input(paf_path) as paf, create_output(chain_path) as chain:
        for line in paf_to_chain_lines(paf):
            chain.write(f"{line}\n".encode("utf-8"))